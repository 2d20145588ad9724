"""Paginated Query Builder — request fields → predicates, sort, skip/take, envelope.

Invariants:
    - Pages are 1-based: offset = (page - 1) * limit
    - A filter whose request value is None never produces a predicate
    - Sort columns outside SearchSpec.sortable never reach the query (default substituted)
    - pages == ceil(records / limit); records == 0 gives pages == 0
    - page < 1 or limit < 1 raises ValidationError before any query is built

Design Decisions:
    - Pure: no IO, no async. services/search.py executes the QuerySpec
    - Predicates are plain data; the repository translates them to SQL
    - limit above max_limit is clamped, not rejected
"""

import math
from dataclasses import dataclass, field
from typing import Any, Generic, Mapping, Sequence, TypeVar

from pydantic import BaseModel

from crudcore.core.domain_types import FilterOp, SortOrder
from crudcore.core.errors import ValidationError

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
DEFAULT_MAX_LIMIT = 100


@dataclass(frozen=True)
class FilterRule:
    """Maps one request field to one column predicate."""
    column: str
    op: FilterOp = FilterOp.EQ


@dataclass(frozen=True)
class Predicate:
    column: str
    op: FilterOp
    value: Any = None


@dataclass(frozen=True)
class SearchSpec:
    """Per-resource declaration of filterable fields and sortable columns."""
    filters: Mapping[str, FilterRule]
    sortable: Sequence[str]
    default_sort: str = "created_at"
    default_order: SortOrder = SortOrder.DESC
    default_limit: int | None = None
    max_limit: int | None = None


@dataclass(frozen=True)
class QuerySpec:
    where: tuple[Predicate, ...]
    order_by: str
    order: SortOrder
    skip: int
    take: int
    page: int
    limit: int


@dataclass
class Pagination:
    current: int
    limit: int
    records: int
    pages: int


@dataclass
class PageResult(Generic[T]):
    pagination: Pagination
    data: list[T] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "pagination": {
                "current": self.pagination.current,
                "limit": self.pagination.limit,
                "records": self.pagination.records,
                "pages": self.pagination.pages,
            },
            "data": list(self.data),
        }


def normalize_page(
    page: int | None,
    limit: int | None,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = DEFAULT_MAX_LIMIT,
) -> tuple[int, int]:
    """Apply defaults, reject non-positive values, clamp limit to max_limit."""
    page = DEFAULT_PAGE if page is None else page
    limit = default_limit if limit is None else limit
    if page < 1:
        raise ValidationError(f"page must be >= 1, got {page}", "page")
    if limit < 1:
        raise ValidationError(f"limit must be >= 1, got {limit}", "limit")
    return page, min(limit, max_limit)


def compute_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def count_pages(records: int, limit: int) -> int:
    return math.ceil(records / limit) if limit > 0 else 0


def _parse_order(value: str | None) -> SortOrder | None:
    if not isinstance(value, str):
        return None
    try:
        return SortOrder(value.lower())
    except ValueError:
        return None


def resolve_sort(
    search_spec: SearchSpec,
    sort: str | None = None,
    order: str | None = None,
    order_by: str | None = None,
) -> tuple[str, SortOrder]:
    """Resolve (column, direction) from sort+order or a combined "name_DESC" string.

    Combined strings split on the last underscore, so "created_at_asc" reads as
    column "created_at", direction "asc". A combined string whose suffix is not a
    direction is taken as a bare column name.
    """
    if order_by:
        column, _, suffix = order_by.rpartition("_")
        direction = _parse_order(suffix)
        if not column or direction is None:
            column, direction = order_by, search_spec.default_order
        if column not in search_spec.sortable:
            return search_spec.default_sort, search_spec.default_order
        return column, direction

    if sort is None or sort not in search_spec.sortable:
        return search_spec.default_sort, search_spec.default_order
    return sort, _parse_order(order) or search_spec.default_order


def build_predicates(
    request: Mapping[str, Any], search_spec: SearchSpec,
) -> tuple[Predicate, ...]:
    """One predicate per declared filter whose value is present and not None."""
    predicates = []
    for name, rule in search_spec.filters.items():
        value = request.get(name)
        if value is None:
            continue
        predicates.append(Predicate(rule.column, rule.op, value))
    return tuple(predicates)


def _as_mapping(request: BaseModel | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(request, BaseModel):
        return request.model_dump()
    return request


class PaginatedQueryBuilder:
    """Builds a QuerySpec from a page request and wraps rows in a PageResult."""

    def __init__(
        self,
        search_spec: SearchSpec,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = DEFAULT_MAX_LIMIT,
    ):
        self.search_spec = search_spec
        self.default_limit = search_spec.default_limit or default_limit
        self.max_limit = search_spec.max_limit or max_limit

    def build(
        self,
        request: BaseModel | Mapping[str, Any],
        scope: Sequence[Predicate] = (),
    ) -> QuerySpec:
        """Translate a request into a QuerySpec; scope predicates are always ANDed in."""
        values = _as_mapping(request)
        page, limit = normalize_page(
            values.get("page"), values.get("limit"),
            self.default_limit, self.max_limit,
        )
        column, direction = resolve_sort(
            self.search_spec,
            sort=values.get("sort"),
            order=values.get("order"),
            order_by=values.get("order_by"),
        )
        return QuerySpec(
            where=tuple(scope) + build_predicates(values, self.search_spec),
            order_by=column,
            order=direction,
            skip=compute_offset(page, limit),
            take=limit,
            page=page,
            limit=limit,
        )

    def envelope(
        self, query: QuerySpec, records: int, rows: Sequence[T],
    ) -> PageResult[T]:
        return PageResult(
            pagination=Pagination(
                current=query.page,
                limit=query.limit,
                records=records,
                pages=count_pages(records, query.limit),
            ),
            data=list(rows),
        )
