"""Search Execution — runs a QuerySpec against a repository and returns a PageResult.

Invariants:
    - Exactly two reads per search: count(where) and find_many(where, order, skip, take)
    - Both reads are issued concurrently and joined before the envelope is built
    - Persistence errors propagate unchanged (no retry, no recovery)
"""

import asyncio
import logging
from typing import Any, Mapping, Sequence

from pydantic import BaseModel

from crudcore.core.pagination import PageResult, PaginatedQueryBuilder, Predicate
from crudcore.core.repository_protocols import ResourceRepository
from crudcore.core.response_mapping import ResponseMapper

logger = logging.getLogger(__name__)


async def run_search(
    repository: ResourceRepository,
    builder: PaginatedQueryBuilder,
    request: BaseModel | Mapping[str, Any],
    mapper: ResponseMapper,
    scope: Sequence[Predicate] = (),
) -> PageResult[dict]:
    """Build, execute and envelope one paginated search."""
    query = builder.build(request, scope)
    records, rows = await asyncio.gather(
        repository.count(query.where),
        repository.find_many(
            query.where,
            order_by=query.order_by,
            order=query.order,
            skip=query.skip,
            take=query.take,
        ),
    )
    logger.debug(
        f"Search matched {records} rows (page {query.page}, limit {query.limit})",
        extra={"records": records, "operation": "search"},
    )
    return builder.envelope(query, records, mapper.map_many(rows))
