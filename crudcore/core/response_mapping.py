"""Response Mapping — persistence records → wire DTOs with declared nullability.

Invariants:
    - No datetime or date object ever leaves this module (ISO-8601 strings only)
    - Datetimes render as YYYY-MM-DDTHH:MM:SS.mmmZ (UTC, millisecond precision)
    - Naive datetimes are read as UTC
    - NULLABLE fields keep their key with None; OPTIONAL fields drop the key on None
    - MASKED fields always carry the sentinel, whatever the record holds
    - Pure: same record + same rules → same DTO

Design Decisions:
    - Rules declared once per DTO as module constants next to the providers
    - Records read by attribute (ORM objects) or by key (mappings)
    - A rule naming an attribute the object lacks raises MappingError; a
      missing mapping key reads as None
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence
from uuid import UUID

from crudcore.core.errors import MappingError

MASK_SENTINEL = "********"


class FieldKind(str, Enum):
    REQUIRED = "required"
    NULLABLE = "nullable"
    OPTIONAL = "optional"
    MASKED = "masked"


@dataclass(frozen=True)
class FieldRule:
    """Output field `name`, read from `source` (defaults to name)."""
    name: str
    kind: FieldKind = FieldKind.REQUIRED
    source: str | None = None
    date_only: bool = False


def to_iso(value: datetime) -> str:
    """Render a datetime as UTC ISO-8601 with milliseconds and a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def to_iso_date(value: date) -> str:
    if isinstance(value, datetime):
        return to_iso(value)[:10]
    return value.isoformat()


def _convert(value: Any, date_only: bool) -> Any:
    if isinstance(value, datetime):
        return to_iso_date(value) if date_only else to_iso(value)
    if isinstance(value, date):
        return to_iso_date(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return value


def _read(record: Any, rule: FieldRule) -> Any:
    source = rule.source or rule.name
    if isinstance(record, Mapping):
        return record.get(source)
    try:
        return getattr(record, source)
    except AttributeError:
        raise MappingError(rule.name, f"reads unknown attribute '{source}'") from None


class ResponseMapper:
    """Applies a fixed list of FieldRules to records."""

    def __init__(self, rules: Sequence[FieldRule], mask: str = MASK_SENTINEL):
        self.rules = tuple(rules)
        self.mask = mask

    def map(self, record: Any) -> dict:
        dto: dict[str, Any] = {}
        for rule in self.rules:
            if rule.kind is FieldKind.MASKED:
                dto[rule.name] = self.mask
                continue
            value = _read(record, rule)
            if value is None:
                if rule.kind is FieldKind.REQUIRED:
                    raise MappingError(rule.name)
                if rule.kind is FieldKind.NULLABLE:
                    dto[rule.name] = None
                continue
            dto[rule.name] = _convert(value, rule.date_only)
        return dto

    def map_many(self, records: Iterable[Any]) -> list[dict]:
        return [self.map(r) for r in records]
