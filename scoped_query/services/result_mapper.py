from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Iterable

from scoped_query.core.errors import MappingError
from scoped_query.services.filter_spec import ValueType

_MISSING = object()


def format_timestamp(value: datetime) -> str:
    # Storage may hand back naive values (SQLite); they are UTC by convention.
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S") + f".{value.microsecond // 1000:03d}Z"


def _convert(value: Any, value_type: ValueType) -> Any:
    if value_type is ValueType.DATETIME and isinstance(value, datetime):
        return format_timestamp(value)
    if value_type is ValueType.DATE and isinstance(value, date):
        return (value.date() if isinstance(value, datetime) else value).isoformat()
    if value_type is ValueType.UUID:
        if isinstance(value, uuid.UUID):
            return str(value)
        if isinstance(value, str):
            try:
                return str(uuid.UUID(value))
            except ValueError:
                raise TypeError("malformed uuid")
    if value_type is ValueType.BOOLEAN and isinstance(value, bool):
        return value
    if value_type is ValueType.INTEGER and isinstance(value, int) and not isinstance(value, bool):
        return value
    if value_type is ValueType.NUMBER and isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return float(value)
    if value_type is ValueType.STRING and isinstance(value, str):
        return value
    raise TypeError(f"expected {value_type.value}")


@dataclass(frozen=True)
class FieldRule:
    name: str
    value_type: ValueType
    optional: bool = False
    source: str | None = None


def required(name: str, value_type: ValueType, source: str | None = None) -> FieldRule:
    return FieldRule(name, value_type, False, source)


def optional(name: str, value_type: ValueType, source: str | None = None) -> FieldRule:
    return FieldRule(name, value_type, True, source)


class ResultMapper:
    """Projects storage rows onto a public shape.

    Only the declared fields are emitted, so soft-delete markers and internal
    keys never leak. Optional fields holding ``None`` are omitted from the
    output instead of being sent as ``null``.
    """

    def __init__(self, resource: str, rules: Iterable[FieldRule]):
        self.resource = resource
        self.rules = tuple(rules)

    def map(self, row: Any) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for rule in self.rules:
            attr = rule.source or rule.name
            value = getattr(row, attr, _MISSING)
            if value is _MISSING:
                raise MappingError(f'{self.resource}: в строке нет поля "{attr}"')
            if value is None:
                if rule.optional:
                    continue
                raise MappingError(f'{self.resource}: обязательное поле "{attr}" пусто')
            try:
                out[rule.name] = _convert(value, rule.value_type)
            except TypeError as exc:
                raise MappingError(f'{self.resource}: поле "{attr}" имеет неверный тип ({exc})')
        return out

    def map_many(self, rows: Iterable[Any]) -> list[dict[str, Any]]:
        return [self.map(row) for row in rows]
