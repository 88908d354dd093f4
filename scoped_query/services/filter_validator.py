import uuid
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from scoped_query.core.errors import ValidationError
from scoped_query.services.filter_spec import FilterFieldSpec, FilterKind, FilterSpecification, SortSpec, ValueType
from scoped_query.services.pagination import skip_take
from scoped_query.services.query_composer import Predicate, ValidatedQuery

RESERVED_KEYS = {"page", "limit", "sort", "order", "include_archived"}

_KIND_OPERATORS = {
    FilterKind.EXACT: "eq",
    FilterKind.FOREIGN_KEY: "eq",
    FilterKind.ENUM_SET: "in",
    FilterKind.RANGE_LOW: "gte",
    FilterKind.RANGE_HIGH: "lte",
    FilterKind.SUBSTRING: "contains",
}


def _bad_filter_value(field_name: str, kind: str) -> ValidationError:
    return ValidationError(f'Некорректное значение фильтра для поля "{field_name}" ({kind})')


def _coerce_bool_filter_value(field_name: str, value):
    if isinstance(value, bool):
        return value
    text = str(value or "").strip().lower()
    if text in {"1", "true", "yes", "y", "да"}:
        return True
    if text in {"0", "false", "no", "n", "нет"}:
        return False
    raise _bad_filter_value(field_name, "boolean")


def _coerce_number_filter_value(field_name: str, value, python_type):
    if isinstance(value, bool):
        raise _bad_filter_value(field_name, "number")
    if python_type is int and isinstance(value, int):
        return value
    if python_type is Decimal and isinstance(value, (int, Decimal)):
        parsed = Decimal(value)
    elif python_type is Decimal and isinstance(value, float):
        parsed = Decimal(str(value))
    else:
        text = str(value).strip()
        if not text:
            raise _bad_filter_value(field_name, "number")
        normalized = text.replace(",", ".")
        try:
            if python_type is int:
                return int(normalized)
            parsed = Decimal(normalized)
        except (ValueError, TypeError, InvalidOperation):
            raise _bad_filter_value(field_name, "number")
    # NaN/Infinity are not orderable against range bounds.
    if not parsed.is_finite():
        raise _bad_filter_value(field_name, "number")
    return parsed


def _coerce_date_filter_value(field_name: str, value):
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    text = str(value or "").strip()
    if not text:
        raise _bad_filter_value(field_name, "date")
    try:
        # Accept either YYYY-MM-DD or full ISO datetime and take its date part.
        if "T" in text or " " in text:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return date.fromisoformat(text)
    except ValueError:
        raise _bad_filter_value(field_name, "date")


def _coerce_datetime_filter_value(field_name: str, value):
    try:
        if isinstance(value, datetime):
            parsed = value
        else:
            text = str(value or "").strip()
            if not text:
                raise _bad_filter_value(field_name, "datetime")
            if "T" not in text and " " not in text and len(text) == 10:
                # Date-only filter value for timestamp columns -> start of the day.
                parsed = datetime.combine(date.fromisoformat(text), datetime.min.time())
            else:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        # Offsets at the edges of the calendar overflow on conversion.
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        raise _bad_filter_value(field_name, "datetime")


def _coerce_uuid_filter_value(field_name: str, value):
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value or "").strip())
    except ValueError:
        raise ValidationError(f'Некорректный UUID в фильтре поля "{field_name}"')


def _coerce_string_filter_value(field_name: str, value):
    if isinstance(value, (dict, list, tuple, set)):
        raise _bad_filter_value(field_name, "string")
    return str(value)


def coerce_value(field_name: str, value_type: ValueType, value: Any) -> Any:
    if value_type is ValueType.UUID:
        return _coerce_uuid_filter_value(field_name, value)
    if value_type is ValueType.BOOLEAN:
        return _coerce_bool_filter_value(field_name, value)
    if value_type is ValueType.INTEGER:
        return _coerce_number_filter_value(field_name, value, int)
    if value_type is ValueType.NUMBER:
        return _coerce_number_filter_value(field_name, value, Decimal)
    if value_type is ValueType.DATE:
        return _coerce_date_filter_value(field_name, value)
    if value_type is ValueType.DATETIME:
        return _coerce_datetime_filter_value(field_name, value)
    return _coerce_string_filter_value(field_name, value)


def _check_allowed(spec_field: FilterFieldSpec, value: Any) -> None:
    if spec_field.allowed_values is None:
        return
    if value not in spec_field.allowed_values:
        allowed = ", ".join(sorted(str(v) for v in spec_field.allowed_values))
        raise ValidationError(f'Недопустимое значение фильтра "{spec_field.name}": допустимо {allowed}')


def _field_predicate(spec_field: FilterFieldSpec, raw_value: Any) -> Predicate:
    operator = _KIND_OPERATORS[spec_field.kind]
    if spec_field.kind is FilterKind.ENUM_SET:
        items = raw_value if isinstance(raw_value, (list, tuple)) else [raw_value]
        if not items:
            raise _bad_filter_value(spec_field.name, "enum")
        values = []
        for item in items:
            value = coerce_value(spec_field.name, spec_field.value_type, item)
            _check_allowed(spec_field, value)
            if value not in values:
                values.append(value)
        return Predicate(spec_field.target, operator, tuple(values))
    if spec_field.kind is FilterKind.SUBSTRING:
        if not isinstance(raw_value, str) or not raw_value:
            raise _bad_filter_value(spec_field.name, "substring")
        return Predicate(spec_field.target, operator, raw_value)
    value = coerce_value(spec_field.name, spec_field.value_type, raw_value)
    if spec_field.kind is FilterKind.EXACT:
        _check_allowed(spec_field, value)
    return Predicate(spec_field.target, operator, value)


def _check_ranges(predicates: list[Predicate]) -> None:
    lows: dict[str, Any] = {}
    highs: dict[str, Any] = {}
    for p in predicates:
        if p.operator == "gte":
            lows[p.field] = p.value
        elif p.operator == "lte":
            highs[p.field] = p.value
    for column, low in lows.items():
        high = highs.get(column)
        if high is not None and low > high:
            raise ValidationError(f'Нижняя граница фильтра "{column}" больше верхней')


def _parse_positive_int(name: str, raw: Any, default: int) -> int:
    if raw is None:
        return default
    if isinstance(raw, bool):
        raise ValidationError(f'Параметр "{name}" должен быть целым числом')
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    try:
        return int(str(raw).strip())
    except ValueError:
        raise ValidationError(f'Параметр "{name}" должен быть целым числом')


def _resolve_sort(raw: Mapping[str, Any], spec: FilterSpecification) -> SortSpec:
    sort_raw = str(raw.get("sort") or "").strip()
    order_raw = raw.get("order")
    signed_direction = None
    if sort_raw[:1] in {"-", "+"}:
        signed_direction = "desc" if sort_raw[0] == "-" else "asc"
        sort_raw = sort_raw[1:].strip()
    if sort_raw and sort_raw not in spec.sortable_fields:
        return spec.default_sort
    field_name = sort_raw or spec.default_sort.field
    if order_raw is None:
        if signed_direction:
            direction = signed_direction
        else:
            direction = "asc" if sort_raw else spec.default_sort.direction
    else:
        direction = str(order_raw).strip().lower()
        if direction not in {"asc", "desc"}:
            direction = "asc"
    return SortSpec(field_name, direction)


def validate(raw: Mapping[str, Any] | None, spec: FilterSpecification) -> ValidatedQuery:
    raw = raw or {}
    if not isinstance(raw, Mapping):
        raise ValidationError("Тело запроса должно быть объектом")

    page = _parse_positive_int("page", raw.get("page"), 1)
    if page < 1:
        raise ValidationError('Параметр "page" должен быть не меньше 1')
    limit = _parse_positive_int("limit", raw.get("limit"), spec.default_limit)
    if limit < 1 or limit > spec.max_limit:
        raise ValidationError(f'Параметр "limit" должен лежать в диапазоне 1..{spec.max_limit}')

    predicates: list[Predicate] = []
    for key, raw_value in raw.items():
        if key in RESERVED_KEYS or raw_value is None:
            continue
        spec_field = spec.field_spec(key)
        if spec_field is None:
            continue
        predicates.append(_field_predicate(spec_field, raw_value))
    _check_ranges(predicates)

    include_archived = raw.get("include_archived")
    if include_archived is None:
        include_archived = False
    else:
        include_archived = _coerce_bool_filter_value("include_archived", include_archived)

    skip, take = skip_take(page, limit)
    return ValidatedQuery(
        predicates=tuple(predicates),
        sort=_resolve_sort(raw, spec),
        page=page,
        limit=limit,
        skip=skip,
        take=take,
        include_archived=include_archived,
    )
