"""Tenant/role scope derivation.

Scope comes only from the authenticated principal. Nothing in the request body
is consulted here, so a crafted filter value cannot widen what a caller sees.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Iterable

from scoped_query.core.errors import AuthenticationError, AuthorizationError
from scoped_query.services.filter_spec import FilterSpecification, ScopeRule, ScopeSource
from scoped_query.services.query_composer import Predicate

logger = logging.getLogger(__name__)

PLATFORM_SUPER_ADMIN_ROLES = frozenset({"SYSTEM_ADMIN"})


@dataclass(frozen=True)
class ScopeContext:
    principal_id: uuid.UUID
    role: str
    organization_ids: frozenset[uuid.UUID] = frozenset()
    department_ids: frozenset[uuid.UUID] = frozenset()
    is_platform_super_admin: bool = False


def _uuid_or_401(raw: Any) -> uuid.UUID:
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw or "").strip())
    except (TypeError, ValueError):
        raise AuthenticationError("Некорректный токен")


def _uuid_set_or_401(principal: dict, plural: str, singular: str) -> frozenset[uuid.UUID]:
    raw = principal.get(plural)
    if raw is None:
        raw = [principal[singular]] if principal.get(singular) else []
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Iterable):
        raise AuthenticationError("Некорректный токен")
    return frozenset(_uuid_or_401(item) for item in raw)


def resolve(principal: dict | None) -> ScopeContext:
    if not principal or not isinstance(principal, dict):
        raise AuthenticationError("Отсутствует токен авторизации")
    sub = str(principal.get("sub") or "").strip()
    if not sub:
        raise AuthenticationError("Некорректный токен")
    role = str(principal.get("role") or "").strip().upper()
    if not role:
        raise AuthenticationError("Некорректный токен")
    return ScopeContext(
        principal_id=_uuid_or_401(sub),
        role=role,
        organization_ids=_uuid_set_or_401(principal, "organization_ids", "organization_id"),
        department_ids=_uuid_set_or_401(principal, "department_ids", "department_id"),
        is_platform_super_admin=role in PLATFORM_SUPER_ADMIN_ROLES,
    )


def scope_predicates(context: ScopeContext, spec: FilterSpecification) -> list[Predicate]:
    rules = spec.role_scopes.get(context.role)
    if rules is None:
        raise AuthorizationError("Недостаточно прав")
    if not rules:
        if not context.is_platform_super_admin:
            raise AuthorizationError("Недостаточно прав")
        return []
    return rule_predicates(context, rules)


def rule_predicates(context: ScopeContext, rules: Iterable[ScopeRule]) -> list[Predicate]:
    predicates: list[Predicate] = []
    for rule in rules:
        if rule.source is ScopeSource.ORGANIZATIONS:
            predicates.append(Predicate(rule.column, "in", tuple(sorted(context.organization_ids))))
        elif rule.source is ScopeSource.DEPARTMENTS:
            predicates.append(Predicate(rule.column, "in", tuple(sorted(context.department_ids))))
        else:
            predicates.append(Predicate(rule.column, "eq", context.principal_id))
    return predicates


def ensure_archive_access(context: ScopeContext, spec: FilterSpecification, include_archived: bool) -> bool:
    """Return whether soft-deleted rows may be excluded; reject unauthorized archive reads."""
    if not include_archived:
        return True
    if context.is_platform_super_admin or context.role in spec.archive_roles:
        return False
    raise AuthorizationError("Недостаточно прав для просмотра архивных записей")


def _normalize(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return value


def row_in_scope(row: Any, predicates: Iterable[Predicate]) -> bool:
    for p in predicates:
        actual = _normalize(getattr(row, p.field, None))
        if p.operator == "eq" and actual != _normalize(p.value):
            return False
        if p.operator == "in" and actual not in {_normalize(v) for v in p.value}:
            return False
    return True


def ensure_rows_in_scope(rows: Iterable[Any], predicates: list[Predicate], *, resource: str, context: ScopeContext) -> None:
    if not predicates:
        return
    for row in rows:
        if not row_in_scope(row, predicates):
            logger.warning(
                "SECURITY_ALERT out-of-scope row returned by storage resource=%s row_id=%s role=%s principal=%s",
                resource,
                getattr(row, "id", "-"),
                context.role,
                context.principal_id,
            )
            raise AuthorizationError("Недостаточно прав")
