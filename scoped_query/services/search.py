"""Scoped search pipeline shared by every resource.

resolve principal -> validate -> scope -> compose -> storage -> map -> envelope. Identity and
request validation both complete before the storage gateway is touched.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Mapping

from sqlalchemy.orm import Session

from scoped_query.core.errors import NotFoundError, ValidationError
from scoped_query.resources.registry import get_binding
from scoped_query.schemas.paging import PagedResult
from scoped_query.services import envelope, pagination
from scoped_query.services.filter_spec import filter_specs
from scoped_query.services.filter_validator import validate
from scoped_query.services.query_composer import compose, soft_delete_predicate
from scoped_query.services.scope import (
    ensure_archive_access,
    ensure_rows_in_scope,
    resolve,
    scope_predicates,
)
from scoped_query.services.storage import SqlAlchemyGateway

logger = logging.getLogger(__name__)

GatewayFactory = Callable[[Session, type], Any]


def search(
    db: Session,
    resource_name: str,
    raw: Mapping[str, Any] | None,
    principal: dict | None,
    *,
    gateway_factory: GatewayFactory = SqlAlchemyGateway,
) -> PagedResult:
    binding = get_binding(resource_name)
    spec = filter_specs.get(resource_name)
    context = resolve(principal)
    validated = validate(raw, spec)
    scope = scope_predicates(context, spec)
    exclude_soft_deleted = ensure_archive_access(context, spec, validated.include_archived)
    descriptor = compose(validated, scope, exclude_soft_deleted=exclude_soft_deleted)
    logger.debug(
        "search resource=%s role=%s filters=%s scope=%s page=%s limit=%s sort=%s:%s",
        resource_name,
        context.role,
        len(validated.predicates),
        len(scope),
        validated.page,
        validated.limit,
        descriptor.sort.field,
        descriptor.sort.direction,
    )

    gateway = gateway_factory(db, binding.model)
    rows, total = gateway.fetch_page_and_count(descriptor)
    ensure_rows_in_scope(rows, scope, resource=resource_name, context=context)
    data = binding.mapper.map_many(rows)
    meta = pagination.metadata(validated.page, validated.limit, total, spec.empty_pages)
    return envelope.build(meta, data)


def parse_row_id_or_400(row_id: Any) -> uuid.UUID:
    if isinstance(row_id, uuid.UUID):
        return row_id
    try:
        return uuid.UUID(str(row_id or "").strip())
    except ValueError:
        raise ValidationError("Некорректный идентификатор записи")


def load_in_scope_or_404(
    db: Session,
    resource_name: str,
    row_id: Any,
    principal: dict | None,
    *,
    gateway_factory: GatewayFactory = SqlAlchemyGateway,
) -> Any:
    binding = get_binding(resource_name)
    spec = filter_specs.get(resource_name)
    context = resolve(principal)
    scope = scope_predicates(context, spec)
    target_id = parse_row_id_or_400(row_id)
    gateway = gateway_factory(db, binding.model)
    row = gateway.get_one(target_id, [*scope, soft_delete_predicate()])
    # Out-of-scope rows are reported exactly like missing ones.
    if row is None:
        raise NotFoundError()
    return row


def get_by_id(
    db: Session,
    resource_name: str,
    row_id: Any,
    principal: dict | None,
    *,
    gateway_factory: GatewayFactory = SqlAlchemyGateway,
) -> dict[str, Any]:
    row = load_in_scope_or_404(db, resource_name, row_id, principal, gateway_factory=gateway_factory)
    return get_binding(resource_name).mapper.map(row)
