from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from scoped_query.core.errors import AuthorizationError, NotFoundError, ValidationError
from scoped_query.models.appointment import Appointment
from scoped_query.models.appointment_waitlist import AppointmentWaitlist
from scoped_query.resources.appointment_waitlists import JOIN_APPOINTMENT_SCOPES
from scoped_query.resources.registry import get_binding
from scoped_query.schemas.paging import WaitlistJoinPayload
from scoped_query.services.filter_spec import filter_specs
from scoped_query.services.query_composer import soft_delete_predicate
from scoped_query.services.scope import ScopeContext, resolve, rule_predicates, scope_predicates
from scoped_query.services.search import GatewayFactory, parse_row_id_or_400
from scoped_query.services.storage import SqlAlchemyGateway

WAITLISTS = "appointment_waitlists"
APPOINTMENTS = "appointments"
JOIN_STATUS = "ACTIVE"


def _appointment_scope(context: ScopeContext):
    rules = JOIN_APPOINTMENT_SCOPES.get(context.role)
    if rules is None:
        return scope_predicates(context, filter_specs.get(APPOINTMENTS))
    return rule_predicates(context, rules)


def join_waitlist(
    db: Session,
    payload: WaitlistJoinPayload,
    principal: dict | None,
    *,
    gateway_factory: GatewayFactory = SqlAlchemyGateway,
) -> dict[str, Any]:
    context = resolve(principal)
    # The caller must be allowed to see waitlists at all before anything is looked up.
    scope_predicates(context, filter_specs.get(WAITLISTS))

    # New entries always start active; promotion and removal are later transitions.
    status = str(payload.status or JOIN_STATUS).strip().upper()
    if status != JOIN_STATUS:
        raise ValidationError(f'Новая запись листа ожидания может иметь только статус "{JOIN_STATUS}"')

    if context.role == "PATIENT":
        if payload.patient_id and parse_row_id_or_400(payload.patient_id) != context.principal_id:
            raise AuthorizationError("Пациент может записать в лист ожидания только себя")
        patient_id = context.principal_id
    else:
        if not payload.patient_id:
            raise ValidationError('Поле "patient_id" обязательно')
        patient_id = parse_row_id_or_400(payload.patient_id)

    appointment_id = parse_row_id_or_400(payload.appointment_id)
    appointment = gateway_factory(db, Appointment).get_one(
        appointment_id, [*_appointment_scope(context), soft_delete_predicate()]
    )
    # Out-of-scope appointments are reported exactly like missing ones.
    if appointment is None:
        raise NotFoundError()

    row = AppointmentWaitlist(
        appointment_id=appointment.id,
        patient_id=patient_id,
        organization_id=appointment.organization_id,
        department_id=appointment.department_id,
        status=status,
    )
    # No pre-check for an existing entry: the unique constraint is the only arbiter.
    gateway = gateway_factory(db, AppointmentWaitlist)
    gateway.insert_unique(row, conflict_detail="Пациент уже находится в листе ожидания этого приёма")
    return get_binding(WAITLISTS).mapper.map(row)
