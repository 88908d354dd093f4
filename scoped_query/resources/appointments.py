from scoped_query.core.config import settings
from scoped_query.models.appointment import Appointment
from scoped_query.resources.registry import ResourceBinding, register_resource
from scoped_query.services.filter_spec import (
    FilterFieldSpec,
    FilterKind,
    FilterSpecification,
    ScopeRule,
    ScopeSource,
    SortSpec,
    ValueType,
)
from scoped_query.services.result_mapper import ResultMapper, optional, required

RESOURCE = "appointments"

APPOINTMENT_STATUSES = frozenset({"SCHEDULED", "CONFIRMED", "CHECKED_IN", "COMPLETED", "CANCELLED", "NO_SHOW"})
APPOINTMENT_TYPES = frozenset({"IN_PERSON", "TELEHEALTH"})

_ORG = ScopeRule("organization_id", ScopeSource.ORGANIZATIONS)
_DEPT = ScopeRule("department_id", ScopeSource.DEPARTMENTS)

SPEC = FilterSpecification(
    fields=(
        FilterFieldSpec("organization_id", FilterKind.FOREIGN_KEY, ValueType.UUID),
        FilterFieldSpec("department_id", FilterKind.FOREIGN_KEY, ValueType.UUID),
        FilterFieldSpec("provider_id", FilterKind.FOREIGN_KEY, ValueType.UUID),
        FilterFieldSpec("patient_id", FilterKind.FOREIGN_KEY, ValueType.UUID),
        FilterFieldSpec("status", FilterKind.ENUM_SET, ValueType.STRING, allowed_values=APPOINTMENT_STATUSES),
        FilterFieldSpec("appointment_type", FilterKind.EXACT, ValueType.STRING, allowed_values=APPOINTMENT_TYPES),
        FilterFieldSpec("title", FilterKind.SUBSTRING, ValueType.STRING),
        FilterFieldSpec("start_time_from", FilterKind.RANGE_LOW, ValueType.DATETIME, column="start_time"),
        FilterFieldSpec("start_time_to", FilterKind.RANGE_HIGH, ValueType.DATETIME, column="start_time"),
    ),
    sortable_fields=frozenset({"start_time", "end_time", "status", "created_at", "updated_at"}),
    default_sort=SortSpec("start_time", "asc"),
    role_scopes={
        "SYSTEM_ADMIN": (),
        "ORGANIZATION_ADMIN": (_ORG,),
        "RECEPTIONIST": (_ORG,),
        "DEPARTMENT_HEAD": (_ORG, _DEPT),
        "NURSE": (_ORG, _DEPT),
        "MEDICAL_DOCTOR": (_ORG, ScopeRule("provider_id", ScopeSource.PRINCIPAL)),
        "PATIENT": (ScopeRule("patient_id", ScopeSource.PRINCIPAL),),
    },
    default_limit=settings.DEFAULT_PAGE_LIMIT,
    max_limit=settings.MAX_PAGE_LIMIT,
    empty_pages=0,
    archive_roles=frozenset({"ORGANIZATION_ADMIN"}),
)

MAPPER = ResultMapper(
    RESOURCE,
    (
        required("id", ValueType.UUID),
        required("organization_id", ValueType.UUID),
        optional("department_id", ValueType.UUID),
        required("provider_id", ValueType.UUID),
        required("patient_id", ValueType.UUID),
        required("status", ValueType.STRING),
        required("appointment_type", ValueType.STRING),
        optional("title", ValueType.STRING),
        optional("description", ValueType.STRING),
        required("start_time", ValueType.DATETIME),
        required("end_time", ValueType.DATETIME),
        required("created_at", ValueType.DATETIME),
        required("updated_at", ValueType.DATETIME),
    ),
)

BINDING = register_resource(ResourceBinding(RESOURCE, Appointment, SPEC, MAPPER))
