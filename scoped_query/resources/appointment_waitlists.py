from scoped_query.core.config import settings
from scoped_query.models.appointment_waitlist import AppointmentWaitlist
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

RESOURCE = "appointment_waitlists"

WAITLIST_STATUSES = frozenset({"ACTIVE", "PROMOTED", "REMOVED"})

_ORG = ScopeRule("organization_id", ScopeSource.ORGANIZATIONS)
_DEPT = ScopeRule("department_id", ScopeSource.DEPARTMENTS)

SPEC = FilterSpecification(
    fields=(
        FilterFieldSpec("appointment_id", FilterKind.FOREIGN_KEY, ValueType.UUID),
        FilterFieldSpec("patient_id", FilterKind.FOREIGN_KEY, ValueType.UUID),
        FilterFieldSpec("status", FilterKind.ENUM_SET, ValueType.STRING, allowed_values=WAITLIST_STATUSES),
        FilterFieldSpec("join_time_from", FilterKind.RANGE_LOW, ValueType.DATETIME, column="join_time"),
        FilterFieldSpec("join_time_to", FilterKind.RANGE_HIGH, ValueType.DATETIME, column="join_time"),
    ),
    sortable_fields=frozenset({"join_time", "status", "created_at"}),
    default_sort=SortSpec("join_time", "asc"),
    role_scopes={
        "SYSTEM_ADMIN": (),
        "ORGANIZATION_ADMIN": (_ORG,),
        "RECEPTIONIST": (_ORG,),
        "MEDICAL_DOCTOR": (_ORG,),
        "DEPARTMENT_HEAD": (_ORG, _DEPT),
        "NURSE": (_ORG, _DEPT),
        "PATIENT": (ScopeRule("patient_id", ScopeSource.PRINCIPAL),),
    },
    default_limit=settings.DEFAULT_PAGE_LIMIT,
    max_limit=settings.MAX_PAGE_LIMIT,
    # Waitlist listings always report at least one (possibly empty) page.
    empty_pages=1,
    archive_roles=frozenset({"ORGANIZATION_ADMIN"}),
)

# Which appointments a role may join a waitlist for, where it differs from the
# appointments listing scope. Patients queue for any appointment of their organizations.
JOIN_APPOINTMENT_SCOPES = {
    "PATIENT": (_ORG,),
}

MAPPER = ResultMapper(
    RESOURCE,
    (
        required("id", ValueType.UUID),
        required("appointment_id", ValueType.UUID),
        required("patient_id", ValueType.UUID),
        required("organization_id", ValueType.UUID),
        optional("department_id", ValueType.UUID),
        required("status", ValueType.STRING),
        required("join_time", ValueType.DATETIME),
        required("created_at", ValueType.DATETIME),
        required("updated_at", ValueType.DATETIME),
    ),
)

BINDING = register_resource(ResourceBinding(RESOURCE, AppointmentWaitlist, SPEC, MAPPER))
