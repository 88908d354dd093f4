from scoped_query.core.config import settings
from scoped_query.models.store_ingredient_price import StoreIngredientPrice
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
from scoped_query.services.result_mapper import ResultMapper, required

RESOURCE = "store_ingredient_prices"

_ORG = ScopeRule("organization_id", ScopeSource.ORGANIZATIONS)

SPEC = FilterSpecification(
    fields=(
        FilterFieldSpec("grocery_store_id", FilterKind.FOREIGN_KEY, ValueType.UUID),
        FilterFieldSpec("ingredient_id", FilterKind.FOREIGN_KEY, ValueType.UUID),
        FilterFieldSpec("available", FilterKind.EXACT, ValueType.BOOLEAN),
        FilterFieldSpec("min_price", FilterKind.RANGE_LOW, ValueType.NUMBER, column="price"),
        FilterFieldSpec("max_price", FilterKind.RANGE_HIGH, ValueType.NUMBER, column="price"),
        FilterFieldSpec("last_updated_from", FilterKind.RANGE_LOW, ValueType.DATETIME, column="last_updated"),
        FilterFieldSpec("last_updated_to", FilterKind.RANGE_HIGH, ValueType.DATETIME, column="last_updated"),
    ),
    sortable_fields=frozenset({"price", "last_updated", "created_at"}),
    default_sort=SortSpec("created_at", "desc"),
    role_scopes={
        "SYSTEM_ADMIN": (),
        "ORGANIZATION_ADMIN": (_ORG,),
        "MEMBER": (_ORG,),
    },
    default_limit=settings.DEFAULT_PAGE_LIMIT,
    max_limit=settings.MAX_PAGE_LIMIT,
    empty_pages=0,
)

# organization_id and created_by_id stay internal.
MAPPER = ResultMapper(
    RESOURCE,
    (
        required("id", ValueType.UUID),
        required("grocery_store_id", ValueType.UUID),
        required("ingredient_id", ValueType.UUID),
        required("price", ValueType.NUMBER),
        required("available", ValueType.BOOLEAN),
        required("last_updated", ValueType.DATETIME),
        required("created_at", ValueType.DATETIME),
        required("updated_at", ValueType.DATETIME),
    ),
)

BINDING = register_resource(ResourceBinding(RESOURCE, StoreIngredientPrice, SPEC, MAPPER))
