import unittest

import tests.base  # noqa: F401

from scoped_query.core.errors import ConfigurationError, NotFoundError
from scoped_query.models.store_ingredient_price import StoreIngredientPrice
from scoped_query.resources.registry import (
    ResourceBinding,
    get_binding,
    load_resources,
    normalize_resource_name,
    register_resource,
    resolve_resource,
)
from scoped_query.services.filter_spec import (
    FilterFieldSpec,
    FilterKind,
    FilterSpecification,
    FilterSpecRegistry,
    ScopeRule,
    ScopeSource,
    SortSpec,
    ValueType,
    filter_specs,
)
from scoped_query.services.result_mapper import ResultMapper, required

_ORG = ScopeRule("organization_id", ScopeSource.ORGANIZATIONS)


def _spec(**overrides):
    kwargs = dict(
        fields=(FilterFieldSpec("available", FilterKind.EXACT, ValueType.BOOLEAN),),
        sortable_fields=frozenset({"created_at"}),
        default_sort=SortSpec("created_at", "desc"),
        role_scopes={"SYSTEM_ADMIN": (), "MEMBER": (_ORG,)},
    )
    kwargs.update(overrides)
    return FilterSpecification(**kwargs)


class FilterSpecificationTests(unittest.TestCase):
    def test_duplicate_field_names(self):
        field = FilterFieldSpec("available", FilterKind.EXACT, ValueType.BOOLEAN)
        with self.assertRaises(ConfigurationError):
            _spec(fields=(field, field))

    def test_default_sort_must_be_sortable(self):
        with self.assertRaises(ConfigurationError):
            _spec(default_sort=SortSpec("price", "asc"))

    def test_limits_must_be_consistent(self):
        with self.assertRaises(ConfigurationError):
            _spec(default_limit=50, max_limit=10)
        with self.assertRaises(ConfigurationError):
            _spec(default_limit=0)

    def test_empty_pages_convention(self):
        with self.assertRaises(ConfigurationError):
            _spec(empty_pages=2)

    def test_range_requires_comparable_type(self):
        with self.assertRaises(ConfigurationError):
            _spec(fields=(FilterFieldSpec("name_from", FilterKind.RANGE_LOW, ValueType.BOOLEAN, column="x"),))

    def test_foreign_key_requires_uuid(self):
        with self.assertRaises(ConfigurationError):
            _spec(fields=(FilterFieldSpec("store", FilterKind.FOREIGN_KEY, ValueType.STRING),))

    def test_columns_cover_filters_sorts_and_scope(self):
        spec = _spec(
            fields=(FilterFieldSpec("min_price", FilterKind.RANGE_LOW, ValueType.NUMBER, column="price"),),
        )
        self.assertEqual(spec.columns(), {"price", "created_at", "organization_id"})


class FilterSpecRegistryTests(unittest.TestCase):
    def test_register_and_get(self):
        registry = FilterSpecRegistry()
        spec = _spec()
        registry.register("things", spec)
        self.assertIs(registry.get("things"), spec)
        self.assertIn("things", registry)
        self.assertEqual(registry.names(), ["things"])

    def test_duplicate_registration_fails(self):
        registry = FilterSpecRegistry()
        registry.register("things", _spec())
        with self.assertRaises(ConfigurationError):
            registry.register("things", _spec())

    def test_unknown_resource_is_configuration_error(self):
        with self.assertRaises(ConfigurationError) as ctx:
            FilterSpecRegistry().get("missing")
        self.assertEqual(ctx.exception.status_code, 500)


class ResourceRegistryTests(unittest.TestCase):
    def test_builtin_resources_are_registered(self):
        self.assertEqual(
            load_resources(),
            ("appointment_waitlists", "appointments", "store_ingredient_prices"),
        )
        for name in load_resources():
            self.assertIn(name, filter_specs)
            self.assertEqual(get_binding(name).name, name)

    def test_get_binding_unknown_is_configuration_error(self):
        with self.assertRaises(ConfigurationError):
            get_binding("recipes")

    def test_normalize_resource_name(self):
        self.assertEqual(normalize_resource_name("store-ingredient-prices"), "store_ingredient_prices")
        self.assertEqual(normalize_resource_name("StoreIngredientPrices"), "store_ingredient_prices")
        self.assertEqual(normalize_resource_name("appointmentWaitlists"), "appointment_waitlists")
        self.assertEqual(normalize_resource_name(" appointments "), "appointments")
        self.assertEqual(normalize_resource_name(""), "")

    def test_resolve_resource_unknown_is_404(self):
        self.assertEqual(resolve_resource("store-ingredient-prices").name, "store_ingredient_prices")
        with self.assertRaises(NotFoundError):
            resolve_resource("users")

    def test_binding_with_unknown_column_is_rejected(self):
        binding = ResourceBinding(
            "broken_prices",
            StoreIngredientPrice,
            _spec(fields=(FilterFieldSpec("colour", FilterKind.EXACT, ValueType.STRING),)),
            ResultMapper("broken_prices", (required("id", ValueType.UUID),)),
        )
        with self.assertRaises(ConfigurationError):
            register_resource(binding)
        self.assertNotIn("broken_prices", filter_specs)

    def test_unrestricted_non_admin_role_is_rejected(self):
        binding = ResourceBinding(
            "open_prices",
            StoreIngredientPrice,
            _spec(role_scopes={"MEMBER": ()}),
            ResultMapper("open_prices", (required("id", ValueType.UUID),)),
        )
        with self.assertRaises(ConfigurationError):
            register_resource(binding)
        self.assertNotIn("open_prices", filter_specs)


if __name__ == "__main__":
    unittest.main()
