from __future__ import annotations

import importlib
import pkgutil
from dataclasses import dataclass
from functools import lru_cache

from sqlalchemy import inspect as sa_inspect

import scoped_query.resources as resources_pkg
from scoped_query.core.errors import ConfigurationError, NotFoundError
from scoped_query.services.filter_spec import FilterSpecification, filter_specs
from scoped_query.services.query_composer import SOFT_DELETE_COLUMN
from scoped_query.services.result_mapper import ResultMapper
from scoped_query.services.scope import PLATFORM_SUPER_ADMIN_ROLES


@dataclass(frozen=True)
class ResourceBinding:
    name: str
    model: type
    spec: FilterSpecification
    mapper: ResultMapper


_BINDINGS: dict[str, ResourceBinding] = {}


def _check_binding(binding: ResourceBinding) -> None:
    columns = {column.key for column in sa_inspect(binding.model).columns}
    missing = sorted(binding.spec.columns() - columns)
    if missing:
        raise ConfigurationError(f'{binding.name}: в модели нет полей {", ".join(missing)}')
    if "id" not in columns or SOFT_DELETE_COLUMN not in columns:
        raise ConfigurationError(f"{binding.name}: модель должна иметь id и {SOFT_DELETE_COLUMN}")
    for role, rules in binding.spec.role_scopes.items():
        if not rules and role not in PLATFORM_SUPER_ADMIN_ROLES:
            raise ConfigurationError(f"{binding.name}: роль {role} не может быть без ограничений области")


def register_resource(binding: ResourceBinding) -> ResourceBinding:
    _check_binding(binding)
    filter_specs.register(binding.name, binding.spec)
    _BINDINGS[binding.name] = binding
    return binding


def normalize_resource_name(resource_name: str) -> str:
    raw = (resource_name or "").strip().replace("-", "_")
    if not raw:
        return ""
    chars: list[str] = []
    for index, ch in enumerate(raw):
        if ch.isupper() and index > 0 and raw[index - 1].isalnum() and raw[index - 1] != "_":
            chars.append("_")
        chars.append(ch.lower())
    return "".join(chars)


@lru_cache(maxsize=1)
def load_resources() -> tuple[str, ...]:
    for module in pkgutil.iter_modules(resources_pkg.__path__):
        if module.name.startswith("_") or module.name == "registry":
            continue
        importlib.import_module(f"{resources_pkg.__name__}.{module.name}")
    return tuple(filter_specs.names())


def get_binding(resource_name: str) -> ResourceBinding:
    load_resources()
    binding = _BINDINGS.get(resource_name)
    if binding is None:
        raise ConfigurationError(f'Ресурс "{resource_name}" не зарегистрирован')
    return binding


def resolve_resource(resource_name: str) -> ResourceBinding:
    """URL-facing lookup: an unknown resource path is a 404, not a deploy defect."""
    normalized = normalize_resource_name(resource_name)
    load_resources()
    if normalized not in filter_specs:
        raise NotFoundError("Ресурс не найден")
    return _BINDINGS[normalized]
