from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from scoped_query.services.filter_spec import SortSpec

Operator = Literal["eq", "in", "gte", "lte", "contains", "is_null"]

SOFT_DELETE_COLUMN = "deleted_at"


@dataclass(frozen=True)
class Predicate:
    field: str
    operator: Operator
    value: Any = None


@dataclass(frozen=True)
class ValidatedQuery:
    predicates: tuple[Predicate, ...]
    sort: SortSpec
    page: int
    limit: int
    skip: int
    take: int
    include_archived: bool = False


@dataclass(frozen=True)
class QueryDescriptor:
    predicates: tuple[Predicate, ...]
    sort: SortSpec
    skip: int
    take: int
    exclude_soft_deleted: bool = True


def soft_delete_predicate() -> Predicate:
    return Predicate(SOFT_DELETE_COLUMN, "is_null", True)


def compose(
    validated: ValidatedQuery,
    scope_predicates: list[Predicate] | tuple[Predicate, ...],
    exclude_soft_deleted: bool = True,
) -> QueryDescriptor:
    # Scope predicates are appended after request filters and are never deduplicated
    # against them: a request filter can only narrow, never replace, the scope.
    predicates = list(validated.predicates)
    predicates.extend(scope_predicates)
    if exclude_soft_deleted:
        predicates.append(soft_delete_predicate())
    return QueryDescriptor(
        predicates=tuple(predicates),
        sort=validated.sort,
        skip=validated.skip,
        take=validated.take,
        exclude_soft_deleted=exclude_soft_deleted,
    )
