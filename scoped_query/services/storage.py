from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Any, Iterable

from sqlalchemy import asc, desc, false
from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import Query, Session

from scoped_query.core.errors import ConfigurationError, ConflictError, DependencyError, QueryEngineError
from scoped_query.services.query_composer import Predicate, QueryDescriptor

logger = logging.getLogger(__name__)

_TIMEOUT_MARKERS = ("statement timeout", "canceling statement", "timeout expired", "timed out")


def _is_timeout(exc: Exception) -> bool:
    if isinstance(exc, sa_exc.TimeoutError):
        return True
    if isinstance(exc, sa_exc.DBAPIError):
        text = str(exc.orig or exc).lower()
        return any(marker in text for marker in _TIMEOUT_MARKERS)
    return False


def _dependency_error(exc: Exception, operation: str) -> DependencyError:
    logger.warning("storage %s failed: %s", operation, type(exc).__name__, exc_info=True)
    if _is_timeout(exc):
        return DependencyError.timeout()
    return DependencyError()


class SqlAlchemyGateway:
    """Storage Gateway over one mapped model.

    Rows are returned as ORM instances. The count and the page are two separate
    statements with no lock between them, so under concurrent writes the total
    may briefly disagree with the page contents.
    """

    def __init__(self, db: Session, model: type):
        self.db = db
        self.model = model

    def _column(self, name: str):
        col = getattr(self.model, name, None)
        if col is None:
            raise ConfigurationError(f'Поле "{name}" отсутствует в модели {self.model.__name__}')
        return col

    def _expression(self, p: Predicate):
        col = self._column(p.field)
        if p.operator == "eq":
            return col == p.value
        if p.operator == "in":
            values = list(p.value)
            return col.in_(values) if values else false()
        if p.operator == "gte":
            return col >= p.value
        if p.operator == "lte":
            return col <= p.value
        if p.operator == "contains":
            return col.contains(p.value, autoescape=True)
        if p.operator == "is_null":
            return col.is_(None) if p.value else col.is_not(None)
        raise ConfigurationError(f'Неизвестный оператор фильтра "{p.operator}"')

    def _filtered(self, predicates: Iterable[Predicate]) -> Query:
        q = self.db.query(self.model)
        for p in predicates:
            q = q.filter(self._expression(p))
        return q

    @contextmanager
    def _guard(self, operation: str):
        try:
            yield
        except QueryEngineError:
            raise
        except sa_exc.SQLAlchemyError as exc:
            raise _dependency_error(exc, operation) from exc

    def count(self, predicates: Iterable[Predicate]) -> int:
        with self._guard("count"):
            return int(self._filtered(predicates).count())

    def fetch_page(self, descriptor: QueryDescriptor) -> list[Any]:
        with self._guard("fetch_page"):
            q = self._filtered(descriptor.predicates)
            col = self._column(descriptor.sort.field)
            q = q.order_by(desc(col) if descriptor.sort.direction == "desc" else asc(col))
            # Primary key tie-break keeps page boundaries stable between requests.
            q = q.order_by(asc(self._column("id")))
            return q.offset(descriptor.skip).limit(descriptor.take).all()

    def fetch_page_and_count(self, descriptor: QueryDescriptor) -> tuple[list[Any], int]:
        total = self.count(descriptor.predicates)
        if descriptor.skip >= total:
            return [], total
        return self.fetch_page(descriptor), total

    def get_one(self, row_id: uuid.UUID, predicates: Iterable[Predicate]) -> Any | None:
        with self._guard("get_one"):
            q = self._filtered(predicates).filter(self._column("id") == row_id)
            return q.one_or_none()

    def insert_unique(self, row: Any, *, conflict_detail: str | None = None) -> Any:
        """Insert relying on the table's unique constraints; a duplicate raises ConflictError."""
        try:
            self.db.add(row)
            self.db.commit()
        except sa_exc.IntegrityError as exc:
            self.db.rollback()
            logger.info("unique constraint rejected insert into %s", self.model.__tablename__)
            raise ConflictError(conflict_detail) from exc
        except sa_exc.SQLAlchemyError as exc:
            self.db.rollback()
            raise _dependency_error(exc, "insert") from exc
        with self._guard("refresh"):
            self.db.refresh(row)
        return row
