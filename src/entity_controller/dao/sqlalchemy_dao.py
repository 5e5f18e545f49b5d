"""
SQLAlchemy 2.0 implementation of the DAO contract.

``SQLAlchemyDAO`` serves one mapped entity class over one ``Session``.
It flushes after writes so that generated keys and constraint violations
surface immediately, but it never commits: transaction boundaries belong
to the caller (see :func:`~entity_controller.core.orm.session.session_scope`).

Architecture:
    ::

        Controller ──► SQLAlchemyDAO(session, Entity)
                            │
                            ├── reads   select(Entity) / Session.get
                            ├── writes  add / merge / delete + flush
                            └── context evict / refresh / reattach

        SQLAlchemyError ──► PersistenceError(cause=..., context=entity+operation)

Guardrails:
    ❌ DON'T: Commit inside the DAO
    ✅ DO: Wrap a unit of work in ``session_scope``

    ❌ DON'T: Let driver exceptions escape untyped
    ✅ DO: Raise ``PersistenceError`` chaining the original

Examples:
    >>> with session_scope(factory) as session:
    ...     dao = SQLAlchemyDAO(session, Book)
    ...     dao.save(Book(title="Dune"))
    ...     dao.find_all(0, 10, SortCriterion.asc("title"))

Tags:
    dao, sqlalchemy, orm, persistence, entity-controller
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import func, inspect, select
from sqlalchemy.exc import NoInspectionAvailable, SQLAlchemyError
from sqlalchemy.orm import Mapper, Session

from entity_controller.core.errors import (
    ConfigError,
    EntityNotFoundError,
    InvalidPaginationError,
    InvalidSortCriterionError,
    PersistenceError,
)
from entity_controller.core.logging import get_logger
from entity_controller.core.sorting import SortCriterion

logger = get_logger(__name__)

T = TypeVar("T")
K = TypeVar("K")


class SQLAlchemyDAO(Generic[T, K]):
    """DAO for one mapped entity class backed by a SQLAlchemy ``Session``.

    Parameters:
        session: Session the DAO reads from and writes to.
        entity_class: Mapped class this DAO serves.
    """

    def __init__(self, session: Session, entity_class: type[T]) -> None:
        if session is None:
            raise ConfigError("session cannot be None")
        try:
            mapper: Mapper[Any] = inspect(entity_class)
        except NoInspectionAvailable as exc:
            raise ConfigError(
                f"{entity_class!r} is not a mapped entity class", cause=exc
            ) from exc
        self._session = session
        self._entity_class = entity_class
        self._mapper = mapper
        self._entity_name = entity_class.__name__
        self._pk_keys = frozenset(
            mapper.get_property_by_column(column).key for column in mapper.primary_key
        )

    @property
    def session(self) -> Session:
        return self._session

    @property
    def entity_class(self) -> type[T]:
        return self._entity_class

    @contextmanager
    def _translate_errors(self, operation: str, entity_id: Any = None) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            logger.warning(
                "dao_operation_failed",
                entity=self._entity_name,
                operation=operation,
                error=str(exc),
            )
            raise PersistenceError(
                f"{operation} failed for {self._entity_name}: {exc}", cause=exc
            ).with_context(
                entity=self._entity_name,
                operation=operation,
                entity_id=entity_id,
            ) from exc

    def _identity(self, obj: T) -> Any:
        key = self._mapper.primary_key_from_instance(obj)
        return key[0] if len(key) == 1 else tuple(key)

    # -- Reads -------------------------------------------------------------

    def count_all(self) -> int:
        with self._translate_errors("count_all"):
            stmt = select(func.count()).select_from(self._entity_class)
            return int(self._session.scalar(stmt) or 0)

    def find_by_id(self, id: K) -> T | None:
        with self._translate_errors("find_by_id", id):
            return self._session.get(self._entity_class, id)

    def find_all(
        self,
        first_result: int | None = None,
        max_results: int | None = None,
        *sort_criteria: SortCriterion,
    ) -> list[T]:
        """Return every instance, or one page ordered by ``sort_criteria``.

        A page without sort criteria is ordered by primary key so that
        consecutive pages never overlap.
        """
        stmt = select(self._entity_class)
        if first_result is not None or max_results is not None or sort_criteria:
            first = 0 if first_result is None else first_result
            if first < 0 or (max_results is not None and max_results < 0):
                raise InvalidPaginationError(first_result, max_results)
            if sort_criteria:
                stmt = stmt.order_by(*(self._order_clause(c) for c in sort_criteria))
            else:
                stmt = stmt.order_by(*self._mapper.primary_key)
            if first:
                stmt = stmt.offset(first)
            if max_results is not None:
                stmt = stmt.limit(max_results)
        with self._translate_errors("find_all"):
            return list(self._session.scalars(stmt).all())

    def _order_clause(self, criterion: SortCriterion) -> Any:
        if criterion.property not in self._mapper.column_attrs:
            raise InvalidSortCriterionError(criterion.property).with_context(
                entity=self._entity_name, operation="find_all"
            )
        column = getattr(self._entity_class, criterion.property)
        return column.asc() if criterion.ascending else column.desc()

    def find_by_ids(self, *ids: K) -> list[T]:
        """Return the instances with the given keys, in the order requested.

        Unknown keys are skipped and repeated keys are returned once.
        """
        if not ids:
            return []
        wanted = list(dict.fromkeys(ids))
        with self._translate_errors("find_by_ids"):
            if len(self._mapper.primary_key) != 1:
                found = (self._session.get(self._entity_class, key) for key in wanted)
                return [obj for obj in found if obj is not None]
            pk_column = self._mapper.primary_key[0]
            stmt = select(self._entity_class).where(pk_column.in_(wanted))
            by_id = {self._identity(obj): obj for obj in self._session.scalars(stmt)}
        return [by_id[key] for key in wanted if key in by_id]

    def find_by_example(self, example: T) -> list[T]:
        """Match every non-``None`` column property of ``example``.

        Primary-key columns are ignored, so an example copied from a stored
        instance finds its look-alikes too.  Only state already loaded on the
        example is read; nothing is lazy-loaded.
        """
        with self._translate_errors("find_by_example"):
            loaded = inspect(example).dict
            stmt = select(self._entity_class)
            for attr in self._mapper.column_attrs:
                if attr.key in self._pk_keys:
                    continue
                value = loaded.get(attr.key)
                if value is not None:
                    stmt = stmt.where(getattr(self._entity_class, attr.key) == value)
            # Querying must not flush the example itself into the store
            with self._session.no_autoflush:
                return list(self._session.scalars(stmt).all())

    def refresh(self, obj: T) -> T:
        with self._translate_errors("refresh"):
            self._session.refresh(obj)
        return obj

    def reattach(self, obj: T) -> T:
        """Return the session's instance for ``obj`` without writing anything.

        An instance already in the session is returned as is.  A clean
        detached instance is merged with ``load=False``: no SELECT, no UPDATE,
        and the returned object may be a different instance.

        Edits made to a detached instance are discarded rather than written:
        the instance is added back and its modified attributes are expired,
        so they reload from the store on next access.  When the session
        already holds an instance with the same identity, that instance is
        returned and ``obj`` is left untouched.
        """
        with self._translate_errors("reattach"):
            if obj in self._session:
                return obj
            state = inspect(obj)
            if not state.has_identity:
                raise PersistenceError(
                    f"Cannot reattach a transient {self._entity_name} instance"
                ).with_context(entity=self._entity_name, operation="reattach")
            if not state.modified:
                return self._session.merge(obj, load=False)

            # merge(load=False) rejects dirty instances
            current = self._session.identity_map.get(state.key)
            if current is not None:
                return current
            changed = [attr.key for attr in state.attrs if attr.history.has_changes()]
            self._session.add(obj)
            if changed:
                self._session.expire(obj, changed)
            return obj

    # -- Writes ------------------------------------------------------------

    def save(self, obj: T) -> None:
        with self._translate_errors("save"):
            self._session.add(obj)
            self._session.flush()
        logger.debug("entity_saved", entity=self._entity_name, entity_id=self._identity(obj))

    def update(self, obj: T) -> T:
        with self._translate_errors("update"):
            merged = self._session.merge(obj)
            self._session.flush()
        logger.debug("entity_updated", entity=self._entity_name, entity_id=self._identity(merged))
        return merged

    def merge(self, obj: T) -> T:
        with self._translate_errors("merge"):
            return self._session.merge(obj)

    def delete(self, obj: T) -> None:
        with self._translate_errors("delete"):
            if obj not in self._session and inspect(obj).detached:
                obj = self._session.merge(obj)
            self._session.delete(obj)
            self._session.flush()
        logger.debug("entity_deleted", entity=self._entity_name, entity_id=self._identity(obj))

    def delete_by_id(self, id: K) -> None:
        with self._translate_errors("delete_by_id", id):
            obj = self._session.get(self._entity_class, id)
            if obj is None:
                raise EntityNotFoundError(
                    f"{self._entity_name} with id {id!r} not found"
                ).with_context(entity=self._entity_name, operation="delete_by_id", entity_id=id)
            self._session.delete(obj)
            self._session.flush()
        logger.debug("entity_deleted", entity=self._entity_name, entity_id=id)

    def evict(self, obj: T) -> None:
        with self._translate_errors("evict"):
            if obj in self._session:
                self._session.expunge(obj)

    def is_persistent(self, obj: T) -> bool:
        """Whether ``obj`` has a database identity (persistent or detached)."""
        with self._translate_errors("is_persistent"):
            return inspect(obj).has_identity


__all__ = ["SQLAlchemyDAO"]
