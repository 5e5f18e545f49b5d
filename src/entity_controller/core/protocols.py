"""
Canonical DAO protocol definitions for entity-controller.

A DAO (Data Access Object) performs the actual persistence work for one
entity class.  Controllers depend on these protocols only, never on a
concrete DAO, so any object with the right shape can back a controller:
the shipped :class:`~entity_controller.dao.sqlalchemy_dao.SQLAlchemyDAO`, an
in-memory fake in tests, or an adapter over another store.

Architecture:
    ::

        protocols.py
        ├── ReadableDAO[T, K]   count_all, find_by_id, find_all, find_by_ids,
        │                       find_by_example, refresh, reattach
        ├── WriteableDAO[T, K]  save, update, merge, delete, delete_by_id,
        │                       evict, is_persistent
        └── DAO[T, K]           ReadableDAO + WriteableDAO

    ``T`` is the entity class, ``K`` the type of its primary key.

Guardrails:
    ❌ DON'T: Add implementation logic to protocol classes
    ✅ DO: Keep protocols pure contracts; implementations live in ``dao/``

Tags:
    protocol, dao, persistence, contracts, entity-controller
"""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

from entity_controller.core.sorting import SortCriterion

T = TypeVar("T")
K_contra = TypeVar("K_contra", contravariant=True)


@runtime_checkable
class ReadableDAO(Protocol[T, K_contra]):
    """Read-only persistence operations for one entity class."""

    def count_all(self) -> int:
        """Return the total number of stored instances."""
        ...

    def find_by_id(self, id: K_contra) -> T | None:
        """Return the instance with the given primary key, or ``None``."""
        ...

    def find_all(
        self,
        first_result: int | None = None,
        max_results: int | None = None,
        *sort_criteria: SortCriterion,
    ) -> list[T]:
        """Return every instance, or one page of them.

        ``first_result`` is the index of the first object returned (the first
        object has index 0); ``max_results`` caps the page size.
        """
        ...

    def find_by_ids(self, *ids: K_contra) -> list[T]:
        """Return the instances with the given primary keys."""
        ...

    def find_by_example(self, example: T) -> list[T]:
        """Query by example: match every property set on ``example``."""
        ...

    def refresh(self, obj: T) -> T:
        """Reload the state of ``obj`` from the store."""
        ...

    def reattach(self, obj: T) -> T:
        """Associate ``obj`` with the current persistence context.

        The store must not be changed.  The attached object, which is not
        necessarily ``obj``, is returned.
        """
        ...


@runtime_checkable
class WriteableDAO(Protocol[T, K_contra]):
    """Write persistence operations for one entity class."""

    def save(self, obj: T) -> None:
        """Store a new instance."""
        ...

    def update(self, obj: T) -> T:
        """Store changes made to an existing instance."""
        ...

    def merge(self, obj: T) -> T:
        """Copy the state of ``obj`` onto the managed instance and return it."""
        ...

    def delete(self, obj: T) -> None:
        """Remove an instance."""
        ...

    def delete_by_id(self, id: K_contra) -> None:
        """Remove the instance with the given primary key."""
        ...

    def evict(self, obj: T) -> None:
        """Detach ``obj`` from the persistence context without touching the store."""
        ...

    def is_persistent(self, obj: T) -> bool:
        """Whether ``obj`` is already stored (as opposed to new)."""
        ...


@runtime_checkable
class DAO(ReadableDAO[T, K_contra], WriteableDAO[T, K_contra], Protocol[T, K_contra]):
    """Read-write persistence operations for one entity class."""


__all__ = [
    "ReadableDAO",
    "WriteableDAO",
    "DAO",
]
