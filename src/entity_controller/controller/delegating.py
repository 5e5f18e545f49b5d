"""
Controllers that forward every call to a DAO.

Manifesto:
    Application code talks to controllers, controllers talk to DAOs.  The
    delegating controllers here add no behaviour of their own beyond
    ``save_or_update``: each method is a single forwarding call, and
    whatever the DAO returns or raises reaches the caller unchanged.
    Per-entity controllers subclass them and add business operations.

Architecture:
    ::

        _DAODelegate                  holds the DAO, rejects None
        ├── DelegatingReadableController   → ReadableDAO
        ├── DelegatingWriteableController  → WriteableDAO (+ save_or_update)
        └── DelegatingController           → DAO (both of the above)

Examples:
    >>> class UserController(DelegatingController[User, int]):
    ...     def find_admins(self) -> list[User]:
    ...         return self.find_by_example(User(is_admin=True))
    >>> users = UserController(SQLAlchemyDAO(session, User))
    >>> users.save_or_update(User(name="ada"))

Tags:
    controller, dao, delegation, facade, entity-controller
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from entity_controller.core.errors import MissingDAOError
from entity_controller.core.logging import get_logger
from entity_controller.core.sorting import SortCriterion

logger = get_logger(__name__)

T = TypeVar("T")
K = TypeVar("K")


class _DAODelegate(Generic[T, K]):
    """Holds the DAO every controller method forwards to."""

    def __init__(self, dao: Any) -> None:
        if dao is None:
            raise MissingDAOError()
        self._dao = dao

    @property
    def dao(self) -> Any:
        """The DAO this controller delegates to."""
        return self._dao


class DelegatingReadableController(_DAODelegate[T, K]):
    """Implements ``ReadableController`` by delegating to a ``ReadableDAO``."""

    def count_all(self) -> int:
        return self._dao.count_all()

    def find_by_id(self, id: K) -> T | None:
        return self._dao.find_by_id(id)

    def find_all(
        self,
        first_result: int | None = None,
        max_results: int | None = None,
        *sort_criteria: SortCriterion,
    ) -> list[T]:
        if first_result is None and max_results is None and not sort_criteria:
            return self._dao.find_all()
        return self._dao.find_all(first_result, max_results, *sort_criteria)

    def find_by_ids(self, *ids: K) -> list[T]:
        return self._dao.find_by_ids(*ids)

    def find_by_example(self, example: T) -> list[T]:
        return self._dao.find_by_example(example)

    def refresh(self, obj: T) -> T:
        return self._dao.refresh(obj)

    def reattach(self, obj: T) -> T:
        return self._dao.reattach(obj)


class DelegatingWriteableController(_DAODelegate[T, K]):
    """Implements ``WriteableController`` by delegating to a ``WriteableDAO``."""

    def save(self, obj: T) -> None:
        self._dao.save(obj)

    def update(self, obj: T) -> T:
        return self._dao.update(obj)

    def merge(self, obj: T) -> T:
        return self._dao.merge(obj)

    def delete(self, obj: T) -> None:
        self._dao.delete(obj)

    def delete_by_id(self, id: K) -> None:
        self._dao.delete_by_id(id)

    def evict(self, obj: T) -> None:
        self._dao.evict(obj)

    def is_persistent(self, obj: T) -> bool:
        return self._dao.is_persistent(obj)

    def save_or_update(self, obj: T) -> T:
        """Update ``obj`` if it is persistent, save it otherwise.

        Persistence is decided by :meth:`is_persistent`, and the write goes
        through :meth:`update` or :meth:`save`, so subclasses overriding
        those methods also change this one.

        Returns:
            The instance returned by ``update`` when ``obj`` was persistent,
            ``obj`` itself when it was saved.
        """
        if self.is_persistent(obj):
            logger.debug("save_or_update", branch="update", entity=type(obj).__name__)
            return self.update(obj)
        logger.debug("save_or_update", branch="save", entity=type(obj).__name__)
        self.save(obj)
        return obj


class DelegatingController(DelegatingReadableController[T, K], DelegatingWriteableController[T, K]):
    """Implements ``Controller`` by delegating every call to a ``DAO``."""


__all__ = [
    "DelegatingReadableController",
    "DelegatingWriteableController",
    "DelegatingController",
]
