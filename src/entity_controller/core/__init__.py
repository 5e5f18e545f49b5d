"""Entity-controller core -- contracts and ambient plumbing.

Manifesto:
    Controllers and DAOs only need a handful of shared pieces: the DAO
    contracts, sort criteria, a typed error hierarchy, structured logging
    and settings.  They live here so the controller and DAO packages
    depend on ``core`` and never on each other's internals.

Architecture::

    errors.py      Structured error hierarchy (ControllerError, PersistenceError)
    protocols.py   ReadableDAO / WriteableDAO / DAO contracts
    sorting.py     SortCriterion for paged queries
    logging.py     structlog configuration and helpers
    settings.py    pydantic-settings ControllerSettings
    orm/           SQLAlchemy declarative base, engine and session scope
"""

from entity_controller.core.errors import (
    ConfigError,
    ControllerError,
    EntityNotFoundError,
    ErrorCategory,
    ErrorContext,
    InvalidPaginationError,
    InvalidSortCriterionError,
    MissingDAOError,
    PersistenceError,
    ValidationError,
)
from entity_controller.core.protocols import DAO, ReadableDAO, WriteableDAO
from entity_controller.core.sorting import SortCriterion

__all__ = [
    "ConfigError",
    "ControllerError",
    "EntityNotFoundError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidPaginationError",
    "InvalidSortCriterionError",
    "MissingDAOError",
    "PersistenceError",
    "ValidationError",
    "DAO",
    "ReadableDAO",
    "WriteableDAO",
    "SortCriterion",
]
