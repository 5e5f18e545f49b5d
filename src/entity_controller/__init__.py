"""
entity-controller - generic controllers delegating to data-access objects.

Controllers expose the operations of a DAO to application code, split
into a read-only and a write segment:

- entity_controller.controller: ReadableController, WriteableController,
  Controller and their Delegating* implementations
- entity_controller.core: DAO protocols, SortCriterion, errors, logging,
  settings, SQLAlchemy ORM plumbing
- entity_controller.dao: SQLAlchemyDAO
"""

__version__ = "0.1.0"

from entity_controller.controller import (
    Controller,
    DelegatingController,
    DelegatingReadableController,
    DelegatingWriteableController,
    ReadableController,
    WriteableController,
)
from entity_controller.core import (
    DAO,
    ControllerError,
    EntityNotFoundError,
    MissingDAOError,
    PersistenceError,
    ReadableDAO,
    SortCriterion,
    WriteableDAO,
)
from entity_controller.dao import SQLAlchemyDAO

__all__ = [
    "Controller",
    "ReadableController",
    "WriteableController",
    "DelegatingController",
    "DelegatingReadableController",
    "DelegatingWriteableController",
    "DAO",
    "ReadableDAO",
    "WriteableDAO",
    "SortCriterion",
    "ControllerError",
    "EntityNotFoundError",
    "MissingDAOError",
    "PersistenceError",
    "SQLAlchemyDAO",
]
