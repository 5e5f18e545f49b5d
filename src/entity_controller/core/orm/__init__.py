"""SQLAlchemy 2.0 ORM plumbing for entity-controller.

Modules
-------
base        EntityBase (declarative base)
session     Engine factory, ControllerSession, session_scope
"""

from __future__ import annotations

from entity_controller.core.orm.base import EntityBase
from entity_controller.core.orm.session import (
    ControllerSession,
    create_controller_engine,
    engine_from_settings,
    session_factory,
    session_scope,
)

__all__ = [
    "EntityBase",
    "create_controller_engine",
    "engine_from_settings",
    "ControllerSession",
    "session_factory",
    "session_scope",
]
