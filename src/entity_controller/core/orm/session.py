"""SQLAlchemy engine factory, session class and transaction scope.

DAOs flush but never commit: the unit of work belongs to the caller.
``session_scope`` is the usual way to draw that boundary.

This module provides:

* ``create_controller_engine`` -- Create a SA engine from a URL.
* ``engine_from_settings``     -- Same, driven by ``ControllerSettings``.
* ``ControllerSession``        -- Session with ``expire_on_commit=False``.
* ``session_factory``          -- ``sessionmaker`` producing ``ControllerSession``.
* ``session_scope``            -- Commit on success, rollback on error.

Tags:
    entity-controller, orm, sqlalchemy, session, engine, transaction
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from entity_controller.core.logging import get_logger
from entity_controller.core.settings import ControllerSettings

logger = get_logger(__name__)


def create_controller_engine(
    url: str = "sqlite:///:memory:",
    *,
    echo: bool = False,
    **kwargs: Any,
) -> Engine:
    """Create a SQLAlchemy engine with sane defaults.

    Parameters
    ----------
    url:
        Database URL (``sqlite:///…``, ``postgresql://…``, etc.)
    echo:
        If ``True``, log all SQL.
    **kwargs:
        Extra arguments forwarded to ``sqlalchemy.create_engine``.
    """
    if not url.startswith("sqlite"):
        return _sa_create_engine(url, echo=echo, **kwargs)

    kwargs.setdefault("connect_args", {"check_same_thread": False})
    if url in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection, otherwise every session sees an empty database
        kwargs.setdefault("poolclass", StaticPool)

    engine = _sa_create_engine(url, echo=echo, **kwargs)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def engine_from_settings(settings: ControllerSettings) -> Engine:
    """Build the engine described by ``settings``."""
    return create_controller_engine(settings.database_url, echo=settings.echo_sql)


class ControllerSession(Session):
    """Pre-configured session with ``expire_on_commit=False``.

    Entities handed back by controllers stay readable after the
    surrounding ``session_scope`` commits.
    """

    def __init__(self, bind: Engine | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("expire_on_commit", False)
        super().__init__(bind=bind, **kwargs)


def session_factory(engine: Engine) -> sessionmaker[ControllerSession]:
    """Return a ``sessionmaker`` bound to *engine* that produces ``ControllerSession`` instances."""
    # sessionmaker passes its own expire_on_commit=True unless told otherwise
    return sessionmaker(bind=engine, class_=ControllerSession, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker[Any]) -> Iterator[Session]:
    """Run a unit of work: commit on success, rollback on error, always close.

    Example::

        factory = session_factory(engine)
        with session_scope(factory) as session:
            UserController(SQLAlchemyDAO(session, User)).save(user)
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        logger.debug("session_rolled_back")
        session.rollback()
        raise
    finally:
        session.close()


__all__ = [
    "create_controller_engine",
    "engine_from_settings",
    "ControllerSession",
    "session_factory",
    "session_scope",
]
