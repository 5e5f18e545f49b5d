"""
Shared pytest fixtures for entity-controller tests.

Every test gets its own in-memory SQLite database with the sample
entities from ``tests._support.models`` created.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest
import structlog
from sqlalchemy.engine import Engine

from entity_controller.core.orm import (
    ControllerSession,
    EntityBase,
    create_controller_engine,
    session_factory,
)
from entity_controller.core.settings import clear_settings_cache
from entity_controller.dao import SQLAlchemyDAO
from tests._support.models import Book, Edition


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine with all sample tables created."""
    eng = create_controller_engine("sqlite:///:memory:")
    EntityBase.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine: Engine) -> Generator[ControllerSession, None, None]:
    """ControllerSession bound to the in-memory engine."""
    with ControllerSession(bind=engine) as sess:
        yield sess


@pytest.fixture
def factory(engine: Engine):
    return session_factory(engine)


@pytest.fixture
def book_dao(session: ControllerSession) -> SQLAlchemyDAO[Book, int]:
    return SQLAlchemyDAO(session, Book)


@pytest.fixture
def edition_dao(session: ControllerSession) -> SQLAlchemyDAO[Edition, tuple[int, int]]:
    return SQLAlchemyDAO(session, Edition)


@pytest.fixture
def books(book_dao: SQLAlchemyDAO[Book, int]) -> list[Book]:
    """Three saved books, ids 1..3 in insertion order."""
    seeded = [
        Book(title="Dune", author="Herbert", year=1965),
        Book(title="Children of Dune", author="Herbert", year=1976),
        Book(title="Anathem", author="Stephenson", year=2008),
    ]
    for book in seeded:
        book_dao.save(book)
    return seeded


@pytest.fixture(autouse=True)
def _reset_global_state() -> Generator[None, None, None]:
    """Settings cache and structlog configuration never leak between tests."""
    clear_settings_cache()
    yield
    clear_settings_cache()
    structlog.reset_defaults()
