"""Tests for SQLAlchemyDAO against an in-memory SQLite database."""

from __future__ import annotations

import json

import pytest
from sqlalchemy import exc, text

from entity_controller.core.errors import (
    ConfigError,
    EntityNotFoundError,
    InvalidPaginationError,
    InvalidSortCriterionError,
    PersistenceError,
)
from entity_controller.core.logging import configure_logging
from entity_controller.core.protocols import DAO, ReadableDAO, WriteableDAO
from entity_controller.core.sorting import SortCriterion
from entity_controller.dao import SQLAlchemyDAO
from tests._support.models import Book, Edition


def _titles(rows: list[Book]) -> list[str]:
    return [book.title for book in rows]


def _detach(session, *objs) -> None:
    session.commit()
    for obj in objs:
        session.expunge(obj)


class TestConstruction:
    def test_satisfies_dao_protocols(self, book_dao):
        assert isinstance(book_dao, DAO)
        assert isinstance(book_dao, ReadableDAO)
        assert isinstance(book_dao, WriteableDAO)

    def test_properties(self, session, book_dao):
        assert book_dao.session is session
        assert book_dao.entity_class is Book

    def test_none_session_rejected(self):
        with pytest.raises(ConfigError):
            SQLAlchemyDAO(None, Book)  # type: ignore[arg-type]

    def test_unmapped_class_rejected(self, session):
        with pytest.raises(ConfigError) as exc_info:
            SQLAlchemyDAO(session, object)
        assert isinstance(exc_info.value.cause, exc.NoInspectionAvailable)


class TestCountAll:
    def test_empty(self, book_dao):
        assert book_dao.count_all() == 0

    def test_counts_saved(self, book_dao, books):
        assert book_dao.count_all() == 3


class TestFindById:
    def test_found(self, book_dao, books):
        assert book_dao.find_by_id(books[0].id) is books[0]

    def test_missing_returns_none(self, book_dao, books):
        assert book_dao.find_by_id(999) is None

    def test_composite_key(self, edition_dao):
        edition_dao.save(Edition(book_id=1, number=2, label="second"))
        assert edition_dao.find_by_id((1, 2)).label == "second"


class TestFindAll:
    def test_all(self, book_dao, books):
        assert sorted(_titles(book_dao.find_all())) == sorted(_titles(books))

    def test_empty(self, book_dao):
        assert book_dao.find_all() == []

    def test_page_without_sort_ordered_by_primary_key(self, book_dao, books):
        assert _titles(book_dao.find_all(0, 2)) == ["Dune", "Children of Dune"]
        assert _titles(book_dao.find_all(2, 2)) == ["Anathem"]

    def test_page_beyond_end(self, book_dao, books):
        assert book_dao.find_all(10, 5) == []

    def test_zero_max_results(self, book_dao, books):
        assert book_dao.find_all(0, 0) == []

    def test_max_results_only(self, book_dao, books):
        assert _titles(book_dao.find_all(None, 1)) == ["Dune"]

    def test_first_result_only(self, book_dao, books):
        assert _titles(book_dao.find_all(1)) == ["Children of Dune", "Anathem"]

    def test_sort_ascending(self, book_dao, books):
        rows = book_dao.find_all(0, None, SortCriterion.asc("title"))
        assert _titles(rows) == ["Anathem", "Children of Dune", "Dune"]

    def test_sort_descending(self, book_dao, books):
        rows = book_dao.find_all(None, None, SortCriterion.desc("year"))
        assert [book.year for book in rows] == [2008, 1976, 1965]

    def test_multiple_criteria(self, book_dao, books):
        rows = book_dao.find_all(0, 10, SortCriterion.asc("author"), SortCriterion.desc("year"))
        assert _titles(rows) == ["Children of Dune", "Dune", "Anathem"]

    def test_sorted_page(self, book_dao, books):
        assert _titles(book_dao.find_all(1, 1, SortCriterion.asc("title"))) == ["Children of Dune"]

    @pytest.mark.parametrize("first_result, max_results", [(-1, 10), (0, -1)])
    def test_negative_page_rejected(self, book_dao, first_result, max_results):
        with pytest.raises(InvalidPaginationError):
            book_dao.find_all(first_result, max_results)

    def test_unknown_sort_property_rejected(self, book_dao, books):
        with pytest.raises(InvalidSortCriterionError) as exc_info:
            book_dao.find_all(0, 10, SortCriterion.asc("colour"))
        assert exc_info.value.context.entity == "Book"


class TestFindByIds:
    def test_in_requested_order(self, book_dao, books):
        ids = [books[2].id, books[0].id]
        assert book_dao.find_by_ids(*ids) == [books[2], books[0]]

    def test_missing_ids_skipped(self, book_dao, books):
        assert book_dao.find_by_ids(999, books[1].id) == [books[1]]

    def test_repeated_ids_returned_once(self, book_dao, books):
        assert book_dao.find_by_ids(books[0].id, books[0].id) == [books[0]]

    def test_no_ids(self, book_dao, books):
        assert book_dao.find_by_ids() == []

    def test_composite_keys(self, edition_dao):
        first = Edition(book_id=1, number=1)
        second = Edition(book_id=1, number=2)
        edition_dao.save(first)
        edition_dao.save(second)
        assert edition_dao.find_by_ids((1, 2), (9, 9), (1, 1)) == [second, first]


class TestFindByExample:
    def test_matches_set_properties(self, book_dao, books):
        rows = book_dao.find_by_example(Book(author="Herbert"))
        assert sorted(_titles(rows)) == ["Children of Dune", "Dune"]

    def test_all_properties_combined(self, book_dao, books):
        rows = book_dao.find_by_example(Book(author="Herbert", year=1976))
        assert _titles(rows) == ["Children of Dune"]

    def test_primary_key_ignored(self, book_dao, books):
        rows = book_dao.find_by_example(Book(id=999, author="Stephenson"))
        assert _titles(rows) == ["Anathem"]

    def test_empty_example_matches_everything(self, book_dao, books):
        assert len(book_dao.find_by_example(Book())) == 3

    def test_no_match(self, book_dao, books):
        assert book_dao.find_by_example(Book(author="Le Guin")) == []

    def test_example_is_not_persisted(self, session, book_dao, books):
        example = Book(title="Probe")
        session.add(example)
        assert book_dao.find_by_example(example) == []
        session.expunge(example)
        assert book_dao.count_all() == 3


class TestRefresh:
    def test_reloads_from_store(self, session, book_dao, books):
        session.execute(text("UPDATE books SET title = 'Dune (revised)' WHERE id = :id"), {"id": books[0].id})
        assert book_dao.refresh(books[0]) is books[0]
        assert books[0].title == "Dune (revised)"

    def test_detached_instance_fails(self, session, book_dao, books):
        _detach(session, books[0])
        with pytest.raises(PersistenceError) as exc_info:
            book_dao.refresh(books[0])
        assert exc_info.value.context.operation == "refresh"


class TestReattach:
    def test_attached_instance_returned_as_is(self, book_dao, books):
        assert book_dao.reattach(books[0]) is books[0]

    def test_detached_instance(self, session, book_dao, books):
        _detach(session, books[0])
        attached = book_dao.reattach(books[0])
        assert attached in session
        assert attached.title == "Dune"
        assert not session.dirty
        assert book_dao.count_all() == 3

    def test_transient_instance_fails(self, book_dao):
        with pytest.raises(PersistenceError) as exc_info:
            book_dao.reattach(Book(title="Never saved"))
        assert exc_info.value.context.operation == "reattach"

    def test_edited_detached_instance(self, session, book_dao, books):
        _detach(session, books[0])
        books[0].title = "edited"

        assert book_dao.reattach(books[0]) is books[0]
        assert books[0] in session
        assert books[0].title == "Dune"
        session.flush()
        stored = session.execute(text("SELECT title FROM books WHERE id = :id"), {"id": books[0].id})
        assert stored.scalar() == "Dune"

    def test_edited_detached_instance_already_loaded(self, session, book_dao, books):
        book_id = books[0].id
        _detach(session, books[0])
        loaded = book_dao.find_by_id(book_id)
        books[0].title = "edited"

        assert book_dao.reattach(books[0]) is loaded
        assert loaded.title == "Dune"
        assert books[0] not in session


class TestSave:
    def test_assigns_primary_key(self, session, book_dao):
        book = Book(title="Dune")
        book_dao.save(book)
        assert book.id is not None
        assert book in session

    def test_flushes(self, session, book_dao):
        book_dao.save(Book(title="Dune"))
        assert session.execute(text("SELECT count(*) FROM books")).scalar() == 1

    def test_does_not_commit(self, engine, session, book_dao):
        book_dao.save(Book(title="Dune"))
        session.rollback()
        assert book_dao.count_all() == 0

    def test_constraint_violation_wrapped(self, book_dao):
        with pytest.raises(PersistenceError) as exc_info:
            book_dao.save(Book(author="Nobody"))
        error = exc_info.value
        assert isinstance(error.cause, exc.IntegrityError)
        assert error.__cause__ is error.cause
        assert error.context.entity == "Book"
        assert error.context.operation == "save"


class TestUpdate:
    def test_attached_instance(self, book_dao, books):
        books[0].year = 1966
        assert book_dao.update(books[0]) is books[0]
        assert book_dao.find_by_example(Book(year=1966)) == [books[0]]

    def test_detached_instance(self, session, book_dao, books):
        _detach(session, books[0])
        books[0].title = "Dune Messiah"
        updated = book_dao.update(books[0])
        assert updated is not books[0]
        assert updated in session
        stored = session.execute(text("SELECT title FROM books WHERE id = :id"), {"id": books[0].id})
        assert stored.scalar() == "Dune Messiah"


class TestMerge:
    def test_returns_managed_copy(self, session, book_dao, books):
        copy = Book(id=books[1].id, title="Children of Dune", author="F. Herbert", year=1976)
        merged = book_dao.merge(copy)
        assert merged is books[1]
        assert merged.author == "F. Herbert"
        assert copy not in session

    def test_new_instance_becomes_pending(self, session, book_dao, books):
        merged = book_dao.merge(Book(id=50, title="Snow Crash"))
        assert merged in session.new
        assert book_dao.count_all() == 4


class TestDelete:
    def test_attached_instance(self, book_dao, books):
        book_dao.delete(books[0])
        assert book_dao.count_all() == 2
        assert book_dao.find_by_ids(books[0].id) == []

    def test_detached_instance(self, session, book_dao, books):
        book_id = books[0].id
        _detach(session, books[0])
        book_dao.delete(books[0])
        assert book_dao.count_all() == 2
        assert book_dao.find_by_id(book_id) is None

    def test_transient_instance_fails(self, book_dao, books):
        with pytest.raises(PersistenceError):
            book_dao.delete(Book(title="Never saved"))
        assert book_dao.count_all() == 3


class TestDeleteById:
    def test_existing(self, book_dao, books):
        book_dao.delete_by_id(books[1].id)
        assert book_dao.count_all() == 2

    def test_unknown_id(self, book_dao, books):
        with pytest.raises(EntityNotFoundError) as exc_info:
            book_dao.delete_by_id(999)
        assert exc_info.value.context.entity_id == 999
        assert exc_info.value.context.operation == "delete_by_id"
        assert book_dao.count_all() == 3


class TestEvict:
    def test_detaches(self, session, book_dao, books):
        book_dao.evict(books[0])
        assert books[0] not in session
        assert book_dao.count_all() == 3

    def test_not_in_session_is_noop(self, session, book_dao):
        book = Book(title="Loose")
        book_dao.evict(book)
        assert book not in session

    def test_unmapped_object_fails(self, book_dao):
        with pytest.raises(PersistenceError):
            book_dao.evict(object())


class TestIsPersistent:
    def test_transient(self, book_dao):
        assert book_dao.is_persistent(Book(title="New")) is False

    def test_pending(self, session, book_dao):
        book = Book(title="New")
        session.add(book)
        assert book_dao.is_persistent(book) is False

    def test_saved(self, book_dao, books):
        assert book_dao.is_persistent(books[0]) is True

    def test_detached(self, session, book_dao, books):
        _detach(session, books[0])
        assert book_dao.is_persistent(books[0]) is True


def _json_lines(out: str) -> list[dict]:
    return [json.loads(line) for line in out.splitlines() if line.startswith("{")]


class TestLogging:
    @pytest.fixture(autouse=True)
    def _debug_json_logs(self):
        configure_logging(level="DEBUG", json_format=True, cache_logger_on_first_use=False)

    def test_write_events(self, capsys, book_dao):
        book = Book(title="Dune")
        book_dao.save(book)
        book.year = 1965
        book_dao.update(book)
        book_dao.delete(book)

        records = _json_lines(capsys.readouterr().out)
        assert [r["event"] for r in records] == ["entity_saved", "entity_updated", "entity_deleted"]
        for record in records:
            assert record["entity"] == "Book"
            assert record["entity_id"] == 1
            assert record["log.level"] == "debug"
            assert record["log.logger"] == "entity_controller.dao.sqlalchemy_dao"

    def test_delete_by_id_event(self, capsys, book_dao, books):
        capsys.readouterr()
        book_dao.delete_by_id(books[1].id)
        (record,) = _json_lines(capsys.readouterr().out)
        assert record["event"] == "entity_deleted"
        assert record["entity_id"] == books[1].id

    def test_failure_logged_as_warning(self, capsys, book_dao):
        with pytest.raises(PersistenceError):
            book_dao.save(Book(author="Nobody"))
        (record,) = _json_lines(capsys.readouterr().out)
        assert record["event"] == "dao_operation_failed"
        assert record["log.level"] == "warning"
        assert record["operation"] == "save"

    def test_reads_are_silent(self, capsys, book_dao, books):
        capsys.readouterr()
        book_dao.find_all()
        book_dao.count_all()
        assert _json_lines(capsys.readouterr().out) == []
