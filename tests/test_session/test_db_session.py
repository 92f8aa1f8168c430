from __future__ import annotations

from sqlalchemy.orm import Session
from unittest.mock import Mock, patch
from sqlalchemy import inspect
from sqlalchemy.pool import StaticPool

from bookkeep.db.session import SessionLocal, build_engine, engine, get_db, init_db


class TestDatabaseSession:
    """Test database session functionality."""

    def test_session_local_configuration(self):
        """Test that SessionLocal is properly configured."""
        assert hasattr(SessionLocal, '__call__')
        assert SessionLocal.kw.get('autocommit') is False
        assert SessionLocal.kw.get('autoflush') is False

    def test_engine_configuration(self):
        """Test that engine is properly configured."""
        assert engine is not None
        assert engine.url is not None

    @patch('bookkeep.db.session.SessionLocal')
    def test_get_db_closes_session(self, mock_session_local):
        """The request session is closed once the generator finishes."""
        mock_db = Mock(spec=Session)
        mock_session_local.return_value = mock_db

        generator = get_db()
        session = next(generator)

        mock_session_local.assert_called_once()
        assert session == mock_db
        mock_db.close.assert_not_called()

        try:
            next(generator)
        except StopIteration:
            pass

        mock_db.close.assert_called_once()

    @patch('bookkeep.db.session.SessionLocal')
    def test_get_db_closes_session_on_error(self, mock_session_local):
        mock_db = Mock(spec=Session)
        mock_session_local.return_value = mock_db

        generator = get_db()
        next(generator)
        try:
            generator.throw(RuntimeError("request failed"))
        except RuntimeError:
            pass

        mock_db.close.assert_called_once()


class TestBuildEngine:
    """Test engine construction per backend."""

    def test_in_memory_sqlite_uses_static_pool(self):
        mem_engine = build_engine("sqlite://")
        try:
            assert isinstance(mem_engine.pool, StaticPool)
        finally:
            mem_engine.dispose()

    def test_file_sqlite_uses_regular_pool(self, tmp_path):
        file_engine = build_engine(f"sqlite:///{tmp_path / 'books.db'}")
        try:
            assert not isinstance(file_engine.pool, StaticPool)
        finally:
            file_engine.dispose()

    def test_init_db_creates_books_table(self):
        mem_engine = build_engine("sqlite://")
        try:
            init_db(mem_engine)
            inspector = inspect(mem_engine)
            assert "books" in inspector.get_table_names()
            index_names = {index["name"] for index in inspector.get_indexes("books")}
            assert {"uq_books_guid_active", "uq_books_isbn_active"} <= index_names
        finally:
            mem_engine.dispose()
