import pytest
import uuid
from collections.abc import Callable, Iterator
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from fastapi.testclient import TestClient

from bookkeep.main import app
from bookkeep.db.session import build_engine, get_db
from bookkeep.models.base import Base
from bookkeep.models.book import Book
from bookkeep.schemas.book import BookPayload
from bookkeep.services.cover_service import get_cover_lookup

# In-memory SQLite; build_engine pins it to a single shared connection
TEST_DATABASE_URL = "sqlite://"


class FakeCoverLookup:
    """Cover lookup double recording the ISBNs it was asked about."""

    def __init__(self, url: str | None = None):
        self.url: str | None = url
        self.calls: list[str] = []

    def fetch_cover_url(self, isbn: str) -> str | None:
        self.calls.append(isbn)
        return self.url


@pytest.fixture
def test_engine() -> Iterator[Engine]:
    """Fresh schema for each test."""
    engine = build_engine(TEST_DATABASE_URL)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=test_engine, autocommit=False, autoflush=False, future=True)


@pytest.fixture
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """Create a fresh database session for each test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def fake_covers() -> type[FakeCoverLookup]:
    return FakeCoverLookup


@pytest.fixture
def cover_lookup() -> FakeCoverLookup:
    return FakeCoverLookup()


@pytest.fixture
def test_client(
    session_factory: sessionmaker[Session], cover_lookup: FakeCoverLookup
) -> Iterator[TestClient]:
    """Test client bound to the in-memory database and the fake cover lookup."""

    def override_get_db() -> Iterator[Session]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cover_lookup] = lambda: cover_lookup
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_payload() -> Callable[..., BookPayload]:
    """Factory for valid payloads; keyword arguments override fields."""

    def _make(**overrides: object) -> BookPayload:
        data: dict[str, object] = {
            "guid": uuid.uuid4(),
            "title": "The Pragmatic Programmer",
            "author": "Andrew Hunt",
            "isbn": "9780201616224",
            "description": "From journeyman to master.",
            "publication_year": 1999,
            "genre": "Software",
            "cover_image_url": "http://example.com/cover.jpg",
        }
        data.update(overrides)
        return BookPayload.model_validate(data)

    return _make


@pytest.fixture
def book_json() -> Callable[..., dict[str, object]]:
    """Factory for request bodies; keyword arguments override fields."""

    def _make(**overrides: object) -> dict[str, object]:
        data: dict[str, object] = {
            "guid": str(uuid.uuid4()),
            "title": "Clean Code",
            "author": "Robert C. Martin",
            "isbn": "9780132350884",
            "description": "A handbook of agile software craftsmanship.",
            "publication_year": 2008,
            "genre": "Software",
            "cover_image_url": "https://example.com/covers/clean-code.jpg",
        }
        data.update(overrides)
        return data

    return _make


@pytest.fixture
def seed_book(db_session: Session) -> Callable[..., Book]:
    """Insert a book directly, bypassing the service checks."""

    def _seed(
        title: str = "Sample Book",
        isbn: str = "1234567890",
        is_active: bool = True,
        guid: uuid.UUID | None = None,
    ) -> Book:
        book = Book(
            guid=guid or uuid.uuid4(),
            title=title,
            author="Sample Author",
            isbn=isbn,
            description="Sample Description",
            publication_year=2020,
            genre="Fiction",
            cover_image_url="http://example.com/cover.jpg",
            is_active=is_active,
        )
        db_session.add(book)
        db_session.commit()
        db_session.refresh(book)
        return book

    return _seed
