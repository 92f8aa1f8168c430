import pytest
import uuid
from sqlalchemy.exc import IntegrityError
from bookkeep.models.book import Book
from bookkeep.repos.book_repo import BookRepository


class TestBookRepository:
    """Test book repository layer."""

    def test_save_new_book(self, db_session):
        """Test persisting a new book through the repository."""
        book = Book(
            guid=uuid.uuid4(),
            title="Repository Book",
            author="Repo Author",
            isbn="9780306406157",
            is_active=True,
        )
        saved = BookRepository.save(db_session, book)

        assert saved.id is not None
        assert saved.title == "Repository Book"
        assert saved.description is None
        assert saved.created_on is not None

    def test_ids_increase(self, db_session, seed_book):
        first = seed_book(isbn="1111111111")
        second = seed_book(isbn="2222222222")
        assert second.id > first.id

    def test_get_returns_inactive(self, db_session, seed_book):
        book = seed_book(is_active=False)
        found = BookRepository.get(db_session, book.id)
        assert found is not None
        assert found.is_active is False

    def test_get_missing(self, db_session):
        assert BookRepository.get(db_session, 12345) is None

    def test_get_active(self, db_session, seed_book):
        active = seed_book(isbn="1111111111")
        inactive = seed_book(isbn="2222222222", is_active=False)

        assert BookRepository.get_active(db_session, active.id) is active
        assert BookRepository.get_active(db_session, inactive.id) is None

    def test_list_active_empty(self, db_session):
        """Test listing books when none exist."""
        assert BookRepository.list_active(db_session) == []

    def test_list_active_ordered_by_id(self, db_session, seed_book):
        first = seed_book(title="First", isbn="1111111111")
        seed_book(title="Deleted", isbn="2222222222", is_active=False)
        third = seed_book(title="Third", isbn="3333333333")

        books = BookRepository.list_active(db_session)
        assert [b.title for b in books] == ["First", "Third"]
        assert [b.id for b in books] == [first.id, third.id]

    def test_find_active_by_guid(self, db_session, seed_book):
        guid = uuid.uuid4()
        seed_book(guid=guid, isbn="1111111111", is_active=False)
        assert BookRepository.find_active_by_guid(db_session, guid) is None

        active = seed_book(guid=guid, isbn="2222222222")
        assert BookRepository.find_active_by_guid(db_session, guid) is active
        assert BookRepository.find_active_by_guid(db_session, uuid.uuid4()) is None

    def test_find_active_by_isbn(self, db_session, seed_book):
        book = seed_book(isbn="0-306-40615-2")

        assert BookRepository.find_active_by_isbn(db_session, "0-306-40615-2") is book
        # Stored spelling is compared as-is
        assert BookRepository.find_active_by_isbn(db_session, "0306406152") is None

    def test_find_active_by_isbn_excluding_book(self, db_session, seed_book):
        book = seed_book(isbn="1111111111")
        assert BookRepository.find_active_by_isbn(db_session, "1111111111", exclude_id=book.id) is None

        other = seed_book(isbn="1111111111", is_active=False)
        assert BookRepository.find_active_by_isbn(db_session, "1111111111", exclude_id=other.id) is book


class TestActiveUniqueIndexes:
    """The partial unique indexes allow duplicates among inactive rows only."""

    def test_inactive_duplicates_allowed(self, db_session, seed_book):
        guid = uuid.uuid4()
        seed_book(guid=guid, isbn="1111111111", is_active=False)
        seed_book(guid=guid, isbn="1111111111", is_active=False)
        seed_book(guid=guid, isbn="1111111111")

        assert len(BookRepository.list_active(db_session)) == 1

    def test_second_active_isbn_rejected(self, db_session, seed_book):
        seed_book(isbn="1111111111")
        with pytest.raises(IntegrityError) as exc_info:
            seed_book(isbn="1111111111")
        assert "isbn" in str(exc_info.value.orig).lower()
        db_session.rollback()

    def test_second_active_guid_rejected(self, db_session, seed_book):
        guid = uuid.uuid4()
        seed_book(guid=guid, isbn="1111111111")
        with pytest.raises(IntegrityError) as exc_info:
            seed_book(guid=guid, isbn="2222222222")
        assert "guid" in str(exc_info.value.orig).lower()
        db_session.rollback()
