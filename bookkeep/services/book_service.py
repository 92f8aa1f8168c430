from __future__ import annotations
import logging
import uuid
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from bookkeep.core.errors import ConflictError, NotFoundError
from bookkeep.models.book import Book
from bookkeep.repos.book_repo import BookRepository
from bookkeep.schemas.book import BookPayload
from bookkeep.services.cover_service import CoverImageLookup
from bookkeep.validators.book import COVER_URL_RULES, NIL_GUID, validate_book

logger = logging.getLogger(__name__)


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


class BookService:
    """
    Create/read/update/soft-delete for books.

    Guid and ISBN are unique among active books only; the partial unique
    indexes on the table back the checks made here.
    """

    @staticmethod
    # Get an active book
    def get_book(db: Session, book_id: int) -> Book | None:
        return BookRepository.get_active(db, book_id)

    @staticmethod
    # List active books
    def list_books(db: Session) -> list[Book]:
        return BookRepository.list_active(db)

    @staticmethod
    # Create book
    def create_book(
        db: Session, data: BookPayload, covers: CoverImageLookup | None = None
    ) -> Book:
        # Network call happens before the session opens a transaction
        data = BookService.enrich_cover(data, covers)

        guid = data.guid
        if guid == NIL_GUID:
            guid = uuid.uuid4()
        elif BookRepository.find_active_by_guid(db, guid) is not None:
            raise ConflictError(f"A Book with Guid '{guid}' already exists.")

        if not _is_blank(data.isbn) and BookRepository.find_active_by_isbn(db, data.isbn):
            raise ConflictError(f"A Book with ISBN '{data.isbn}' already exists.")

        book = Book(
            guid=guid,
            title=data.title,
            author=data.author,
            isbn=data.isbn,
            description=data.description,
            publication_year=data.publication_year,
            genre=data.genre,
            cover_image_url=data.cover_image_url,
            is_active=True,
        )
        try:
            book = BookRepository.save(db, book)
        except IntegrityError as exc:
            db.rollback()
            conflict = BookService._conflict_from(exc, isbn=data.isbn, guid=guid)
            if conflict is None:
                raise
            raise conflict from exc

        logger.info("Created book %s (guid=%s)", book.id, book.guid)
        return book

    @staticmethod
    # Update book; an inactive book is updated but stays inactive
    def update_book(
        db: Session,
        book_id: int,
        data: BookPayload,
        covers: CoverImageLookup | None = None,
    ) -> Book:
        data = BookService.enrich_cover(data, covers)

        book = BookRepository.get(db, book_id)
        if book is None:
            raise NotFoundError(f"Book with Id '{book_id}' does not exist.")

        if not _is_blank(data.isbn) and BookRepository.find_active_by_isbn(
            db, data.isbn, exclude_id=book_id
        ):
            raise ConflictError(f"Another book with the ISBN '{data.isbn}' already exists.")

        book.title = data.title
        book.author = data.author
        book.isbn = data.isbn
        book.description = data.description
        book.publication_year = data.publication_year
        book.genre = data.genre
        book.cover_image_url = data.cover_image_url

        try:
            book = BookRepository.save(db, book)
        except IntegrityError as exc:
            db.rollback()
            conflict = BookService._conflict_from(exc, isbn=data.isbn, other=True)
            if conflict is None:
                raise
            raise conflict from exc

        logger.info("Updated book %s", book.id)
        return book

    @staticmethod
    # Soft delete book
    def delete_book(db: Session, book_id: int) -> Book:
        book = BookRepository.get(db, book_id)
        if book is None:
            raise NotFoundError(f"Book with Id '{book_id}' not found.")

        book.is_active = False
        book = BookRepository.save(db, book)
        logger.info("Marked book %s as inactive", book.id)
        return book

    @staticmethod
    # Fill in a missing cover URL from the lookup, best effort
    def enrich_cover(data: BookPayload, covers: CoverImageLookup | None) -> BookPayload:
        if covers is None or not _is_blank(data.cover_image_url) or _is_blank(data.isbn):
            return data
        try:
            url = covers.fetch_cover_url(data.isbn)
        except Exception:
            logger.warning("Cover lookup raised for ISBN %s", data.isbn, exc_info=True)
            return data
        if url is None:
            return data
        enriched = data.with_cover(url)
        # A found URL obeys the same cover_image_url rules as a supplied one
        violations = validate_book(enriched, rules=COVER_URL_RULES)
        if violations:
            logger.warning(
                "Discarding cover URL for ISBN %s: %s",
                data.isbn,
                "; ".join(v.message for v in violations),
            )
            return data
        return enriched

    @staticmethod
    def _conflict_from(
        exc: IntegrityError,
        isbn: str,
        guid: uuid.UUID | None = None,
        other: bool = False,
    ) -> ConflictError | None:
        """Map a unique-index violation raised at commit to a ConflictError."""
        detail = str(exc.orig or exc).lower()
        logger.warning("Unique constraint hit while saving book: %s", detail)
        if "guid" in detail and guid is not None:
            return ConflictError(f"A Book with Guid '{guid}' already exists.")
        if "isbn" in detail:
            if other:
                return ConflictError(f"Another book with the ISBN '{isbn}' already exists.")
            return ConflictError(f"A Book with ISBN '{isbn}' already exists.")
        return None
