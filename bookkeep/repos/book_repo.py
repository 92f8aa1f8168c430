from sqlalchemy.orm import Session
from bookkeep.models.book import Book
from sqlalchemy import select
import uuid


class BookRepository:
    @staticmethod
    # Get a book by ID, active or not
    def get(db: Session, book_id: int) -> Book | None:
        return db.get(Book, book_id)

    @staticmethod
    # Get an active book by ID
    def get_active(db: Session, book_id: int) -> Book | None:
        stmt = select(Book).where(Book.id == book_id, Book.is_active.is_(True))
        return db.scalars(stmt).first()

    @staticmethod
    # List active books
    def list_active(db: Session) -> list[Book]:
        stmt = select(Book).where(Book.is_active.is_(True)).order_by(Book.id.asc())
        return list(db.scalars(stmt).all())

    @staticmethod
    # Find the active book holding a Guid
    def find_active_by_guid(db: Session, guid: uuid.UUID) -> Book | None:
        stmt = select(Book).where(Book.guid == guid, Book.is_active.is_(True))
        return db.scalars(stmt).first()

    @staticmethod
    # Find the active book holding an ISBN, optionally ignoring one book
    def find_active_by_isbn(
        db: Session, isbn: str, exclude_id: int | None = None
    ) -> Book | None:
        stmt = select(Book).where(Book.isbn == isbn, Book.is_active.is_(True))
        if exclude_id is not None:
            stmt = stmt.where(Book.id != exclude_id)
        return db.scalars(stmt).first()

    @staticmethod
    # Persist a new or modified book
    def save(db: Session, book: Book) -> Book:
        db.add(book)
        db.commit()
        db.refresh(book)
        return book
