from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Boolean, Constraint, Index, Integer, String, Uuid, text
import uuid
from bookkeep.models.base import AuditedEntity, Base

#Book
class Book(AuditedEntity, Base):
    __tablename__: str = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guid: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    author: Mapped[str] = mapped_column(String(100), nullable=False)
    isbn: Mapped[str] = mapped_column(String(17), nullable=False)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    publication_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    genre: Mapped[str | None] = mapped_column(String(50), nullable=True)
    cover_image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Uniqueness holds among active rows only; soft-deleted rows free their keys.
    __table_args__: tuple[Constraint | Index | dict[str, object], ...] = (
        Index(
            "uq_books_guid_active",
            "guid",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
        Index(
            "uq_books_isbn_active",
            "isbn",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<Book id={self.id} isbn={self.isbn!r} active={self.is_active}>"
