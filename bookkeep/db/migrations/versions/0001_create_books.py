"""create books

Revision ID: 0001
Revises:
Create Date: 2025-05-19 05:35:50

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from bookkeep.models.base import UTCDateTime


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "books",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("guid", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("author", sa.String(length=100), nullable=False),
        sa.Column("isbn", sa.String(length=17), nullable=False),
        sa.Column("description", sa.String(length=2000), nullable=True),
        sa.Column("publication_year", sa.Integer(), nullable=True),
        sa.Column("genre", sa.String(length=50), nullable=True),
        sa.Column("cover_image_url", sa.String(length=500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_on", UTCDateTime(), nullable=False),
        sa.Column("updated_on", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index(
        "uq_books_guid_active",
        "books",
        ["guid"],
        unique=True,
        sqlite_where=sa.text("is_active = 1"),
        postgresql_where=sa.text("is_active"),
    )
    op.create_index(
        "uq_books_isbn_active",
        "books",
        ["isbn"],
        unique=True,
        sqlite_where=sa.text("is_active = 1"),
        postgresql_where=sa.text("is_active"),
    )


def downgrade() -> None:
    op.drop_index("uq_books_isbn_active", table_name="books")
    op.drop_index("uq_books_guid_active", table_name="books")
    op.drop_table("books")
