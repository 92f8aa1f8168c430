import datetime
from typing import Any
from sqlalchemy import DateTime
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class Base(DeclarativeBase):
    pass


class UTCDateTime(TypeDecorator[datetime.datetime]):
    """Timezone-aware UTC datetimes on every backend.

    SQLite stores DATETIME without an offset; values coming back are tagged
    as UTC so they compare cleanly with ``datetime.now(timezone.utc)``.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(
        self, value: datetime.datetime | None, dialect: Dialect
    ) -> datetime.datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=datetime.timezone.utc)
        return value.astimezone(datetime.timezone.utc)

    def process_result_value(
        self, value: Any | None, dialect: Dialect
    ) -> datetime.datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=datetime.timezone.utc)
        return value.astimezone(datetime.timezone.utc)


#Audited entity
class AuditedEntity:
    """
    Capability mixin for records carrying audit timestamps.
    The values are owned by the flush hook in ``bookkeep.db.audit``.
    """

    # active_history: the prior value is loaded on set so a change can be reverted
    created_on: Mapped[datetime.datetime] = mapped_column(
        UTCDateTime, nullable=False, active_history=True
    )
    updated_on: Mapped[datetime.datetime] = mapped_column(UTCDateTime, nullable=False)
