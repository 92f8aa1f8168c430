"""
Audit timestamps for ``AuditedEntity`` records.

``stamp_audit_fields`` runs as a ``before_flush`` listener, so the stamps are
written by the same flush (and transaction) as the rows they describe.
"""
import datetime
import logging
from collections.abc import Iterable
from typing import Any
from sqlalchemy import event
from sqlalchemy.orm import Session, attributes

from bookkeep.models.base import AuditedEntity

logger = logging.getLogger(__name__)

_ONE_TICK = datetime.timedelta(microseconds=1)


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _as_utc(value: datetime.datetime) -> datetime.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value


def _audited(objects: Iterable[object]) -> list[AuditedEntity]:
    return [obj for obj in objects if isinstance(obj, AuditedEntity)]


def stamp_audit_fields(session: Session, flush_context: Any, instances: Any) -> None:
    """Stamp created_on/updated_on on pending inserts and updates."""
    now = utcnow()

    for entity in _audited(session.new):
        entity.created_on = now
        entity.updated_on = now

    for entity in _audited(session.dirty):
        # created_on is write-once: drop any in-memory change before it is flushed
        history = attributes.get_history(entity, "created_on")
        if history.has_changes() and history.deleted:
            logger.debug("Discarding change to created_on on %r", entity)
            attributes.set_committed_value(entity, "created_on", history.deleted[0])

        stamp = now
        previous = entity.updated_on
        if previous is not None and stamp <= _as_utc(previous):
            # Keep updated_on strictly increasing under coarse clocks
            stamp = _as_utc(previous) + _ONE_TICK
        entity.updated_on = stamp


def install_audit_hook(target: Any = Session) -> None:
    """Register the flush hook on a Session class or sessionmaker (idempotent)."""
    if not event.contains(target, "before_flush", stamp_audit_fields):
        event.listen(target, "before_flush", stamp_audit_fields)
