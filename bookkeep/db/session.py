from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from collections.abc import Generator
import logging
from bookkeep.core.config import settings
from bookkeep.db.audit import install_audit_hook
from bookkeep.models.base import Base
import bookkeep.models.book  # registers Book

logger = logging.getLogger(__name__)


def build_engine(url: str) -> Engine:
    """
    Engine for the configured URL.
    SQLite needs cross-thread access (FastAPI runs sync routes in a threadpool);
    an in-memory SQLite database must also live on a single shared connection.
    """
    if url.startswith("sqlite"):
        options: dict[str, object] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
            options["poolclass"] = StaticPool
        return create_engine(url, future=True, **options)
    return create_engine(url, pool_pre_ping=True, future=True)


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)

# Every Session stamps audit columns on flush
install_audit_hook(Session)


def get_db() -> Generator[Session, None, None]:
    """
    One session per request; closed when the request is done.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create any missing tables."""
    target = bind or engine
    logger.info("Ensuring database schema", extra={"url": str(target.url)})
    Base.metadata.create_all(bind=target)
