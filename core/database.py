from sqlalchemy.exc import IntegrityError
from sqlmodel import SQLModel, create_engine, Session
from typing import Callable, Generator, TypeVar
import logging

from core.config import settings

T = TypeVar("T")

logger = logging.getLogger(__name__)

# ============================================================
# ✅ Engine (PostgreSQL in production, SQLite for local dev)
# ============================================================
DATABASE_URL = settings.DATABASE_URL
IS_SQLITE = DATABASE_URL.startswith("sqlite")

if IS_SQLITE:
    logger.warning("Using SQLite database at %s; partial indexes need SQLite >= 3.8.", DATABASE_URL)

engine = create_engine(
    DATABASE_URL,
    echo=settings.DEBUG and not settings.IS_PRODUCTION and settings.LOG_LEVEL == "DEBUG",
    pool_pre_ping=not IS_SQLITE,
    connect_args={"check_same_thread": False} if IS_SQLITE else {},
)


# ============================================================
# ✅ Schema bootstrap (called from the app lifespan and seed script)
# ============================================================
def create_db_and_tables() -> None:
    """Create every table and index registered on the SQLModel metadata."""
    # table classes must be registered on the metadata first
    import models.models  # noqa: F401

    try:
        SQLModel.metadata.create_all(engine)
        logger.info("Database schema is up to date.")
    except Exception as e:
        logger.error("Failed to create tables: %s", e)
        raise


# ============================================================
# ✅ Keyed upserts (last writer wins)
# ============================================================
def commit_keyed_upsert(session: Session, stage: Callable[[], T]) -> T:
    """
    Stage a write keyed on a unique column and commit it.

    ``stage`` reads the row by its key and adds either a new row or the updated
    existing one. When a concurrent writer inserts the same key between that read
    and our commit, the transaction is rolled back and ``stage`` runs once more,
    now updating the row the other writer created.
    """
    try:
        staged = stage()
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.info("Keyed insert lost a race, re-applying as update: %s", e.orig)
        staged = stage()
        session.commit()
    session.refresh(staged)
    return staged


# ============================================================
# ✅ Dependency: one session per request
# ============================================================
def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session
