import logging
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from .settings import DATABASE_URL, DB_ECHO

logger = logging.getLogger(__name__)

Base = declarative_base()


def get_database_url() -> str:
    """Get properly formatted database URL"""
    db_url = DATABASE_URL
    # Heroku/Railway style URLs
    if db_url.startswith("postgres://"):
        db_url = db_url.replace("postgres://", "postgresql://", 1)
    return db_url


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def register_sqlite_functions(sqlite_engine) -> None:
    """Replace SQLite's ASCII-only lower() with Python's str.lower on every connection"""
    @event.listens_for(sqlite_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def _create_engine():
    db_url = get_database_url()
    if db_url.startswith("sqlite"):
        # SQLite connections are shared across the threadpool FastAPI runs sync work in
        sqlite_engine = create_engine(db_url, echo=DB_ECHO, connect_args={"check_same_thread": False})
        register_sqlite_functions(sqlite_engine)
        return sqlite_engine
    return create_engine(db_url, echo=DB_ECHO, pool_pre_ping=True)


# One engine per process, created on import and reused by every request
engine = _create_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create tables from ORM metadata if they are missing."""
    # Import models so they register on Base.metadata
    from ..models import college, course, file, saved_file  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/checked")


def ping_db(db: Session) -> bool:
    db.execute(text("SELECT 1"))
    return True


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a session that is always closed."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
