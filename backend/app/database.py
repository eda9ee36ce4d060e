import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .config import settings

logger = logging.getLogger(__name__)


def build_engine(url: str, busy_timeout: int | None = None) -> Engine:
    """
    Create an engine for the given URL.

    SQLite gets check_same_thread=False (FastAPI runs sync handlers in a
    thread pool), a busy timeout so concurrent slot claims queue for the
    write lock, and foreign keys switched on for every connection.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    sqlite_engine = create_engine(
        url,
        connect_args={
            "check_same_thread": False,
            "timeout": busy_timeout or settings.sqlite_busy_timeout,
        },
    )

    @event.listens_for(sqlite_engine, "connect")
    def enable_sqlite_fk(dbapi_connection, _):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return sqlite_engine


engine = build_engine(settings.resolved_database_url)
logger.info(f"Database engine created: dialect={engine.dialect.name}")

# Sessions are opened per request via get_db()
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


# FastAPI dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
