"""
Account store connection (PostgreSQL via SQLAlchemy).

Holds the `users` table: credentials, role and verification state.
Everything else about a user lives in the MongoDB profile document.
"""
import logging
from contextlib import contextmanager

from sqlalchemy import (
    Boolean, Column, DateTime, Integer, MetaData, String, Table, create_engine, func, text
)
from sqlalchemy.orm import sessionmaker

from jobboard.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # Sessions are opened from FastAPI's threadpool
        return {"connect_args": {"check_same_thread": False}}
    # pool_size=5: maintain 5 connections ready
    # max_overflow=10: allow 10 extra connections under load
    return {"pool_size": 5, "max_overflow": 10, "pool_pre_ping": True}


engine = create_engine(
    settings.postgres_url,
    echo=False,
    **_engine_kwargs(settings.postgres_url)
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

metadata = MetaData()

users_table = Table(
    "users",
    metadata,
    Column("user_id", String(64), primary_key=True),
    Column("email", String(255), nullable=False, unique=True, index=True),
    Column("password_hash", String(255), nullable=False),
    Column("role", String(20), nullable=False),
    Column("email_verified", Boolean, nullable=False, default=False),
    Column("is_active", Boolean, nullable=False, default=True),
    # Bumped on password change; access tokens carry it as "ver"
    Column("token_version", Integer, nullable=False, default=0, server_default="0"),
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
)


def init_postgres_schema():
    """Create account store tables if they do not exist."""
    metadata.create_all(engine)
    logger.info("Account store schema ready")


@contextmanager
def get_db_session():
    """
    Context manager for database sessions.
    Usage:
        with get_db_session() as db:
            db.execute(text("SELECT * FROM users"))
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def test_postgres_connection() -> bool:
    """
    Test if the account store is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        with get_db_session() as db:
            result = db.execute(text("SELECT 1 as test"))
            row = result.fetchone()
            return row[0] == 1
    except Exception as e:
        logger.error("Account store connection failed: %s", e)
        return False


# Not a pytest test
test_postgres_connection.__test__ = False


def execute_raw_sql(sql: str, params: dict = None) -> list:
    """
    Execute raw SQL and return results as list of dicts.
    """
    with get_db_session() as db:
        result = db.execute(text(sql), params or {})
        if not result.returns_rows:
            return []
        columns = result.keys()
        return [dict(zip(columns, row)) for row in result.fetchall()]
