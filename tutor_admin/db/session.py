"""
Database session management - SQLAlchemy engine and session factory.
This module provides the database connection used by the SQL store backend.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from tutor_admin.core.config import settings

# ---------------------------------------------------------------------------
# DATABASE ENGINE
# ---------------------------------------------------------------------------
# pool_pre_ping=True: check pooled connections with "SELECT 1" before use so
# a restarted database does not surface as a StoreError on the next action.
# The engine is lazy; no connection is opened until the first session runs.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
)

# ---------------------------------------------------------------------------
# SESSION FACTORY
# ---------------------------------------------------------------------------
# autocommit=False: the store commits explicitly after each write
# autoflush=False: flushes happen only when the store asks for them
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create the store tables if they do not exist yet."""
    # Imported for its side effect of registering the tables on Base.metadata
    from tutor_admin.models import record  # noqa: F401
    from tutor_admin.db.base import Base

    Base.metadata.create_all(bind=engine)
