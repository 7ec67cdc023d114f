"""
Store records - the two tables behind the SQL store backend.

DocumentRecord holds durable per-entity documents (users, AI interaction
logs) keyed by (collection, id). LiveNode holds the live key/value tree,
one row per path (e.g. "users/u-1", "system_settings").

Both keep their payload as a JSON column; the store reads and writes whole
payloads, so no column mirrors an individual document field except
order_key, which is copied out of the payload on write so interaction logs
can be ordered by timestamp in SQL.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from tutor_admin.db.base import Base


class DocumentRecord(Base):
    """SQLAlchemy ORM model for the 'documents' table."""

    __tablename__ = "documents"

    # Composite primary key: one document per id inside a collection
    collection: Mapped[str] = mapped_column(String(100), primary_key=True)
    id: Mapped[str] = mapped_column(String(255), primary_key=True)

    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    # order_key: string copy of the field queried with order_by (ISO
    # timestamps sort correctly as text)
    order_key: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<DocumentRecord {self.collection}/{self.id}>"


class LiveNode(Base):
    """SQLAlchemy ORM model for the 'live_nodes' table."""

    __tablename__ = "live_nodes"

    path: Mapped[str] = mapped_column(String(512), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<LiveNode {self.path}>"
