"""SQLAlchemy models for the snapshot tables.

`SnapshotColumnsMixin` carries the logical snapshot layout so that record types
can be bound to dedicated tables; `SnapshotRow` is the shared default table.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, LargeBinary, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from versionable.models.snapshot import REASON_MAX_LENGTH


class Base(DeclarativeBase):
    """Base class for all snapshot tables."""

    pass


class SnapshotColumnsMixin:
    """Columns shared by every snapshot table.

    Attributes:
        id: Auto-increment primary key; the canonical ordering key.
        owner_id: Primary key of the owning record, as a string.
        owner_type: Discriminator of the owning record type.
        actor_id: Actor responsible for the change, if known.
        payload: Encoded field mapping.
        reason: Optional short annotation.
        created_at: Timestamp when the snapshot was written.
        updated_at: Row bookkeeping timestamp.
    """

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    owner_id: Mapped[str] = mapped_column(String(255), index=True)
    owner_type: Mapped[str] = mapped_column(String(255), index=True)
    actor_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    payload: Mapped[bytes] = mapped_column(LargeBinary)
    reason: Mapped[Optional[str]] = mapped_column(
        String(REASON_MAX_LENGTH), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class SnapshotRow(SnapshotColumnsMixin, Base):
    """Default snapshot table shared by all record types."""

    __tablename__ = "versions"
