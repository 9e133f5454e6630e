"""Data model for persisted record snapshots.

A snapshot captures the complete field set of a record at the moment a
qualifying mutation was committed.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

REASON_MAX_LENGTH = 100


class Snapshot(BaseModel):
    """An immutable, full-state capture of a record.

    Attributes:
        id: Monotonic identifier assigned by the store; the canonical ordering key.
        owner_type: Discriminator of the record type this snapshot belongs to.
        owner_id: String form of the record's primary key.
        actor_id: Identifier of the actor responsible for the change, if known.
        payload: Encoded field mapping.
        reason: Optional short annotation supplied by the caller.
        created_at: When the snapshot was written.
        updated_at: Row bookkeeping timestamp; equal to created_at.
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Monotonic identifier assigned by the store.")
    owner_type: str = Field(
        ..., description="Discriminator of the owning record type."
    )
    owner_id: str = Field(..., description="Primary key of the owning record.")
    actor_id: Optional[str] = Field(
        default=None, description="Actor responsible for the change."
    )
    payload: bytes = Field(..., description="Encoded field mapping.")
    reason: Optional[str] = Field(
        default=None,
        max_length=REASON_MAX_LENGTH,
        description="Optional short annotation supplied by the caller.",
    )
    created_at: datetime = Field(..., description="When the snapshot was written.")
    updated_at: Optional[datetime] = Field(
        default=None, description="Row bookkeeping timestamp."
    )

    @property
    def owner(self) -> tuple[str, str]:
        return self.owner_type, self.owner_id
