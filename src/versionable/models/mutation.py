"""Captured mutation events.

A `MutationEvent` is the frozen outcome of the snapshot decision for a single
flushed record. It carries a copy of the record's field values so that the
write can happen after the triggering session is gone, either inline on commit
or inside a queue worker.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class MutationEvent(BaseModel):
    """An approved mutation awaiting its snapshot write.

    Attributes:
        owner_type: Discriminator of the mutated record's runtime type.
        owner_id: String form of the record's primary key.
        is_insert: Whether the mutation created the record.
        values: Copy of the record's column values after the flush.
        previous: Dirty fields mapped to their values before the mutation.
        actor_id: Actor resolved when the mutation was captured.
        reason: Reason attached to the record for this snapshot.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    owner_type: str = Field(..., description="Discriminator of the record type.")
    owner_id: str = Field(..., description="Primary key of the record.")
    is_insert: bool = Field(
        default=False, description="Whether the mutation created the record."
    )
    values: dict[str, Any] = Field(
        default_factory=dict,
        description="Copy of the record's column values after the flush.",
    )
    previous: dict[str, Any] = Field(
        default_factory=dict,
        description="Dirty fields mapped to their pre-mutation values.",
    )
    actor_id: Optional[str] = Field(
        default=None, description="Actor resolved at capture time."
    )
    reason: Optional[str] = Field(
        default=None, description="Reason attached to the snapshot."
    )
