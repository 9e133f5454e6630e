"""Per-type snapshot policy configuration."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from versionable.encoders import Encoder, PickleEncoder
from versionable.persistence.repository import SnapshotStore


class PolicyConfig(BaseModel):
    """
    Static versioning configuration attached to a record type.
    """

    model_config = ConfigDict(
        extra="forbid", frozen=True, arbitrary_types_allowed=True
    )

    versioning_enabled: bool = Field(
        default=True,
        description="Whether mutations of this type produce snapshots at all.",
    )
    excluded_fields: frozenset[str] = Field(
        default_factory=frozenset,
        description="Fields whose changes never trigger a snapshot on update.",
    )
    retention_limit: int = Field(
        default=0,
        ge=0,
        description="Maximum snapshots kept per record; 0 keeps everything.",
    )
    encoder: Encoder = Field(
        default_factory=PickleEncoder,
        description="Codec used for snapshot payloads.",
    )
    store: Optional[SnapshotStore] = Field(
        default=None,
        description="Dedicated snapshot store; defaults to the manager's store.",
    )
    versioned_hidden_fields: frozenset[str] = Field(
        default_factory=frozenset,
        description="Hidden fields revealed while a snapshot is captured.",
    )
    created_field: str = Field(
        default="created_at", description="Creation timestamp field."
    )
    updated_field: str = Field(
        default="updated_at", description="Last-modified timestamp field."
    )
    deleted_field: Optional[str] = Field(
        default=None, description="Soft-delete marker field, if the type has one."
    )

    @field_validator("excluded_fields", "versioned_hidden_fields", mode="before")
    @classmethod
    def _coerce_field_set(cls, value):
        if value is None:
            return frozenset()
        if isinstance(value, str):
            return frozenset([value])
        return frozenset(value)

    @property
    def housekeeping_fields(self) -> frozenset[str]:
        """Timestamp and soft-delete fields maintained by the record store."""
        fields = {self.created_field, self.updated_field}
        if self.deleted_field:
            fields.add(self.deleted_field)
        return frozenset(fields)
