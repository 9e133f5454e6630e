"""Persistence interface for snapshot rows.

This module defines the abstract contract every snapshot backend implements.
Snapshots are only ever appended or deleted as whole rows; all queries order
by the snapshot id, which is the canonical ordering key.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from versionable.models.snapshot import Snapshot


class SnapshotStore(ABC):
    """Abstract interface for persisting and querying snapshots."""

    @abstractmethod
    def append(
        self,
        owner_type: str,
        owner_id: str,
        payload: bytes,
        actor_id: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> Snapshot:
        """Persists a new snapshot row.

        Args:
            owner_type: Discriminator of the owning record type.
            owner_id: Primary key of the owning record.
            payload: Encoded field mapping.
            actor_id: Optional responsible actor.
            reason: Optional short annotation.

        Returns:
            The stored snapshot with its assigned id and timestamps.

        Raises:
            SnapshotWriteError: If the backend rejects the insert.
        """
        pass  # pragma: no cover

    @abstractmethod
    def get(self, snapshot_id: int) -> Optional[Snapshot]:
        """Retrieves a snapshot by id, or None if it does not exist."""
        pass  # pragma: no cover

    @abstractmethod
    def latest(self, owner_type: str, owner_id: str) -> Optional[Snapshot]:
        """Retrieves the newest snapshot for an owner, or None."""
        pass  # pragma: no cover

    @abstractmethod
    def list_for_owner(
        self, owner_type: str, owner_id: str, limit: Optional[int] = None
    ) -> list[Snapshot]:
        """Lists the snapshots of an owner.

        Args:
            owner_type: Discriminator of the owning record type.
            owner_id: Primary key of the owning record.
            limit: Optional maximum number of snapshots to return.

        Returns:
            Snapshots ordered newest first.
        """
        pass  # pragma: no cover

    @abstractmethod
    def count(self, owner_type: str, owner_id: str) -> int:
        """Counts the snapshots of an owner."""
        pass  # pragma: no cover

    @abstractmethod
    def ids_beyond(self, owner_type: str, owner_id: str, keep: int) -> list[int]:
        """Returns the ids of an owner's snapshots older than the newest `keep`.

        Args:
            owner_type: Discriminator of the owning record type.
            owner_id: Primary key of the owning record.
            keep: Number of most recent snapshots to exclude.

        Returns:
            Snapshot ids in ascending order (oldest first).
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, snapshot_ids: Iterable[int]) -> int:
        """Deletes snapshots by id.

        Returns:
            The number of rows actually removed.
        """
        pass  # pragma: no cover
