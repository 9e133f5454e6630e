"""In-memory implementation of the SnapshotStore.

This module provides a thread-safe, ephemeral snapshot store suitable for
testing and local development.
"""

import itertools
import threading
from datetime import datetime, timezone
from typing import Iterable, Optional

from versionable.models.snapshot import Snapshot
from versionable.persistence.repository import SnapshotStore


class InMemorySnapshotStore(SnapshotStore):
    """In-memory implementation of the SnapshotStore.

    Useful for unit tests and local development where persistence across
    restarts is not required.
    """

    def __init__(self):
        """Initializes the empty in-memory store."""
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._snapshots: dict[int, Snapshot] = {}

    def append(
        self,
        owner_type: str,
        owner_id: str,
        payload: bytes,
        actor_id: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> Snapshot:
        now = datetime.now(timezone.utc)
        with self._lock:
            snapshot = Snapshot(
                id=next(self._ids),
                owner_type=owner_type,
                owner_id=owner_id,
                actor_id=actor_id,
                payload=payload,
                reason=reason,
                created_at=now,
                updated_at=now,
            )
            self._snapshots[snapshot.id] = snapshot
        return snapshot

    def get(self, snapshot_id: int) -> Optional[Snapshot]:
        with self._lock:
            return self._snapshots.get(snapshot_id)

    def latest(self, owner_type: str, owner_id: str) -> Optional[Snapshot]:
        snapshots = self.list_for_owner(owner_type, owner_id, limit=1)
        return snapshots[0] if snapshots else None

    def _owned(self, owner_type: str, owner_id: str) -> list[Snapshot]:
        with self._lock:
            owned = [
                s
                for s in self._snapshots.values()
                if s.owner_type == owner_type and s.owner_id == owner_id
            ]
        return sorted(owned, key=lambda s: s.id, reverse=True)

    def list_for_owner(
        self, owner_type: str, owner_id: str, limit: Optional[int] = None
    ) -> list[Snapshot]:
        owned = self._owned(owner_type, owner_id)
        return owned if limit is None else owned[:limit]

    def count(self, owner_type: str, owner_id: str) -> int:
        return len(self._owned(owner_type, owner_id))

    def ids_beyond(self, owner_type: str, owner_id: str, keep: int) -> list[int]:
        return sorted(s.id for s in self._owned(owner_type, owner_id)[keep:])

    def delete(self, snapshot_ids: Iterable[int]) -> int:
        deleted = 0
        with self._lock:
            for snapshot_id in snapshot_ids:
                if self._snapshots.pop(snapshot_id, None) is not None:
                    deleted += 1
        return deleted
