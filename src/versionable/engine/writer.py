"""Snapshot writer.

Builds a snapshot from a record's complete field set, persists it and
applies the retention policy of the record's type.
"""

from typing import Optional

from versionable.models.mutation import MutationEvent
from versionable.models.snapshot import REASON_MAX_LENGTH, Snapshot
from versionable.observability.logging import get_logger
from versionable.persistence.repository import SnapshotStore
from versionable.registry import TypeRegistry

from .hydration import new_record
from .retention import purge_snapshots

logger = get_logger(__name__)


class SnapshotWriter:
    """Writes snapshots for records approved by the snapshot policy."""

    def __init__(self, registry: TypeRegistry, store: SnapshotStore):
        """Initializes the writer.

        Args:
            registry: Registry providing discriminators and policies.
            store: Store used by types without a dedicated one.
        """
        self.registry = registry
        self.store = store

    def store_for(self, record_or_cls) -> SnapshotStore:
        return self.registry.config_for(record_or_cls).store or self.store

    def write(
        self,
        record,
        actor_id: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> Snapshot:
        """Captures and persists the full current state of a record.

        Args:
            record: A registered record implementing Versionable.
            actor_id: Actor responsible for the change.
            reason: Optional annotation; truncated to the column size.

        Returns:
            The stored snapshot.
        """
        config = self.registry.config_for(record)
        owner_type = self.registry.discriminator_for(record)
        owner_id = record.versionable_key()

        with record.revealed(config.versioned_hidden_fields):
            values = record.versionable_values()
            payload = config.encoder.encode(values)

        if reason:
            reason = reason[:REASON_MAX_LENGTH]

        store = self.store_for(record)
        snapshot = store.append(
            owner_type,
            owner_id,
            payload,
            actor_id=actor_id,
            reason=reason or None,
        )
        logger.info(
            f"Stored snapshot {snapshot.id} for {owner_type}#{owner_id}",
            extra={
                "extra_fields": {
                    "snapshot_id": snapshot.id,
                    "owner_type": owner_type,
                    "owner_id": owner_id,
                    "actor_id": actor_id,
                }
            },
        )

        purge_snapshots(store, owner_type, owner_id, config.retention_limit)
        return snapshot

    def write_event(self, event: MutationEvent, record=None) -> Snapshot:
        """Writes the snapshot of a captured mutation.

        Args:
            event: The approved mutation.
            record: Optional instance to apply the captured values to.
                A detached instance is built when omitted.

        Returns:
            The stored snapshot.
        """
        cls = self.registry.resolve(event.owner_type)
        if record is None:
            record = new_record(cls, event.values)
        else:
            for key, value in event.values.items():
                setattr(record, key, value)
        return self.write(record, actor_id=event.actor_id, reason=event.reason)
