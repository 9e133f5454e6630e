"""Rehydration of snapshots and reverting records to them."""

from typing import Any, Optional

from sqlalchemy.orm import Session

from versionable.models.snapshot import Snapshot
from versionable.observability.logging import get_logger
from versionable.registry import TypeRegistry

from .hydration import mark_persisted, new_record

logger = get_logger(__name__)


class RevertEngine:
    """Turns snapshots back into records and persists them as current state."""

    def __init__(self, registry: TypeRegistry, session_factory=None):
        """Initializes the revert engine.

        Args:
            registry: Registry resolving owner_type discriminators.
            session_factory: Optional callable returning a Session, used when
                `revert` is called without an explicit session.
        """
        self.registry = registry
        self.session_factory = session_factory

    def decode(self, snapshot: Snapshot) -> dict[str, Any]:
        """Decodes a snapshot payload with the encoder of its owner type.

        Raises:
            TypeResolutionError: If the owner type is unknown.
            DecodeError: If the payload cannot be decoded.
        """
        cls = self.registry.resolve(snapshot.owner_type)
        encoder = self.registry.config_for(cls).encoder
        return encoder.decode(snapshot.payload)

    def get_model(self, snapshot: Snapshot):
        """Rebuilds the record captured by a snapshot without saving it.

        The instance has the owner's exact runtime type and is marked as an
        existing row.
        """
        cls = self.registry.resolve(snapshot.owner_type)
        values = self.decode(snapshot)
        return mark_persisted(new_record(cls, values))

    def revert(self, snapshot: Snapshot, session: Optional[Session] = None):
        """Makes a snapshot the current state of its record.

        Housekeeping fields (created, last-modified, soft-delete marker) are
        left out so the record store maintains them. The save goes through the
        session's normal flush, so an installed versioning hook snapshots the
        reverted state like any other update.

        Args:
            snapshot: The snapshot to restore.
            session: Session to save with. A new one is opened from the
                session factory when omitted.

        Returns:
            The persisted record. Records saved in an internal session are
            returned detached and fully loaded.
        """
        cls = self.registry.resolve(snapshot.owner_type)
        config = self.registry.config_for(cls)
        values = self.decode(snapshot)
        record = mark_persisted(
            new_record(cls, values, skip=config.housekeeping_fields)
        )

        if session is not None:
            return self._save(session, snapshot, record)

        if self.session_factory is None:
            raise RuntimeError("RevertEngine needs a session or a session_factory")

        with self.session_factory() as own_session:
            current = self._save(own_session, snapshot, record)
            own_session.expunge(current)
            return current

    def _save(self, session: Session, snapshot: Snapshot, record):
        current = session.merge(record)
        session.commit()
        session.refresh(current)
        logger.info(
            f"Reverted {snapshot.owner_type}#{snapshot.owner_id} to snapshot {snapshot.id}",
            extra={
                "extra_fields": {
                    "snapshot_id": snapshot.id,
                    "owner_type": snapshot.owner_type,
                    "owner_id": snapshot.owner_id,
                }
            },
        )
        return current
