"""Retention purge of excess snapshots."""

from versionable.observability.logging import get_logger
from versionable.persistence.repository import SnapshotStore

logger = get_logger(__name__)


def purge_snapshots(
    store: SnapshotStore, owner_type: str, owner_id: str, retention_limit: int
) -> int:
    """Deletes an owner's snapshots beyond the newest `retention_limit`.

    The ids to delete are selected in a single read as everything older than
    the newest `retention_limit` rows, so a concurrent append can only cause
    one extra snapshot to survive until the next purge, never the loss of a
    newer one.

    Args:
        store: The owner's snapshot store.
        owner_type: Discriminator of the owning record type.
        owner_id: Primary key of the owning record.
        retention_limit: Snapshots to keep; 0 or less keeps everything.

    Returns:
        The number of deleted snapshots.
    """
    if retention_limit <= 0:
        return 0

    count = store.count(owner_type, owner_id)
    if count <= retention_limit:
        return 0

    stale_ids = store.ids_beyond(owner_type, owner_id, retention_limit)
    deleted = store.delete(stale_ids)
    logger.info(
        f"Purged {deleted} snapshot(s) of {owner_type}#{owner_id}",
        extra={
            "extra_fields": {
                "owner_type": owner_type,
                "owner_id": owner_id,
                "retention_limit": retention_limit,
                "deleted": deleted,
            }
        },
    )
    return deleted
