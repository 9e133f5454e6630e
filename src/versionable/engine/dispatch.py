"""Synchronous and queued execution of snapshot writes."""

from versionable.models.enums import DispatchMode
from versionable.models.mutation import MutationEvent
from versionable.observability.logging import get_logger

from .writer import SnapshotWriter

logger = get_logger(__name__)


class SyncDispatcher:
    """Writes the snapshot inline, in the committing thread."""

    mode = DispatchMode.SYNC

    def __init__(self, writer: SnapshotWriter):
        self.writer = writer

    def __call__(self, mutation: MutationEvent):
        return self.writer.write_event(mutation)


class QueueDispatcher:
    """Enqueues the snapshot write on the Huey task queue."""

    mode = DispatchMode.QUEUE

    def __call__(self, mutation: MutationEvent):
        from versionable.engine import tasks

        logger.debug(
            f"Enqueueing snapshot of {mutation.owner_type}#{mutation.owner_id}"
        )
        return tasks.write_snapshot_task(mutation.model_dump())


def make_dispatcher(mode: DispatchMode, writer: SnapshotWriter):
    if DispatchMode(mode) == DispatchMode.QUEUE:
        return QueueDispatcher()
    return SyncDispatcher(writer)
