"""Huey-based tasks for queued snapshot writes."""

import importlib
import os
from typing import Any, Optional

from huey import SqliteHuey

from versionable.config import VersioningSettings
from versionable.models.mutation import MutationEvent
from versionable.observability.logging import get_logger

from .hydration import coerce_primary_key

logger = get_logger(__name__)


def make_huey(settings: Optional[VersioningSettings] = None) -> SqliteHuey:
    """Builds the queue on the SQLite file named by `settings.huey_db_path`."""
    settings = settings or VersioningSettings.from_env()
    return SqliteHuey("versionable", filename=settings.huey_db_path)


# Queue shared by producers and the consumer process
huey = make_huey()

# Manager used by the worker process
_manager = None


def configure_worker(manager) -> None:
    """Binds the VersioningManager that queued tasks write through."""
    global _manager
    _manager = manager


def get_manager():
    """Returns the worker's manager.

    When none was configured, VERSIONING_WORKER_FACTORY ("module:callable")
    names a zero-argument callable that builds one.
    """
    global _manager
    if _manager is None:
        factory_path = os.environ.get("VERSIONING_WORKER_FACTORY")
        if not factory_path:
            raise RuntimeError(
                "No VersioningManager configured for the worker; call "
                "configure_worker() or set VERSIONING_WORKER_FACTORY"
            )
        module_name, _, attr = factory_path.partition(":")
        factory = getattr(importlib.import_module(module_name), attr)
        _manager = factory()
    return _manager


def load_current_record(manager, mutation: MutationEvent):
    """Re-resolves the mutated record by primary key, detached from its session."""
    if manager.session_factory is None:
        return None
    cls = manager.registry.resolve(mutation.owner_type)
    with manager.session_factory() as session:
        record = session.get(cls, coerce_primary_key(cls, mutation.owner_id))
        if record is not None:
            session.expunge(record)
        return record


@huey.task(retries=3, retry_delay=5)
def write_snapshot_task(event_data: dict[str, Any]) -> int:
    """Writes the snapshot of a mutation captured at enqueue time."""
    manager = get_manager()
    mutation = MutationEvent(**event_data)

    record = load_current_record(manager, mutation)
    if record is None:
        logger.warning(
            f"{mutation.owner_type}#{mutation.owner_id} no longer exists; "
            "writing the captured values"
        )

    snapshot = manager.writer.write_event(mutation, record=record)
    return snapshot.id
