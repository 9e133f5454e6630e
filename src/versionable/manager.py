"""Public entry point of the versioning engine."""

from typing import Any, Callable, Optional, Union

from versionable.config import VersioningSettings, load_policy_file
from versionable.diff import compute_snapshot_diff
from versionable.engine.dispatch import make_dispatcher
from versionable.engine.hooks import ACTOR_KEY, SessionHooks
from versionable.engine.retention import purge_snapshots
from versionable.engine.revert import RevertEngine
from versionable.engine.writer import SnapshotWriter
from versionable.errors import SnapshotNotFound
from versionable.models.enums import DispatchMode
from versionable.models.policy import PolicyConfig
from versionable.models.snapshot import Snapshot
from versionable.observability.logging import get_logger
from versionable.persistence.in_memory import InMemorySnapshotStore
from versionable.persistence.repository import SnapshotStore
from versionable.persistence.sql_repository import SQLSnapshotStore
from versionable.registry import TypeRegistry

logger = get_logger(__name__)


class VersioningManager:
    """
    Tracks snapshots of registered record types and exposes the read, diff
    and revert operations on them.
    """

    def __init__(
        self,
        registry: Optional[TypeRegistry] = None,
        store: Optional[SnapshotStore] = None,
        session_factory=None,
        dispatch_mode: Optional[Union[DispatchMode, str]] = None,
        actor_resolver: Optional[Callable[[], Any]] = None,
        settings: Optional[VersioningSettings] = None,
    ):
        """Initializes the manager.

        Args:
            registry: Registry of versionable types. A new one is created if omitted.
            store: Default snapshot store. Defaults to a SQL store on
                `session_factory`, or an in-memory store without one.
            session_factory: Callable returning Sessions of the record store;
                used by revert and by queued writes to re-load records.
            dispatch_mode: SYNC or QUEUE. Defaults to the settings.
            actor_resolver: Optional accessor returning the current actor id.
            settings: Runtime settings. Defaults to VersioningSettings().
        """
        self.settings = settings or VersioningSettings()
        self.registry = registry or TypeRegistry()
        self.session_factory = session_factory
        if store is None:
            store = (
                SQLSnapshotStore(session_factory)
                if session_factory is not None
                else InMemorySnapshotStore()
            )
        self.store = store
        self.dispatch_mode = DispatchMode(
            dispatch_mode or self.settings.dispatch_mode
        )

        self.writer = SnapshotWriter(self.registry, self.store)
        self.reverter = RevertEngine(self.registry, session_factory)
        self.dispatch = make_dispatcher(self.dispatch_mode, self.writer)
        self.hooks = SessionHooks(
            self.registry,
            self.dispatch,
            actor_resolver=actor_resolver,
            raise_on_write_error=self.settings.raise_on_write_error,
        )

    def register(
        self,
        cls: type,
        config: Optional[PolicyConfig] = None,
        alias: Optional[str] = None,
        **options: Any,
    ) -> str:
        """Registers a record type for versioning.

        Policy options may be given as a PolicyConfig or as keyword arguments.

        Returns:
            The discriminator stored in the type's snapshots.
        """
        if config is None:
            config = PolicyConfig(**options)
        elif options:
            config = PolicyConfig(**{**dict(config), **options})
        name = self.registry.register(cls, config, alias=alias)
        logger.debug(f"Registered {name} for versioning")
        return name

    def load_policies(self, file_path) -> None:
        """Applies per-type policies from a YAML policy file."""
        self.registry.apply_overrides(load_policy_file(file_path))

    def install(self, target) -> None:
        """Attaches the lifecycle hooks to a sessionmaker, Session class or session."""
        self.hooks.install(target)

    def uninstall(self, target) -> None:
        self.hooks.uninstall(target)

    def set_actor(self, session, actor_id: Optional[Any]) -> None:
        """Attributes snapshots produced by `session` to `actor_id`."""
        if actor_id is None:
            session.info.pop(ACTOR_KEY, None)
        else:
            session.info[ACTOR_KEY] = str(actor_id)

    def owner_of(self, record) -> tuple[str, str]:
        return self.registry.discriminator_for(record), record.versionable_key()

    def store_for(self, record_or_cls) -> SnapshotStore:
        return self.writer.store_for(record_or_cls)

    def _store_for_snapshot(self, snapshot: Snapshot) -> SnapshotStore:
        return self.store_for(self.registry.resolve(snapshot.owner_type))

    def versions(self, record, limit: Optional[int] = None) -> list[Snapshot]:
        """Lists a record's snapshots, newest first."""
        owner_type, owner_id = self.owner_of(record)
        return self.store_for(record).list_for_owner(owner_type, owner_id, limit=limit)

    def current_version(self, record) -> Optional[Snapshot]:
        owner_type, owner_id = self.owner_of(record)
        return self.store_for(record).latest(owner_type, owner_id)

    def previous_version(self, record) -> Optional[Snapshot]:
        snapshots = self.versions(record, limit=2)
        return snapshots[1] if len(snapshots) > 1 else None

    def get_version(self, record, snapshot_id: int) -> Optional[Snapshot]:
        """Fetches one of the record's snapshots by id."""
        snapshot = self.store_for(record).get(snapshot_id)
        if snapshot is None or snapshot.owner != self.owner_of(record):
            return None
        return snapshot

    def decode(self, snapshot: Snapshot) -> dict[str, Any]:
        return self.reverter.decode(snapshot)

    def get_model(self, snapshot: Snapshot):
        """Rebuilds the record stored in a snapshot, without saving it."""
        return self.reverter.get_model(snapshot)

    def diff(
        self, snapshot: Snapshot, against: Optional[Snapshot] = None
    ) -> dict[str, Any]:
        """Fields whose value in `against` differs from `snapshot`.

        Args:
            snapshot: The snapshot to compare.
            against: The comparison target. Defaults to the owner's current
                version.

        Returns:
            Differing fields mapped to their value in `against`, without
            timestamp and soft-delete fields.

        Raises:
            SnapshotNotFound: If no target is given and the owner has no
                snapshots.
            ValueError: If `against` belongs to another record.
        """
        if against is not None and against.owner != snapshot.owner:
            raise ValueError(
                f"Cannot diff {snapshot.owner_type}#{snapshot.owner_id} against a snapshot of "
                f"{against.owner_type}#{against.owner_id}"
            )
        if against is None:
            against = self._store_for_snapshot(snapshot).latest(*snapshot.owner)
            if against is None:
                raise SnapshotNotFound(
                    f"{snapshot.owner_type}#{snapshot.owner_id} has no current version to diff against"
                )

        config = self.registry.config_for(self.registry.resolve(snapshot.owner_type))
        return compute_snapshot_diff(
            self.decode(against),
            self.decode(snapshot),
            excluded=config.housekeeping_fields,
        )

    def revert(self, snapshot: Snapshot, session=None):
        """Restores a snapshot as the record's current state."""
        return self.reverter.revert(snapshot, session=session)

    def revert_to_version(self, record, snapshot_id: int, session=None):
        """Restores one of the record's snapshots by id.

        Raises:
            SnapshotNotFound: If the record has no such snapshot.
        """
        snapshot = self.get_version(record, snapshot_id)
        if snapshot is None:
            owner_type, owner_id = self.owner_of(record)
            raise SnapshotNotFound(
                f"{owner_type}#{owner_id} has no snapshot {snapshot_id}"
            )
        return self.revert(snapshot, session=session)

    def snapshot(
        self,
        record,
        reason: Optional[str] = None,
        actor_id: Optional[Any] = None,
    ) -> Snapshot:
        """Writes a snapshot of the record's current state, bypassing the policy."""
        if actor_id is None:
            actor_id = self.hooks.resolve_actor()
        return self.writer.write(
            record,
            actor_id=None if actor_id is None else str(actor_id),
            reason=reason,
        )

    def purge(self, record) -> int:
        """Applies the type's retention limit to the record's snapshots."""
        owner_type, owner_id = self.owner_of(record)
        limit = self.registry.config_for(record).retention_limit
        return purge_snapshots(self.store_for(record), owner_type, owner_id, limit)
