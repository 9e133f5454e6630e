"""SQLAlchemy session hooks driving the snapshot lifecycle.

`before_flush` evaluates the snapshot policy for every versionable instance
about to be inserted or updated. `after_flush` freezes every approved mutation
into a MutationEvent carrying the row as the database stored it. Events are dispatched once the session
commits and discarded when it rolls back.
"""

import itertools
from typing import Callable, Optional

from sqlalchemy import event, inspect, select

from versionable.models.mutation import MutationEvent
from versionable.models.policy import PolicyConfig
from versionable.observability.logging import get_logger
from versionable.registry import TypeRegistry

from .policy import should_snapshot

logger = get_logger(__name__)

PENDING_KEY = "versionable.pending"
APPROVED_KEY = "versionable.approved"
ACTOR_KEY = "versionable.actor_id"

ActorResolver = Callable[[], Optional[object]]


class SessionHooks:
    """Lifecycle hooks bound to sessionmakers, Session classes or sessions."""

    def __init__(
        self,
        registry: TypeRegistry,
        dispatch: Callable[[MutationEvent], object],
        actor_resolver: Optional[ActorResolver] = None,
        raise_on_write_error: bool = False,
    ):
        """Initializes the hooks.

        Args:
            registry: Registry of versionable types.
            dispatch: Callable receiving each approved event after commit.
            actor_resolver: Optional accessor for the current actor id.
            raise_on_write_error: Propagate dispatch failures out of commit.
        """
        self.registry = registry
        self.dispatch = dispatch
        self.actor_resolver = actor_resolver
        self.raise_on_write_error = raise_on_write_error

    def _listeners(self):
        return (
            ("before_flush", self.before_flush),
            ("after_flush", self.after_flush),
            ("after_commit", self.after_commit),
            ("after_rollback", self.after_rollback),
        )

    def install(self, target) -> None:
        for name, fn in self._listeners():
            if not event.contains(target, name, fn):
                event.listen(target, name, fn)

    def uninstall(self, target) -> None:
        for name, fn in self._listeners():
            if event.contains(target, name, fn):
                event.remove(target, name, fn)

    def resolve_actor(self, session=None) -> Optional[str]:
        """Returns the actor for a mutation; failures resolve to None."""
        if session is not None and session.info.get(ACTOR_KEY) is not None:
            return str(session.info[ACTOR_KEY])
        if self.actor_resolver is None:
            return None
        try:
            actor = self.actor_resolver()
        except Exception as e:
            logger.warning(f"Actor resolver failed, recording no actor: {e}")
            return None
        return None if actor is None else str(actor)

    def before_flush(self, session, flush_context, instances) -> None:
        pending = []
        for obj in itertools.chain(session.new, session.dirty):
            if obj not in self.registry:
                continue
            is_insert = obj in session.new
            dirty = obj.versionable_dirty()
            config = self.registry.config_for(obj)
            if not should_snapshot(is_insert, dirty, config, obj.versioning_enabled):
                continue
            pending.append((obj, is_insert, dirty))
        session.info[PENDING_KEY] = pending

    def after_flush(self, session, flush_context) -> None:
        pending = session.info.pop(PENDING_KEY, [])
        for obj, is_insert, dirty in pending:
            config = self.registry.config_for(obj)
            mutation = MutationEvent(
                owner_type=self.registry.discriminator_for(obj),
                owner_id=obj.versionable_key(),
                is_insert=is_insert,
                values=self._captured_values(session, obj, config, is_insert),
                previous=dirty,
                actor_id=self.resolve_actor(session),
                reason=obj.pop_version_reason(),
            )
            session.info.setdefault(APPROVED_KEY, []).append(mutation)

    def after_commit(self, session) -> None:
        approved = session.info.pop(APPROVED_KEY, [])
        failures = []
        for mutation in approved:
            try:
                self.dispatch(mutation)
            except Exception as e:
                logger.exception(
                    f"Snapshot write failed for {mutation.owner_type}#{mutation.owner_id}: {e}",
                    extra={
                        "extra_fields": {
                            "owner_type": mutation.owner_type,
                            "owner_id": mutation.owner_id,
                        }
                    },
                )
                failures.append(e)

        # every event is attempted before the first failure propagates
        if failures and self.raise_on_write_error:
            raise failures[0]

    def after_rollback(self, session) -> None:
        session.info.pop(PENDING_KEY, None)
        dropped = session.info.pop(APPROVED_KEY, [])
        if dropped:
            logger.debug(f"Discarded {len(dropped)} snapshot(s) on rollback")

    def _captured_values(
        self, session, obj, config: PolicyConfig, is_insert: bool
    ) -> dict:
        state = inspect(obj)
        concealed = set(getattr(obj, "__hidden__", ())) - set(
            config.versioned_hidden_fields
        )
        stored = _flushed_row(session, obj)
        values = {}
        for key in obj.versionable_fields():
            if key in concealed:
                continue
            if stored is not None:
                values[key] = stored[key]
            elif key in state.dict:
                values[key] = state.dict[key]
            elif is_insert and key not in state.expired_attributes:
                # left unset on insert, stored as NULL
                values[key] = None
        return values


def _flushed_row(session, obj) -> Optional[dict]:
    """Reads the row as the database stored it.

    Values then match what later loads return (a Float column assigned 5
    reads back as 5.0) and include server-generated columns. Attribute loads
    are not allowed mid-flush, so this goes through the session's connection.
    """
    state = inspect(obj)
    mapper = state.mapper
    pk_column = mapper.primary_key[0]
    pk_value = state.dict.get(mapper.get_property_by_column(pk_column).key)
    if pk_value is None:
        return None

    stmt = (
        select(*[prop.columns[0].label(prop.key) for prop in mapper.column_attrs])
        .select_from(mapper.selectable)
        .where(pk_column == pk_value)
    )
    row = session.connection().execute(stmt).first()
    return None if row is None else dict(row._mapping)

