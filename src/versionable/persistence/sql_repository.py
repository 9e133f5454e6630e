"""SQLAlchemy implementation of the SnapshotStore."""

from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import delete, desc, func, select
from sqlalchemy.exc import SQLAlchemyError

from versionable.errors import SnapshotWriteError
from versionable.models.snapshot import Snapshot
from versionable.observability.logging import get_logger
from versionable.persistence.models import Base, SnapshotRow
from versionable.persistence.repository import SnapshotStore

logger = get_logger(__name__)


class SQLSnapshotStore(SnapshotStore):
    """Snapshot persistence backed by a SQL table.

    Every operation runs in its own short-lived session, independent of the
    session that mutated the versioned record.
    """

    def __init__(self, session_factory, row_model=SnapshotRow):
        """Initialize the store.

        Args:
            session_factory: Callable returning a new SQLAlchemy Session.
            row_model: Declarative class built on SnapshotColumnsMixin.
        """
        self.SessionLocal = session_factory
        self.row_model = row_model

    def create_tables(self, engine) -> None:
        """Creates the table for `row_model` if it does not exist."""
        metadata = getattr(self.row_model, "metadata", Base.metadata)
        metadata.create_all(engine, tables=[self.row_model.__table__])

    def _to_snapshot(self, row) -> Snapshot:
        return Snapshot(
            id=row.id,
            owner_type=row.owner_type,
            owner_id=row.owner_id,
            actor_id=row.actor_id,
            payload=row.payload,
            reason=row.reason,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _owner_clause(self, owner_type: str, owner_id: str):
        return (
            self.row_model.owner_type == owner_type,
            self.row_model.owner_id == owner_id,
        )

    def append(
        self,
        owner_type: str,
        owner_id: str,
        payload: bytes,
        actor_id: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> Snapshot:
        now = datetime.now(timezone.utc)
        row = self.row_model(
            owner_type=owner_type,
            owner_id=owner_id,
            actor_id=actor_id,
            payload=payload,
            reason=reason,
            created_at=now,
            updated_at=now,
        )
        with self.SessionLocal() as session:
            try:
                session.add(row)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise SnapshotWriteError(
                    f"Failed to store snapshot for {owner_type}#{owner_id}: {e}"
                ) from e
            session.refresh(row)
            return self._to_snapshot(row)

    def get(self, snapshot_id: int) -> Optional[Snapshot]:
        with self.SessionLocal() as session:
            row = session.get(self.row_model, snapshot_id)
            if row is None:
                return None
            return self._to_snapshot(row)

    def latest(self, owner_type: str, owner_id: str) -> Optional[Snapshot]:
        rows = self.list_for_owner(owner_type, owner_id, limit=1)
        return rows[0] if rows else None

    def list_for_owner(
        self, owner_type: str, owner_id: str, limit: Optional[int] = None
    ) -> list[Snapshot]:
        with self.SessionLocal() as session:
            stmt = (
                select(self.row_model)
                .where(*self._owner_clause(owner_type, owner_id))
                .order_by(desc(self.row_model.id))
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            rows = session.execute(stmt).scalars().all()
            return [self._to_snapshot(row) for row in rows]

    def count(self, owner_type: str, owner_id: str) -> int:
        with self.SessionLocal() as session:
            stmt = (
                select(func.count())
                .select_from(self.row_model)
                .where(*self._owner_clause(owner_type, owner_id))
            )
            return session.execute(stmt).scalar() or 0

    def ids_beyond(self, owner_type: str, owner_id: str, keep: int) -> list[int]:
        with self.SessionLocal() as session:
            stmt = (
                select(self.row_model.id)
                .where(*self._owner_clause(owner_type, owner_id))
                .order_by(desc(self.row_model.id))
                .offset(keep)
            )
            ids = session.execute(stmt).scalars().all()
            return sorted(ids)

    def delete(self, snapshot_ids: Iterable[int]) -> int:
        ids = list(snapshot_ids)
        if not ids:
            return 0
        with self.SessionLocal() as session:
            result = session.execute(
                delete(self.row_model).where(self.row_model.id.in_(ids))
            )
            session.commit()
            logger.debug(
                "Deleted snapshot rows",
                extra={"extra_fields": {"snapshot_ids": ids, "deleted": result.rowcount}},
            )
            return result.rowcount
