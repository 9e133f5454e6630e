"""Writing snapshots from the Huey task queue.

This example demonstrates how to:
1. Switch the manager to queued dispatch.
2. Bind the manager used by the worker.
3. Run the queue in immediate mode so the example is self-contained.

In production the worker runs separately:

    VERSIONING_WORKER_FACTORY=myapp.versioning:build_manager \\
        huey_consumer versionable.engine.tasks.huey
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from versionable import DispatchMode, VersioningManager, VersionableMixin
from versionable.engine import tasks
from versionable.persistence.db import make_engine, make_session_factory
from versionable.persistence.models import Base as SnapshotBase


def _utcnow():
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class Ticket(VersionableMixin, Base):
    __tablename__ = "tickets"

    id: Mapped[int] = mapped_column(primary_key=True)
    status: Mapped[str] = mapped_column(String(20), default="open")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


def run_example():
    engine = make_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SnapshotBase.metadata.create_all(engine)
    SessionLocal = make_session_factory(engine)

    # 1. Queued dispatch
    manager = VersioningManager(
        session_factory=SessionLocal, dispatch_mode=DispatchMode.QUEUE
    )
    manager.register(Ticket)
    manager.install(SessionLocal)

    # 2. The worker writes through the same manager
    tasks.configure_worker(manager)

    # 3. Execute tasks inline instead of through a consumer
    tasks.huey.immediate = True

    with SessionLocal() as session:
        ticket = Ticket()
        session.add(ticket)
        session.commit()

        for status in ("triaged", "in_progress", "closed"):
            ticket.status = status
            session.commit()

        for snapshot in reversed(manager.versions(ticket)):
            print(f"#{snapshot.id}: {manager.decode(snapshot)['status']}")


if __name__ == "__main__":
    run_example()
