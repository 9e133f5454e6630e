"""Basic example of record versioning.

This example demonstrates how to:
1. Declare a versionable SQLAlchemy model.
2. Register it and install the session hooks.
3. Save, update and inspect the snapshot history.
4. Diff two versions and revert to an older one.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from versionable import VersioningManager, VersionableMixin
from versionable.observability.logging import setup_logging
from versionable.persistence.db import make_engine, make_session_factory
from versionable.persistence.models import Base as SnapshotBase


def _utcnow():
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class Article(VersionableMixin, Base):
    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    body: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


def run_example():
    setup_logging("WARNING")

    # 1. Database holding both the records and their snapshots
    engine = make_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SnapshotBase.metadata.create_all(engine)
    SessionLocal = make_session_factory(engine)

    # 2. Register the model and attach the hooks
    manager = VersioningManager(session_factory=SessionLocal)
    manager.register(Article)
    manager.install(SessionLocal)

    with SessionLocal() as session:
        manager.set_actor(session, "editor-1")

        # 3. Create and edit the article
        article = Article(title="Draft", body="First words.")
        session.add(article)
        session.commit()

        article.title = "Published"
        article.set_version_reason("copy edit")
        session.commit()

        print("History (newest first):")
        for snapshot in manager.versions(article):
            values = manager.decode(snapshot)
            print(
                f"  #{snapshot.id} by {snapshot.actor_id} "
                f"reason={snapshot.reason!r} title={values['title']!r}"
            )

        # 4. What changed since the first version?
        first = manager.previous_version(article)
        print(f"Changes since #{first.id}: {manager.diff(first)}")

        manager.revert(first, session=session)
        print(f"After revert: title={article.title!r}")
        print(f"Snapshots now: {len(manager.versions(article))}")


if __name__ == "__main__":
    run_example()
