"""Retention limits, excluded fields and hidden fields.

This example demonstrates how to:
1. Load per-type policies from a YAML file.
2. Ignore changes to bookkeeping columns.
3. Keep only the newest snapshots of every record.
4. Include a hidden column in snapshots.
"""

import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from versionable import VersioningManager, VersionableMixin
from versionable.persistence.db import make_engine, make_session_factory
from versionable.persistence.models import Base as SnapshotBase


def _utcnow():
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class Account(VersionableMixin, Base):
    __tablename__ = "accounts"
    __hidden__ = ("api_key",)

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255))
    plan: Mapped[str] = mapped_column(String(20), default="free")
    api_key: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    last_seen: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


POLICIES = """
accounts:
  excluded_fields: [last_seen]
  versioned_hidden_fields: [api_key]
  retention_limit: 3
"""


def run_example():
    engine = make_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SnapshotBase.metadata.create_all(engine)
    SessionLocal = make_session_factory(engine)

    manager = VersioningManager(session_factory=SessionLocal)
    manager.register(Account, alias="accounts")

    # 1. Policies from a file, keyed by discriminator
    with tempfile.TemporaryDirectory() as tmp:
        policy_file = Path(tmp) / "policies.yaml"
        policy_file.write_text(POLICIES)
        manager.load_policies(policy_file)
    manager.install(SessionLocal)

    with SessionLocal() as session:
        account = Account(email="ops@example.com", api_key="k-1")
        session.add(account)
        session.commit()

        # 2. Bookkeeping changes do not produce snapshots
        account.last_seen = "2024-06-01T10:00:00"
        session.commit()
        print(f"After last_seen change: {len(manager.versions(account))} snapshot(s)")

        # 3. Only the newest three snapshots survive
        for plan in ("pro", "team", "enterprise", "pro"):
            account.plan = plan
            session.commit()
        versions = manager.versions(account)
        print(f"Kept snapshot ids: {[v.id for v in versions]}")

        # 4. The hidden key is part of the snapshot, not of to_dict()
        print(f"Snapshot api_key: {manager.decode(versions[0]).get('api_key')}")
        print(f"to_dict keys: {sorted(account.to_dict())}")


if __name__ == "__main__":
    run_example()
