from datetime import datetime, timezone
from typing import Optional

import pytest
from sqlalchemy import DateTime, Float, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from versionable import VersioningManager, VersionableMixin
from versionable.persistence.db import make_engine, make_session_factory
from versionable.persistence.models import Base as SnapshotBase


def _utcnow():
    return datetime.now(timezone.utc)


class RecordBase(DeclarativeBase):
    pass


class User(VersionableMixin, RecordBase):
    __tablename__ = "users"
    __hidden__ = ("password",)

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    password: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    last_login: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class Item(VersionableMixin, RecordBase):
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    price: Mapped[float] = mapped_column(Float)
    status: Mapped[str] = mapped_column(String(20), server_default="draft")
    published_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class Article(VersionableMixin, RecordBase):
    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    kind: Mapped[str] = mapped_column(String(20))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    __mapper_args__ = {"polymorphic_on": "kind", "polymorphic_identity": "article"}


class FeaturedArticle(Article):
    banner: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    __mapper_args__ = {"polymorphic_identity": "featured"}


@pytest.fixture
def engine():
    # In-memory SQLite shared by every session of the test
    engine = make_engine("sqlite:///:memory:")
    RecordBase.metadata.create_all(engine)
    SnapshotBase.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def manager(session_factory):
    manager = VersioningManager(session_factory=session_factory)
    manager.register(User, deleted_field="deleted_at")
    manager.register(Article)
    manager.install(session_factory)
    yield manager
    manager.uninstall(session_factory)


@pytest.fixture
def saved_user(manager, session_factory):
    """A committed user with its first snapshot, detached."""
    with session_factory() as session:
        user = User(name="A", email="a@example.com", password="secret")
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
    return user
