from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from versionable.config import VersioningSettings


def make_engine(db_url: Optional[str] = None):
    """Creates an engine; the URL defaults to VERSIONING_DATABASE_URL."""
    db_url = db_url or VersioningSettings.from_env().database_url
    if db_url.startswith("sqlite:"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # every session must see the same in-memory database
        if ":memory:" in db_url or db_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(db_url, **kwargs)
    return create_engine(db_url)


def make_session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)
