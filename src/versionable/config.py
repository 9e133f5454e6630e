"""Runtime settings and policy file loading."""

import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field

from versionable.encoders import JsonEncoder, PickleEncoder
from versionable.models.enums import DispatchMode

_TRUTHY = {"1", "true", "yes", "on"}

DEFAULT_DATABASE_URL = "sqlite:///./versionable.sqlite3"
DEFAULT_HUEY_DB_PATH = "huey_queue.db"


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


class VersioningSettings(BaseModel):
    """
    Process-wide settings for the versioning engine.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    database_url: str = Field(
        default=DEFAULT_DATABASE_URL,
        description="SQLAlchemy URL of the database holding records and snapshots.",
    )
    use_queue: bool = Field(
        default=False,
        description="Write snapshots from the background queue instead of inline.",
    )
    raise_on_write_error: bool = Field(
        default=False,
        description="Propagate snapshot write failures out of Session.commit().",
    )
    huey_db_path: str = Field(
        default=DEFAULT_HUEY_DB_PATH,
        description="SQLite file backing the snapshot task queue.",
    )
    log_level: str = Field(default="INFO", description="Root log level.")

    @property
    def dispatch_mode(self) -> DispatchMode:
        return DispatchMode.QUEUE if self.use_queue else DispatchMode.SYNC

    @classmethod
    def from_env(cls) -> "VersioningSettings":
        """Builds settings from VERSIONING_* environment variables."""
        return cls(
            database_url=os.environ.get("VERSIONING_DATABASE_URL", DEFAULT_DATABASE_URL),
            use_queue=_env_flag("VERSIONING_USE_QUEUE"),
            raise_on_write_error=_env_flag("VERSIONING_RAISE_ON_WRITE_ERROR"),
            huey_db_path=os.environ.get("HUEY_DB_PATH", DEFAULT_HUEY_DB_PATH),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )


class PolicyOverrides(BaseModel):
    """Serializable subset of a PolicyConfig, as found in a policy file."""

    model_config = ConfigDict(extra="forbid")

    versioning_enabled: bool = True
    excluded_fields: list[str] = Field(default_factory=list)
    retention_limit: int = Field(default=0, ge=0)
    encoder: str = Field(default="pickle", pattern=r"^(pickle|json)$")
    versioned_hidden_fields: list[str] = Field(default_factory=list)
    created_field: str = "created_at"
    updated_field: str = "updated_at"
    deleted_field: Optional[str] = None

    def policy_kwargs(self) -> dict[str, Any]:
        """Returns keyword arguments for PolicyConfig, with the encoder built."""
        data = self.model_dump()
        data["encoder"] = JsonEncoder() if self.encoder == "json" else PickleEncoder()
        return data


def load_policy_file(file_path: Union[str, Path]) -> dict[str, PolicyOverrides]:
    """Loads per-type policies from a YAML file.

    The file maps owner_type discriminators to policy options:

        app.models.User:
          excluded_fields: [last_login]
          retention_limit: 10

    Args:
        file_path: Path to the YAML file.

    Returns:
        A mapping of discriminator to validated overrides.
    """
    with open(file_path, "r") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Policy file {file_path} must contain a mapping")

    return {
        str(owner_type): PolicyOverrides(**(options or {}))
        for owner_type, options in raw.items()
    }
