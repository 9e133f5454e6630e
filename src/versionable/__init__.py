"""Snapshot history for SQLAlchemy records."""

from versionable.diff import compute_snapshot_diff
from versionable.encoders import Encoder, JsonEncoder, PickleEncoder
from versionable.errors import (
    DecodeError,
    SnapshotNotFound,
    SnapshotWriteError,
    TypeResolutionError,
    VersioningError,
)
from versionable.manager import VersioningManager
from versionable.mixins import Versionable, VersionableMixin
from versionable.models import DispatchMode, MutationEvent, PolicyConfig, Snapshot
from versionable.registry import TypeRegistry

__all__ = [
    "DecodeError",
    "DispatchMode",
    "Encoder",
    "JsonEncoder",
    "MutationEvent",
    "PickleEncoder",
    "PolicyConfig",
    "Snapshot",
    "SnapshotNotFound",
    "SnapshotWriteError",
    "TypeRegistry",
    "TypeResolutionError",
    "Versionable",
    "VersionableMixin",
    "VersioningError",
    "VersioningManager",
    "compute_snapshot_diff",
]
