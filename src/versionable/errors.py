"""Exception types raised by the versioning engine."""

from typing import Optional


class VersioningError(Exception):
    """Base class for all versioning failures.

    Attributes:
        code: Machine-readable error code (e.g., 'snapshot.not_found').
        detail: Human-readable explanation of the error.
    """

    code = "versioning.error"

    def __init__(self, detail: str, code: Optional[str] = None):
        self.code = code or self.code
        self.detail = detail
        super().__init__(detail)


class DecodeError(VersioningError):
    """A snapshot payload could not be decoded into a field mapping."""

    code = "snapshot.decode_failed"


class SnapshotNotFound(VersioningError):
    """No snapshot exists for the requested owner or id."""

    code = "snapshot.not_found"


class TypeResolutionError(VersioningError):
    """An owner_type discriminator does not map to a known record type."""

    code = "owner_type.unresolved"


class SnapshotWriteError(VersioningError):
    """The snapshot store rejected a write."""

    code = "snapshot.write_failed"
