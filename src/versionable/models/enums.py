"""Enumeration definitions for the versioning engine."""

from enum import Enum


class DispatchMode(str, Enum):
    """Defines how approved snapshots are written.

    Attributes:
        SYNC: The snapshot is written inline when the session commits.
        QUEUE: The snapshot is handed to the background task queue.
    """

    SYNC = "sync"
    QUEUE = "queue"
