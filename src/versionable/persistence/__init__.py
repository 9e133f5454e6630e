from .in_memory import InMemorySnapshotStore
from .models import Base, SnapshotColumnsMixin, SnapshotRow
from .repository import SnapshotStore
from .sql_repository import SQLSnapshotStore

__all__ = [
    "Base",
    "InMemorySnapshotStore",
    "SQLSnapshotStore",
    "SnapshotColumnsMixin",
    "SnapshotRow",
    "SnapshotStore",
]
