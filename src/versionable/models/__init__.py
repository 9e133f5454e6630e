from .enums import DispatchMode
from .mutation import MutationEvent
from .policy import PolicyConfig
from .snapshot import Snapshot

__all__ = ["DispatchMode", "MutationEvent", "PolicyConfig", "Snapshot"]
