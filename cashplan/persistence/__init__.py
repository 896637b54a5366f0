"""Snapshot persistence."""
from cashplan.persistence.store import (
    MemorySnapshotStore,
    SnapshotStore,
    SqlSnapshotStore,
    decode_state,
    load_state,
    save_state,
)

__all__ = [
    "MemorySnapshotStore",
    "SnapshotStore",
    "SqlSnapshotStore",
    "decode_state",
    "load_state",
    "save_state",
]
