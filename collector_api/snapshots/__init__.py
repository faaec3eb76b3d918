"""Store en memoria de snapshots y su limpieza periódica."""

from .models import Snapshot
from .store import SnapshotStore
from .sweeper import EvictionSweeper
from .timestamps import parse_rfc3339

__all__ = [
    "Snapshot",
    "SnapshotStore",
    "EvictionSweeper",
    "parse_rfc3339",
]
