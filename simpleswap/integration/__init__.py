"""
Read-only integration surfaces (snapshots, HTTP API)
"""

from .snapshot import EngineSnapshot, snapshot_from_engine

__all__ = [
    "EngineSnapshot",
    "snapshot_from_engine",
]
