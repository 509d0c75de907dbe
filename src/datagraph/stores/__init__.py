"""
Graph Stores.

Concrete GraphAccessor implementations:
- InMemoryGraphStore: Process-local, writable, JSON snapshots
- HttpGraphStore: Read-only client for a remote datagraph API

Usage:
    from datagraph.stores import InMemoryGraphStore

    store = InMemoryGraphStore.load_snapshot(Path("graph.json"))
"""

from datagraph.stores.http import HttpGraphStore
from datagraph.stores.memory import SNAPSHOT_VERSION, InMemoryGraphStore


__all__ = [
    "HttpGraphStore",
    "InMemoryGraphStore",
    "SNAPSHOT_VERSION",
]
