"""
In-Memory Store - A process-local graph store with JSON snapshots.

Nodes are kept in a dict, edges in insertion order; edge queries return
edges in that order, which keeps resolution deterministic.

Snapshots use a versioned JSON format:
    {"version": 1, "savedAt": ..., "nodes": [...], "edges": [...]}
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from datagraph.core.accessor import GraphStore
from datagraph.core.errors import InvalidStateError, NotFoundError
from datagraph.core.graph import Edge, Node

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class InMemoryGraphStore(GraphStore):
    """
    Graph store held in memory.

    Provides the read side the engine needs plus the creation
    checks for edges: both endpoints must exist and belong to the
    edge's project.
    """

    def __init__(self):
        self._nodes: dict[str, Node] = {}
        self._edges: list[Edge] = []

    # --- Read operations ---

    async def get_node(self, node_id: str) -> Node | None:
        return self._nodes.get(node_id)

    async def get_edges_by_target_and_type(
        self,
        target_node_id: str,
        edge_type: str,
    ) -> list[Edge]:
        return [
            edge for edge in self._edges
            if edge.target_node_id == target_node_id and edge.edge_type == edge_type
        ]

    # --- Write operations ---

    async def put_node(self, node: Node) -> None:
        self._nodes[node.node_id] = node

    async def put_edge(self, edge: Edge) -> None:
        self._check_edge(edge)
        self._edges.append(edge)

    async def update_node(self, node_id: str, **changes: Any) -> Node:
        node = self._nodes.get(node_id)
        if node is None:
            raise NotFoundError(f"Node with ID {node_id} not found")
        updated = node.updated(**changes)
        self._nodes[node_id] = updated
        return updated

    def _check_edge(self, edge: Edge) -> None:
        source = self._nodes.get(edge.source_node_id)
        if source is None:
            raise NotFoundError(f"Source node with ID {edge.source_node_id} not found")
        target = self._nodes.get(edge.target_node_id)
        if target is None:
            raise NotFoundError(f"Target node with ID {edge.target_node_id} not found")
        if source.project_id != edge.project_id or target.project_id != edge.project_id:
            raise InvalidStateError(
                "Source and target nodes must belong to the specified project"
            )

    # --- Utility ---

    @property
    def nodes(self) -> dict[str, Node]:
        """Get all nodes (read-only copy)."""
        return self._nodes.copy()

    @property
    def edges(self) -> list[Edge]:
        """Get all edges (read-only copy)."""
        return self._edges.copy()

    def clear(self) -> None:
        self._nodes.clear()
        self._edges.clear()

    def __len__(self) -> int:
        """Return the number of nodes."""
        return len(self._nodes)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    # --- Snapshots ---

    def to_snapshot(self) -> dict[str, Any]:
        return {
            "version": SNAPSHOT_VERSION,
            "savedAt": datetime.now().isoformat(),
            "nodes": [node.to_dict() for node in self._nodes.values()],
            "edges": [edge.to_dict() for edge in self._edges],
        }

    def save_snapshot(self, path: Path) -> Path:
        """
        Save the graph to a JSON file.

        Returns:
            Path where the snapshot was saved
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_snapshot(), f, indent=2)
        logger.info(f"Saved {len(self._nodes)} nodes and {len(self._edges)} edges to {path}")
        return path

    @classmethod
    def from_snapshot(cls, data: Any) -> InMemoryGraphStore:
        """
        Build a store from snapshot data.

        Edges are checked against the nodes exactly as on creation.

        Raises:
            ValueError: If the snapshot format is invalid
        """
        if not isinstance(data, dict) or "version" not in data or "nodes" not in data:
            raise ValueError("Invalid snapshot format")
        if data["version"] != SNAPSHOT_VERSION:
            raise ValueError(f"Unsupported snapshot version: {data['version']}")

        store = cls()
        for record in data["nodes"]:
            node = Node.from_dict(record)
            store._nodes[node.node_id] = node
        for record in data.get("edges", []):
            edge = Edge.from_dict(record)
            try:
                store._check_edge(edge)
            except (NotFoundError, InvalidStateError) as e:
                raise ValueError(f"Invalid edge {edge.edge_id}: {e.message}") from e
            store._edges.append(edge)
        return store

    @classmethod
    def load_snapshot(cls, path: Path) -> InMemoryGraphStore:
        """
        Load a store from a JSON snapshot file.

        Raises:
            FileNotFoundError: If the snapshot doesn't exist
            ValueError: If the snapshot format is invalid
        """
        if not path.exists():
            raise FileNotFoundError(f"Snapshot not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Failed to parse snapshot: {path}: {e}")

        store = cls.from_snapshot(data)
        logger.info(f"Loaded {len(store._nodes)} nodes and {len(store._edges)} edges from {path}")
        return store
