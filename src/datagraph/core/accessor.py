"""
Graph Accessor - Abstract interfaces over the graph store.

The resolution engine depends only on GraphAccessor (read side).
GraphStore adds the write side used by the HTTP boundary when it
creates nodes and edges.

Concrete implementations live in datagraph.stores.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from datagraph.core.graph import Edge, Node


class GraphAccessor(ABC):
    """
    Read-only capability interface over a graph store.

    Implementations must raise GraphAccessError for I/O failures and
    return None (not raise) for a node that does not exist.
    """

    @abstractmethod
    async def get_node(self, node_id: str) -> Node | None:
        """
        Get a node by ID.

        Returns:
            The node, or None if it does not exist

        Raises:
            GraphAccessError: The store could not be reached
        """
        ...

    @abstractmethod
    async def get_edges_by_target_and_type(
        self,
        target_node_id: str,
        edge_type: str,
    ) -> list[Edge]:
        """
        Get edges pointing at a node with a given type.

        The order is stable for a given store state, so order-sensitive
        strategies are deterministic.

        Raises:
            GraphAccessError: The store could not be reached
        """
        ...


class GraphStore(GraphAccessor):
    """A graph accessor that also accepts writes."""

    @abstractmethod
    async def put_node(self, node: Node) -> None:
        """Insert or replace a node."""
        ...

    @abstractmethod
    async def put_edge(self, edge: Edge) -> None:
        """
        Insert an edge.

        Raises:
            NotFoundError: Source or target node does not exist
            InvalidStateError: Endpoints are not in the edge's project
        """
        ...

    @abstractmethod
    async def update_node(self, node_id: str, **changes: Any) -> Node:
        """
        Merge changes into a stored node and refresh its updated_at.

        Raises:
            NotFoundError: The node does not exist
        """
        ...
