from __future__ import annotations

import asyncio
import dataclasses
import sys
from pathlib import Path
from typing import Any

import pytest


def pytest_configure() -> None:
    """
    Ensure `src/` is on sys.path so tests can import `datagraph`
    without requiring an editable install.
    """
    repo_root = Path(__file__).resolve().parents[1]
    src_root = repo_root / "src"
    sys.path.insert(0, str(src_root))


class GraphBuilder:
    """Builds small graphs in an in-memory store for tests."""

    def __init__(self, project_id: str = "p-test"):
        from datagraph.stores import InMemoryGraphStore

        self.project_id = project_id
        self.store = InMemoryGraphStore()

    def data(
        self,
        payload: Any = None,
        content_type: str = "text/plain",
        name: str | None = None,
        created_at: int | None = None,
    ):
        from datagraph.core.graph import DataEntry, Node

        node = Node.create(self.project_id, DataEntry(content_type, payload), name=name)
        if created_at is not None:
            node = dataclasses.replace(node, created_at=created_at, updated_at=created_at)
        asyncio.run(self.store.put_node(node))
        return node

    def control(
        self,
        logic_type: str,
        config: dict[str, Any] | None = None,
        name: str | None = None,
    ):
        from datagraph.core.graph import Control, Node

        node = Node.create(self.project_id, Control(logic_type, config or {}), name=name)
        asyncio.run(self.store.put_node(node))
        return node

    def link(self, source, target, edge_type: str = "input"):
        from datagraph.core.graph import Edge

        edge = Edge.create(self.project_id, source.node_id, target.node_id, edge_type)
        asyncio.run(self.store.put_edge(edge))
        return edge

    def resolve(self, node, registry=None, timeout: float | None = None):
        from datagraph.core.resolution import OutputResolver

        resolver = OutputResolver(self.store, registry, timeout=timeout)
        return asyncio.run(resolver.resolve_output(node.node_id))


@pytest.fixture
def graph() -> GraphBuilder:
    return GraphBuilder()
