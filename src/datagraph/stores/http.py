"""
HTTP Store - Read-only graph accessor backed by a remote datagraph API.

Talks to the routes served by datagraph.api:
- GET /nodes/{nodeId}
- GET /edges?targetNodeId=...&edgeType=...
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import quote

import aiohttp

from datagraph.core.accessor import GraphAccessor
from datagraph.core.errors import GraphAccessError
from datagraph.core.graph import Edge, Node

logger = logging.getLogger(__name__)


class HttpGraphStore(GraphAccessor):
    """
    Graph accessor for a remote datagraph service.

    A missing node (404) is reported as None; every other failure
    (network, non-2xx status, malformed body) raises GraphAccessError.
    """

    def __init__(self, base_url: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def get_node(self, node_id: str) -> Node | None:
        """Get a node from the remote store."""
        status, data = await self._get(f"{self.base_url}/nodes/{quote(node_id, safe='')}")
        if status == 404:
            return None
        self._check_error(status, data)
        try:
            node = Node.from_dict(data)
        except ValueError as e:
            raise GraphAccessError(f"Malformed node {node_id} from {self.base_url}: {e}")
        if node.node_id != node_id:
            raise GraphAccessError(
                f"Requested node {node_id} but {self.base_url} returned {node.node_id}"
            )
        return node

    async def get_edges_by_target_and_type(
        self,
        target_node_id: str,
        edge_type: str,
    ) -> list[Edge]:
        """Query edges from the remote store."""
        status, data = await self._get(
            f"{self.base_url}/edges",
            params={"targetNodeId": target_node_id, "edgeType": edge_type},
        )
        self._check_error(status, data)
        items = data.get("items") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise GraphAccessError(f"Malformed edge list from {self.base_url}")
        try:
            return [Edge.from_dict(item) for item in items]
        except ValueError as e:
            raise GraphAccessError(f"Malformed edge from {self.base_url}: {e}")

    async def _get(self, url: str, params: dict[str, str] | None = None) -> tuple[int, Any]:
        """Make a GET request and decode the JSON body."""
        logger.debug(f"GET {url} {params or ''}")
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.get(url, params=params) as resp:
                    if resp.status == 404:
                        return resp.status, None
                    data = await resp.json(content_type=None)
                    return resp.status, data
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise GraphAccessError(f"Request to {url} failed: {e}") from e

    def _check_error(self, status: int, data: Any) -> None:
        """Check for API errors."""
        if status >= 400:
            error_msg = data.get("error", {}) if isinstance(data, dict) else {}
            if isinstance(error_msg, dict):
                error_msg = error_msg.get("message", "Unknown error")
            raise GraphAccessError(f"Graph store error ({status}): {error_msg}")
