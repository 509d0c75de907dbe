"""
HTTP API - aiohttp application exposing the graph and output resolution.

Endpoints:
- GET  /output/{outputNodeId} -> Resolved output of a control node
- GET  /nodes/{nodeId}        -> Node record
- GET  /edges                 -> Edges by targetNodeId and edgeType
- POST /nodes                 -> Create a node (writable stores only)
- POST /edges                 -> Create an edge (writable stores only)

Usage:
    app = create_app(InMemoryGraphStore())
    web.run_app(app)
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from aiohttp import web

from datagraph.api.responses import error_response, error_status, raw, success
from datagraph.config import ServiceConfig
from datagraph.core.accessor import GraphAccessor, GraphStore
from datagraph.core.errors import NotFoundError
from datagraph.core.graph import INPUT_EDGE, Control, Edge, LogicType, Node, parse_body
from datagraph.core.resolution import OutputResolver
from datagraph.core.values import check_mapping

logger = logging.getLogger(__name__)

CONFIG_KEY = web.AppKey("config", ServiceConfig)
STORE_KEY = web.AppKey("store", GraphAccessor)
RESOLVER_KEY = web.AppKey("resolver", OutputResolver)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Map exceptions to error envelopes; routing errors pass through."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as e:
        if error_status(e) >= 500:
            logger.exception(f"{request.method} {request.path} failed")
        else:
            logger.info(f"{request.method} {request.path} rejected: {e}")
        return error_response(e, request.app[CONFIG_KEY].stage)


# --- Input validation ---

def node_from_input(data: Any) -> Node:
    """
    Validate a node creation request and build the node.

    Raises:
        ValueError: If the request is invalid
    """
    if not isinstance(data, dict):
        raise ValueError("Invalid node data: body must be an object")
    project_id = data.get("projectId")
    if not isinstance(project_id, str) or not project_id:
        raise ValueError("Invalid node data: projectId is required")
    name = data.get("name")
    if name is not None and not isinstance(name, str):
        raise ValueError("Invalid node data: name must be a string")

    try:
        body = parse_body(data)
        metadata = check_mapping(data.get("metadata") or {}, "metadata")
    except ValueError as e:
        raise ValueError(f"Invalid node data: {e}") from e

    if isinstance(body, Control) and body.builtin_logic_type is None:
        allowed = ", ".join(t.value for t in LogicType)
        raise ValueError(f"Invalid node data: control.logicType must be one of {allowed}")

    return Node.create(project_id, body, name=name, metadata=metadata)


def edge_from_input(data: Any) -> Edge:
    """
    Validate an edge creation request and build the edge.

    Endpoint existence is checked by the store.

    Raises:
        ValueError: If the request is invalid
    """
    if not isinstance(data, dict):
        raise ValueError("Invalid edge data: body must be an object")
    fields = {}
    for key in ("projectId", "sourceNodeId", "targetNodeId", "edgeType"):
        value = data.get(key)
        if not isinstance(value, str) or not value:
            raise ValueError(f"Invalid edge data: {key} is required")
        fields[key] = value
    try:
        metadata = check_mapping(data.get("metadata") or {}, "metadata")
    except ValueError as e:
        raise ValueError(f"Invalid edge data: {e}") from e

    return Edge.create(
        project_id=fields["projectId"],
        source_node_id=fields["sourceNodeId"],
        target_node_id=fields["targetNodeId"],
        edge_type=fields["edgeType"],
        metadata=metadata,
    )


async def _json_body(request: web.Request) -> Any:
    try:
        return await request.json()
    except ValueError as e:
        raise ValueError(f"Request body is not valid JSON: {e}") from e


# --- Handlers ---

async def get_output(request: web.Request) -> web.Response:
    """Get the output from a specific control node."""
    output_node_id = request.match_info["outputNodeId"]
    output = await request.app[RESOLVER_KEY].resolve_output(output_node_id)

    # A declared content type is served verbatim, never re-wrapped
    if output.is_raw:
        return raw(output.value, output.content_type)
    return success(output.value)


async def get_node(request: web.Request) -> web.Response:
    node_id = request.match_info["nodeId"]
    node = await request.app[STORE_KEY].get_node(node_id)
    if node is None:
        raise NotFoundError(f"Node with ID {node_id} not found")
    return success(node.to_dict())


async def list_edges(request: web.Request) -> web.Response:
    target_node_id = request.query.get("targetNodeId")
    if not target_node_id:
        raise ValueError("targetNodeId is required")
    edge_type = request.query.get("edgeType", INPUT_EDGE)
    edges = await request.app[STORE_KEY].get_edges_by_target_and_type(target_node_id, edge_type)
    return success({"items": [edge.to_dict() for edge in edges]})


async def create_node(request: web.Request) -> web.Response:
    node = node_from_input(await _json_body(request))
    await request.app[STORE_KEY].put_node(node)
    logger.info(f"Created {node.node_type.value} node {node.node_id} in {node.project_id}")
    return success(node.to_dict())


async def create_edge(request: web.Request) -> web.Response:
    edge = edge_from_input(await _json_body(request))
    await request.app[STORE_KEY].put_edge(edge)
    logger.info(
        f"Created {edge.edge_type} edge {edge.source_node_id} -> {edge.target_node_id}"
    )
    return success(edge.to_dict())


def create_app(
    store: GraphAccessor,
    resolver: OutputResolver | None = None,
    config: ServiceConfig | None = None,
) -> web.Application:
    """
    Build the aiohttp application.

    Creation routes are only mounted when the store accepts writes.
    """
    config = config or ServiceConfig()
    app = web.Application(middlewares=[error_middleware])
    app[CONFIG_KEY] = config
    app[STORE_KEY] = store
    app[RESOLVER_KEY] = resolver or OutputResolver(store, timeout=config.resolve_timeout)

    app.router.add_get("/output/{outputNodeId}", get_output)
    app.router.add_get("/nodes/{nodeId}", get_node)
    app.router.add_get("/edges", list_edges)
    if isinstance(store, GraphStore):
        app.router.add_post("/nodes", create_node)
        app.router.add_post("/edges", create_edge)

    return app
