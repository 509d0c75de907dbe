"""
HTTP API package.

Usage:
    from datagraph.api import create_app

    app = create_app(store, config=config)
"""

from datagraph.api.responses import error_response, raw, success
from datagraph.api.server import create_app, edge_from_input, node_from_input


__all__ = [
    "create_app",
    "edge_from_input",
    "error_response",
    "node_from_input",
    "raw",
    "success",
]
