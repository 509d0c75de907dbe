"""
datagraph - Main Entry Point

Commands:
    datagraph serve [--config PATH] [--host HOST] [--port PORT] [--snapshot PATH]
    datagraph resolve NODE_ID [--config PATH] [--snapshot PATH] [--timeout S]
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from pathlib import Path

from datagraph.config import ServiceConfig
from datagraph.core.accessor import GraphAccessor
from datagraph.core.errors import GraphError
from datagraph.core.evaluators import EvaluatorRegistry
from datagraph.core.resolution import OutputResolver, ResolvedOutput
from datagraph.stores import HttpGraphStore, InMemoryGraphStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: int) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


def build_store(config: ServiceConfig) -> GraphAccessor:
    """Create the graph store described by the config."""
    if config.store == "http":
        logger.info(f"Using remote graph store at {config.store_url}")
        return HttpGraphStore(config.store_url)
    if config.snapshot_path is not None:
        return InMemoryGraphStore.load_snapshot(config.snapshot_path)
    logger.info("Using empty in-memory graph store")
    return InMemoryGraphStore()


def serve(config: ServiceConfig) -> int:
    """Run the HTTP service until interrupted."""
    from aiohttp import web

    from datagraph.api import create_app

    # Populate and freeze the registry before the first request
    registry = EvaluatorRegistry.instance()
    logger.info(f"Registered logic types: {', '.join(registry.list_types())}")

    app = create_app(build_store(config), config=config)
    web.run_app(app, host=config.host, port=config.port, print=None)
    return 0


async def resolve_once(
    store: GraphAccessor,
    node_id: str,
    timeout: float | None = None,
) -> ResolvedOutput:
    return await OutputResolver(store, timeout=timeout).resolve_output(node_id)


def resolve(config: ServiceConfig, node_id: str) -> int:
    """Resolve one output and print it."""
    store = build_store(config)
    try:
        output = asyncio.run(resolve_once(store, node_id, config.resolve_timeout))
    except GraphError as e:
        print(f"error: {e.kind.value}: {e.message}", file=sys.stderr)
        return 1

    if output.is_raw:
        sys.stdout.write(output.value)
        if not output.value.endswith("\n"):
            sys.stdout.write("\n")
    else:
        print(json.dumps(output.value, indent=2, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="datagraph",
        description="Resolve control node outputs over a data/control graph",
    )
    parser.add_argument("--config", type=Path, help="JSON config file")
    parser.add_argument("--log-level", help="Override the configured log level")
    sub = parser.add_subparsers(dest="command", required=True)

    serve_parser = sub.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host")
    serve_parser.add_argument("--port", type=int)
    serve_parser.add_argument("--snapshot", type=Path, help="Load a JSON graph snapshot")

    resolve_parser = sub.add_parser("resolve", help="Resolve one control node and print it")
    resolve_parser.add_argument("node_id")
    resolve_parser.add_argument("--snapshot", type=Path, help="Load a JSON graph snapshot")
    resolve_parser.add_argument("--timeout", type=float, help="Seconds allowed for store access")

    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for datagraph.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    if sys.version_info < (3, 11):
        print("Error: datagraph requires Python 3.11 or later", file=sys.stderr)
        return 1

    args = build_parser().parse_args(argv)

    try:
        config = ServiceConfig.load(args.config)
        overrides = {
            "host": getattr(args, "host", None),
            "port": getattr(args, "port", None),
            "snapshot_path": args.snapshot,
            "resolve_timeout": getattr(args, "timeout", None),
            "log_level": args.log_level,
        }
        config = dataclasses.replace(
            config, **{k: v for k, v in overrides.items() if v is not None}
        )
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    configure_logging(config.logging_level())

    try:
        if args.command == "serve":
            return serve(config)
        return resolve(config, args.node_id)
    except (FileNotFoundError, ValueError) as e:
        # snapshot problems surface here
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
