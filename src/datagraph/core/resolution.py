"""
Output Resolution Engine - On-demand evaluation of control nodes.

Each resolve_output() call is one linear pipeline:
fetch node -> validate -> fetch inputs (concurrently) -> dispatch ->
evaluate -> normalize.

The engine keeps no state between calls. The accessor is the only
place that suspends; everything else is synchronous computation.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Hashable, TypeVar

from datagraph.core.accessor import GraphAccessor
from datagraph.core.errors import (
    EvaluationError,
    GraphAccessError,
    GraphError,
    InvalidStateError,
    NotFoundError,
    ResolutionTimeoutError,
    UnsupportedLogicTypeError,
    UpstreamFailureError,
)
from datagraph.core.evaluators import (
    Evaluation,
    EvaluationContext,
    EvaluationResult,
    EvaluatorRegistry,
    EvaluatorType,
    ResolvedInput,
    Unavailable,
)
from datagraph.core.graph import INPUT_EDGE, Edge, Node
from datagraph.core.values import to_text

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass(frozen=True)
class ResolvedOutput:
    """
    Normalized output of a control node.

    When content_type is set, value is always a string and must be
    emitted as-is with that content type. Otherwise value is a generic
    structured value for the default JSON envelope.
    """
    value: Any
    content_type: str | None = None
    unavailable: bool = False  # strategy returned an Unavailable diagnostic

    @property
    def is_raw(self) -> bool:
        return self.content_type is not None


class OutputResolver:
    """
    Resolves control node outputs against a graph accessor.

    Features:
    - Concurrent, fail-fast fetch of input nodes
    - Order-preserving input list (edge query order)
    - Optional deadline over all store access
    - Content type bypass for non-JSON outputs
    """

    def __init__(
        self,
        accessor: GraphAccessor,
        registry: EvaluatorRegistry | None = None,
        timeout: float | None = None,
    ):
        self._accessor = accessor
        self._registry = registry or EvaluatorRegistry.instance()
        self._timeout = timeout

    @property
    def registry(self) -> EvaluatorRegistry:
        return self._registry

    async def resolve_output(
        self,
        output_node_id: str,
        timeout: float | None = None,
    ) -> ResolvedOutput:
        """
        Resolve the output of a control node.

        Args:
            output_node_id: ID of the control node
            timeout: Seconds allowed for store access; overrides the
                resolver default

        Returns:
            The normalized output

        Raises:
            NotFoundError: The node or one of its inputs does not exist
            InvalidStateError: The node is not a control node
            UnsupportedLogicTypeError: No evaluator for the logic type
            UpstreamFailureError: The store failed
            ResolutionTimeoutError: The deadline expired
            EvaluationError: The evaluator raised
        """
        deadline = timeout if timeout is not None else self._timeout
        try:
            return await self._resolve(output_node_id, deadline)
        except GraphError as e:
            logger.warning(f"Resolution of {output_node_id} failed ({e.kind.value}): {e.message}")
            raise

    async def _resolve(self, output_node_id: str, deadline: float | None) -> ResolvedOutput:
        scope = asyncio.timeout(deadline)
        try:
            async with scope:
                node, inputs, evaluator_type, context = await self._prepare(output_node_id)
        except TimeoutError as e:
            if not scope.expired():
                raise UpstreamFailureError(
                    f"Store timed out while resolving {output_node_id}"
                ) from e
            raise ResolutionTimeoutError(
                f"Resolution of {output_node_id} timed out after {deadline}s"
            ) from None

        result = self._evaluate(evaluator_type, node, inputs, context)
        output = self._normalize(result)
        logger.info(
            f"Resolved {output_node_id} ({evaluator_type.id}, {len(inputs)} inputs"
            f"{', unavailable' if output.unavailable else ''})"
        )
        return output

    async def _prepare(
        self,
        output_node_id: str,
    ) -> tuple[Node, list[ResolvedInput], EvaluatorType, EvaluationContext]:
        """Fetch and validate everything the evaluator needs."""
        node = await self._get_node(output_node_id)
        if node is None:
            raise NotFoundError(f"Node with ID {output_node_id} not found")

        control = node.control
        if control is None:
            raise InvalidStateError(f"Node with ID {output_node_id} is not a control node")

        edges = await self._get_edges(output_node_id, INPUT_EDGE)
        logger.debug(f"{output_node_id}: {len(edges)} input edges")

        # One fetch per distinct source; slots are filled back in edge order
        source_ids = list(dict.fromkeys(edge.source_node_id for edge in edges))
        sources = await _fetch_all(source_ids, self._get_source)
        inputs = [ResolvedInput(edge=edge, node=sources[edge.source_node_id]) for edge in edges]

        evaluator_type = self._registry.get(control.logic_type)
        if evaluator_type is None:
            raise UnsupportedLogicTypeError(
                f"Unsupported control logic type: {control.logic_type}"
            )

        related = await self._get_related_edges(source_ids, evaluator_type.related_edge_types)
        context = EvaluationContext(
            output_node_id=output_node_id,
            related_edges=related,
            registry=self._registry,
        )
        return node, inputs, evaluator_type, context

    async def _get_related_edges(
        self,
        node_ids: list[str],
        edge_types: tuple[str, ...],
    ) -> list[Edge]:
        """Fetch edges of the given types that target any of the nodes."""
        if not node_ids or not edge_types:
            return []
        keys = [(node_id, edge_type) for node_id in node_ids for edge_type in edge_types]

        async def fetch(key: tuple[str, str]) -> list[Edge]:
            return await self._get_edges(*key)

        found = await _fetch_all(keys, fetch)
        return [edge for key in keys for edge in found[key]]

    async def _get_node(self, node_id: str) -> Node | None:
        try:
            return await self._accessor.get_node(node_id)
        except GraphAccessError as e:
            raise UpstreamFailureError(f"Failed to fetch node {node_id}: {e}") from e

    async def _get_source(self, node_id: str) -> Node:
        node = await self._get_node(node_id)
        if node is None:
            raise NotFoundError(f"Input node with ID {node_id} not found")
        return node

    async def _get_edges(self, target_node_id: str, edge_type: str) -> list[Edge]:
        try:
            return await self._accessor.get_edges_by_target_and_type(target_node_id, edge_type)
        except GraphAccessError as e:
            raise UpstreamFailureError(
                f"Failed to query {edge_type} edges of {target_node_id}: {e}"
            ) from e

    def _evaluate(
        self,
        evaluator_type: EvaluatorType,
        node: Node,
        inputs: list[ResolvedInput],
        context: EvaluationContext,
    ) -> EvaluationResult:
        """Run a strategy, keeping its failures inside the error taxonomy."""
        try:
            result = evaluator_type.evaluator(node, inputs, context)
        except GraphError:
            raise
        except Exception as e:
            raise EvaluationError(
                f"{evaluator_type.name} evaluation of {node.node_id} failed: {e}"
            ) from e

        if not isinstance(result, (Evaluation, Unavailable)):
            raise EvaluationError(
                f"{evaluator_type.name} returned {type(result).__name__}, "
                "expected Evaluation or Unavailable"
            )
        return result

    def _normalize(self, result: EvaluationResult) -> ResolvedOutput:
        if isinstance(result, Unavailable):
            return ResolvedOutput(value=result.as_value(), unavailable=True)
        if result.content_type:
            return ResolvedOutput(value=to_text(result.value), content_type=result.content_type)
        return ResolvedOutput(value=result.value)


async def _fetch_all(
    keys: list[K],
    fetch: Callable[[K], Awaitable[V]],
) -> dict[K, V]:
    """
    Run one fetch per key concurrently and join.

    Fails fast: the first error (in key order among those finished)
    is raised and every unfinished fetch is cancelled.
    """
    if not keys:
        return {}
    tasks = {key: asyncio.create_task(fetch(key)) for key in keys}
    try:
        done, _ = await asyncio.wait(tasks.values(), return_when=asyncio.FIRST_EXCEPTION)
        errors = [
            task.exception() for task in tasks.values()
            if task in done and not task.cancelled() and task.exception() is not None
        ]
        if errors:
            raise errors[0]
        # a fetch cancelled from inside the accessor, not by us
        for key, task in tasks.items():
            if task.cancelled():
                raise UpstreamFailureError(f"Fetch of {key} was cancelled")
    finally:
        pending = [task for task in tasks.values() if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
    return {key: task.result() for key, task in tasks.items()}
