"""
Tests for the output resolution engine.
"""

import asyncio

import pytest

from datagraph.core.accessor import GraphAccessor
from datagraph.core.errors import (
    EvaluationError,
    GraphAccessError,
    InvalidStateError,
    NotFoundError,
    ResolutionTimeoutError,
    UnsupportedLogicTypeError,
    UpstreamFailureError,
)
from datagraph.core.evaluators import Evaluation, EvaluatorRegistry, EvaluatorType
from datagraph.core.resolution import OutputResolver, ResolvedOutput
from datagraph.strategies import create_registry


class RecordingAccessor(GraphAccessor):
    """Wraps a store with per-node delays, failures and a call log."""

    def __init__(self, store, delays=None, failures=None):
        self.store = store
        self.delays = delays or {}
        self.failures = failures or {}
        self.node_calls = []
        self.cancelled = []

    async def get_node(self, node_id):
        self.node_calls.append(node_id)
        try:
            await asyncio.sleep(self.delays.get(node_id, 0))
        except asyncio.CancelledError:
            self.cancelled.append(node_id)
            raise
        if node_id in self.failures:
            raise self.failures[node_id]
        return await self.store.get_node(node_id)

    async def get_edges_by_target_and_type(self, target_node_id, edge_type):
        return await self.store.get_edges_by_target_and_type(target_node_id, edge_type)


def resolve_with(accessor, node, registry=None, timeout=None):
    resolver = OutputResolver(accessor, registry, timeout=timeout)
    return asyncio.run(resolver.resolve_output(node.node_id))


class TestValidation:

    def test_missing_node(self, graph):
        resolver = OutputResolver(graph.store)
        with pytest.raises(NotFoundError, match="n-missing not found"):
            asyncio.run(resolver.resolve_output("n-missing"))

    def test_data_node_is_invalid_state(self, graph):
        node = graph.data("plain")
        with pytest.raises(InvalidStateError, match="is not a control node"):
            graph.resolve(node)

    def test_unregistered_logic_type(self, graph):
        node = graph.control("summarize")
        with pytest.raises(UnsupportedLogicTypeError, match="summarize"):
            graph.resolve(node)

    def test_missing_input_is_not_found(self, graph):
        present = graph.data("here")
        ghost = graph.data("gone")
        node = graph.control("concatenator")
        graph.link(present, node)
        graph.link(ghost, node)
        del graph.store._nodes[ghost.node_id]

        with pytest.raises(NotFoundError, match=f"Input node with ID {ghost.node_id}"):
            graph.resolve(node)


class TestBuiltinsThroughEngine:

    def test_concatenation_is_raw_text(self, graph):
        foo, bar = graph.data("foo"), graph.data("bar")
        node = graph.control("concatenator")
        graph.link(foo, node)
        graph.link(bar, node)

        output = graph.resolve(node)

        assert output == ResolvedOutput("foobar", "text/plain")
        assert output.is_raw

    def test_selector_follows_version_edges(self, graph):
        a = graph.data("v1", created_at=200)
        b = graph.data("v2", created_at=100)
        graph.link(b, a, "version_of")
        node = graph.control("selector", {"selectionMode": "latest_by_version_edge"})
        graph.link(a, node)
        graph.link(b, node)

        output = graph.resolve(node)

        assert not output.is_raw
        assert output.value["selectedNodeId"] == b.node_id
        assert output.value["selectedNode"]["data"]["payload"] == "v2"

    @pytest.mark.parametrize("logic_type", ["selector", "concatenator", "diff", "label", "custom"])
    def test_zero_inputs_never_raise(self, graph, logic_type):
        node = graph.control(logic_type, {"selectionMode": "latest_by_version_edge"})
        output = graph.resolve(node)
        assert isinstance(output, ResolvedOutput)

    def test_unavailable_results_are_flagged(self, graph):
        node = graph.control("label", name="Draft")
        output = graph.resolve(node)
        assert output.unavailable
        assert output.value == {
            "message": "Label processing not fully implemented",
            "label": "Draft",
        }

    def test_structured_value_without_content_type(self, graph):
        def count(node, inputs, context):
            return Evaluation({"count": len(inputs)})

        registry = create_registry({"count": count})
        source = graph.data("x")
        node = graph.control("custom", {"handler": "count"})
        graph.link(source, node)

        assert graph.resolve(node, registry) == ResolvedOutput({"count": 1})

    def test_non_string_raw_value_is_serialized(self, graph):
        registry = EvaluatorRegistry()
        registry.register(EvaluatorType(
            id="rows",
            name="Rows",
            evaluator=lambda node, inputs, context: Evaluation([1, 2], "application/json"),
        ))
        node = graph.control("rows")

        assert graph.resolve(node, registry).value == "[1,2]"


class TestInputs:

    def test_order_follows_edges_not_fetch_completion(self, graph):
        first, second, third = graph.data("1"), graph.data("2"), graph.data("3")
        node = graph.control("concatenator")
        for source in (first, second, third):
            graph.link(source, node)
        accessor = RecordingAccessor(graph.store, delays={
            first.node_id: 0.05,
            second.node_id: 0.02,
            third.node_id: 0,
        })

        assert resolve_with(accessor, node).value == "123"

    def test_duplicate_edges_fetch_once_and_appear_twice(self, graph):
        source = graph.data("ab")
        node = graph.control("concatenator")
        graph.link(source, node)
        graph.link(source, node)
        accessor = RecordingAccessor(graph.store)

        output = resolve_with(accessor, node)

        assert output.value == "abab"
        assert accessor.node_calls.count(source.node_id) == 1

    def test_fail_fast_cancels_pending_fetches(self, graph):
        slow, broken = graph.data("slow"), graph.data("broken")
        node = graph.control("concatenator")
        graph.link(slow, node)
        graph.link(broken, node)
        del graph.store._nodes[broken.node_id]
        accessor = RecordingAccessor(graph.store, delays={slow.node_id: 30})

        with pytest.raises(NotFoundError):
            resolve_with(accessor, node)

        assert accessor.cancelled == [slow.node_id]

    def test_resolution_is_idempotent(self, graph):
        a, b = graph.data({"k": 1}), graph.data("tail")
        node = graph.control("concatenator")
        graph.link(a, node)
        graph.link(b, node)

        assert graph.resolve(node) == graph.resolve(node)

    def test_other_edge_types_are_not_inputs(self, graph):
        source, unrelated = graph.data("in"), graph.data("out")
        node = graph.control("concatenator")
        graph.link(source, node)
        graph.link(unrelated, node, "processed_by")

        assert graph.resolve(node).value == "in"


class TestFailures:

    def test_store_failure_is_upstream(self, graph):
        source = graph.data("x")
        node = graph.control("concatenator")
        graph.link(source, node)
        accessor = RecordingAccessor(
            graph.store, failures={source.node_id: GraphAccessError("connection reset")}
        )

        with pytest.raises(UpstreamFailureError, match="connection reset"):
            resolve_with(accessor, node)

    def test_fetch_cancelled_by_store_is_upstream(self, graph):
        source = graph.data("x")
        node = graph.control("concatenator")
        graph.link(source, node)
        accessor = RecordingAccessor(
            graph.store, failures={source.node_id: asyncio.CancelledError()}
        )

        with pytest.raises(UpstreamFailureError, match="cancelled"):
            resolve_with(accessor, node)

    def test_deadline_expiry(self, graph):
        source = graph.data("x")
        node = graph.control("concatenator")
        graph.link(source, node)
        accessor = RecordingAccessor(graph.store, delays={source.node_id: 30})

        with pytest.raises(ResolutionTimeoutError) as exc_info:
            resolve_with(accessor, node, timeout=0.05)

        assert exc_info.value.kind.value == "timeout"
        assert accessor.cancelled == [source.node_id]

    def test_accessor_timeout_is_upstream_not_deadline(self, graph):
        source = graph.data("x")
        node = graph.control("concatenator")
        graph.link(source, node)
        accessor = RecordingAccessor(graph.store, failures={source.node_id: TimeoutError()})

        with pytest.raises(UpstreamFailureError) as exc_info:
            resolve_with(accessor, node, timeout=5)

        assert not isinstance(exc_info.value, ResolutionTimeoutError)

    def test_evaluator_exception_is_evaluation_error(self, graph):
        def explode(node, inputs, context):
            raise KeyError("boom")

        registry = create_registry({"explode": explode})
        node = graph.control("custom", {"handler": "explode"})

        with pytest.raises(EvaluationError, match="boom"):
            graph.resolve(node, registry)

    def test_evaluator_must_return_a_result(self, graph):
        registry = EvaluatorRegistry()
        registry.register(EvaluatorType(
            id="bare", name="Bare", evaluator=lambda node, inputs, context: "text",
        ))
        node = graph.control("bare")

        with pytest.raises(EvaluationError, match="expected Evaluation or Unavailable"):
            graph.resolve(node, registry)

    def test_bad_config_propagates_as_invalid_state(self, graph):
        node = graph.control("concatenator", {"outputContentType": 5})
        with pytest.raises(InvalidStateError):
            graph.resolve(node)
