"""
Evaluator Registry - Strategy definitions and the logic type registry.

This module defines how evaluation strategies are specified:
- Evaluation / Unavailable: The two shapes a strategy can return
- ResolvedInput: One input edge paired with its source node
- EvaluationContext: Read-only extras handed to a strategy
- EvaluatorType: Complete definition of a strategy
- EvaluatorRegistry: Maps logic type tags to strategies
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Protocol, runtime_checkable

from datagraph.core.graph import Edge, Node


@dataclass(frozen=True)
class Evaluation:
    """A successful strategy result."""
    value: Any
    content_type: str | None = None  # set to bypass the JSON envelope


@dataclass(frozen=True)
class Unavailable:
    """
    The strategy recognized the request but cannot serve it yet.

    Distinct from a failure: resolution still succeeds, with a
    diagnostic payload describing what is missing.
    """
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def as_value(self) -> dict[str, Any]:
        return {**self.details, "message": self.message}


EvaluationResult = Evaluation | Unavailable


@dataclass(frozen=True)
class ResolvedInput:
    """An input edge and the source node it points from."""
    edge: Edge
    node: Node


@dataclass
class EvaluationContext:
    """
    Context passed to evaluators.

    Provides access to:
    - Edges of the evaluator's related types that target input nodes
    - Custom handlers registered for the `custom` logic type
    """
    output_node_id: str
    related_edges: list[Edge] = field(default_factory=list)
    registry: EvaluatorRegistry | None = None

    def edges_of_type(self, edge_type: str) -> list[Edge]:
        return [e for e in self.related_edges if e.edge_type == edge_type]

    def get_custom_handler(self, name: str) -> Evaluator | None:
        if self.registry is None:
            return None
        return self.registry.get_custom_handler(name)


@runtime_checkable
class Evaluator(Protocol):
    """Protocol for evaluation functions."""

    def __call__(
        self,
        node: Node,
        inputs: list[ResolvedInput],
        context: EvaluationContext,
    ) -> EvaluationResult:
        """
        Evaluate a control node.

        Args:
            node: The control node being resolved
            inputs: Resolved inputs in edge order
            context: Related edges and custom handlers

        Returns:
            Evaluation or Unavailable
        """
        ...


@dataclass
class EvaluatorType:
    """
    Complete definition of an evaluation strategy.

    Control nodes reference an EvaluatorType by its id through
    control.logic_type.
    """
    id: str  # Logic type tag, e.g. "selector"
    name: str  # Display name, e.g. "Selector"
    evaluator: Evaluator
    description: str = ""

    # Edge types the engine prefetches for this strategy (targets = inputs)
    related_edge_types: tuple[str, ...] = ()


class EvaluatorRegistry:
    """
    Registry of evaluation strategies, keyed by logic type.

    Populated once at startup and frozen; lookups afterwards are plain
    dict reads and need no locking.
    """

    _instance: ClassVar[EvaluatorRegistry | None] = None

    def __init__(self):
        self._types: dict[str, EvaluatorType] = {}
        self._custom_handlers: dict[str, Evaluator] = {}
        self._frozen = False

    @classmethod
    def instance(cls) -> EvaluatorRegistry:
        """Get the process-wide registry with the built-in strategies."""
        if cls._instance is None:
            from datagraph.strategies import create_registry

            cls._instance = create_registry()
        return cls._instance

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Reject any further registration."""
        self._frozen = True

    def _check_writable(self) -> None:
        if self._frozen:
            raise RuntimeError("Evaluator registry is frozen")

    def register(self, evaluator_type: EvaluatorType) -> None:
        """Register a strategy."""
        self._check_writable()
        self._types[evaluator_type.id] = evaluator_type

    def get(self, logic_type: str) -> EvaluatorType | None:
        """Get a strategy by logic type."""
        return self._types.get(logic_type)

    def list_types(self) -> list[str]:
        return list(self._types)

    def register_custom_handler(self, name: str, handler: Evaluator) -> None:
        """Register a handler selectable by `config.handler` on custom nodes."""
        self._check_writable()
        self._custom_handlers[name] = handler

    def get_custom_handler(self, name: str) -> Evaluator | None:
        return self._custom_handlers.get(name)

    def __len__(self) -> int:
        return len(self._types)

    def __contains__(self, logic_type: str) -> bool:
        return logic_type in self._types


def evaluator(
    registry: EvaluatorRegistry,
    id: str,
    name: str,
    description: str = "",
    **kwargs,
) -> Callable[[Evaluator], EvaluatorType]:
    """
    Decorator to create and register a strategy from a function.

    Usage:
        @evaluator(registry, "uppercase", "Uppercase")
        def uppercase(node, inputs, context):
            return Evaluation(...)
    """
    def decorator(func: Evaluator) -> EvaluatorType:
        et = EvaluatorType(
            id=id,
            name=name,
            evaluator=func,
            description=description,
            **kwargs,
        )
        registry.register(et)
        return et
    return decorator
