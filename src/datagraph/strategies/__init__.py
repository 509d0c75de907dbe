"""
Strategies package - Built-in evaluation strategies.

One module per logic type:
- selector: Pick one input (latest version)
- concatenator: Join data payloads as text
- diff: Compare two inputs
- label: Echo the node's label
- custom: Dispatch to registered custom handlers
"""

from __future__ import annotations

from datagraph.core.evaluators import Evaluator, EvaluatorRegistry
from datagraph.strategies.concatenator import CONCATENATOR
from datagraph.strategies.custom import CUSTOM
from datagraph.strategies.diff import DIFF
from datagraph.strategies.label import LABEL
from datagraph.strategies.selector import SELECTOR


BUILTIN_EVALUATORS = (SELECTOR, CONCATENATOR, DIFF, LABEL, CUSTOM)


def register_builtin_evaluators(registry: EvaluatorRegistry) -> None:
    """Register all built-in strategies."""
    for evaluator_type in BUILTIN_EVALUATORS:
        registry.register(evaluator_type)


def create_registry(
    custom_handlers: dict[str, Evaluator] | None = None,
    freeze: bool = True,
) -> EvaluatorRegistry:
    """
    Build a registry with the built-ins and optional custom handlers.

    Usage:
        registry = create_registry({"word_count": count_words})
        resolver = OutputResolver(store, registry)
    """
    registry = EvaluatorRegistry()
    register_builtin_evaluators(registry)
    for name, handler in (custom_handlers or {}).items():
        registry.register_custom_handler(name, handler)
    if freeze:
        registry.freeze()
    return registry


__all__ = [
    "BUILTIN_EVALUATORS",
    "create_registry",
    "register_builtin_evaluators",
]
