"""
Custom - Extension point for logic outside the built-in strategies.

A custom node names a handler in config.handler. Handlers are
registered on the EvaluatorRegistry before it is frozen and are
called with the same arguments as any evaluator.
"""

from __future__ import annotations

from datagraph.core.evaluators import (
    EvaluationContext,
    EvaluationResult,
    EvaluatorType,
    ResolvedInput,
    Unavailable,
)
from datagraph.core.graph import Node
from datagraph.core.values import config_str


def run_custom(
    node: Node,
    inputs: list[ResolvedInput],
    context: EvaluationContext,
) -> EvaluationResult:
    """Execute custom node - dispatch to the named handler, or echo the config."""
    config = node.control.config
    handler_name = config_str(config, "handler")

    if handler_name is None:
        return Unavailable(
            "Custom processing not fully implemented",
            {"customConfig": config},
        )

    handler = context.get_custom_handler(handler_name)
    if handler is None:
        return Unavailable(
            f"Custom handler {handler_name} is not registered",
            {"customConfig": config},
        )

    return handler(node, inputs, context)


CUSTOM = EvaluatorType(
    id="custom",
    name="Custom",
    description="Run a registered custom handler",
    evaluator=run_custom,
)
