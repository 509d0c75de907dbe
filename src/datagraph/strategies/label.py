"""
Label - Echo a human-readable label for the node.

Labeling semantics are not settled yet; the node's name is reported
back inside an Unavailable diagnostic.
"""

from __future__ import annotations

from datagraph.core.evaluators import (
    EvaluationContext,
    EvaluatorType,
    ResolvedInput,
    Unavailable,
)
from datagraph.core.graph import Node


DEFAULT_LABEL = "Unnamed Label"


def label_node(
    node: Node,
    inputs: list[ResolvedInput],
    context: EvaluationContext,
) -> Unavailable:
    return Unavailable(
        "Label processing not fully implemented",
        {"label": node.name or DEFAULT_LABEL},
    )


LABEL = EvaluatorType(
    id="label",
    name="Label",
    description="Human-readable label derived from the node name",
    evaluator=label_node,
)
