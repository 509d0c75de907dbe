"""
Concatenator - Join the payloads of data inputs into one text body.

The output always declares a content type, so the boundary serves it
raw instead of wrapping it in a JSON envelope.
"""

from __future__ import annotations

from datagraph.core.evaluators import (
    Evaluation,
    EvaluationContext,
    EvaluatorType,
    ResolvedInput,
)
from datagraph.core.graph import Node
from datagraph.core.values import config_str, to_text


DEFAULT_CONTENT_TYPE = "text/plain"


def concatenate_inputs(
    node: Node,
    inputs: list[ResolvedInput],
    context: EvaluationContext,
) -> Evaluation:
    """Execute concatenator node - payloads in input order, non-data inputs skipped."""
    content_type = config_str(node.control.config, "outputContentType") or DEFAULT_CONTENT_TYPE

    parts: list[str] = []
    for item in inputs:
        data = item.node.data
        if data is None or data.payload is None:
            continue
        parts.append(to_text(data.payload))

    return Evaluation("".join(parts), content_type=content_type)


CONCATENATOR = EvaluatorType(
    id="concatenator",
    name="Concatenator",
    description="Concatenate data input payloads as text",
    evaluator=concatenate_inputs,
)
