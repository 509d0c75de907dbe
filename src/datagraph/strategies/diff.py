"""
Diff - Compare two inputs.

The comparison algorithm is chosen per node through config.diffMode.
Only "unified" (a line diff of the payloads' text) exists so far;
every other request reports the input count and what is missing.
"""

from __future__ import annotations

import difflib

from datagraph.core.evaluators import (
    Evaluation,
    EvaluationContext,
    EvaluationResult,
    EvaluatorType,
    ResolvedInput,
    Unavailable,
)
from datagraph.core.graph import DataEntry, Node
from datagraph.core.values import config_int, config_str, to_text


UNIFIED_MODE = "unified"
DIFF_CONTENT_TYPE = "text/x-diff"


def diff_inputs(
    node: Node,
    inputs: list[ResolvedInput],
    context: EvaluationContext,
) -> EvaluationResult:
    config = node.control.config
    mode = config_str(config, "diffMode")

    if mode != UNIFIED_MODE:
        return Unavailable(
            "Diff processing not fully implemented",
            {"inputCount": len(inputs)},
        )

    if len(inputs) != 2 or any(item.node.data is None for item in inputs):
        return Unavailable(
            "Unified diff needs exactly two data inputs",
            {"inputCount": len(inputs), "expectedInputCount": 2},
        )

    old, new = inputs
    lines = difflib.unified_diff(
        _payload_lines(old.node.data),
        _payload_lines(new.node.data),
        fromfile=old.node.node_id,
        tofile=new.node.node_id,
        n=config_int(config, "contextLines", 3),
        lineterm="",
    )
    return Evaluation("\n".join(lines), content_type=DIFF_CONTENT_TYPE)


def _payload_lines(data: DataEntry) -> list[str]:
    if data.payload is None:
        return []
    return to_text(data.payload).splitlines()


DIFF = EvaluatorType(
    id="diff",
    name="Diff",
    description="Structural difference between two inputs",
    evaluator=diff_inputs,
)
