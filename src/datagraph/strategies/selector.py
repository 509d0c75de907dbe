"""
Selector - Choose one input according to config.selectionMode.

Modes:
- latest_by_version_edge: the newest version among the inputs, following
  version_of edges (B -version_of-> A means B supersedes A)
"""

from __future__ import annotations

from datagraph.core.evaluators import (
    Evaluation,
    EvaluationContext,
    EvaluationResult,
    EvaluatorType,
    ResolvedInput,
    Unavailable,
)
from datagraph.core.graph import VERSION_OF_EDGE, Edge, Node
from datagraph.core.values import config_str


LATEST_BY_VERSION_EDGE = "latest_by_version_edge"


def select_input(
    node: Node,
    inputs: list[ResolvedInput],
    context: EvaluationContext,
) -> EvaluationResult:
    """Execute selector node - returns the chosen input's identity and record."""
    mode = config_str(node.control.config, "selectionMode")

    if mode != LATEST_BY_VERSION_EDGE:
        return Unavailable(f"Selection mode {mode} not implemented")

    if not inputs:
        return Unavailable("No input nodes available for selection")

    selected = latest_by_version_edge(inputs, context.edges_of_type(VERSION_OF_EDGE))
    return Evaluation({
        "selectedNodeId": selected.node_id,
        "selectedNode": selected.to_dict(),
    })


def latest_by_version_edge(
    inputs: list[ResolvedInput],
    version_edges: list[Edge],
) -> Node:
    """
    Pick the most recent version among the input nodes.

    Only version_of edges between two inputs count. Among the inputs
    no other input supersedes, the one with the longest chain of
    superseded versions below it wins; ties go to the most recent
    created_at, then to the earliest input position.
    """
    candidates: dict[str, tuple[int, Node]] = {}
    for position, item in enumerate(inputs):
        candidates.setdefault(item.node.node_id, (position, item.node))

    supersedes: dict[str, list[str]] = {}
    for edge in version_edges:
        newer, older = edge.source_node_id, edge.target_node_id
        if newer != older and newer in candidates and older in candidates:
            supersedes.setdefault(newer, []).append(older)

    depths = _chain_depths(list(candidates), supersedes)

    superseded = {older for olders in supersedes.values() for older in olders}
    heads = [nid for nid in candidates if nid not in superseded]
    if not heads:
        # every input is superseded by another: a version cycle
        heads = list(candidates)

    def rank(node_id: str) -> tuple[int, int, int]:
        position, candidate = candidates[node_id]
        return (depths[node_id], candidate.created_at, -position)

    return candidates[max(heads, key=rank)][1]


def _chain_depths(
    node_ids: list[str],
    supersedes: dict[str, list[str]],
) -> dict[str, int]:
    """
    Length of the longest version chain below each node.

    Kahn's algorithm from the oldest versions up. Nodes on a cycle are
    never released and keep the depth reached from outside the cycle.
    """
    depths = {nid: 0 for nid in node_ids}
    waiting = {nid: len(supersedes.get(nid, [])) for nid in node_ids}
    newer_of: dict[str, list[str]] = {}
    for newer, olders in supersedes.items():
        for older in olders:
            newer_of.setdefault(older, []).append(newer)

    ready = [nid for nid, count in waiting.items() if count == 0]
    while ready:
        older = ready.pop(0)
        for newer in newer_of.get(older, []):
            depths[newer] = max(depths[newer], depths[older] + 1)
            waiting[newer] -= 1
            if waiting[newer] == 0:
                ready.append(newer)

    return depths


SELECTOR = EvaluatorType(
    id="selector",
    name="Selector",
    description="Select one input node, e.g. the latest version",
    evaluator=select_input,
    related_edge_types=(VERSION_OF_EDGE,),
)
