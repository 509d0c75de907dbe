"""
Core module - Graph model, accessor interface, registry and resolution engine.

This module provides the fundamental building blocks for datagraph:
- Graph: Node and edge records
- Values: Structured value checks and canonical text form
- Errors: Resolution failure taxonomy
- Accessor: Store interfaces the engine depends on
- Evaluators: Strategy definitions and registry
- Resolution: The output resolution engine
"""

from datagraph.core.graph import (
    CONTAINS_LABEL_EDGE,
    INPUT_EDGE,
    PROCESSED_BY_EDGE,
    VERSION_OF_EDGE,
    Control,
    DataEntry,
    Edge,
    EdgeId,
    LogicType,
    Node,
    NodeId,
    NodeType,
    new_edge_id,
    new_node_id,
    now_ms,
)

from datagraph.core.values import (
    StructuredValue,
    check_structured,
    config_int,
    config_str,
    to_text,
)

from datagraph.core.errors import (
    ErrorKind,
    EvaluationError,
    GraphAccessError,
    GraphError,
    InvalidStateError,
    NotFoundError,
    ResolutionTimeoutError,
    UnsupportedLogicTypeError,
    UpstreamFailureError,
)

from datagraph.core.accessor import (
    GraphAccessor,
    GraphStore,
)

from datagraph.core.evaluators import (
    Evaluation,
    EvaluationContext,
    EvaluationResult,
    Evaluator,
    EvaluatorRegistry,
    EvaluatorType,
    ResolvedInput,
    Unavailable,
    evaluator,
)

from datagraph.core.resolution import (
    OutputResolver,
    ResolvedOutput,
)


__all__ = [
    # graph.py
    "CONTAINS_LABEL_EDGE",
    "INPUT_EDGE",
    "PROCESSED_BY_EDGE",
    "VERSION_OF_EDGE",
    "Control",
    "DataEntry",
    "Edge",
    "EdgeId",
    "LogicType",
    "Node",
    "NodeId",
    "NodeType",
    "new_edge_id",
    "new_node_id",
    "now_ms",
    # values.py
    "StructuredValue",
    "check_structured",
    "config_int",
    "config_str",
    "to_text",
    # errors.py
    "ErrorKind",
    "EvaluationError",
    "GraphAccessError",
    "GraphError",
    "InvalidStateError",
    "NotFoundError",
    "ResolutionTimeoutError",
    "UnsupportedLogicTypeError",
    "UpstreamFailureError",
    # accessor.py
    "GraphAccessor",
    "GraphStore",
    # evaluators.py
    "Evaluation",
    "EvaluationContext",
    "EvaluationResult",
    "Evaluator",
    "EvaluatorRegistry",
    "EvaluatorType",
    "ResolvedInput",
    "Unavailable",
    "evaluator",
    # resolution.py
    "OutputResolver",
    "ResolvedOutput",
]
