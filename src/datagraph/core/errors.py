"""
Errors - Failure taxonomy for graph access and output resolution.

Every failure that can abort a resolution is a GraphError subclass
carrying an ErrorKind, so the boundary can map it to a transport
status without inspecting messages.

Note: "strategy not yet available" is deliberately not an exception.
Strategies return an Unavailable result instead (see core.evaluators).
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Kinds of resolution failure."""
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    UNSUPPORTED_LOGIC_TYPE = "unsupported_logic_type"
    UPSTREAM_FAILURE = "upstream_failure"
    TIMEOUT = "timeout"
    EVALUATION_FAILED = "evaluation_failed"


class GraphError(Exception):
    """Base exception for graph and resolution errors."""
    kind: ErrorKind = ErrorKind.EVALUATION_FAILED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind.value, "message": self.message}


class NotFoundError(GraphError):
    """A referenced node does not exist."""
    kind = ErrorKind.NOT_FOUND


class InvalidStateError(GraphError):
    """A node exists but fails a structural precondition."""
    kind = ErrorKind.INVALID_STATE


class UnsupportedLogicTypeError(GraphError):
    """No evaluator is registered for a control node's logic type."""
    kind = ErrorKind.UNSUPPORTED_LOGIC_TYPE


class UpstreamFailureError(GraphError):
    """The graph store reported an I/O failure."""
    kind = ErrorKind.UPSTREAM_FAILURE


class ResolutionTimeoutError(UpstreamFailureError):
    """The caller's deadline expired while fetching from the store."""
    kind = ErrorKind.TIMEOUT


class EvaluationError(GraphError):
    """An evaluator raised an unexpected exception."""
    kind = ErrorKind.EVALUATION_FAILED


class GraphAccessError(Exception):
    """Raised by graph accessors when the underlying store fails."""
    pass
