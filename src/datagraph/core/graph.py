"""
Graph Model - Node and edge records.

This module defines the fundamental building blocks:
- Node: A graph vertex holding either a DataEntry or a Control body
- Edge: A typed, directed relation between two nodes
- Factories that assign identity and timestamps

A node's body is a tagged union: the node type is derived from which
kind of body it carries, so a node can never be both data and control.
"""

from __future__ import annotations

import dataclasses
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NewType
from uuid import uuid4

from datagraph.core.values import check_mapping, check_structured


# Type aliases for clarity
NodeId = NewType("NodeId", str)
EdgeId = NewType("EdgeId", str)

# Edge types the engine and built-in strategies know about.
# Any other string is a valid, opaque edge type.
INPUT_EDGE = "input"
VERSION_OF_EDGE = "version_of"
PROCESSED_BY_EDGE = "processed_by"
CONTAINS_LABEL_EDGE = "contains_label"


def new_node_id() -> NodeId:
    """Generate a new unique node ID."""
    return NodeId(f"n-{uuid4()}")


def new_edge_id() -> EdgeId:
    """Generate a new unique edge ID."""
    return EdgeId(f"e-{uuid4()}")


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


class NodeType(Enum):
    """The two kinds of node."""
    DATA = "data"
    CONTROL = "control"


class LogicType(Enum):
    """Built-in control logic types."""
    SELECTOR = "selector"
    CONCATENATOR = "concatenator"
    DIFF = "diff"
    LABEL = "label"
    CUSTOM = "custom"


@dataclass
class DataEntry:
    """Body of a data node."""
    content_type: str
    payload: Any = None
    data_reference: str | None = None  # e.g. an object store URI for large content

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"contentType": self.content_type}
        if self.payload is not None:
            data["payload"] = self.payload
        if self.data_reference is not None:
            data["dataReference"] = self.data_reference
        return data

    @classmethod
    def from_dict(cls, data: Any) -> DataEntry:
        if not isinstance(data, dict):
            raise ValueError("data must be an object")
        content_type = data.get("contentType")
        if not isinstance(content_type, str) or not content_type:
            raise ValueError("data.contentType is required")
        reference = data.get("dataReference")
        if reference is not None and not isinstance(reference, str):
            raise ValueError("data.dataReference must be a string")
        payload = data.get("payload")
        check_structured(payload, "data.payload")
        return cls(
            content_type=content_type,
            payload=payload,
            data_reference=reference,
        )


@dataclass
class Control:
    """Body of a control node."""
    logic_type: str
    config: dict[str, Any] = field(default_factory=dict)

    @property
    def builtin_logic_type(self) -> LogicType | None:
        """The matching built-in logic type, if any."""
        try:
            return LogicType(self.logic_type)
        except ValueError:
            return None

    def to_dict(self) -> dict[str, Any]:
        return {"logicType": self.logic_type, "config": self.config}

    @classmethod
    def from_dict(cls, data: Any) -> Control:
        if not isinstance(data, dict):
            raise ValueError("control must be an object")
        logic_type = data.get("logicType")
        if not isinstance(logic_type, str) or not logic_type:
            raise ValueError("control.logicType is required")
        if "config" not in data:
            raise ValueError("control.config is required")
        return cls(
            logic_type=logic_type,
            config=check_mapping(data["config"], "control.config"),
        )


NodeBody = DataEntry | Control


@dataclass
class Node:
    """
    A single vertex in the graph.

    Nodes have:
    - A unique ID, scoped by a project ID
    - A body: DataEntry for data nodes, Control for control nodes
    - An optional display name
    - Opaque metadata
    - Creation and update timestamps (ms since epoch)
    """
    node_id: NodeId
    project_id: str
    body: NodeBody
    name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: int = 0
    updated_at: int = 0

    @classmethod
    def create(
        cls,
        project_id: str,
        body: NodeBody,
        name: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Node:
        """Factory method to create a new node."""
        timestamp = now_ms()
        return cls(
            node_id=new_node_id(),
            project_id=project_id,
            body=body,
            name=name,
            metadata=metadata or {},
            created_at=timestamp,
            updated_at=timestamp,
        )

    @property
    def node_type(self) -> NodeType:
        if isinstance(self.body, Control):
            return NodeType.CONTROL
        return NodeType.DATA

    @property
    def data(self) -> DataEntry | None:
        return self.body if isinstance(self.body, DataEntry) else None

    @property
    def control(self) -> Control | None:
        return self.body if isinstance(self.body, Control) else None

    @property
    def is_control(self) -> bool:
        return self.node_type is NodeType.CONTROL

    def updated(self, **changes: Any) -> Node:
        """
        Return a copy with the given fields overwritten and updated_at refreshed.

        Raises:
            ValueError: On an attempt to change identity, creation time
                or node type.
        """
        for frozen in ("node_id", "created_at", "updated_at"):
            if frozen in changes:
                raise ValueError(f"{frozen} cannot be updated")
        body = changes.get("body")
        if body is not None and type(body) is not type(self.body):
            raise ValueError("node type is immutable")
        return dataclasses.replace(self, **changes, updated_at=now_ms())

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire form."""
        data: dict[str, Any] = {
            "nodeId": self.node_id,
            "projectId": self.project_id,
            "nodeType": self.node_type.value,
        }
        if self.name is not None:
            data["name"] = self.name
        data[self.node_type.value] = self.body.to_dict()
        data["metadata"] = self.metadata
        data["createdAt"] = self.created_at
        data["updatedAt"] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Node:
        """
        Deserialize from the wire form.

        Raises:
            ValueError: If the record is malformed
        """
        if not isinstance(data, dict):
            raise ValueError("node must be an object")
        node_id = _require_str(data, "nodeId")
        body = parse_body(data)
        return cls(
            node_id=NodeId(node_id),
            project_id=_require_str(data, "projectId"),
            body=body,
            name=_optional_str(data, "name"),
            metadata=check_mapping(data.get("metadata") or {}, "metadata"),
            created_at=_optional_int(data, "createdAt"),
            updated_at=_optional_int(data, "updatedAt"),
        )


@dataclass
class Edge:
    """
    A directed, typed relation between two nodes.

    Edges reference nodes but do not own them.
    """
    edge_id: EdgeId
    project_id: str
    source_node_id: NodeId
    target_node_id: NodeId
    edge_type: str
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: int = 0
    updated_at: int = 0

    @classmethod
    def create(
        cls,
        project_id: str,
        source_node_id: str,
        target_node_id: str,
        edge_type: str,
        metadata: dict[str, Any] | None = None,
    ) -> Edge:
        """Factory method to create a new edge."""
        timestamp = now_ms()
        return cls(
            edge_id=new_edge_id(),
            project_id=project_id,
            source_node_id=NodeId(source_node_id),
            target_node_id=NodeId(target_node_id),
            edge_type=edge_type,
            metadata=metadata or {},
            created_at=timestamp,
            updated_at=timestamp,
        )

    def updated(self, **changes: Any) -> Edge:
        """Return a copy with the given fields overwritten and updated_at refreshed."""
        for frozen in ("edge_id", "created_at", "updated_at"):
            if frozen in changes:
                raise ValueError(f"{frozen} cannot be updated")
        return dataclasses.replace(self, **changes, updated_at=now_ms())

    def to_dict(self) -> dict[str, Any]:
        return {
            "edgeId": self.edge_id,
            "projectId": self.project_id,
            "sourceNodeId": self.source_node_id,
            "targetNodeId": self.target_node_id,
            "edgeType": self.edge_type,
            "metadata": self.metadata,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Edge:
        if not isinstance(data, dict):
            raise ValueError("edge must be an object")
        return cls(
            edge_id=EdgeId(_require_str(data, "edgeId")),
            project_id=_require_str(data, "projectId"),
            source_node_id=NodeId(_require_str(data, "sourceNodeId")),
            target_node_id=NodeId(_require_str(data, "targetNodeId")),
            edge_type=_require_str(data, "edgeType"),
            metadata=check_mapping(data.get("metadata") or {}, "metadata"),
            created_at=_optional_int(data, "createdAt"),
            updated_at=_optional_int(data, "updatedAt"),
        )


def parse_body(data: dict[str, Any]) -> NodeBody:
    """
    Parse the body matching a record's nodeType.

    The body for the other node type, if present, is ignored.
    """
    node_type = data.get("nodeType")
    if node_type == NodeType.DATA.value:
        if "data" not in data:
            raise ValueError("data nodes require a data object")
        return DataEntry.from_dict(data["data"])
    if node_type == NodeType.CONTROL.value:
        if "control" not in data:
            raise ValueError("control nodes require a control object")
        return Control.from_dict(data["control"])
    raise ValueError(f"nodeType must be 'data' or 'control', got {node_type!r}")


def _require_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"{key} is required")
    return value


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


def _optional_int(data: dict[str, Any], key: str) -> int:
    value = data.get(key, 0)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer timestamp")
    return value
