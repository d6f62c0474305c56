from __future__ import annotations

from enum import Enum
from typing import Any

import networkx as nx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from k8s_resource_viewer.errors import InvalidObjectError


def split_api_version(api_version: str) -> tuple[str, str]:
    """Split ``group/version`` into its parts. The core group is ``""``."""
    if "/" in api_version:
        group, version = api_version.split("/", 1)
        return group, version
    return "", api_version


class ObjectKey(BaseModel):
    """
    Identity of a cluster object inside one graph.

    Two objects with equal keys are the same node. Cluster-scoped objects
    have an empty namespace.

    Example:
        >>> key = ObjectKey(api_version="apps/v1", kind="Deployment", namespace="default", name="web")
        >>> key.node_id
        'apps/v1:Deployment:default:web'
    """

    model_config = ConfigDict(frozen=True)

    api_version: str = Field(..., min_length=1)
    kind: str = Field(..., min_length=1)
    namespace: str = ""
    name: str = Field(..., min_length=1)

    @field_validator("kind")
    @classmethod
    def validate_kind(cls, v: str) -> str:
        if not v[0].isupper():
            raise ValueError(f"Kind must start with uppercase letter: {v}")
        return v

    @classmethod
    def from_object(cls, obj: dict[str, Any]) -> ObjectKey:
        """
        Build a key from an object dict.

        Raises:
            InvalidObjectError: if apiVersion, kind or name are missing
        """
        if not isinstance(obj, dict):
            raise InvalidObjectError(f"Expected an object dict, got {type(obj).__name__}")

        metadata = obj.get("metadata") or {}
        api_version = obj.get("apiVersion")
        kind = obj.get("kind")
        name = metadata.get("name")

        if not api_version or not kind or not name:
            raise InvalidObjectError(
                f"Object is missing apiVersion, kind or name: "
                f"apiVersion={api_version!r} kind={kind!r} name={name!r}"
            )

        return cls(
            api_version=api_version,
            kind=kind,
            namespace=metadata.get("namespace") or "",
            name=name,
        )

    @property
    def group(self) -> str:
        return split_api_version(self.api_version)[0]

    @property
    def version(self) -> str:
        return split_api_version(self.api_version)[1]

    @property
    def node_id(self) -> str:
        return f"{self.api_version}:{self.kind}:{self.namespace or 'cluster'}:{self.name}"

    def to_store_key(self) -> StoreKey:
        return StoreKey(
            api_version=self.api_version,
            kind=self.kind,
            namespace=self.namespace or None,
            name=self.name,
        )

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.kind}/{self.name} (ns: {self.namespace})"
        return f"{self.kind}/{self.name}"


class StoreKey(BaseModel):
    """Key accepted by the object store. ``get`` needs a name, ``list`` does not."""

    model_config = ConfigDict(frozen=True)

    api_version: str = Field(..., min_length=1)
    kind: str = Field(..., min_length=1)
    namespace: str | None = None
    name: str | None = None
    label_selector: str | None = None

    def __str__(self) -> str:
        parts = [self.api_version, self.kind]
        if self.namespace:
            parts.append(f"ns={self.namespace}")
        if self.name:
            parts.append(f"name={self.name}")
        if self.label_selector:
            parts.append(self.label_selector)
        return " ".join(parts)


class EdgeKind(str, Enum):
    OWNER = "owner"
    SELECTOR_MATCH = "selector-match"
    REFERENCE = "reference"


class Edge(BaseModel):
    """A directed, typed relationship between two objects found during a traversal."""

    model_config = ConfigDict(frozen=True)

    source: ObjectKey
    target: ObjectKey
    kind: EdgeKind


class Relation(BaseModel):
    """
    A related object reported by a visitor.

    ``outbound`` is True when the edge points from the visited object to the
    related one, and False when it points the other way.
    """

    model_config = ConfigDict(frozen=True)

    object: dict[str, Any]
    kind: EdgeKind
    outbound: bool = True


class NodeStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"
    UNKNOWN = "unknown"

    @property
    def severity(self) -> int:
        return _STATUS_SEVERITY[self]

    @classmethod
    def worst(cls, *statuses: NodeStatus) -> NodeStatus:
        """Roll up statuses: error > warning > unknown > ok. No input yields ok."""
        result = cls.OK
        for status in statuses:
            if status.severity > result.severity:
                result = status
        return result


_STATUS_SEVERITY = {
    NodeStatus.OK: 0,
    NodeStatus.UNKNOWN: 1,
    NodeStatus.WARNING: 2,
    NodeStatus.ERROR: 3,
}


class ObjectStatus(BaseModel):
    """Health of one object plus human readable details."""

    status: NodeStatus = NodeStatus.UNKNOWN
    details: list[str] = Field(default_factory=list)

    def add_detail(self, detail: str) -> None:
        self.details.append(detail)

    def set_warning(self) -> None:
        if self.status != NodeStatus.ERROR:
            self.status = NodeStatus.WARNING

    def set_error(self) -> None:
        self.status = NodeStatus.ERROR


class Link(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    ref: str


class MemberSummary(BaseModel):
    """One pod inside a group node, with its own status."""

    model_config = ConfigDict(frozen=True)

    name: str
    status: NodeStatus
    details: tuple[str, ...] = ()


class Node(BaseModel):
    """
    Presentation unit of the resource viewer.

    A node is either a single object or a group standing in for several
    pods that share an owning controller.
    """

    name: str
    api_version: str
    kind: str
    status: NodeStatus = NodeStatus.UNKNOWN
    details: list[str] = Field(default_factory=list)
    path: Link | None = None
    is_group: bool = False
    members: list[MemberSummary] = Field(default_factory=list)


class GraphEdge(BaseModel):
    """Edge of the assembled graph; endpoints are node ids or group keys."""

    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    kind: EdgeKind


class Graph(BaseModel):
    nodes: dict[str, Node] = Field(default_factory=dict)
    edges: list[GraphEdge] = Field(default_factory=list)

    def to_networkx(self) -> nx.DiGraph:
        """
        Convert to a NetworkX directed graph.

        Node attributes mirror the Node fields; edges carry ``relationship_type``.
        """
        graph = nx.DiGraph()

        for node_id, node in self.nodes.items():
            graph.add_node(
                node_id,
                kind=node.kind,
                name=node.name,
                api_version=node.api_version,
                status=node.status.value,
                is_group=node.is_group,
                member_count=len(node.members),
            )

        for edge in self.edges:
            graph.add_edge(edge.source, edge.target, relationship_type=edge.kind.value)

        return graph


class ViewerOptions(BaseModel):
    """Configuration for building a resource viewer graph."""

    group_threshold: int = Field(
        default=2,
        ge=2,
        description="Minimum number of pods behind one controller collapsed into a group node",
    )
    max_concurrency: int = Field(
        default=16,
        ge=1,
        le=256,
        description="Maximum number of concurrent relationship lookups",
    )
    wait_for_loading: bool = Field(
        default=True,
        description="Wait for the object store to finish loading before using list results",
    )
    loading_poll_interval: float = Field(
        default=0.1,
        gt=0,
        description="Seconds between checks of the object store loading flag",
    )
