from k8s_resource_viewer.adapters import KubernetesAdapter
from k8s_resource_viewer.collector import GraphSnapshot, ObjectCollector
from k8s_resource_viewer.errors import (
    HandlerError,
    InvalidObjectError,
    ObjectNotFoundError,
    QueryError,
    ResourceViewerError,
    StatusContractError,
)
from k8s_resource_viewer.export import export_json, load_json, to_graph_payload
from k8s_resource_viewer.links import PathLinkGenerator
from k8s_resource_viewer.models import (
    Edge,
    EdgeKind,
    Graph,
    GraphEdge,
    Link,
    MemberSummary,
    Node,
    NodeStatus,
    ObjectKey,
    ObjectStatus,
    Relation,
    StoreKey,
    ViewerOptions,
)
from k8s_resource_viewer.objectstatus import StatusRegistry
from k8s_resource_viewer.queryer import Queryer
from k8s_resource_viewer.resourceviewer import GraphAssembler
from k8s_resource_viewer.traversal import ObjectVisitor, VisitState
from k8s_resource_viewer.viewer import ResourceViewer
from k8s_resource_viewer.visitors import BaseVisitor, VisitorRegistry

__version__ = "0.1.0"

__all__ = [
    "ResourceViewer",
    "ViewerOptions",
    "KubernetesAdapter",
    "ObjectKey",
    "StoreKey",
    "Edge",
    "EdgeKind",
    "Relation",
    "Graph",
    "GraphEdge",
    "Node",
    "MemberSummary",
    "Link",
    "NodeStatus",
    "ObjectStatus",
    "Queryer",
    "ObjectVisitor",
    "VisitState",
    "ObjectCollector",
    "GraphSnapshot",
    "GraphAssembler",
    "BaseVisitor",
    "VisitorRegistry",
    "StatusRegistry",
    "PathLinkGenerator",
    "ResourceViewerError",
    "InvalidObjectError",
    "QueryError",
    "HandlerError",
    "StatusContractError",
    "ObjectNotFoundError",
    "export_json",
    "load_json",
    "to_graph_payload",
]
