import asyncio
import logging
from typing import Any

from k8s_resource_viewer.collector import GraphSnapshot
from k8s_resource_viewer.models import Graph, GraphEdge, Node, ObjectKey, ViewerOptions
from k8s_resource_viewer.objectstatus import StatusRegistry
from k8s_resource_viewer.protocols import LinkGeneratorProtocol, ObjectStoreProtocol
from k8s_resource_viewer.queryer import controller_reference
from k8s_resource_viewer.resourceviewer.nodes import (
    ObjectNodeFactory,
    PodGroupNodeFactory,
    StatusCache,
)

logger = logging.getLogger(__name__)


class PodGroup:
    """Pods of one namespace sharing an owning controller."""

    def __init__(self, namespace: str, owner_kind: str, owner_name: str):
        self.namespace = namespace
        self.owner_kind = owner_kind
        self.owner_name = owner_name
        self.members: dict[ObjectKey, dict[str, Any]] = {}

    @property
    def key(self) -> str:
        return f"pods:{self.namespace or 'cluster'}:{self.owner_kind}:{self.owner_name}"

    @property
    def name(self) -> str:
        return f"{self.owner_name} pods"


class GraphAssembler:
    """
    Turns a traversal snapshot into the presentable graph.

    - Every object becomes a node with its status and link.
    - Pods sharing a controller collapse into one group node once there
      are at least ``options.group_threshold`` of them.
    - Edge endpoints inside a group are rewritten to the group key and
      the resulting duplicates are dropped.

    Nodes and edges are sorted so that assembling the same snapshot twice
    gives equal graphs.

    Example:
        >>> assembler = GraphAssembler(store, PathLinkGenerator())
        >>> graph = await assembler.assemble(collector.snapshot())
    """

    def __init__(
        self,
        store: ObjectStoreProtocol,
        link: LinkGeneratorProtocol,
        status_registry: StatusRegistry | None = None,
        options: ViewerOptions | None = None,
    ):
        self.store = store
        self.link = link
        self.status_registry = status_registry or StatusRegistry.get_global()
        self.options = options or ViewerOptions()

    async def assemble(self, snapshot: GraphSnapshot) -> Graph:
        status_cache = StatusCache(
            self.store,
            self.status_registry,
            snapshot.lookup_errors,
            max_concurrency=self.options.max_concurrency,
        )
        object_nodes = ObjectNodeFactory(self.link, status_cache)
        group_nodes = PodGroupNodeFactory(status_cache)

        async with asyncio.TaskGroup() as group:
            for obj in snapshot.objects.values():
                group.create_task(status_cache.status(obj))

        groups = self._group_pods(snapshot)
        node_ids: dict[ObjectKey, str] = {}
        nodes: dict[str, Node] = {}

        for pod_group in groups:
            members = [pod_group.members[key] for key in sorted(pod_group.members, key=_sort_key)]
            nodes[pod_group.key] = await group_nodes.create(pod_group.name, members)
            for key in pod_group.members:
                node_ids[key] = pod_group.key

        for key in sorted(snapshot.objects, key=_sort_key):
            if key in node_ids:
                continue
            node_ids[key] = key.node_id
            nodes[key.node_id] = await object_nodes.create(snapshot.objects[key])

        edges: set[GraphEdge] = set()
        for edge in snapshot.edges:
            source = node_ids[edge.source]
            target = node_ids[edge.target]
            if source == target and edge.source != edge.target:
                continue
            edges.add(GraphEdge(source=source, target=target, kind=edge.kind))

        graph = Graph(
            nodes={node_id: nodes[node_id] for node_id in sorted(nodes)},
            edges=sorted(edges, key=lambda e: (e.source, e.target, e.kind.value)),
        )

        logger.debug(
            f"Assembled {len(graph.nodes)} nodes ({len(groups)} pod groups) "
            f"and {len(graph.edges)} edges from {len(snapshot.objects)} objects"
        )
        return graph

    def _group_pods(self, snapshot: GraphSnapshot) -> list[PodGroup]:
        candidates: dict[tuple[str, str, str], PodGroup] = {}

        for key, obj in snapshot.objects.items():
            if key.kind != "Pod":
                continue

            owner_ref = controller_reference(obj)
            if owner_ref is None or not owner_ref.get("kind") or not owner_ref.get("name"):
                continue

            group_id = (key.namespace, owner_ref["kind"], owner_ref["name"])
            pod_group = candidates.get(group_id)
            if pod_group is None:
                pod_group = PodGroup(*group_id)
                candidates[group_id] = pod_group
            pod_group.members[key] = obj

        groups = [
            pod_group
            for pod_group in candidates.values()
            if len(pod_group.members) >= self.options.group_threshold
        ]
        return sorted(groups, key=lambda g: g.key)


def _sort_key(key: ObjectKey) -> tuple[str, str, str, str]:
    return key.namespace, key.kind, key.name, key.api_version
