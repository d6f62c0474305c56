import asyncio
import logging
from typing import Any

from k8s_resource_viewer.collector import ObjectCollector
from k8s_resource_viewer.errors import ObjectNotFoundError
from k8s_resource_viewer.links import PathLinkGenerator
from k8s_resource_viewer.models import Graph, ObjectKey, ViewerOptions
from k8s_resource_viewer.objectstatus import StatusRegistry
from k8s_resource_viewer.protocols import LinkGeneratorProtocol, ObjectStoreProtocol
from k8s_resource_viewer.queryer import Queryer
from k8s_resource_viewer.resourceviewer import GraphAssembler
from k8s_resource_viewer.traversal import ObjectVisitor, VisitState
from k8s_resource_viewer.visitors import VisitorRegistry

logger = logging.getLogger(__name__)


class ResourceViewer:
    """
    Builds the resource viewer graph for one object.

    The ResourceViewer wires the pieces of a build together:
    - A Queryer memoizing store lookups for this build only
    - The traversal engine discovering related objects
    - An ObjectCollector accumulating objects and edges
    - The GraphAssembler evaluating statuses and grouping pods

    Key features:
    - Stateless between builds (no cached objects survive a call)
    - Each object is visited once, whatever the shape of the graph
    - Failed lookups degrade single nodes; handler failures abort the build
    - Cancelling the calling task cancels every traversal branch

    Example:
        >>> from k8s_resource_viewer import KubernetesAdapter, ResourceViewer, ViewerOptions
        >>> viewer = ResourceViewer(KubernetesAdapter(), options=ViewerOptions(group_threshold=3))
        >>> graph = await viewer.build(deployment)
    """

    def __init__(
        self,
        store: ObjectStoreProtocol,
        link: LinkGeneratorProtocol | None = None,
        registry: VisitorRegistry | None = None,
        status_registry: StatusRegistry | None = None,
        options: ViewerOptions | None = None,
    ):
        """
        Initialize the resource viewer.

        Args:
            store: Object store the graph is read from
            link: Link generator for node paths (dashboard paths if None)
            registry: Visitor registry (uses global if None)
            status_registry: Status evaluators (uses global if None)
            options: Build configuration
        """
        self.store = store
        self.link = link or PathLinkGenerator()
        self.registry = registry or VisitorRegistry.get_global()
        self.status_registry = status_registry or StatusRegistry.get_global()
        self.options = options or ViewerOptions()

    async def build(self, root: dict[str, Any]) -> Graph:
        """
        Build the graph reachable from a resolved object.

        Args:
            root: The object the graph starts from

        Returns:
            Assembled graph with statuses, pod groups and rewritten edges

        Raises:
            InvalidObjectError: if root cannot be identified
            asyncio.CancelledError: if the calling task is cancelled
            Exception: whatever the object handler raised, on fatal errors
        """
        root_key = ObjectKey.from_object(root)

        lock = asyncio.Lock()
        collector = ObjectCollector(lock)
        engine = ObjectVisitor(
            Queryer(self.store, self.options),
            self.registry,
            VisitState(lock),
            max_concurrency=self.options.max_concurrency,
        )

        await engine.visit(root, collector, is_root=True)

        assembler = GraphAssembler(self.store, self.link, self.status_registry, self.options)
        graph = await assembler.assemble(collector.snapshot())

        logger.info(
            f"Built resource graph for {root_key} with {len(graph.nodes)} nodes "
            f"and {len(graph.edges)} edges"
        )

        return graph

    async def build_from_key(self, key: ObjectKey) -> Graph:
        """
        Fetch an object from the store and build its graph.

        Raises:
            ObjectNotFoundError: if the object does not exist
        """
        root = await self.store.get(key.to_store_key())
        if not root:
            raise ObjectNotFoundError(f"Starting object not found: {key}")

        return await self.build(root)
