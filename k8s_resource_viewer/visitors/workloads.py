import logging
from typing import Any

from k8s_resource_viewer.models import EdgeKind, Relation
from k8s_resource_viewer.protocols import QueryerProtocol
from k8s_resource_viewer.visitors.base import BaseVisitor

logger = logging.getLogger(__name__)


class ReplicaSetVisitor(BaseVisitor):
    """ReplicaSets and ReplicationControllers: owned Pods plus the owning Deployment."""

    def get_kinds(self) -> list[tuple[str, str]]:
        return [
            ("apps/v1", "ReplicaSet"),
            ("extensions/v1beta1", "ReplicaSet"),
            ("v1", "ReplicationController"),
        ]

    async def discover_related(
        self, obj: dict[str, Any], queryer: QueryerProtocol
    ) -> list[Relation]:
        return await self._owned_relations(obj, queryer, "v1", "Pod")


class DeploymentVisitor(BaseVisitor):
    def get_kinds(self) -> list[tuple[str, str]]:
        return [("apps/v1", "Deployment"), ("extensions/v1beta1", "Deployment")]

    async def discover_related(
        self, obj: dict[str, Any], queryer: QueryerProtocol
    ) -> list[Relation]:
        return await self._owned_relations(obj, queryer, "apps/v1", "ReplicaSet")


class PodControllerVisitor(BaseVisitor):
    """Controllers that own Pods directly: StatefulSets, DaemonSets and Jobs."""

    def get_kinds(self) -> list[tuple[str, str]]:
        return [
            ("apps/v1", "StatefulSet"),
            ("apps/v1", "DaemonSet"),
            ("extensions/v1beta1", "DaemonSet"),
            ("batch/v1", "Job"),
        ]

    async def discover_related(
        self, obj: dict[str, Any], queryer: QueryerProtocol
    ) -> list[Relation]:
        return await self._owned_relations(obj, queryer, "v1", "Pod")


class CronJobVisitor(BaseVisitor):
    def get_kinds(self) -> list[tuple[str, str]]:
        return [("batch/v1", "CronJob"), ("batch/v1beta1", "CronJob")]

    async def discover_related(
        self, obj: dict[str, Any], queryer: QueryerProtocol
    ) -> list[Relation]:
        return await self._owned_relations(obj, queryer, "batch/v1", "Job")


class HorizontalPodAutoscalerVisitor(BaseVisitor):
    def get_kinds(self) -> list[tuple[str, str]]:
        return [
            ("autoscaling/v1", "HorizontalPodAutoscaler"),
            ("autoscaling/v2", "HorizontalPodAutoscaler"),
        ]

    async def discover_related(
        self, obj: dict[str, Any], queryer: QueryerProtocol
    ) -> list[Relation]:
        target = await queryer.scale_target_for_hpa(obj)
        if target is None:
            logger.debug(f"Scale target of {self._describe(obj)} not found")
            return []
        return [Relation(object=target, kind=EdgeKind.REFERENCE)]
