from typing import Any

from k8s_resource_viewer.models import EdgeKind, Relation
from k8s_resource_viewer.protocols import QueryerProtocol
from k8s_resource_viewer.visitors.base import BaseVisitor


class ServiceVisitor(BaseVisitor):
    """
    Relationships of a Service.

    - Pods matched by its selector
    - Ingresses that route to it
    """

    def get_kinds(self) -> list[tuple[str, str]]:
        return [("v1", "Service")]

    async def discover_related(
        self, obj: dict[str, Any], queryer: QueryerProtocol
    ) -> list[Relation]:
        return await self._collect(
            self._pod_relations(obj, queryer),
            self._ingress_relations(obj, queryer),
        )

    async def _pod_relations(
        self, service: dict[str, Any], queryer: QueryerProtocol
    ) -> list[Relation]:
        pods = await queryer.pods_for_service(service)
        return [Relation(object=pod, kind=EdgeKind.SELECTOR_MATCH) for pod in pods]

    async def _ingress_relations(
        self, service: dict[str, Any], queryer: QueryerProtocol
    ) -> list[Relation]:
        ingresses = await queryer.ingresses_for_service(service)
        return [
            Relation(object=ingress, kind=EdgeKind.REFERENCE, outbound=False)
            for ingress in ingresses
        ]


class IngressVisitor(BaseVisitor):
    """Backend Services of an Ingress, including its default backend."""

    def get_kinds(self) -> list[tuple[str, str]]:
        return [("networking.k8s.io/v1", "Ingress"), ("extensions/v1beta1", "Ingress")]

    async def discover_related(
        self, obj: dict[str, Any], queryer: QueryerProtocol
    ) -> list[Relation]:
        services = await queryer.services_for_ingress(obj)
        return [Relation(object=service, kind=EdgeKind.REFERENCE) for service in services]

