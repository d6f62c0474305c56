from k8s_resource_viewer.visitors.base import BaseVisitor, DefaultVisitor
from k8s_resource_viewer.visitors.networking import IngressVisitor, ServiceVisitor
from k8s_resource_viewer.visitors.pod import PodVisitor
from k8s_resource_viewer.visitors.registry import VisitorRegistry
from k8s_resource_viewer.visitors.workloads import (
    CronJobVisitor,
    DeploymentVisitor,
    HorizontalPodAutoscalerVisitor,
    PodControllerVisitor,
    ReplicaSetVisitor,
)


def get_all_visitors() -> list[BaseVisitor]:
    return [
        PodVisitor(),
        ReplicaSetVisitor(),
        DeploymentVisitor(),
        PodControllerVisitor(),
        CronJobVisitor(),
        ServiceVisitor(),
        IngressVisitor(),
        HorizontalPodAutoscalerVisitor(),
    ]


def get_default_registry() -> VisitorRegistry:
    """Build a registry with every built-in visitor and the owner-reference fallback."""
    registry = VisitorRegistry()
    registry.register_default(DefaultVisitor())
    for visitor in get_all_visitors():
        registry.register(visitor)
    return registry


__all__ = [
    "BaseVisitor",
    "DefaultVisitor",
    "PodVisitor",
    "ReplicaSetVisitor",
    "DeploymentVisitor",
    "PodControllerVisitor",
    "CronJobVisitor",
    "ServiceVisitor",
    "IngressVisitor",
    "HorizontalPodAutoscalerVisitor",
    "VisitorRegistry",
    "get_all_visitors",
    "get_default_registry",
]
