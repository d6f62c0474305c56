from typing import Any

from k8s_resource_viewer.models import ObjectStatus
from k8s_resource_viewer.objectstatus import networking, workloads
from k8s_resource_viewer.objectstatus.pod import pod
from k8s_resource_viewer.objectstatus.registry import StatusFunc, StatusRegistry
from k8s_resource_viewer.protocols import ObjectStoreProtocol


def get_default_status_registry() -> StatusRegistry:
    """Build a registry with the built-in status rules."""
    registry = StatusRegistry()

    for api_version in workloads.DEPLOYMENT_API_VERSIONS:
        registry.register(api_version, "Deployment", workloads.deployment)
    for api_version in workloads.REPLICA_SET_API_VERSIONS:
        registry.register(api_version, "ReplicaSet", workloads.replica_set)
    for api_version in workloads.DAEMON_SET_API_VERSIONS:
        registry.register(api_version, "DaemonSet", workloads.daemon_set)

    registry.register("v1", "ReplicationController", workloads.replication_controller)
    registry.register("apps/v1", "StatefulSet", workloads.stateful_set)
    registry.register("v1", "Pod", pod)
    registry.register("v1", "Service", networking.service)
    registry.register("networking.k8s.io/v1", "Ingress", networking.ingress)
    registry.register("extensions/v1beta1", "Ingress", networking.ingress)

    return registry


async def status(obj: dict[str, Any] | None, store: ObjectStoreProtocol) -> ObjectStatus:
    """Evaluate an object's health with the global status registry."""
    return await StatusRegistry.get_global().status(obj, store)


__all__ = [
    "StatusFunc",
    "StatusRegistry",
    "get_default_status_registry",
    "status",
]
