"""Status rules for workload controllers."""

from typing import Any

from k8s_resource_viewer.models import NodeStatus, ObjectStatus, StoreKey
from k8s_resource_viewer.objectstatus.registry import replica_count, require_kind
from k8s_resource_viewer.protocols import ObjectStoreProtocol
from k8s_resource_viewer.queryer import is_owned_by, list_when_loaded

DEPLOYMENT_API_VERSIONS = ("apps/v1", "apps/v1beta1", "apps/v1beta2", "extensions/v1beta1")
REPLICA_SET_API_VERSIONS = ("apps/v1", "extensions/v1beta1")
DAEMON_SET_API_VERSIONS = ("apps/v1", "extensions/v1beta1")


async def deployment(obj: dict[str, Any], store: ObjectStoreProtocol) -> ObjectStatus:
    obj = require_kind(obj, "Deployment", DEPLOYMENT_API_VERSIONS)
    spec = obj.get("spec") or {}
    status = obj.get("status") or {}

    desired = replica_count(spec.get("replicas"))
    if desired == 0:
        return ObjectStatus(
            status=NodeStatus.ERROR, details=["No replicas exist for this deployment"]
        )

    available = status.get("availableReplicas")
    if available is None:
        available = await _available_from_replica_sets(obj, store)
    available = replica_count(available)

    if available < desired:
        return ObjectStatus(
            status=NodeStatus.WARNING,
            details=[f"Expected {desired} replicas, but {available} are available"],
        )

    return ObjectStatus(status=NodeStatus.OK, details=["Deployment is OK"])


async def _available_from_replica_sets(deployment: dict[str, Any], store: ObjectStoreProtocol) -> int:
    namespace = (deployment.get("metadata") or {}).get("namespace")
    replica_sets = await list_when_loaded(
        store, StoreKey(api_version="apps/v1", kind="ReplicaSet", namespace=namespace)
    )

    return sum(
        replica_count((rs.get("status") or {}).get("availableReplicas"))
        for rs in replica_sets
        if is_owned_by(rs, deployment)
    )


def _replica_rule(obj: dict[str, Any], title: str) -> ObjectStatus:
    spec = obj.get("spec") or {}
    status = obj.get("status") or {}

    desired = replica_count(spec.get("replicas"))
    available = replica_count(status.get("availableReplicas"))

    if desired == 0:
        return ObjectStatus(status=NodeStatus.ERROR, details=[f"{title} has no replicas available"])

    if available < desired:
        return ObjectStatus(
            status=NodeStatus.WARNING,
            details=[f"Expected {desired} replicas, but {available} are available"],
        )

    return ObjectStatus(status=NodeStatus.OK, details=[f"{title} is OK"])


async def replica_set(obj: dict[str, Any], store: ObjectStoreProtocol) -> ObjectStatus:
    obj = require_kind(obj, "ReplicaSet", REPLICA_SET_API_VERSIONS)
    return _replica_rule(obj, "Replica Set")


async def replication_controller(obj: dict[str, Any], store: ObjectStoreProtocol) -> ObjectStatus:
    obj = require_kind(obj, "ReplicationController", ("v1",))
    return _replica_rule(obj, "Replication Controller")


async def stateful_set(obj: dict[str, Any], store: ObjectStoreProtocol) -> ObjectStatus:
    obj = require_kind(obj, "StatefulSet", ("apps/v1",))
    desired = replica_count((obj.get("spec") or {}).get("replicas"))
    ready = replica_count((obj.get("status") or {}).get("readyReplicas"))

    if ready < desired:
        return ObjectStatus(status=NodeStatus.WARNING, details=["Stateful Set pods are not ready"])

    return ObjectStatus(status=NodeStatus.OK, details=["Stateful Set is OK"])


async def daemon_set(obj: dict[str, Any], store: ObjectStoreProtocol) -> ObjectStatus:
    obj = require_kind(obj, "DaemonSet", DAEMON_SET_API_VERSIONS)
    status = obj.get("status") or {}
    desired = replica_count(status.get("desiredNumberScheduled"))
    ready = replica_count(status.get("numberReady"))

    if ready < desired:
        return ObjectStatus(status=NodeStatus.WARNING, details=["Daemon Set pods are not ready"])

    return ObjectStatus(status=NodeStatus.OK, details=["Daemon Set is OK"])
