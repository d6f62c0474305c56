from typing import Any

from k8s_resource_viewer.models import NodeStatus, ObjectStatus
from k8s_resource_viewer.objectstatus.registry import require_kind
from k8s_resource_viewer.protocols import ObjectStoreProtocol

# Waiting reasons that mean a container will not start without intervention.
FAILED_WAITING_REASONS = frozenset(
    {
        "CrashLoopBackOff",
        "ErrImagePull",
        "ImagePullBackOff",
        "CreateContainerConfigError",
        "InvalidImageName",
    }
)


async def pod(obj: dict[str, Any], store: ObjectStoreProtocol) -> ObjectStatus:
    obj = require_kind(obj, "Pod", ("v1",))
    status = obj.get("status") or {}
    phase = status.get("phase")
    container_statuses = (status.get("initContainerStatuses") or []) + (
        status.get("containerStatuses") or []
    )

    result = ObjectStatus(status=NodeStatus.OK)

    for container_status in container_statuses:
        waiting = (container_status.get("state") or {}).get("waiting") or {}
        reason = waiting.get("reason")
        if reason in FAILED_WAITING_REASONS:
            result.set_error()
            result.add_detail(f"Container {container_status.get('name')}: {reason}")

    if phase == "Failed":
        result.set_error()
        result.add_detail("Pod has failed")
    elif phase == "Pending":
        result.set_warning()
        result.add_detail("Pod is pending")
    elif phase == "Unknown":
        if result.status == NodeStatus.OK:
            result.status = NodeStatus.UNKNOWN
        result.add_detail("Pod state is unknown")
    elif phase == "Running":
        for container_status in status.get("containerStatuses") or []:
            if not container_status.get("ready", False):
                result.set_warning()
                result.add_detail(f"Container {container_status.get('name')} is not ready")

    if result.status == NodeStatus.OK:
        result.add_detail("Pod is OK")

    return result
