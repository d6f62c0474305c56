from typing import Any
from urllib.parse import urlencode

from k8s_resource_viewer.models import Link

# Section of the dashboard that lists each kind, keyed by kind.
_SECTIONS = {
    "CronJob": "workloads/cron-jobs",
    "DaemonSet": "workloads/daemon-sets",
    "Deployment": "workloads/deployments",
    "Job": "workloads/jobs",
    "Pod": "workloads/pods",
    "ReplicaSet": "workloads/replica-sets",
    "ReplicationController": "workloads/replication-controllers",
    "StatefulSet": "workloads/stateful-sets",
    "Ingress": "discovery-and-load-balancing/ingresses",
    "Service": "discovery-and-load-balancing/services",
    "ConfigMap": "config-and-storage/config-maps",
    "PersistentVolumeClaim": "config-and-storage/persistent-volume-claims",
    "Secret": "config-and-storage/secrets",
    "ServiceAccount": "config-and-storage/service-accounts",
    "HorizontalPodAutoscaler": "workloads/horizontal-pod-autoscalers",
}


class PathLinkGenerator:
    """
    Default link generator producing dashboard paths.

    Namespaced objects link to ``{prefix}/namespace/{ns}/{section}/{name}``;
    kinds without a known section link under ``custom-resources``.
    """

    def __init__(self, prefix: str = "/overview"):
        self.prefix = prefix.rstrip("/")

    def for_object_with_query(self, obj: dict[str, Any], query: dict[str, str]) -> Link:
        metadata = obj.get("metadata") or {}
        name = metadata.get("name") or ""
        namespace = metadata.get("namespace")
        kind = obj.get("kind") or ""

        section = _SECTIONS.get(kind)
        if section is None:
            section = f"custom-resources/{kind.lower()}"

        if namespace:
            ref = f"{self.prefix}/namespace/{namespace}/{section}/{name}"
        else:
            ref = f"{self.prefix}/cluster/{section}/{name}"

        if query:
            ref = f"{ref}?{urlencode(sorted(query.items()))}"

        return Link(text=name, ref=ref)
