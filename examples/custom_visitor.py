"""
Example: Teaching the resource viewer about a custom resource.

Registers a visitor that links cert-manager Certificates to the Secret they
write, and a status rule reading the Certificate's Ready condition.
"""

import asyncio
from typing import Any

from k8s_resource_viewer import (
    EdgeKind,
    KubernetesAdapter,
    NodeStatus,
    ObjectKey,
    ObjectStatus,
    Relation,
    ResourceViewer,
    StatusRegistry,
    StoreKey,
    VisitorRegistry,
)
from k8s_resource_viewer.objectstatus import get_default_status_registry
from k8s_resource_viewer.visitors import BaseVisitor, get_default_registry


class CertificateVisitor(BaseVisitor):
    """Certificates reference the Secret holding the issued key pair."""

    def get_kinds(self) -> list[tuple[str, str]]:
        return [("cert-manager.io/v1", "Certificate")]

    async def discover_related(self, obj: dict[str, Any], queryer) -> list[Relation]:
        secret_name = (obj.get("spec") or {}).get("secretName")
        if not secret_name:
            return []

        secret = await queryer.get(
            StoreKey(
                api_version="v1",
                kind="Secret",
                namespace=obj["metadata"].get("namespace"),
                name=secret_name,
            )
        )
        if secret is None:
            return []
        return [Relation(object=secret, kind=EdgeKind.REFERENCE)]


async def certificate_status(obj: dict[str, Any], store) -> ObjectStatus:
    for condition in (obj.get("status") or {}).get("conditions") or []:
        if condition.get("type") == "Ready":
            if condition.get("status") == "True":
                return ObjectStatus(status=NodeStatus.OK, details=["Certificate is ready"])
            return ObjectStatus(
                status=NodeStatus.WARNING, details=[condition.get("message") or "Certificate is not ready"]
            )
    return ObjectStatus(status=NodeStatus.UNKNOWN, details=["Certificate has no Ready condition"])


def build_registries() -> tuple[VisitorRegistry, StatusRegistry]:
    visitors = get_default_registry()
    visitors.register(CertificateVisitor())

    statuses = get_default_status_registry()
    statuses.register("cert-manager.io/v1", "Certificate", certificate_status)

    return visitors, statuses


async def main():
    visitors, statuses = build_registries()
    viewer = ResourceViewer(KubernetesAdapter(), registry=visitors, status_registry=statuses)

    graph = await viewer.build_from_key(
        ObjectKey(
            api_version="cert-manager.io/v1",
            kind="Certificate",
            namespace="default",
            name="web-tls",
        )
    )

    for node_id, node in graph.nodes.items():
        print(f"{node.status.value:>7}  {node_id}")
        for detail in node.details:
            print(f"         {detail}")


if __name__ == "__main__":
    asyncio.run(main())
