from typing import Any

from k8s_resource_viewer.errors import QueryError
from k8s_resource_viewer.models import NodeStatus, ObjectStatus, StoreKey
from k8s_resource_viewer.objectstatus.registry import require_kind
from k8s_resource_viewer.protocols import ObjectStoreProtocol
from k8s_resource_viewer.queryer import ingress_backend_services


async def _get(store: ObjectStoreProtocol, key: StoreKey) -> dict[str, Any] | None:
    try:
        return await store.get(key)
    except Exception as e:
        raise QueryError(f"Unable to get {key}: {e}", cause=e) from e


async def service(obj: dict[str, Any], store: ObjectStoreProtocol) -> ObjectStatus:
    """Services that select pods need at least one ready endpoint address."""
    obj = require_kind(obj, "Service", ("v1",))
    spec = obj.get("spec") or {}
    metadata = obj.get("metadata") or {}

    if spec.get("selector") and spec.get("type") != "ExternalName":
        endpoints = await _get(
            store,
            StoreKey(
                api_version="v1",
                kind="Endpoints",
                namespace=metadata.get("namespace"),
                name=metadata.get("name"),
            ),
        )
        subsets = (endpoints or {}).get("subsets") or []
        if not any(subset.get("addresses") for subset in subsets):
            return ObjectStatus(
                status=NodeStatus.WARNING, details=["Service has no endpoint addresses"]
            )

    return ObjectStatus(status=NodeStatus.OK, details=["Service is OK"])


async def ingress(obj: dict[str, Any], store: ObjectStoreProtocol) -> ObjectStatus:
    obj = require_kind(obj, "Ingress", ("networking.k8s.io/v1", "extensions/v1beta1"))
    namespace = (obj.get("metadata") or {}).get("namespace")
    backends = ingress_backend_services(obj)

    if not backends:
        return ObjectStatus(status=NodeStatus.ERROR, details=["Ingress has no backends"])

    result = ObjectStatus(status=NodeStatus.OK)
    for name in backends:
        backend = await _get(
            store, StoreKey(api_version="v1", kind="Service", namespace=namespace, name=name)
        )
        if backend is None:
            result.set_error()
            result.add_detail(f'Backend refers to service "{name}" which doesn\'t exist')

    if result.status == NodeStatus.OK:
        result.add_detail("Ingress is OK")

    return result
