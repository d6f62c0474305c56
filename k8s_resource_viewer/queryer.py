from __future__ import annotations

import asyncio
import logging
from typing import Any

from k8s_resource_viewer.errors import QueryError
from k8s_resource_viewer.models import StoreKey, ViewerOptions
from k8s_resource_viewer.protocols import ObjectStoreProtocol
from k8s_resource_viewer.selectors import format_label_selector, matches_labels

logger = logging.getLogger(__name__)


class Queryer:
    """
    Answers relationship questions about cluster objects.

    A Queryer is created for a single graph build: list and get results are
    memoized for its lifetime so that sibling branches of a traversal asking
    the same question hit the object store once. Concurrent callers share the
    request already in flight.

    Store failures are raised as QueryError so callers can degrade the
    affected node instead of aborting.

    Example:
        >>> queryer = Queryer(store)
        >>> services = await queryer.services_for_pod(pod)
    """

    def __init__(self, store: ObjectStoreProtocol, options: ViewerOptions | None = None):
        self.store = store
        self.options = options or ViewerOptions()

        self._lists: dict[StoreKey, asyncio.Task[list[dict[str, Any]]]] = {}
        self._gets: dict[StoreKey, asyncio.Task[dict[str, Any] | None]] = {}

    async def get(self, key: StoreKey) -> dict[str, Any] | None:
        existing = self._gets.get(key)
        if existing is not None:
            return await asyncio.shield(existing)

        task = asyncio.create_task(self._get(key))
        self._gets[key] = task
        return await task

    async def list(self, key: StoreKey) -> list[dict[str, Any]]:
        existing = self._lists.get(key)
        if existing is not None:
            return await asyncio.shield(existing)

        task = asyncio.create_task(list_when_loaded(self.store, key, self.options))
        self._lists[key] = task
        return await task

    async def _get(self, key: StoreKey) -> dict[str, Any] | None:
        try:
            return await self.store.get(key)
        except QueryError:
            raise
        except Exception as e:
            raise QueryError(f"Unable to get {key}: {e}", cause=e) from e

    async def services_for_pod(self, pod: dict[str, Any]) -> list[dict[str, Any]]:
        """Services in the pod's namespace whose selector matches the pod's labels."""
        metadata = pod.get("metadata") or {}
        labels = metadata.get("labels") or {}

        services = await self.list(
            StoreKey(api_version="v1", kind="Service", namespace=metadata.get("namespace"))
        )

        return [
            service
            for service in services
            if matches_labels((service.get("spec") or {}).get("selector"), labels)
        ]

    async def service_account_for_pod(self, pod: dict[str, Any]) -> dict[str, Any] | None:
        """
        The ServiceAccount a pod runs as, ``default`` when unset.

        Returns None if the ServiceAccount does not exist.
        """
        spec = pod.get("spec") or {}
        name = spec.get("serviceAccountName") or spec.get("serviceAccount") or "default"
        namespace = (pod.get("metadata") or {}).get("namespace")

        service_account = await self.get(
            StoreKey(api_version="v1", kind="ServiceAccount", namespace=namespace, name=name)
        )
        if service_account is None:
            logger.debug(f"ServiceAccount {namespace}/{name} referenced by pod was not found")
        return service_account

    async def owners_for_object(self, obj: dict[str, Any]) -> list[dict[str, Any]]:
        """Every object listed in ``metadata.ownerReferences`` that exists in the store."""
        metadata = obj.get("metadata") or {}
        namespace = metadata.get("namespace")
        owners = []

        for owner_ref in _sorted_owner_references(metadata):
            api_version = owner_ref.get("apiVersion")
            kind = owner_ref.get("kind")
            name = owner_ref.get("name")

            if not api_version or not kind or not name:
                continue

            owner = await self.get(
                StoreKey(api_version=api_version, kind=kind, namespace=namespace, name=name)
            )
            if owner is None:
                logger.debug(f"Owner {kind}/{name} of {metadata.get('name')} was not found")
                continue

            owners.append(owner)

        return owners

    async def owner_reference_for_object(self, obj: dict[str, Any]) -> dict[str, Any] | None:
        """The controlling owner of an object, or its first owner if none is the controller."""
        owners = await self.owners_for_object(obj)
        if not owners:
            return None
        return owners[0]

    async def children(
        self, owner: dict[str, Any], api_version: str, kind: str
    ) -> list[dict[str, Any]]:
        """Objects of the given kind in the owner's namespace that list it as an owner."""
        metadata = owner.get("metadata") or {}
        candidates = await self.list(
            StoreKey(api_version=api_version, kind=kind, namespace=metadata.get("namespace"))
        )

        return [candidate for candidate in candidates if is_owned_by(candidate, owner)]

    async def pods_for_service(self, service: dict[str, Any]) -> list[dict[str, Any]]:
        """Pods selected by a service. A service without a selector selects none."""
        selector = (service.get("spec") or {}).get("selector")
        if not selector:
            return []

        pods = await self.list(
            StoreKey(
                api_version="v1",
                kind="Pod",
                namespace=(service.get("metadata") or {}).get("namespace"),
                label_selector=format_label_selector(selector),
            )
        )

        return [
            pod for pod in pods if matches_labels(selector, (pod.get("metadata") or {}).get("labels"))
        ]

    async def ingresses_for_service(self, service: dict[str, Any]) -> list[dict[str, Any]]:
        metadata = service.get("metadata") or {}
        name = metadata.get("name")

        ingresses = await self.list(
            StoreKey(
                api_version="networking.k8s.io/v1",
                kind="Ingress",
                namespace=metadata.get("namespace"),
            )
        )

        return [ingress for ingress in ingresses if name in ingress_backend_services(ingress)]

    async def services_for_ingress(self, ingress: dict[str, Any]) -> list[dict[str, Any]]:
        namespace = (ingress.get("metadata") or {}).get("namespace")
        services = []

        for name in ingress_backend_services(ingress):
            service = await self.get(
                StoreKey(api_version="v1", kind="Service", namespace=namespace, name=name)
            )
            if service is None:
                logger.debug(f"Ingress backend service {namespace}/{name} was not found")
                continue
            services.append(service)

        return services

    async def scale_target_for_hpa(self, hpa: dict[str, Any]) -> dict[str, Any] | None:
        target_ref = (hpa.get("spec") or {}).get("scaleTargetRef") or {}
        api_version = target_ref.get("apiVersion")
        kind = target_ref.get("kind")
        name = target_ref.get("name")

        if not api_version or not kind or not name:
            return None

        return await self.get(
            StoreKey(
                api_version=api_version,
                kind=kind,
                namespace=(hpa.get("metadata") or {}).get("namespace"),
                name=name,
            )
        )


async def list_when_loaded(
    store: ObjectStoreProtocol, key: StoreKey, options: ViewerOptions | None = None
) -> list[dict[str, Any]]:
    """
    List objects, polling while the store reports it is still loading.

    With ``options.wait_for_loading`` off the first, possibly partial, result
    is returned. Store failures are raised as QueryError.
    """
    options = options or ViewerOptions()

    try:
        objects, loading = await store.list(key)
        while loading and options.wait_for_loading:
            logger.debug(f"Waiting for object store to load {key}")
            await asyncio.sleep(options.loading_poll_interval)
            objects, loading = await store.list(key)
    except QueryError:
        raise
    except Exception as e:
        raise QueryError(f"Unable to list {key}: {e}", cause=e) from e

    return objects


def is_owned_by(obj: dict[str, Any], owner: dict[str, Any]) -> bool:
    """
    Check whether ``owner`` appears in the owner references of ``obj``.

    Matches on uid when both sides carry one, otherwise on kind and name.
    """
    owner_metadata = owner.get("metadata") or {}
    owner_uid = owner_metadata.get("uid")

    for owner_ref in (obj.get("metadata") or {}).get("ownerReferences") or []:
        if owner_uid and owner_ref.get("uid"):
            if owner_ref["uid"] == owner_uid:
                return True
            continue

        if owner_ref.get("kind") == owner.get("kind") and owner_ref.get("name") == owner_metadata.get(
            "name"
        ):
            return True

    return False


def controller_reference(obj: dict[str, Any]) -> dict[str, Any] | None:
    """The owner reference marked ``controller: true``, else the first one."""
    owner_refs = _sorted_owner_references(obj.get("metadata") or {})
    if not owner_refs:
        return None
    return owner_refs[0]


def ingress_backend_services(ingress: dict[str, Any]) -> list[str]:
    """Names of services an ingress routes to, in order of first appearance."""
    spec = ingress.get("spec") or {}
    names: list[str] = []

    backends = [spec.get("defaultBackend") or spec.get("backend") or {}]
    for rule in spec.get("rules") or []:
        for path in (rule.get("http") or {}).get("paths") or []:
            backends.append(path.get("backend") or {})

    for backend in backends:
        name = (backend.get("service") or {}).get("name") or backend.get("serviceName")
        if name and name not in names:
            names.append(name)

    return names


def _sorted_owner_references(metadata: dict[str, Any]) -> list[dict[str, Any]]:
    owner_refs = metadata.get("ownerReferences") or []
    return sorted(owner_refs, key=lambda ref: not ref.get("controller", False))
