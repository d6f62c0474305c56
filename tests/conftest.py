"""Shared test fixtures for k8s-resource-viewer tests."""

import asyncio
from typing import Any

import pytest

from k8s_resource_viewer.models import StoreKey
from k8s_resource_viewer.objectstatus import get_default_status_registry
from k8s_resource_viewer.visitors import get_default_registry


class MockObjectStore:
    """In-memory object store with API statistics tracking for testing."""

    def __init__(self):
        self.objects: dict[tuple[str, str, str, str], dict[str, Any]] = {}
        self.failing_kinds: set[str] = set()
        self.loading_lists = 0
        self.block: asyncio.Event | None = None
        self.calls: list[tuple[str, StoreKey]] = []
        self.in_flight = 0
        self.peak_in_flight = 0
        self._api_call_stats = {"get": 0, "list": 0, "total": 0}

    def add(self, *objects: dict[str, Any]) -> None:
        """Add objects to the mock store."""
        for obj in objects:
            metadata = obj.get("metadata", {})
            key = (obj["apiVersion"], obj["kind"], metadata.get("namespace") or "", metadata["name"])
            self.objects[key] = obj

    async def _enter(self, call: str, key: StoreKey) -> None:
        self._api_call_stats[call] += 1
        self._api_call_stats["total"] += 1
        self.calls.append((call, key))

        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if self.block is not None:
                await self.block.wait()
            if key.kind in self.failing_kinds:
                raise RuntimeError(f"store unavailable for {key.kind}")
        finally:
            self.in_flight -= 1

    async def get(self, key: StoreKey) -> dict[str, Any] | None:
        await self._enter("get", key)
        return self.objects.get((key.api_version, key.kind, key.namespace or "", key.name))

    async def is_loading(self, key: StoreKey) -> bool:
        return self.loading_lists > 0

    def get_api_call_stats(self) -> dict[str, int]:
        return self._api_call_stats.copy()

    def reset_api_call_stats(self) -> None:
        self._api_call_stats = {"get": 0, "list": 0, "total": 0}
        self.calls = []

    async def list(self, key: StoreKey) -> tuple[list[dict[str, Any]], bool]:
        await self._enter("list", key)

        wanted = {}
        if key.label_selector:
            wanted = dict(part.split("=", 1) for part in key.label_selector.split(","))

        results = []
        for (api_version, kind, namespace, _), obj in self.objects.items():
            if api_version != key.api_version or kind != key.kind:
                continue
            if key.namespace and namespace != key.namespace:
                continue
            labels = obj.get("metadata", {}).get("labels") or {}
            if any(labels.get(k) != v for k, v in wanted.items()):
                continue
            results.append(obj)

        if self.loading_lists > 0:
            self.loading_lists -= 1
            return results[:1], True

        return results, False


def make_pod(
    name: str,
    owner_kind: str = "ReplicaSet",
    owner_name: str = "web-7d4b9",
    owner_uid: str = "rs-123",
    phase: str = "Running",
    ready: bool = True,
    namespace: str = "default",
) -> dict[str, Any]:
    """Build a pod controlled by ``owner_kind/owner_name``."""
    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "uid": f"pod-{name}",
            "labels": {"app": "web", "pod-template-hash": "7d4b9"},
            "ownerReferences": [
                {
                    "apiVersion": "apps/v1",
                    "kind": owner_kind,
                    "name": owner_name,
                    "uid": owner_uid,
                    "controller": True,
                }
            ],
        },
        "spec": {
            "serviceAccountName": "web-sa",
            "containers": [
                {
                    "name": "web",
                    "image": "nginx:1.25",
                    "envFrom": [{"configMapRef": {"name": "web-config"}}],
                }
            ],
            "volumes": [{"name": "config", "configMap": {"name": "web-config"}}],
        },
        "status": {
            "phase": phase,
            "containerStatuses": [{"name": "web", "ready": ready, "state": {"running": {}}}],
        },
    }


@pytest.fixture
def sample_deployment() -> dict[str, Any]:
    """Sample Deployment resource."""
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {
            "name": "web",
            "namespace": "default",
            "uid": "deployment-123",
            "labels": {"app": "web"},
        },
        "spec": {
            "replicas": 3,
            "selector": {"matchLabels": {"app": "web"}},
        },
        "status": {"replicas": 3, "readyReplicas": 3, "availableReplicas": 3},
    }


@pytest.fixture
def sample_replicaset() -> dict[str, Any]:
    """Sample ReplicaSet resource."""
    return {
        "apiVersion": "apps/v1",
        "kind": "ReplicaSet",
        "metadata": {
            "name": "web-7d4b9",
            "namespace": "default",
            "uid": "rs-123",
            "labels": {"app": "web", "pod-template-hash": "7d4b9"},
            "ownerReferences": [
                {
                    "apiVersion": "apps/v1",
                    "kind": "Deployment",
                    "name": "web",
                    "uid": "deployment-123",
                    "controller": True,
                }
            ],
        },
        "spec": {"replicas": 3},
        "status": {"replicas": 3, "readyReplicas": 3, "availableReplicas": 3},
    }


@pytest.fixture
def sample_pods() -> list[dict[str, Any]]:
    """Three running pods owned by the sample ReplicaSet."""
    return [make_pod(f"web-7d4b9-{suffix}") for suffix in ("a1", "b2", "c3")]


@pytest.fixture
def sample_pod(sample_pods) -> dict[str, Any]:
    return sample_pods[0]


@pytest.fixture
def sample_service() -> dict[str, Any]:
    """Sample Service resource."""
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {"name": "web", "namespace": "default", "uid": "service-123"},
        "spec": {
            "type": "ClusterIP",
            "selector": {"app": "web"},
            "ports": [{"port": 80, "targetPort": 8080, "protocol": "TCP"}],
        },
    }


@pytest.fixture
def sample_endpoints() -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "Endpoints",
        "metadata": {"name": "web", "namespace": "default"},
        "subsets": [{"addresses": [{"ip": "10.0.0.1"}], "ports": [{"port": 8080}]}],
    }


@pytest.fixture
def sample_serviceaccount() -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "ServiceAccount",
        "metadata": {"name": "web-sa", "namespace": "default", "uid": "sa-123"},
    }


@pytest.fixture
def sample_configmap() -> dict[str, Any]:
    """Sample ConfigMap resource."""
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {"name": "web-config", "namespace": "default", "uid": "cm-123"},
        "data": {"LOG_LEVEL": "info"},
    }


@pytest.fixture
def sample_ingress() -> dict[str, Any]:
    """Sample Ingress resource."""
    return {
        "apiVersion": "networking.k8s.io/v1",
        "kind": "Ingress",
        "metadata": {"name": "web", "namespace": "default", "uid": "ingress-123"},
        "spec": {
            "rules": [
                {
                    "host": "web.example.com",
                    "http": {
                        "paths": [
                            {
                                "path": "/",
                                "pathType": "Prefix",
                                "backend": {"service": {"name": "web", "port": {"number": 80}}},
                            }
                        ]
                    },
                }
            ]
        },
    }


@pytest.fixture
def sample_statefulset() -> dict[str, Any]:
    return {
        "apiVersion": "apps/v1",
        "kind": "StatefulSet",
        "metadata": {"name": "db", "namespace": "default", "uid": "sts-123"},
        "spec": {"replicas": 2},
        "status": {"replicas": 2, "readyReplicas": 2},
    }


@pytest.fixture
def store() -> MockObjectStore:
    return MockObjectStore()


@pytest.fixture
def populated_store(
    store,
    sample_deployment,
    sample_replicaset,
    sample_pods,
    sample_service,
    sample_endpoints,
    sample_serviceaccount,
    sample_configmap,
    sample_ingress,
) -> MockObjectStore:
    """Store holding a deployment with its replica set, pods, service and ingress."""
    store.add(
        sample_deployment,
        sample_replicaset,
        *sample_pods,
        sample_service,
        sample_endpoints,
        sample_serviceaccount,
        sample_configmap,
        sample_ingress,
    )
    return store


@pytest.fixture
def visitor_registry():
    """Fresh visitor registry with the built-in visitors."""
    return get_default_registry()


@pytest.fixture
def status_registry():
    """Fresh status registry with the built-in rules."""
    return get_default_status_registry()


@pytest.fixture
def pod_factory():
    """Factory for pods with a controlling owner reference."""
    return make_pod
