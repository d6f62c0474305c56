"""Tests for the Queryer relationship lookups."""

import asyncio

import pytest

from k8s_resource_viewer.errors import QueryError
from k8s_resource_viewer.models import StoreKey, ViewerOptions
from k8s_resource_viewer.queryer import (
    Queryer,
    controller_reference,
    ingress_backend_services,
    is_owned_by,
)


@pytest.mark.asyncio
async def test_list_is_memoized(populated_store):
    queryer = Queryer(populated_store)
    key = StoreKey(api_version="v1", kind="Pod", namespace="default")

    first = await queryer.list(key)
    second = await queryer.list(key)

    assert len(first) == 3
    assert first is second
    assert populated_store.get_api_call_stats()["list"] == 1


@pytest.mark.asyncio
async def test_concurrent_lookups_share_one_request(populated_store, sample_pods):
    queryer = Queryer(populated_store)

    results = await asyncio.gather(*(queryer.services_for_pod(pod) for pod in sample_pods * 5))
    accounts = await asyncio.gather(*(queryer.service_account_for_pod(pod) for pod in sample_pods))

    assert all([s["metadata"]["name"] for s in services] == ["web"] for services in results)
    assert all(account is accounts[0] for account in accounts)
    assert populated_store.get_api_call_stats() == {"get": 1, "list": 1, "total": 2}


@pytest.mark.asyncio
async def test_concurrent_callers_share_a_failure(populated_store):
    populated_store.failing_kinds.add("Service")
    queryer = Queryer(populated_store)
    key = StoreKey(api_version="v1", kind="Service", namespace="default")

    results = await asyncio.gather(queryer.list(key), queryer.list(key), return_exceptions=True)

    assert all(isinstance(result, QueryError) for result in results)
    assert populated_store.get_api_call_stats()["list"] == 1


@pytest.mark.asyncio
async def test_get_is_memoized_including_misses(populated_store):
    queryer = Queryer(populated_store)
    key = StoreKey(api_version="v1", kind="Secret", namespace="default", name="missing")

    assert await queryer.get(key) is None
    assert await queryer.get(key) is None
    assert populated_store.get_api_call_stats()["get"] == 1


@pytest.mark.asyncio
async def test_list_waits_for_loading_store(populated_store):
    populated_store.loading_lists = 2
    queryer = Queryer(populated_store, ViewerOptions(loading_poll_interval=0.001))

    pods = await queryer.list(StoreKey(api_version="v1", kind="Pod", namespace="default"))

    assert len(pods) == 3
    assert populated_store.get_api_call_stats()["list"] == 3


@pytest.mark.asyncio
async def test_list_without_waiting_returns_partial(populated_store):
    populated_store.loading_lists = 1
    queryer = Queryer(populated_store, ViewerOptions(wait_for_loading=False))

    pods = await queryer.list(StoreKey(api_version="v1", kind="Pod", namespace="default"))

    assert len(pods) == 1


@pytest.mark.asyncio
async def test_store_failures_become_query_errors(populated_store):
    populated_store.failing_kinds.add("Service")
    queryer = Queryer(populated_store)

    with pytest.raises(QueryError) as exc_info:
        await queryer.list(StoreKey(api_version="v1", kind="Service", namespace="default"))
    assert isinstance(exc_info.value.cause, RuntimeError)

    with pytest.raises(QueryError):
        await queryer.get(StoreKey(api_version="v1", kind="Service", namespace="default", name="web"))


@pytest.mark.asyncio
async def test_services_for_pod(populated_store, sample_pod):
    other = {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {"name": "api", "namespace": "default"},
        "spec": {"selector": {"app": "api"}},
    }
    headless = {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {"name": "external", "namespace": "default"},
        "spec": {},
    }
    populated_store.add(other, headless)

    services = await Queryer(populated_store).services_for_pod(sample_pod)

    assert [s["metadata"]["name"] for s in services] == ["web"]


@pytest.mark.asyncio
async def test_service_account_for_pod(populated_store, sample_pod):
    queryer = Queryer(populated_store)

    service_account = await queryer.service_account_for_pod(sample_pod)
    assert service_account["metadata"]["name"] == "web-sa"

    sample_pod["spec"].pop("serviceAccountName")
    assert await Queryer(populated_store).service_account_for_pod(sample_pod) is None


@pytest.mark.asyncio
async def test_service_account_defaults_to_default(store, sample_pod):
    sample_pod["spec"].pop("serviceAccountName")
    store.add(
        {
            "apiVersion": "v1",
            "kind": "ServiceAccount",
            "metadata": {"name": "default", "namespace": "default"},
        }
    )

    service_account = await Queryer(store).service_account_for_pod(sample_pod)

    assert service_account["metadata"]["name"] == "default"


@pytest.mark.asyncio
async def test_owners_for_object(populated_store, sample_pod, sample_replicaset):
    queryer = Queryer(populated_store)

    owners = await queryer.owners_for_object(sample_pod)
    assert owners == [sample_replicaset]

    owner = await queryer.owner_reference_for_object(sample_replicaset)
    assert owner["kind"] == "Deployment"


@pytest.mark.asyncio
async def test_missing_owner_is_skipped(store, sample_pod):
    assert await Queryer(store).owners_for_object(sample_pod) == []
    assert await Queryer(store).owner_reference_for_object(sample_pod) is None


@pytest.mark.asyncio
async def test_children(populated_store, sample_replicaset, sample_deployment):
    queryer = Queryer(populated_store)

    pods = await queryer.children(sample_replicaset, "v1", "Pod")
    replica_sets = await queryer.children(sample_deployment, "apps/v1", "ReplicaSet")

    assert len(pods) == 3
    assert [rs["metadata"]["name"] for rs in replica_sets] == ["web-7d4b9"]


@pytest.mark.asyncio
async def test_pods_for_service(populated_store, sample_service):
    pods = await Queryer(populated_store).pods_for_service(sample_service)
    assert len(pods) == 3
    assert populated_store.calls[-1][1].label_selector == "app=web"

    sample_service["spec"].pop("selector")
    assert await Queryer(populated_store).pods_for_service(sample_service) == []


@pytest.mark.asyncio
async def test_ingress_service_lookups(populated_store, sample_service, sample_ingress):
    queryer = Queryer(populated_store)

    ingresses = await queryer.ingresses_for_service(sample_service)
    services = await queryer.services_for_ingress(sample_ingress)

    assert [i["metadata"]["name"] for i in ingresses] == ["web"]
    assert [s["metadata"]["name"] for s in services] == ["web"]


@pytest.mark.asyncio
async def test_scale_target_for_hpa(populated_store):
    hpa = {
        "apiVersion": "autoscaling/v2",
        "kind": "HorizontalPodAutoscaler",
        "metadata": {"name": "web", "namespace": "default"},
        "spec": {"scaleTargetRef": {"apiVersion": "apps/v1", "kind": "Deployment", "name": "web"}},
    }
    queryer = Queryer(populated_store)

    target = await queryer.scale_target_for_hpa(hpa)
    assert target["kind"] == "Deployment"

    hpa["spec"]["scaleTargetRef"] = {}
    assert await queryer.scale_target_for_hpa(hpa) is None


def test_is_owned_by_prefers_uid(sample_replicaset, sample_pod):
    assert is_owned_by(sample_pod, sample_replicaset)

    impostor = dict(sample_replicaset, metadata=dict(sample_replicaset["metadata"], uid="rs-999"))
    assert not is_owned_by(sample_pod, impostor)


def test_is_owned_by_falls_back_to_name(sample_replicaset, sample_pod):
    sample_replicaset["metadata"].pop("uid")
    assert is_owned_by(sample_pod, sample_replicaset)


def test_controller_reference_prefers_controller():
    obj = {
        "metadata": {
            "ownerReferences": [
                {"kind": "ConfigMap", "name": "lock"},
                {"kind": "ReplicaSet", "name": "web-7d4b9", "controller": True},
            ]
        }
    }
    assert controller_reference(obj)["kind"] == "ReplicaSet"
    assert controller_reference({"metadata": {}}) is None


def test_ingress_backend_services():
    ingress = {
        "spec": {
            "defaultBackend": {"service": {"name": "fallback"}},
            "rules": [
                {
                    "http": {
                        "paths": [
                            {"backend": {"service": {"name": "web"}}},
                            {"backend": {"serviceName": "legacy"}},
                            {"backend": {"service": {"name": "web"}}},
                        ]
                    }
                }
            ],
        }
    }
    assert ingress_backend_services(ingress) == ["fallback", "web", "legacy"]
    assert ingress_backend_services({"spec": {}}) == []
