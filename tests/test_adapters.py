"""Tests for the Kubernetes API backed object store."""

from unittest.mock import MagicMock, patch

import pytest
from kubernetes.dynamic.exceptions import ResourceNotFoundError

from k8s_resource_viewer.adapters import KubernetesAdapter
from k8s_resource_viewer.models import StoreKey
from k8s_resource_viewer.protocols import ObjectStoreProtocol


@pytest.fixture
def dynamic_client():
    with patch("k8s_resource_viewer.adapters.dynamic.DynamicClient") as client_class:
        yield client_class.return_value


@pytest.fixture
def adapter(dynamic_client):
    return KubernetesAdapter(api_client=MagicMock())


def test_adapter_implements_protocol(adapter):
    assert isinstance(adapter, ObjectStoreProtocol)


@pytest.mark.asyncio
async def test_get(adapter, dynamic_client, sample_service):
    resource = dynamic_client.resources.get.return_value
    resource.get.return_value.to_dict.return_value = sample_service

    result = await adapter.get(StoreKey(api_version="v1", kind="Service", namespace="default", name="web"))

    assert result == sample_service
    dynamic_client.resources.get.assert_called_with(api_version="v1", kind="Service")
    resource.get.assert_called_once_with(name="web", namespace="default")


@pytest.mark.asyncio
async def test_get_unknown_kind_returns_none(adapter, dynamic_client):
    dynamic_client.resources.get.side_effect = ResourceNotFoundError("no such kind")

    result = await adapter.get(
        StoreKey(api_version="example.com/v1", kind="Widget", namespace="default", name="w")
    )

    assert result is None


@pytest.mark.asyncio
async def test_get_requires_name(adapter):
    with pytest.raises(ValueError):
        await adapter.get(StoreKey(api_version="v1", kind="Service", namespace="default"))


@pytest.mark.asyncio
async def test_list_fills_kind_and_api_version(adapter, dynamic_client):
    resource = dynamic_client.resources.get.return_value
    resource.get.return_value.to_dict.return_value = {
        "items": [{"metadata": {"name": "web-1", "namespace": "default"}}]
    }

    items, loading = await adapter.list(
        StoreKey(api_version="v1", kind="Pod", namespace="default", label_selector="app=web")
    )

    assert loading is False
    assert items == [
        {"apiVersion": "v1", "kind": "Pod", "metadata": {"name": "web-1", "namespace": "default"}}
    ]
    resource.get.assert_called_once_with(namespace="default", label_selector="app=web")
    assert await adapter.is_loading(StoreKey(api_version="v1", kind="Pod")) is False


@pytest.mark.asyncio
async def test_api_call_statistics(adapter, dynamic_client):
    """Test API call statistics tracking."""
    dynamic_client.resources.get.return_value.get.return_value.to_dict.return_value = {"items": []}
    key = StoreKey(api_version="v1", kind="Pod", namespace="default")

    await adapter.list(key)
    await adapter.list(key)
    await adapter.get(key.model_copy(update={"name": "web-1"}))

    assert adapter.get_api_call_stats() == {"get": 1, "list": 2, "total": 3}

    adapter.reset_api_call_stats()
    assert adapter.get_api_call_stats() == {"get": 0, "list": 0, "total": 0}
