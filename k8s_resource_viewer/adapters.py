from __future__ import annotations

import asyncio
import logging
from typing import Any

from kubernetes import client, config, dynamic
from kubernetes.client.exceptions import ApiException
from kubernetes.dynamic.exceptions import NotFoundError, ResourceNotFoundError

from k8s_resource_viewer.models import StoreKey

logger = logging.getLogger(__name__)


class KubernetesAdapter:
    """
    Object store backed by the Kubernetes API through the dynamic client.

    Every call goes straight to the API server in a worker thread, so the
    store is never loading. API call statistics are tracked for diagnostics.

    Example:
        >>> store = KubernetesAdapter()
        >>> pods, loading = await store.list(StoreKey(api_version="v1", kind="Pod", namespace="default"))
    """

    def __init__(
        self,
        api_client: client.ApiClient | None = None,
        context: str | None = None,
    ):
        """
        Initialize the adapter.

        Args:
            api_client: Configured API client; kubeconfig or in-cluster config is loaded if None
            context: kubeconfig context to use when loading kubeconfig
        """
        if api_client is None:
            try:
                config.load_incluster_config()
            except config.ConfigException:
                config.load_kube_config(context=context)
            api_client = client.ApiClient()

        self._dynamic = dynamic.DynamicClient(api_client)
        self._api_call_stats = {"get": 0, "list": 0, "total": 0}

    def _resource(self, key: StoreKey) -> Any:
        return self._dynamic.resources.get(api_version=key.api_version, kind=key.kind)

    def _get_sync(self, key: StoreKey) -> dict[str, Any] | None:
        try:
            resource = self._resource(key)
            return resource.get(name=key.name, namespace=key.namespace).to_dict()
        except (NotFoundError, ResourceNotFoundError):
            return None

    def _list_sync(self, key: StoreKey) -> list[dict[str, Any]]:
        try:
            resource = self._resource(key)
        except ResourceNotFoundError:
            logger.debug(f"API server does not serve {key.api_version}/{key.kind}")
            return []

        result = resource.get(namespace=key.namespace, label_selector=key.label_selector).to_dict()

        items = []
        for item in result.get("items") or []:
            item.setdefault("apiVersion", key.api_version)
            item.setdefault("kind", key.kind)
            items.append(item)
        return items

    async def get(self, key: StoreKey) -> dict[str, Any] | None:
        if not key.name:
            raise ValueError(f"get requires a name: {key}")

        self._count("get")
        try:
            return await asyncio.to_thread(self._get_sync, key)
        except ApiException as e:
            logger.warning(f"Error getting {key}: {e.status} {e.reason}")
            raise

    async def list(self, key: StoreKey) -> tuple[list[dict[str, Any]], bool]:
        self._count("list")
        try:
            items = await asyncio.to_thread(self._list_sync, key)
        except ApiException as e:
            logger.warning(f"Error listing {key}: {e.status} {e.reason}")
            raise
        return items, False

    async def is_loading(self, key: StoreKey) -> bool:
        return False

    def _count(self, call: str) -> None:
        self._api_call_stats[call] += 1
        self._api_call_stats["total"] += 1

    def get_api_call_stats(self) -> dict[str, int]:
        return self._api_call_stats.copy()

    def reset_api_call_stats(self) -> None:
        self._api_call_stats = {"get": 0, "list": 0, "total": 0}
