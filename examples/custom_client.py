"""Example: Custom object store with rate limiting."""

import asyncio
from typing import Any

from k8s_resource_viewer import KubernetesAdapter, ObjectKey, ResourceViewer, StoreKey


class RateLimitedStore:
    """Object store that throttles calls to an upstream store."""

    def __init__(self, upstream: KubernetesAdapter, requests_per_second: float = 10.0):
        """
        Initialize rate-limited store.

        Args:
            upstream: Upstream object store
            requests_per_second: Maximum requests per second
        """
        self.upstream = upstream
        self.min_interval = 1.0 / requests_per_second
        self.last_request_time = 0.0
        self.request_count = 0
        self._lock = asyncio.Lock()

    async def _rate_limit(self) -> None:
        async with self._lock:
            loop = asyncio.get_running_loop()
            time_since_last = loop.time() - self.last_request_time

            if time_since_last < self.min_interval:
                await asyncio.sleep(self.min_interval - time_since_last)

            self.last_request_time = loop.time()
            self.request_count += 1

    async def get(self, key: StoreKey) -> dict[str, Any] | None:
        await self._rate_limit()
        return await self.upstream.get(key)

    async def is_loading(self, key: StoreKey) -> bool:
        return await self.upstream.is_loading(key)

    def get_stats(self) -> dict[str, Any]:
        return {
            "total_requests": self.request_count,
            "rate_limit": f"{1.0 / self.min_interval:.1f} req/s",
        }

    async def list(self, key: StoreKey) -> tuple[list[dict[str, Any]], bool]:
        await self._rate_limit()
        return await self.upstream.list(key)


async def main():
    """Demonstrate a custom store with rate limiting."""
    store = RateLimitedStore(KubernetesAdapter(), requests_per_second=5.0)
    viewer = ResourceViewer(store)

    key = ObjectKey(api_version="v1", kind="Service", namespace="default", name="kubernetes")

    print("Building graph with rate-limited store...")
    print("Rate limit: 5 requests/second\n")

    graph = await viewer.build_from_key(key)

    print("Graph Statistics:")
    print(f"  Nodes: {len(graph.nodes)}")
    print(f"  Edges: {len(graph.edges)}")

    stats = store.get_stats()
    print("\nRate Limiting Statistics:")
    print(f"  Total requests: {stats['total_requests']}")
    print(f"  Rate limit: {stats['rate_limit']}")


if __name__ == "__main__":
    asyncio.run(main())
