"""Example showing a cached object store that reports when it is still loading."""

import asyncio
import time
from typing import Any

from k8s_resource_viewer import KubernetesAdapter, ObjectKey, ResourceViewer, StoreKey


class CachedStore:
    """
    Object store wrapper with TTL-based caching.

    List results are filled in the background; until a list is cached the
    store reports it as loading, and the viewer waits for it.
    """

    def __init__(self, upstream: KubernetesAdapter, ttl: int = 60):
        """
        Initialize cached store.

        Args:
            upstream: Upstream object store
            ttl: Time-to-live for cache entries in seconds
        """
        self.upstream = upstream
        self.ttl = ttl
        self.cache: dict[StoreKey, tuple[Any, float]] = {}
        self.pending: dict[StoreKey, asyncio.Task] = {}
        self.hits = 0
        self.misses = 0

    def _fresh(self, key: StoreKey) -> bool:
        entry = self.cache.get(key)
        return entry is not None and time.time() - entry[1] < self.ttl

    async def get(self, key: StoreKey) -> dict[str, Any] | None:
        if self._fresh(key):
            self.hits += 1
            return self.cache[key][0]

        self.misses += 1
        obj = await self.upstream.get(key)
        if obj:
            self.cache[key] = (obj, time.time())
        return obj

    async def is_loading(self, key: StoreKey) -> bool:
        return key in self.pending

    async def _fill(self, key: StoreKey) -> None:
        try:
            items, _ = await self.upstream.list(key)
            self.cache[key] = (items, time.time())
        finally:
            del self.pending[key]

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        total = self.hits + self.misses
        hit_rate = (self.hits / total * 100) if total > 0 else 0

        return {
            "hits": self.hits,
            "misses": self.misses,
            "total": total,
            "hit_rate": f"{hit_rate:.1f}%",
            "cache_size": len(self.cache),
        }

    async def list(self, key: StoreKey) -> tuple[list[dict[str, Any]], bool]:
        if self._fresh(key):
            self.hits += 1
            return self.cache[key][0], False

        self.misses += 1
        if key not in self.pending:
            self.pending[key] = asyncio.create_task(self._fill(key))
        return [], True


async def main():
    """Demonstrate caching benefits."""
    store = CachedStore(KubernetesAdapter(), ttl=60)
    viewer = ResourceViewer(store)

    key = ObjectKey(api_version="apps/v1", kind="Deployment", namespace="default", name="nginx")

    print("Building graph (first time - cache cold)...")
    start = time.time()
    graph1 = await viewer.build_from_key(key)
    duration1 = time.time() - start

    print(f"  Took {duration1:.2f}s")
    print(f"  Nodes: {len(graph1.nodes)}, Edges: {len(graph1.edges)}")

    print("\nBuilding same graph again (cache warm)...")
    start = time.time()
    graph2 = await viewer.build_from_key(key)
    duration2 = time.time() - start

    print(f"  Took {duration2:.2f}s")
    print(f"  Nodes: {len(graph2.nodes)}, Edges: {len(graph2.edges)}")

    speedup = duration1 / duration2 if duration2 > 0 else 0
    print(f"\nSpeedup: {speedup:.1f}x faster")

    stats = store.get_stats()
    print("\nCache Statistics:")
    for name, value in stats.items():
        print(f"  {name}: {value}")


if __name__ == "__main__":
    asyncio.run(main())
