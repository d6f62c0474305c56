"""Basic usage example for k8s-resource-viewer."""

import asyncio

from k8s_resource_viewer import KubernetesAdapter, ObjectKey, ResourceViewer, ViewerOptions


async def main():
    """Build and print the resource viewer graph of a Deployment."""
    store = KubernetesAdapter()
    viewer = ResourceViewer(store, options=ViewerOptions(group_threshold=2))

    key = ObjectKey(api_version="apps/v1", kind="Deployment", namespace="default", name="nginx")

    print("Building graph from Deployment...")
    graph = await viewer.build_from_key(key)

    print("\nGraph Statistics:")
    print(f"  Nodes: {len(graph.nodes)}")
    print(f"  Edges: {len(graph.edges)}")

    print("\nNodes:")
    for node_id, node in graph.nodes.items():
        label = f"{node.kind}/{node.name}"
        if node.is_group:
            label = f"{label} ({len(node.members)} members)"
        print(f"  [{node.status.value:>7}] {label}")
        for detail in node.details:
            print(f"            {detail}")
        if node.path:
            print(f"            {node.path.ref}")

    print("\nRelationships:")
    for edge in graph.edges:
        print(f"  {edge.source} --[{edge.kind.value}]--> {edge.target}")

    api_stats = store.get_api_call_stats()
    print("\nKubernetes API Statistics:")
    print(f"  get calls: {api_stats['get']}")
    print(f"  list calls: {api_stats['list']}")
    print(f"  Total API calls: {api_stats['total']}")


if __name__ == "__main__":
    asyncio.run(main())
