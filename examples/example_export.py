"""
Example demonstrating export of resource viewer graphs.

This example shows how to:
- Build the payload handed to a rendering layer
- Export graphs to JSON and load them back
- Convert a graph to NetworkX for analysis
"""

import asyncio
import json
from pathlib import Path

import networkx as nx

from k8s_resource_viewer import (
    KubernetesAdapter,
    ObjectKey,
    ResourceViewer,
    export_json,
    load_json,
    to_graph_payload,
)


async def main():
    output_dir = Path("examples/output")
    output_dir.mkdir(parents=True, exist_ok=True)

    viewer = ResourceViewer(KubernetesAdapter())

    print("Building graph from deployment...")
    graph = await viewer.build_from_key(
        ObjectKey(api_version="apps/v1", kind="Deployment", namespace="default", name="nginx")
    )
    print(f"Graph: {len(graph.nodes)} nodes, {len(graph.edges)} edges")

    payload = to_graph_payload(graph)
    print("\nFirst node of the payload:")
    first_id = next(iter(payload["nodes"]), None)
    if first_id:
        print(json.dumps({first_id: payload["nodes"][first_id]}, indent=2))

    print("\nExporting to JSON...")
    if export_json(graph, output_dir / "nginx_deployment.json"):
        print(f"   JSON saved: {output_dir / 'nginx_deployment.json'}")

    print("\nLoading graph back from JSON...")
    loaded = load_json(output_dir / "nginx_deployment.json")
    print(f"   Loaded: {len(loaded.nodes)} nodes, equal to original: {loaded == graph}")

    nx_graph = graph.to_networkx()
    roots = [node for node, degree in nx_graph.in_degree() if degree == 0]
    print(f"\nNetworkX view: {nx_graph.number_of_nodes()} nodes, roots: {roots}")
    print(f"   Weakly connected: {nx.is_weakly_connected(nx_graph) if len(nx_graph) else False}")


if __name__ == "__main__":
    asyncio.run(main())
