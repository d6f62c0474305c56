import json
import logging
from pathlib import Path
from typing import Any

from k8s_resource_viewer.models import Graph

logger = logging.getLogger(__name__)


def to_graph_payload(graph: Graph) -> dict[str, Any]:
    """
    Build the "graph ready" payload handed to the rendering layer.

    Nodes are keyed by node id and edges are listed in a stable order so
    successive refreshes diff cleanly.

    Returns:
        Dict with "nodes" and "edges"

    Example:
        >>> payload = to_graph_payload(graph)
        >>> payload["edges"][0]
        {'source': 'apps/v1:Deployment:default:web', 'target': 'apps/v1:ReplicaSet:default:web-abc', 'kind': 'owner'}
    """
    nodes = {
        node_id: graph.nodes[node_id].model_dump(mode="json", exclude_none=True)
        for node_id in sorted(graph.nodes)
    }
    edges = [
        edge.model_dump(mode="json")
        for edge in sorted(graph.edges, key=lambda e: (e.source, e.target, e.kind.value))
    ]

    return {"nodes": nodes, "edges": edges}


def export_json(graph: Graph, filepath: str | Path, indent: int = 2) -> bool:
    """
    Write the graph payload to a JSON file.

    Args:
        graph: Assembled graph
        filepath: Path to output file
        indent: JSON indentation

    Returns:
        True if the file was written
    """
    path = Path(filepath)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(to_graph_payload(graph), f, indent=indent)
    except OSError as e:
        logger.error(f"Failed to export graph to {path}: {e}")
        return False

    logger.info(f"Exported graph with {len(graph.nodes)} nodes to {path}")
    return True


def load_json(filepath: str | Path) -> Graph:
    """
    Load a graph written by export_json.

    Raises:
        FileNotFoundError: if the file does not exist
    """
    with open(Path(filepath)) as f:
        return Graph.model_validate(json.load(f))
