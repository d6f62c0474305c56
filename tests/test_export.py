import json
import tempfile
from pathlib import Path

import pytest

from k8s_resource_viewer.export import export_json, load_json, to_graph_payload
from k8s_resource_viewer.models import (
    EdgeKind,
    Graph,
    GraphEdge,
    Link,
    MemberSummary,
    Node,
    NodeStatus,
)


@pytest.fixture
def sample_graph():
    """Create a sample graph for testing."""
    return Graph(
        nodes={
            "apps/v1:ReplicaSet:default:web-7d4b9": Node(
                name="web-7d4b9",
                api_version="apps/v1",
                kind="ReplicaSet",
                status=NodeStatus.OK,
                details=["Replica Set is OK"],
                path=Link(
                    text="web-7d4b9",
                    ref="/overview/namespace/default/workloads/replica-sets/web-7d4b9",
                ),
            ),
            "pods:default:ReplicaSet:web-7d4b9": Node(
                name="web-7d4b9 pods",
                api_version="v1",
                kind="Pod",
                status=NodeStatus.WARNING,
                details=["2 pods: 1 warning, 1 ok"],
                is_group=True,
                members=[
                    MemberSummary(name="web-7d4b9-a1", status=NodeStatus.OK, details=("Pod is OK",)),
                    MemberSummary(
                        name="web-7d4b9-b2", status=NodeStatus.WARNING, details=("Pod is pending",)
                    ),
                ],
            ),
        },
        edges=[
            GraphEdge(
                source="apps/v1:ReplicaSet:default:web-7d4b9",
                target="pods:default:ReplicaSet:web-7d4b9",
                kind=EdgeKind.OWNER,
            )
        ],
    )


def test_graph_payload(sample_graph):
    payload = to_graph_payload(sample_graph)

    assert list(payload["nodes"]) == [
        "apps/v1:ReplicaSet:default:web-7d4b9",
        "pods:default:ReplicaSet:web-7d4b9",
    ]
    group = payload["nodes"]["pods:default:ReplicaSet:web-7d4b9"]
    assert group["status"] == "warning"
    assert "path" not in group
    assert group["members"][1] == {
        "name": "web-7d4b9-b2",
        "status": "warning",
        "details": ["Pod is pending"],
    }
    assert payload["edges"] == [
        {
            "source": "apps/v1:ReplicaSet:default:web-7d4b9",
            "target": "pods:default:ReplicaSet:web-7d4b9",
            "kind": "owner",
        }
    ]


def test_graph_payload_is_json_serializable(sample_graph):
    json.dumps(to_graph_payload(sample_graph))


def test_export_json(sample_graph):
    """Test JSON export."""
    with tempfile.TemporaryDirectory() as tmpdir:
        filepath = Path(tmpdir) / "out" / "graph.json"

        assert export_json(sample_graph, filepath) is True
        assert filepath.exists()

        loaded = load_json(filepath)

    assert loaded == sample_graph


def test_export_json_unwritable(sample_graph):
    with tempfile.TemporaryDirectory() as tmpdir:
        blocker = Path(tmpdir) / "file"
        blocker.write_text("not a directory")

        assert export_json(sample_graph, blocker / "graph.json") is False


def test_load_json_missing_file():
    with pytest.raises(FileNotFoundError):
        load_json("/nonexistent/graph.json")
