"""
Unit tests for the core data model.
"""

import pytest

from stampgraph.core.types import (
    Dependency,
    DependencyGraph,
    DependencyType,
    GraphEdge,
    GraphNode,
    LoadMethod,
    RiskLevel,
    StampRecord,
)


class TestStampRecord:
    def test_wire_format(self):
        record = StampRecord.model_validate({
            "stamp": 7,
            "cpid": "A7",
            "stamp_base64": "PHA+",
            "creator": "bc1q",
            "stamp_mimetype": "text/html",
            "locked": 1,
            "supply": 2,
            "unknown_field": "ignored",
        })

        assert record.stamp_id == 7
        assert record.has_payload
        assert record.snapshot() == {
            "creator": "bc1q",
            "mimetype": "text/html",
            "block_index": None,
            "tx_hash": None,
            "supply": 2,
            "locked": True,
        }

    def test_empty_payload(self):
        assert not StampRecord(stamp=1, cpid="A1", stamp_base64="").has_payload


class TestDependency:
    @pytest.mark.parametrize("reference, dep_type, expected", [
        ("A123", DependencyType.JAVASCRIPT, True),
        ("A123", DependencyType.SCRIPT_SRC, True),
        ("A123", DependencyType.HTML, False),
        ("lib.js", DependencyType.JAVASCRIPT, False),
        ("a123", DependencyType.JAVASCRIPT, False),
    ])
    def test_is_stamp_reference(self, reference, dep_type, expected):
        dep = Dependency(reference=reference, type=dep_type, load_method=LoadMethod.T_JS)
        assert dep.is_stamp_reference() is expected

    def test_mark_resolved(self, make_stamp):
        dep = Dependency(reference="A2", type=DependencyType.JAVASCRIPT, load_method=LoadMethod.T_JS)
        dep.mark_resolved(make_stamp(2, "A2", "<p/>"))

        assert dep.is_resolved
        assert dep.resolved_stamp_id == 2
        assert dep.resolved_metadata["block_index"] == 800002


def test_risk_rank_orders_levels():
    assert RiskLevel.LOW.rank < RiskLevel.MEDIUM.rank < RiskLevel.HIGH.rank


def test_graph_to_dict():
    child = GraphNode(reference="A2", stamp_id=2, depth=1)
    root = GraphNode(reference="A1", stamp_id=1, depth=0, children=[child])
    graph = DependencyGraph(
        root=root,
        nodes={"A1": root, "A2": child},
        edges=[GraphEdge(source="A1", target="A2", type="t.js")],
        total_nodes=2,
        max_depth_reached=1,
    )

    data = graph.to_dict()

    assert data["root"] == "A1"
    assert data["nodes"]["A1"]["children"] == ["A2"]
    assert data["edges"] == [{"from": "A1", "to": "A2", "type": "t.js"}]
    assert data["summary"] == {
        "total_nodes": 2,
        "total_edges": 1,
        "max_depth_reached": 1,
        "circular_references": [],
        "truncated": False,
    }
    assert [e.target for e in graph.outgoing("A1")] == ["A2"]
