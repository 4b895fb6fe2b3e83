"""Tests for pyvis network construction."""

import pytest

from incident_graph.config import CONFIG, TYPE_COLORS
from incident_graph.graph import process_graph_data
from incident_graph.multi_dataset import process_multi_dataset_graph
from incident_graph.visualizer import build_graph


def _node(net, node_id):
    return next(node for node in net.nodes if node["id"] == node_id)


class TestBuildGraph:
    """Tests for build_graph()."""

    def test_single_dataset_network(self, aiid_document):
        net = build_graph(process_graph_data(aiid_document))
        assert len(net.nodes) == 7
        assert len(net.edges) == 4
        assert net.directed
        assert _node(net, "inc-1")["size"] == pytest.approx(120)
        assert _node(net, "inc-1")["color"]["background"] == CONFIG["NODE_TYPE_COLORS"]["aiid:Incident"]

    def test_edge_labels(self, aiid_document):
        net = build_graph(process_graph_data(aiid_document))
        rel_keys = {edge["rel_key"] for edge in net.edges}
        assert rel_keys == {"deployer", "reports"}
        assert {edge["label"] for edge in net.edges} == {"Deployer", "Reports"}

    def test_multi_dataset_network(self, aiid_dataset, oecd_dataset):
        graph = process_multi_dataset_graph([aiid_dataset, oecd_dataset])
        net = build_graph(graph)
        assert len(net.nodes) == 8
        assert len(net.edges) == 10
        assert _node(net, "org-1")["color"]["background"] == TYPE_COLORS["core:Organization"]
        assert _node(net, "inc-1")["size"] == pytest.approx(40)
        assert "aiid, oecd" in _node(net, "org-1")["title"]

    def test_edge_color_follows_dataset(self, aiid_dataset, oecd_dataset):
        graph = process_multi_dataset_graph([aiid_dataset, oecd_dataset])
        net = build_graph(graph, dataset_colors={"oecd": "#123456"})
        colors = {(edge["from"], edge["to"]): edge["color"] for edge in net.edges}
        assert colors[("oecd-1", "org-1")] == "#123456"
        assert colors[("inc-1", "org-1")] == CONFIG["DEFAULT_EDGE_COLOR"]

    def test_empty_graph(self):
        net = build_graph(process_graph_data(None))
        assert net.nodes == []
        assert net.edges == []
