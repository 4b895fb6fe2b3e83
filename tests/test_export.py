"""Tests for networkx and RDF exports."""

import pytest
from rdflib import Literal, URIRef
from rdflib.namespace import RDF

from incident_graph.config import EX
from incident_graph.export import extracted_to_rdf, to_networkx
from incident_graph.graph import process_graph_data
from incident_graph.multi_dataset import process_multi_dataset_graph


@pytest.fixture
def extracted():
    return {
        "aiid:Incident": [
            {
                "type": "aiid:Incident",
                "id": "inc-1",
                "title": "Crash",
                "deployer": {"type": "core:Organization", "id": "org-1"},
                "reverse_cites": [{"type": "aiid:Report", "id": "rep-1"}],
            }
        ],
        "core:Organization": [{"type": "core:Organization", "id": "org-1", "name": "Acme"}],
    }


class TestToNetworkx:
    def test_single_dataset_graph(self, aiid_document):
        G = to_networkx(process_graph_data(aiid_document))
        assert G.number_of_nodes() == 7
        assert G.number_of_edges() == 4
        assert G.nodes["inc-1"]["degree"] == 3
        assert G.nodes["org-1"]["type"] == "core:Organization"

    def test_multi_dataset_graph_keeps_parallel_edges(self, aiid_dataset, oecd_dataset):
        G = to_networkx(process_multi_dataset_graph([aiid_dataset, oecd_dataset]))
        assert G.number_of_nodes() == 8
        assert G.number_of_edges() == 10
        assert G.nodes["org-1"]["datasets"] == ["aiid", "oecd"]
        assert G.nodes["inc-1"]["datasets"] == ["aiid"]

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            to_networkx({"nodes": [], "edges": []})


class TestExtractedToRdf:
    """Tests for extracted_to_rdf()."""

    def test_types_expanded(self, extracted):
        graph = extracted_to_rdf(extracted)
        assert (EX["inc-1"], RDF.type, URIRef("https://example.org/aiid#Incident")) in graph
        assert (EX["org-1"], RDF.type, URIRef("https://example.org/core#Organization")) in graph

    def test_references_and_literals(self, extracted):
        graph = extracted_to_rdf(extracted)
        assert (EX["inc-1"], EX["deployer"], EX["org-1"]) in graph
        assert (EX["inc-1"], EX["title"], Literal("Crash")) in graph
        assert (EX["org-1"], EX["name"], Literal("Acme")) in graph

    def test_reverse_keys_skipped(self, extracted):
        graph = extracted_to_rdf(extracted)
        assert not list(graph.triples((None, EX["reverse_cites"], None)))
        assert len(graph) == 5

    def test_absolute_uris_kept(self):
        graph = extracted_to_rdf({"T": [{"type": "T", "id": "https://incidents.example/1"}]})
        assert (URIRef("https://incidents.example/1"), RDF.type, EX["T"]) in graph

    def test_nested_objects_as_json_literal(self):
        graph = extracted_to_rdf({"T": [{"type": "T", "id": "x", "meta": {"b": 1, "a": 2}}]})
        assert (EX["x"], EX["meta"], Literal('{"a": 2, "b": 1}')) in graph

    def test_unknown_prefix_falls_back_to_ex(self):
        graph = extracted_to_rdf({"foo:Bar": [{"type": "foo:Bar", "id": "x"}]})
        type_uri = next(graph.objects(EX["x"], RDF.type))
        assert str(type_uri).startswith(str(EX))
