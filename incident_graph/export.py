"""NetworkX and RDF exports of projected graphs and entity collections."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional, Union
from urllib.parse import quote

import networkx as nx
from rdflib import Graph as RDFGraph, Literal, Namespace, URIRef
from rdflib.namespace import RDF

from incident_graph.config import EX, NAMESPACE_PREFIXES
from incident_graph.models import ExtractedEntities, GraphData, MultiDatasetGraph
from incident_graph.utils import is_reference, iter_relationships


def to_networkx(graph: Union[GraphData, MultiDatasetGraph]) -> nx.MultiDiGraph:
    G = nx.MultiDiGraph()
    if isinstance(graph, MultiDatasetGraph):
        for node in graph.nodes:
            G.add_node(
                node.id,
                label=node.label,
                type=node.type,
                dataset=node.dataset,
                datasets=node.memberships,
                connection_count=node.connection_count,
                radius=node.radius,
                color=node.color,
            )
        for edge in graph.edges:
            G.add_edge(edge.source, edge.target, label=edge.label, type=edge.type, dataset=edge.dataset)
    elif isinstance(graph, GraphData):
        for node in graph.nodes:
            G.add_node(node.id, label=node.label, type=node.type, degree=node.degree, radius=node.radius)
        for edge in graph.edges:
            G.add_edge(edge.source, edge.target, label=edge.label, type=edge.type)
    else:
        raise TypeError(f"Cannot export graph of type {type(graph).__name__}")
    return G


def _term_uri(value: str, prefixes: Mapping[str, str]) -> URIRef:
    text = value.strip()
    if text.startswith(("http://", "https://", "urn:")):
        return URIRef(text)
    if ":" in text:
        prefix, local = text.split(":", 1)
        for namespace, known in prefixes.items():
            if known == prefix:
                return URIRef(namespace + quote(local))
    return EX[quote(text)]


def _literal(value: Any) -> Optional[Literal]:
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        return Literal(json.dumps(value, sort_keys=True, default=str))
    return Literal(value)


def extracted_to_rdf(extracted: ExtractedEntities, prefixes: Optional[Mapping[str, str]] = None) -> RDFGraph:
    """
    Convert an entity collection into RDF triples. ``reverse_*`` arrays are
    skipped because every one of them mirrors a forward triple.
    """
    prefixes = NAMESPACE_PREFIXES if prefixes is None else prefixes
    graph = RDFGraph()
    graph.bind("ex", EX)
    for namespace, prefix in prefixes.items():
        graph.bind(prefix, Namespace(namespace))

    for entities in extracted.values():
        for entity in entities:
            subject = _term_uri(entity["id"], prefixes)
            graph.add((subject, RDF.type, _term_uri(entity["type"], prefixes)))
            for key, value in iter_relationships(entity):
                predicate = _term_uri(key, prefixes)
                for item in value if isinstance(value, list) else [value]:
                    if is_reference(item):
                        graph.add((subject, predicate, _term_uri(item["id"], prefixes)))
                        continue
                    literal = _literal(item)
                    if literal is not None:
                        graph.add((subject, predicate, literal))

    logging.info("Exported %d triples", len(graph))
    return graph
