"""Project a single JSON-LD payload into a flat node/edge graph of allow-listed types."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from incident_graph.config import GraphConfig
from incident_graph.models import GraphData, GraphEdge, GraphNode, NormalizationResult
from incident_graph.normalization import EntityKey, index_entities
from incident_graph.utils import (
    canonical_type,
    count_degrees,
    entity_id,
    entity_type,
    interpolate_radius,
    is_identity_key,
    is_reference,
    is_reverse_key,
    is_skipped_key,
    node_label,
    profile_time,
)


@dataclass
class _ProjectionContext:
    config: GraphConfig
    index: Dict[EntityKey, Dict[str, Any]] = field(default_factory=dict)
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)
    visited: Set[str] = field(default_factory=set)

    def resolve(self, item: Any) -> Any:
        # Bare references from a normalized collection stand in for their full entity.
        if self.index and is_reference(item):
            return self.index.get((item["type"], item["id"]), item)
        return item

    def allowed(self, raw_type: Optional[str]) -> Optional[str]:
        if raw_type is None:
            return None
        type_name = canonical_type(raw_type, self.config.namespace_prefixes)
        return type_name if type_name in self.config.semantic_types else None


def _child_entities(data: Dict[str, Any], ctx: _ProjectionContext):
    for key, value in data.items():
        if is_skipped_key(key) or is_identity_key(key) or is_reverse_key(key):
            continue
        if isinstance(value, list):
            for item in value:
                item = ctx.resolve(item)
                if isinstance(item, dict) and entity_id(item):
                    yield key, "array", item
        else:
            value = ctx.resolve(value)
            if isinstance(value, dict) and entity_id(value):
                yield key, "object", value


def extract_graph_data(data: Any, ctx: _ProjectionContext) -> None:
    """
    Walk one payload node. Nodes of types outside the allow-list are still
    walked, but never become graph nodes or edge endpoints.
    """
    if not isinstance(data, dict):
        return
    node_id = entity_id(data)
    raw_type = entity_type(data)
    if node_id is None or raw_type is None:
        return
    if node_id in ctx.visited:
        return
    ctx.visited.add(node_id)

    type_name = ctx.allowed(raw_type)
    if type_name is None:
        logging.debug("Skipping node %s of type %s (not in allow-list)", node_id, raw_type)
    else:
        ctx.nodes.append(GraphNode(id=node_id, label=node_label(data, node_id), type=type_name, value=data))

    for key, edge_type, child in _child_entities(data, ctx):
        if type_name is not None and ctx.allowed(entity_type(child)) is not None:
            ctx.edges.append(GraphEdge(source=node_id, target=entity_id(child), label=key, type=edge_type))
        extract_graph_data(child, ctx)


def calculate_node_degrees(nodes: List[GraphNode], edges: Iterable[GraphEdge]) -> None:
    degrees = count_degrees((node.id for node in nodes), edges)
    for node in nodes:
        node.degree = degrees.get(node.id, 0)


def calculate_node_radius(degree: int, max_degree: int, config: Optional[GraphConfig] = None) -> float:
    config = config or GraphConfig()
    normalized = degree / max_degree if max_degree > 0 else 0.0
    return config.min_radius + normalized * (config.max_radius - config.min_radius)


def find_connected_nodes(node_id: str, edges: Iterable[Any]) -> Set[str]:
    connected: Set[str] = set()
    for edge in edges:
        if edge.source == node_id:
            connected.add(edge.target)
        if edge.target == node_id:
            connected.add(edge.source)
    return connected


@profile_time
def process_graph_data(payload: Any, config: Optional[GraphConfig] = None) -> GraphData:
    """
    Build ``{nodes, edges}`` from a raw payload (object or list of objects) or a
    ``NormalizationResult``; node radius grows linearly with degree.
    """
    ctx = _ProjectionContext(config=config or GraphConfig())
    if isinstance(payload, NormalizationResult):
        ctx.index = index_entities(payload.extracted)
        roots: List[Any] = [entity for entities in payload.extracted.values() for entity in entities]
    elif isinstance(payload, list):
        roots = payload
    elif isinstance(payload, dict):
        roots = [payload]
    else:
        return GraphData()

    for item in roots:
        extract_graph_data(item, ctx)

    node_ids = {node.id for node in ctx.nodes}
    edges = [edge for edge in ctx.edges if edge.source in node_ids and edge.target in node_ids]

    calculate_node_degrees(ctx.nodes, edges)
    radii = interpolate_radius([node.degree for node in ctx.nodes], ctx.config.min_radius, ctx.config.max_radius)
    for node, radius in zip(ctx.nodes, radii):
        node.radius = radius

    logging.info("Projected graph with %d nodes and %d edges", len(ctx.nodes), len(edges))
    return GraphData(nodes=ctx.nodes, edges=edges)
