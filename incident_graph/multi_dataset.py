"""Rank, expand and merge several normalized datasets into one cross-referenced graph."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Collection, Dict, Iterator, List, Mapping, Optional, Set, Tuple

from incident_graph.config import MultiDatasetConfig
from incident_graph.models import (
    DatasetConfig,
    Entity,
    ExtractedEntities,
    IncidentStats,
    MultiDatasetGraph,
    MultiDatasetGraphEdge,
    MultiDatasetGraphNode,
    MultiDatasetStats,
    NormalizationResult,
    RenderingStats,
)
from incident_graph.merge import merge_entity_properties
from incident_graph.normalization import EntityKey, index_entities
from incident_graph.utils import (
    count_degrees,
    interpolate_radius,
    is_identity_key,
    is_skipped_key,
    iter_references,
    iter_relationships,
    node_label,
    profile_time,
    reduction_percent,
)


def _extracted(dataset: DatasetConfig) -> ExtractedEntities:
    data = dataset.data
    if isinstance(data, NormalizationResult):
        return data.extracted
    return data or {}


def incident_types(extracted: ExtractedEntities, markers: Collection[str]) -> List[str]:
    """Entity types whose name contains any of the incident markers."""
    return [type_name for type_name in extracted if any(marker in type_name for marker in markers)]


def count_incident_connections(extracted: ExtractedEntities, incident_type: str) -> Dict[str, int]:
    """Forward references per incident; scalar values and plain lists do not count."""
    counts: Dict[str, int] = {}
    for incident in extracted.get(incident_type, []):
        count = 0
        for _, value in iter_relationships(incident):
            count += sum(1 for _ in iter_references(value))
        counts[incident["id"]] = count
    return counts


def get_top_incidents(extracted: ExtractedEntities, incident_type: str, limit: Optional[int]) -> List[Entity]:
    incidents = extracted.get(incident_type, [])
    counts = count_incident_connections(extracted, incident_type)
    ranked = sorted(incidents, key=lambda incident: -counts.get(incident["id"], 0))
    return ranked if limit is None else ranked[:limit]


@dataclass
class _ExpansionContext:
    """Node map, edge list and visited set of one projection pass."""

    config: MultiDatasetConfig
    nodes: Dict[str, MultiDatasetGraphNode] = field(default_factory=dict)
    edges: List[MultiDatasetGraphEdge] = field(default_factory=list)
    visited: Set[str] = field(default_factory=set)

    def visit(self, entity: Entity, dataset_id: str) -> bool:
        """Record ``entity`` for ``dataset_id``; False if this dataset already walked it."""
        node_id = entity.get("id")
        if not node_id:
            return False
        visit_key = f"{dataset_id}:{node_id}"
        if visit_key in self.visited:
            return False
        self.visited.add(visit_key)

        node = self.nodes.get(node_id)
        if node is None:
            self.nodes[node_id] = MultiDatasetGraphNode(
                id=node_id,
                label=node_label(entity, node_id, self.config.label_max_length),
                type=entity.get("type", "unknown"),
                dataset=dataset_id,
                value=entity,
            )
        else:
            if node.datasets is None:
                node.datasets = [node.dataset]
            if dataset_id not in node.datasets:
                node.datasets.append(dataset_id)
                node.value = merge_entity_properties(node.value or {}, entity)
                logging.debug("Entity %s shared by datasets %s", node_id, node.datasets)
        return True


def _linked_entities(entity: Entity, index: Mapping[EntityKey, Entity]) -> Iterator[Tuple[str, Entity]]:
    # reverse_* arrays are followed too, so a link can be discovered from both ends.
    for key, value in entity.items():
        if is_skipped_key(key) or is_identity_key(key):
            continue
        for ref in iter_references(value):
            target = index.get((ref["type"], ref["id"]))
            if target is None:
                logging.debug("Dangling reference %s -[%s]-> %s", entity.get("id"), key, ref["id"])
                continue
            yield key, target


def extract_incident_graph(
    seed: Entity,
    dataset_id: str,
    index: Mapping[EntityKey, Entity],
    ctx: _ExpansionContext,
    max_depth: Optional[int] = None,
) -> None:
    """
    Depth-first expansion from ``seed`` through resolvable references.

    Entities reached at ``max_depth`` are added but not expanded; ``None`` means
    no depth limit. An explicit stack keeps deep chains off the call stack.
    """
    if not ctx.visit(seed, dataset_id):
        return
    if max_depth is not None and max_depth <= 0:
        return

    stack: List[Tuple[Entity, int, Iterator[Tuple[str, Entity]]]] = [(seed, 0, _linked_entities(seed, index))]
    while stack:
        entity, depth, links = stack[-1]
        step = next(links, None)
        if step is None:
            stack.pop()
            continue
        key, target = step
        ctx.edges.append(
            MultiDatasetGraphEdge(
                source=entity["id"],
                target=target["id"],
                label=key,
                type="relationship",
                dataset=dataset_id,
            )
        )
        child_depth = depth + 1
        if ctx.visit(target, dataset_id) and (max_depth is None or child_depth < max_depth):
            stack.append((target, child_depth, _linked_entities(target, index)))


def get_node_color(
    node: MultiDatasetGraphNode,
    config: Optional[MultiDatasetConfig] = None,
    dataset_colors: Optional[Mapping[str, str]] = None,
) -> str:
    """Type override, then bridge color, then the owning dataset's color, then the fallback."""
    config = config or MultiDatasetConfig()
    type_color = config.type_colors.get(node.type)
    if type_color:
        return type_color
    if node.is_bridge:
        return config.bridge_color
    colors = config.dataset_colors if dataset_colors is None else dataset_colors
    return colors.get(node.memberships[0]) or config.fallback_color


def _estimate_potential(
    datasets: List[DatasetConfig],
    indexes: Mapping[str, Mapping[EntityKey, Entity]],
    config: MultiDatasetConfig,
) -> _ExpansionContext:
    # Sample of the first incidents per type, expanded without any bound.
    ctx = _ExpansionContext(config=config)
    for dataset in datasets:
        extracted = _extracted(dataset)
        for incident_type in incident_types(extracted, config.incident_markers):
            for incident in extracted[incident_type][: config.potential_sample_size]:
                extract_incident_graph(incident, dataset.id, indexes[dataset.id], ctx, max_depth=None)
    return ctx


def _build_stats(
    ctx: _ExpansionContext,
    potential: _ExpansionContext,
    incident_stats: IncidentStats,
) -> MultiDatasetStats:
    nodes = list(ctx.nodes.values())
    bridge_nodes = sum(1 for node in nodes if node.is_bridge)

    cross_dataset_edges = 0
    for edge in ctx.edges:
        source, target = ctx.nodes.get(edge.source), ctx.nodes.get(edge.target)
        if source and target and set(source.memberships) != set(target.memberships):
            cross_dataset_edges += 1

    nodes_by_dataset: Dict[str, int] = {}
    nodes_by_type: Dict[str, int] = {}
    for node in nodes:
        for dataset_id in node.memberships:
            nodes_by_dataset[dataset_id] = nodes_by_dataset.get(dataset_id, 0) + 1
        nodes_by_type[node.type] = nodes_by_type.get(node.type, 0) + 1

    rendering = RenderingStats(
        actual_nodes=len(nodes),
        potential_nodes=len(potential.nodes),
        actual_edges=len(ctx.edges),
        potential_edges=len(potential.edges),
        node_reduction=reduction_percent(len(potential.nodes), len(nodes)),
        edge_reduction=reduction_percent(len(potential.edges), len(ctx.edges)),
    )
    return MultiDatasetStats(
        total_nodes=len(nodes),
        total_edges=len(ctx.edges),
        bridge_nodes=bridge_nodes,
        cross_dataset_links=bridge_nodes,
        cross_dataset_edges=cross_dataset_edges,
        nodes_by_dataset=nodes_by_dataset,
        nodes_by_type=nodes_by_type,
        incident_stats=incident_stats,
        rendering_stats=rendering,
    )


@profile_time
def process_multi_dataset_graph(
    datasets: List[DatasetConfig],
    config: Optional[MultiDatasetConfig] = None,
    enabled: Optional[Collection[str]] = None,
) -> MultiDatasetGraph:
    """
    Build one graph from several normalized datasets.

    Each dataset contributes its best-connected incident-like entities as
    seeds, expanded up to ``config.max_depth`` hops. Entities sharing an id
    across datasets collapse into a single bridge node listing every dataset.
    """
    config = config or MultiDatasetConfig()
    active = [dataset for dataset in datasets if enabled is None or dataset.id in enabled]
    indexes = {dataset.id: index_entities(_extracted(dataset)) for dataset in active}
    dataset_colors: Dict[str, str] = dict(config.dataset_colors)
    dataset_colors.update({dataset.id: dataset.color for dataset in active if dataset.color})

    potential = _estimate_potential(active, indexes, config)

    ctx = _ExpansionContext(config=config)
    incident_stats = IncidentStats()
    for dataset in active:
        extracted = _extracted(dataset)
        types = incident_types(extracted, config.incident_markers)
        incident_stats.total_available[dataset.id] = sum(len(extracted[t]) for t in types)
        incident_stats.displayed[dataset.id] = 0
        for incident_type in types:
            seeds = get_top_incidents(extracted, incident_type, config.incident_limit)
            incident_stats.displayed[dataset.id] += len(seeds)
            for seed in seeds:
                extract_incident_graph(seed, dataset.id, indexes[dataset.id], ctx, max_depth=config.depth_limit)
        incident_stats.limited[dataset.id] = (
            incident_stats.displayed[dataset.id] < incident_stats.total_available[dataset.id]
        )

    nodes = list(ctx.nodes.values())
    connections = count_degrees((node.id for node in nodes), ctx.edges)
    for node in nodes:
        node.connection_count = connections.get(node.id, 0)
    radii = interpolate_radius([node.connection_count for node in nodes], config.min_radius, config.max_radius)
    for node, radius in zip(nodes, radii):
        node.radius = radius
        node.color = get_node_color(node, config, dataset_colors)

    stats = _build_stats(ctx, potential, incident_stats)
    logging.info(
        "Multi-dataset graph: %d nodes, %d edges, %d bridge nodes (%d%% fewer nodes than potential)",
        stats.total_nodes,
        stats.total_edges,
        stats.bridge_nodes,
        stats.rendering_stats.node_reduction,
    )
    return MultiDatasetGraph(nodes=nodes, edges=ctx.edges, stats=stats)
