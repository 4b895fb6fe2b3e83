"""Generic helpers (identity, type names, sizing, colors, profiling)."""

from __future__ import annotations

import functools
import logging
import math
import time
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import networkx as nx
import numpy as np

from incident_graph.config import CONFIG, NAMESPACE_PREFIXES
from incident_graph.models import (
    EntityReference,
    GraphData,
    MultiDatasetGraph,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

REVERSE_PREFIX: str = CONFIG["REVERSE_PREFIX"]


def profile_time(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        result = func(*args, **kwargs)
        elapsed = time.time() - start_time
        logging.info("[PROFILE] Function '%s' executed in %.3f seconds", func.__name__, elapsed)
        return result

    return wrapper


# ------------------------------
# Identity helpers
# ------------------------------
def _clean_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def entity_id(data: Any) -> Optional[str]:
    """Return the id of an entity-like mapping (``@id`` preferred over ``id``)."""
    if not isinstance(data, dict):
        return None
    return _clean_str(data.get("@id")) or _clean_str(data.get("id"))


def entity_type(data: Any) -> Optional[str]:
    """Return the primary type; the first element wins when the type is a list."""
    if not isinstance(data, dict):
        return None
    raw = data.get("@type")
    if raw is None or raw == "" or raw == []:
        raw = data.get("type")
    if isinstance(raw, (list, tuple)):
        raw = next((item for item in raw if _clean_str(item)), None)
    return _clean_str(raw)


def has_identity(data: Any) -> bool:
    return entity_id(data) is not None and entity_type(data) is not None


def make_reference(type_name: str, identifier: str) -> EntityReference:
    return {"type": type_name, "id": identifier}


def is_reference(value: Any) -> bool:
    """True only for the bare ``{"type", "id"}`` pointer form."""
    return (
        isinstance(value, dict)
        and len(value) == 2
        and isinstance(value.get("type"), str)
        and isinstance(value.get("id"), str)
    )


def is_identity_key(key: str) -> bool:
    return key in ("@id", "@type", "id", "type")


def is_skipped_key(key: str) -> bool:
    return key.startswith(CONFIG["SKIP_PREFIXES"])


def is_reverse_key(key: str) -> bool:
    return key.startswith(REVERSE_PREFIX)


def reverse_key(relationship: str) -> str:
    return f"{REVERSE_PREFIX}{relationship}"


def iter_references(value: Any) -> Iterator[EntityReference]:
    """Yield every reference held by a property value (single or list)."""
    items = value if isinstance(value, list) else [value]
    for item in items:
        if is_reference(item):
            yield item


def iter_relationships(entity: Mapping[str, Any], include_reverse: bool = False) -> Iterator[Tuple[str, Any]]:
    for key, value in entity.items():
        if is_identity_key(key) or is_skipped_key(key):
            continue
        if not include_reverse and is_reverse_key(key):
            continue
        yield key, value


# ------------------------------
# Type and label names
# ------------------------------
def _guess_prefix(base: str, prefixes: Mapping[str, str]) -> Optional[str]:
    lowered = base.lower()
    for prefix in prefixes.values():
        if prefix and prefix.lower() in lowered:
            return prefix
    return None


def canonical_type(raw: Any, prefixes: Optional[Mapping[str, str]] = None) -> str:
    """
    Fold compact and URI-qualified type names into one ``prefix:Name`` form.

    Known namespaces are replaced by their prefix. Other URIs keep their local
    name and borrow a prefix whose name occurs in the namespace part, if any.
    """
    if isinstance(raw, (list, tuple)):
        raw = raw[0] if raw else None
    if not isinstance(raw, str) or not raw.strip():
        return "unknown"
    text = raw.strip()
    prefixes = NAMESPACE_PREFIXES if prefixes is None else prefixes
    for namespace, prefix in prefixes.items():
        if text.startswith(namespace) and len(text) > len(namespace):
            return f"{prefix}:{text[len(namespace):]}"
    if "#" in text:
        base, local = text.rsplit("#", 1)
    elif "/" in text:
        base, _, local = text.rstrip("/").rpartition("/")
    else:
        return text
    if not local:
        return text
    prefix = _guess_prefix(base, prefixes)
    return f"{prefix}:{local}" if prefix else local


def node_label(data: Mapping[str, Any], node_id: str, max_len: Optional[int] = None) -> str:
    label = None
    for key in CONFIG["LABEL_FIELDS"]:
        candidate = data.get(key)
        if candidate not in (None, ""):
            label = candidate
            break
    if label is None:
        label = node_id.split("/")[-1] or node_id
    text = str(label)
    return text[:max_len] if max_len else text


# ------------------------------
# Sizing
# ------------------------------
def count_degrees(node_ids: Iterable[str], edges: Iterable[Any]) -> Dict[str, int]:
    """Count edges touching each node, both directions; self loops count twice."""
    graph = nx.MultiDiGraph()
    node_ids = list(node_ids)
    graph.add_nodes_from(node_ids)
    graph.add_edges_from((edge.source, edge.target) for edge in edges)
    return {node_id: int(graph.degree(node_id)) for node_id in node_ids}


def interpolate_radius(values: Sequence[float], min_radius: float, max_radius: float) -> List[float]:
    """Linear map from ``[0, max(values)]`` onto ``[min_radius, max_radius]``."""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return []
    max_value = float(arr.max())
    if max_value <= 0:
        return [float(min_radius)] * int(arr.size)
    return (min_radius + (arr / max_value) * (max_radius - min_radius)).tolist()


def reduction_percent(potential: int, actual: int) -> int:
    if potential <= 0:
        return 0
    # Halves round up.
    return int(math.floor((potential - actual) / potential * 100 + 0.5))


# ------------------------------
# Colors
# ------------------------------
def _hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    hex_color = hex_color.lstrip("#")
    if len(hex_color) != 6:
        raise ValueError(f"Invalid hex color: {hex_color}")
    return tuple(int(hex_color[i : i + 2], 16) for i in (0, 2, 4))


def _rgb_to_hex(rgb: Tuple[int, int, int]) -> str:
    return "#{:02X}{:02X}{:02X}".format(*rgb)


def _blend_hex(color: str, target: str, ratio: float) -> str:
    ratio = max(0.0, min(1.0, ratio))
    r1, g1, b1 = _hex_to_rgb(color)
    r2, g2, b2 = _hex_to_rgb(target)
    return _rgb_to_hex(
        (round(r1 + (r2 - r1) * ratio), round(g1 + (g2 - g1) * ratio), round(b1 + (b2 - b1) * ratio))
    )


def _make_node_color(base: str) -> Dict[str, Any]:
    return {
        "background": base,
        "border": _blend_hex(base, "#1F2A37", 0.35),
        "highlight": {
            "background": _blend_hex(base, "#FFFFFF", 0.18),
            "border": _blend_hex(base, "#0F172A", 0.45),
        },
    }


# ------------------------------
# Serialization
# ------------------------------
def _without_none(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


def serialize_graph(graph: Any) -> Dict[str, Any]:
    """Convert a projected graph into plain JSON-compatible dicts."""
    if isinstance(graph, MultiDatasetGraph):
        stats = graph.stats
        return {
            "nodes": [
                _without_none(
                    {
                        "id": n.id,
                        "label": n.label,
                        "type": n.type,
                        "value": n.value,
                        "dataset": n.dataset,
                        "datasets": list(n.datasets) if n.datasets else None,
                        "connection_count": n.connection_count,
                        "radius": n.radius,
                        "color": n.color,
                        "x": n.x,
                        "y": n.y,
                    }
                )
                for n in graph.nodes
            ],
            "edges": [
                {"source": e.source, "target": e.target, "label": e.label, "type": e.type, "dataset": e.dataset}
                for e in graph.edges
            ],
            "stats": {
                "total_nodes": stats.total_nodes,
                "total_edges": stats.total_edges,
                "bridge_nodes": stats.bridge_nodes,
                "cross_dataset_links": stats.cross_dataset_links,
                "cross_dataset_edges": stats.cross_dataset_edges,
                "nodes_by_dataset": dict(stats.nodes_by_dataset),
                "nodes_by_type": dict(stats.nodes_by_type),
                "incident_stats": {
                    "total_available": dict(stats.incident_stats.total_available),
                    "displayed": dict(stats.incident_stats.displayed),
                    "limited": dict(stats.incident_stats.limited),
                },
                "rendering_stats": dict(vars(stats.rendering_stats)),
            },
        }
    if isinstance(graph, GraphData):
        return {
            "nodes": [
                _without_none(
                    {
                        "id": n.id,
                        "label": n.label,
                        "type": n.type,
                        "value": n.value,
                        "degree": n.degree,
                        "radius": n.radius,
                        "x": n.x,
                        "y": n.y,
                    }
                )
                for n in graph.nodes
            ],
            "edges": [
                {"source": e.source, "target": e.target, "label": e.label, "type": e.type} for e in graph.edges
            ],
        }
    raise TypeError(f"Cannot serialize graph of type {type(graph).__name__}")
