"""Reference defaults and the immutable configuration objects handed to the projectors."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from rdflib import Namespace

UNBOUNDED = -1

EX = Namespace("https://example.org/incident-graph/")

NAMESPACE_PREFIXES: Dict[str, str] = {
    "https://example.org/core#": "core",
    "https://example.org/aiid#": "aiid",
    "https://schema.org/": "schema",
    "http://www.w3.org/2001/XMLSchema#": "xsd",
}

SEMANTIC_TYPES: Tuple[str, ...] = (
    "aiid:Incident",
    "aiid:Report",
    "core:Organization",
    "core:Person",
)

NODE_TYPE_COLORS: Dict[str, str] = {
    "aiid:Incident": "#ef4444",
    "aiid:Report": "#f59e0b",
    "core:Organization": "#3b82f6",
    "core:Person": "#10b981",
    "unknown": "#8b5cf6",
}

DATASET_COLORS: Dict[str, str] = {
    "aiid": "#ef4444",
    "oecd": "#3b82f6",
    "ic3": "#10b981",
    "tesla": "#f59e0b",
}

TYPE_COLORS: Dict[str, str] = {
    "core:Organization": "#8b5cf6",
    "core:Person": "#ec4899",
    "core:Country": "#06b6d4",
}

BRIDGE_COLOR = "#6b7280"
FALLBACK_COLOR = "#94a3b8"

CONFIG: Dict[str, Any] = {
    "NODE_SIZE": {"MIN_RADIUS": 15, "MAX_RADIUS": 120},
    "MULTI_NODE_SIZE": {"MIN_RADIUS": 10, "MAX_RADIUS": 40},
    "MAX_INCIDENTS_PER_DATASET": 15,
    "MAX_DEPTH": 2,
    "INCIDENT_MARKERS": ("Incident", "Death"),
    "POTENTIAL_SAMPLE_SIZE": 50,
    "LABEL_MAX_LENGTH": 50,
    "LABEL_FIELDS": ("title", "name", "incidentId"),
    "SKIP_PREFIXES": ("@", "ui:"),
    "REVERSE_PREFIX": "reverse_",
    "NODE_TYPE_COLORS": NODE_TYPE_COLORS,
    "DEFAULT_NODE_COLOR": NODE_TYPE_COLORS["unknown"],
    "DEFAULT_EDGE_COLOR": "#A9A9A9",
}

GRAPH_CANVAS_HEIGHT = 720
GRAPH_CARD_HEIGHT = 760

APP_FONTS: Dict[str, str] = {
    "display": "Fraunces",
    "body": "IBM Plex Sans",
    "mono": "IBM Plex Mono",
}

# Choices offered by the explorer's bound selectors.
INCIDENT_LIMIT_CHOICES: Tuple[int, ...] = (5, 10, 15, 25, 50, UNBOUNDED)
DEPTH_CHOICES: Tuple[int, ...] = (0, 1, 2, 3, UNBOUNDED)


def _check_bound(name: str, value: Optional[int]) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer or None, got {value!r}")
    if value < UNBOUNDED:
        raise ValueError(f"{name} must be >= {UNBOUNDED} (use {UNBOUNDED} for unbounded), got {value}")


def _check_radius(min_radius: float, max_radius: float) -> None:
    if min_radius < 0 or max_radius < 0:
        raise ValueError(f"Node radii must be non-negative, got min={min_radius} max={max_radius}")
    if min_radius > max_radius:
        raise ValueError(f"min_radius ({min_radius}) must not exceed max_radius ({max_radius})")


def resolve_bound(value: Optional[int]) -> Optional[int]:
    """Map the ``UNBOUNDED`` sentinel to ``None``; ``None`` means no limit."""
    if value is None or value == UNBOUNDED:
        return None
    return value


@dataclass(frozen=True)
class GraphConfig:
    """Settings for the single-dataset projector."""

    semantic_types: Tuple[str, ...] = SEMANTIC_TYPES
    min_radius: float = CONFIG["NODE_SIZE"]["MIN_RADIUS"]
    max_radius: float = CONFIG["NODE_SIZE"]["MAX_RADIUS"]
    namespace_prefixes: Mapping[str, str] = field(default_factory=lambda: dict(NAMESPACE_PREFIXES))
    node_type_colors: Mapping[str, str] = field(default_factory=lambda: dict(NODE_TYPE_COLORS))

    def __post_init__(self) -> None:
        _check_radius(self.min_radius, self.max_radius)
        object.__setattr__(self, "semantic_types", tuple(self.semantic_types))


@dataclass(frozen=True)
class MultiDatasetConfig:
    """Bounds, sizing and color tables for the multi-dataset projector.

    ``max_incidents_per_dataset`` and ``max_depth`` accept ``UNBOUNDED`` (or
    ``None``) to lift the limit.
    """

    max_incidents_per_dataset: Optional[int] = CONFIG["MAX_INCIDENTS_PER_DATASET"]
    max_depth: Optional[int] = CONFIG["MAX_DEPTH"]
    incident_markers: Tuple[str, ...] = CONFIG["INCIDENT_MARKERS"]
    potential_sample_size: int = CONFIG["POTENTIAL_SAMPLE_SIZE"]
    min_radius: float = CONFIG["MULTI_NODE_SIZE"]["MIN_RADIUS"]
    max_radius: float = CONFIG["MULTI_NODE_SIZE"]["MAX_RADIUS"]
    label_max_length: int = CONFIG["LABEL_MAX_LENGTH"]
    dataset_colors: Mapping[str, str] = field(default_factory=lambda: dict(DATASET_COLORS))
    type_colors: Mapping[str, str] = field(default_factory=lambda: dict(TYPE_COLORS))
    bridge_color: str = BRIDGE_COLOR
    fallback_color: str = FALLBACK_COLOR

    def __post_init__(self) -> None:
        _check_bound("max_incidents_per_dataset", self.max_incidents_per_dataset)
        _check_bound("max_depth", self.max_depth)
        _check_radius(self.min_radius, self.max_radius)
        if self.potential_sample_size < 0:
            raise ValueError(f"potential_sample_size must be non-negative, got {self.potential_sample_size}")
        if self.label_max_length <= 0:
            raise ValueError(f"label_max_length must be positive, got {self.label_max_length}")
        object.__setattr__(self, "incident_markers", tuple(self.incident_markers))

    @property
    def incident_limit(self) -> Optional[int]:
        return resolve_bound(self.max_incidents_per_dataset)

    @property
    def depth_limit(self) -> Optional[int]:
        return resolve_bound(self.max_depth)

    def with_bounds(self, max_incidents: Optional[int], max_depth: Optional[int]) -> "MultiDatasetConfig":
        return replace(self, max_incidents_per_dataset=max_incidents, max_depth=max_depth)


def _pick_overrides(cls, section: Mapping[str, Any], section_name: str) -> Dict[str, Any]:
    known = {f.name for f in fields(cls)}
    overrides: Dict[str, Any] = {}
    for key, value in section.items():
        if key not in known:
            logging.warning("Ignoring unknown %s setting '%s'", section_name, key)
            continue
        if isinstance(value, list):
            value = tuple(value)
        overrides[key] = value
    return overrides


def load_config(path: str) -> Tuple[GraphConfig, MultiDatasetConfig]:
    """Read a JSON file with optional ``graph`` and ``multi_dataset`` sections."""
    with open(path, "r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")

    graph_section = payload.get("graph") or {}
    multi_section = payload.get("multi_dataset") or {}
    if not isinstance(graph_section, dict) or not isinstance(multi_section, dict):
        raise ValueError(f"Config sections in {path} must be JSON objects")

    graph_config = GraphConfig(**_pick_overrides(GraphConfig, graph_section, "graph"))
    multi_config = MultiDatasetConfig(**_pick_overrides(MultiDatasetConfig, multi_section, "multi_dataset"))
    logging.info("Loaded graph configuration from %s", path)
    return graph_config, multi_config
