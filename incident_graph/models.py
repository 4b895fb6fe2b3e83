"""Data models for normalized entities and projected graphs."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TypedDict, Union


class EntityReference(TypedDict):
    type: str
    id: str


Entity = Dict[str, Any]
ExtractedEntities = Dict[str, List[Entity]]


@dataclass
class NormalizationResult:
    normalized: Union[EntityReference, List[Any], Any, None]
    extracted: ExtractedEntities = field(default_factory=dict)


@dataclass
class GraphNode:
    id: str
    label: str
    type: str
    value: Any = None
    degree: int = 0
    radius: float = 0.0
    x: Optional[float] = None
    y: Optional[float] = None


@dataclass
class GraphEdge:
    source: str
    target: str
    label: str
    type: str


@dataclass
class GraphData:
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)


@dataclass
class DatasetConfig:
    id: str
    data: NormalizationResult
    name: str = ""
    color: Optional[str] = None


@dataclass
class MultiDatasetGraphNode:
    id: str
    label: str
    type: str
    dataset: str
    datasets: Optional[List[str]] = None
    value: Any = None
    connection_count: int = 0
    radius: float = 0.0
    color: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None

    @property
    def is_bridge(self) -> bool:
        return self.datasets is not None and len(self.datasets) > 1

    @property
    def memberships(self) -> List[str]:
        return list(self.datasets) if self.datasets else [self.dataset]


@dataclass
class MultiDatasetGraphEdge:
    source: str
    target: str
    label: str
    type: str
    dataset: str


@dataclass
class IncidentStats:
    total_available: Dict[str, int] = field(default_factory=dict)
    displayed: Dict[str, int] = field(default_factory=dict)
    limited: Dict[str, bool] = field(default_factory=dict)


@dataclass
class RenderingStats:
    actual_nodes: int = 0
    potential_nodes: int = 0
    actual_edges: int = 0
    potential_edges: int = 0
    node_reduction: int = 0
    edge_reduction: int = 0


@dataclass
class MultiDatasetStats:
    total_nodes: int = 0
    total_edges: int = 0
    bridge_nodes: int = 0
    cross_dataset_links: int = 0
    cross_dataset_edges: int = 0
    nodes_by_dataset: Dict[str, int] = field(default_factory=dict)
    nodes_by_type: Dict[str, int] = field(default_factory=dict)
    incident_stats: IncidentStats = field(default_factory=IncidentStats)
    rendering_stats: RenderingStats = field(default_factory=RenderingStats)


@dataclass
class MultiDatasetGraph:
    nodes: List[MultiDatasetGraphNode] = field(default_factory=list)
    edges: List[MultiDatasetGraphEdge] = field(default_factory=list)
    stats: MultiDatasetStats = field(default_factory=MultiDatasetStats)


@dataclass
class MergeStatistics:
    total_entities: int = 0
    shared_entities: int = 0
    unique_by_dataset: Dict[str, int] = field(default_factory=dict)
