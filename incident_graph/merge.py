"""Combine independently normalized datasets by matching entities on type + id."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Set, Union

from incident_graph.models import Entity, ExtractedEntities, MergeStatistics, NormalizationResult
from incident_graph.utils import has_identity, is_identity_key, is_reverse_key, profile_time

DatasetSource = Union[NormalizationResult, ExtractedEntities]


def _collection(dataset: DatasetSource) -> ExtractedEntities:
    if isinstance(dataset, NormalizationResult):
        return dataset.extracted
    return dataset


def _entity_key(entity: Entity) -> str:
    return f"{entity['type']}::{entity['id']}"


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return list(value)
    return [value]


def merge_entity_properties(existing: Entity, incoming: Entity) -> Entity:
    """
    Merge ``incoming`` over ``existing`` into a new mapping.

    The value shape decides the rule: lists (including ``reverse_*`` arrays)
    are concatenated, plain objects are shallow-merged, anything else
    (scalars and entity references) is overwritten by ``incoming``.
    """
    merged = dict(existing)
    for key, value in incoming.items():
        if is_identity_key(key):
            continue
        if is_reverse_key(key) or isinstance(value, list):
            merged[key] = _as_list(existing.get(key)) + _as_list(value)
        elif isinstance(value, dict) and not has_identity(value):
            current = existing.get(key)
            merged[key] = {**(current if isinstance(current, dict) else {}), **value}
        else:
            merged[key] = value
    return merged


@profile_time
def merge_normalized_datasets(
    dataset_ids: List[str],
    normalized_datasets: Mapping[str, DatasetSource],
) -> ExtractedEntities:
    """
    Merge the entity collections of ``dataset_ids`` in order; later datasets win
    on scalar conflicts.

    A single dataset id returns that dataset's collection itself, not a copy.
    """
    if not dataset_ids:
        return {}
    if len(dataset_ids) == 1:
        dataset = normalized_datasets.get(dataset_ids[0])
        return _collection(dataset) if dataset is not None else {}

    entity_map: Dict[str, Entity] = {}
    for dataset_id in dataset_ids:
        dataset = normalized_datasets.get(dataset_id)
        if dataset is None:
            logging.warning("Dataset '%s' not found; skipping in merge", dataset_id)
            continue
        for entities in _collection(dataset).values():
            for entity in entities:
                key = _entity_key(entity)
                existing = entity_map.get(key)
                if existing is None:
                    entity_map[key] = dict(entity)
                else:
                    entity_map[key] = merge_entity_properties(existing, entity)

    merged: ExtractedEntities = {}
    for entity in entity_map.values():
        merged.setdefault(entity["type"], []).append(entity)

    logging.info("Merged %d datasets into %d entities", len(dataset_ids), len(entity_map))
    return merged


def get_merge_statistics(
    dataset_ids: List[str],
    normalized_datasets: Mapping[str, DatasetSource],
) -> MergeStatistics:
    keys_by_dataset: Dict[str, Set[str]] = {}
    for dataset_id in dataset_ids:
        dataset = normalized_datasets.get(dataset_id)
        if dataset is None:
            continue
        keys_by_dataset[dataset_id] = {
            _entity_key(entity) for entities in _collection(dataset).values() for entity in entities
        }

    frequency: Dict[str, int] = {}
    for keys in keys_by_dataset.values():
        for key in keys:
            frequency[key] = frequency.get(key, 0) + 1

    unique_by_dataset = {
        dataset_id: sum(1 for key in keys if frequency[key] == 1) for dataset_id, keys in keys_by_dataset.items()
    }
    return MergeStatistics(
        total_entities=len(frequency),
        shared_entities=sum(1 for count in frequency.values() if count > 1),
        unique_by_dataset=unique_by_dataset,
    )
