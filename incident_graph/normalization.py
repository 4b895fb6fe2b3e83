"""Flatten nested JSON-LD documents into a deduplicated entity store with reverse relationships."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from incident_graph.models import Entity, EntityReference, ExtractedEntities, NormalizationResult
from incident_graph.utils import (
    entity_id,
    entity_type,
    has_identity,
    is_identity_key,
    iter_references,
    iter_relationships,
    make_reference,
    profile_time,
    reverse_key,
)

EntityKey = Tuple[str, str]


@dataclass
class _WalkContext:
    """Mutable state of one normalization pass; never shared between calls."""

    extracted: ExtractedEntities = field(default_factory=dict)
    visited: Dict[str, Entity] = field(default_factory=dict)
    claimed: Set[Tuple[str, str]] = field(default_factory=set)


def _extract_entity(data: Dict[str, Any], ctx: _WalkContext) -> EntityReference:
    identifier = entity_id(data)
    type_name = entity_type(data)
    full = ctx.visited.get(identifier)
    is_new = full is None
    if is_new:
        full = {"type": type_name, "id": identifier}
        ctx.visited[identifier] = full
    else:
        logging.debug("Entity %s already extracted; returning reference", identifier)

    # A later occurrence only fills properties no earlier occurrence has claimed,
    # so a bare {"@id", "@type"} stub seen first does not hide the full object.
    for key, value in data.items():
        if key in ("id", "type") and data.get(f"@{key}") not in (None, "", []):
            logging.debug("Property '%s' of %s collides with @%s and is dropped", key, identifier, key)
            continue
        if key.startswith("@") or is_identity_key(key):
            continue
        claim = (identifier, key)
        if claim in ctx.claimed:
            continue
        ctx.claimed.add(claim)
        full[key] = _normalize_property(value, ctx)

    if is_new:
        ctx.extracted.setdefault(type_name, []).append(full)
    return make_reference(type_name, identifier)


def _normalize_property(value: Any, ctx: _WalkContext) -> Any:
    if isinstance(value, list):
        return [_normalize_item(item, ctx) for item in value]
    return _normalize_item(value, ctx)


def _normalize_item(value: Any, ctx: _WalkContext) -> Any:
    if isinstance(value, dict) and has_identity(value):
        return _extract_entity(value, ctx)
    # Plain containers stay as they are, but entities nested inside them are still extracted.
    _discover(value, ctx)
    return value


def _discover(value: Any, ctx: _WalkContext) -> None:
    if isinstance(value, list):
        for item in value:
            _discover(item, ctx)
    elif isinstance(value, dict):
        if has_identity(value):
            _extract_entity(value, ctx)
            return
        for key, item in value.items():
            if key == "@context":
                continue
            _discover(item, ctx)


def index_entities(extracted: ExtractedEntities) -> Dict[EntityKey, Entity]:
    index: Dict[EntityKey, Entity] = {}
    for entities in extracted.values():
        for entity in entities:
            index.setdefault((entity["type"], entity["id"]), entity)
    return index


def create_reverse_relationships(extracted: ExtractedEntities) -> None:
    """
    Add ``reverse_<relationship>`` arrays to every entity that is the target of
    a forward relationship.

    Runs once over the complete collection. References to entities that were
    never extracted are skipped. A source is recorded at most once per target
    and relationship.
    """
    index = index_entities(extracted)
    recorded: Set[Tuple[EntityKey, str, EntityKey]] = set()
    added = 0
    skipped = 0

    for entities in extracted.values():
        for source in entities:
            source_key = (source["type"], source["id"])
            # Snapshot: a self reference adds a key to this very entity.
            for relationship, value in list(iter_relationships(source)):
                for ref in iter_references(value):
                    target_key = (ref["type"], ref["id"])
                    target = index.get(target_key)
                    if target is None:
                        skipped += 1
                        logging.debug("Skipping dangling reference %s -[%s]-> %s", source["id"], relationship, ref["id"])
                        continue
                    marker = (target_key, relationship, source_key)
                    if marker in recorded:
                        continue
                    recorded.add(marker)
                    target.setdefault(reverse_key(relationship), []).append(make_reference(*source_key))
                    added += 1

    logging.debug("Reverse relationships: %d added, %d dangling references skipped", added, skipped)


def _normalize_root(item: Any, ctx: _WalkContext) -> Any:
    if isinstance(item, dict) and has_identity(item):
        return _extract_entity(item, ctx)
    _discover(item, ctx)
    return item


@profile_time
def normalize_entities(data: Any) -> NormalizationResult:
    """
    Normalize one JSON-LD document or a list of them.

    Returns the root with every top-level entity reduced to a ``{"type", "id"}``
    reference, plus every entity found anywhere in the input grouped by type.
    Each id is extracted once; later encounters yield a reference and can only
    add properties the extracted entity does not have yet.
    """
    if not data or not isinstance(data, (dict, list)):
        return NormalizationResult(normalized=None, extracted={})

    ctx = _WalkContext()
    if isinstance(data, list):
        normalized: Any = [_normalize_root(item, ctx) for item in data]
    else:
        normalized = _normalize_root(data, ctx)

    create_reverse_relationships(ctx.extracted)

    logging.info(
        "Normalized %d entities across %d types",
        sum(len(entities) for entities in ctx.extracted.values()),
        len(ctx.extracted),
    )
    return NormalizationResult(normalized=normalized, extracted=ctx.extracted)


def find_entity(extracted: ExtractedEntities, type_name: str, identifier: str) -> Optional[Entity]:
    for entity in extracted.get(type_name, []):
        if entity.get("id") == identifier:
            return entity
    return None


def resolve_references(extracted: ExtractedEntities, entity: Entity, relationship: str) -> List[Entity]:
    """Resolve the references stored under ``relationship`` (forward or ``reverse_*``)."""
    resolved: List[Entity] = []
    for ref in iter_references(entity.get(relationship)):
        target = find_entity(extracted, ref["type"], ref["id"])
        if target is not None:
            resolved.append(target)
    return resolved


def count_entities(extracted: ExtractedEntities) -> Dict[str, int]:
    return {type_name: len(entities) for type_name, entities in extracted.items()}
