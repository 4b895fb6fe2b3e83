"""Sidebar logic and session state initialization."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple

import streamlit as st

from incident_graph.config import (
    DEPTH_CHOICES,
    INCIDENT_LIMIT_CHOICES,
    UNBOUNDED,
    MultiDatasetConfig,
)
from incident_graph.models import DatasetConfig, NormalizationResult
from incident_graph.normalization import normalize_entities


@dataclass
class SidebarState:
    datasets: List[DatasetConfig]
    enabled: List[str]
    config: MultiDatasetConfig
    show_labels: bool


_SLUG_RE = re.compile(r"[^a-z0-9]+")


def _dataset_id(filename: str, taken: Dict[str, object]) -> str:
    base = _SLUG_RE.sub("-", Path(filename).stem.lower()).strip("-") or "dataset"
    candidate = base
    suffix = 2
    while candidate in taken:
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate


def _bound_label(value: int) -> str:
    return "Unbounded" if value == UNBOUNDED else str(value)


def init_session_state() -> None:
    if "upload_signature" not in st.session_state:
        st.session_state.upload_signature = None
    if "normalized_datasets" not in st.session_state:
        st.session_state.normalized_datasets = {}
    if "dataset_names" not in st.session_state:
        st.session_state.dataset_names = {}
    if "upload_errors" not in st.session_state:
        st.session_state.upload_errors = []
    if "show_labels" not in st.session_state:
        st.session_state.show_labels = True


def load_uploaded_datasets(uploaded_files) -> Tuple[Dict[str, NormalizationResult], Dict[str, str], List[str]]:
    """Normalize every uploaded file as its own dataset; unreadable files become error messages."""
    normalized: Dict[str, NormalizationResult] = {}
    names: Dict[str, str] = {}
    errors: List[str] = []
    for file in uploaded_files:
        try:
            payload = json.loads(file.read().decode("utf-8"))
        except json.JSONDecodeError as exc:
            errors.append(f"Invalid JSON in file {file.name}: {exc}")
            continue
        except UnicodeDecodeError as exc:
            errors.append(f"Error reading file {file.name}: {exc}")
            continue
        result = normalize_entities(payload)
        if not result.extracted:
            errors.append(f"No entities found in {file.name}, skipping")
            continue
        dataset_id = _dataset_id(file.name, normalized)
        normalized[dataset_id] = result
        names[dataset_id] = file.name
    for error in errors:
        logging.warning(error)
    return normalized, names, errors


def render_sidebar() -> SidebarState:
    with st.sidebar.expander("Datasets", expanded=True):
        uploaded_files = st.file_uploader(
            "Upload JSON/JSON-LD Files",
            type=["json", "jsonld"],
            accept_multiple_files=True,
            help="Each file is normalized as a separate dataset",
        )
        if not uploaded_files and st.session_state.upload_signature is not None:
            st.session_state.upload_signature = None
            st.session_state.normalized_datasets = {}
            st.session_state.dataset_names = {}
            st.session_state.upload_errors = []
        if uploaded_files:
            upload_signature = [(file.name, file.size) for file in uploaded_files]
            if st.session_state.upload_signature != upload_signature:
                st.session_state.upload_signature = upload_signature
                normalized, names, errors = load_uploaded_datasets(uploaded_files)
                st.session_state.normalized_datasets = normalized
                st.session_state.dataset_names = names
                st.session_state.upload_errors = errors
        for error in st.session_state.upload_errors:
            st.error(error)

        enabled: List[str] = []
        for dataset_id, name in st.session_state.dataset_names.items():
            if st.toggle(f"{dataset_id} ({name})", value=True, key=f"enabled_{dataset_id}"):
                enabled.append(dataset_id)

    with st.sidebar.expander("Graph Bounds", expanded=True):
        defaults = MultiDatasetConfig()
        max_incidents = st.selectbox(
            "Max incidents per dataset",
            INCIDENT_LIMIT_CHOICES,
            index=INCIDENT_LIMIT_CHOICES.index(defaults.max_incidents_per_dataset),
            format_func=_bound_label,
            help="Best-connected incidents used as expansion seeds",
        )
        max_depth = st.selectbox(
            "Max depth",
            DEPTH_CHOICES,
            index=DEPTH_CHOICES.index(defaults.max_depth),
            format_func=_bound_label,
            help="Hops followed from each seed incident",
        )
        show_labels = st.checkbox("Show Node Labels", key="show_labels")

    datasets = [
        DatasetConfig(id=dataset_id, data=result, name=st.session_state.dataset_names.get(dataset_id, dataset_id))
        for dataset_id, result in st.session_state.normalized_datasets.items()
    ]
    return SidebarState(
        datasets=datasets,
        enabled=enabled,
        config=defaults.with_bounds(max_incidents, max_depth),
        show_labels=show_labels,
    )
