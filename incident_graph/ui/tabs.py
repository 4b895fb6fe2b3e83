"""Logic for specific tabs (Graph, Statistics, Entities, etc.)."""

from __future__ import annotations

import json
import logging
from typing import Dict, List, Optional

import pandas as pd
import streamlit as st
import streamlit.components.v1 as components

from incident_graph.config import GRAPH_CARD_HEIGHT
from incident_graph.export import extracted_to_rdf
from incident_graph.graph import process_graph_data
from incident_graph.merge import get_merge_statistics, merge_normalized_datasets
from incident_graph.models import DatasetConfig, MultiDatasetGraph
from incident_graph.multi_dataset import process_multi_dataset_graph
from incident_graph.normalization import count_entities
from incident_graph.ui.sidebar import SidebarState
from incident_graph.utils import serialize_graph
from incident_graph.visualizer import build_graph


def _enabled_datasets(state: SidebarState) -> List[DatasetConfig]:
    return [dataset for dataset in state.datasets if dataset.id in state.enabled]


def _render_network(net) -> None:
    try:
        components.html(net.generate_html(), height=GRAPH_CARD_HEIGHT, scrolling=False)
    except Exception as exc:
        logging.error("Graph generation failed: %s", exc)
        st.error(f"Graph generation failed: {exc}")


def _render_multi_dataset_stats(graph: MultiDatasetGraph) -> None:
    stats = graph.stats
    incident_df = pd.DataFrame(
        {
            "Available": stats.incident_stats.total_available,
            "Displayed": stats.incident_stats.displayed,
            "Limited": stats.incident_stats.limited,
        }
    )
    incident_df.index.name = "Dataset"
    st.subheader("Incidents")
    st.dataframe(incident_df, use_container_width=True)

    rendering = stats.rendering_stats
    st.subheader("Rendering")
    rendering_df = pd.DataFrame(
        [
            ["Nodes", rendering.actual_nodes, rendering.potential_nodes, rendering.node_reduction],
            ["Edges", rendering.actual_edges, rendering.potential_edges, rendering.edge_reduction],
        ],
        columns=["Element", "Rendered", "Potential", "Reduction %"],
    )
    st.dataframe(rendering_df, use_container_width=True, hide_index=True)

    left, right = st.columns(2)
    with left:
        st.subheader("Nodes by Dataset")
        st.dataframe(
            pd.DataFrame(list(stats.nodes_by_dataset.items()), columns=["Dataset", "Nodes"]),
            use_container_width=True,
            hide_index=True,
        )
    with right:
        st.subheader("Nodes by Type")
        st.dataframe(
            pd.DataFrame(list(stats.nodes_by_type.items()), columns=["Type", "Nodes"]).sort_values(
                "Nodes", ascending=False
            ),
            use_container_width=True,
            hide_index=True,
        )


def render_multi_dataset_tab(state: SidebarState) -> Optional[MultiDatasetGraph]:
    st.header("Multi-Dataset Graph")
    if not _enabled_datasets(state):
        st.info("No datasets enabled. Upload JSON-LD files in the sidebar.")
        return None

    with st.spinner("Building multi-dataset graph..."):
        graph = process_multi_dataset_graph(state.datasets, state.config, enabled=state.enabled)
    stats = graph.stats
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Nodes", stats.total_nodes)
    m2.metric("Edges", stats.total_edges)
    m3.metric("Bridge Nodes", stats.bridge_nodes)
    m4.metric("Cross-Dataset Edges", stats.cross_dataset_edges)
    if any(stats.incident_stats.limited.values()):
        st.info(
            f"Showing {stats.rendering_stats.actual_nodes} of roughly {stats.rendering_stats.potential_nodes} "
            f"nodes ({stats.rendering_stats.node_reduction}% reduction). Raise the bounds in the sidebar to see more."
        )

    colors: Dict[str, str] = {dataset.id: dataset.color for dataset in state.datasets if dataset.color}
    net = build_graph(graph, show_labels=state.show_labels, dataset_colors={**state.config.dataset_colors, **colors})
    _render_network(net)

    with st.expander("Statistics", expanded=False):
        _render_multi_dataset_stats(graph)

    st.download_button(
        "Download Graph as JSON",
        data=json.dumps(serialize_graph(graph), indent=2, default=str).encode("utf-8"),
        file_name="multi_dataset_graph.json",
        mime="application/json",
    )
    return graph


def render_single_dataset_tab(state: SidebarState) -> None:
    st.header("Single Dataset")
    enabled = _enabled_datasets(state)
    if not enabled:
        st.info("No datasets enabled.")
        return
    chosen = st.selectbox("Dataset", [dataset.id for dataset in enabled], key="single_dataset")
    dataset = next(dataset for dataset in enabled if dataset.id == chosen)

    graph = process_graph_data(dataset.data)
    if not graph.nodes:
        st.info("No entities of the configured semantic types in this dataset.")
        return
    m1, m2 = st.columns(2)
    m1.metric("Nodes", len(graph.nodes))
    m2.metric("Edges", len(graph.edges))
    _render_network(build_graph(graph, show_labels=state.show_labels))

    node_df = pd.DataFrame(
        [{"ID": node.id, "Label": node.label, "Type": node.type, "Degree": node.degree} for node in graph.nodes]
    ).sort_values("Degree", ascending=False)
    st.dataframe(node_df, use_container_width=True, hide_index=True)


def render_entities_tab(state: SidebarState) -> None:
    st.header("Merged Entities")
    enabled_ids = [dataset.id for dataset in _enabled_datasets(state)]
    if not enabled_ids:
        st.info("No datasets enabled.")
        return
    normalized = {dataset.id: dataset.data for dataset in state.datasets}

    merge_stats = get_merge_statistics(enabled_ids, normalized)
    m1, m2 = st.columns(2)
    m1.metric("Distinct Entities", merge_stats.total_entities)
    m2.metric("Shared Entities", merge_stats.shared_entities)
    st.dataframe(
        pd.DataFrame(list(merge_stats.unique_by_dataset.items()), columns=["Dataset", "Unique Entities"]),
        use_container_width=True,
        hide_index=True,
    )

    merged = merge_normalized_datasets(enabled_ids, normalized)
    st.subheader("Entities by Type")
    st.dataframe(
        pd.DataFrame(list(count_entities(merged).items()), columns=["Type", "Count"]).sort_values(
            "Count", ascending=False
        ),
        use_container_width=True,
        hide_index=True,
    )

    col1, col2 = st.columns(2)
    col1.download_button(
        "Download Entities as JSON",
        data=json.dumps(merged, indent=2, default=str).encode("utf-8"),
        file_name="merged_entities.json",
        mime="application/json",
    )
    try:
        turtle = extracted_to_rdf(merged).serialize(format="turtle")
    except Exception as exc:
        st.error(f"Error converting entities to RDF: {exc}")
    else:
        col2.download_button("Download Entities as Turtle", data=turtle, file_name="merged_entities.ttl")


def render_tabs(state: SidebarState) -> None:
    tabs = st.tabs(["Multi-Dataset Graph", "Single Dataset", "Merged Entities", "About"])

    with tabs[0]:
        render_multi_dataset_tab(state)

    with tabs[1]:
        render_single_dataset_tab(state)

    with tabs[2]:
        render_entities_tab(state)

    with tabs[3]:
        st.header("About")
        st.markdown(
            """
            Each uploaded file is flattened into typed entities with `reverse_*` back-links.
            The multi-dataset view seeds every dataset with its best-connected incidents,
            follows links up to the configured depth and fuses entities that share an id
            into grey bridge nodes.
            """
        )
