"""Streamlit application shell."""

from __future__ import annotations


def render_app() -> None:
    import streamlit as st

    # set_page_config() must run before any other streamlit command
    st.set_page_config(page_title="Incident Graph Explorer", layout="wide")

    from incident_graph.config import APP_FONTS
    from incident_graph.ui.sidebar import init_session_state, render_sidebar
    from incident_graph.ui.tabs import render_tabs

    st.markdown(
        f"""
        <style>
        @import url('https://fonts.googleapis.com/css2?family=Fraunces:opsz,wght@9..144,500;9..144,700&family=IBM+Plex+Sans:wght@400;500;600;700&family=IBM+Plex+Mono:wght@400;500&display=swap');
        :root {{
            --bg-0: #FAFAF8;
            --ink-1: #0F1419;
            --ink-2: #3A4755;
            --accent-1: #C85A3A;
            --panel-border: rgba(30, 42, 53, 0.1);
            --font-display: '{APP_FONTS["display"]}', serif;
            --font-body: '{APP_FONTS["body"]}', sans-serif;
            --font-mono: '{APP_FONTS["mono"]}', monospace;
        }}
        html, body, [class*="css"] {{
            font-family: var(--font-body);
            color: var(--ink-1);
        }}
        .stApp {{
            background: linear-gradient(135deg, #FAFAF8 0%, #F0EAE0 50%, #EDE6DD 100%);
        }}
        h1, h2, h3 {{
            font-family: var(--font-display);
            letter-spacing: -0.3px;
        }}
        code, pre {{
            font-family: var(--font-mono);
        }}
        .hero {{
            background: rgba(255, 255, 255, 0.95);
            border: 1px solid var(--panel-border);
            border-radius: 28px;
            padding: 2rem 2.4rem;
            margin-bottom: 1.5rem;
        }}
        .hero-title {{
            font-family: var(--font-display);
            font-size: 2.2rem;
            font-weight: 700;
        }}
        .hero-subtitle {{
            color: var(--ink-2);
            margin-top: 0.4rem;
        }}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.markdown(
        """
        <div class="hero">
            <div class="hero-title">Incident Graph Explorer</div>
            <div class="hero-subtitle">
                Normalize JSON-LD incident datasets, merge them on shared entities, and explore the
                best-connected incidents as one cross-referenced network.
            </div>
        </div>
        """,
        unsafe_allow_html=True,
    )

    with st.expander("Quick Start"):
        st.write("1. Upload one JSON/JSON-LD file per dataset in the **Datasets** section on the sidebar.")
        st.write("2. Toggle datasets on or off.")
        st.write("3. Pick how many incidents per dataset and how many hops to show.")
        st.write("4. Grey nodes appear in more than one dataset.")

    init_session_state()
    render_tabs(render_sidebar())
