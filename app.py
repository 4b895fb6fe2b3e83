#!/usr/bin/env python
"""
Incident Graph Explorer - Streamlit entrypoint.

Run with ``streamlit run app.py``.
"""

from incident_graph.ui import render_app


def main() -> None:
    render_app()


if __name__ == "__main__":
    main()
