"""Reusable layout helpers for Streamlit pages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import streamlit as st
from streamlit.delta_generator import DeltaGenerator

from services.valuation_core import ValuationConfig
from utils.ui_state import EVALUATION_COUNT_KEY, get_latest_valuation

LayoutRenderer = Callable[[ValuationConfig], None]


@dataclass(frozen=True)
class _NavigationLink:
    label: str
    target: str
    help_text: Optional[str] = None


_NAV_LINKS = (
    _NavigationLink("Home (Guide)", "pages/00_Home.py"),
    _NavigationLink("Calculator", "app.py", "Parameters, results and report download."),
    _NavigationLink("Sensitivity", "pages/01_Sensitivity.py", "Sweeps and tornado chart for the latest inputs."),
)


def _render_navigation_block(container: DeltaGenerator) -> None:
    container.markdown("#### Navigate")
    for link in _NAV_LINKS:
        container.page_link(link.target, label=link.label, help=link.help_text)


def _render_status_block(container: DeltaGenerator, config: ValuationConfig) -> None:
    """Show the active model variant and whether a valuation is cached for the session."""

    params, _ = get_latest_valuation()
    evaluations = st.session_state.get(EVALUATION_COUNT_KEY, 0)

    container.markdown("#### Session status")
    container.caption(f"Flexibility model: {config.flexibility_model.kind}")
    container.caption(f"Estimate sizing basis: {config.energy_basis}")
    container.caption(f"Fee rate: {config.fee_rate:.0%}")
    if params is None:
        container.caption("No valuation yet in this session.")
    else:
        container.caption(
            f"Latest valuation: {params.battery_power_kw:,.0f} kW battery ({evaluations} evaluations this session)."
        )


def init_page_layout(
    *,
    page_title: str,
    main_title: str,
    description: Optional[str] = None,
) -> LayoutRenderer:
    """Initialize the page layout with shared navigation and status blocks.

    ``st.set_page_config`` runs immediately and a header slot is reserved at the
    top of the page. The returned renderer fills that slot once the page knows its
    configuration, so status reflects the current session.
    """

    st.set_page_config(page_title=page_title, layout="wide")
    header_container = st.container()

    def _render(config: ValuationConfig) -> None:
        with header_container:
            st.title(main_title)
            if description:
                st.caption(description)

            nav_col, status_col = st.columns([3, 2])
            _render_navigation_block(nav_col)
            _render_status_block(status_col, config)

        st.divider()

    return _render
