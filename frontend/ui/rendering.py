"""Shared rendering helpers for Streamlit pages."""

from dataclasses import dataclass
from typing import Optional, Sequence

import pandas as pd
import streamlit as st
from streamlit.delta_generator import DeltaGenerator


@dataclass(frozen=True)
class MetricSpec:
    """Specification for a Streamlit metric card."""

    label: str
    value: str
    help: Optional[str] = None
    caption: Optional[str] = None


def render_metrics(columns: Sequence[DeltaGenerator], specs: Sequence[MetricSpec]) -> None:
    """Render metric cards from specs to keep layout and captions consistent."""

    for col, spec in zip(columns, specs):
        col.metric(spec.label, spec.value, help=spec.help)
        if spec.caption:
            col.caption(spec.caption)


def render_text_table(df: pd.DataFrame, *, caption: Optional[str] = None) -> None:
    """Render a pre-formatted (string) table without the index column.

    Values arrive already localized, so no Styler formatting is applied here.
    """

    st.dataframe(df, hide_index=True, use_container_width=True)
    if caption:
        st.caption(caption)


def render_notes(notes: Sequence[str], *, title: str = "Important limitations") -> None:
    """Render limitation notes in a warning box."""

    if not notes:
        return
    st.warning("\n".join([f"**{title}**", ""] + [f"- {note}" for note in notes]))
