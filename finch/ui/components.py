"""
Shared formatting helpers and reusable rendering components.
"""

from typing import Any

import pandas as pd
import streamlit as st


# ---------------------------------------------------------------------------
# Data-processing helpers (pure functions – no Streamlit calls)
# ---------------------------------------------------------------------------


def money(value: Any) -> str:
    """
    Format an amount as whole Indian rupees.

    Args:
        value: Number-like amount or ``None``.

    Returns:
        Formatted amount, or ``—`` when missing or not numeric.
    """
    if value is None:
        return "—"
    try:
        amount = round(float(value))
    except (TypeError, ValueError):
        return "—"
    sign = "-" if amount < 0 else ""
    digits = str(abs(amount))
    # Indian grouping: last three digits, then pairs.
    head, tail = digits[:-3], digits[-3:]
    groups: list[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    grouped = ",".join(groups + [tail]) if groups else tail
    return f"{sign}₹{grouped}"


def to_int(value: Any, default: int = 0) -> int:
    """
    Parse a form value as an integer, falling back to ``default``.

    Args:
        value: Raw input.
        default: Value used for blank or invalid input.

    Returns:
        Parsed integer.
    """
    try:
        return int(str(value).strip() or default)
    except ValueError:
        return default


def to_float(value: Any, default: float = 0.0) -> float:
    """Parse a form value as a float, falling back to ``default``."""
    try:
        return float(str(value).strip() or default)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def render_rows_table(rows: list[dict[str, Any]], empty: str = "No data") -> None:
    """
    Render server-supplied rows as a table, or a placeholder when empty.

    Args:
        rows: Row dicts; the first row decides the columns.
        empty: Placeholder text.
    """
    if not rows:
        st.caption(empty)
        return
    cols = list(rows[0].keys())
    st.dataframe(
        pd.DataFrame(rows, columns=cols), hide_index=True, width="stretch"
    )
