from __future__ import annotations

from typing import Any, Dict, List

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

PRIMARY = "#2563eb"
ACCENT = "#10b981"


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Turn an Altair chart into a plain Vega-Lite dict for JSON responses and st.vega_lite_chart."""
    return chart.properties(width="container").to_dict()


def bar_chart(
    data: List[Dict[str, Any]],
    x: str,
    y: str,
    *,
    x_title: str,
    y_title: str,
    color: str = PRIMARY,
) -> Dict[str, Any]:
    df = pd.DataFrame(data, columns=[x, y])
    chart = (
        alt.Chart(df)
        .mark_bar(cornerRadiusTopLeft=8, cornerRadiusTopRight=8, color=color)
        .encode(
            x=alt.X(f"{x}:N", title=x_title, sort=None, axis=alt.Axis(labelAngle=0, grid=False)),
            y=alt.Y(f"{y}:Q", title=y_title, axis=alt.Axis(gridDash=[3, 3], domain=False, ticks=False)),
            tooltip=[alt.Tooltip(f"{x}:N", title=x_title), alt.Tooltip(f"{y}:Q", title=y_title, format=",.0f")],
        )
    )
    return to_vega_spec(chart)


def line_chart(data: List[Dict[str, Any]], x: str, y: str, *, x_title: str, y_title: str) -> Dict[str, Any]:
    df = pd.DataFrame(data, columns=[x, y])
    chart = (
        alt.Chart(df)
        .mark_line(point={"filled": True}, color=ACCENT)
        .encode(
            x=alt.X(f"{x}:N", title=x_title, sort=None, axis=alt.Axis(grid=False)),
            y=alt.Y(f"{y}:Q", title=y_title, axis=alt.Axis(format="d", gridDash=[3, 3], domain=False, ticks=False)),
            tooltip=[alt.Tooltip(f"{x}:N", title=x_title), alt.Tooltip(f"{y}:Q", title=y_title)],
        )
    )
    return to_vega_spec(chart)


def donut_chart(data: List[Dict[str, Any]], category: str, value: str, *, title: str) -> Dict[str, Any]:
    df = pd.DataFrame(data, columns=[category, value])
    chart = (
        alt.Chart(df)
        .mark_arc(innerRadius=60)
        .encode(
            theta=alt.Theta(f"{value}:Q"),
            color=alt.Color(f"{category}:N", title=title),
            tooltip=[alt.Tooltip(f"{category}:N", title=title), alt.Tooltip(f"{value}:Q", title="Count")],
        )
    )
    return to_vega_spec(chart)
