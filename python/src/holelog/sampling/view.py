# SPDX-License-Identifier: GPL-3.0-or-later

# Copyright (C) 2026 Darkmine Pty Ltd

# This file is part of holelog.

# holelog is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# holelog is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with holelog.  If not, see <https://www.gnu.org/licenses/>.

"""Graphical hole log (Plotly): sample bands, QC markers and condition/recovery strips.

All plots keep depth increasing downward.
"""

import plotly.graph_objects as go
from plotly.subplots import make_subplots

from holelog.datamodel import (
    BLANK,
    CATEGORY,
    CONDITION_CODE,
    DUPLICATE,
    FROM,
    NOT_SAMPLED,
    PRIMARY,
    RECOVERY_CODE,
    SAMPLE_ID,
    STANDARD,
    TO,
)
from holelog.sampling.data import combined_frame
from holelog.sampling.sequence import sort_samples

CATEGORY_COLORS = {
    PRIMARY: "#0ea5e9",
    NOT_SAMPLED: "#cbd5e1",
    DUPLICATE: "#7c3aed",
    STANDARD: "#d97706",
    BLANK: "#16a34a",
}

CODE_COLORS = {
    "D": "#fde68a",
    "M": "#93c5fd",
    "W": "#1d4ed8",
    "G": "#22c55e",
    "P": "#ef4444",
    "NS": "#94a3b8",
    "N/A": "#f1f5f9",
}


def _band(x0, x1, y0, y1, color):
    return dict(type="rect", xref="x", yref="y", x0=x0, x1=x1, y0=y0, y1=y1, fillcolor=color, line=dict(width=0.5, color="#ffffff"))


def sample_log_shapes(samples, x0=0.0, x1=1.0):
    """Rectangles for primary and not-sampled intervals plus marker points for QC samples."""
    df = sort_samples(samples)
    shapes = []
    markers = []
    for row in df.to_dict("records"):
        category = row[CATEGORY]
        label = row[SAMPLE_ID] or ""
        if category in (PRIMARY, NOT_SAMPLED):
            if row[TO] > row[FROM]:
                shapes.append(_band(x0, x1, row[FROM], row[TO], CATEGORY_COLORS[category]))
            continue
        depth = row[FROM] if category != DUPLICATE else 0.5 * (row[FROM] + row[TO])
        markers.append((depth, category, label))
    return shapes, markers


def plot_sample_log(samples, height=600, width=260):
    """Render a hole's samples as a strip log with QC markers."""
    shapes, markers = sample_log_shapes(samples)
    if not shapes and not markers:
        return go.Figure()

    df = sort_samples(samples)
    bands = df[df[CATEGORY].isin([PRIMARY, NOT_SAMPLED]) & (df[TO] > df[FROM])]
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=[0.5] * len(bands),
        y=0.5 * (bands[FROM] + bands[TO]),
        mode="text",
        text=[sid or "" for sid in bands[SAMPLE_ID]],
        textposition="middle center",
        showlegend=False,
        hoverinfo="text",
    ))
    for category in (DUPLICATE, STANDARD, BLANK):
        points = [m for m in markers if m[1] == category]
        if not points:
            continue
        fig.add_trace(go.Scatter(
            x=[1.05] * len(points),
            y=[p[0] for p in points],
            mode="markers",
            marker=dict(color=CATEGORY_COLORS[category], size=9, symbol="diamond"),
            text=[p[2] for p in points],
            name=category,
            hovertemplate="%{text}<br>depth: %{y}<extra>" + category + "</extra>",
        ))
    fig.update_layout(
        height=height,
        width=width,
        margin=dict(l=40, r=10, t=10, b=40),
        xaxis=dict(range=[0, 1.2], visible=False, fixedrange=True),
        yaxis=dict(title="Depth (m)", autorange="reversed"),
        shapes=shapes,
        showlegend=False,
    )
    return fig


def plot_combined_log(combined, height=600, width=220):
    """Render combined condition/recovery intervals as two side-by-side strips."""
    df = combined_frame(combined)
    if df.empty:
        return go.Figure()
    shapes = []
    texts = []
    x_text = []
    y_text = []
    for row in df.to_dict("records"):
        for x0, code in ((0.0, row[CONDITION_CODE]), (1.0, row[RECOVERY_CODE])):
            shapes.append(_band(x0, x0 + 1.0, row[FROM], row[TO], CODE_COLORS.get(code, "#e2e8f0")))
            x_text.append(x0 + 0.5)
            y_text.append(0.5 * (row[FROM] + row[TO]))
            texts.append(code)

    fig = go.Figure(data=[go.Scatter(x=x_text, y=y_text, mode="text", text=texts, showlegend=False, hoverinfo="text")])
    fig.update_layout(
        height=height,
        width=width,
        margin=dict(l=40, r=10, t=30, b=40),
        xaxis=dict(range=[0, 2], tickvals=[0.5, 1.5], ticktext=["Condition", "Recovery"], fixedrange=True, side="top"),
        yaxis=dict(title="Depth (m)", autorange="reversed"),
        shapes=shapes,
        showlegend=False,
    )
    return fig


def plot_hole(hole, height=700):
    """Sample log and condition/recovery log of one hole side by side."""
    sample_fig = plot_sample_log(hole.samples, height=height)
    combined_fig = plot_combined_log(hole.combined_intervals(), height=height)
    fig = make_subplots(rows=1, cols=2, shared_yaxes=True, subplot_titles=("Samples", "Condition / Recovery"), column_widths=[0.55, 0.45])
    for trace in sample_fig.data:
        fig.add_trace(trace, row=1, col=1)
    for trace in combined_fig.data:
        fig.add_trace(trace, row=1, col=2)
    for shape in sample_fig.layout.shapes:
        fig.add_shape(shape, row=1, col=1)
    for shape in combined_fig.layout.shapes:
        fig.add_shape(shape, row=1, col=2)
    fig.update_yaxes(autorange="reversed", title_text="Depth (m)", row=1, col=1)
    fig.update_xaxes(visible=False, row=1, col=1)
    fig.update_xaxes(tickvals=[0.5, 1.5], ticktext=["Condition", "Recovery"], row=1, col=2)
    fig.update_layout(height=height, showlegend=False, title=hole.hole_id or None)
    return fig
