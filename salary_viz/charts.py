"""
Figure builders for both dashboards.

Every builder returns a fresh figure sized to the region it is given, so
rebuilding with the same data and size gives the same figure.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

import numpy as np
import plotly.graph_objects as go

from .aggregate import YearAggregate, build_flow_graph, chord_matrix, stack_by_year_and_level
from .config import (
    BAR_COLOR, CATEGORY10, FONT, GROUP_COLORS, GROUP_LABELS, HIGHLIGHT,
    HIGHLIGHT_STROKE, LEVEL_LABELS, LEVELS, MUTED, SET2, SET3, SIZE_LABELS, SIZES,
)
from .layouts import arc_points, chord_layout, polar, ribbon_points, salary_bins, wiggle_offsets

CHORD_INNER = 1.0
CHORD_OUTER = 1.2
CHORD_LABEL = 1.4
CHORD_COLORS = ["#1f77b4", "#ff7f0e", "#2ca02c", "#d62728", "#9467bd", "#8c564b", "#e377c2"]


def _title(text, subtitle=None):
    html = f'<b style="color:#0A66C2;font-size:16px">{text}</b>'
    if subtitle:
        html += f'<br><span style="font-size:11px;color:#666;font-weight:400">{subtitle}</span>'
    return dict(text=html, font=dict(family=FONT), x=0.5, xanchor='center', y=0.96, yanchor='top')


def _rgba(hex_color, alpha):
    h = hex_color.lstrip('#')
    r, g, b = (int(h[i:i + 2], 16) for i in (0, 2, 4))
    return f'rgba({r},{g},{b},{alpha})'


def empty_figure(message, width=None, height=375):
    """Placeholder shown instead of a chart when a filter leaves no data."""
    fig = go.Figure()
    fig.add_annotation(
        x=0.5, y=0.5, xref='paper', yref='paper',
        text=message, showarrow=False,
        font=dict(size=16, color='#999', family=FONT)
    )
    fig.update_layout(
        template='plotly_white',
        width=width, height=height,
        xaxis=dict(visible=False),
        yaxis=dict(visible=False),
        paper_bgcolor='rgba(255,255,255,0)',
        plot_bgcolor='rgba(255,255,255,0)'
    )
    return fig


# ============================================
# SUMMARY DASHBOARD
# ============================================

def create_salary_histogram(data, width, height):
    """Salary distribution over about forty nice bins"""
    if len(data) == 0:
        return empty_figure("No data available", width, height)

    edges, counts = salary_bins(data['salary'])
    centers = (edges[:-1] + edges[1:]) / 2
    widths = np.diff(edges)

    fig = go.Figure(go.Bar(
        x=centers, y=counts,
        width=widths * 0.96,
        marker=dict(color=BAR_COLOR, line=dict(width=0)),
        customdata=np.stack([edges[:-1], edges[1:]], axis=-1),
        hovertemplate='$%{customdata[0]:,.0f} – $%{customdata[1]:,.0f}<br><b>%{y}</b> employees<extra></extra>',
        showlegend=False
    ))

    fig.update_layout(
        title=_title('Salary Distribution (USD)'),
        template='plotly_white',
        width=width, height=height,
        bargap=0,
        xaxis=dict(
            title=dict(text='Salary (USD)', font=dict(size=11, family=FONT)),
            range=[edges[0], edges[-1]],
            tickformat='$~s',
            gridcolor='#f0f0f0'
        ),
        yaxis=dict(
            title=dict(text='Count', font=dict(size=11, family=FONT)),
            gridcolor='#f0f0f0'
        ),
        margin=dict(l=60, r=20, t=60, b=50),
        paper_bgcolor='rgba(255,255,255,0)',
        plot_bgcolor='rgba(238,243,248,0.25)'
    )
    return fig


def create_experience_stream(data, width, height):
    """Employees per experience level over time, as a wiggle stream graph"""
    if len(data) == 0:
        return empty_figure("No data available", width, height)

    stack = stack_by_year_and_level(data)
    layers = wiggle_offsets(stack)
    years = [int(y) for y in stack.index]

    fig = go.Figure()
    for i, level in enumerate(LEVELS):
        lower, upper = layers[level]
        total = int(stack[level].sum())
        fig.add_trace(go.Scatter(
            x=years + years[::-1],
            y=list(upper) + list(lower[::-1]),
            fill='toself',
            mode='lines',
            line=dict(width=0.5, color=CATEGORY10[i]),
            fillcolor=CATEGORY10[i],
            name=LEVEL_LABELS[level],
            hoveron='fills',
            text=f'<b>Experience Level: {level}</b><br>Total Count: {total} records',
            hoverinfo='text'
        ))

    fig.update_layout(
        title=_title('Employees by Experience Level Over Time'),
        template='plotly_white',
        width=width, height=height,
        xaxis=dict(
            title=dict(text='Year', font=dict(size=11, family=FONT)),
            tickmode='array', tickvals=years, tickformat='d',
            gridcolor='#f0f0f0'
        ),
        yaxis=dict(
            title=dict(text='Count', font=dict(size=11, family=FONT)),
            gridcolor='#f0f0f0'
        ),
        legend=dict(x=0.01, y=0.99, bgcolor='rgba(255,255,255,0.8)', font=dict(size=10, family=FONT)),
        margin=dict(l=60, r=20, t=60, b=50),
        paper_bgcolor='rgba(255,255,255,0)',
        plot_bgcolor='rgba(238,243,248,0.25)'
    )
    return fig


def create_flow_sankey(data, width, height):
    """Experience -> company size -> remote ratio flows for the whole dataset"""
    present = set(data['exp'])
    graph = build_flow_graph(data, levels=[l for l in LEVELS if l in present],
                             remote_label='Remote {}%')
    if not graph.links:
        return empty_figure("No connections available", width, height)

    index = graph.index()
    remotes = [n.name for n in graph.nodes if n.group == 'rem']

    def node_color(node):
        if node.group == 'exp':
            return CATEGORY10[LEVELS.index(node.name) % len(CATEGORY10)]
        if node.group == 'size':
            return SET2[SIZES.index(node.name.split()[-1]) % len(SET2)]
        return SET3[remotes.index(node.name) % len(SET3)]

    colors = [node_color(n) for n in graph.nodes]
    # links take the colour of the node they leave
    link_colors = [_rgba(colors[index[l.source]], 0.8) for l in graph.links]

    fig = go.Figure(go.Sankey(
        arrangement='snap',
        node=dict(
            label=[n.name for n in graph.nodes],
            color=colors,
            pad=10, thickness=15,
            line=dict(color='#000', width=0.5),
            hovertemplate='<b>%{label}</b><br>%{value} employees<extra></extra>'
        ),
        link=dict(
            source=[index[l.source] for l in graph.links],
            target=[index[l.target] for l in graph.links],
            value=[l.value for l in graph.links],
            color=link_colors
        )
    ))

    fig.update_layout(
        title=_title('Sankey Flow: Experience → Company Size → Remote Ratio'),
        width=width, height=height,
        font=dict(size=11, family=FONT),
        margin=dict(l=20, r=20, t=60, b=30),
        paper_bgcolor='rgba(255,255,255,0)'
    )
    return fig


# ============================================
# EXPLORER: OVERVIEW
# ============================================

def bar_style(years: Sequence[int], hovered=None, selected=None, opacities: Optional[Dict[int, float]] = None):
    """Per-bar colour, outline and opacity.

    A selected year is drawn highlighted with every other bar greyed out; a
    hovered bar is highlighted on top of that; otherwise the brush opacities
    apply.
    """
    opacities = opacities or {}
    style = {'color': [], 'line_color': [], 'line_width': [], 'opacity': []}
    for year in years:
        emphasized = year == hovered or year == selected
        if emphasized:
            style['color'].append(HIGHLIGHT)
            style['line_color'].append(HIGHLIGHT_STROKE)
            style['line_width'].append(3)
        else:
            style['color'].append(MUTED if selected is not None else BAR_COLOR)
            style['line_color'].append('white')
            style['line_width'].append(1)

        if selected is not None:
            style['opacity'].append(1.0 if year == selected else 0.2)
        else:
            style['opacity'].append(opacities.get(year, 1.0))
    return style


def create_year_overview(aggregates: List[YearAggregate], width, height, opacities=None, selected_year=None):
    """Mean salary per year with min/max range bars"""
    if not aggregates:
        return empty_figure("No data available", width, height)

    years = [a.year for a in aggregates]
    means = np.array([a.mean for a in aggregates])
    style = bar_style(years, selected=selected_year, opacities=opacities)

    fig = go.Figure(go.Bar(
        x=years, y=means,
        marker=dict(
            color=style['color'],
            opacity=style['opacity'],
            line=dict(color=style['line_color'], width=style['line_width'])
        ),
        error_y=dict(
            type='data', symmetric=False,
            array=[a.max - a.mean for a in aggregates],
            arrayminus=[a.mean - a.min for a in aggregates],
            color='rgba(51,51,51,0.6)', thickness=2, width=5
        ),
        text=[f'n={a.count}' for a in aggregates],
        textposition='outside',
        textfont=dict(size=12, color='#333', family=FONT),
        customdata=[[a.year, a.count, a.median, a.min, a.max] for a in aggregates],
        hovertemplate=(
            '<b>Year: %{customdata[0]}</b><br>'
            '<span style="color:#4CAF50">Count: %{customdata[1]} records</span><br>'
            '<span style="color:#2196F3">Avg: $%{y:,.0f}</span><br>'
            '<span style="color:#FF9800">Median: $%{customdata[2]:,.0f}</span><br>'
            '<span style="color:#F44336">Range: $%{customdata[3]:,.0f} - $%{customdata[4]:,.0f}</span>'
            '<extra></extra>'
        ),
        showlegend=False
    ))

    top = max(a.max for a in aggregates)
    fig.update_layout(
        title=_title(
            'Data Science Salaries by Year',
            'Choose a bar to get started · drag vertically to brush a salary band · scroll to zoom'
        ),
        template='plotly_white',
        width=width, height=height,
        xaxis=dict(
            title=dict(text='Year', font=dict(size=14, family=FONT)),
            type='category',
            categoryorder='array', categoryarray=years
        ),
        yaxis=dict(
            title=dict(text='Average Salary in USD', font=dict(size=14, family=FONT)),
            range=[0, top * 1.08],
            tickformat='~s',
            gridcolor='#f0f0f0'
        ),
        dragmode='select',
        selectdirection='v',
        clickmode='event',
        hovermode='closest',
        uirevision='overview',
        transition=dict(duration=600, easing='cubic-out'),
        margin=dict(l=80, r=40, t=80, b=80),
        paper_bgcolor='rgba(255,255,255,0)',
        plot_bgcolor='rgba(238,243,248,0.25)'
    )
    return fig


# ============================================
# EXPLORER: FOCUS
# ============================================

def create_chord_diagram(data, year, width, height):
    """Experience level <-> company size relationships for one year"""
    categories, matrix = chord_matrix(data)
    if not any(any(row) for row in matrix):
        return empty_figure("No data available for selected filter", width, height)

    groups, chords = chord_layout(matrix, pad_angle=0.05)
    total = len(data)
    fig = go.Figure()

    for chord in chords:
        xs, ys = ribbon_points(chord, CHORD_INNER)
        fig.add_trace(go.Scatter(
            x=xs, y=ys,
            mode='lines', fill='toself',
            line=dict(width=0.5, color=CHORD_COLORS[chord.source.index]),
            fillcolor=CHORD_COLORS[chord.source.index],
            opacity=0.7,
            hoverinfo='skip',
            showlegend=False,
            meta=dict(kind='ribbon', source=chord.source.index, target=chord.target.index)
        ))

    for group in groups:
        if group.value <= 0:
            continue
        category = categories[group.index]
        is_level = category in LEVELS
        xs, ys = arc_points(CHORD_INNER, CHORD_OUTER, group.start, group.end)
        fig.add_trace(go.Scatter(
            x=xs, y=ys,
            mode='lines', fill='toself',
            line=dict(width=2, color='#fff'),
            fillcolor=CHORD_COLORS[group.index],
            name=category if is_level else SIZE_LABELS[category],
            legendgroup='exp' if is_level else 'size',
            legendgrouptitle_text='Experience Levels' if is_level else 'Company Sizes',
            hoveron='fills',
            hoverinfo='text',
            text=_chord_tooltip(category, group.value, total),
            meta=dict(kind='group', index=group.index, category=category)
        ))

    drawn = [g for g in groups if g.value > 0]
    label_xy = [polar(CHORD_LABEL, (g.start + g.end) / 2) for g in drawn]
    fig.add_trace(go.Scatter(
        x=[p[0] for p in label_xy], y=[p[1] for p in label_xy],
        mode='markers+text',
        marker=dict(size=18, color=[CHORD_COLORS[g.index] for g in drawn], opacity=0.25),
        text=[f'<b>{categories[g.index]}</b>' for g in drawn],
        textfont=dict(size=12, family=FONT),
        customdata=[categories[g.index] for g in drawn],
        hovertext=[_chord_tooltip(categories[g.index], g.value, total) for g in drawn],
        hoverinfo='text',
        showlegend=False,
        meta=dict(kind='label')
    ))

    fig.update_layout(
        title=_title(
            f'Experience and Company Size Relationships in {year}',
            'Click an experience level to filter the flow diagram'
        ),
        template='plotly_white',
        width=width, height=height,
        xaxis=dict(visible=False, range=[-1.7, 1.7]),
        yaxis=dict(visible=False, range=[-1.7, 1.7], scaleanchor='x', scaleratio=1),
        legend=dict(groupclick='toggleitem', font=dict(size=10, family=FONT)),
        hovermode='closest',
        clickmode='event',
        margin=dict(l=20, r=20, t=60, b=20),
        paper_bgcolor='rgba(255,255,255,0)',
        plot_bgcolor='rgba(255,255,255,0)'
    )
    return fig


def _chord_tooltip(category, value, total):
    if category in LEVELS:
        kind, name = 'Experience Level', category
    else:
        kind, name = 'Company Size', SIZE_LABELS.get(category, category)
    share = (value / total * 100) if total else 0.0
    return f'<b>{kind}: {name}</b><br>Connections: {int(value)} ({share:.1f}%)'


def ribbon_opacities(traces: Sequence[dict], hovered: Optional[int]) -> Dict[int, float]:
    """Opacity per ribbon trace index; ribbons not touching ``hovered`` fade."""
    opacities = {}
    for i, trace in enumerate(traces):
        meta = trace.get('meta') or {}
        if meta.get('kind') != 'ribbon':
            continue
        if hovered is None:
            opacities[i] = 0.7
        elif hovered in (meta.get('source'), meta.get('target')):
            opacities[i] = 1.0
        else:
            opacities[i] = 0.1
    return opacities


def create_focus_sankey(data, year, experience, width, height):
    """Experience -> size -> remote flows for the focused year"""
    if len(data) == 0:
        return empty_figure("No data available for selected filter", width, height)

    graph = build_flow_graph(data, levels=[experience] if experience else None)
    if not graph.links:
        return empty_figure("No connections available for selected data", width, height)

    index = graph.index()
    fig = go.Figure(go.Sankey(
        arrangement='snap',
        node=dict(
            label=[n.name for n in graph.nodes],
            color=[GROUP_COLORS[n.group] for n in graph.nodes],
            customdata=[GROUP_LABELS[n.group] for n in graph.nodes],
            pad=10, thickness=15,
            line=dict(color='#000', width=0.5),
            hovertemplate='<b>%{label}</b><br>%{customdata}: %{value} employees<extra></extra>'
        ),
        link=dict(
            source=[index[l.source] for l in graph.links],
            target=[index[l.target] for l in graph.links],
            value=[l.value for l in graph.links],
            color=[_rgba(GROUP_COLORS[graph.nodes[index[l.source]].group], 0.45) for l in graph.links]
        )
    ))

    title = f'Experience → Size → Remote in {year}'
    if experience:
        title += f' ({experience} only)'

    for i, group in enumerate(['exp', 'size', 'rem']):
        fig.add_annotation(
            x=1.0, y=1.0 - i * 0.06, xref='paper', yref='paper',
            xanchor='right', showarrow=False,
            text=f'<span style="color:{GROUP_COLORS[group]}">■</span> {GROUP_LABELS[group]}',
            font=dict(size=11, family=FONT)
        )

    fig.update_layout(
        title=_title(title),
        width=width, height=height,
        font=dict(size=11, family=FONT),
        margin=dict(l=20, r=20, t=45, b=20),
        paper_bgcolor='rgba(255,255,255,0)'
    )
    return fig
