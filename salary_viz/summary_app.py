"""
Summary dashboard: salary histogram, experience stream graph and the
experience -> company size -> remote ratio Sankey, redrawn on resize.
"""

from __future__ import annotations

import logging
from typing import Optional

import dash
import pandas as pd
from dash import Input, Output, dcc, html

from .charts import create_experience_stream, create_flow_sankey, create_salary_histogram
from .components import (
    CARD_STYLE, EXTERNAL_STYLESHEETS, PAGE_STYLE, blank_layout, header, load_or_none,
    register_viewport_tracking, viewport_components, viewport_size,
)
from .config import Settings, get_settings
from .layouts import panel_sizes

logger = logging.getLogger(__name__)

# header and card padding
CHROME = 120


def render_summary(data: pd.DataFrame, viewport, settings: Settings):
    """Figures for the three panels at the current window size."""
    width, height = viewport_size(viewport, settings, chrome=CHROME)
    regions = panel_sizes('summary', width, height)
    hist, stream, sankey = regions['histogram'], regions['stream'], regions['sankey']
    logger.debug("Rendering summary at %dx%d", width, height)
    return (
        create_salary_histogram(data, hist.w, hist.h),
        create_experience_stream(data, stream.w - 20, stream.h),
        create_flow_sankey(data, sankey.w - 20, sankey.h),
    )


def create_app(settings: Optional[Settings] = None, records: Optional[pd.DataFrame] = None) -> dash.Dash:
    settings = settings or get_settings()
    if records is None:
        records = load_or_none(settings)

    app = dash.Dash(__name__, external_stylesheets=EXTERNAL_STYLESHEETS)
    app.title = "Data Science Salaries"

    if records is None:
        app.layout = blank_layout()
        return app

    graph_config = {'displayModeBar': False}
    app.layout = html.Div([
        header("DATA SCIENCE SALARIES",
               f"{len(records):,} employees • {records['year'].nunique()} years • "
               f"median ${records['salary'].median()/1000:.0f}K"),

        *viewport_components(settings),

        html.Div([dcc.Graph(id='histogram', config=graph_config)],
                 style={**CARD_STYLE, 'marginBottom': '10px'}),

        html.Div([
            html.Div([dcc.Graph(id='stream', config=graph_config)],
                     style={**CARD_STYLE, 'flex': '1'}),
            html.Div([dcc.Graph(id='flow-sankey', config=graph_config)],
                     style={**CARD_STYLE, 'flex': '1'}),
        ], style={'display': 'flex', 'gap': '10px'})

    ], style=PAGE_STYLE)

    register_viewport_tracking(app)

    @app.callback(
        [Output('histogram', 'figure'),
         Output('stream', 'figure'),
         Output('flow-sankey', 'figure')],
        Input('viewport', 'data')
    )
    def resize(viewport):
        return render_summary(records, viewport, settings)

    return app
