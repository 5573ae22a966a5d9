"""
Layout pieces shared by both dashboards.
"""

from __future__ import annotations

import logging
from typing import Optional

import dash
import dash_bootstrap_components as dbc
import pandas as pd
from dash import Input, Output, State, dcc, html

from .config import FONT, Settings
from .data import DataLoadError, load_records

logger = logging.getLogger(__name__)

EXTERNAL_STYLESHEETS = [
    dbc.themes.BOOTSTRAP,
    "https://fonts.googleapis.com/css2?family=Inter:wght@300;400;600;700&display=swap"
]

CARD_STYLE = {
    'background': 'white', 'borderRadius': '12px', 'padding': '8px',
    'boxShadow': '0 3px 10px rgba(0,0,0,0.08)', 'border': '1px solid #DFE4E8'
}

PAGE_STYLE = {
    'margin': '0 auto',
    'padding': '0 12px 12px 12px',
    'background': 'linear-gradient(to bottom, #FAFBFC 0%, #F5F7FA 100%)',
    'minHeight': '100vh',
    'fontFamily': FONT
}

HIDDEN = {'display': 'none'}


def load_or_none(settings: Settings) -> Optional[pd.DataFrame]:
    """Load the dataset, logging (not raising) a load failure."""
    try:
        return load_records(settings.data_path)
    except DataLoadError as e:
        logger.error("Failed to load data: %s", e)
        return None


def blank_layout():
    # a failed load leaves the page empty
    return html.Div(id='viz-root', style=PAGE_STYLE)


def header(title, subtitle):
    return html.Div([
        html.H1(title,
               style={'color': '#0A66C2', 'fontSize': '24px', 'fontWeight': '700',
                      'margin': '0 0 4px 0', 'fontFamily': FONT,
                      'letterSpacing': '0.4px'}),
        html.P(subtitle,
               style={'color': '#5E6C84', 'fontSize': '11px', 'margin': '0',
                      'fontFamily': FONT})
    ], style={
        'textAlign': 'center',
        'padding': '14px 0 10px 0',
        'background': 'linear-gradient(135deg, #EEF3F8 0%, #F4F7FA 100%)',
        'borderBottom': '3px solid #0A66C2',
        'marginBottom': '12px',
        'boxShadow': '0 2px 8px rgba(10,102,194,0.08)'
    })


def viewport_components(settings: Settings):
    """Store holding the browser window size, refreshed by a polling interval."""
    return [
        dcc.Store(id='viewport', data={'width': settings.default_width,
                                       'height': settings.default_height}),
        dcc.Interval(id='viewport-poll', interval=settings.viewport_poll_ms),
    ]


def register_viewport_tracking(app: dash.Dash):
    # runs in the browser; only writes the store when the size changed
    app.clientside_callback(
        """
        function(n, current) {
            var size = {width: window.innerWidth, height: window.innerHeight};
            if (current && current.width === size.width && current.height === size.height) {
                return window.dash_clientside.no_update;
            }
            return size;
        }
        """,
        Output('viewport', 'data'),
        Input('viewport-poll', 'n_intervals'),
        State('viewport', 'data')
    )


def viewport_size(viewport, settings: Settings, chrome: int = 0):
    """Width and height available for charts, minus ``chrome`` pixels of page furniture."""
    viewport = viewport or {}
    width = viewport.get('width') or settings.default_width
    height = viewport.get('height') or settings.default_height
    return width - 40, height - chrome
