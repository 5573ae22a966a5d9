"""
Explorer dashboard: yearly salary overview with brushing and zoom, and a
focus view (chord diagram + Sankey) for the year clicked.

The callbacks are thin wrappers around the ``on_*`` handlers below, which
take plain store data and return plain values so they can be tested
without a browser.
"""

from __future__ import annotations

import logging
from typing import Optional

import dash
import pandas as pd
from dash import Input, Output, Patch, State, dcc, html
from dash.exceptions import PreventUpdate

from .charts import (
    bar_style, create_chord_diagram, create_focus_sankey, create_year_overview,
    ribbon_opacities,
)
from .components import (
    CARD_STYLE, EXTERNAL_STYLESHEETS, HIDDEN, PAGE_STYLE, blank_layout, header,
    load_or_none, register_viewport_tracking, viewport_components, viewport_size,
)
from .config import FONT, LEVELS, Settings, get_settings
from .layouts import panel_sizes
from .state import FOCUS, OVERVIEW, Controller, ViewState

logger = logging.getLogger(__name__)

CHROME = 110
SHOWN = {'display': 'block'}


# ============================================
# EVENT DECODING
# ============================================

def _first_point(event_data):
    if event_data and event_data.get('points'):
        return event_data['points'][0]
    return None


def year_from_event(event_data) -> Optional[int]:
    point = _first_point(event_data)
    if point is None:
        return None
    custom = point.get('customdata')
    if custom:
        return int(custom[0])
    return int(point['x']) if 'x' in point else None


def salary_range_from_selection(selected_data):
    """Salary band of a vertical box selection, or None when the brush is cleared."""
    if not selected_data or not selected_data.get('range'):
        return None
    band = selected_data['range'].get('y')
    if not band or len(band) != 2:
        return None
    return band[0], band[1]


def category_from_event(event_data, traces) -> Optional[str]:
    """Chord category under the pointer, from a label marker or an arc fill."""
    point = _first_point(event_data)
    if point is None:
        return None
    if isinstance(point.get('customdata'), str):
        return point['customdata']
    curve = point.get('curveNumber')
    if curve is not None and traces and curve < len(traces):
        meta = traces[curve].get('meta') or {}
        return meta.get('category')
    return None


# ============================================
# HANDLERS
# ============================================

def _years(controller: Controller):
    return sorted(int(y) for y in controller.records['year'].unique())


def render_views(controller: Controller, state_data, viewport, last_key, settings: Settings):
    """Full redraw of the current view, skipped when the scene is unchanged.

    Returns (overview figure, chord figure, sankey figure, overview style,
    focus style, rendered key).
    """
    state = ViewState.from_dict(state_data)
    key = controller.render_key(state, viewport)
    if key == last_key:
        return (dash.no_update,) * 6

    width, height = viewport_size(viewport, settings, chrome=CHROME)

    if state.current_view == OVERVIEW:
        region = panel_sizes(OVERVIEW, width, height)['main']
        aggregates = controller.overview_aggregates() if len(controller.records) else []
        opacities = controller.bar_opacities(state) if state.salary_range else None
        selected = state.selected_year if state.pending_view == FOCUS else None
        fig = create_year_overview(aggregates, region.w, region.h,
                                   opacities=opacities, selected_year=selected)
        logger.debug("Rendered overview at %dx%d", region.w, region.h)
        return fig, dash.no_update, dash.no_update, SHOWN, HIDDEN, key

    regions = panel_sizes(FOCUS, width, height)
    chord, sankey = regions['chord'], regions['sankey']
    chord_fig = create_chord_diagram(
        controller.filtered(state, include_experience=False),
        state.selected_year, chord.w, chord.h
    )
    sankey_fig = create_focus_sankey(
        controller.filtered(state), state.selected_year, state.selected_experience,
        sankey.w, sankey.h
    )
    logger.debug("Rendered focus view for %s", state.selected_year)
    return dash.no_update, chord_fig, sankey_fig, HIDDEN, SHOWN, key


def on_bar_click(controller: Controller, state_data, click_data):
    """Select a year. Returns (state, bar style) or None when nothing changes."""
    year = year_from_event(click_data)
    if year is None:
        return None
    state = ViewState.from_dict(state_data)
    new_state = controller.select_year(state, year)
    if new_state == state:
        return None
    years = _years(controller)
    return new_state.to_dict(), bar_style(years, selected=year)


def on_transition(controller: Controller, state_data, token):
    """Timer fired: finish the transition armed with ``token`` if it is still current."""
    state = ViewState.from_dict(state_data)
    new_state = controller.finish_transition(state, token)
    if new_state == state:
        return None
    return new_state.to_dict()


def on_back(controller: Controller, state_data):
    return controller.back_to_overview(ViewState.from_dict(state_data)).to_dict()


def on_brush(controller: Controller, state_data, selected_data):
    """Brush a salary band. Returns (state, per-bar opacities) or None outside the overview."""
    state = ViewState.from_dict(state_data)
    if state.current_view != OVERVIEW or state.pending_view is not None:
        return None
    new_state = controller.brush(state, salary_range_from_selection(selected_data))
    opacities = controller.bar_opacities(new_state)
    years = sorted(opacities)
    return new_state.to_dict(), [opacities[y] for y in years]


def on_bar_hover(controller: Controller, state_data, hover_data):
    """Bar style with the hovered year emphasised; the selected year stays emphasised."""
    state = ViewState.from_dict(state_data)
    years = _years(controller)
    return bar_style(years, hovered=year_from_event(hover_data), selected=state.selected_year)


def on_chord_click(controller: Controller, state_data, click_data, traces, viewport, settings: Settings):
    """Filter the Sankey by the clicked experience level. Returns (state, sankey figure) or None."""
    level = category_from_event(click_data, traces)
    if level not in LEVELS:
        return None
    state = ViewState.from_dict(state_data)
    new_state = controller.select_experience(state, level)
    if new_state == state:
        return None
    width, height = viewport_size(viewport, settings, chrome=CHROME)
    region = panel_sizes(FOCUS, width, height)['sankey']
    fig = create_focus_sankey(
        controller.filtered(new_state), new_state.selected_year,
        new_state.selected_experience, region.w, region.h
    )
    return new_state.to_dict(), fig


def on_chord_hover(hover_data, traces):
    """Ribbon opacities for the hovered chord group (all restored when nothing is hovered)."""
    category = category_from_event(hover_data, traces)
    hovered = None
    for trace in traces or []:
        meta = trace.get('meta') or {}
        if meta.get('kind') == 'group' and meta.get('category') == category:
            hovered = meta['index']
    return ribbon_opacities(traces or [], hovered)


# ============================================
# DASH APP
# ============================================

def create_app(settings: Optional[Settings] = None, records: Optional[pd.DataFrame] = None) -> dash.Dash:
    settings = settings or get_settings()
    if records is None:
        records = load_or_none(settings)

    app = dash.Dash(__name__, external_stylesheets=EXTERNAL_STYLESHEETS)
    app.title = "Data Science Salaries Explorer"

    if records is None:
        app.layout = blank_layout()
        return app

    controller = Controller(records)

    back_style = {'padding': '8px 18px', 'background': '#007bff', 'color': 'white',
                  'border': 'none', 'borderRadius': '5px', 'cursor': 'pointer',
                  'fontSize': '13px', 'fontWeight': '600', 'fontFamily': FONT,
                  'boxShadow': '0 2px 5px rgba(10,102,194,0.3)', 'marginBottom': '8px'}

    app.layout = html.Div([
        header("DATA SCIENCE SALARIES EXPLORER",
               f"{len(records):,} employees • click a year to explore it"),

        *viewport_components(settings),
        dcc.Store(id='view-state', data=controller.initial_state().to_dict()),
        dcc.Store(id='rendered-key', data=None),
        dcc.Store(id='transition-token', data=None),
        dcc.Interval(id='transition-timer', interval=settings.transition_ms, disabled=True),

        html.Div([
            html.Div([dcc.Graph(id='overview-graph', clear_on_unhover=True,
                                config={'scrollZoom': True, 'displayModeBar': 'hover',
                                        'displaylogo': False})],
                     style=CARD_STYLE)
        ], id='overview-view', style=SHOWN),

        html.Div([
            html.Button('← Back to Overview', id='back-button', n_clicks=0, style=back_style),
            html.Div([dcc.Graph(id='chord-graph', clear_on_unhover=True,
                                config={'displayModeBar': False})],
                     style={**CARD_STYLE, 'marginBottom': '10px'}),
            html.Div([dcc.Graph(id='focus-sankey', config={'displayModeBar': False})],
                     style=CARD_STYLE),
        ], id='focus-view', style=HIDDEN)

    ], style=PAGE_STYLE)

    register_viewport_tracking(app)

    @app.callback(
        [Output('overview-graph', 'figure'),
         Output('chord-graph', 'figure'),
         Output('focus-sankey', 'figure'),
         Output('overview-view', 'style'),
         Output('focus-view', 'style'),
         Output('rendered-key', 'data')],
        [Input('view-state', 'data'),
         Input('viewport', 'data')],
        State('rendered-key', 'data')
    )
    def render(state_data, viewport, last_key):
        return render_views(controller, state_data, viewport, last_key, settings)

    @app.callback(
        [Output('view-state', 'data', allow_duplicate=True),
         Output('overview-graph', 'figure', allow_duplicate=True),
         Output('transition-timer', 'disabled'),
         Output('transition-timer', 'n_intervals'),
         Output('transition-token', 'data')],
        Input('overview-graph', 'clickData'),
        State('view-state', 'data'),
        prevent_initial_call=True
    )
    def click_year(click_data, state_data):
        result = on_bar_click(controller, state_data, click_data)
        if result is None:
            raise PreventUpdate
        new_state, style = result
        patched = _patch_bar_style(style, with_opacity=True)
        return new_state, patched, False, 0, new_state['transition']

    @app.callback(
        [Output('view-state', 'data', allow_duplicate=True),
         Output('transition-timer', 'disabled', allow_duplicate=True)],
        Input('transition-timer', 'n_intervals'),
        [State('view-state', 'data'),
         State('transition-token', 'data')],
        prevent_initial_call=True
    )
    def transition(n_intervals, state_data, token):
        if not n_intervals:
            raise PreventUpdate
        new_state = on_transition(controller, state_data, token)
        return (new_state if new_state is not None else dash.no_update), True

    @app.callback(
        [Output('view-state', 'data', allow_duplicate=True),
         Output('transition-timer', 'disabled', allow_duplicate=True)],
        Input('back-button', 'n_clicks'),
        State('view-state', 'data'),
        prevent_initial_call=True
    )
    def back(n_clicks, state_data):
        if not n_clicks:
            raise PreventUpdate
        return on_back(controller, state_data), True

    @app.callback(
        [Output('view-state', 'data', allow_duplicate=True),
         Output('overview-graph', 'figure', allow_duplicate=True)],
        Input('overview-graph', 'selectedData'),
        State('view-state', 'data'),
        prevent_initial_call=True
    )
    def brush(selected_data, state_data):
        result = on_brush(controller, state_data, selected_data)
        if result is None:
            raise PreventUpdate
        new_state, opacities = result
        patched = Patch()
        patched['data'][0]['marker']['opacity'] = opacities
        return new_state, patched

    @app.callback(
        Output('overview-graph', 'figure', allow_duplicate=True),
        Input('overview-graph', 'hoverData'),
        State('view-state', 'data'),
        prevent_initial_call=True
    )
    def hover_year(hover_data, state_data):
        return _patch_bar_style(on_bar_hover(controller, state_data, hover_data))

    @app.callback(
        [Output('view-state', 'data', allow_duplicate=True),
         Output('focus-sankey', 'figure', allow_duplicate=True)],
        Input('chord-graph', 'clickData'),
        [State('view-state', 'data'),
         State('chord-graph', 'figure'),
         State('viewport', 'data')],
        prevent_initial_call=True
    )
    def click_experience(click_data, state_data, figure, viewport):
        traces = (figure or {}).get('data', [])
        result = on_chord_click(controller, state_data, click_data, traces, viewport, settings)
        if result is None:
            raise PreventUpdate
        return result

    @app.callback(
        Output('chord-graph', 'figure', allow_duplicate=True),
        Input('chord-graph', 'hoverData'),
        State('chord-graph', 'figure'),
        prevent_initial_call=True
    )
    def hover_chord(hover_data, figure):
        opacities = on_chord_hover(hover_data, (figure or {}).get('data', []))
        if not opacities:
            raise PreventUpdate
        patched = Patch()
        for i, opacity in opacities.items():
            patched['data'][i]['opacity'] = opacity
        return patched

    return app


def _patch_bar_style(style, with_opacity=False):
    patched = Patch()
    marker = patched['data'][0]['marker']
    marker['color'] = style['color']
    marker['line']['color'] = style['line_color']
    marker['line']['width'] = style['line_width']
    if with_opacity:
        marker['opacity'] = style['opacity']
    return patched
