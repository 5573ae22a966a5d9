"""
View state of the explorer dashboard and the controller that moves it
between the overview and focus views.

The state is immutable; every controller method returns a new ViewState,
which the Dash callbacks persist in a ``dcc.Store``.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from typing import Dict, List, Optional, Tuple

import pandas as pd

from .aggregate import YearAggregate, aggregate_by_year, bar_opacity
from .config import LEVELS

logger = logging.getLogger(__name__)

OVERVIEW = 'overview'
FOCUS = 'focus'


@dataclass(frozen=True)
class ViewState:
    current_view: str = OVERVIEW
    selected_year: Optional[int] = None
    selected_experience: Optional[str] = None
    salary_range: Optional[Tuple[float, float]] = None
    # target view of the transition in flight, if any
    pending_view: Optional[str] = None
    # transition token; a timer armed with an older token does nothing
    transition: int = 0

    def to_dict(self) -> dict:
        data = asdict(self)
        if self.salary_range is not None:
            data['salary_range'] = list(self.salary_range)
        return data

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ViewState":
        if not data:
            return cls()
        salary_range = data.get('salary_range')
        return cls(
            current_view=data.get('current_view', OVERVIEW),
            selected_year=data.get('selected_year'),
            selected_experience=data.get('selected_experience'),
            salary_range=tuple(salary_range) if salary_range else None,
            pending_view=data.get('pending_view'),
            transition=int(data.get('transition', 0)),
        )


class Controller:
    """Owns the raw records and applies interactions to a ViewState."""

    def __init__(self, records: pd.DataFrame):
        self.records = records

    def initial_state(self) -> ViewState:
        return ViewState()

    # ---------- derived data ----------

    def filtered(self, state: ViewState, include_experience: bool = True) -> pd.DataFrame:
        """Records kept by the year filter, the salary brush and (optionally) the experience filter."""
        df = self.records
        mask = pd.Series(True, index=df.index)
        if state.selected_year is not None:
            mask &= df['year'] == state.selected_year
        if state.salary_range is not None:
            lo, hi = state.salary_range
            mask &= df['salary'].between(lo, hi)
        if include_experience and state.selected_experience is not None:
            mask &= df['exp'] == state.selected_experience
        return df[mask]

    def overview_aggregates(self) -> List[YearAggregate]:
        return aggregate_by_year(self.records)

    def bar_opacities(self, state: ViewState) -> Dict[int, float]:
        return bar_opacity(self.records, self.filtered(state))

    def render_key(self, state: ViewState, viewport: Optional[dict]) -> dict:
        """Identity of the scene on screen; a full redraw happens only when it changes."""
        viewport = viewport or {}
        key = {
            'view': state.current_view,
            'width': viewport.get('width'),
            'height': viewport.get('height'),
        }
        if state.current_view == FOCUS:
            key['year'] = state.selected_year
        return key

    # ---------- transitions ----------

    def select_year(self, state: ViewState, year: int) -> ViewState:
        """Overview --click(year)--> Focus, once the transition completes."""
        if state.current_view != OVERVIEW:
            return state
        logger.debug("Year %s selected, transition %d armed", year, state.transition + 1)
        return replace(
            state,
            selected_year=int(year),
            selected_experience=None,
            salary_range=None,
            pending_view=FOCUS,
            transition=state.transition + 1,
        )

    def finish_transition(self, state: ViewState, token: Optional[int]) -> ViewState:
        if state.pending_view is None or token != state.transition:
            logger.debug("Stale transition %s ignored (current %d)", token, state.transition)
            return state
        return replace(state, current_view=state.pending_view, pending_view=None)

    def select_experience(self, state: ViewState, level: Optional[str]) -> ViewState:
        """Focus --click(level)--> Focus; clicking the selected level again clears it."""
        if state.current_view != FOCUS or level not in LEVELS:
            return state
        if state.selected_experience == level:
            return replace(state, selected_experience=None)
        return replace(state, selected_experience=level)

    def back_to_overview(self, state: ViewState) -> ViewState:
        """Focus --back--> Overview. Any transition still in flight is cancelled."""
        return ViewState(transition=state.transition + 1)

    def brush(self, state: ViewState, salary_range: Optional[Tuple[float, float]]) -> ViewState:
        """Overview self-transition narrowing the records to a salary band."""
        if salary_range is None:
            return replace(state, salary_range=None)
        lo, hi = sorted(float(v) for v in salary_range)
        return replace(state, salary_range=(lo, hi))
