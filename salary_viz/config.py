"""Runtime settings and shared chart constants."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path


@dataclass(frozen=True)
class Settings:
    data_path: Path = Path("data") / "ds_salaries.csv"
    host: str = "127.0.0.1"
    port: int = 8050
    debug: bool = False
    # delay between a bar click and the focus view
    transition_ms: int = 800
    viewport_poll_ms: int = 500
    default_width: int = 1280
    default_height: int = 800


def get_settings(**overrides) -> Settings:
    """Default settings with keyword overrides; ``None`` values are ignored."""
    settings = Settings()
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if "data_path" in overrides:
        overrides["data_path"] = Path(overrides["data_path"])
    return replace(settings, **overrides)


# ============================================
# CATEGORIES
# ============================================

LEVELS = ["EN", "MI", "SE", "EX"]
SIZES = ["S", "M", "L"]

LEVEL_LABELS = {
    'EN': 'EN (Entry-level)',
    'MI': 'MI (Mid-level)',
    'SE': 'SE (Senior-level)',
    'EX': 'EX (Executive-level)',
}
SIZE_LABELS = {'S': 'Small', 'M': 'Medium', 'L': 'Large'}

# ============================================
# PALETTES
# ============================================

CATEGORY10 = ['#1f77b4', '#ff7f0e', '#2ca02c', '#d62728', '#9467bd',
              '#8c564b', '#e377c2', '#7f7f7f', '#bcbd22', '#17becf']
SET2 = ['#66c2a5', '#fc8d62', '#8da0cb', '#e78ac3', '#a6d854', '#ffd92f',
        '#e5c494', '#b3b3b3']
SET3 = ['#8dd3c7', '#ffffb3', '#bebada', '#fb8072', '#80b1d3', '#fdb462',
        '#b3de69', '#fccde5', '#d9d9d9', '#bc80bd', '#ccebc5', '#ffed6f']

GROUP_COLORS = {'exp': '#1f77b4', 'size': '#17becf', 'rem': '#ff7f0e'}
GROUP_LABELS = {'exp': 'Experience', 'size': 'Company Size', 'rem': 'Remote Work'}

BAR_COLOR = 'steelblue'
HIGHLIGHT = '#ff7f0e'
HIGHLIGHT_STROKE = '#ff4500'
MUTED = 'lightgray'

FONT = 'Inter, sans-serif'
