"""
Geometry for the charts plotly does not lay out by itself: panel regions,
nice histogram bins, the wiggle stream offset and the chord layout.

Angles follow the clock convention: 0 at twelve o'clock, growing clockwise.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import numpy as np
import pandas as pd

TAU = 2 * math.pi
MIN_WIDTH = 240
MIN_HEIGHT = 180


@dataclass(frozen=True)
class Region:
    x: float
    y: float
    w: float
    h: float


def panel_sizes(kind: str, width: float, height: float) -> Dict[str, Region]:
    """Drawing regions for a dashboard ('summary') or explorer view ('overview', 'focus')."""
    W = max(float(width), MIN_WIDTH)
    H = max(float(height), MIN_HEIGHT)

    if kind == 'summary':
        hist_h = 0.3 * H
        half = 0.5 * W
        return {
            'histogram': _region(0, 0, W, hist_h),
            'stream': _region(0, hist_h, half, H - hist_h),
            'sankey': _region(half, hist_h, half, H - hist_h),
        }
    if kind == 'overview':
        return {'main': _region(50, 50, W - 100, H - 100)}
    if kind == 'focus':
        top = 0.4 * H
        return {
            'chord': _region(0, 0, W, top),
            'sankey': _region(0, top, W, H - top),
        }
    raise ValueError(f"unknown panel kind: {kind}")


def _region(x, y, w, h) -> Region:
    return Region(x, y, max(w, MIN_WIDTH), max(h, MIN_HEIGHT))


# ============================================
# HISTOGRAM BINS
# ============================================

def tick_increment(start: float, stop: float, count: int) -> float:
    """Step of 1, 2 or 5 times a power of ten giving about ``count`` ticks."""
    step = (stop - start) / max(count, 1)
    power = math.floor(math.log10(step))
    error = step / 10 ** power
    if error >= math.sqrt(50):
        factor = 10
    elif error >= math.sqrt(10):
        factor = 5
    elif error >= math.sqrt(2):
        factor = 2
    else:
        factor = 1
    return factor * 10 ** power


def nice_domain(lo: float, hi: float, count: int = 10) -> Tuple[float, float]:
    if hi <= lo:
        return lo, hi
    prev = None
    for _ in range(10):
        step = tick_increment(lo, hi, count)
        if step == prev:
            break
        lo = math.floor(lo / step) * step
        hi = math.ceil(hi / step) * step
        prev = step
    return lo, hi


def salary_bins(salaries: Sequence[float], count: int = 40) -> Tuple[np.ndarray, np.ndarray]:
    """Histogram edges and counts over a nice salary domain.

    The domain is rounded outwards to round numbers and split at ticks
    spaced about ``count`` to the domain; the maximum falls in the last bin.
    """
    values = np.asarray(salaries, dtype=float)
    if values.size == 0:
        return np.array([]), np.array([], dtype=int)

    lo, hi = nice_domain(float(values.min()), float(values.max()))
    if hi <= lo:
        edges = np.array([lo - 0.5, lo + 0.5])
    else:
        step = tick_increment(lo, hi, count)
        first = math.ceil(lo / step)
        last = math.floor(hi / step)
        ticks = np.arange(first, last + 1) * step
        inner = ticks[(ticks > lo) & (ticks < hi)]
        edges = np.concatenate([[lo], inner, [hi]])
    counts, _ = np.histogram(values, bins=edges)
    return edges, counts


# ============================================
# STREAM GRAPH
# ============================================

def wiggle_offsets(stack: pd.DataFrame) -> Dict[str, Tuple[np.ndarray, np.ndarray]]:
    """Lower/upper bounds of each stacked column with a wiggle baseline.

    ``stack`` holds one row per x value and one column per series. The
    baseline starts at zero and moves between consecutive rows so that the
    weighted slope of the layers is minimised.
    """
    values = stack.to_numpy(dtype=float)
    m = values.shape[0]
    baseline = np.zeros(m)

    for j in range(1, m):
        current = values[j]
        delta = current - values[j - 1]
        below = np.cumsum(delta) - delta
        s1 = current.sum()
        s2 = ((delta / 2 + below) * current).sum()
        baseline[j] = baseline[j - 1] - (s2 / s1 if s1 else 0.0)

    layers = {}
    lower = baseline.copy()
    for i, key in enumerate(stack.columns):
        upper = lower + values[:, i]
        layers[key] = (lower, upper)
        lower = upper
    return layers


# ============================================
# CHORD LAYOUT
# ============================================

@dataclass(frozen=True)
class ChordGroup:
    index: int
    start: float
    end: float
    value: float


@dataclass(frozen=True)
class ChordEnd:
    index: int
    subindex: int
    start: float
    end: float
    value: float


@dataclass(frozen=True)
class Chord:
    source: ChordEnd
    target: ChordEnd


def chord_layout(matrix: Sequence[Sequence[float]], pad_angle: float = 0.05) -> Tuple[List[ChordGroup], List[Chord]]:
    """Circular layout of a square flow matrix.

    Each group gets an arc proportional to its row sum, separated by
    ``pad_angle``. Subgroups inside a group are ordered by descending value.
    A chord is emitted for every pair with flow in either direction, with the
    larger end as source.
    """
    n = len(matrix)
    sums = [float(sum(row)) for row in matrix]
    total = sum(sums)

    k = max(0.0, TAU - pad_angle * n) / total if total else 0.0
    dx = pad_angle if k else TAU / max(n, 1)

    subgroups = {}
    groups = []
    x = 0.0
    for i in range(n):
        x0 = x
        order = sorted(range(n), key=lambda j: -matrix[i][j])
        for j in order:
            value = float(matrix[i][j])
            a0 = x
            x += value * k
            subgroups[(i, j)] = ChordEnd(i, j, a0, x, value)
        groups.append(ChordGroup(i, x0, x, sums[i]))
        x += dx

    chords = []
    for i in range(n):
        for j in range(i, n):
            source = subgroups[(i, j)]
            target = subgroups[(j, i)]
            if source.value or target.value:
                if source.value < target.value:
                    source, target = target, source
                chords.append(Chord(source, target))
    return groups, chords


def polar(radius: float, angle: float) -> Tuple[float, float]:
    return radius * math.sin(angle), radius * math.cos(angle)


def _arc(radius: float, a0: float, a1: float, steps: int) -> List[Tuple[float, float]]:
    n = max(2, int(steps * abs(a1 - a0) / TAU) + 2)
    return [polar(radius, a) for a in np.linspace(a0, a1, n)]


def _quadratic(p0, control, p1, steps: int = 24) -> List[Tuple[float, float]]:
    pts = []
    for t in np.linspace(0, 1, steps):
        u = 1 - t
        pts.append((
            u * u * p0[0] + 2 * u * t * control[0] + t * t * p1[0],
            u * u * p0[1] + 2 * u * t * control[1] + t * t * p1[1],
        ))
    return pts


def arc_points(inner: float, outer: float, a0: float, a1: float, steps: int = 120) -> Tuple[List[float], List[float]]:
    """Closed polygon of an annular sector."""
    pts = _arc(outer, a0, a1, steps) + _arc(inner, a1, a0, steps)
    pts.append(pts[0])
    xs, ys = zip(*pts)
    return list(xs), list(ys)


def ribbon_points(chord: Chord, radius: float, steps: int = 120) -> Tuple[List[float], List[float]]:
    """Closed polygon of a chord ribbon, curving through the centre."""
    s, t = chord.source, chord.target
    centre = (0.0, 0.0)
    source_arc = _arc(radius, s.start, s.end, steps)
    target_arc = _arc(radius, t.start, t.end, steps)
    pts = list(source_arc)
    if (s.start, s.end) != (t.start, t.end):
        pts += _quadratic(source_arc[-1], centre, target_arc[0])
        pts += target_arc
    pts += _quadratic(pts[-1], centre, source_arc[0])
    xs, ys = zip(*pts)
    return list(xs), list(ys)
