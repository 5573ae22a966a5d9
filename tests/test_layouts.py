"""Tests for panel geometry, histogram bins, stream offsets and the chord layout."""
from __future__ import annotations

import math

import numpy as np
import pandas as pd
import pytest

from salary_viz.layouts import (
    MIN_HEIGHT, TAU, arc_points, chord_layout, nice_domain, panel_sizes,
    ribbon_points, salary_bins, tick_increment, wiggle_offsets,
)


def test_summary_panels() -> None:
    regions = panel_sizes("summary", 1000, 800)

    assert regions["histogram"].h == pytest.approx(240)
    assert regions["histogram"].w == 1000
    assert regions["stream"].w == regions["sankey"].w == 500
    assert regions["sankey"].x == 500
    assert regions["stream"].h == pytest.approx(560)


def test_overview_and_focus_panels() -> None:
    assert panel_sizes("overview", 1000, 800)["main"].h == 700

    focus = panel_sizes("focus", 1000, 800)
    assert focus["chord"].h == pytest.approx(320)
    assert focus["sankey"].y == pytest.approx(320)
    assert focus["sankey"].h == pytest.approx(480)


def test_panels_are_clamped() -> None:
    regions = panel_sizes("summary", 10, 10)
    assert all(r.h >= MIN_HEIGHT for r in regions.values())


def test_unknown_panel_kind() -> None:
    with pytest.raises(ValueError):
        panel_sizes("dashboard", 100, 100)


def test_tick_increment() -> None:
    assert tick_increment(0, 100, 10) == 10
    assert tick_increment(0, 1, 40) == pytest.approx(0.02)
    assert tick_increment(0, 70000, 40) == 2000


def test_nice_domain() -> None:
    assert nice_domain(5, 95) == (0, 100)
    assert nice_domain(50000, 120000) == (50000, 120000)
    assert nice_domain(3, 3) == (3, 3)


def test_salary_bins() -> None:
    edges, counts = salary_bins([50000, 120000, 80000])

    assert edges[0] == 50000
    assert edges[-1] == 120000
    assert len(edges) == 36
    assert np.allclose(np.diff(edges), 2000)
    assert counts.sum() == 3
    # the maximum lands in the last bin
    assert counts[-1] == 1


def test_salary_bins_cover_sample(sample) -> None:
    edges, counts = salary_bins(sample["salary"])

    assert counts.sum() == len(sample)
    assert edges[0] <= sample["salary"].min()
    assert edges[-1] >= sample["salary"].max()
    assert np.all(np.diff(edges) > 0)


def test_salary_bins_degenerate() -> None:
    edges, counts = salary_bins([42000, 42000])
    assert list(counts) == [2]

    edges, counts = salary_bins([])
    assert len(edges) == 0 and len(counts) == 0


def test_wiggle_single_series() -> None:
    stack = pd.DataFrame({"A": [2, 4]}, index=[2020, 2021])
    lower, upper = wiggle_offsets(stack)["A"]

    assert list(lower) == [0, -1]
    assert list(upper) == [2, 3]


def test_wiggle_layers_are_contiguous() -> None:
    stack = pd.DataFrame(
        {"EN": [1, 3, 2], "MI": [4, 0, 5], "SE": [2, 2, 9], "EX": [0, 1, 1]},
        index=[2020, 2021, 2022],
    )
    layers = wiggle_offsets(stack)

    assert layers["EN"][0][0] == 0
    for below, above in zip(stack.columns, stack.columns[1:]):
        assert np.allclose(layers[below][1], layers[above][0])
    for key in stack.columns:
        lower, upper = layers[key]
        assert np.allclose(upper - lower, stack[key].to_numpy())


def test_chord_layout_two_groups() -> None:
    groups, chords = chord_layout([[0, 3], [3, 0]], pad_angle=0.05)
    k = (TAU - 0.1) / 6

    assert groups[0].start == 0
    assert groups[0].end == pytest.approx(3 * k)
    assert groups[1].start == pytest.approx(3 * k + 0.05)
    assert groups[1].end + 0.05 == pytest.approx(TAU)
    assert len(chords) == 1
    assert chords[0].source.value == chords[0].target.value == 3
    assert {chords[0].source.index, chords[0].target.index} == {0, 1}


def test_chord_layout_sorts_subgroups_descending() -> None:
    groups, chords = chord_layout([[0, 1, 5], [1, 0, 0], [5, 0, 0]])
    by_pair = {(c.source.index, c.target.index): c for c in chords}
    big = by_pair.get((0, 2)) or by_pair[(2, 0)]
    small = by_pair.get((0, 1)) or by_pair[(1, 0)]

    def end_in_zero(c):
        return c.source if c.source.index == 0 else c.target

    # the larger subgroup comes first within group 0
    assert end_in_zero(big).start == groups[0].start
    assert end_in_zero(small).start == pytest.approx(end_in_zero(big).end)


def test_chord_layout_empty_matrix() -> None:
    groups, chords = chord_layout([[0, 0], [0, 0]])

    assert chords == []
    assert all(g.start == g.end for g in groups)


def test_arc_points_closed() -> None:
    xs, ys = arc_points(1.0, 1.2, 0, math.pi / 2)

    assert (xs[0], ys[0]) == (xs[-1], ys[-1])
    # starts at twelve o'clock on the outer radius
    assert xs[0] == pytest.approx(0)
    assert ys[0] == pytest.approx(1.2)


def test_ribbon_points_return_to_start() -> None:
    _, chords = chord_layout([[0, 3], [3, 0]])
    xs, ys = ribbon_points(chords[0], 1.0)

    assert xs[-1] == pytest.approx(xs[0])
    assert ys[-1] == pytest.approx(ys[0])
    assert max(math.hypot(x, y) for x, y in zip(xs, ys)) == pytest.approx(1.0)
