"""Tests for the aggregation functions."""
from __future__ import annotations

import pytest

from salary_viz.aggregate import (
    FlowLink, YearAggregate, aggregate_by_year, bar_opacity, build_flow_graph,
    chord_matrix, count_by_two_keys, stack_by_year_and_level,
)
from salary_viz.data import Record, frame_from_records


def test_aggregate_by_year_scenario(scenario) -> None:
    assert aggregate_by_year(scenario) == [
        YearAggregate(year=2020, count=2, mean=85000, median=85000, min=50000, max=120000),
        YearAggregate(year=2021, count=1, mean=80000, median=80000, min=80000, max=80000),
    ]


def test_aggregate_by_year_bounds(sample) -> None:
    """One aggregate per year present, each with min <= median, mean <= max."""
    aggregates = aggregate_by_year(sample)

    assert [a.year for a in aggregates] == sorted(sample["year"].unique())
    assert sum(a.count for a in aggregates) == len(sample)
    for a in aggregates:
        assert a.min <= a.median <= a.max
        assert a.min <= a.mean <= a.max


def test_aggregate_by_year_is_order_independent(sample) -> None:
    shuffled = sample.sample(frac=1, random_state=7)
    assert aggregate_by_year(shuffled) == aggregate_by_year(sample)


def test_aggregate_by_year_odd_and_even_median() -> None:
    df = frame_from_records([
        Record(2022, "SE", 10, 0, "S"),
        Record(2022, "SE", 20, 0, "S"),
        Record(2022, "SE", 90, 0, "S"),
        Record(2023, "SE", 10, 0, "S"),
        Record(2023, "SE", 20, 0, "S"),
        Record(2023, "SE", 30, 0, "S"),
        Record(2023, "SE", 100, 0, "S"),
    ])
    medians = {a.year: a.median for a in aggregate_by_year(df)}

    assert medians == {2022: 20, 2023: 25}


def test_aggregate_by_year_skips_absent_years() -> None:
    """Years missing from the input are never enumerated."""
    df = frame_from_records([Record(2020, "EN", 1, 0, "S"), Record(2023, "EN", 3, 0, "S")])
    assert [a.year for a in aggregate_by_year(df)] == [2020, 2023]


def test_aggregate_by_year_empty_raises(scenario) -> None:
    with pytest.raises(ValueError):
        aggregate_by_year(scenario.iloc[0:0])


def test_count_by_two_keys(scenario) -> None:
    counts = count_by_two_keys(scenario, "exp", "size")

    assert counts == {("EN", "S"): 1, ("SE", "L"): 1, ("MI", "M"): 1}
    assert all(n > 0 for n in counts.values())


def test_count_by_two_keys_empty(scenario) -> None:
    assert count_by_two_keys(scenario.iloc[0:0], "exp", "size") == {}


def test_count_by_two_keys_does_not_mutate(sample) -> None:
    before = sample.copy()
    count_by_two_keys(sample, "size", "remote")
    assert sample.equals(before)


def test_stack_by_year_and_level_zero_fills(scenario) -> None:
    stack = stack_by_year_and_level(scenario)

    assert list(stack.columns) == ["EN", "MI", "SE", "EX"]
    assert list(stack.index) == [2020, 2021]
    assert stack.loc[2020].tolist() == [1, 0, 1, 0]
    assert stack.loc[2021].tolist() == [0, 1, 0, 0]


def test_flow_graph_for_one_year(scenario) -> None:
    graph = build_flow_graph(scenario[scenario["year"] == 2020])
    exp_size = [l for l in graph.links if l.source.startswith("e_")]

    assert exp_size == [FlowLink("e_EN", "s_S", 1), FlowLink("e_SE", "s_L", 1)]


def test_flow_graph_keeps_unlinked_levels(scenario) -> None:
    graph = build_flow_graph(scenario[scenario["year"] == 2020])
    ids = [n.id for n in graph.nodes]

    assert ids[:4] == ["e_EN", "e_MI", "e_SE", "e_EX"]
    assert graph.outflow("e_MI") == 0
    assert all(l.value > 0 for l in graph.links)


def test_flow_graph_outflow_matches_counts(sample) -> None:
    """Flow leaving a category equals the number of records carrying it."""
    graph = build_flow_graph(sample)

    for level, n in sample["exp"].value_counts().items():
        assert graph.outflow(f"e_{level}") == n
    for size, n in sample["size"].value_counts().items():
        assert graph.outflow(f"s_{size}") == n


def test_flow_graph_restricted_levels(sample) -> None:
    senior = sample[sample["exp"] == "SE"]
    graph = build_flow_graph(senior, levels=["SE"])

    assert [n.id for n in graph.nodes if n.group == "exp"] == ["e_SE"]
    assert sum(l.value for l in graph.links if l.source == "e_SE") == len(senior)


def test_flow_graph_drops_unknown_categories() -> None:
    df = frame_from_records([
        Record(2020, "XX", 1000, 0, "S"),
        Record(2020, "EN", 2000, 0, "Q"),
        Record(2020, "EN", 3000, 50, "M"),
    ])
    graph = build_flow_graph(df)

    assert graph.links == [FlowLink("e_EN", "s_M", 1), FlowLink("s_M", "r_50", 1)]


def test_chord_matrix_is_symmetric(sample) -> None:
    categories, matrix = chord_matrix(sample)

    assert categories == ["EN", "MI", "SE", "EX", "S", "M", "L"]
    for i in range(7):
        for j in range(7):
            assert matrix[i][j] == matrix[j][i]
    # each record is counted twice
    assert sum(map(sum, matrix)) == 2 * len(sample)


def test_chord_matrix_scenario(scenario) -> None:
    _, matrix = chord_matrix(scenario)

    assert matrix[0][4] == 1  # EN - S
    assert matrix[2][6] == 1  # SE - L
    assert matrix[1][5] == 1  # MI - M
    assert matrix[0][5] == 0


def test_bar_opacity(scenario) -> None:
    kept = scenario[scenario["salary"] >= 100000]
    opacity = bar_opacity(scenario, kept)

    assert opacity == {2020: pytest.approx(0.65), 2021: pytest.approx(0.3)}
    assert bar_opacity(scenario, scenario) == {2020: pytest.approx(1.0), 2021: pytest.approx(1.0)}
