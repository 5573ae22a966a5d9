"""
Pure reductions of the record frame used by the charts.

None of these functions mutate their input, and all of them are independent
of row order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .config import LEVELS, SIZES


@dataclass(frozen=True)
class YearAggregate:
    year: int
    count: int
    mean: float
    median: float
    min: float
    max: float


@dataclass(frozen=True)
class FlowNode:
    id: str
    name: str
    group: str  # exp, size or rem


@dataclass(frozen=True)
class FlowLink:
    source: str
    target: str
    value: int


@dataclass
class FlowGraph:
    nodes: List[FlowNode] = field(default_factory=list)
    links: List[FlowLink] = field(default_factory=list)

    def index(self) -> Dict[str, int]:
        return {node.id: i for i, node in enumerate(self.nodes)}

    def outflow(self, node_id: str) -> int:
        return sum(link.value for link in self.links if link.source == node_id)


def aggregate_by_year(records: pd.DataFrame) -> List[YearAggregate]:
    """Salary statistics per year present, ascending by year."""
    if len(records) == 0:
        raise ValueError("aggregate_by_year needs at least one record")

    stats = (
        records.groupby('year')['salary']
        .agg(['count', 'mean', 'median', 'min', 'max'])
        .sort_index()
    )
    return [
        YearAggregate(
            year=int(year),
            count=int(row['count']),
            mean=float(row['mean']),
            median=float(row['median']),
            min=float(row['min']),
            max=float(row['max']),
        )
        for year, row in stats.iterrows()
    ]


def count_by_two_keys(records: pd.DataFrame, key_a: str, key_b: str) -> Dict[Tuple, int]:
    """Co-occurrence counts of (key_a, key_b) values, zero counts omitted."""
    if len(records) == 0:
        return {}
    counts = records.groupby([key_a, key_b]).size()
    return {
        (_plain(a), _plain(b)): int(n)
        for (a, b), n in counts.items()
        if n > 0
    }


def stack_by_year_and_level(records: pd.DataFrame) -> pd.DataFrame:
    """Head counts per year (rows) and experience level (columns), zero-filled."""
    known = records[records['exp'].isin(LEVELS)]
    years = sorted(records['year'].unique())
    table = pd.crosstab(known['year'], known['exp'])
    return table.reindex(index=years, columns=LEVELS, fill_value=0).astype(int)


def build_flow_graph(records: pd.DataFrame, levels: Optional[Sequence[str]] = None,
                     remote_label: str = "{}% Remote") -> FlowGraph:
    """Experience -> company size -> remote ratio flow graph.

    Experience nodes follow ``levels`` (every level by default), size nodes
    the S/M/L order, remote nodes the ratios present in ascending order. Rows
    with unknown experience or size codes match no node and add no flow.
    Remote node names are ``remote_label`` formatted with the ratio.
    """
    exps = list(levels) if levels is not None else list(LEVELS)
    sizes = [s for s in SIZES if s in set(records['size'])]
    remotes = sorted(int(r) for r in records['remote'].unique())

    nodes = (
        [FlowNode(f"e_{e}", e, 'exp') for e in exps]
        + [FlowNode(f"s_{s}", f"Size {s}", 'size') for s in sizes]
        + [FlowNode(f"r_{r}", remote_label.format(r), 'rem') for r in remotes]
    )

    links = []
    exp_size = count_by_two_keys(records, 'exp', 'size')
    for e in exps:
        for s in sizes:
            value = exp_size.get((e, s), 0)
            if value > 0:
                links.append(FlowLink(f"e_{e}", f"s_{s}", value))

    size_remote = count_by_two_keys(records[records['exp'].isin(exps)], 'size', 'remote')
    for s in sizes:
        for r in remotes:
            value = size_remote.get((s, r), 0)
            if value > 0:
                links.append(FlowLink(f"s_{s}", f"r_{r}", value))

    return FlowGraph(nodes=nodes, links=links)


def chord_matrix(records: pd.DataFrame) -> Tuple[List[str], List[List[int]]]:
    """Symmetric experience/size adjacency matrix for the chord layout.

    Each record increments both [level][size] and [size][level].
    """
    categories = LEVELS + SIZES
    n = len(categories)
    matrix = [[0] * n for _ in range(n)]
    for (exp, size), count in count_by_two_keys(records, 'exp', 'size').items():
        if exp not in LEVELS or size not in SIZES:
            continue
        i = LEVELS.index(exp)
        j = len(LEVELS) + SIZES.index(size)
        matrix[i][j] += count
        matrix[j][i] += count
    return categories, matrix


def bar_opacity(raw: pd.DataFrame, filtered: pd.DataFrame) -> Dict[int, float]:
    """Opacity per year, proportional to the share of the year kept by a filter."""
    totals = raw.groupby('year').size()
    kept = filtered.groupby('year').size().reindex(totals.index, fill_value=0)
    return {
        int(year): 0.3 + 0.7 * (int(kept[year]) / int(total))
        for year, total in totals.items()
    }


def _plain(value):
    # numpy scalars -> python scalars, so keys compare and serialise cleanly
    return value.item() if hasattr(value, 'item') else value
