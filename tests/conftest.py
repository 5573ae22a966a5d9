"""Shared fixtures for the dashboard tests."""
from __future__ import annotations

from pathlib import Path

import pytest

from salary_viz.config import get_settings
from salary_viz.data import Record, frame_from_records, load_records

SAMPLE_CSV = Path(__file__).resolve().parent.parent / "data" / "ds_salaries.csv"


@pytest.fixture
def scenario():
    """The three-row dataset used throughout the examples."""
    return frame_from_records([
        Record(2020, "EN", 50000, 0, "S"),
        Record(2020, "SE", 120000, 100, "L"),
        Record(2021, "MI", 80000, 50, "M"),
    ])


@pytest.fixture
def sample():
    """The bundled 36-row sample of ds_salaries.csv."""
    return load_records(SAMPLE_CSV)


@pytest.fixture
def settings(tmp_path):
    return get_settings(data_path=SAMPLE_CSV)


@pytest.fixture
def write_csv(tmp_path):
    """Write CSV text to a temporary file and return its path."""
    def _write(text: str, name: str = "salaries.csv") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write
