"""
Loading of the ds_salaries CSV into a tidy record frame.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterable, Mapping

import pandas as pd

logger = logging.getLogger(__name__)

# CSV column -> frame column
COLUMNS = {
    'work_year': 'year',
    'experience_level': 'exp',
    'salary_in_usd': 'salary',
    'remote_ratio': 'remote',
    'company_size': 'size',
}
NUMERIC = ['year', 'salary', 'remote']


class DataLoadError(Exception):
    """The salary CSV is missing or cannot be parsed."""


@dataclass(frozen=True)
class Record:
    year: int
    experience_level: str
    salary: float
    remote_ratio: int
    company_size: str

    @classmethod
    def from_row(cls, row: Mapping[str, str]) -> "Record":
        return cls(
            year=int(row['work_year']),
            experience_level=row['experience_level'],
            salary=float(row['salary_in_usd']),
            remote_ratio=int(row['remote_ratio']),
            company_size=row['company_size'],
        )


def frame_from_records(records: Iterable[Record]) -> pd.DataFrame:
    """Build the record frame (year, exp, salary, remote, size) from records."""
    rows = [asdict(r) for r in records]
    df = pd.DataFrame(rows, columns=['year', 'experience_level', 'salary',
                                     'remote_ratio', 'company_size'])
    df = df.rename(columns={
        'experience_level': 'exp',
        'remote_ratio': 'remote',
        'company_size': 'size',
    })
    return _coerce(df)


def load_records(path) -> pd.DataFrame:
    """Read the salary CSV at ``path``.

    Raises DataLoadError when the file is unreachable, unparsable, misses one
    of the required columns, or holds blank or non-numeric year/salary/remote
    values.
    Unknown experience or company-size codes are kept as-is.
    """
    path = Path(path)
    try:
        raw = pd.read_csv(path)
    except FileNotFoundError as e:
        raise DataLoadError(f"data file not found: {path}") from e
    except OSError as e:
        raise DataLoadError(f"cannot read {path}: {e}") from e
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise DataLoadError(f"could not parse {path}: {e}") from e

    missing = [c for c in COLUMNS if c not in raw.columns]
    if missing:
        raise DataLoadError(f"{path} is missing required columns: {missing}")

    df = raw[list(COLUMNS)].rename(columns=COLUMNS)
    try:
        df = _coerce(df)
    except (TypeError, ValueError) as e:
        raise DataLoadError(f"malformed values in {path}: {e}") from e

    logger.info("Loaded %d salary records from %s", len(df), path)
    return df


def _coerce(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    for col in NUMERIC:
        df[col] = pd.to_numeric(df[col], errors='raise')
    blank = [col for col in NUMERIC if df[col].isna().any()]
    if blank:
        raise ValueError(f"blank values in {blank}")
    df['year'] = df['year'].astype(int)
    df['remote'] = df['remote'].astype(int)
    df['salary'] = df['salary'].astype(float)
    df['exp'] = df['exp'].astype(str).str.strip()
    df['size'] = df['size'].astype(str).str.strip()
    return df.reset_index(drop=True)
