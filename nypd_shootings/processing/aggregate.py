"""
aggregate.py - Group counts for one categorical dimension

Every call works on exactly one column. Whether missing values count as
their own category or are excluded is always passed in explicitly.
"""

from __future__ import annotations

import logging
from enum import Enum

import pandas as pd

from nypd_shootings.processing.clean_data import is_missing
from nypd_shootings.settings import TOP_N_PRECINCTS

log = logging.getLogger(__name__)


class MissingPolicy(str, Enum):
    KEEP = "keep"   # missing values are counted as their own category
    DROP = "drop"   # rows with a missing value (NaN, "", "(null)") are excluded from counts and denominator


def count_by(
    df: pd.DataFrame,
    column: str,
    missing: MissingPolicy,
    sort: bool = True,
    top_n: int | None = None,
) -> pd.DataFrame:
    """
    Count incidents per distinct value of ``column``.

    Args:
        df: Incident table
        column: Dimension to group by
        missing: MissingPolicy.KEEP or MissingPolicy.DROP
        sort: Sort descending by count (stable, ties keep first-seen order)
        top_n: Keep only the first n rows after sorting

    Returns:
        DataFrame with columns [column, "count", "percent"]. percent is
        rounded to one decimal and always relative to every row that was
        considered, also when top_n truncates the table.
    """
    if column not in df.columns:
        raise KeyError(f"Column not found: {column}")

    missing = MissingPolicy(missing)
    values = df[column]

    if missing is MissingPolicy.DROP:
        missing_mask = is_missing(values)
        n_dropped = int(missing_mask.sum())
        values = values[~missing_mask]
        if n_dropped:
            log.info(f"  {column}: excluded {n_dropped:,} rows with missing values")

    total = len(values)

    # groupby(sort=False) keeps first-encounter order, the stable sort below preserves it for ties
    counts = (
        values.to_frame(column)
        .groupby(column, sort=False, dropna=False)
        .size()
        .rename("count")
        .reset_index()
    )

    if sort:
        counts = counts.sort_values("count", ascending=False, kind="stable")

    if top_n is not None:
        counts = counts.head(top_n)

    counts["count"] = counts["count"].astype(int)
    counts["percent"] = (counts["count"] / total * 100).round(1) if total else 0.0

    return counts.reset_index(drop=True)


def top_precincts(
    df: pd.DataFrame,
    n: int = TOP_N_PRECINCTS,
    missing: MissingPolicy = MissingPolicy.DROP,
) -> pd.DataFrame:
    """The n precincts with the most incidents, descending."""
    return count_by(df, "precinct", missing=missing, sort=True, top_n=n)
