"""
outcomes.py - Incidents per year and outcome (murder / non-murder)
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from nypd_shootings.processing.time_bins import parse_dates
from nypd_shootings.settings import DATASET_START_YEAR

log = logging.getLogger(__name__)

MURDER = "Murder"
NON_MURDER = "Non-Murder"

# Stacking order for charts: Non-Murder at the bottom
OUTCOME_STACK_ORDER = [NON_MURDER, MURDER]


def last_complete_year(dates: pd.Series) -> int:
    """
    Most recent calendar year fully covered by ``dates``.

    The dataset is published in yearly releases, so the latest year counts
    as complete once it has incidents in December. A release cut off in
    the middle of December is therefore treated as complete; a year whose
    data stops earlier is not.
    """
    latest = dates.dropna().max()
    if pd.isna(latest):
        raise ValueError("No valid dates to derive the last complete year from")
    if latest.month == 12:
        return int(latest.year)
    return int(latest.year) - 1


def empty_outcome_counts() -> pd.DataFrame:
    """Year/outcome table without rows, same columns and dtypes as count_outcomes_by_year."""
    return pd.DataFrame({
        "year": pd.Series(dtype=int),
        "outcome": pd.Series(dtype=object),
        "count": pd.Series(dtype=int),
    })


def count_outcomes_by_year(
    df: pd.DataFrame,
    start_year: int = DATASET_START_YEAR,
    end_year: int | None = None,
) -> pd.DataFrame:
    """
    Count incidents per (year, outcome) within [start_year, end_year].

    Rows without a murder flag or with an unparseable date are excluded;
    they never become a third outcome.

    Returns:
        DataFrame with columns [year, outcome, count] ordered by year, then
        Murder before Non-Murder.
    """
    dates = parse_dates(df["occur_date"])

    if end_year is None:
        end_year = last_complete_year(dates)

    if start_year > end_year:
        raise ValueError(f"start_year ({start_year}) is after end_year ({end_year})")

    flag = df["is_murder"].astype("boolean")
    keep = dates.notna() & flag.notna().to_numpy()

    n_excluded = int((~keep).sum())
    if n_excluded:
        log.info(f"  Excluded {n_excluded:,} rows with missing outcome or date")

    years = dates[keep].dt.year.astype(int)
    outcome = np.where(flag[keep].to_numpy(dtype=bool), MURDER, NON_MURDER)

    framed = pd.DataFrame({"year": years, "outcome": outcome}, index=years.index)
    framed = framed[framed["year"].between(start_year, end_year)]

    counts = (
        framed.groupby(["year", "outcome"])
        .size()
        .rename("count")
        .reset_index()
        .sort_values(["year", "outcome"], kind="stable")
        .reset_index(drop=True)
    )
    counts["count"] = counts["count"].astype(int)

    log.info(f"Outcome counts {start_year}-{end_year}: {int(counts['count'].sum()):,} incidents")
    return counts


def murder_share_by_year(counts: pd.DataFrame) -> pd.DataFrame:
    """Add per-year totals and the share of incidents that were murders."""
    if counts.empty:
        return pd.DataFrame(columns=["year", MURDER, NON_MURDER, "total", "murder_share"])

    wide = (
        counts.pivot_table(index="year", columns="outcome", values="count", aggfunc="sum")
        .reindex(columns=[MURDER, NON_MURDER])
        .fillna(0)
        .astype(int)
    )
    wide["total"] = wide[MURDER] + wide[NON_MURDER]
    wide["murder_share"] = (wide[MURDER] / wide["total"]).round(3)
    wide.columns.name = None
    return wide.reset_index()
