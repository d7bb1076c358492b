#!/usr/bin/env python
"""
clean_data.py - Cleaning step for the NYPD shooting incident report

Projects the loaded incident table to the columns the report uses and
imputes the perpetrator demographics.

METHODOLOGY:
    - Perpetrator age group / sex / race are missing for most incidents
      (no arrest, no description). Missing, empty, and the source's own
      "(null)" marker are replaced by an explicit "UNKNOWN" category so
      every row stays in the perpetrator summaries.
    - Victim fields, borough, and the murder flag are NOT imputed. Each
      analysis decides for itself whether to drop or keep missing values
      (see processing/aggregate.py MissingPolicy).
    - No rows are dropped here.

Usage:
    from nypd_shootings.processing.clean_data import clean_incidents
    clean = clean_incidents(raw)
"""

from __future__ import annotations

import logging

import pandas as pd

from nypd_shootings.settings import MISSING_SENTINEL

log = logging.getLogger(__name__)

RELEVANT_COLUMNS = [
    "occur_date",
    "occur_time",
    "borough",
    "precinct",
    "is_murder",
    "perp_age_group",
    "perp_sex",
    "perp_race",
    "vic_age_group",
    "vic_sex",
    "vic_race",
]

PERP_COLUMNS = ["perp_age_group", "perp_sex", "perp_race"]

# Values the source uses in place of a real missing marker
NULL_MARKERS = ("", "(null)")


def is_missing(values: pd.Series, null_markers: tuple[str, ...] = NULL_MARKERS) -> pd.Series:
    """Boolean mask: NaN/None or one of the source's null markers (whitespace ignored)."""
    markers = values.astype("string").str.strip().isin(null_markers).fillna(False)
    return (values.isna() | markers).astype(bool)


def clean_incidents(
    df: pd.DataFrame,
    sentinel: str = MISSING_SENTINEL,
    null_markers: tuple[str, ...] = NULL_MARKERS,
) -> pd.DataFrame:
    """
    Select the report columns and fill missing perpetrator values.

    Args:
        df: Loaded incident table (normalized column names)
        sentinel: Category used for missing perpetrator values
        null_markers: String values treated as missing in perpetrator columns

    Returns:
        New DataFrame; the input is left untouched
    """
    missing_cols = [c for c in RELEVANT_COLUMNS if c not in df.columns]
    if missing_cols:
        raise ValueError(f"Cannot clean incidents, missing columns: {missing_cols}")

    out = df[RELEVANT_COLUMNS].copy()

    for col in PERP_COLUMNS:
        values = out[col]
        missing = is_missing(values, null_markers)
        n_missing = int(missing.sum())
        out[col] = values.astype(object).where(~missing, sentinel)
        log.info(f"  {col}: {n_missing:,} missing -> '{sentinel}' ({n_missing / max(len(out), 1) * 100:.1f}%)")

    log.info(f"Cleaned {len(out):,} rows x {len(out.columns)} columns")
    return out


def missingness(df: pd.DataFrame, columns: list[str] | None = None) -> pd.DataFrame:
    """
    Share of missing values per column (data-quality overview).

    Empty strings and "(null)" count as missing, same as in clean_incidents.
    """
    columns = columns or [c for c in RELEVANT_COLUMNS if c in df.columns]
    total = len(df)

    rows = []
    for col in columns:
        n_missing = int(is_missing(df[col]).sum())
        rows.append({
            "column": col,
            "n_missing": n_missing,
            "pct_missing": round(n_missing / total * 100, 1) if total else 0.0,
        })

    return (
        pd.DataFrame(rows, columns=["column", "n_missing", "pct_missing"])
        .sort_values("n_missing", ascending=False, kind="stable")
        .reset_index(drop=True)
    )
