"""
time_bins.py - Day-of-week x hour-of-day incident counts

Dates arrive as "MM/DD/YYYY", times as "HH:MM:SS". Rows where either part
is missing or does not parse are skipped, never fatal.
"""

from __future__ import annotations

import logging

import pandas as pd

log = logging.getLogger(__name__)

DATETIME_FORMAT = "%m/%d/%Y %H:%M:%S"
DATE_FORMAT = "%m/%d/%Y"

DAY_ORDER = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def hour_label(hour: int) -> str:
    """12-hour clock label: 0 -> "12 AM", 12 -> "12 PM", 13 -> "01 PM"."""
    if not 0 <= hour <= 23:
        raise ValueError(f"Hour out of range: {hour}")
    suffix = "AM" if hour < 12 else "PM"
    return f"{(hour % 12) or 12:02d} {suffix}"


# Midnight first when read top to bottom
HOUR_LABEL_ORDER = [hour_label(h) for h in range(24)]


def parse_occurrence(df: pd.DataFrame) -> pd.Series:
    """Combine occur_date + occur_time into timestamps; unparseable rows become NaT."""
    dates = df["occur_date"].astype("string").str.strip()
    times = df["occur_time"].astype("string").str.strip()
    return pd.to_datetime(dates + " " + times, format=DATETIME_FORMAT, errors="coerce")


def parse_dates(dates: pd.Series) -> pd.Series:
    return pd.to_datetime(dates.astype("string").str.strip(), format=DATE_FORMAT, errors="coerce")


def bin_by_weekday_hour(df: pd.DataFrame) -> pd.DataFrame:
    """
    Count incidents per (day of week, hour of day).

    Returns:
        DataFrame with columns [day_of_week, hour, hour_label, count], one
        row per non-empty cell, ordered Monday..Sunday and 12 AM..11 PM.
        Cells without incidents are absent (count 0).
    """
    ts = parse_occurrence(df)

    n_skipped = int(ts.isna().sum())
    if n_skipped:
        log.warning(f"Skipped {n_skipped:,} rows with missing/unparseable date or time")

    ts = ts.dropna()

    binned = pd.DataFrame({
        "day_of_week": ts.dt.day_name(),
        "day_idx": ts.dt.dayofweek,
        "hour": ts.dt.hour,
    })

    counts = (
        binned.groupby(["day_idx", "day_of_week", "hour"])
        .size()
        .rename("count")
        .reset_index()
        .sort_values(["day_idx", "hour"], kind="stable")
    )

    counts["hour"] = counts["hour"].astype(int)
    counts["hour_label"] = counts["hour"].map(hour_label)
    counts["count"] = counts["count"].astype(int)

    log.info(f"Binned {len(ts):,} incidents into {len(counts)} of {7 * 24} weekday-hour cells")
    return counts[["day_of_week", "hour", "hour_label", "count"]].reset_index(drop=True)


def to_matrix(counts: pd.DataFrame) -> pd.DataFrame:
    """Dense 24 x 7 view (rows: hour labels, columns: days), empty cells filled with 0."""
    return (
        counts.pivot_table(index="hour_label", columns="day_of_week", values="count", aggfunc="sum")
        .reindex(index=HOUR_LABEL_ORDER, columns=DAY_ORDER)
        .fillna(0)
        .astype(int)
    )
