#!/usr/bin/env python
"""
run_report.py - NYPD Shooting Incident Report

Runs the whole report once, in memory:

1. Load the incident CSV (cached download from NYC Open Data)
2. Clean: project columns, perpetrator fields missing -> "UNKNOWN"
3. Group counts: borough, top precincts, victim sex/race/age, perpetrator age/sex/race
4. Day-of-week x hour-of-day incident counts (heatmap)
5. Incidents per year and outcome (stacked bars)
6. Logistic regression P(murder | borough) (column bars)

OUTPUTS (data/processed/report/ by default):
    - one parquet mart per table (see settings.py)
    - weekday_hour_heatmap / year_outcome_stacked / murder_probability charts (.html, .json)
    - report_meta.json

MISSING VALUES:
    Each table states its own policy. Victim dimensions, precinct and the
    outcome drop missing values; borough and the (already imputed)
    perpetrator dimensions keep them as a category.

Usage:
    python -m nypd_shootings.report.run_report
    python -m nypd_shootings.report.run_report --source data/raw/local.csv --end-year 2023
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

import altair as alt
import pandas as pd

from nypd_shootings import settings
from nypd_shootings.data.download_shootings import ShootingDataLoader
from nypd_shootings.modeling.murder_probability import (
    PREDICTOR,
    ModelFitError,
    MurderModel,
    coefficient_table,
    fit_murder_model,
    predict_by_borough,
    prepare_model_data,
)
from nypd_shootings.processing.aggregate import MissingPolicy, count_by, top_precincts
from nypd_shootings.processing.clean_data import clean_incidents, missingness
from nypd_shootings.processing.outcomes import (
    count_outcomes_by_year,
    empty_outcome_counts,
    last_complete_year,
    murder_share_by_year,
)
from nypd_shootings.processing.time_bins import bin_by_weekday_hour, parse_dates
from nypd_shootings.report.charts import (
    murder_probability_bars,
    weekday_hour_heatmap,
    year_outcome_stacked_bar,
)
from nypd_shootings.report.sinks import ChartSink, TableSink
from nypd_shootings.settings import ReportConfig

log = logging.getLogger(__name__)

# (dimension, missing policy, table key, mart file, caption)
CATEGORICAL_SUMMARIES = [
    ("borough", MissingPolicy.KEEP, "borough_counts", settings.BOROUGH_COUNTS,
     "Shooting incidents by borough"),
    ("vic_sex", MissingPolicy.DROP, "vic_sex_counts", settings.VIC_SEX_COUNTS,
     "Victims by sex"),
    ("vic_race", MissingPolicy.DROP, "vic_race_counts", settings.VIC_RACE_COUNTS,
     "Victims by race"),
    ("vic_age_group", MissingPolicy.DROP, "vic_age_group_counts", settings.VIC_AGE_COUNTS,
     "Victims by age group"),
    ("perp_age_group", MissingPolicy.KEEP, "perp_age_group_counts", settings.PERP_AGE_COUNTS,
     "Perpetrators by age group"),
    ("perp_sex", MissingPolicy.KEEP, "perp_sex_counts", settings.PERP_SEX_COUNTS,
     "Perpetrators by sex"),
    ("perp_race", MissingPolicy.KEEP, "perp_race_counts", settings.PERP_RACE_COUNTS,
     "Perpetrators by race"),
]

TABLE_FILES = {key: file_name for _, _, key, file_name, _ in CATEGORICAL_SUMMARIES}
TABLE_FILES.update({
    "precinct_top": settings.PRECINCT_TOP,
    "missingness": settings.MISSINGNESS,
    "weekday_hour_counts": settings.WEEKDAY_HOUR,
    "year_outcome_counts": settings.YEAR_OUTCOME,
    "murder_share_by_year": settings.MURDER_SHARE,
    "murder_probability": settings.MODEL_PREDICTIONS,
    "murder_model_coefficients": settings.MODEL_COEFFICIENTS,
})

# Headers used when tables are logged
DISPLAY_HEADERS = {"count": "Incidents", "percent": "%"}


@dataclass
class Report:
    tables: dict[str, pd.DataFrame] = field(default_factory=dict)
    captions: dict[str, str] = field(default_factory=dict)
    charts: dict[str, alt.Chart] = field(default_factory=dict)
    meta: dict = field(default_factory=dict)
    model_error: str | None = None

    def add_table(self, key: str, table: pd.DataFrame, caption: str) -> None:
        self.tables[key] = table
        self.captions[key] = caption


def fit_report_model(clean: pd.DataFrame, config: ReportConfig) -> tuple[MurderModel, list[str]]:
    """
    Fit the murder model for the report.

    Unless config.abort_on_model_error is set, borough levels that make the
    fit undefined (single outcome class) are dropped and the model is refitted
    on the remaining levels.

    Returns:
        (model, dropped levels)
    """
    try:
        return fit_murder_model(clean, reference=config.model_reference), []
    except ModelFitError as e:
        if config.abort_on_model_error or not e.levels:
            raise
        dropped = e.levels
        log.warning(f"Murder model: dropping borough levels {dropped} ({e})")

    present = sorted(prepare_model_data(clean)[PREDICTOR].unique().tolist())
    levels = [level for level in present if level not in dropped]
    return fit_murder_model(clean, reference=config.model_reference, levels=levels), dropped


def build_report(raw: pd.DataFrame, config: ReportConfig | None = None) -> Report:
    """
    Derive every report table and chart from the loaded incident table.

    Pure with respect to ``raw``: nothing is written and the input is not
    modified, so running it twice on the same table gives identical output.

    Raises:
        ModelFitError: only if config.abort_on_model_error is set
    """
    config = config or ReportConfig()
    report = Report()

    log.info("=" * 70)
    log.info("CLEANING")
    log.info("=" * 70)
    clean = clean_incidents(raw, sentinel=config.sentinel)
    report.add_table("missingness", missingness(raw[clean.columns]),
                     "Missing values per column (before imputation)")

    log.info("=" * 70)
    log.info("GROUP COUNTS")
    log.info("=" * 70)
    for column, policy, key, _, caption in CATEGORICAL_SUMMARIES:
        report.add_table(key, count_by(clean, column, missing=policy), caption)

    report.add_table(
        "precinct_top",
        top_precincts(clean, n=config.top_n_precincts, missing=MissingPolicy.DROP),
        f"Top {config.top_n_precincts} precincts by shooting incidents",
    )

    log.info("=" * 70)
    log.info("TIME PATTERNS")
    log.info("=" * 70)
    weekday_hour = bin_by_weekday_hour(clean)
    report.add_table("weekday_hour_counts", weekday_hour, "Incidents by day of week and hour")
    report.charts["weekday_hour_heatmap"] = weekday_hour_heatmap(weekday_hour)

    end_year = config.end_year
    dates = parse_dates(clean["occur_date"])
    if end_year is None and dates.notna().any():
        end_year = last_complete_year(dates)

    outcome_meta = {"status": "ok"}
    if end_year is None or end_year < config.start_year:
        # No complete year inside the window (or no parseable date at all)
        reason = ("no parseable occurrence date" if end_year is None
                  else f"end year {end_year} is before start year {config.start_year}")
        log.warning(f"Year/outcome counts are empty: {reason}")
        outcome_meta = {"status": "empty", "reason": reason}
        year_outcome = empty_outcome_counts()
    else:
        year_outcome = count_outcomes_by_year(clean, start_year=config.start_year, end_year=end_year)
        report.charts["year_outcome_stacked"] = year_outcome_stacked_bar(year_outcome)

    report.add_table("year_outcome_counts", year_outcome,
                     f"Incidents per year by outcome ({config.start_year}-{end_year or '?'})")
    report.add_table("murder_share_by_year", murder_share_by_year(year_outcome),
                     "Share of incidents flagged as murder per year")

    log.info("=" * 70)
    log.info("MURDER PROBABILITY MODEL")
    log.info("=" * 70)
    model_meta = {"status": "ok"}
    try:
        model, dropped = fit_report_model(clean, config)
    except ModelFitError as e:
        if config.abort_on_model_error:
            raise
        log.warning(f"Murder model skipped: {e}")
        report.model_error = str(e)
        model_meta = {"status": "failed", "error": str(e)}
    else:
        predictions = predict_by_borough(model)
        report.add_table("murder_probability", predictions,
                         f"Predicted P(murder | borough), reference: {model.reference}")
        report.add_table("murder_model_coefficients", coefficient_table(model),
                         "Logistic regression coefficients (logit scale)")
        report.charts["murder_probability"] = murder_probability_bars(predictions)
        model_meta.update({
            "formula": model.formula,
            "reference": model.reference,
            "levels": model.levels,
            "dropped_levels": dropped,
            "n_obs": model.n_obs,
        })

    report.meta = {
        "n_rows": int(len(raw)),
        "start_year": int(config.start_year),
        "end_year": None if end_year is None else int(end_year),
        "top_n_precincts": int(config.top_n_precincts),
        "sentinel": config.sentinel,
        "year_outcome": outcome_meta,
        "model": model_meta,
        "tables": sorted(report.tables),
        "charts": sorted(report.charts),
    }
    return report


def publish(report: Report, tables: TableSink, charts: ChartSink) -> None:
    for key, table in report.tables.items():
        tables.render(table, report.captions[key], file_name=TABLE_FILES.get(key), columns=DISPLAY_HEADERS)
    for name, chart in report.charts.items():
        charts.render(chart, name)


def run_report(config: ReportConfig | None = None) -> Report:
    """Load, build, and publish the report into config.out_dir."""
    config = config or ReportConfig()

    log.info("=" * 70)
    log.info("NYPD SHOOTING INCIDENT REPORT")
    log.info("=" * 70)
    log.info(f"Source: {config.source}")
    log.info(f"Output: {config.out_dir}")

    raw = ShootingDataLoader(config.source).load(force=config.force_download)
    report = build_report(raw, config)

    out_dir = Path(config.out_dir)
    publish(report, TableSink(out_dir), ChartSink(out_dir))

    meta_path = out_dir / settings.REPORT_META
    meta_path.write_text(json.dumps(report.meta, indent=2))
    log.info(f"Saved: {meta_path}")

    log.info("=" * 70)
    log.info("REPORT COMPLETE")
    log.info("=" * 70)
    return report


def parse_args(argv: list[str] | None = None) -> ReportConfig:
    parser = argparse.ArgumentParser(
        description="Descriptive summaries and a murder-probability model for NYPD shooting incidents."
    )
    parser.add_argument(
        "--source",
        default=settings.SOURCE_URL,
        help="CSV URL or local path [default: NYC Open Data, or $NYPD_SHOOTINGS_URL]",
    )
    parser.add_argument("--out-dir", type=Path, default=settings.REPORT_DIR,
                        help=f"Output directory [default: {settings.REPORT_DIR}]")
    parser.add_argument("--start-year", type=int, default=settings.DATASET_START_YEAR,
                        help=f"First year of the outcome analysis [default: {settings.DATASET_START_YEAR}]")
    parser.add_argument("--end-year", type=int, default=None,
                        help="Last year of the outcome analysis [default: last complete year in the data]")
    parser.add_argument("--top-n", type=int, default=settings.TOP_N_PRECINCTS,
                        help=f"Number of precincts in the ranking [default: {settings.TOP_N_PRECINCTS}]")
    parser.add_argument("--sentinel", default=settings.MISSING_SENTINEL,
                        help=f"Label for missing perpetrator values [default: {settings.MISSING_SENTINEL}]")
    parser.add_argument("--reference", default=None,
                        help="Reference borough of the model [default: first borough alphabetically]")
    parser.add_argument("--abort-on-model-error", action="store_true",
                        help="Fail the run instead of omitting the model when it cannot be fitted")
    parser.add_argument("--force-download", action="store_true",
                        help="Re-download the CSV even if a cached copy exists")
    args = parser.parse_args(argv)

    return ReportConfig(
        source=args.source,
        out_dir=args.out_dir,
        start_year=args.start_year,
        end_year=args.end_year,
        top_n_precincts=args.top_n,
        sentinel=args.sentinel,
        model_reference=args.reference,
        abort_on_model_error=args.abort_on_model_error,
        force_download=args.force_download,
    )


def main(argv: list[str] | None = None):
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    run_report(parse_args(argv))


if __name__ == "__main__":
    main()
