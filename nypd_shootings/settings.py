from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
RAW_DIR = PROJECT_ROOT / "data" / "raw"
PROCESSED_DIR = PROJECT_ROOT / "data" / "processed"

# ============================================================================
# SOURCE
# ============================================================================
# NYC Open Data "NYPD Shooting Incident Data (Historic)" dataset id: 833y-fsy8
SOURCE_URL = os.environ.get(
    "NYPD_SHOOTINGS_URL",
    "https://data.cityofnewyork.us/api/views/833y-fsy8/rows.csv?accessType=DOWNLOAD",
)
RAW_CSV = RAW_DIR / "nypd_shooting_incidents.csv"

# First year covered by the historic dataset
DATASET_START_YEAR = 2006
MISSING_SENTINEL = "UNKNOWN"
TOP_N_PRECINCTS = 10

# ============================================================================
# REPORT MARTS (written by run_report, read by the dashboard)
# ============================================================================
REPORT_DIR = PROCESSED_DIR / "report"
BOROUGH_COUNTS = "borough_counts.parquet"
PRECINCT_TOP = "precinct_top.parquet"
VIC_SEX_COUNTS = "vic_sex_counts.parquet"
VIC_RACE_COUNTS = "vic_race_counts.parquet"
VIC_AGE_COUNTS = "vic_age_group_counts.parquet"
PERP_AGE_COUNTS = "perp_age_group_counts.parquet"
PERP_SEX_COUNTS = "perp_sex_counts.parquet"
PERP_RACE_COUNTS = "perp_race_counts.parquet"
MISSINGNESS = "missingness.parquet"
WEEKDAY_HOUR = "weekday_hour_counts.parquet"
YEAR_OUTCOME = "year_outcome_counts.parquet"
MURDER_SHARE = "murder_share_by_year.parquet"
MODEL_PREDICTIONS = "murder_probability_by_borough.parquet"
MODEL_COEFFICIENTS = "murder_model_coefficients.parquet"
REPORT_META = "report_meta.json"


@dataclass
class ReportConfig:
    source: str = SOURCE_URL  # URL or local CSV path
    out_dir: Path = REPORT_DIR
    start_year: int = DATASET_START_YEAR
    end_year: int | None = None  # defaults to the last complete year in the data
    top_n_precincts: int = TOP_N_PRECINCTS
    sentinel: str = MISSING_SENTINEL
    model_reference: str | None = None  # defaults to the first borough in sorted order
    abort_on_model_error: bool = False
    force_download: bool = False
