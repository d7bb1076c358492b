"""
NYPD Shooting Incident Data Loader
==================================

Usage:
    from nypd_shootings.data.download_shootings import ShootingDataLoader

    loader = ShootingDataLoader()
    df = loader.load()      # downloads once, then reads the cached CSV
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd
import requests
from tqdm import tqdm

from nypd_shootings.settings import RAW_CSV, SOURCE_URL

log = logging.getLogger(__name__)

# Raw CSV header -> normalized column name
COLUMN_MAP = {
    "INCIDENT_KEY": "incident_key",
    "OCCUR_DATE": "occur_date",
    "OCCUR_TIME": "occur_time",
    "BORO": "borough",
    "PRECINCT": "precinct",
    "STATISTICAL_MURDER_FLAG": "is_murder",
    "PERP_AGE_GROUP": "perp_age_group",
    "PERP_SEX": "perp_sex",
    "PERP_RACE": "perp_race",
    "VIC_AGE_GROUP": "vic_age_group",
    "VIC_SEX": "vic_sex",
    "VIC_RACE": "vic_race",
}

# incident_key is optional, everything else must be present
REQUIRED_COLUMNS = [c for c in COLUMN_MAP.values() if c != "incident_key"]

MURDER_FLAG_VALUES = {
    "true": True, "y": True, "yes": True, "1": True,
    "false": False, "n": False, "no": False, "0": False,
}


def is_url(source: str) -> bool:
    return str(source).lower().startswith(("http://", "https://"))


class ShootingDataLoader:

    def __init__(self, source: str | Path = SOURCE_URL, raw_path: Path = RAW_CSV):
        self.source = source
        self.raw_path = Path(raw_path)

    def download(self, force: bool = False) -> Path:
        """Fetch the CSV to ``raw_path`` (or resolve a local file). Returns the file path."""

        if not is_url(self.source):
            path = Path(self.source)
            if not path.exists():
                raise FileNotFoundError(f"Data file not found: {path}")
            return path

        if self.raw_path.exists() and not force:
            log.info(f"Shooting data already exists: {self.raw_path}")
            log.info(f"File size: {self.raw_path.stat().st_size / 1e6:.1f} MB")
            return self.raw_path

        self.raw_path.parent.mkdir(parents=True, exist_ok=True)
        log.info(f"Downloading shooting incidents from {self.source}")

        response = requests.get(
            self.source,
            headers={"User-Agent": "nypd-shootings-report/1.0"},
            stream=True,
            timeout=120,
        )
        response.raise_for_status()

        total = int(response.headers.get("content-length", 0))
        tmp_path = self.raw_path.with_suffix(".part")

        with open(tmp_path, "wb") as f:
            with tqdm(total=total, unit="B", unit_scale=True, desc=self.raw_path.name) as pbar:
                for chunk in response.iter_content(8192):
                    f.write(chunk)
                    pbar.update(len(chunk))

        # Only a complete download replaces the cached file
        tmp_path.replace(self.raw_path)

        log.info(f"Saved: {self.raw_path} ({self.raw_path.stat().st_size / 1e6:.2f} MB)")
        return self.raw_path

    def load(self, force: bool = False) -> pd.DataFrame:
        """Download if needed and read the CSV into a normalized DataFrame."""

        path = self.download(force=force)

        log.info(f"Loading: {path}")
        df = pd.read_csv(path, dtype=str, keep_default_na=True)
        log.info(f"Loaded {len(df):,} rows x {len(df.columns)} columns")

        df = self._normalize_columns(df)

        missing_cols = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing_cols:
            raise ValueError(f"Dataset is missing expected columns: {missing_cols}")

        return df

    def _normalize_columns(self, df: pd.DataFrame) -> pd.DataFrame:
        df = df.rename(columns=lambda c: COLUMN_MAP.get(c.strip().upper(), c.strip().lower()))

        if "is_murder" in df.columns:
            df["is_murder"] = parse_murder_flag(df["is_murder"])

        if "precinct" in df.columns:
            df["precinct"] = pd.to_numeric(df["precinct"], errors="coerce").astype("Int64")

        # Trim whitespace in categorical columns, keep NaN as NaN
        string_cols = [
            "occur_date", "occur_time", "borough",
            "perp_age_group", "perp_sex", "perp_race",
            "vic_age_group", "vic_sex", "vic_race",
        ]
        for col in string_cols:
            if col in df.columns:
                df[col] = df[col].str.strip()

        return df


def parse_murder_flag(values: pd.Series) -> pd.Series:
    """Map true/false style strings to a nullable boolean; anything else becomes <NA>."""
    mapped = values.astype("string").str.strip().str.lower().map(MURDER_FLAG_VALUES)
    return mapped.astype("boolean")


def load_incidents(source: str | Path = SOURCE_URL, force: bool = False) -> pd.DataFrame:
    return ShootingDataLoader(source).load(force=force)


def main():
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    ShootingDataLoader().download()


if __name__ == "__main__":
    main()
