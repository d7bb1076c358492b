import json
from pathlib import Path

import pandas as pd
import streamlit as st

from nypd_shootings.settings import REPORT_DIR, REPORT_META


@st.cache_data(show_spinner=False)
def read_mart(file_name: str, report_dir: Path = REPORT_DIR) -> pd.DataFrame:
    path = report_dir / file_name
    if not path.exists():
        return pd.DataFrame()
    return pd.read_parquet(path)


@st.cache_data(show_spinner=False)
def read_meta(report_dir: Path = REPORT_DIR) -> dict:
    path = report_dir / REPORT_META
    if not path.exists():
        return {}
    return json.loads(path.read_text())


def warn_if_missing(df: pd.DataFrame, label: str) -> bool:
    if df.empty:
        st.error(f"Missing/empty {label}. Re-run the report.")
        return False
    return True
