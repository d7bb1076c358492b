import streamlit as st

from nypd_shootings import settings
from nypd_shootings.dashboard.lib.data import read_mart, warn_if_missing
from nypd_shootings.report.charts import count_bars

st.title("Panel 1 — Summaries")

SECTIONS = [
    ("1) Borough", settings.BOROUGH_COUNTS, "borough", "Borough"),
    ("2) Top precincts", settings.PRECINCT_TOP, "precinct", "Precinct"),
    ("3) Victim sex", settings.VIC_SEX_COUNTS, "vic_sex", "Victim sex"),
    ("4) Victim race", settings.VIC_RACE_COUNTS, "vic_race", "Victim race"),
    ("5) Victim age group", settings.VIC_AGE_COUNTS, "vic_age_group", "Victim age group"),
    ("6) Perpetrator age group", settings.PERP_AGE_COUNTS, "perp_age_group", "Perpetrator age group"),
    ("7) Perpetrator sex", settings.PERP_SEX_COUNTS, "perp_sex", "Perpetrator sex"),
    ("8) Perpetrator race", settings.PERP_RACE_COUNTS, "perp_race", "Perpetrator race"),
]

for heading, file_name, column, title in SECTIONS:
    st.subheader(heading)
    df = read_mart(file_name)
    if not warn_if_missing(df, title):
        continue
    left, right = st.columns([2, 1])
    left.altair_chart(count_bars(df, column, title), use_container_width=True)
    right.dataframe(df, hide_index=True, use_container_width=True)

st.subheader("Data quality")
quality = read_mart(settings.MISSINGNESS)
if warn_if_missing(quality, "missingness table"):
    st.dataframe(quality, hide_index=True, use_container_width=True)
