import streamlit as st

from nypd_shootings import settings
from nypd_shootings.dashboard.lib.data import read_mart, warn_if_missing
from nypd_shootings.report.charts import weekday_hour_heatmap, year_outcome_stacked_bar

st.title("Panel 2 — Time & Outcome Patterns")

st.subheader("1) Day of week × hour of day")
weekday_hour = read_mart(settings.WEEKDAY_HOUR)
if warn_if_missing(weekday_hour, "weekday-hour counts"):
    st.altair_chart(weekday_hour_heatmap(weekday_hour), use_container_width=True)

st.subheader("2) Incidents per year by outcome")
year_outcome = read_mart(settings.YEAR_OUTCOME)
if warn_if_missing(year_outcome, "year-outcome counts"):
    st.altair_chart(year_outcome_stacked_bar(year_outcome), use_container_width=True)

share = read_mart(settings.MURDER_SHARE)
if not share.empty:
    st.dataframe(share, hide_index=True, use_container_width=True)
