import streamlit as st

from nypd_shootings.dashboard.lib.data import read_meta

st.set_page_config(page_title="NYPD Shooting Incidents", layout="wide")

st.title("NYPD Shooting Incidents — Summaries, Patterns & Murder Probability")

meta = read_meta()
if not meta:
    st.warning("No report found. Run `python -m nypd_shootings.report.run_report` first.")
    st.stop()

c1, c2, c3 = st.columns(3)
c1.metric("Incidents", f"{meta['n_rows']:,}")
c2.metric("Outcome years", f"{meta['start_year']}–{meta['end_year'] or '?'}")
c3.metric("Model", meta["model"]["status"])

st.markdown("""
Use the pages in the sidebar:

1. **Summaries** (borough, precinct, victim and perpetrator demographics)
2. **Patterns** (day-of-week × hour, year × outcome)
3. **Model** (P(murder | borough))
""")
