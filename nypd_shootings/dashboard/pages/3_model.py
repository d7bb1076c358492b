import streamlit as st

from nypd_shootings import settings
from nypd_shootings.dashboard.lib.data import read_mart, read_meta, warn_if_missing
from nypd_shootings.report.charts import murder_probability_bars

st.title("Panel 3 — P(murder | borough)")

model_meta = read_meta().get("model", {})
if model_meta.get("status") == "failed":
    st.error(f"The model could not be fitted: {model_meta.get('error')}")
    st.stop()

st.caption(f"Logistic regression `{model_meta.get('formula', '')}`, "
           f"reference borough: **{model_meta.get('reference', '—')}**")

predictions = read_mart(settings.MODEL_PREDICTIONS)
if warn_if_missing(predictions, "model predictions"):
    st.altair_chart(murder_probability_bars(predictions), use_container_width=True)
    st.dataframe(predictions, hide_index=True, use_container_width=True)

st.subheader("Coefficients")
coefs = read_mart(settings.MODEL_COEFFICIENTS)
if warn_if_missing(coefs, "model coefficients"):
    st.dataframe(coefs, hide_index=True, use_container_width=True)
