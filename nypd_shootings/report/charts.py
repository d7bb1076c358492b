import altair as alt
import pandas as pd

from nypd_shootings.processing.outcomes import OUTCOME_STACK_ORDER
from nypd_shootings.processing.time_bins import DAY_ORDER, HOUR_LABEL_ORDER

# Colors follow OUTCOME_STACK_ORDER
OUTCOME_COLORS = ["#4C72B0", "#D62728"]


def weekday_hour_heatmap(counts: pd.DataFrame) -> alt.Chart:
    """Tile heatmap: day of week across, hour of day down (12 AM on top)."""
    return (
        alt.Chart(counts).mark_rect()
        .encode(
            x=alt.X("day_of_week:O", title="Day of week", sort=DAY_ORDER),
            y=alt.Y("hour_label:O", title="Hour of day", sort=HOUR_LABEL_ORDER),
            color=alt.Color("count:Q", title="Incidents", scale=alt.Scale(scheme="yelloworangered")),
            tooltip=["day_of_week:O", "hour_label:O", "count:Q"],
        )
        .properties(title="Shooting incidents by day of week and hour", height=480, width=360)
    )


def year_outcome_stacked_bar(counts: pd.DataFrame) -> alt.Chart:
    """Stacked bars per year, Non-Murder below Murder."""
    data = counts.assign(stack_order=counts["outcome"].map(OUTCOME_STACK_ORDER.index))
    return (
        alt.Chart(data).mark_bar()
        .encode(
            x=alt.X("year:O", title="Year"),
            y=alt.Y("count:Q", title="Incidents", stack="zero"),
            color=alt.Color(
                "outcome:N",
                title="Outcome",
                sort=OUTCOME_STACK_ORDER,
                scale=alt.Scale(domain=OUTCOME_STACK_ORDER, range=OUTCOME_COLORS),
            ),
            order=alt.Order("stack_order:Q", sort="ascending"),
            tooltip=["year:O", "outcome:N", "count:Q"],
        )
        .properties(title="Shooting incidents per year by outcome", height=320)
    )


def murder_probability_bars(predictions: pd.DataFrame) -> alt.Chart:
    """Column bars of the predicted murder probability per borough, highest first."""
    order = predictions.sort_values("probability", ascending=False, kind="stable")["borough"].tolist()
    base = alt.Chart(predictions).encode(
        x=alt.X("borough:N", title="Borough", sort=order),
    )
    bars = base.mark_bar(color="#4C72B0").encode(
        y=alt.Y("probability:Q", title="P(murder | borough)", axis=alt.Axis(format="%")),
        tooltip=[
            "borough:N",
            alt.Tooltip("probability:Q", format=".3f"),
            alt.Tooltip("ci_lower:Q", format=".3f"),
            alt.Tooltip("ci_upper:Q", format=".3f"),
            "n_incidents:Q",
        ],
    )
    errors = base.mark_errorbar().encode(
        y=alt.Y("ci_lower:Q", title="P(murder | borough)"),
        y2="ci_upper:Q",
    )
    return (bars + errors).properties(title="Predicted probability of murder by borough", height=320)


def count_bars(counts: pd.DataFrame, column: str, title: str) -> alt.Chart:
    """Horizontal bars for a group-count table (dashboard summaries)."""
    data = counts.assign(**{column: counts[column].astype(str)})
    return (
        alt.Chart(data).mark_bar()
        .encode(
            x=alt.X("count:Q", title="Incidents"),
            y=alt.Y(f"{column}:N", title=title, sort="-x"),
            tooltip=[f"{column}:N", "count:Q", alt.Tooltip("percent:Q", title="%")],
        )
        .properties(height=max(120, 24 * len(data)))
    )
