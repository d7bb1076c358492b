import pandas as pd

from nypd_shootings.processing.outcomes import MURDER, NON_MURDER, OUTCOME_STACK_ORDER
from nypd_shootings.processing.time_bins import DAY_ORDER, HOUR_LABEL_ORDER
from nypd_shootings.report.charts import (
    OUTCOME_COLORS,
    count_bars,
    murder_probability_bars,
    weekday_hour_heatmap,
    year_outcome_stacked_bar,
)


def test_heatmap_axis_orders():
    counts = pd.DataFrame({
        "day_of_week": ["Monday", "Sunday"],
        "hour": [0, 13],
        "hour_label": ["12 AM", "01 PM"],
        "count": [3, 1],
    })
    encoding = weekday_hour_heatmap(counts).to_dict()["encoding"]

    assert encoding["x"]["sort"] == DAY_ORDER
    assert encoding["y"]["sort"] == HOUR_LABEL_ORDER
    assert encoding["y"]["sort"][0] == "12 AM"


def test_stacked_bar_puts_non_murder_at_the_bottom():
    counts = pd.DataFrame({
        "year": [2010, 2010, 2011],
        "outcome": [MURDER, NON_MURDER, NON_MURDER],
        "count": [3, 7, 4],
    })
    chart = year_outcome_stacked_bar(counts)
    encoding = chart.to_dict()["encoding"]

    assert encoding["color"]["scale"]["domain"] == OUTCOME_STACK_ORDER
    assert encoding["color"]["scale"]["range"] == OUTCOME_COLORS
    assert encoding["order"]["field"] == "stack_order"
    assert encoding["order"]["sort"] == "ascending"

    stack_order = dict(zip(chart.data["outcome"], chart.data["stack_order"]))
    assert stack_order[NON_MURDER] < stack_order[MURDER]


def test_probability_bars_sorted_highest_first():
    predictions = pd.DataFrame({
        "borough": ["B", "A"],
        "probability": [0.1, 0.5],
        "ci_lower": [0.08, 0.45],
        "ci_upper": [0.13, 0.55],
        "n_incidents": [500, 400],
    })
    layers = murder_probability_bars(predictions).to_dict()["layer"]

    assert layers[0]["encoding"]["x"]["sort"] == ["A", "B"]
    assert layers[1]["encoding"]["y2"]["field"] == "ci_upper"


def test_count_bars_treats_values_as_categories():
    counts = pd.DataFrame({"precinct": [75, 40], "count": [5, 2], "percent": [71.4, 28.6]})
    chart = count_bars(counts, "precinct", "Precinct")
    encoding = chart.to_dict()["encoding"]

    assert encoding["y"]["field"] == "precinct"
    assert encoding["y"]["type"] == "nominal"
    assert encoding["y"]["sort"] == "-x"
    assert chart.data["precinct"].tolist() == ["75", "40"]
    # the caller's table keeps its integer precincts
    assert counts["precinct"].tolist() == [75, 40]
