import numpy as np
import pandas as pd
import pytest

from nypd_shootings.modeling.murder_probability import (
    ModelFitError,
    coefficient_table,
    fit_murder_model,
    predict_by_borough,
)

from conftest import make_incident, make_incidents


def test_predictions_match_empirical_rates(model_incidents):
    model = fit_murder_model(model_incidents)
    predictions = predict_by_borough(model).set_index("borough")

    assert predictions.loc["A", "probability"] == pytest.approx(0.5, abs=1e-6)
    assert predictions.loc["B", "probability"] == pytest.approx(0.1, abs=1e-6)
    assert predictions.loc["A", "n_incidents"] == 400
    assert predictions.loc["B", "n_incidents"] == 500
    assert (predictions["ci_lower"] <= predictions["probability"]).all()
    assert (predictions["probability"] <= predictions["ci_upper"]).all()


def test_predictions_sorted_descending(model_incidents):
    predictions = predict_by_borough(fit_murder_model(model_incidents))
    assert predictions["borough"].tolist() == ["A", "B"]


def test_default_reference_is_first_sorted_level(model_incidents):
    model = fit_murder_model(model_incidents)
    assert model.reference == "A"
    assert "Treatment(reference='A')" in model.formula


def test_prediction_is_inverse_logit_of_coefficients(model_incidents):
    model = fit_murder_model(model_incidents, reference="B")
    params = model.result.params
    intercept = params["Intercept"]
    coef_a = params[[name for name in params.index if "[T.A]" in name][0]]

    predictions = predict_by_borough(model).set_index("borough")
    assert predictions.loc["B", "probability"] == pytest.approx(1 / (1 + np.exp(-intercept)))
    assert predictions.loc["A", "probability"] == pytest.approx(1 / (1 + np.exp(-(intercept + coef_a))))


def test_reference_choice_does_not_change_predictions(model_incidents):
    by_a = predict_by_borough(fit_murder_model(model_incidents, reference="A")).set_index("borough")
    by_b = predict_by_borough(fit_murder_model(model_incidents, reference="B")).set_index("borough")
    assert by_a.loc["B", "probability"] == pytest.approx(by_b.loc["B", "probability"])


def test_rows_with_missing_values_excluded(model_incidents):
    extra = make_incidents(
        [make_incident(borough=None, is_murder=True)] * 50
        + [make_incident(borough="A", is_murder=None)] * 50
    )
    df = pd.concat([model_incidents, extra], ignore_index=True)
    model = fit_murder_model(df)
    assert model.n_obs == 900


def test_single_outcome_class_raises():
    df = make_incidents([make_incident(borough="A", is_murder=False)] * 20
                        + [make_incident(borough="B", is_murder=False)] * 20)
    with pytest.raises(ModelFitError, match="both outcome classes"):
        fit_murder_model(df)


def test_requested_level_without_rows_raises(model_incidents):
    with pytest.raises(ModelFitError, match="without observations"):
        fit_murder_model(model_incidents, levels=["A", "B", "C"])


def test_unknown_reference_raises(model_incidents):
    with pytest.raises(ModelFitError, match="Reference level"):
        fit_murder_model(model_incidents, reference="QUEENS")


def test_level_with_single_class_raises(model_incidents):
    df = make_incidents(
        [make_incident(borough="A", is_murder=True)] * 10
        + [make_incident(borough="A", is_murder=False)] * 10
        + [make_incident(borough="C", is_murder=False)] * 10
    )
    with pytest.raises(ModelFitError, match="separation"):
        fit_murder_model(df)


def test_empty_data_raises():
    df = make_incidents([make_incident(borough=None, is_murder=True)] * 3)
    with pytest.raises(ModelFitError):
        fit_murder_model(df)


def test_coefficient_table(model_incidents):
    table = coefficient_table(fit_murder_model(model_incidents))

    assert table["term"].tolist()[0] == "Intercept"
    assert len(table) == 2
    assert table["odds_ratio"].iloc[0] == pytest.approx(1.0)  # logit(0.5) = 0
    assert (table["ci_lower"] <= table["coef"]).all()


def test_separation_error_names_levels():
    df = make_incidents(
        [make_incident(borough="A", is_murder=True)] * 10
        + [make_incident(borough="A", is_murder=False)] * 10
        + [make_incident(borough="C", is_murder=False)] * 10
        + [make_incident(borough="D", is_murder=True)] * 10
    )
    with pytest.raises(ModelFitError) as excinfo:
        fit_murder_model(df)
    assert excinfo.value.levels == ["C", "D"]


def test_refit_without_separated_levels(model_incidents):
    extra = make_incidents([make_incident(borough="C", is_murder=False)] * 5)
    df = pd.concat([model_incidents, extra], ignore_index=True)

    model = fit_murder_model(df, levels=["A", "B"])

    assert model.levels == ["A", "B"]
    assert model.n_obs == 900


def test_outcome_class_error_has_no_levels():
    df = make_incidents([make_incident(borough="A", is_murder=False)] * 5)
    with pytest.raises(ModelFitError) as excinfo:
        fit_murder_model(df)
    assert excinfo.value.levels == []


def test_null_marker_borough_excluded(model_incidents):
    extra = make_incidents(
        [make_incident(borough="(null)", is_murder=True)] * 5
        + [make_incident(borough="", is_murder=False)] * 5
    )
    model = fit_murder_model(pd.concat([model_incidents, extra], ignore_index=True))

    assert model.levels == ["A", "B"]
    assert model.n_obs == 900
