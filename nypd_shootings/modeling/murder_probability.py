#!/usr/bin/env python
"""
murder_probability.py - P(murder | borough) via logistic regression

MODEL SPECIFICATION:
    is_murder ~ C(borough, Treatment(reference=<reference>))

    Family: Binomial (logit link), fitted with the statsmodels formula API.
    is_murder is 1 for incidents flagged as a statistical murder, 0 otherwise.

    The reference borough is explicit. Its predicted probability is
    inverse_logit(intercept); every other borough gets
    inverse_logit(intercept + coefficient of that borough). With a single
    categorical predictor the fit is saturated, so each prediction equals
    the borough's empirical murder rate.

    Rows with a missing murder flag or a missing borough ("", "(null)" included)
    are excluded.

FAILURES (raised as ModelFitError, never replaced by a default value):
    - fewer than two outcome classes in the filtered data
    - a requested borough level (or the reference) without observations
    - a borough with a single outcome class (perfect separation)
    - the IRLS fit does not converge
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf
from statsmodels.tools.sm_exceptions import PerfectSeparationError, PerfectSeparationWarning

from nypd_shootings.processing.clean_data import is_missing

log = logging.getLogger(__name__)

TARGET = "is_murder"
PREDICTOR = "borough"


class ModelFitError(RuntimeError):
    """
    The murder model cannot be fitted on the given data.

    ``levels`` lists the borough levels that caused the failure, when the
    failure is tied to specific levels; the caller can refit without them.
    """

    def __init__(self, message: str, levels: list[str] | None = None):
        super().__init__(message)
        self.levels = list(levels or [])


@dataclass
class MurderModel:
    result: object  # statsmodels GLMResultsWrapper
    reference: str
    levels: list[str]
    formula: str
    n_obs: int
    level_counts: dict[str, int] = field(default_factory=dict)


def prepare_model_data(df: pd.DataFrame) -> pd.DataFrame:
    """Drop rows without outcome or borough and encode the outcome as 0/1."""
    flag = df[TARGET].astype("boolean")
    borough = df[PREDICTOR]

    keep = flag.notna().to_numpy() & ~is_missing(borough).to_numpy()
    n_excluded = int((~keep).sum())
    if n_excluded:
        log.info(f"  Model: excluded {n_excluded:,} rows with missing outcome or borough")

    return pd.DataFrame({
        TARGET: flag[keep].to_numpy(dtype=bool).astype(int),
        PREDICTOR: borough[keep].astype(str).to_numpy(),
    })


def fit_murder_model(
    df: pd.DataFrame,
    reference: str | None = None,
    levels: list[str] | None = None,
) -> MurderModel:
    """
    Fit the logistic regression of the murder flag on borough.

    Args:
        df: Incident table with is_murder and borough columns
        reference: Reference (baseline) borough. Defaults to the first level
            in sorted order.
        levels: Borough levels that must be estimable. Defaults to every
            borough present in the data; rows outside ``levels`` are dropped.

    Returns:
        MurderModel with the fitted statsmodels result

    Raises:
        ModelFitError: if the fit is undefined for this data
    """
    data = prepare_model_data(df)

    if levels is not None:
        levels = [str(level) for level in levels]
        outside = ~data[PREDICTOR].isin(levels)
        if outside.any():
            log.info(f"  Model: dropped {int(outside.sum()):,} rows outside the requested levels")
            data = data[~outside]
    else:
        levels = sorted(data[PREDICTOR].unique().tolist())

    if data.empty:
        raise ModelFitError("No rows with both outcome and borough available")

    if data[TARGET].nunique() < 2:
        raise ModelFitError(
            f"Need both outcome classes, found only {sorted(data[TARGET].unique().tolist())}"
        )

    level_counts = data[PREDICTOR].value_counts().reindex(levels, fill_value=0)
    empty = level_counts[level_counts == 0].index.tolist()
    if empty:
        raise ModelFitError(f"Borough levels without observations: {empty}", levels=empty)

    reference = levels[0] if reference is None else str(reference)
    if reference not in levels:
        raise ModelFitError(f"Reference level {reference!r} not among levels {levels}")

    class_counts = data.groupby(PREDICTOR)[TARGET].nunique().reindex(levels)
    separated = class_counts[class_counts < 2].index.tolist()
    if separated:
        raise ModelFitError(f"Perfect separation, single outcome class in: {separated}", levels=separated)

    formula = f"{TARGET} ~ C({PREDICTOR}, Treatment(reference={reference!r}))"
    log.info(f"Formula: {formula}")

    try:
        with warnings.catch_warnings():
            warnings.simplefilter("error", PerfectSeparationWarning)
            result = smf.glm(formula=formula, data=data, family=sm.families.Binomial()).fit()
    except (PerfectSeparationError, PerfectSeparationWarning) as e:
        raise ModelFitError(f"Perfect separation during fit: {e}") from e

    if not result.converged:
        raise ModelFitError("Logistic regression did not converge")

    log.info(f"Fitted on {int(result.nobs):,} incidents, reference borough: {reference}")

    return MurderModel(
        result=result,
        reference=reference,
        levels=list(levels),
        formula=formula,
        n_obs=int(result.nobs),
        level_counts={k: int(v) for k, v in level_counts.items()},
    )


def predict_by_borough(model: MurderModel, alpha: float = 0.05) -> pd.DataFrame:
    """
    Predicted murder probability for every borough level.

    Returns:
        DataFrame [borough, probability, ci_lower, ci_upper, n_incidents]
        sorted by probability, highest first.
    """
    grid = pd.DataFrame({PREDICTOR: model.levels})
    frame = model.result.get_prediction(grid).summary_frame(alpha=alpha)

    out = pd.DataFrame({
        "borough": model.levels,
        "probability": frame["mean"].to_numpy(),
        "ci_lower": frame["mean_ci_lower"].to_numpy(),
        "ci_upper": frame["mean_ci_upper"].to_numpy(),
        "n_incidents": [model.level_counts.get(level, 0) for level in model.levels],
    })

    return out.sort_values("probability", ascending=False, kind="stable").reset_index(drop=True)


def coefficient_table(model: MurderModel, alpha: float = 0.05) -> pd.DataFrame:
    """Estimates on the logit scale plus odds ratios."""
    res = model.result
    ci = res.conf_int(alpha=alpha)

    out = pd.DataFrame({
        "term": res.params.index,
        "coef": res.params.to_numpy(),
        "std_err": res.bse.to_numpy(),
        "z": res.tvalues.to_numpy(),
        "p_value": res.pvalues.to_numpy(),
        "ci_lower": ci[0].to_numpy(),
        "ci_upper": ci[1].to_numpy(),
    })
    out["odds_ratio"] = np.exp(out["coef"])
    return out
