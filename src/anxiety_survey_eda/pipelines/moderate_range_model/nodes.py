import numpy as np
import pandas as pd
import structlog
from sklearn.metrics import confusion_matrix
from statsmodels.formula.api import ols

from anxiety_survey_eda.pipelines.binary_risk_model.nodes import build_formula

log = structlog.get_logger(__name__)


def filter_moderate_range(data: pd.DataFrame, parameters: dict) -> pd.DataFrame:
    """Keeps respondents whose anxiety level is at most ``max_level``."""
    subset = data[data[parameters["target_col"]] <= parameters["max_level"]]
    log.info("moderate_range_selected", rows=len(subset), max_level=parameters["max_level"])
    return subset


def train_ols_model(data: pd.DataFrame, parameters: dict):
    """Ordinary least squares fit of the anxiety level on the configured predictors."""
    formula = build_formula(parameters["target_col"], parameters["predictors"])
    model = ols(formula=formula, data=data).fit()
    log.info("ols_model_fitted", formula=formula, n_obs=int(model.nobs))
    return model


def discretize_predictions(predictions, min_level: int, max_level: int) -> np.ndarray:
    """Rounds to the nearest level (half to even), then clips into ``[min_level, max_level]``."""
    return np.clip(np.round(np.asarray(predictions, dtype=float)), min_level, max_level).astype(int)


def evaluate_ols_model(model, data: pd.DataFrame, parameters: dict) -> tuple:
    """
    Scores discretized predictions against the true integer levels.

    Returns:
        tuple: Metrics dict, coefficient table (unrounded) and the level x level
        confusion matrix.
    """
    min_level, max_level = parameters["min_level"], parameters["max_level"]
    levels = list(range(min_level, max_level + 1))

    y_true = data[parameters["target_col"]].to_numpy().astype(int)
    y_pred = discretize_predictions(model.predict(data), min_level, max_level)

    cm = confusion_matrix(y_true, y_pred, labels=levels)
    cm_df = pd.DataFrame(
        cm,
        index=pd.Index(levels, name="actual"),
        columns=[f"predicted {level}" for level in levels],
    ).reset_index()

    metrics = {
        "n_obs": int(model.nobs),
        "exact_accuracy": float(np.mean(y_pred == y_true)),
        "within_one_accuracy": float(np.mean(np.abs(y_pred - y_true) <= 1)),
        "r_squared": float(model.rsquared),
        "adj_r_squared": float(model.rsquared_adj),
        "aic": float(model.aic),
        "bic": float(model.bic),
    }

    coefficients_df = model.summary2().tables[1].reset_index(names="term")

    log.info(
        "ols_model_evaluated",
        exact_accuracy=metrics["exact_accuracy"],
        within_one_accuracy=metrics["within_one_accuracy"],
    )
    return metrics, coefficients_df, cm_df
