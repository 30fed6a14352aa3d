import numpy as np
import pandas as pd
import polars as pl
import structlog
from scipy.special import logit as log_odds
from sklearn.metrics import (
    accuracy_score,
    confusion_matrix,
    f1_score,
    precision_score,
    recall_score,
    roc_auc_score,
)
from sklearn.model_selection import train_test_split
from statsmodels.formula.api import logit

log = structlog.get_logger(__name__)

CLASS_LABELS = ["Low/Moderate", "High"]
TERCILE_LABELS = ["Low", "Mid", "High"]


def build_formula(target_col: str, predictors: list[str]) -> str:
    return f"{target_col} ~ " + " + ".join(predictors)


def build_interaction_formula(
    target_col: str, predictors: list[str], interacting_predictors: list[str]
) -> str:
    """Main effects plus every pairwise product of ``interacting_predictors``."""
    others = [p for p in predictors if p not in interacting_predictors]
    terms = ["(" + " + ".join(interacting_predictors) + ")**2"] + others
    return f"{target_col} ~ " + " + ".join(terms)


def split_data(data: pd.DataFrame, parameters: dict) -> tuple:
    """Splits data into training and evaluation sets.

    A null ``test_size`` fits and evaluates on the full table.
    """
    if parameters.get("test_size") is None:
        return data, data

    train_data, val_data = train_test_split(
        data,
        test_size=parameters["test_size"],
        random_state=parameters["random_state"],
    )
    return train_data, val_data


def train_logit_model(train_data: pd.DataFrame, parameters: dict):
    """Fits the high-anxiety logistic regression by maximum likelihood."""
    formula = build_formula(parameters["target_col"], parameters["predictors"])
    model = logit(formula=formula, data=train_data).fit(disp=False)
    log.info("logit_model_fitted", formula=formula, n_obs=int(model.nobs))
    return model


def evaluate_logit_model(model, val_data: pd.DataFrame, parameters: dict) -> tuple:
    """Scores the model at the configured probability threshold.

    Returns:
        tuple: Metrics dict, coefficient table and 2x2 confusion matrix.
    """
    y_pred_probs = model.predict(val_data)
    y_pred = (y_pred_probs >= parameters["threshold"]).astype(int)
    y_true = val_data[parameters["target_col"]]

    tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[0, 1]).ravel()

    try:
        auc = float(roc_auc_score(y_true, y_pred_probs))
    except ValueError:
        auc = float("nan")

    metrics = {
        "accuracy": float(accuracy_score(y_true, y_pred)),
        "precision": float(precision_score(y_true, y_pred, zero_division=0)),
        "recall": float(recall_score(y_true, y_pred, zero_division=0)),
        "f1": float(f1_score(y_true, y_pred, zero_division=0)),
        "roc_auc": auc,
        "true_positives": int(tp),
        "true_negatives": int(tn),
        "false_positives": int(fp),
        "false_negatives": int(fn),
        "actual_high": int(tp + fn),
        "log_likelihood": float(model.llf),
        "ll_null": float(model.llnull),
        "pseudo_r_squared": float(model.prsquared),
        "aic": float(model.aic),
        "bic": float(model.bic),
        "llr_pvalue": float(model.llr_pvalue),
    }

    coefficients_df = model.summary2().tables[1].reset_index(names="term")

    cm_df = pd.DataFrame(
        [[tn, fp], [fn, tp]],
        index=pd.Index(CLASS_LABELS, name="actual"),
        columns=[f"predicted {c}" for c in CLASS_LABELS],
    ).reset_index()

    log.info(
        "logit_model_evaluated",
        threshold=parameters["threshold"],
        false_negatives=int(fn),
        false_positives=int(fp),
        accuracy=metrics["accuracy"],
    )
    return metrics, coefficients_df, cm_df


def train_interaction_model(train_data: pd.DataFrame, parameters: dict):
    """Fits the logit variant with pairwise interactions among the interacting predictors."""
    formula = build_interaction_formula(
        parameters["target_col"],
        parameters["predictors"],
        parameters["interacting_predictors"],
    )
    model = logit(formula=formula, data=train_data).fit(disp=False)
    log.info("interaction_model_fitted", formula=formula, n_obs=int(model.nobs))
    return model


def assign_terciles(ds: pl.DataFrame, columns: list[str]) -> pl.DataFrame:
    """Labels each value Low/Mid/High against the column's 1/3 and 2/3 quantiles.

    Tied values always share a label.
    """
    tercile = pl.Enum(TERCILE_LABELS)
    return ds.with_columns(
        pl.when(pl.col(c) <= pl.col(c).quantile(1 / 3, interpolation="linear"))
        .then(pl.lit("Low"))
        .when(pl.col(c) <= pl.col(c).quantile(2 / 3, interpolation="linear"))
        .then(pl.lit("Mid"))
        .otherwise(pl.lit("High"))
        .cast(tercile)
        .alias(f"{c}_tercile")
        for c in columns
    )


def tercile_log_odds(model, data: pd.DataFrame, parameters: dict) -> tuple:
    """Mean predicted log-odds for every tercile combination of the interacting predictors.

    Returns:
        tuple: Interaction model coefficient table and the tercile grid.
    """
    columns = parameters["interacting_predictors"]
    probs = np.clip(np.asarray(model.predict(data)), 1e-12, 1 - 1e-12)

    ds = pl.from_pandas(data[columns]).with_columns(
        pl.Series("log_odds", log_odds(probs))
    )
    tercile_cols = [f"{c}_tercile" for c in columns]

    grid = (
        assign_terciles(ds, columns)
        .group_by(tercile_cols)
        .agg(
            pl.col("log_odds").mean().alias("mean_log_odds"),
            pl.len().alias("n"),
        )
        .sort(tercile_cols)
    )

    coefficients_df = model.summary2().tables[1].reset_index(names="term")
    return coefficients_df, grid.with_columns(pl.col(tercile_cols).cast(pl.Utf8)).to_pandas()
