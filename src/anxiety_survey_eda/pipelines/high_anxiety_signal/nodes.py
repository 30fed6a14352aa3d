import numpy as np
import pandas as pd
import polars as pl
import structlog
from sklearn.metrics import mutual_info_score

from .tree import ConditionalInferenceTree

log = structlog.get_logger(__name__)


def select_high_anxiety(
    ds: pl.DataFrame, target_col: str, high_anxiety_min: int
) -> pl.DataFrame:
    """Respondents whose anxiety level is at least ``high_anxiety_min``."""
    subgroup = ds.filter(pl.col(target_col) >= high_anxiety_min)
    log.info("high_anxiety_selected", rows=subgroup.height, min_level=high_anxiety_min)
    return subgroup


def discretize_predictors(ds: pl.DataFrame, target_col: str, n_bins: int) -> pl.DataFrame:
    """
    Equal-frequency binning of every numeric predictor.

    Numeric columns are cut at their ``n_bins`` quantiles (duplicate edges
    merged, so heavily tied columns get fewer bins); categorical columns keep
    their labels. Every predictor comes back as a string label column.
    """
    predictors = [c for c in ds.columns if c != target_col]
    return ds.with_columns(
        (
            pl.col(c).qcut(n_bins, allow_duplicates=True)
            if ds.schema[c].is_numeric()
            else pl.col(c)
        )
        .cast(pl.Utf8)
        .alias(c)
        for c in predictors
    )


def _codes(values) -> np.ndarray:
    return np.unique(np.asarray(values), return_inverse=True)[1]


def mutual_information_permutation_test(
    ds: pl.DataFrame, target_col: str, parameters: dict
) -> pd.DataFrame:
    """
    Mutual information (nats) between each discretized predictor and the
    anxiety level, with permutation p-values.

    The target is shuffled ``n_permutations`` times with a seeded generator;
    each predictor's p-value is the share of shuffles whose MI reaches the
    observed MI.
    """
    n_permutations = parameters["n_permutations"]
    rng = np.random.default_rng(parameters["seed"])

    predictors = [c for c in ds.columns if c != target_col]
    target = _codes(ds[target_col].to_numpy())
    features = {c: _codes(ds[c].to_numpy()) for c in predictors}

    observed = {c: mutual_info_score(target, x) for c, x in features.items()}
    exceed = dict.fromkeys(predictors, 0)

    for _ in range(n_permutations):
        shuffled = rng.permutation(target)
        for c, x in features.items():
            if mutual_info_score(shuffled, x) >= observed[c]:
                exceed[c] += 1

    results = pd.DataFrame(
        {
            "feature": predictors,
            "mutual_information": [observed[c] for c in predictors],
            "p_value": [exceed[c] / n_permutations for c in predictors],
        }
    ).sort_values("mutual_information", ascending=False, ignore_index=True)

    log.info(
        "mutual_information_tested",
        n_permutations=n_permutations,
        seed=parameters["seed"],
        max_mutual_information=float(results["mutual_information"].max()),
        significant=results.loc[results["p_value"] < 0.05, "feature"].tolist(),
    )
    return results


def fit_tree_diagnostic(ds: pl.DataFrame, target_col: str, parameters: dict) -> dict:
    """
    Fits a deliberately permissive conditional inference tree to check whether
    any split survives within the subgroup.

    Returns:
        dict: Split count, leaf prediction summary and the tree as text.
    """
    tree_params = parameters["tree"]
    data = ds.to_pandas()
    X = data.drop(columns=[target_col])
    y = data[target_col].to_numpy()

    tree = ConditionalInferenceTree(
        mincriterion=tree_params["mincriterion"],
        min_bucket=tree_params["min_bucket"],
    ).fit(X, y)
    y_pred = tree.predict(X)

    classes, counts = np.unique(y, return_counts=True)
    majority_class = classes[np.argmax(counts)].item()
    predicted, predicted_counts = np.unique(y_pred, return_counts=True)

    diagnostic = {
        "n_rows": int(len(y)),
        "n_splits": tree.n_splits(),
        "majority_class": majority_class,
        "predicted_distribution": {
            str(c): int(k) for c, k in zip(predicted.tolist(), predicted_counts)
        },
        "majority_share": float(np.mean(y_pred == majority_class)),
        "mincriterion": tree_params["mincriterion"],
        "min_bucket": tree_params["min_bucket"],
        "structure": tree.export_text(),
    }

    log.info(
        "tree_diagnostic_fitted",
        n_splits=diagnostic["n_splits"],
        majority_class=majority_class,
        majority_share=diagnostic["majority_share"],
    )
    return diagnostic
