"""Published results on the full survey export.

Runs only when ``data/01_raw/enhanced_anxiety_dataset.csv`` is present.
"""

from pathlib import Path

import polars as pl
import pytest

from anxiety_survey_eda.pipelines.binary_risk_model.nodes import (
    evaluate_logit_model,
    train_logit_model,
)
from anxiety_survey_eda.pipelines.data_processing.nodes import (
    encode_features,
    preprocess_labels,
    standardize_columns,
)
from anxiety_survey_eda.pipelines.high_anxiety_signal.nodes import (
    discretize_predictors,
    fit_tree_diagnostic,
    mutual_information_permutation_test,
    select_high_anxiety,
)
from anxiety_survey_eda.pipelines.moderate_range_model.nodes import (
    evaluate_ols_model,
    filter_moderate_range,
    train_ols_model,
)

DATA_PATH = (
    Path(__file__).resolve().parents[1] / "data" / "01_raw" / "enhanced_anxiety_dataset.csv"
)

pytestmark = pytest.mark.skipif(not DATA_PATH.exists(), reason="survey export not available")

BINARY_RISK = {
    "target_col": "high_anxiety",
    "predictors": [
        "therapy_sessions",
        "stress_level",
        "sleep_hours",
        "caffeine_intake",
        "diet_quality",
    ],
    "threshold": 0.5,
}
MODERATE_RANGE = {
    "target_col": "anxiety_level",
    "predictors": [
        "stress_level",
        "sleep_hours",
        "caffeine_intake",
        "therapy_sessions",
        "family_history",
    ],
    "max_level": 7,
    "min_level": 1,
}
HIGH_ANXIETY = {
    "n_bins": 10,
    "n_permutations": 1000,
    "seed": 42,
    "tree": {"mincriterion": 0.5, "min_bucket": 5},
}


@pytest.fixture(scope="module")
def survey() -> pl.DataFrame:
    return standardize_columns(pl.read_csv(DATA_PATH))


@pytest.fixture(scope="module")
def survey_model(survey):
    return encode_features(
        preprocess_labels(survey, "anxiety_level", 8),
        ["smoking", "family_history", "dizziness", "medication", "recent_life_event"],
        {"No": 0, "Yes": 1},
    )


@pytest.fixture(scope="module")
def high_anxiety(survey):
    return select_high_anxiety(survey, "anxiety_level", 8)


def test_binary_risk_confusion_counts(survey_model):
    model = train_logit_model(survey_model, BINARY_RISK)
    metrics, _, _ = evaluate_logit_model(model, survey_model, BINARY_RISK)

    assert metrics["actual_high"] == 1014
    assert metrics["false_negatives"] == pytest.approx(44, abs=1)
    assert metrics["false_positives"] == pytest.approx(48, abs=1)


def test_moderate_range_accuracy(survey_model):
    data = filter_moderate_range(survey_model, MODERATE_RANGE)
    model = train_ols_model(data, MODERATE_RANGE)
    metrics, _, _ = evaluate_ols_model(model, data, MODERATE_RANGE)

    assert metrics["exact_accuracy"] == pytest.approx(0.376, abs=0.001)
    assert metrics["within_one_accuracy"] == pytest.approx(0.873, abs=0.001)


def test_high_anxiety_mutual_information(high_anxiety):
    results = mutual_information_permutation_test(
        discretize_predictors(high_anxiety, "anxiety_level", HIGH_ANXIETY["n_bins"]),
        "anxiety_level",
        HIGH_ANXIETY,
    ).set_index("feature")

    assert (results["mutual_information"] <= 0.02).all()
    assert results.loc["diet_quality", "p_value"] < 0.01
    assert (results.drop(index="diet_quality")["p_value"] > 0.10).all()


def test_high_anxiety_tree_has_no_splits(high_anxiety):
    diagnostic = fit_tree_diagnostic(high_anxiety, "anxiety_level", HIGH_ANXIETY)

    assert diagnostic["n_splits"] == 0
    assert diagnostic["majority_class"] == 8
    assert diagnostic["majority_share"] == 1.0
