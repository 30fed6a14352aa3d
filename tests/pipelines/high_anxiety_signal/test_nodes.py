import numpy as np
import pandas as pd
import polars as pl
import pytest
from sklearn.exceptions import NotFittedError
from sklearn.metrics import mutual_info_score

from anxiety_survey_eda.pipelines.high_anxiety_signal.nodes import (
    discretize_predictors,
    fit_tree_diagnostic,
    mutual_information_permutation_test,
    select_high_anxiety,
)
from anxiety_survey_eda.pipelines.high_anxiety_signal.tree import (
    ConditionalInferenceTree,
    categorical_association_pvalue,
    numeric_association_pvalue,
)

PARAMETERS = {
    "n_bins": 10,
    "n_permutations": 200,
    "seed": 42,
    "tree": {"mincriterion": 0.5, "min_bucket": 5},
}


@pytest.fixture(scope="module")
def noise_subgroup():
    """Levels 8-10 where every level sees the same predictor values.

    One block of respondents is repeated six times at level 8, three times at
    level 9 and twice at level 10, so no predictor carries any information.
    """
    rng = np.random.default_rng(3)
    block = pl.DataFrame(
        {
            "stress_level": rng.integers(1, 11, 20),
            "sleep_hours": np.round(rng.normal(6.5, 1.2, 20), 1),
            "gender": rng.choice(["Male", "Female", "Other"], 20),
        }
    )
    return pl.concat(
        [
            block.with_columns(pl.lit(level).alias("anxiety_level"))
            for level in [8] * 6 + [9] * 3 + [10] * 2
        ]
    )


@pytest.fixture(scope="module")
def signal_subgroup():
    """Levels 8-10 fully determined by stress."""
    rng = np.random.default_rng(4)
    stress = rng.integers(1, 11, 300)
    return pl.DataFrame(
        {
            "stress_level": stress,
            "sleep_hours": np.round(rng.normal(6.5, 1.2, 300), 1),
            "anxiety_level": np.select([stress <= 4, stress <= 7], [8, 9], 10),
        }
    )


def test_select_high_anxiety(survey):
    subgroup = select_high_anxiety(survey, "anxiety_level", 8)

    assert subgroup["anxiety_level"].min() >= 8
    assert subgroup.height == survey.filter(pl.col("anxiety_level") >= 8).height


def test_discretize_predictors(noise_subgroup):
    binned = discretize_predictors(noise_subgroup, "anxiety_level", 10)

    assert binned["stress_level"].dtype == pl.Utf8
    assert binned["sleep_hours"].n_unique() <= 10
    assert binned["gender"].to_list() == noise_subgroup["gender"].to_list()
    assert binned["anxiety_level"].to_list() == noise_subgroup["anxiety_level"].to_list()


def test_mutual_information_is_reproducible(noise_subgroup):
    binned = discretize_predictors(noise_subgroup, "anxiety_level", 10)

    first = mutual_information_permutation_test(binned, "anxiety_level", PARAMETERS)
    second = mutual_information_permutation_test(binned, "anxiety_level", PARAMETERS)

    pd.testing.assert_frame_equal(first, second)
    assert first.columns.tolist() == ["feature", "mutual_information", "p_value"]
    assert set(first["feature"]) == {"stress_level", "sleep_hours", "gender"}
    assert first["mutual_information"].is_monotonic_decreasing
    assert first["p_value"].between(0, 1).all()
    assert (first["p_value"] > 0.9).all()


def test_mutual_information_detects_dependence(signal_subgroup):
    binned = discretize_predictors(signal_subgroup, "anxiety_level", 10)
    results = mutual_information_permutation_test(
        binned, "anxiety_level", PARAMETERS
    ).set_index("feature")

    level = signal_subgroup["anxiety_level"].to_numpy()
    entropy = mutual_info_score(level, level)
    assert results.loc["stress_level", "mutual_information"] > 0.5 * entropy
    assert results.loc["stress_level", "p_value"] == 0.0
    assert results.index[0] == "stress_level"


def test_association_pvalues():
    rng = np.random.default_rng(0)
    y = rng.choice([8, 9, 10], 300)

    assert numeric_association_pvalue(y + rng.normal(0, 0.1, 300), y) < 1e-6
    assert numeric_association_pvalue(np.ones(300), y) == 1.0
    assert categorical_association_pvalue(y.astype(str), y) < 1e-6
    assert categorical_association_pvalue(np.full(300, "a"), y) == 1.0


def test_tree_splits_on_strong_signal(signal_subgroup):
    data = signal_subgroup.to_pandas()
    tree = ConditionalInferenceTree(mincriterion=0.5, min_bucket=5).fit(
        data.drop(columns=["anxiety_level"]), data["anxiety_level"]
    )

    assert tree.n_splits() >= 2
    assert tree.root_.feature == "stress_level"
    predictions = tree.predict(data.drop(columns=["anxiety_level"]))
    assert (predictions == data["anxiety_level"].to_numpy()).mean() > 0.95
    assert "stress_level <=" in tree.export_text()


def test_tree_splits_on_categorical_signal():
    rng = np.random.default_rng(5)
    group = rng.choice(["a", "b", "c"], 300)
    data = pd.DataFrame({"group": group})
    y = np.where(group == "a", 8, 9)

    tree = ConditionalInferenceTree(mincriterion=0.5, min_bucket=5).fit(data, y)

    assert tree.n_splits() == 1
    assert tree.root_.left_categories in (["a"], ["b", "c"])
    assert (tree.predict(data) == y).all()


def test_tree_diagnostic_on_noise(noise_subgroup):
    diagnostic = fit_tree_diagnostic(noise_subgroup, "anxiety_level", PARAMETERS)

    assert diagnostic["n_rows"] == noise_subgroup.height
    assert diagnostic["n_splits"] == 0
    assert diagnostic["majority_class"] == 8
    assert diagnostic["majority_share"] == 1.0
    assert diagnostic["predicted_distribution"] == {"8": noise_subgroup.height}
    assert diagnostic["structure"].startswith("predict 8")


@pytest.mark.parametrize("method", ["n_splits", "export_text"])
def test_unfitted_tree_raises(method):
    with pytest.raises(NotFittedError):
        getattr(ConditionalInferenceTree(), method)()


def test_unfitted_tree_predict_raises():
    with pytest.raises(NotFittedError):
        ConditionalInferenceTree().predict(pd.DataFrame({"x": [1.0]}))
