import numpy as np
import pytest

from anxiety_survey_eda.density import kde_curve, rule_of_thumb_bandwidth


def test_rule_of_thumb_uses_smaller_spread_estimate():
    values = np.arange(1, 101, dtype=float)
    sd = np.std(values, ddof=1)
    # IQR / 1.34 exceeds the standard deviation for a uniform sample
    assert rule_of_thumb_bandwidth(values) == pytest.approx(0.9 * sd * 100 ** -0.2)


def test_rule_of_thumb_falls_back_on_constant_sample():
    bandwidth = rule_of_thumb_bandwidth(np.array([5.0, 5.0, 5.0]))
    assert bandwidth == pytest.approx(0.9 * 5.0 * 3 ** -0.2)
    assert rule_of_thumb_bandwidth(np.zeros(4)) > 0


def test_kde_curve_integrates_to_one():
    rng = np.random.default_rng(0)
    curve = kde_curve(rng.normal(size=300), adjust=1.5)

    x = curve["x"].to_numpy()
    assert curve.height == 512
    assert np.all(np.diff(x) > 0)
    assert (curve["density"].to_numpy() * (x[1] - x[0])).sum() == pytest.approx(1, abs=0.01)


def test_kde_curve_extends_past_sample_range():
    values = np.array([0.0, 1.0, 2.0, 3.0, 10.0])
    curve = kde_curve(values, n_points=64)
    assert curve.height == 64
    assert curve["x"].min() < 0
    assert curve["x"].max() > 10


@pytest.mark.parametrize("values", [[], [3.0], [2.0, 2.0, 2.0]])
def test_kde_curve_empty_for_degenerate_samples(values):
    curve = kde_curve(values)
    assert curve.height == 0
    assert curve.columns == ["x", "density"]
