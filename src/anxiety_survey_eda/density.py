"""Kernel density curves shared by the univariate and bivariate summaries."""

import numpy as np
import polars as pl
import scipy.stats as stats


def rule_of_thumb_bandwidth(values: np.ndarray) -> float:
    """Silverman's rule of thumb, ``0.9 * min(sd, IQR / 1.34) * n ** -0.2``.

    Degenerate samples fall back to the standard deviation, then to
    ``|x[0]|``, then to 1, so the bandwidth is always positive.
    """
    values = np.asarray(values, dtype=float)
    n = values.size
    sd = np.std(values, ddof=1) if n > 1 else 0.0
    q1, q3 = np.percentile(values, [25, 75])
    lo = min(sd, (q3 - q1) / 1.34)
    if lo == 0:
        lo = sd or abs(values[0]) or 1.0
    return 0.9 * lo * n ** (-0.2)


def kde_curve(
    values,
    adjust: float = 1.0,
    n_points: int = 512,
    cut: float = 3.0,
) -> pl.DataFrame:
    """Gaussian KDE evaluated on an evenly spaced grid.

    The grid spans ``cut`` bandwidths past the sample range. Returns an empty
    frame for samples with fewer than two distinct values, where a density is
    undefined.
    """
    values = np.asarray(values, dtype=float)
    if values.size < 2 or np.unique(values).size < 2:
        return pl.DataFrame(
            {"x": [], "density": []}, schema={"x": pl.Float64, "density": pl.Float64}
        )

    bandwidth = adjust * rule_of_thumb_bandwidth(values)
    # gaussian_kde scales a scalar bw_method by the sample standard deviation
    kde = stats.gaussian_kde(values, bw_method=bandwidth / np.std(values, ddof=1))

    grid = np.linspace(
        values.min() - cut * bandwidth, values.max() + cut * bandwidth, n_points
    )
    return pl.DataFrame({"x": grid, "density": kde(grid)})
