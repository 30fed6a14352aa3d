"""Conditional inference tree.

Recursive partitioning that only splits a node when some predictor is
significantly associated with the response. At each node every predictor is
tested for independence from the categorical response:

* numeric predictors use the linear-statistic quadratic form
  ``(n - 1) * SS_between / SS_total``, asymptotically chi-squared with
  ``K - 1`` degrees of freedom;
* categorical predictors use ``(n - 1) / n`` times Pearson's chi-squared
  statistic with ``(r - 1)(K - 1)`` degrees of freedom.

The p-values are adjusted for the number of predictors tested and a split is
made only when ``criterion = (1 - p) ** m`` exceeds ``mincriterion``. The split
point of the selected predictor is the Gini-optimal binary split that leaves
at least ``min_bucket`` rows on each side.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
import scipy.stats as stats
from sklearn.exceptions import NotFittedError
from sklearn.tree import DecisionTreeClassifier


@dataclass
class TreeNode:
    n: int
    prediction: Any
    distribution: Dict[Any, int]
    feature: Optional[str] = None
    criterion: Optional[float] = None
    threshold: Optional[float] = None
    left_categories: List[Any] = field(default_factory=list)
    left: Optional["TreeNode"] = None
    right: Optional["TreeNode"] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None

    def goes_left(self, row: pd.Series) -> bool:
        value = row[self.feature]
        if self.threshold is not None:
            return value <= self.threshold
        return value in self.left_categories


def _native(value):
    return value.item() if isinstance(value, np.generic) else value


def _majority(y: np.ndarray) -> tuple[Any, Dict[Any, int]]:
    classes, counts = np.unique(y, return_counts=True)
    distribution = {_native(c): int(k) for c, k in zip(classes, counts)}
    # np.unique sorts, so ties resolve to the smallest class
    return _native(classes[np.argmax(counts)]), distribution


def numeric_association_pvalue(x: np.ndarray, y: np.ndarray) -> float:
    x = np.asarray(x, dtype=float)
    classes = np.unique(y)
    n = x.size
    ss_total = np.sum((x - x.mean()) ** 2)
    if classes.size < 2 or ss_total == 0:
        return 1.0

    ss_between = sum(
        (y == c).sum() * (x[y == c].mean() - x.mean()) ** 2 for c in classes
    )
    statistic = (n - 1) * ss_between / ss_total
    return float(stats.chi2.sf(statistic, classes.size - 1))


def categorical_association_pvalue(x: np.ndarray, y: np.ndarray) -> float:
    table = pd.crosstab(x, y).to_numpy()
    if table.shape[0] < 2 or table.shape[1] < 2:
        return 1.0

    n = table.sum()
    chi2, _, dof, _ = stats.chi2_contingency(table, correction=False)
    return float(stats.chi2.sf((n - 1) / n * chi2, dof))


class ConditionalInferenceTree:
    def __init__(
        self,
        mincriterion: float = 0.95,
        min_bucket: int = 7,
        min_split: int = 20,
        max_depth: Optional[int] = None,
    ):
        self.mincriterion = mincriterion
        self.min_bucket = min_bucket
        self.min_split = min_split
        self.max_depth = max_depth
        self.root_: Optional[TreeNode] = None

    def _is_numeric(self, series: pd.Series) -> bool:
        return pd.api.types.is_numeric_dtype(series) and not pd.api.types.is_bool_dtype(series)

    def _pvalue(self, series: pd.Series, y: np.ndarray) -> float:
        if self._is_numeric(series):
            return numeric_association_pvalue(series.to_numpy(), y)
        return categorical_association_pvalue(series.to_numpy(), y)

    def _split_point(self, series: pd.Series, y: np.ndarray) -> Optional[dict]:
        stump = DecisionTreeClassifier(max_depth=1, min_samples_leaf=self.min_bucket)

        if self._is_numeric(series):
            stump.fit(series.to_numpy(dtype=float).reshape(-1, 1), y)
            if stump.tree_.node_count == 1:
                return None
            return {"threshold": float(stump.tree_.threshold[0])}

        # categories ordered by their share of the node's majority class
        majority, _ = _majority(y)
        order = (
            pd.Series(y == majority, index=series.index)
            .groupby(series)
            .mean()
            .sort_values(kind="stable")
        )
        codes = series.map({c: i for i, c in enumerate(order.index)}).to_numpy(dtype=float)
        stump.fit(codes.reshape(-1, 1), y)
        if stump.tree_.node_count == 1:
            return None
        cut = stump.tree_.threshold[0]
        return {"left_categories": [_native(c) for i, c in enumerate(order.index) if i <= cut]}

    def _grow(self, X: pd.DataFrame, y: np.ndarray, depth: int) -> TreeNode:
        prediction, distribution = _majority(y)
        node = TreeNode(n=len(y), prediction=prediction, distribution=distribution)

        if len(y) < self.min_split or len(distribution) < 2:
            return node
        if self.max_depth is not None and depth >= self.max_depth:
            return node

        m = X.shape[1]
        criteria = {
            c: (1.0 - self._pvalue(X[c], y)) ** m for c in X.columns
        }
        feature = max(criteria, key=criteria.get)
        if criteria[feature] <= self.mincriterion:
            return node

        split = self._split_point(X[feature], y)
        if split is None:
            return node

        node.feature = feature
        node.criterion = criteria[feature]
        node.threshold = split.get("threshold")
        node.left_categories = split.get("left_categories", [])

        if node.threshold is not None:
            mask = (X[feature] <= node.threshold).to_numpy()
        else:
            mask = X[feature].isin(node.left_categories).to_numpy()

        node.left = self._grow(X[mask], y[mask], depth + 1)
        node.right = self._grow(X[~mask], y[~mask], depth + 1)
        return node

    def fit(self, X: pd.DataFrame, y) -> "ConditionalInferenceTree":
        self.root_ = self._grow(X.reset_index(drop=True), np.asarray(y), depth=0)
        return self

    def _fitted_root(self) -> TreeNode:
        if self.root_ is None:
            raise NotFittedError("ConditionalInferenceTree is not fitted yet; call fit first.")
        return self.root_

    def _leaf_for(self, row: pd.Series) -> TreeNode:
        node = self.root_
        while not node.is_leaf:
            node = node.left if node.goes_left(row) else node.right
        return node

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        self._fitted_root()
        return np.array([self._leaf_for(row).prediction for _, row in X.iterrows()])

    def n_splits(self, node: Optional[TreeNode] = None) -> int:
        node = self._fitted_root() if node is None else node
        if node.is_leaf:
            return 0
        return 1 + self.n_splits(node.left) + self.n_splits(node.right)

    def export_text(self, node: Optional[TreeNode] = None, depth: int = 0) -> str:
        node = self._fitted_root() if node is None else node
        indent = "|   " * depth
        if node.is_leaf:
            return f"{indent}predict {node.prediction} (n={node.n}, {node.distribution})\n"

        if node.threshold is not None:
            left_rule = f"{node.feature} <= {node.threshold:g}"
            right_rule = f"{node.feature} > {node.threshold:g}"
        else:
            left_rule = f"{node.feature} in {node.left_categories}"
            right_rule = f"{node.feature} not in {node.left_categories}"

        return (
            f"{indent}{left_rule} (criterion={node.criterion:.3f})\n"
            + self.export_text(node.left, depth + 1)
            + f"{indent}{right_rule}\n"
            + self.export_text(node.right, depth + 1)
        )
