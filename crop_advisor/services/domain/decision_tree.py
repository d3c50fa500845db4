"""
Domain service: CART-style decision tree induction over numeric features.

Trees are grown by recursive binary partitioning:
- Gini impurity as the split criterion
- A fresh random subset of ceil(sqrt(7)) candidate features at every split
- Midpoints between consecutive distinct values as thresholds
- `value <= threshold` goes left, `value > threshold` goes right
- Majority-vote leaves, ties going to the label seen first
- Pure nodes stop growing even when deeper splits are allowed
"""
from dataclasses import dataclass
from typing import Optional, Sequence, Union
import logging
import math

import numpy as np

from crop_advisor.domain.models import (
    NUMERIC_FEATURES,
    FeatureVector,
    LabeledSample,
    NumericFeature,
)

logger = logging.getLogger(__name__)

FEATURES_PER_SPLIT = math.ceil(math.sqrt(len(NUMERIC_FEATURES)))


@dataclass(frozen=True)
class LeafNode:
    """Terminal node holding the majority label of its training samples."""
    prediction: str
    sample_count: int


@dataclass(frozen=True)
class InternalNode:
    """Binary split on one numeric feature."""
    feature: NumericFeature
    threshold: float
    left: "TreeNode"
    right: "TreeNode"
    sample_count: int


TreeNode = Union[InternalNode, LeafNode]


@dataclass(frozen=True)
class Split:
    """Best (feature, threshold) pair found for a node."""
    feature: NumericFeature
    threshold: float
    impurity: float


def gini_impurity(labels: Sequence[str]) -> float:
    """
    Gini impurity of a label collection: 1 - sum(p_c^2).

    An empty collection has impurity 0.
    """
    if len(labels) == 0:
        return 0.0
    _, counts = np.unique(np.asarray(labels), return_counts=True)
    probabilities = counts / len(labels)
    return float(1.0 - np.sum(probabilities ** 2))


def _to_arrays(samples: Sequence[LabeledSample]) -> tuple[np.ndarray, np.ndarray, list[str]]:
    """Encode samples as a feature matrix and integer label codes."""
    classes: list[str] = []
    codes: dict[str, int] = {}
    y = np.empty(len(samples), dtype=np.intp)
    for i, sample in enumerate(samples):
        if sample.label not in codes:
            codes[sample.label] = len(classes)
            classes.append(sample.label)
        y[i] = codes[sample.label]

    x = np.array([s.features.as_tuple() for s in samples], dtype=float).reshape(
        len(samples), len(NUMERIC_FEATURES)
    )
    return x, y, classes


def _majority_code(y: np.ndarray, n_classes: int) -> int:
    """Most frequent code; among ties, the one occurring first in `y`."""
    counts = np.bincount(y, minlength=n_classes)
    winners = np.flatnonzero(counts == counts.max())
    if len(winners) == 1:
        return int(winners[0])
    first_seen = [int(np.argmax(y == code)) for code in winners]
    return int(winners[int(np.argmin(first_seen))])


def _weighted_gini_by_threshold(
    values: np.ndarray,
    y: np.ndarray,
    n_classes: int,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Weighted Gini impurity of every midpoint split on one feature.

    Sorting once and accumulating one-hot label counts gives the class
    counts of every left partition in a single pass.

    Returns:
        (thresholds, impurities), thresholds ascending; both empty when
        the feature has no variance
    """
    order = np.argsort(values, kind="stable")
    sorted_values = values[order]
    boundaries = np.flatnonzero(sorted_values[:-1] < sorted_values[1:])
    if len(boundaries) == 0:
        return np.empty(0), np.empty(0)

    n = len(values)
    one_hot = np.zeros((n, n_classes))
    one_hot[np.arange(n), y[order]] = 1.0
    left_counts = np.cumsum(one_hot, axis=0)[boundaries]
    right_counts = one_hot.sum(axis=0) - left_counts

    left_n = (boundaries + 1).astype(float)
    right_n = n - left_n

    left_gini = 1.0 - np.sum((left_counts / left_n[:, None]) ** 2, axis=1)
    right_gini = 1.0 - np.sum((right_counts / right_n[:, None]) ** 2, axis=1)
    impurities = (left_n / n) * left_gini + (right_n / n) * right_gini

    thresholds = (sorted_values[boundaries] + sorted_values[boundaries + 1]) / 2
    return thresholds, impurities


class DecisionTreeBuilder:
    """
    Grows one decision tree from labeled samples.

    The builder holds the hyperparameters and the random source used for
    candidate feature draws; it keeps no state between `build_tree` calls.
    """

    def __init__(
        self,
        max_depth: int = 10,
        min_samples_split: int = 5,
        rng: Optional[np.random.Generator] = None,
        features_per_split: int = FEATURES_PER_SPLIT,
    ):
        """
        Initialize the builder.

        Args:
            max_depth: Depth at which every node becomes a leaf (0 = single leaf)
            min_samples_split: Nodes with fewer samples become leaves
            rng: Random source for feature subsampling
            features_per_split: Candidate features drawn at every split
        """
        if max_depth < 0:
            raise ValueError("max_depth must be non-negative")
        if not 1 <= features_per_split <= len(NUMERIC_FEATURES):
            raise ValueError(
                f"features_per_split must be between 1 and {len(NUMERIC_FEATURES)}"
            )
        self.max_depth = max_depth
        self.min_samples_split = min_samples_split
        self.rng = rng if rng is not None else np.random.default_rng()
        self.features_per_split = features_per_split

    def build_tree(self, samples: Sequence[LabeledSample], depth: int = 0) -> TreeNode:
        """
        Grow a tree from `samples`, treating the root as sitting at `depth`.

        Args:
            samples: Non-empty training samples
            depth: Depth of the returned root

        Returns:
            Root TreeNode
        """
        if not samples:
            raise ValueError("Cannot build a tree from an empty sample set")
        x, y, classes = _to_arrays(samples)
        return self._grow(x, y, classes, depth)

    def find_best_split(self, samples: Sequence[LabeledSample]) -> Optional[Split]:
        """
        Find the lowest weighted-Gini split among freshly drawn candidate features.

        Returns:
            Best Split, or None when no candidate separates the samples
        """
        if not samples:
            return None
        x, y, classes = _to_arrays(samples)
        return self._best_split(x, y, len(classes))

    def _draw_candidate_features(self) -> np.ndarray:
        return self.rng.choice(len(NUMERIC_FEATURES), size=self.features_per_split, replace=False)

    def _best_split(self, x: np.ndarray, y: np.ndarray, n_classes: int) -> Optional[Split]:
        best: Optional[Split] = None

        for column in self._draw_candidate_features():
            thresholds, impurities = _weighted_gini_by_threshold(x[:, column], y, n_classes)
            if len(impurities) == 0:
                continue
            i = int(np.argmin(impurities))
            if best is None or impurities[i] < best.impurity:
                best = Split(
                    feature=NUMERIC_FEATURES[column],
                    threshold=float(thresholds[i]),
                    impurity=float(impurities[i]),
                )

        return best

    def _leaf(self, y: np.ndarray, classes: list[str]) -> LeafNode:
        return LeafNode(
            prediction=classes[_majority_code(y, len(classes))],
            sample_count=len(y),
        )

    def _grow(self, x: np.ndarray, y: np.ndarray, classes: list[str], depth: int) -> TreeNode:
        if depth >= self.max_depth or len(y) < self.min_samples_split:
            return self._leaf(y, classes)
        if np.all(y == y[0]):
            # Pure node: any split would leave identical leaves
            return self._leaf(y, classes)

        split = self._best_split(x, y, len(classes))
        if split is None:
            return self._leaf(y, classes)

        goes_left = x[:, split.feature.position] <= split.threshold
        if goes_left.all() or not goes_left.any():
            return self._leaf(y, classes)

        logger.debug(
            f"depth={depth} split {split.feature.value} <= {split.threshold:.3f} "
            f"({int(goes_left.sum())}/{len(y)}) gini={split.impurity:.4f}"
        )

        return InternalNode(
            feature=split.feature,
            threshold=split.threshold,
            left=self._grow(x[goes_left], y[goes_left], classes, depth + 1),
            right=self._grow(x[~goes_left], y[~goes_left], classes, depth + 1),
            sample_count=len(y),
        )


def predict_tree(node: TreeNode, features: FeatureVector) -> str:
    """Follow `<=` / `>` comparisons from `node` down to a leaf label."""
    values = features.as_tuple()
    while isinstance(node, InternalNode):
        if values[node.feature.position] <= node.threshold:
            node = node.left
        else:
            node = node.right
    return node.prediction


def tree_depth(node: TreeNode) -> int:
    """Number of edges on the longest root-to-leaf path."""
    if isinstance(node, LeafNode):
        return 0
    return 1 + max(tree_depth(node.left), tree_depth(node.right))


def count_leaves(node: TreeNode) -> int:
    if isinstance(node, LeafNode):
        return 1
    return count_leaves(node.left) + count_leaves(node.right)
