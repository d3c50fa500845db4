"""
Domain service: random forest classifier for crop recommendation.

Each tree is grown on an independent bootstrap resample of the corpus and
the forest ranks crops by the fraction of trees voting for them.
"""
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union
import logging

import numpy as np

from crop_advisor.domain.exceptions import NotTrainedError, RetrainError
from crop_advisor.domain.models import (
    CropPrediction,
    FeatureVector,
    LabeledSample,
    validate_feature_vector,
)
from crop_advisor.services.domain.decision_tree import (
    DecisionTreeBuilder,
    TreeNode,
    count_leaves,
    predict_tree,
    tree_depth,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForestConfig:
    """Hyperparameters for the random forest."""

    num_trees: int = 15
    """Number of trees grown, and the denominator of every confidence"""

    max_depth: int = 12
    """Depth at which tree growth stops"""

    min_samples_split: int = 5
    """Nodes with fewer samples than this become leaves"""


class RandomForestClassifier:
    """
    Bagged ensemble of decision trees.

    Lifecycle:
    - Construct with a ForestConfig and a random source
    - `train` exactly once; a second call raises RetrainError
    - `predict` any number of times; it never mutates the forest
    """

    def __init__(
        self,
        config: Optional[ForestConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config or ForestConfig()
        if self.config.num_trees < 1:
            raise ValueError("num_trees must be at least 1")
        self.rng = rng if rng is not None else np.random.default_rng()
        self._trees: tuple[TreeNode, ...] = ()
        self._classes: tuple[str, ...] = ()

    @property
    def is_trained(self) -> bool:
        return len(self._trees) > 0

    @property
    def trees(self) -> tuple[TreeNode, ...]:
        return self._trees

    @property
    def classes(self) -> tuple[str, ...]:
        """Labels seen during training, in corpus order."""
        return self._classes

    def bootstrap_sample(self, corpus: Sequence[LabeledSample]) -> list[LabeledSample]:
        """Draw `len(corpus)` samples uniformly with replacement."""
        indices = self.rng.integers(0, len(corpus), size=len(corpus))
        return [corpus[i] for i in indices]

    def train(self, corpus: Sequence[LabeledSample]) -> None:
        """
        Grow the forest.

        The forest is published only after every tree has been built, so a
        failure part-way leaves the classifier untrained.

        Args:
            corpus: Labeled training samples

        Raises:
            RetrainError: If the classifier has already been trained
            ValueError: If the corpus is empty
        """
        if self.is_trained:
            raise RetrainError(
                f"Classifier already holds {len(self._trees)} trees; create a new instance to retrain"
            )
        if not corpus:
            raise ValueError("Cannot train on an empty corpus")

        logger.info(
            f"Training random forest: trees={self.config.num_trees}, "
            f"max_depth={self.config.max_depth}, "
            f"min_samples_split={self.config.min_samples_split}, samples={len(corpus)}"
        )

        builder = DecisionTreeBuilder(
            max_depth=self.config.max_depth,
            min_samples_split=self.config.min_samples_split,
            rng=self.rng,
        )

        trees = []
        for i in range(self.config.num_trees):
            tree = builder.build_tree(self.bootstrap_sample(corpus), depth=0)
            logger.debug(f"  tree #{i + 1}: depth={tree_depth(tree)}, leaves={count_leaves(tree)}")
            trees.append(tree)

        self._classes = tuple(dict.fromkeys(sample.label for sample in corpus))
        self._trees = tuple(trees)
        logger.info(f"Random forest training complete ({len(self._classes)} classes)")

    def predict(
        self,
        features: Union[FeatureVector, Mapping[str, Any]],
    ) -> list[CropPrediction]:
        """
        Rank crops by the share of trees voting for them.

        Ties in confidence keep the order in which crops first received a
        vote, polling trees in forest order.

        Args:
            features: Feature vector (or mapping to validate into one)

        Returns:
            CropPredictions sorted by confidence, descending

        Raises:
            InvalidFeatureError: If the features are invalid
            NotTrainedError: If the forest is empty
        """
        features = validate_feature_vector(features)
        if not self.is_trained:
            raise NotTrainedError("Classifier has not been trained")

        votes: dict[str, int] = {}
        for tree in self._trees:
            crop = predict_tree(tree, features)
            votes[crop] = votes.get(crop, 0) + 1

        ranked = sorted(votes.items(), key=lambda item: item[1], reverse=True)
        return [
            CropPrediction(crop=crop, confidence=count / len(self._trees))
            for crop, count in ranked
        ]
