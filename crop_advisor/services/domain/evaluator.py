"""
Domain service: held-out evaluation of the crop classifier.
"""
from collections import defaultdict
from typing import Optional, Sequence
import logging

import numpy as np

from crop_advisor.domain.models import EvaluationReport, LabeledSample
from crop_advisor.services.domain.random_forest import ForestConfig, RandomForestClassifier
from crop_advisor.services.domain.training_corpus import (
    DEFAULT_SAMPLES_PER_CROP,
    generate_training_data,
)

logger = logging.getLogger(__name__)


class ModelEvaluator:
    """
    Trains a fresh classifier on a shuffled split and scores it on the rest.

    The evaluated classifier is independent of the one serving predictions.
    """

    def __init__(
        self,
        config: Optional[ForestConfig] = None,
        train_fraction: float = 0.8,
        samples_per_crop: int = DEFAULT_SAMPLES_PER_CROP,
        rng: Optional[np.random.Generator] = None,
    ):
        if not 0 < train_fraction < 1:
            raise ValueError("train_fraction must be between 0 and 1")
        self.config = config or ForestConfig()
        self.train_fraction = train_fraction
        self.samples_per_crop = samples_per_crop
        self.rng = rng if rng is not None else np.random.default_rng()

    def evaluate(self, corpus: Optional[Sequence[LabeledSample]] = None) -> EvaluationReport:
        """
        Run a train/test evaluation.

        Args:
            corpus: Samples to split; a freshly generated corpus when omitted

        Returns:
            EvaluationReport with overall accuracy, per-class accuracy and
            a confusion matrix keyed true label -> predicted label

        Raises:
            ValueError: If the split leaves no test samples
        """
        if corpus is None:
            corpus = generate_training_data(self.rng, self.samples_per_crop)

        shuffled = [corpus[i] for i in self.rng.permutation(len(corpus))]
        train_size = int(len(shuffled) * self.train_fraction)
        train_set, test_set = shuffled[:train_size], shuffled[train_size:]
        if not train_set or not test_set:
            raise ValueError(
                f"Corpus of {len(corpus)} samples is too small to split at {self.train_fraction}"
            )

        model = RandomForestClassifier(config=self.config, rng=self.rng)
        model.train(train_set)

        correct = 0
        confusion: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
        totals: dict[str, int] = defaultdict(int)
        hits: dict[str, int] = defaultdict(int)

        for sample in test_set:
            predicted = model.predict(sample.features)[0].crop
            actual = sample.label

            confusion[actual][predicted] += 1
            totals[actual] += 1
            if predicted == actual:
                correct += 1
                hits[actual] += 1

        accuracy = correct / len(test_set)
        per_class = {crop: hits[crop] / total for crop, total in totals.items()}

        logger.info(f"Model accuracy: {accuracy * 100:.2f}% on {len(test_set)} held-out samples")
        for crop, crop_accuracy in per_class.items():
            logger.debug(f"  {crop}: {crop_accuracy * 100:.2f}%")

        return EvaluationReport(
            accuracy=accuracy,
            per_class_accuracy=per_class,
            confusion_matrix={actual: dict(row) for actual, row in confusion.items()},
            train_size=len(train_set),
            test_size=len(test_set),
        )
