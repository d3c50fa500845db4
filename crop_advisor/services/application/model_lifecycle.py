"""
Application service: one lazily trained classifier per process.
"""
from typing import Any, Callable, Mapping, Optional, Sequence, Union
import logging
import threading

import numpy as np

from crop_advisor.config import Settings
from crop_advisor.domain.models import CropPrediction, FeatureVector, LabeledSample
from crop_advisor.services.domain.random_forest import ForestConfig, RandomForestClassifier
from crop_advisor.services.domain.training_corpus import generate_training_data

logger = logging.getLogger(__name__)

CorpusFactory = Callable[[np.random.Generator], Sequence[LabeledSample]]


class ModelLifecycle:
    """
    Owns construction and training of the serving classifier.

    The first `get_classifier` call trains the model; concurrent first
    callers wait on a lock instead of starting a second training run.
    After that the trained classifier is returned without locking.
    """

    def __init__(
        self,
        config: Optional[ForestConfig] = None,
        corpus_factory: Optional[CorpusFactory] = None,
        seed: Optional[int] = None,
    ):
        """
        Initialize the lifecycle.

        Args:
            config: Forest hyperparameters
            corpus_factory: Builds the training corpus from a random source
            seed: Seed for corpus generation and training (None = entropy)
        """
        self.config = config or ForestConfig()
        self.corpus_factory = corpus_factory or generate_training_data
        self.seed = seed
        self._classifier: Optional[RandomForestClassifier] = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModelLifecycle":
        config = ForestConfig(
            num_trees=settings.model_num_trees,
            max_depth=settings.model_max_depth,
            min_samples_split=settings.model_min_samples_split,
        )
        samples_per_crop = settings.samples_per_crop
        return cls(
            config=config,
            corpus_factory=lambda rng: generate_training_data(rng, samples_per_crop),
            seed=settings.random_seed,
        )

    @property
    def is_ready(self) -> bool:
        return self._classifier is not None

    def get_classifier(self) -> RandomForestClassifier:
        classifier = self._classifier
        if classifier is not None:
            return classifier

        with self._lock:
            if self._classifier is None:
                self._classifier = self._train()
            return self._classifier

    def get_ml_predictions(
        self,
        features: Union[FeatureVector, Mapping[str, Any]],
    ) -> list[CropPrediction]:
        """Rank crops for `features`, training the model on first use."""
        return self.get_classifier().predict(features)

    def _train(self) -> RandomForestClassifier:
        logger.info("Initializing random forest model...")
        rng = np.random.default_rng(self.seed)
        corpus = self.corpus_factory(rng)
        classifier = RandomForestClassifier(config=self.config, rng=rng)
        classifier.train(corpus)
        logger.info(f"Model ready: {len(classifier.trees)} trees over {len(corpus)} samples")
        return classifier
