"""
Unit tests for the random forest classifier.

Tests cover:
- Bootstrap sampling
- One-shot training
- Vote aggregation and confidence ranking
- Input validation
- End-to-end prediction on the generated corpus
"""
import math

import pytest
import numpy as np

from crop_advisor.domain.exceptions import InvalidFeatureError, NotTrainedError, RetrainError
from crop_advisor.domain.models import CropPrediction, FeatureVector
from crop_advisor.services.domain.decision_tree import LeafNode
from crop_advisor.services.domain.random_forest import ForestConfig, RandomForestClassifier


@pytest.fixture(scope="module")
def trained_forest(corpus) -> RandomForestClassifier:
    """Forest trained with the production hyperparameters."""
    forest = RandomForestClassifier(
        config=ForestConfig(num_trees=15, max_depth=12, min_samples_split=5),
        rng=np.random.default_rng(42),
    )
    forest.train(corpus)
    return forest


@pytest.fixture
def small_forest(rng) -> RandomForestClassifier:
    return RandomForestClassifier(
        config=ForestConfig(num_trees=3, max_depth=4, min_samples_split=5),
        rng=rng,
    )


# ============================================================
# Bootstrap Tests
# ============================================================

class TestBootstrap:
    """Tests for bootstrap resampling."""

    def test_same_size_as_corpus(self, small_forest, corpus):
        resample = small_forest.bootstrap_sample(corpus)

        assert len(resample) == len(corpus)

    def test_draws_only_corpus_samples(self, small_forest, corpus):
        resample = small_forest.bootstrap_sample(corpus)
        corpus_ids = {id(sample) for sample in corpus}

        assert all(id(sample) in corpus_ids for sample in resample)

    def test_draws_with_replacement(self, small_forest, corpus):
        resample = small_forest.bootstrap_sample(corpus)

        # 400 draws from 400 items are all distinct with negligible probability
        assert len({id(sample) for sample in resample}) < len(corpus)


# ============================================================
# Training Lifecycle Tests
# ============================================================

class TestTraining:
    """Tests for one-shot training."""

    def test_untrained_state(self, small_forest):
        assert not small_forest.is_trained
        assert small_forest.trees == ()
        assert small_forest.classes == ()

    def test_grows_configured_number_of_trees(self, small_forest, corpus):
        small_forest.train(corpus)

        assert small_forest.is_trained
        assert len(small_forest.trees) == 3

    def test_classes_in_corpus_order(self, small_forest, corpus):
        small_forest.train(corpus)

        assert small_forest.classes == (
            "rice", "wheat", "cotton", "sugarcane", "maize", "pulses", "vegetables", "oilseeds",
        )

    def test_second_train_rejected(self, small_forest, corpus):
        small_forest.train(corpus)
        trees_before = small_forest.trees

        with pytest.raises(RetrainError):
            small_forest.train(corpus)

        assert small_forest.trees is trees_before

    def test_empty_corpus_rejected(self, small_forest):
        with pytest.raises(ValueError):
            small_forest.train([])

        assert not small_forest.is_trained

    def test_zero_trees_rejected(self):
        with pytest.raises(ValueError):
            RandomForestClassifier(config=ForestConfig(num_trees=0))


# ============================================================
# Prediction Tests
# ============================================================

class TestPrediction:
    """Tests for vote aggregation."""

    def test_predict_before_train_raises(self, small_forest, rice_centroid):
        with pytest.raises(NotTrainedError):
            small_forest.predict(rice_centroid)

    def test_confidences_form_distribution(self, trained_forest, corpus):
        for sample in corpus[::25]:
            predictions = trained_forest.predict(sample.features)

            assert math.isclose(sum(p.confidence for p in predictions), 1.0)
            assert all(0.0 <= p.confidence <= 1.0 for p in predictions)

    def test_sorted_by_confidence(self, trained_forest, corpus):
        for sample in corpus[::40]:
            confidences = [p.confidence for p in trained_forest.predict(sample.features)]

            assert confidences == sorted(confidences, reverse=True)

    def test_confidence_is_share_of_trees(self, trained_forest, rice_centroid):
        for prediction in trained_forest.predict(rice_centroid):
            votes = prediction.confidence * 15
            assert votes == pytest.approx(round(votes))

    def test_predict_is_idempotent(self, trained_forest, rice_centroid):
        first = trained_forest.predict(rice_centroid)
        second = trained_forest.predict(rice_centroid)

        assert first == second

    def test_ties_keep_discovery_order(self, rice_centroid):
        """Equal vote counts rank in the order crops first received a vote."""
        forest = RandomForestClassifier(config=ForestConfig(num_trees=4))
        forest._trees = (
            LeafNode(prediction="wheat", sample_count=1),
            LeafNode(prediction="rice", sample_count=1),
            LeafNode(prediction="rice", sample_count=1),
            LeafNode(prediction="wheat", sample_count=1),
        )

        predictions = forest.predict(rice_centroid)

        assert predictions == [
            CropPrediction(crop="wheat", confidence=0.5),
            CropPrediction(crop="rice", confidence=0.5),
        ]

    def test_accepts_mapping(self, trained_forest, rice_centroid):
        as_mapping = rice_centroid.model_dump(by_alias=True)

        assert trained_forest.predict(as_mapping) == trained_forest.predict(rice_centroid)


# ============================================================
# Input Validation Tests
# ============================================================

class TestInputValidation:
    """Tests for feature validation before prediction."""

    def test_nan_mapping_rejected(self, trained_forest, rice_centroid):
        data = rice_centroid.model_dump()
        data["rainfall"] = float("nan")

        with pytest.raises(InvalidFeatureError):
            trained_forest.predict(data)

    def test_missing_field_rejected(self, trained_forest, rice_centroid):
        data = rice_centroid.model_dump()
        del data["humidity"]

        with pytest.raises(InvalidFeatureError):
            trained_forest.predict(data)

    def test_unvalidated_infinite_value_rejected(self, trained_forest, rice_centroid):
        data = rice_centroid.model_dump()
        data["nitrogen"] = float("inf")
        vector = FeatureVector.model_construct(**data)

        with pytest.raises(InvalidFeatureError):
            trained_forest.predict(vector)

    def test_unknown_soil_type_rejected(self, trained_forest, rice_centroid):
        data = rice_centroid.model_dump()
        data["soil_type"] = "Peat"

        with pytest.raises(InvalidFeatureError):
            trained_forest.predict(data)

    def test_wrong_type_rejected(self, trained_forest):
        with pytest.raises(InvalidFeatureError):
            trained_forest.predict([6.5, 80, 40, 40, 25, 80, 150])


# ============================================================
# End-to-End Tests
# ============================================================

class TestEndToEnd:
    """Tests against the generated corpus."""

    def test_rice_centroid_predicts_rice(self, trained_forest, rice_centroid):
        predictions = trained_forest.predict(rice_centroid)

        assert predictions[0].crop == "rice"
        assert predictions[0].confidence > 0.5

    def test_training_samples_mostly_recovered(self, trained_forest, corpus):
        correct = sum(
            trained_forest.predict(sample.features)[0].crop == sample.label
            for sample in corpus
        )

        assert correct / len(corpus) > 0.85
