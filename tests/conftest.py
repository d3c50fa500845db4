"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Seeded random sources
- Sample feature vectors and labeled samples
- A generated training corpus
- A trained model lifecycle
- FastAPI test client
"""
import pytest
import numpy as np
from typing import Callable, Iterator
from fastapi.testclient import TestClient

from crop_advisor.main import app, limiter
from crop_advisor.api.dependencies import get_model_lifecycle
from crop_advisor.domain.models import FeatureVector, LabeledSample, SoilType
from crop_advisor.services.application.model_lifecycle import ModelLifecycle
from crop_advisor.services.domain.random_forest import ForestConfig
from crop_advisor.services.domain.training_corpus import generate_training_data


SEED = 42


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random source."""
    return np.random.default_rng(SEED)


@pytest.fixture
def rice_centroid() -> FeatureVector:
    """Feature vector at the exact rice centroid."""
    return FeatureVector(
        soil_ph=6.5,
        nitrogen=80,
        phosphorus=40,
        potassium=40,
        temperature=25,
        humidity=80,
        rainfall=150,
        soil_type=SoilType.LOAMY,
    )


@pytest.fixture
def make_sample() -> Callable[..., LabeledSample]:
    """Factory for labeled samples with mid-range defaults."""
    def _make(label: str, **overrides) -> LabeledSample:
        fields = {
            "soil_ph": 6.5,
            "nitrogen": 50.0,
            "phosphorus": 50.0,
            "potassium": 50.0,
            "temperature": 25.0,
            "humidity": 70.0,
            "rainfall": 100.0,
            "soil_type": SoilType.LOAMY,
        }
        fields.update(overrides)
        return LabeledSample(features=FeatureVector(**fields), label=label)
    return _make


@pytest.fixture(scope="session")
def corpus() -> list[LabeledSample]:
    """Generated 8 x 50 training corpus."""
    return generate_training_data(np.random.default_rng(SEED))


# ============================================================
# Model Fixtures
# ============================================================

@pytest.fixture(scope="session")
def trained_lifecycle() -> ModelLifecycle:
    """Lifecycle with the production hyperparameters, already trained."""
    lifecycle = ModelLifecycle(
        config=ForestConfig(num_trees=15, max_depth=12, min_samples_split=5),
        seed=SEED,
    )
    lifecycle.get_classifier()
    return lifecycle


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client(trained_lifecycle) -> Iterator[TestClient]:
    """Test client running the app lifespan, serving the trained model."""
    app.dependency_overrides[get_model_lifecycle] = lambda: trained_lifecycle
    limiter.reset()
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
