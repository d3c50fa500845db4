"""
Unit tests for application settings.
"""
import pytest
from pydantic import ValidationError

from crop_advisor.config import Settings


class TestSettings:
    """Tests for Settings defaults and validation."""

    def test_model_defaults(self):
        settings = Settings()

        assert settings.model_num_trees == 15
        assert settings.model_max_depth == 12
        assert settings.model_min_samples_split == 5
        assert settings.samples_per_crop == 50
        assert settings.train_test_split == 0.8

    @pytest.mark.parametrize("field", ["model_num_trees", "model_max_depth"])
    def test_rejects_values_below_one(self, field):
        with pytest.raises(ValidationError, match="must be at least 1"):
            Settings(**{field: 0})

    @pytest.mark.parametrize("split", [0.0, 1.0, -0.2])
    def test_rejects_split_outside_unit_interval(self, split):
        with pytest.raises(ValidationError, match="between 0 and 1"):
            Settings(train_test_split=split)

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("MODEL_NUM_TREES", "7")
        monkeypatch.setenv("RANDOM_SEED", "11")

        settings = Settings()

        assert settings.model_num_trees == 7
        assert settings.random_seed == 11
