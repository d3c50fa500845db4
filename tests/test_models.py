"""
Unit tests for domain models and input validation.
"""
import pytest
from pydantic import ValidationError

from crop_advisor.domain.exceptions import InvalidFeatureError
from crop_advisor.domain.models import (
    NUMERIC_FEATURES,
    FeatureVector,
    LabeledSample,
    NumericFeature,
    SoilType,
    validate_feature_vector,
)


RICE_PAYLOAD = {
    "soilPH": 6.5,
    "nitrogen": 80,
    "phosphorus": 40,
    "potassium": 40,
    "temperature": 25,
    "humidity": 80,
    "rainfall": 150,
    "soilType": "Loamy",
}


# ============================================================
# FeatureVector Tests
# ============================================================

class TestFeatureVector:
    """Tests for FeatureVector parsing and access."""

    def test_parse_camel_case_aliases(self, rice_centroid):
        assert FeatureVector.parse(RICE_PAYLOAD) == rice_centroid

    def test_parse_field_names(self, rice_centroid):
        assert FeatureVector.parse(rice_centroid.model_dump()) == rice_centroid

    def test_serializes_with_aliases(self, rice_centroid):
        data = rice_centroid.model_dump(by_alias=True, mode="json")

        assert data["soilPH"] == 6.5
        assert data["soilType"] == "Loamy"

    @pytest.mark.parametrize("field, value", [
        ("rainfall", float("nan")),
        ("nitrogen", float("inf")),
        ("temperature", float("-inf")),
        ("humidity", "humid"),
        ("soilType", "Peat"),
    ])
    def test_parse_rejects_invalid_values(self, field, value):
        with pytest.raises(InvalidFeatureError):
            FeatureVector.parse({**RICE_PAYLOAD, field: value})

    @pytest.mark.parametrize("field", list(RICE_PAYLOAD))
    def test_parse_rejects_missing_field(self, field):
        payload = {k: v for k, v in RICE_PAYLOAD.items() if k != field}

        with pytest.raises(InvalidFeatureError):
            FeatureVector.parse(payload)

    def test_invalid_feature_error_is_value_error(self):
        with pytest.raises(ValueError):
            FeatureVector.parse({})

    def test_as_tuple_order(self, rice_centroid):
        assert rice_centroid.as_tuple() == (6.5, 80, 40, 40, 25, 80, 150)

    def test_value_of_each_feature(self, rice_centroid):
        assert rice_centroid.value_of(NumericFeature.SOIL_PH) == 6.5
        assert rice_centroid.value_of(NumericFeature.NITROGEN) == 80
        assert rice_centroid.value_of(NumericFeature.RAINFALL) == 150

    def test_feature_positions_follow_declaration(self):
        assert [f.position for f in NUMERIC_FEATURES] == list(range(7))

    def test_from_values(self):
        vector = FeatureVector.from_values([6.5, 80, 40, 40, 25, 80, 150], SoilType.CLAY)

        assert vector.soil_type == SoilType.CLAY
        assert vector.rainfall == 150

    def test_from_values_wrong_length(self):
        with pytest.raises(InvalidFeatureError):
            FeatureVector.from_values([6.5, 80], SoilType.CLAY)

    def test_frozen(self, rice_centroid):
        with pytest.raises(ValidationError):
            rice_centroid.nitrogen = 10


# ============================================================
# Validation Helper Tests
# ============================================================

class TestValidateFeatureVector:
    """Tests for validate_feature_vector."""

    def test_returns_valid_vector_unchanged(self, rice_centroid):
        assert validate_feature_vector(rice_centroid) is rice_centroid

    def test_parses_mapping(self, rice_centroid):
        assert validate_feature_vector(RICE_PAYLOAD) == rice_centroid

    def test_rejects_unvalidated_nan(self, rice_centroid):
        vector = FeatureVector.model_construct(**{**rice_centroid.model_dump(), "soil_ph": float("nan")})

        with pytest.raises(InvalidFeatureError):
            validate_feature_vector(vector)

    def test_rejects_unvalidated_bool(self, rice_centroid):
        vector = FeatureVector.model_construct(**{**rice_centroid.model_dump(), "nitrogen": True})

        with pytest.raises(InvalidFeatureError, match="nitrogen"):
            validate_feature_vector(vector)

    def test_rejects_unvalidated_missing_field(self):
        vector = FeatureVector.model_construct(soil_ph=6.5)

        with pytest.raises(InvalidFeatureError):
            validate_feature_vector(vector)

    def test_rejects_unvalidated_soil_string(self, rice_centroid):
        vector = FeatureVector.model_construct(**{**rice_centroid.model_dump(), "soil_type": "Loamy"})

        with pytest.raises(InvalidFeatureError):
            validate_feature_vector(vector)

    def test_rejects_other_types(self):
        with pytest.raises(InvalidFeatureError):
            validate_feature_vector("6.5,80,40")


# ============================================================
# LabeledSample Tests
# ============================================================

class TestLabeledSample:
    """Tests for LabeledSample."""

    def test_immutable(self, rice_centroid):
        sample = LabeledSample(features=rice_centroid, label="rice")

        with pytest.raises(ValidationError):
            sample.label = "wheat"

    def test_empty_label_rejected(self, rice_centroid):
        with pytest.raises(ValidationError):
            LabeledSample(features=rice_centroid, label="")
