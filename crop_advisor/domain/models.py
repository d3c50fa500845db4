"""
Domain models for soil/climate samples and crop predictions.

These models represent the core domain entities and should be independent
of any infrastructure concerns (HTTP, advice service, etc.).
"""
import math
from enum import Enum
from typing import Any, Mapping, Union

from pydantic import BaseModel, Field, ValidationError

from crop_advisor.domain.exceptions import InvalidFeatureError


class SoilType(str, Enum):
    """Categorical soil class. Carried with a sample, never split on."""
    SANDY = "Sandy"
    LOAMY = "Loamy"
    CLAY = "Clay"
    RED = "Red"
    BLACK = "Black"
    ALLUVIAL = "Alluvial"


class NumericFeature(str, Enum):
    """The seven numeric fields a decision tree may split on."""
    SOIL_PH = "soil_ph"
    NITROGEN = "nitrogen"
    PHOSPHORUS = "phosphorus"
    POTASSIUM = "potassium"
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    RAINFALL = "rainfall"

    @property
    def position(self) -> int:
        """Index of this feature in `FeatureVector.as_tuple()`."""
        return _FEATURE_POSITIONS[self]


NUMERIC_FEATURES: tuple[NumericFeature, ...] = tuple(NumericFeature)
_FEATURE_POSITIONS = {feature: i for i, feature in enumerate(NUMERIC_FEATURES)}


class FeatureVector(BaseModel):
    """Soil and climate attributes of one field."""
    soil_ph: float = Field(alias="soilPH", description="Soil pH (about 4.5-8.5)")
    nitrogen: float = Field(description="Nitrogen in kg/ha")
    phosphorus: float = Field(description="Phosphorus in kg/ha")
    potassium: float = Field(description="Potassium in kg/ha")
    temperature: float = Field(description="Mean temperature in °C")
    humidity: float = Field(description="Relative humidity in %")
    rainfall: float = Field(description="Rainfall in cm")
    soil_type: SoilType = Field(alias="soilType", description="Soil class")

    class Config:
        frozen = True
        populate_by_name = True
        allow_inf_nan = False

    def as_tuple(self) -> tuple[float, ...]:
        """Numeric fields in `NUMERIC_FEATURES` order."""
        return (
            self.soil_ph,
            self.nitrogen,
            self.phosphorus,
            self.potassium,
            self.temperature,
            self.humidity,
            self.rainfall,
        )

    def value_of(self, feature: NumericFeature) -> float:
        return self.as_tuple()[feature.position]

    @classmethod
    def from_values(cls, values, soil_type: SoilType) -> "FeatureVector":
        """Build a vector from seven numbers in `NUMERIC_FEATURES` order."""
        if len(values) != len(NUMERIC_FEATURES):
            raise InvalidFeatureError(
                f"Expected {len(NUMERIC_FEATURES)} numeric values, got {len(values)}"
            )
        fields = {f.value: float(v) for f, v in zip(NUMERIC_FEATURES, values)}
        return cls.parse({**fields, "soil_type": soil_type})

    @classmethod
    def parse(cls, data: Mapping[str, Any]) -> "FeatureVector":
        """
        Validate arbitrary input into a FeatureVector.

        Args:
            data: Mapping using either field names or their camelCase aliases

        Returns:
            FeatureVector instance

        Raises:
            InvalidFeatureError: If a field is missing, non-finite, or the
                soil type is not one of the known classes
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InvalidFeatureError(f"Invalid feature vector: {e}") from e


def validate_feature_vector(
    features: Union[FeatureVector, Mapping[str, Any]],
) -> FeatureVector:
    """
    Ensure `features` is a fully populated, finite FeatureVector.

    Vectors built with `model_construct` skip pydantic validation, so the
    finiteness and soil type checks are repeated here.
    """
    if isinstance(features, Mapping):
        return FeatureVector.parse(features)
    if not isinstance(features, FeatureVector):
        raise InvalidFeatureError(
            f"Expected FeatureVector, got {type(features).__name__}"
        )

    try:
        values = features.as_tuple()
        soil_type = features.soil_type
    except AttributeError as e:
        raise InvalidFeatureError(f"Feature vector is missing a field: {e}") from e

    for feature, value in zip(NUMERIC_FEATURES, values):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise InvalidFeatureError(f"{feature.value} must be a finite number, got {value!r}")
    if not isinstance(soil_type, SoilType):
        raise InvalidFeatureError(f"Unknown soil type: {soil_type!r}")
    return features


class LabeledSample(BaseModel):
    """A feature vector with its crop label."""
    features: FeatureVector
    label: str = Field(min_length=1, description="Crop class, e.g. 'rice'")

    class Config:
        frozen = True


class CropPrediction(BaseModel):
    """One ranked crop and the fraction of trees that voted for it."""
    crop: str
    confidence: float = Field(ge=0.0, le=1.0)

    class Config:
        frozen = True


class EvaluationReport(BaseModel):
    """Held-out evaluation of a freshly trained classifier."""
    accuracy: float
    per_class_accuracy: dict[str, float]
    confusion_matrix: dict[str, dict[str, int]] = Field(
        description="True label -> predicted label -> count"
    )
    train_size: int
    test_size: int


class CropSummary(BaseModel):
    """Sample count and mean numeric features for one crop in a corpus."""
    crop: str
    count: int
    average_features: dict[str, float]
