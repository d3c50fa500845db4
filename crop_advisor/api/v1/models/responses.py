"""
API response models using Pydantic.
"""
from typing import List, Optional
from pydantic import BaseModel, Field

from crop_advisor.domain.crop_profiles import get_crop_profile
from crop_advisor.domain.models import CropPrediction, FeatureVector, SoilType


class RankedCrop(BaseModel):
    """Single ranked crop with its display metadata."""
    crop: str = Field(
        description="Crop key as used by the classifier",
        examples=["rice"]
    )
    confidence: float = Field(
        description="Fraction of trees voting for this crop",
        examples=[0.8]
    )
    label: str = Field(
        description="Display name",
        examples=["Rice (Paddy)"]
    )
    seasons: List[str] = Field(default_factory=list)
    duration: Optional[str] = None
    preferred_soils: List[SoilType] = Field(default_factory=list)

    @classmethod
    def from_prediction(cls, prediction: CropPrediction) -> "RankedCrop":
        profile = get_crop_profile(prediction.crop)
        if profile is None:
            return cls(crop=prediction.crop, confidence=prediction.confidence, label=prediction.crop)
        return cls(
            crop=prediction.crop,
            confidence=prediction.confidence,
            label=profile.label,
            seasons=profile.seasons,
            duration=profile.duration,
            preferred_soils=profile.preferred_soils,
        )


class PredictionsResponse(BaseModel):
    """Response model for the prediction endpoints."""
    features: FeatureVector = Field(
        description="Feature vector the crops were ranked for"
    )
    predictions: List[RankedCrop] = Field(
        description="Crops sorted by confidence, highest first"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "features": {
                    "soilPH": 6.5, "nitrogen": 80, "phosphorus": 40, "potassium": 40,
                    "temperature": 25, "humidity": 80, "rainfall": 150, "soilType": "Loamy",
                },
                "predictions": [
                    {"crop": "rice", "confidence": 0.87, "label": "Rice (Paddy)",
                     "seasons": ["Kharif", "Rabi"], "duration": "120-150 days",
                     "preferred_soils": ["Loamy", "Clay", "Alluvial"]},
                ]
            }
        }


class RecommendationResponse(PredictionsResponse):
    """Response model for the recommendation endpoint."""
    advice: str = Field(
        description="Natural-language advice, or an 'unavailable' message"
    )
    advice_available: bool
    low_confidence: bool = Field(
        description="True when the top crop's confidence is below the configured minimum"
    )


class ModelStatusResponse(BaseModel):
    """Serving model status."""
    trained: bool
    num_trees: int
    max_depth: int
    min_samples_split: int
