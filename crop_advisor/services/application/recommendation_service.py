"""
Application service: Orchestration layer for crop recommendations.
"""
from dataclasses import dataclass
from typing import Any, Optional
import logging

import numpy as np
from starlette.concurrency import run_in_threadpool

from crop_advisor.domain.crop_profiles import get_crop_profile
from crop_advisor.domain.models import CropPrediction, FeatureVector
from crop_advisor.infrastructure.advice_client import AdviceServiceClient, AdviceServiceError
from crop_advisor.services.application.model_lifecycle import ModelLifecycle
from crop_advisor.services.domain.feature_extraction import extract_features_from_description

logger = logging.getLogger(__name__)

ADVICE_UNAVAILABLE = "Recommendation unavailable. Please try again later."


@dataclass
class Recommendation:
    """Ranked crops for a field plus the advice text phrased from them."""
    features: FeatureVector
    predictions: list[CropPrediction]
    advice: str
    advice_available: bool
    low_confidence: bool


class RecommendationService:
    """
    Application service for crop recommendations.

    Coordinates the classifier lifecycle, feature extraction and the
    advice client. No classification logic lives here.
    """

    def __init__(
        self,
        lifecycle: ModelLifecycle,
        advice_client: Optional[AdviceServiceClient] = None,
        top_n: int = 3,
        min_confidence: float = 0.3,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize the service with dependencies.

        Args:
            lifecycle: Owner of the trained classifier
            advice_client: Advice service client (None = advice disabled)
            top_n: Number of ranked crops returned
            min_confidence: Top confidence below which results are flagged
            rng: Random source for description-based feature extraction
        """
        self.lifecycle = lifecycle
        self.advice_client = advice_client
        self.top_n = top_n
        self.min_confidence = min_confidence
        self.rng = rng if rng is not None else np.random.default_rng()

    def get_ml_predictions(self, features: FeatureVector) -> list[CropPrediction]:
        """Full ranked prediction list from the serving classifier."""
        return self.lifecycle.get_ml_predictions(features)

    async def rank_crops(self, features: FeatureVector) -> list[CropPrediction]:
        """Top-N ranked crops, computed off the event loop."""
        predictions = await run_in_threadpool(self.get_ml_predictions, features)
        return predictions[:self.top_n]

    async def rank_crops_from_description(
        self,
        description: str,
        region: str,
    ) -> tuple[FeatureVector, list[CropPrediction]]:
        """Extract features from free text, then rank crops for them."""
        features = extract_features_from_description(description, region, self.rng)
        return features, await self.rank_crops(features)

    async def get_recommendation(self, features: FeatureVector) -> Recommendation:
        """
        Rank crops and ask the advice service to phrase a recommendation.

        Advice failures degrade to a fixed "unavailable" message; the ranked
        predictions are returned either way.
        """
        predictions = await self.rank_crops(features)
        low_confidence = not predictions or predictions[0].confidence < self.min_confidence

        advice = ADVICE_UNAVAILABLE
        advice_available = False
        if self.advice_client is not None and self.advice_client.is_configured:
            try:
                advice = await self.advice_client.generate_advice(
                    self._advice_context(features, predictions, low_confidence)
                )
                advice_available = True
            except AdviceServiceError as e:
                logger.warning(f"Advice service unavailable: {e.message}")
        else:
            logger.debug("Advice service not configured; returning predictions only")

        return Recommendation(
            features=features,
            predictions=predictions,
            advice=advice,
            advice_available=advice_available,
            low_confidence=low_confidence,
        )

    def _advice_context(
        self,
        features: FeatureVector,
        predictions: list[CropPrediction],
        low_confidence: bool,
    ) -> dict[str, Any]:
        crops = []
        for prediction in predictions:
            profile = get_crop_profile(prediction.crop)
            crops.append({
                "crop": prediction.crop,
                "label": profile.label if profile else prediction.crop,
                "confidence": round(prediction.confidence, 3),
            })
        return {
            "conditions": features.model_dump(mode="json"),
            "ranked_crops": crops,
            "low_confidence": low_confidence,
        }
