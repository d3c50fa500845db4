"""
API router for crop prediction endpoints.
"""
from fastapi import APIRouter

from crop_advisor.api.dependencies import RecommendationServiceDep
from crop_advisor.api.v1.models.requests import DescriptionRequest
from crop_advisor.api.v1.models.responses import (
    PredictionsResponse,
    RankedCrop,
    RecommendationResponse,
)
from crop_advisor.domain.models import FeatureVector


router = APIRouter(
    prefix="/crops",
    tags=["crops"],
)

COMMON_RESPONSES = {
    422: {"description": "Invalid feature vector"},
    429: {"description": "Rate limit exceeded"},
    503: {"description": "Model not available"},
}


@router.post(
    "/predict",
    response_model=PredictionsResponse,
    summary="Rank crops for soil and climate features",
    description="""
    Rank candidate crops for a field using the random forest classifier.

    Each of the forest's trees votes for one crop; confidence is the share
    of trees voting for it. The model is trained on first use.
    """,
    responses=COMMON_RESPONSES,
)
async def predict_crops(
    features: FeatureVector,
    recommendation_service: RecommendationServiceDep,
) -> PredictionsResponse:
    """
    Rank crops for a feature vector.

    Args:
        features: Soil and climate features
        recommendation_service: Recommendation service (injected dependency)

    Returns:
        PredictionsResponse with the top ranked crops
    """
    predictions = await recommendation_service.rank_crops(features)
    return PredictionsResponse(
        features=features,
        predictions=[RankedCrop.from_prediction(p) for p in predictions],
    )


@router.post(
    "/predict-from-description",
    response_model=PredictionsResponse,
    summary="Rank crops for a free-text land description",
    description="""
    Derive a feature vector from a land description (soil type keywords,
    typical values for everything else) and rank crops for it.
    """,
    responses=COMMON_RESPONSES,
)
async def predict_crops_from_description(
    request: DescriptionRequest,
    recommendation_service: RecommendationServiceDep,
) -> PredictionsResponse:
    """
    Rank crops for a land description.

    Args:
        request: Description and region
        recommendation_service: Recommendation service (injected dependency)

    Returns:
        PredictionsResponse including the derived features
    """
    features, predictions = await recommendation_service.rank_crops_from_description(
        request.description, request.region
    )
    return PredictionsResponse(
        features=features,
        predictions=[RankedCrop.from_prediction(p) for p in predictions],
    )


@router.post(
    "/recommendation",
    response_model=RecommendationResponse,
    summary="Ranked crops with natural-language advice",
    description="""
    Rank crops and pass the result to the advice service for a readable
    recommendation. When the advice service is unavailable the ranked crops
    are still returned, with an "unavailable" message in place of advice.
    """,
    responses=COMMON_RESPONSES,
)
async def get_recommendation(
    features: FeatureVector,
    recommendation_service: RecommendationServiceDep,
) -> RecommendationResponse:
    """
    Rank crops and attach advice.

    Args:
        features: Soil and climate features
        recommendation_service: Recommendation service (injected dependency)

    Returns:
        RecommendationResponse
    """
    recommendation = await recommendation_service.get_recommendation(features)
    return RecommendationResponse(
        features=recommendation.features,
        predictions=[RankedCrop.from_prediction(p) for p in recommendation.predictions],
        advice=recommendation.advice,
        advice_available=recommendation.advice_available,
        low_confidence=recommendation.low_confidence,
    )
