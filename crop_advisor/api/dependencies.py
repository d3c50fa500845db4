"""
Dependency injection for FastAPI.

Long-lived objects (the model lifecycle and the advice client) are created
in the application lifespan and kept on `app.state`.
"""
from typing import Annotated, Optional
from fastapi import Depends, Request

import numpy as np

from crop_advisor.config import settings
from crop_advisor.infrastructure.advice_client import AdviceServiceClient
from crop_advisor.services.application.model_lifecycle import ModelLifecycle
from crop_advisor.services.application.recommendation_service import RecommendationService
from crop_advisor.services.domain.evaluator import ModelEvaluator


def get_model_lifecycle(request: Request) -> ModelLifecycle:
    """
    Dependency factory for the serving ModelLifecycle.

    Returns:
        ModelLifecycle created at startup
    """
    return request.app.state.model_lifecycle


def get_advice_client(request: Request) -> Optional[AdviceServiceClient]:
    """
    Dependency factory for the AdviceServiceClient.

    Returns:
        AdviceServiceClient created at startup, or None
    """
    return getattr(request.app.state, "advice_client", None)


def get_recommendation_service(
    lifecycle: Annotated[ModelLifecycle, Depends(get_model_lifecycle)],
    advice_client: Annotated[Optional[AdviceServiceClient], Depends(get_advice_client)],
) -> RecommendationService:
    """
    Dependency factory for RecommendationService.

    Args:
        lifecycle: Model lifecycle (injected)
        advice_client: Advice service client (injected)

    Returns:
        RecommendationService instance
    """
    return RecommendationService(
        lifecycle=lifecycle,
        advice_client=advice_client,
        top_n=settings.top_n_predictions,
        min_confidence=settings.min_confidence,
        rng=np.random.default_rng(settings.random_seed),
    )


def get_model_evaluator(
    lifecycle: Annotated[ModelLifecycle, Depends(get_model_lifecycle)],
) -> ModelEvaluator:
    """
    Dependency factory for ModelEvaluator.

    Uses the serving model's hyperparameters on a separate classifier.
    """
    return ModelEvaluator(
        config=lifecycle.config,
        train_fraction=settings.train_test_split,
        samples_per_crop=settings.samples_per_crop,
        rng=np.random.default_rng(settings.random_seed),
    )


# Type aliases for cleaner route signatures
ModelLifecycleDep = Annotated[ModelLifecycle, Depends(get_model_lifecycle)]
RecommendationServiceDep = Annotated[RecommendationService, Depends(get_recommendation_service)]
ModelEvaluatorDep = Annotated[ModelEvaluator, Depends(get_model_evaluator)]
