"""
API router for model inspection endpoints.
"""
from fastapi import APIRouter
from starlette.concurrency import run_in_threadpool

import numpy as np

from crop_advisor.api.dependencies import ModelEvaluatorDep, ModelLifecycleDep
from crop_advisor.api.v1.models.responses import ModelStatusResponse
from crop_advisor.config import settings
from crop_advisor.domain.models import CropSummary, EvaluationReport
from crop_advisor.services.domain.training_corpus import generate_training_data, summarize_corpus


router = APIRouter(
    prefix="/model",
    tags=["model"],
)


@router.get(
    "/status",
    response_model=ModelStatusResponse,
    summary="Serving model status",
)
async def get_model_status(lifecycle: ModelLifecycleDep) -> ModelStatusResponse:
    """
    Report whether the serving model has been trained, and its hyperparameters.

    Does not trigger training.
    """
    return ModelStatusResponse(
        trained=lifecycle.is_ready,
        num_trees=lifecycle.config.num_trees,
        max_depth=lifecycle.config.max_depth,
        min_samples_split=lifecycle.config.min_samples_split,
    )


@router.get(
    "/evaluation",
    response_model=EvaluationReport,
    summary="Evaluate the model on a held-out split",
    description="""
    Train a fresh classifier (independent of the serving model) on a shuffled
    split of the synthetic corpus and score it on the remainder.
    """,
    responses={429: {"description": "Rate limit exceeded"}},
)
async def evaluate_model(evaluator: ModelEvaluatorDep) -> EvaluationReport:
    """
    Run a held-out evaluation.

    Args:
        evaluator: Model evaluator (injected dependency)

    Returns:
        EvaluationReport
    """
    return await run_in_threadpool(evaluator.evaluate)


@router.get(
    "/corpus-summary",
    response_model=list[CropSummary],
    summary="Summary of the synthetic training corpus",
)
async def get_corpus_summary() -> list[CropSummary]:
    """
    Per-crop sample counts and mean feature values of a generated corpus.
    """
    corpus = generate_training_data(
        np.random.default_rng(settings.random_seed), settings.samples_per_crop
    )
    return summarize_corpus(corpus)
