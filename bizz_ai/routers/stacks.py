"""Stack generation and lookup endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from ..dependencies import Services, get_services
from ..llm import StackGenerationError
from ..notifications import deliver_stack_email
from ..pipeline import StackPipeline, load_stack
from ..presentation import build_narration
from ..schemas import (
    AiRecommendationOut,
    AiStackOut,
    GenerateStackRequest,
    GenerateStackResponse,
    NarrationResponse,
    StackLookupResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["stacks"])


@router.post("/generate-stack", response_model=GenerateStackResponse)
def generate_stack(
    payload: GenerateStackRequest,
    background_tasks: BackgroundTasks,
    services: Services = Depends(get_services),
) -> GenerateStackResponse:
    """Create user and profile, generate the stack and queue the results email."""

    pipeline = StackPipeline(services.storage, services.generator)
    try:
        result = pipeline.run(payload)
    except (StackGenerationError, SQLAlchemyError) as exc:
        logger.error(f"Error generating stack: {exc}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error generating AI stack: {exc}") from exc

    background_tasks.add_task(
        deliver_stack_email,
        services.notifier,
        result.user.email,
        result.user.name,
        result.stack,
        result.recommendations,
    )

    return GenerateStackResponse(
        stack_id=result.stack.id,
        profile_id=result.profile.id,
        user_id=result.user.id,
        stack=AiStackOut.model_validate(result.stack),
        recommendations=[AiRecommendationOut.model_validate(rec) for rec in result.recommendations],
    )


def _load_or_404(services: Services, profile_id: str):
    try:
        found = load_stack(services.storage, profile_id)
    except SQLAlchemyError as exc:
        logger.error(f"Error fetching stack for profile {profile_id}: {exc}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error fetching stack: {exc}") from exc
    if found is None:
        logger.warning(f"No stack found for profile {profile_id}")
        raise HTTPException(status_code=404, detail="Stack not found")
    return found


@router.get("/stack/{profile_id}", response_model=StackLookupResponse)
def fetch_stack(profile_id: str, services: Services = Depends(get_services)) -> StackLookupResponse:
    """Return the stored stack and its recommendations ordered by priority."""

    stack, recommendations = _load_or_404(services, profile_id)
    return StackLookupResponse(
        stack=AiStackOut.model_validate(stack),
        recommendations=[AiRecommendationOut.model_validate(rec) for rec in recommendations],
    )


@router.get("/stack/{profile_id}/narration", response_model=NarrationResponse)
def fetch_narration(profile_id: str, services: Services = Depends(get_services)) -> NarrationResponse:
    """Return the read-aloud text for the stored stack."""

    stack, recommendations = _load_or_404(services, profile_id)
    return NarrationResponse(profile_id=profile_id, text=build_narration(stack, recommendations))
