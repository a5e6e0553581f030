"""Questionnaire metadata endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from ..questionnaire import list_step_definitions
from ..schemas import QuestionnaireStepDefinition


router = APIRouter(prefix="/api", tags=["questionnaire"])


@router.get("/health")
async def healthcheck() -> dict[str, str]:
    """Simple health check endpoint."""

    return {"status": "ok"}


@router.get("/questionnaire/steps", response_model=list[QuestionnaireStepDefinition])
async def list_steps() -> list[QuestionnaireStepDefinition]:
    """Expose the ordered questionnaire steps to the UI."""

    return list_step_definitions()
