"""Questionnaire-to-stack generation pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .llm import StackGenerator
from .models import AiRecommendation, AiStack, BusinessProfile, User
from .presentation import order_by_priority
from .schemas import GenerateStackRequest
from .storage import Storage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StackResult:
    user: User
    profile: BusinessProfile
    stack: AiStack
    recommendations: List[AiRecommendation]


class StackPipeline:
    """Run one submission from validated payload to persisted stack.

    User and profile rows are committed before the generation call, so a
    failed generation leaves them in place without a stack. The stack and
    its recommendations are written together or not at all.
    """

    def __init__(self, storage: Storage, generator: StackGenerator) -> None:
        self.storage = storage
        self.generator = generator

    def run(self, request: GenerateStackRequest) -> StackResult:
        user, created = self.storage.get_or_create_user(name=request.name, email=request.email)
        if created:
            logger.info(f"Created user {user.id} for {request.email}")
        else:
            logger.info(f"Reusing user {user.id} for {request.email}")

        profile = self.storage.create_business_profile(
            user.id,
            business_type=request.business_type.value,
            team_size=request.team_size.value,
            objective=request.objective.value,
            ai_knowledge=request.ai_knowledge.value,
            current_tools=request.current_tools,
            other_tools=request.other_tools,
        )
        logger.info(f"Created business profile {profile.id} for user {user.id}")

        generated = self.generator.generate(profile)
        stack, recommendations = self.storage.save_generated_stack(profile.id, generated)
        return StackResult(user=user, profile=profile, stack=stack, recommendations=recommendations)


def load_stack(storage: Storage, profile_id: str) -> Optional[Tuple[AiStack, List[AiRecommendation]]]:
    """Return the stack and priority-ordered recommendations, or ``None``."""

    stack = storage.get_ai_stack_by_profile_id(profile_id)
    if stack is None:
        return None
    recommendations = storage.get_recommendations_by_profile_id(profile_id)
    return stack, order_by_priority(recommendations)
