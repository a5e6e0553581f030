"""Database-backed storage for users, profiles, stacks and recommendations."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import sessionmaker

from .llm import GeneratedRecommendation, GeneratedStack
from .models import AiRecommendation, AiStack, BusinessProfile, User

logger = logging.getLogger(__name__)


class Storage:
    """Create/read operations per entity.

    Profiles, stacks and recommendations are write-once: there are no update
    or delete operations for them. Each public method runs in its own
    transaction; ``save_generated_stack`` writes the stack and all of its
    recommendations atomically.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    # -- users -------------------------------------------------------------

    def get_user(self, user_id: str) -> Optional[User]:
        with self._session_factory() as session:
            return session.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._session_factory() as session:
            return session.scalars(select(User).where(User.email == email)).first()

    def create_user(self, name: str, email: str) -> User:
        with self._session_factory() as session, session.begin():
            user = User(name=name, email=email)
            session.add(user)
        return user

    def get_or_create_user(self, name: str, email: str) -> Tuple[User, bool]:
        """Return the user for *email*, creating it on first submission.

        The lookup and insert are not serialised: two simultaneous first
        submissions with the same email race, and the loser fails on the
        unique constraint.
        """

        user = self.get_user_by_email(email)
        if user is not None:
            return user, False
        return self.create_user(name=name, email=email), True

    def update_user_stripe_info(
        self,
        user_id: str,
        stripe_customer_id: str,
        stripe_subscription_id: str | None = None,
    ) -> Optional[User]:
        with self._session_factory() as session, session.begin():
            user = session.get(User, user_id)
            if user is None:
                return None
            user.stripe_customer_id = stripe_customer_id
            user.stripe_subscription_id = stripe_subscription_id
        return user

    # -- business profiles -------------------------------------------------

    def create_business_profile(
        self,
        user_id: str,
        *,
        business_type: str,
        team_size: str,
        objective: str,
        ai_knowledge: str,
        current_tools: Iterable[str] = (),
        other_tools: str | None = None,
    ) -> BusinessProfile:
        with self._session_factory() as session, session.begin():
            profile = BusinessProfile(
                user_id=user_id,
                business_type=business_type,
                team_size=team_size,
                objective=objective,
                current_tools=list(current_tools),
                other_tools=other_tools,
                ai_knowledge=ai_knowledge,
            )
            session.add(profile)
        return profile

    def get_business_profile(self, profile_id: str) -> Optional[BusinessProfile]:
        with self._session_factory() as session:
            return session.get(BusinessProfile, profile_id)

    def get_business_profile_by_user_id(self, user_id: str) -> Optional[BusinessProfile]:
        """Return the user's earliest profile."""

        with self._session_factory() as session:
            return session.scalars(
                select(BusinessProfile)
                .where(BusinessProfile.user_id == user_id)
                .order_by(BusinessProfile.created_at)
            ).first()

    def list_business_profiles_by_user_id(self, user_id: str) -> List[BusinessProfile]:
        with self._session_factory() as session:
            return list(
                session.scalars(
                    select(BusinessProfile)
                    .where(BusinessProfile.user_id == user_id)
                    .order_by(BusinessProfile.created_at)
                )
            )

    # -- stacks ------------------------------------------------------------

    def create_ai_stack(
        self,
        profile_id: str,
        *,
        title: str,
        description: str,
        overall_analysis: str,
        implementation_tips: Iterable[str] = (),
        estimated_savings: str | None = None,
    ) -> AiStack:
        with self._session_factory() as session, session.begin():
            stack = AiStack(
                profile_id=profile_id,
                title=title,
                description=description,
                overall_analysis=overall_analysis,
                implementation_tips=list(implementation_tips),
                estimated_savings=estimated_savings,
            )
            session.add(stack)
        return stack

    def get_ai_stack_by_profile_id(self, profile_id: str) -> Optional[AiStack]:
        """Return the first stack generated for the profile, if any."""

        with self._session_factory() as session:
            return session.scalars(
                select(AiStack).where(AiStack.profile_id == profile_id).order_by(AiStack.created_at)
            ).first()

    def list_ai_stacks(self) -> List[AiStack]:
        """Admin read: every stored stack, oldest first. Not used by the request path."""

        with self._session_factory() as session:
            return list(session.scalars(select(AiStack).order_by(AiStack.created_at)))

    # -- recommendations ---------------------------------------------------

    def create_ai_recommendation(
        self,
        profile_id: str,
        recommendation: GeneratedRecommendation,
        priority: int,
    ) -> AiRecommendation:
        with self._session_factory() as session, session.begin():
            row = _recommendation_row(profile_id, recommendation, priority)
            session.add(row)
        return row

    def get_recommendations_by_profile_id(self, profile_id: str) -> List[AiRecommendation]:
        """Return the profile's recommendations in insertion order."""

        with self._session_factory() as session:
            return list(
                session.scalars(
                    select(AiRecommendation)
                    .where(AiRecommendation.profile_id == profile_id)
                    .order_by(AiRecommendation.created_at, AiRecommendation.priority)
                )
            )

    def count_recommendations(self) -> int:
        """Admin read: total number of stored recommendations."""

        with self._session_factory() as session:
            return session.scalar(select(func.count()).select_from(AiRecommendation)) or 0

    # -- aggregate ---------------------------------------------------------

    def save_generated_stack(
        self,
        profile_id: str,
        generated: GeneratedStack,
    ) -> Tuple[AiStack, List[AiRecommendation]]:
        """Persist a stack plus one recommendation per tool in one transaction.

        ``priority`` is the 1-based position in the generation response.
        """

        with self._session_factory() as session, session.begin():
            stack = AiStack(
                profile_id=profile_id,
                title=generated.title,
                description=generated.description,
                overall_analysis=generated.overall_analysis,
                implementation_tips=list(generated.implementation_tips),
                estimated_savings=generated.estimated_savings,
            )
            session.add(stack)
            rows = [
                _recommendation_row(profile_id, recommendation, priority)
                for priority, recommendation in enumerate(generated.recommendations, start=1)
            ]
            session.add_all(rows)
        logger.info(f"Saved stack {stack.id} with {len(rows)} recommendations for profile {profile_id}")
        return stack, rows


def _recommendation_row(
    profile_id: str,
    recommendation: GeneratedRecommendation,
    priority: int,
) -> AiRecommendation:
    return AiRecommendation(
        profile_id=profile_id,
        tool_name=recommendation.tool_name,
        category=recommendation.category,
        use_case=recommendation.use_case,
        automation_level=recommendation.automation_level,
        description=recommendation.description,
        link=recommendation.link,
        features=list(recommendation.features),
        priority=priority,
    )
