"""ORM models for users, business profiles, generated stacks and recommendations."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text

from .db import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(Text, nullable=False)
    email = Column(String(320), unique=True, index=True, nullable=False)
    # Payment-provider references are the only fields ever updated in place.
    stripe_customer_id = Column(Text, nullable=True)
    stripe_subscription_id = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class BusinessProfile(Base):
    """One questionnaire submission; immutable after creation."""

    __tablename__ = "business_profiles"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    business_type = Column(Text, nullable=False)
    team_size = Column(Text, nullable=False)
    objective = Column(Text, nullable=False)
    current_tools = Column(JSON, nullable=True)
    other_tools = Column(Text, nullable=True)
    ai_knowledge = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class AiStack(Base):
    __tablename__ = "ai_stacks"

    id = Column(String(36), primary_key=True, default=_uuid)
    # Not unique: a re-submission for the same profile data creates a new profile and stack.
    profile_id = Column(String(36), ForeignKey("business_profiles.id"), nullable=False, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    overall_analysis = Column(Text, nullable=False)
    implementation_tips = Column(JSON, nullable=True)
    estimated_savings = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class AiRecommendation(Base):
    __tablename__ = "ai_recommendations"

    id = Column(String(36), primary_key=True, default=_uuid)
    profile_id = Column(String(36), ForeignKey("business_profiles.id"), nullable=False, index=True)
    tool_name = Column(Text, nullable=False)
    category = Column(Text, nullable=False)
    use_case = Column(Text, nullable=False)
    automation_level = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    link = Column(Text, nullable=True)
    features = Column(JSON, nullable=True)
    priority = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
