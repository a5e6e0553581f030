"""Pydantic models and enums for the Bizz AI questionnaire API."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that speaks camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class BusinessType(str, Enum):
    """Enumerate the supported business types (questionnaire step 1)."""

    ECOMMERCE = "ecommerce"
    AGENCIA = "agencia"
    CONSULTORIA = "consultoria"
    SAAS = "saas"


class TeamSize(str, Enum):
    """Enumerate the team size buckets (questionnaire step 2)."""

    SOLO = "solo"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class Objective(str, Enum):
    """Enumerate the primary business objectives (questionnaire step 3)."""

    TEMPO = "tempo"
    LEADS = "leads"
    CUSTOS = "custos"


class AiKnowledge(str, Enum):
    """Enumerate the self-reported AI experience levels (questionnaire step 5)."""

    INICIANTE = "iniciante"
    INTERMEDIARIO = "intermediario"
    AVANCADO = "avancado"


class AutomationLevel(str, Enum):
    """Automation levels the generation prompt asks the model to use."""

    ALTO = "Alto"
    MEDIO = "Médio"
    BAIXO = "Baixo"


class GenerateStackRequest(CamelModel):
    """Questionnaire submission payload."""

    name: str = Field(..., min_length=1, description="Contact name.")
    # Presence only; the address format is deliberately not validated.
    email: str = Field(..., min_length=1, description="Contact email, used as the user key.")
    business_type: BusinessType
    team_size: TeamSize
    objective: Objective
    current_tools: List[str] = Field(default_factory=list)
    other_tools: Optional[str] = None
    ai_knowledge: AiKnowledge

    @field_validator("name", "email")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped


class UserOut(CamelModel):
    id: str
    name: str
    email: str
    created_at: Optional[datetime] = None


class BusinessProfileOut(CamelModel):
    id: str
    user_id: str
    business_type: str
    team_size: str
    objective: str
    current_tools: List[str] = Field(default_factory=list)
    other_tools: Optional[str] = None
    ai_knowledge: str
    created_at: Optional[datetime] = None


class AiStackOut(CamelModel):
    """Persisted stack summary for one profile."""

    id: str
    profile_id: str
    title: str
    description: str
    overall_analysis: str
    implementation_tips: List[str] = Field(default_factory=list)
    estimated_savings: Optional[str] = None
    created_at: Optional[datetime] = None


class AiRecommendationOut(CamelModel):
    """Persisted tool recommendation, ranked by ``priority``."""

    id: str
    profile_id: str
    tool_name: str
    category: str
    use_case: str
    automation_level: str
    description: str
    link: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    priority: int
    created_at: Optional[datetime] = None


class GenerateStackResponse(CamelModel):
    """Result of a successful questionnaire submission."""

    stack_id: str
    profile_id: str
    user_id: str
    stack: AiStackOut
    recommendations: List[AiRecommendationOut]


class StackLookupResponse(CamelModel):
    """Stack and recommendations fetched by profile identifier."""

    stack: AiStackOut
    recommendations: List[AiRecommendationOut]


class NarrationResponse(CamelModel):
    profile_id: str
    text: str


class PaymentIntentRequest(CamelModel):
    """Amount in minor currency units (centavos)."""

    amount: int = Field(default=19700, gt=0)


class PaymentIntentResponse(CamelModel):
    client_secret: str


class StepOption(CamelModel):
    value: str
    label: str


class QuestionnaireStepDefinition(CamelModel):
    """Expose questionnaire step metadata to the UI."""

    step: int
    field: str
    title: str
    required: bool
    options: List[StepOption] = Field(default_factory=list)
