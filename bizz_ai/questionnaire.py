"""Five-step questionnaire state machine with an optional voice-command adapter."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Dict, List

from .schemas import (
    AiKnowledge,
    BusinessType,
    Objective,
    QuestionnaireStepDefinition,
    StepOption,
    TeamSize,
)

logger = logging.getLogger(__name__)


class QuestionnaireStep(IntEnum):
    BUSINESS_TYPE = 1
    TEAM_SIZE = 2
    OBJECTIVE = 3
    CURRENT_TOOLS = 4
    CONTACT = 5


TOTAL_STEPS = len(QuestionnaireStep)

TOOL_OPTIONS = ["Zapier", "ChatGPT", "Canva", "Notion", "HubSpot", "Make"]

SUBMIT_ERROR_MESSAGE = "Ocorreu um erro ao processar suas informações. Tente novamente."


class SubmissionError(Exception):
    """Raised by a submitter when the backend rejects a submission."""


@dataclass
class QuestionnaireAnswers:
    """Accumulated form state across every step."""

    business_type: str = ""
    team_size: str = ""
    objective: str = ""
    current_tools: List[str] = field(default_factory=list)
    other_tools: str = ""
    ai_knowledge: str = ""
    name: str = ""
    email: str = ""

    def toggle_tool(self, tool: str) -> None:
        if tool in self.current_tools:
            self.current_tools.remove(tool)
        else:
            self.current_tools.append(tool)

    def to_payload(self) -> Dict[str, Any]:
        """Return the camelCase body expected by ``POST /api/generate-stack``."""

        return {
            "name": self.name,
            "email": self.email,
            "businessType": self.business_type,
            "teamSize": self.team_size,
            "objective": self.objective,
            "currentTools": list(self.current_tools),
            "otherTools": self.other_tools,
            "aiKnowledge": self.ai_knowledge,
        }


def _values(enum_cls) -> set[str]:
    return {member.value for member in enum_cls}


def _step_is_valid(step: QuestionnaireStep, answers: QuestionnaireAnswers) -> bool:
    if step is QuestionnaireStep.BUSINESS_TYPE:
        return answers.business_type in _values(BusinessType)
    if step is QuestionnaireStep.TEAM_SIZE:
        return answers.team_size in _values(TeamSize)
    if step is QuestionnaireStep.OBJECTIVE:
        return answers.objective in _values(Objective)
    if step is QuestionnaireStep.CURRENT_TOOLS:
        return True
    if step is QuestionnaireStep.CONTACT:
        # Presence only; the email format is not checked here either.
        return bool(answers.ai_knowledge and answers.name and answers.email)
    return False


Submitter = Callable[[Dict[str, Any]], Dict[str, Any]]


class Questionnaire:
    """Linear step sequence with per-step validation gates.

    ``next`` only advances when the current step validates, ``previous`` never
    goes below step 1, and ``submit`` is only reachable from the last step.
    A failed submission keeps every answer and stays on the last step.
    """

    def __init__(
        self,
        answers: QuestionnaireAnswers | None = None,
        submitter: Submitter | None = None,
    ) -> None:
        self.answers = answers or QuestionnaireAnswers()
        self.step = QuestionnaireStep.BUSINESS_TYPE
        self.error: str | None = None
        self.result: Dict[str, Any] | None = None
        self._submitter = submitter

    @property
    def progress(self) -> float:
        return self.step / TOTAL_STEPS * 100

    @property
    def is_last_step(self) -> bool:
        return self.step == QuestionnaireStep.CONTACT

    def is_step_valid(self, step: int | None = None) -> bool:
        target = QuestionnaireStep(step) if step is not None else self.step
        return _step_is_valid(target, self.answers)

    def next(self) -> bool:
        if not self.is_step_valid() or self.step >= TOTAL_STEPS:
            return False
        self.step = QuestionnaireStep(self.step + 1)
        return True

    def previous(self) -> bool:
        if self.step <= QuestionnaireStep.BUSINESS_TYPE:
            return False
        self.step = QuestionnaireStep(self.step - 1)
        return True

    def submit(self) -> str | None:
        """Send the answers and return the new profile id, or ``None`` on failure."""

        if not self.is_last_step or not self.is_step_valid():
            return None
        if self._submitter is None:
            raise RuntimeError("No submitter configured for this questionnaire.")

        self.error = None
        try:
            result = self._submitter(self.answers.to_payload())
        except SubmissionError as exc:
            logger.warning(f"Questionnaire submission failed: {exc}")
            self.error = SUBMIT_ERROR_MESSAGE
            return None
        except Exception:
            logger.exception("Questionnaire submission could not reach the backend")
            self.error = SUBMIT_ERROR_MESSAGE
            return None

        profile_id = result.get("profileId") if isinstance(result, dict) else None
        if not profile_id:
            logger.warning(f"Questionnaire submission returned no profileId: {result!r}")
            self.error = SUBMIT_ERROR_MESSAGE
            return None

        self.result = result
        return profile_id


# ---------------------------------------------------------------------------
# Step metadata
# ---------------------------------------------------------------------------

STEP_DEFINITIONS: List[QuestionnaireStepDefinition] = [
    QuestionnaireStepDefinition(
        step=QuestionnaireStep.BUSINESS_TYPE,
        field="businessType",
        title="Qual é o tipo do seu negócio?",
        required=True,
        options=[
            StepOption(value=BusinessType.ECOMMERCE.value, label="E-commerce"),
            StepOption(value=BusinessType.AGENCIA.value, label="Agência/Marketing"),
            StepOption(value=BusinessType.CONSULTORIA.value, label="Consultoria"),
            StepOption(value=BusinessType.SAAS.value, label="SaaS/Tech"),
        ],
    ),
    QuestionnaireStepDefinition(
        step=QuestionnaireStep.TEAM_SIZE,
        field="teamSize",
        title="Qual o tamanho da sua equipe?",
        required=True,
        options=[
            StepOption(value=TeamSize.SOLO.value, label="Apenas eu (1 pessoa)"),
            StepOption(value=TeamSize.SMALL.value, label="Pequena equipe (2-10)"),
            StepOption(value=TeamSize.MEDIUM.value, label="Média empresa (11-50)"),
            StepOption(value=TeamSize.LARGE.value, label="Grande empresa (50+)"),
        ],
    ),
    QuestionnaireStepDefinition(
        step=QuestionnaireStep.OBJECTIVE,
        field="objective",
        title="Qual é o seu principal objetivo?",
        required=True,
        options=[
            StepOption(value=Objective.TEMPO.value, label="Ganhar tempo automatizando tarefas repetitivas"),
            StepOption(value=Objective.LEADS.value, label="Gerar mais leads e vendas"),
            StepOption(value=Objective.CUSTOS.value, label="Reduzir custos operacionais"),
        ],
    ),
    QuestionnaireStepDefinition(
        step=QuestionnaireStep.CURRENT_TOOLS,
        field="currentTools",
        title="Que ferramentas você já usa? (Opcional)",
        required=False,
        options=[StepOption(value=tool, label=tool) for tool in TOOL_OPTIONS],
    ),
    QuestionnaireStepDefinition(
        step=QuestionnaireStep.CONTACT,
        field="aiKnowledge",
        title="Qual seu nível de conhecimento em IA?",
        required=True,
        options=[
            StepOption(value=AiKnowledge.INICIANTE.value, label="Iniciante - Pouca ou nenhuma experiência"),
            StepOption(value=AiKnowledge.INTERMEDIARIO.value, label="Intermediário - Já usei algumas ferramentas de IA"),
            StepOption(value=AiKnowledge.AVANCADO.value, label="Avançado - Experiente com automações e IA"),
        ],
    ),
]


def list_step_definitions() -> List[QuestionnaireStepDefinition]:
    """Return the questionnaire steps in order."""

    return list(STEP_DEFINITIONS)


# ---------------------------------------------------------------------------
# Voice commands
# ---------------------------------------------------------------------------

NEXT_PHRASES = ("próximo", "próxima", "proximo", "proxima")
PREVIOUS_PHRASES = ("anterior",)

BUSINESS_TYPE_PHRASES = (
    (("ecommerce", "e-commerce", "loja online"), BusinessType.ECOMMERCE),
    (("agência", "agencia", "marketing"), BusinessType.AGENCIA),
    (("consultoria",), BusinessType.CONSULTORIA),
    (("saas", "software"), BusinessType.SAAS),
)


def interpret_voice_command(transcript: str | None) -> str | None:
    """Map a recognised phrase to ``"next"``, ``"previous"`` or ``None``."""

    lowered = (transcript or "").strip().lower()
    if not lowered:
        return None
    if any(phrase in lowered for phrase in NEXT_PHRASES):
        return "next"
    if any(phrase in lowered for phrase in PREVIOUS_PHRASES):
        return "previous"
    return None


def apply_voice_command(questionnaire: Questionnaire, transcript: str | None) -> bool:
    """Drive the questionnaire from speech; unmatched input is a silent no-op.

    Navigation phrases win. On the business-type step a recognised business
    phrase fills in ``answers.business_type`` without advancing.
    """

    command = interpret_voice_command(transcript)
    if command == "next":
        return questionnaire.next()
    if command == "previous":
        return questionnaire.previous()
    if questionnaire.step is QuestionnaireStep.BUSINESS_TYPE:
        business_type = match_business_type(transcript)
        if business_type is not None:
            questionnaire.answers.business_type = business_type
            return True
    return False


def match_business_type(transcript: str | None) -> str | None:
    """Map a spoken description to a BusinessType value, or ``None``."""

    lowered = (transcript or "").lower()
    for phrases, business_type in BUSINESS_TYPE_PHRASES:
        if any(phrase in lowered for phrase in phrases):
            return business_type.value
    return None
