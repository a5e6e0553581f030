"""OpenAI-powered generation of personalised AI tool stacks."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from textwrap import dedent
from typing import Any, Dict, List, Optional, Protocol

from openai import OpenAI, OpenAIError

from .config import Settings

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = (
    "Você é um consultor especialista em automação de negócios com IA. "
    "Responda sempre em português brasileiro e forneça recomendações práticas e específicas."
)


class StackGenerationError(Exception):
    """Raised when the generation service fails or returns an unusable payload."""


class ProfileLike(Protocol):
    business_type: Any
    team_size: Any
    objective: Any
    current_tools: Optional[List[str]]
    other_tools: Optional[str]
    ai_knowledge: Any


@dataclass(frozen=True)
class PromptSpec:
    """Container describing how to call the LLM for a stack."""

    system_prompt: str
    user_prompt: str
    model: str = "gpt-4o"
    temperature: float = 0.7
    max_tokens: int = 2000


@dataclass(frozen=True)
class GeneratedRecommendation:
    tool_name: str
    category: str
    use_case: str
    automation_level: str
    description: str
    link: Optional[str] = None
    features: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class GeneratedStack:
    """Validated generation result, recommendations kept in response order."""

    title: str
    description: str
    overall_analysis: str
    implementation_tips: List[str]
    estimated_savings: str
    recommendations: List[GeneratedRecommendation]


def create_openai_client(settings: Settings) -> OpenAI | None:
    """Return an OpenAI client when an API key is configured."""

    if not settings.openai_api_key:
        return None
    return OpenAI(api_key=settings.openai_api_key)


def _enum_value(value: Any) -> str:
    return str(getattr(value, "value", value))


def build_stack_prompt(profile: ProfileLike) -> str:
    """Render the fixed prompt template from the captured profile fields."""

    current_tools = ", ".join(profile.current_tools or []) or "Nenhuma"
    other_tools = profile.other_tools or "Não especificado"
    return dedent(
        f"""
        Você é um especialista em automação de negócios com IA. Analise o perfil abaixo e gere uma Stack de IA personalizada:

        PERFIL DO NEGÓCIO:
        - Tipo: {_enum_value(profile.business_type)}
        - Tamanho da equipe: {_enum_value(profile.team_size)}
        - Objetivo principal: {_enum_value(profile.objective)}
        - Ferramentas atuais: {current_tools}
        - Outras ferramentas: {other_tools}
        - Conhecimento em IA: {_enum_value(profile.ai_knowledge)}

        INSTRUÇÕES:
        1. Crie um título personalizado para a Stack
        2. Escreva uma descrição executiva (2-3 frases)
        3. Faça uma análise geral das necessidades do negócio
        4. Recomende 4-6 ferramentas de IA específicas com:
           - Nome da ferramenta
           - Categoria (ex: "Automação de Marketing", "Atendimento ao Cliente")
           - Caso de uso específico para este negócio
           - Nível de automação: "Alto", "Médio" ou "Baixo"
           - Descrição detalhada do benefício
           - 2-3 recursos/funcionalidades principais
           - Link oficial (quando possível)
        5. Dê 3-5 dicas de implementação práticas
        6. Estime a economia de tempo/dinheiro mensal

        Responda APENAS em JSON no seguinte formato:
        {{
          "title": "Nome da Stack",
          "description": "Descrição executiva",
          "overallAnalysis": "Análise detalhada das necessidades",
          "implementationTips": ["Dica 1", "Dica 2", "Dica 3"],
          "estimatedSavings": "Estimativa de economia",
          "recommendations": [
            {{
              "toolName": "Nome da Ferramenta",
              "category": "Categoria",
              "useCase": "Caso de uso específico",
              "automationLevel": "Alto|Médio|Baixo",
              "description": "Descrição detalhada",
              "link": "https://exemplo.com",
              "features": ["Recurso 1", "Recurso 2", "Recurso 3"]
            }}
          ]
        }}
        """
    ).strip()


def _parse_structured_response(raw_text: str) -> Dict[str, Any] | None:
    """Attempt to coerce the model output into a JSON object."""

    text = raw_text.strip()
    if text.startswith("```"):
        lines = [line.rstrip() for line in text.splitlines()]
        if len(lines) >= 2:
            lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            text = "\n".join(lines).strip()
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def validate_stack_payload(data: Dict[str, Any]) -> GeneratedStack:
    """Accept a parsed response only when it has a title, a description and a recommendation list.

    Each recommendation must be an object with a non-blank ``toolName``.
    """

    title = _text(data.get("title"))
    if not title:
        raise StackGenerationError("Invalid AI response format: missing title")
    description = _text(data.get("description"))
    if not description:
        raise StackGenerationError("Invalid AI response format: missing description")
    recommendations = data.get("recommendations")
    if not isinstance(recommendations, list):
        raise StackGenerationError("Invalid AI response format: recommendations must be a list")

    parsed: List[GeneratedRecommendation] = []
    for index, item in enumerate(recommendations, start=1):
        if not isinstance(item, dict):
            raise StackGenerationError(f"Invalid AI response format: recommendation {index} is not an object")
        tool_name = _text(item.get("toolName"))
        if not tool_name:
            raise StackGenerationError(f"Invalid AI response format: recommendation {index} has no toolName")
        parsed.append(
            GeneratedRecommendation(
                tool_name=tool_name,
                category=_text(item.get("category")),
                use_case=_text(item.get("useCase")),
                automation_level=_text(item.get("automationLevel")),
                description=_text(item.get("description")),
                link=_text(item.get("link")) or None,
                features=_string_list(item.get("features")),
            )
        )

    return GeneratedStack(
        title=title,
        description=description,
        overall_analysis=_text(data.get("overallAnalysis")),
        implementation_tips=_string_list(data.get("implementationTips")),
        estimated_savings=_text(data.get("estimatedSavings")),
        recommendations=parsed,
    )


class StackGenerator:
    """Call the chat-completion API and validate the returned stack JSON."""

    def __init__(self, client: OpenAI | None, model: str = "gpt-4o") -> None:
        self._client = client
        self._model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "StackGenerator":
        return cls(create_openai_client(settings), model=settings.openai_model)

    @property
    def configured(self) -> bool:
        return self._client is not None

    def _invoke(self, spec: PromptSpec) -> str:
        if self._client is None:
            raise StackGenerationError("OpenAI API key is not configured")
        try:
            response = self._client.chat.completions.create(
                model=spec.model,
                messages=[
                    {"role": "system", "content": spec.system_prompt.strip()},
                    {"role": "user", "content": spec.user_prompt.strip()},
                ],
                response_format={"type": "json_object"},
                temperature=spec.temperature,
                max_tokens=spec.max_tokens,
            )
        except OpenAIError as exc:
            logger.error(f"OpenAI API error: {exc}", exc_info=True)
            raise StackGenerationError(f"Failed to generate AI stack: {exc}") from exc

        message = response.choices[0].message.content if response.choices else None
        return message or "{}"

    def generate(self, profile: ProfileLike) -> GeneratedStack:
        """Generate and validate a stack for *profile*."""

        spec = PromptSpec(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=build_stack_prompt(profile),
            model=self._model,
        )
        raw = self._invoke(spec)
        data = _parse_structured_response(raw)
        if data is None:
            raise StackGenerationError("Failed to generate AI stack: response was not valid JSON")
        stack = validate_stack_payload(data)
        logger.info(f"Generated stack '{stack.title}' with {len(stack.recommendations)} recommendations")
        return stack
