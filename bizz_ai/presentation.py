"""Helpers for rendering and reading aloud a generated stack."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence, Tuple

AUTOMATION_LEVEL_CLASSES = {
    "alto": "bg-green-100 text-green-700",
    "médio": "bg-yellow-100 text-yellow-700",
    "medio": "bg-yellow-100 text-yellow-700",
    "baixo": "bg-gray-100 text-gray-700",
}
DEFAULT_LEVEL_CLASS = "bg-gray-100 text-gray-700"

AUTOMATION_LEVEL_BADGES = {
    "alto": "#10B981",
    "médio": "#F59E0B",
    "medio": "#F59E0B",
}
DEFAULT_LEVEL_BADGE = "#6B7280"

CATEGORY_ICONS = (
    ("marketing", "📢"),
    ("automação", "⚡"),
    ("conteúdo", "📝"),
    ("vendas", "💰"),
    ("atendimento", "💬"),
)
DEFAULT_CATEGORY_ICON = "🤖"


class ResultState(str, Enum):
    MISSING_ID = "missing_id"
    LOADING = "loading"
    ERROR = "error"
    SUCCESS = "success"


@dataclass(frozen=True)
class ResultView:
    """What the results page should show for a profile."""

    state: ResultState
    stack: Any = None
    recommendations: List[Any] = field(default_factory=list)
    message: str | None = None

    @classmethod
    def loading(cls) -> "ResultView":
        return cls(state=ResultState.LOADING, message="Carregando sua Stack de IA...")


StackFetcher = Callable[[str], Optional[Tuple[Any, Sequence[Any]]]]


def order_by_priority(recommendations: Sequence[Any]) -> List[Any]:
    """Sort by ``priority`` ascending; the sort is stable for equal ranks."""

    return sorted(recommendations, key=lambda rec: rec.priority)


def resolve_result_view(profile_id: str | None, fetch: StackFetcher) -> ResultView:
    """Fetch stack and recommendations as one read and pick the render state."""

    if not profile_id:
        return ResultView(state=ResultState.MISSING_ID, message="Nenhum perfil informado.")
    try:
        found = fetch(profile_id)
    except Exception as exc:  # any fetch failure renders the error state
        return ResultView(state=ResultState.ERROR, message=f"Erro ao carregar os resultados: {exc}")
    if found is None:
        return ResultView(state=ResultState.ERROR, message="Erro ao carregar os resultados.")
    stack, recommendations = found
    return ResultView(
        state=ResultState.SUCCESS,
        stack=stack,
        recommendations=order_by_priority(recommendations),
    )


def two_column_layout(recommendations: Sequence[Any]) -> Tuple[List[Any], List[Any]]:
    """Split cards row by row into left and right columns."""

    ordered = order_by_priority(recommendations)
    return ordered[0::2], ordered[1::2]


def automation_level_color(level: str | None) -> str:
    return AUTOMATION_LEVEL_CLASSES.get((level or "").strip().lower(), DEFAULT_LEVEL_CLASS)


def automation_level_badge(level: str | None) -> str:
    """Hex badge colour used by the HTML email."""

    return AUTOMATION_LEVEL_BADGES.get((level or "").strip().lower(), DEFAULT_LEVEL_BADGE)


def category_icon(category: str | None) -> str:
    lowered = (category or "").lower()
    for keyword, icon in CATEGORY_ICONS:
        if keyword in lowered:
            return icon
    return DEFAULT_CATEGORY_ICON


def _sentence(text: str | None) -> str:
    return (text or "").strip().rstrip(".") + "."


def build_narration(stack: Any, recommendations: Sequence[Any]) -> str:
    """Concatenate the stack summary into a single spoken utterance."""

    tool_names = ", ".join(rec.tool_name for rec in order_by_priority(recommendations))
    parts = [
        _sentence(stack.title),
        _sentence(stack.description),
        _sentence(f"Análise: {stack.overall_analysis}"),
        _sentence(f"Suas recomendações incluem: {tool_names}"),
        _sentence(f"Economia estimada: {stack.estimated_savings or ''}"),
    ]
    return " ".join(parts)


class ReadAloudSession:
    """Start/stop bookkeeping for reading a stack aloud.

    The session only tracks which utterance is playing; the speech engine is
    supplied by the caller and stored data is never touched.
    """

    def __init__(
        self,
        speak: Callable[[str], None] | None = None,
        cancel: Callable[[], None] | None = None,
    ) -> None:
        self._speak = speak
        self._cancel = cancel
        self.speaking = False
        self.utterance: str | None = None

    @property
    def supported(self) -> bool:
        return self._speak is not None

    def start(self, stack: Any, recommendations: Sequence[Any]) -> str | None:
        if not self.supported:
            return None
        if self.speaking:
            self.stop()
        self.utterance = build_narration(stack, recommendations)
        self._speak(self.utterance)
        self.speaking = True
        return self.utterance

    def stop(self) -> None:
        if self.speaking and self._cancel is not None:
            self._cancel()
        self.speaking = False

    def toggle(self, stack: Any, recommendations: Sequence[Any]) -> bool:
        """Stop when speaking, otherwise (re)start; return the new speaking flag."""

        if self.speaking:
            self.stop()
        else:
            self.start(stack, recommendations)
        return self.speaking
