from __future__ import annotations

from types import SimpleNamespace

import pytest

from bizz_ai.presentation import (
    ReadAloudSession,
    ResultState,
    ResultView,
    automation_level_badge,
    automation_level_color,
    build_narration,
    category_icon,
    resolve_result_view,
    two_column_layout,
)


def _rec(priority: int, name: str | None = None) -> SimpleNamespace:
    return SimpleNamespace(priority=priority, tool_name=name or f"Tool {priority}")


def _stack() -> SimpleNamespace:
    return SimpleNamespace(
        title="Stack Ágil",
        description="Resumo.",
        overall_analysis="Muito trabalho manual",
        estimated_savings="R$ 2.000 por mês",
    )


def test_missing_id_state() -> None:
    view = resolve_result_view(None, lambda profile_id: None)

    assert view.state is ResultState.MISSING_ID


def test_loading_view() -> None:
    assert ResultView.loading().state is ResultState.LOADING


def test_fetch_failure_renders_error() -> None:
    def fetch(profile_id):
        raise ConnectionError("offline")

    view = resolve_result_view("abc", fetch)

    assert view.state is ResultState.ERROR
    assert "offline" in view.message


def test_not_found_renders_error() -> None:
    assert resolve_result_view("abc", lambda profile_id: None).state is ResultState.ERROR


def test_success_orders_recommendations() -> None:
    view = resolve_result_view("abc", lambda profile_id: (_stack(), [_rec(3), _rec(1), _rec(2)]))

    assert view.state is ResultState.SUCCESS
    assert [rec.priority for rec in view.recommendations] == [1, 2, 3]


def test_two_column_layout_splits_rows() -> None:
    left, right = two_column_layout([_rec(i) for i in (5, 4, 3, 2, 1)])

    assert [rec.priority for rec in left] == [1, 3, 5]
    assert [rec.priority for rec in right] == [2, 4]


@pytest.mark.parametrize(
    "level, css, badge",
    [
        ("Alto", "bg-green-100 text-green-700", "#10B981"),
        ("Médio", "bg-yellow-100 text-yellow-700", "#F59E0B"),
        ("Baixo", "bg-gray-100 text-gray-700", "#6B7280"),
        ("Extremo", "bg-gray-100 text-gray-700", "#6B7280"),
        (None, "bg-gray-100 text-gray-700", "#6B7280"),
    ],
)
def test_automation_level_styles(level, css, badge) -> None:
    assert automation_level_color(level) == css
    assert automation_level_badge(level) == badge


def test_category_icon_matches_keywords() -> None:
    assert category_icon("Automação de Marketing") == "📢"
    assert category_icon("Atendimento ao Cliente") == "💬"
    assert category_icon("Finanças") == "🤖"


def test_narration_concatenates_sentences() -> None:
    text = build_narration(_stack(), [_rec(2, "Canva"), _rec(1, "Zapier")])

    assert text == (
        "Stack Ágil. Resumo. Análise: Muito trabalho manual. "
        "Suas recomendações incluem: Zapier, Canva. Economia estimada: R$ 2.000 por mês."
    )


def test_read_aloud_toggle() -> None:
    spoken: list[str] = []
    cancelled: list[bool] = []
    session = ReadAloudSession(speak=spoken.append, cancel=lambda: cancelled.append(True))

    assert session.toggle(_stack(), [_rec(1)]) is True
    assert spoken and spoken[0].startswith("Stack Ágil.")
    assert session.toggle(_stack(), [_rec(1)]) is False
    assert cancelled == [True]


def test_read_aloud_unsupported_is_noop() -> None:
    session = ReadAloudSession()

    assert session.supported is False
    assert session.start(_stack(), []) is None
    assert session.speaking is False
