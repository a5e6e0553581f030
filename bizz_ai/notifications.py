"""Transactional email delivery for generated stacks."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from html import escape
from typing import Any, Protocol, Sequence

from .config import Settings
from .presentation import automation_level_badge

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when the mail provider rejects or fails to deliver a message."""


class StackNotifier(Protocol):
    def send_stack_email(
        self,
        user_email: str,
        user_name: str,
        stack: Any,
        recommendations: Sequence[Any],
    ) -> None: ...


def build_subject(stack: Any) -> str:
    return f"🚀 {stack.title} - Sua Stack de IA Personalizada"


def _render_recommendation(rec: Any) -> str:
    features = "".join(
        '<div style="margin-bottom: 4px;">'
        '<span style="color: #10B981; margin-right: 8px;">✓</span>'
        f'<span style="color: #7A5900; font-size: 14px;">{escape(feature)}</span>'
        "</div>"
        for feature in (rec.features or [])
    )
    link = ""
    if rec.link:
        link = (
            f'<a href="{escape(rec.link, quote=True)}" style="background-color: #B8860B; color: white; '
            'padding: 8px 16px; text-decoration: none; border-radius: 8px; font-weight: 500;">'
            "Ver Ferramenta</a>"
        )
    return (
        '<div style="border: 1px solid #E8E3D3; border-radius: 12px; padding: 20px; '
        'margin-bottom: 16px; background-color: #FEFDFB;">'
        f'<h3 style="color: #3D2C00; margin: 0; font-size: 18px;">{escape(rec.tool_name)}</h3>'
        f'<span style="background-color: {automation_level_badge(rec.automation_level)}; color: white; '
        f'padding: 4px 12px; border-radius: 20px; font-size: 12px;">{escape(rec.automation_level)}</span>'
        f'<p style="color: #B8860B; margin: 0 0 8px 0; font-weight: 500;">{escape(rec.category)}</p>'
        f'<p style="color: #5C4300; margin: 0 0 12px 0;">{escape(rec.description)}</p>'
        f'<div style="margin-bottom: 12px;">{features}</div>'
        f"{link}"
        "</div>"
    )


def render_stack_email(
    user_name: str,
    stack: Any,
    recommendations: Sequence[Any],
    frontend_url: str,
) -> str:
    """Build the HTML body sent after a stack is generated."""

    cards = "".join(_render_recommendation(rec) for rec in recommendations)

    tips_html = ""
    if stack.implementation_tips:
        items = "".join(
            f'<li style="color: #5C4300; margin-bottom: 8px;">{escape(tip)}</li>'
            for tip in stack.implementation_tips
        )
        tips_html = (
            '<h3 style="color: #3D2C00; border-bottom: 2px solid #D4C4A8; padding-bottom: 8px;">'
            "💡 Dicas de Implementação</h3>"
            f'<ul style="color: #5C4300; padding-left: 20px;">{items}</ul>'
        )

    savings_html = ""
    if stack.estimated_savings:
        savings_html = (
            '<div style="background-color: #F8F6F1; border-left: 4px solid #B8860B; padding: 16px; margin: 24px 0;">'
            '<h4 style="color: #3D2C00; margin: 0 0 8px 0;">💰 Economia Estimada</h4>'
            f'<p style="color: #5C4300; margin: 0;">{escape(stack.estimated_savings)}</p>'
            "</div>"
        )

    checkout_url = escape(f"{frontend_url.rstrip('/')}/checkout", quote=True)
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Sua Stack de IA Personalizada - Bizz AI</title>
</head>
<body style="font-family: 'Inter', Arial, sans-serif; line-height: 1.6; color: #3D2C00;">
  <div style="max-width: 600px; margin: 0 auto; background-color: #FEFDFB;">
    <div style="padding: 32px; text-align: center;">
      <h1 style="color: #3D2C00; margin-bottom: 8px; font-size: 28px;">🧠 Bizz AI</h1>
      <h2 style="color: #B8860B; margin: 0; font-size: 20px;">{escape(stack.title)}</h2>
    </div>
    <div style="padding: 24px;">
      <p style="font-size: 16px;">Olá {escape(user_name)}!</p>
      <p style="color: #5C4300; font-size: 16px;">{escape(stack.description)}</p>
      <h3 style="color: #3D2C00; border-bottom: 2px solid #D4C4A8; padding-bottom: 8px;">📊 Análise do Seu Negócio</h3>
      <p style="color: #5C4300;">{escape(stack.overall_analysis)}</p>
      <h3 style="color: #3D2C00; border-bottom: 2px solid #D4C4A8; padding-bottom: 8px;">🚀 Suas Ferramentas Recomendadas</h3>
      {cards}
      {tips_html}
      {savings_html}
      <div style="text-align: center; margin-top: 32px;">
        <p style="color: #7A5900; margin-bottom: 16px;">Quer implementar sua Stack com nossa ajuda?</p>
        <a href="{checkout_url}" style="background-color: #B8860B; color: white; padding: 12px 24px; text-decoration: none; border-radius: 8px; font-weight: 600;">Agendar Estratégia - R$ 197</a>
      </div>
    </div>
    <div style="background-color: #F0ECE3; padding: 24px; text-align: center; color: #7A5900;">
      <p>Esta Stack foi gerada especialmente para você pela Bizz AI</p>
    </div>
  </div>
</body>
</html>
"""


def render_stack_text(user_name: str, stack: Any, recommendations: Sequence[Any]) -> str:
    """Plain-text alternative for mail clients without HTML support."""

    lines = [f"Olá {user_name}!", "", stack.title, stack.description, "", stack.overall_analysis, ""]
    for rec in recommendations:
        lines.append(f"- {rec.tool_name} ({rec.category}, automação {rec.automation_level})")
    if stack.estimated_savings:
        lines.extend(["", f"Economia estimada: {stack.estimated_savings}"])
    return "\n".join(lines)


class SmtpNotifier:
    """Send stack emails through an SMTP relay."""

    def __init__(self, settings: Settings, timeout: float = 15.0) -> None:
        self._settings = settings
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return self._settings.email_enabled

    def build_message(
        self,
        user_email: str,
        user_name: str,
        stack: Any,
        recommendations: Sequence[Any],
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = f"Bizz AI <{self._settings.email_from}>"
        msg["To"] = user_email
        msg["Subject"] = build_subject(stack)
        msg.set_content(render_stack_text(user_name, stack, recommendations))
        msg.add_alternative(
            render_stack_email(user_name, stack, recommendations, self._settings.frontend_url),
            subtype="html",
        )
        return msg

    def send_stack_email(
        self,
        user_email: str,
        user_name: str,
        stack: Any,
        recommendations: Sequence[Any],
    ) -> None:
        if not self.configured:
            logger.warning(f"SMTP is not configured; skipping stack email to {user_email}")
            return

        msg = self.build_message(user_email, user_name, stack, recommendations)
        settings = self._settings
        try:
            with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=self._timeout) as server:
                if settings.smtp_use_tls:
                    server.starttls()
                if settings.smtp_user and settings.smtp_password:
                    server.login(settings.smtp_user, settings.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise EmailDeliveryError(f"Failed to send email: {exc}") from exc
        logger.info(f"Stack email sent to {user_email}")


def deliver_stack_email(
    notifier: StackNotifier,
    user_email: str,
    user_name: str,
    stack: Any,
    recommendations: Sequence[Any],
) -> None:
    """Background-task entry point: delivery failures are logged, not raised.

    The stack is already persisted when this runs, so a failing mail provider
    cannot undo a successful generation.
    """

    try:
        notifier.send_stack_email(user_email, user_name, stack, recommendations)
    except EmailDeliveryError:
        logger.exception(f"Email delivery failed for {user_email}")
