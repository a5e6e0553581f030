"""Service handles shared by the routers."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from .config import Settings
from .llm import StackGenerator
from .notifications import StackNotifier
from .payments import PaymentService
from .storage import Storage


@dataclass(frozen=True)
class Services:
    """Explicitly constructed collaborators for one application instance."""

    settings: Settings
    storage: Storage
    generator: StackGenerator
    notifier: StackNotifier
    payments: PaymentService


def get_services(request: Request) -> Services:
    return request.app.state.services
