"""Application factory for the Bizz AI FastAPI backend."""

import logging
import os

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, get_settings
from .db import create_db_engine, create_session_factory, init_db
from .dependencies import Services
from .llm import StackGenerator
from .notifications import SmtpNotifier, StackNotifier
from .payments import PaymentService
from .routers import checkout, questionnaire, stacks
from .storage import Storage


DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5000",
    "http://127.0.0.1:5000",
]

logger = logging.getLogger(__name__)


def _resolve_allowed_origins() -> list[str]:
    """Return allowed origins, optionally sourced from an env override."""

    raw = os.getenv("BIZZAI_ALLOWED_ORIGINS")
    if raw:
        return [origin.strip() for origin in raw.split(",") if origin.strip()]
    return DEFAULT_ALLOWED_ORIGINS


def _build_storage(settings: Settings) -> Storage:
    engine = create_db_engine(settings.database_url)
    init_db(engine)
    return Storage(create_session_factory(engine))


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"message": exc.detail}, status_code=exc.status_code, headers=exc.headers)


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        {"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
        status_code=400,
    )


def create_app(
    settings: Settings | None = None,
    *,
    storage: Storage | None = None,
    generator: StackGenerator | None = None,
    notifier: StackNotifier | None = None,
    payments: PaymentService | None = None,
) -> FastAPI:
    """Create and configure a FastAPI application instance.

    Any collaborator left as ``None`` is built from *settings*.
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Bizz AI Backend",
        version="0.1.0",
        description="Questionnaire-driven AI tool stack recommendations.",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_resolve_allowed_origins(),
        allow_origin_regex=r"http://localhost:\d+$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)

    app.state.services = Services(
        settings=settings,
        storage=storage or _build_storage(settings),
        generator=generator or StackGenerator.from_settings(settings),
        notifier=notifier or SmtpNotifier(settings),
        payments=payments or PaymentService(settings.stripe_secret_key),
    )
    if not app.state.services.generator.configured:
        logger.warning("OPENAI_API_KEY is not set; stack generation requests will fail")

    app.include_router(questionnaire.router)
    app.include_router(stacks.router)
    app.include_router(checkout.router)
    return app


app = create_app()
