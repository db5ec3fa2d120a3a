# api/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from tarot_gate import tarot_core
from tarot_gate.access import attempt_unlock
from tarot_gate.admin import AdminCapability, AdminGate
from tarot_gate.config import Settings, configure_logging
from tarot_gate.db import Database
from tarot_gate.errors import TarotGateError
from tarot_gate.llm import GeminiClient
from tarot_gate.reading import ReadingClient, ReadingService
from tarot_gate.schemas import (
    AccessTokenOut,
    AdminCheckResponse,
    AdminLoginRequest,
    CardsResponse,
    GenerateTokensRequest,
    HealthResponse,
    LoginRequest,
    ReadingRequest,
    ReadingResponse,
    SuccessResponse,
    TokenListResponse,
    TokenResponse,
    TokensResponse,
)
from tarot_gate.tokens import TokenService

logger = logging.getLogger("tarot_gate.api")

VERSION = "0.1.0"


# ---------- Dependencies ----------

def get_tokens(request: Request) -> TokenService:
    return request.app.state.tokens


def get_admin_gate(request: Request) -> AdminGate:
    return request.app.state.admin_gate


def get_readings(request: Request) -> ReadingService:
    return request.app.state.readings


def require_admin(request: Request, gate: AdminGate = Depends(get_admin_gate)) -> AdminCapability:
    return gate.require(request.session)


# ---------- Error handlers ----------

async def handle_tarot_error(request: Request, exc: TarotGateError):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


async def handle_request_validation(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


async def handle_unexpected(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ---------- FastAPI app ----------

def create_app(
    settings: Optional[Settings] = None,
    reading_client: Optional[ReadingClient] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    database = Database(settings.database_url)
    if reading_client is None:
        reading_client = GeminiClient(
            api_key=settings.google_api_key,
            model=settings.gemini_model,
            timeout=settings.gemini_timeout,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.create_all()
        yield
        database.dispose()

    app = FastAPI(title="Tarot Gate API", version=VERSION, lifespan=lifespan)

    app.state.settings = settings
    app.state.database = database
    app.state.tokens = TokenService(database, settings)
    app.state.admin_gate = AdminGate(settings)
    app.state.readings = ReadingService(reading_client)

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie="tarot_session",
        max_age=settings.session_max_age,
        same_site="lax",
    )
    # browsers refuse credentialed responses for a wildcard origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials="*" not in settings.cors_origins,
    )

    app.add_exception_handler(TarotGateError, handle_tarot_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)

    @app.get("/health", response_model=HealthResponse)
    def health(readings: ReadingService = Depends(get_readings)):
        return HealthResponse(
            status="ok",
            version=app.version,
            has_gemini_token=readings.configured,
        )

    @app.get("/api/cards", response_model=CardsResponse)
    def list_cards():
        return CardsResponse(cards=tarot_core.card_names())

    # End-user gate

    @app.post("/api/login", response_model=SuccessResponse)
    def login(req: LoginRequest, tokens: TokenService = Depends(get_tokens)):
        attempt_unlock(tokens, req.token)
        return SuccessResponse()

    # Admin console

    @app.post("/api/admin/login", response_model=SuccessResponse)
    def admin_login(
        req: AdminLoginRequest,
        request: Request,
        gate: AdminGate = Depends(get_admin_gate),
    ):
        gate.login(request.session, req.keyword)
        return SuccessResponse()

    @app.post("/api/admin/logout", response_model=SuccessResponse)
    def admin_logout(request: Request, gate: AdminGate = Depends(get_admin_gate)):
        gate.logout(request.session)
        return SuccessResponse()

    @app.get("/api/admin/check", response_model=AdminCheckResponse)
    def admin_check(request: Request, gate: AdminGate = Depends(get_admin_gate)):
        return AdminCheckResponse(isAdmin=gate.is_admin(request.session))

    @app.post("/api/admin/generate-token", response_model=TokenResponse)
    def generate_token(
        admin: AdminCapability = Depends(require_admin),
        tokens: TokenService = Depends(get_tokens),
    ):
        return TokenResponse(token=tokens.create_token(admin))

    @app.post("/api/admin/generate-tokens", response_model=TokensResponse)
    def generate_tokens(
        req: Optional[GenerateTokensRequest] = None,
        admin: AdminCapability = Depends(require_admin),
        tokens: TokenService = Depends(get_tokens),
    ):
        count = req.count if req is not None and req.count is not None else 1
        return TokensResponse(tokens=tokens.create_tokens(admin, count))

    @app.get("/api/admin/tokens", response_model=TokenListResponse)
    def list_tokens(
        admin: AdminCapability = Depends(require_admin),
        tokens: TokenService = Depends(get_tokens),
    ):
        rows = tokens.list_unused_tokens(admin)
        return TokenListResponse(tokens=[AccessTokenOut.model_validate(r) for r in rows])

    # Reading proxy

    @app.post("/api/tarot-reading", response_model=ReadingResponse)
    def tarot_reading(req: ReadingRequest, readings: ReadingService = Depends(get_readings)):
        return ReadingResponse(reading=readings.generate_reading(req.cards))

    return app


app = create_app()
