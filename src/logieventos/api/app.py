"""
logieventos.api.app

FastAPI app factory for the LogiEventos backend.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Build the shared `AuthorizationGate` from settings and the policy table.
- Initialize and dispose the DB engine/session factory.
- Render every failure as the `{success: false, message}` envelope.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException
from starlette.status import (
    HTTP_409_CONFLICT,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from logieventos import __version__
from logieventos.api.routers.auth import router as auth_router
from logieventos.api.routers.catalog import (
    events_router,
    personnel_router,
    providers_router,
    resources_router,
)
from logieventos.api.routers.contracts import router as contracts_router
from logieventos.api.routers.health import router as health_router
from logieventos.api.routers.reports import router as reports_router
from logieventos.api.routers.taxonomies import (
    event_types_router,
    personnel_types_router,
    provider_types_router,
    resource_types_router,
)
from logieventos.api.routers.users import router as users_router
from logieventos.auth.errors import AuthError
from logieventos.auth.gate import AuthorizationGate
from logieventos.auth.jwt import JwtConfig
from logieventos.auth.policy import load_policy
from logieventos.db.init_db import init_db
from logieventos.db.session import create_engine, create_sessionmaker
from logieventos.observability.logging import configure_logging, get_logger
from logieventos.observability.middleware import RequestContextMiddleware
from logieventos.settings import Settings, get_settings

log = get_logger(__name__)


def _failure(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra},
    )


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthError)
    async def _auth_error(request: Request, exc: AuthError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(HTTPException)
    async def _http_error(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _failure(
            HTTP_422_UNPROCESSABLE_ENTITY,
            "Validation failed",
            errors=jsonable_encoder(exc.errors()),
        )

    @app.exception_handler(IntegrityError)
    async def _integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
        # Unique constraints (email, username, document, type names) and FKs.
        log.info("request.conflict", error=str(exc.orig))
        return _failure(HTTP_409_CONFLICT, "Record conflicts with existing data", kind="Conflict")

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        log.exception("request.unhandled", error_type=type(exc).__name__)
        return _failure(HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", kind="InternalError")


def create_app(*, settings: Settings) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        cache=settings.env != "test",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Prod uses Alembic migrations.
            await init_db(engine)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="LogiEventos API",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    policy = load_policy(settings.policy_file)
    app.state.settings = settings
    app.state.gate = AuthorizationGate(
        jwt_cfg=JwtConfig.from_settings(settings),
        policy=policy,
        token_headers=settings.token_headers,
        live_default=settings.live_identity_lookup,
    )
    app.dependency_overrides[get_settings] = lambda: settings
    log.info("policy.loaded", resource_classes=policy.resource_classes)

    app.add_middleware(RequestContextMiddleware)
    _register_error_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    for router in (
        events_router,
        contracts_router,
        resources_router,
        providers_router,
        personnel_router,
        event_types_router,
        resource_types_router,
        provider_types_router,
        personnel_types_router,
        reports_router,
    ):
        app.include_router(router)

    return app


# --- Module Notes -----------------------------------------------------------
# Every route carries its policy binding in its own dependencies; there is no
# global auth middleware, so health and public auth routes need no allow-list.
