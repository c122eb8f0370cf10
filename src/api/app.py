import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.app.services.credential_backends import CredentialBackends
from src.app.services.rate_limiter import IRateLimiter
from src.app.use_cases.auth.settings import AuthSettings
from .error import ClientError, ServerError

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": error_dict},
        headers=exc.headers,
    )


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"ok": False, "error": error_dict},
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    error_dict = {"code": "INVALID_INPUT", "message": "Invalid request body"}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"ok": False, "error": error_dict},
    )


def create_app(
    ApplicationConfig,
    backends: Optional[CredentialBackends] = None,
    rate_limiter: Optional[IRateLimiter] = None,
) -> FastAPI:
    from src.depends import (
        build_cookie_issuer,
        build_credential_backends,
        build_rate_limiter,
    )

    setup_logging(ApplicationConfig.LOG_LEVEL)

    if backends is None:
        backends = build_credential_backends(ApplicationConfig)
    if rate_limiter is None:
        rate_limiter = build_rate_limiter(ApplicationConfig)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        for store in (backends.primary, backends.fallback):
            if store is None:
                continue
            try:
                await store.init_schema()
            except Exception as e:
                # Stores retry schema creation on first use
                logger.warning(f"Could not prepare {store.name} backend schema: {e}")
        yield
        for store in (backends.primary, backends.fallback):
            if store is not None:
                await store.dispose()

    app = FastAPI(title="Credential Service", version="0.1.0", lifespan=lifespan)

    app.state.backends = backends
    app.state.rate_limiter = rate_limiter
    app.state.auth_settings = AuthSettings.from_config(ApplicationConfig)
    app.state.cookie_issuer = build_cookie_issuer(ApplicationConfig)
    app.state.trusted_proxies = frozenset(ApplicationConfig.TRUSTED_PROXIES)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import admin, auth, health_check

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(admin.router, tags=["Admin"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    return app
