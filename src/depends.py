import logging
import os
from typing import Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import create_async_engine

from src.adapter.repositories.credential_store import (
    EmbeddedCredentialStore,
    PrimaryCredentialStore,
)
from src.adapter.services.rate_limiter import InMemoryRateLimiter
from src.api.utils.cookies import SessionCookieIssuer
from src.app.security.passwords import PasswordHasher
from src.app.security.tokens import TokenHasher
from src.app.services.credential_backends import CredentialBackends
from src.app.services.rate_limiter import IRateLimiter
from src.app.use_cases.auth.settings import AuthSettings, is_development_environment

logger = logging.getLogger(__name__)


def build_credential_backends(config) -> CredentialBackends:
    """
    Build the Primary and Fallback stores the configuration asks for.

    Primary needs PRIMARY_ENABLED and PRIMARY_DB_URI; Fallback needs
    SQLITE_DB_PATH. Either may be absent.
    """
    hasher = PasswordHasher(rounds=config.BCRYPT_ROUNDS)
    token_hasher = TokenHasher(config.SESSION_TOKEN_SECRET)

    primary = None
    if config.PRIMARY_ENABLED and config.PRIMARY_DB_URI:
        engine = create_async_engine(
            config.PRIMARY_DB_URI, echo=False, future=True, pool_pre_ping=True
        )
        primary = PrimaryCredentialStore(
            engine,
            hasher,
            token_hasher,
            timeout_seconds=config.PRIMARY_TIMEOUT_SECONDS,
        )
        logger.info("Primary credential backend enabled")
    elif config.PRIMARY_ENABLED:
        logger.warning("PRIMARY_ENABLED is set but PRIMARY_DB_URI is empty; primary disabled")

    fallback = None
    if config.SQLITE_DB_PATH:
        directory = os.path.dirname(os.path.abspath(config.SQLITE_DB_PATH))
        os.makedirs(directory, exist_ok=True)
        engine = create_async_engine(
            f"sqlite+aiosqlite:///{config.SQLITE_DB_PATH}", echo=False, future=True
        )
        fallback = EmbeddedCredentialStore(engine, hasher, token_hasher)
        logger.info(f"Embedded credential backend at {config.SQLITE_DB_PATH}")

    if primary is None and fallback is None:
        logger.error("No credential backend configured; auth requests will fail")

    return CredentialBackends(primary=primary, fallback=fallback, hasher=hasher)


def build_rate_limiter(config) -> IRateLimiter:
    return InMemoryRateLimiter(max_keys=config.RATE_LIMIT_MAX_KEYS)


def build_cookie_issuer(config) -> SessionCookieIssuer:
    return SessionCookieIssuer(
        cookie_name=config.SESSION_COOKIE_NAME,
        secure=not is_development_environment(config.ENVIRONMENT),
    )


def get_backends(request: Request) -> CredentialBackends:
    return request.app.state.backends


def get_rate_limiter(request: Request) -> IRateLimiter:
    return request.app.state.rate_limiter


def get_auth_settings(request: Request) -> AuthSettings:
    return request.app.state.auth_settings


def get_cookie_issuer(request: Request) -> SessionCookieIssuer:
    return request.app.state.cookie_issuer


def get_session_token(request: Request) -> Optional[str]:
    return request.app.state.cookie_issuer.read_token(request)


def get_origin(request: Request) -> str:
    """
    Client identity for rate limit keys.

    X-Forwarded-For / X-Real-IP are honoured only when the socket peer is a
    configured trusted proxy; otherwise any caller could pick a fresh rate
    limit bucket per request.
    """
    peer = request.client.host if request.client and request.client.host else None
    if peer is not None and peer in request.app.state.trusted_proxies:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
        real_ip = request.headers.get("x-real-ip")
        if real_ip and real_ip.strip():
            return real_ip.strip()
    return peer or "unknown"
