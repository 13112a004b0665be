"""Request gates enforcing refresh-token auth and the admin role."""

from __future__ import annotations

import logging
from typing import Protocol

from fastapi import Request
from pydantic import ValidationError

from app.api.errors import ApiError, ApiErrorCode
from app.auth.cookies import REFRESH_COOKIE_NAME, clear_refresh_cookie_headers
from app.auth.models import TokenClaims
from app.core.config import AuthConfig
from app.core.security import TokenError, verify_token

LOGGER = logging.getLogger(__name__)


class TokenDenylistProtocol(Protocol):
    """Lookup side of the refresh-token denylist."""

    async def is_token_denylisted(self, token: str) -> bool:
        """Return whether the exact token string has been retired."""


class AuthGuard:
    """FastAPI dependencies for the refresh-cookie and admin gates.

    ``authenticate`` must run before ``require_admin``; routes list them in
    that order in ``dependencies``.
    """

    def __init__(self, denylist: TokenDenylistProtocol, config: AuthConfig) -> None:
        """Store the denylist and the refresh secret holder."""
        self._denylist = denylist
        self._config = config

    async def authenticate(self, request: Request) -> TokenClaims:
        """Validate the refresh cookie and attach its claims to the request.

        Any failure once a token is present carries a ``Set-Cookie`` header
        that clears the cookie.
        """
        token = request.cookies.get(REFRESH_COOKIE_NAME)
        if not token:
            raise ApiError(
                status_code=401,
                error_code=ApiErrorCode.AUTH_MISSING_TOKEN,
                message="Missing token!",
            )

        try:
            claims = await self._check_token(token)
        except ApiError as exc:
            exc.headers = {**(exc.headers or {}), **clear_refresh_cookie_headers()}
            raise
        except Exception as exc:
            LOGGER.exception("auth_gate_failed", extra={"path": request.url.path})
            raise ApiError(
                status_code=500,
                error_code=ApiErrorCode.INTERNAL_SERVER_ERROR,
                message="Internal server error",
                headers=clear_refresh_cookie_headers(),
            ) from exc

        request.state.user = claims
        request.state.is_authenticated = True
        return claims

    async def require_admin(self, request: Request) -> TokenClaims:
        """Allow the request through only for the ``admin`` role."""
        claims = getattr(request.state, "user", None)
        if not isinstance(claims, TokenClaims) or not claims.is_admin:
            raise ApiError(
                status_code=403,
                error_code=ApiErrorCode.AUTH_FORBIDDEN,
                message="Admin access required!",
            )
        return claims

    async def _check_token(self, token: str) -> TokenClaims:
        if await self._denylist.is_token_denylisted(token):
            raise ApiError(
                status_code=403,
                error_code=ApiErrorCode.AUTH_TOKEN_REVOKED,
                message="Invalid token!",
            )

        secret = self._config.refresh_token_secret
        if not secret:
            raise ApiError(
                status_code=500,
                error_code=ApiErrorCode.CONFIGURATION_ERROR,
                message="JWT refresh secret is not configured!",
            )

        try:
            return TokenClaims.model_validate(verify_token(token, secret))
        except TokenError as exc:
            raise ApiError(
                status_code=401,
                error_code=ApiErrorCode.AUTH_TOKEN_INVALID,
                message=str(exc),
            ) from exc
        except ValidationError as exc:
            raise ApiError(
                status_code=401,
                error_code=ApiErrorCode.AUTH_TOKEN_INVALID,
                message="Invalid token payload",
            ) from exc
