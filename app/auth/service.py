"""Authentication service for registration, login, logout and token issuance."""

from __future__ import annotations

import logging
from typing import Protocol

from pymongo.errors import DuplicateKeyError

from app.api.errors import ApiError, ApiErrorCode
from app.auth.models import AuthUser, DenylistEntry, TokenClaims, TokenPair
from app.core.config import AuthConfig
from app.core.security import TokenError, sign_token, verify_password

LOGGER = logging.getLogger(__name__)


class AuthRepositoryProtocol(Protocol):
    """Protocol describing the user store and denylist used by auth."""

    async def get_user_by_email(self, email: str) -> AuthUser | None:
        """Get user by email including password hash."""

    async def get_user_by_id(self, user_id: str) -> AuthUser | None:
        """Get user by id without password hash."""

    async def create_user(self, email: str, password: str) -> AuthUser:
        """Persist a new user, hashing the password."""

    async def is_token_denylisted(self, token: str) -> bool:
        """Return whether a refresh token has been retired."""

    async def denylist_token(self, token: str) -> DenylistEntry:
        """Retire a refresh token."""


class AuthService:
    """Session lifecycle: registration, login, logout and token pairs."""

    def __init__(self, repo: AuthRepositoryProtocol, config: AuthConfig) -> None:
        """Initialize service dependencies."""
        self._repo = repo
        self._config = config

    async def register(self, email: str, password: str) -> TokenPair:
        """Create a user and issue its first token pair.

        The existence check runs before the insert; the unique email index
        turns a concurrent duplicate into the same 409.
        """
        if await self._repo.get_user_by_email(email) is not None:
            raise self._email_taken()
        try:
            user = await self._repo.create_user(email, password)
        except DuplicateKeyError as exc:
            raise self._email_taken() from exc

        LOGGER.info("user_registered", extra={"user_id": user.id})
        return self.issue_token_pair(_claims_for(user))

    async def login(self, email: str, password: str) -> TokenPair:
        """Authenticate credentials and issue a token pair."""
        user = await self._repo.get_user_by_email(email)
        if user is None:
            raise ApiError(
                status_code=404,
                error_code=ApiErrorCode.USER_NOT_FOUND,
                message="User does not exist!",
            )
        if not verify_password(password, user.password_hash):
            raise ApiError(
                status_code=401,
                error_code=ApiErrorCode.AUTH_INVALID_CREDENTIALS,
                message="Password does not match!",
            )
        return self.issue_token_pair(_claims_for(user))

    async def logout(self, refresh_token: str) -> None:
        """Denylist the refresh token string without inspecting it."""
        await self._repo.denylist_token(refresh_token)

    async def get_user_by_id(self, user_id: str) -> AuthUser:
        """Return the user profile for ``user_id``."""
        user = await self._repo.get_user_by_id(user_id)
        if user is None:
            raise ApiError(
                status_code=404,
                error_code=ApiErrorCode.USER_NOT_FOUND,
                message="There is no user with this id!",
            )
        return user

    def issue_token_pair(self, claims: TokenClaims) -> TokenPair:
        """Sign access and refresh tokens for the same identity claims."""
        if not self._config.access_token_secret or not self._config.refresh_token_secret:
            raise ApiError(
                status_code=500,
                error_code=ApiErrorCode.CONFIGURATION_ERROR,
                message="JWT secrets are not configured!",
            )

        payload = {"id": claims.id, "email": claims.email, "role": claims.role}
        try:
            access_token = sign_token(
                payload,
                self._config.access_token_secret,
                expires_in=self._config.access_token_ttl_seconds,
            )
            refresh_token = sign_token(
                payload,
                self._config.refresh_token_secret,
                expires_in=self._config.refresh_token_ttl_seconds,
            )
        except TokenError as exc:
            raise ApiError(
                status_code=500,
                error_code=ApiErrorCode.INTERNAL_SERVER_ERROR,
                message=str(exc),
            ) from exc
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    @staticmethod
    def _email_taken() -> ApiError:
        return ApiError(
            status_code=409,
            error_code=ApiErrorCode.AUTH_EMAIL_EXISTS,
            message="This email already registered!",
        )


def _claims_for(user: AuthUser) -> TokenClaims:
    return TokenClaims(id=user.id, email=user.email, role=user.role)
