"""Authentication API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from app.api.contracts import (
    AccessTokenResponse,
    ApiErrorResponse,
    LogoutResponse,
    ProfileResponse,
)
from app.auth.cookies import REFRESH_COOKIE_NAME, clear_refresh_cookie, set_refresh_cookie
from app.auth.middleware import AuthGuard
from app.auth.models import CredentialsRequest, TokenClaims
from app.auth.service import AuthService
from app.core.config import AuthConfig


def create_auth_router(
    service: AuthService, guard: AuthGuard, config: AuthConfig
) -> APIRouter:
    """Build authentication router with register/login/logout/profile/refresh."""
    router = APIRouter(prefix="/api/auth", tags=["auth"])
    gate_errors = {
        401: {"model": ApiErrorResponse},
        403: {"model": ApiErrorResponse},
        500: {"model": ApiErrorResponse},
    }

    @router.post(
        "/register",
        status_code=201,
        response_model=AccessTokenResponse,
        responses={400: {"model": ApiErrorResponse}, 409: {"model": ApiErrorResponse}},
    )
    async def register(req: CredentialsRequest, response: Response) -> AccessTokenResponse:
        """Create an account and start a session."""
        tokens = await service.register(req.email, req.password)
        set_refresh_cookie(
            response, tokens.refresh_token, max_age=config.refresh_token_ttl_seconds
        )
        return AccessTokenResponse(access_token=tokens.access_token)

    @router.post(
        "/login",
        status_code=201,
        response_model=AccessTokenResponse,
        responses={
            400: {"model": ApiErrorResponse},
            401: {"model": ApiErrorResponse},
            404: {"model": ApiErrorResponse},
        },
    )
    async def login(req: CredentialsRequest, response: Response) -> AccessTokenResponse:
        """Authenticate credentials and start a session."""
        tokens = await service.login(req.email, req.password)
        set_refresh_cookie(
            response, tokens.refresh_token, max_age=config.refresh_token_ttl_seconds
        )
        return AccessTokenResponse(access_token=tokens.access_token)

    @router.post(
        "/logout",
        response_model=LogoutResponse,
        dependencies=[Depends(guard.authenticate)],
        responses=gate_errors,
    )
    async def logout(request: Request, response: Response) -> LogoutResponse:
        """Retire the session's refresh token and clear its cookie."""
        await service.logout(request.cookies[REFRESH_COOKIE_NAME])
        clear_refresh_cookie(response)
        return LogoutResponse(message="Logged out successfully")

    @router.get(
        "/profile",
        response_model=ProfileResponse,
        responses={**gate_errors, 404: {"model": ApiErrorResponse}},
    )
    async def profile(claims: TokenClaims = Depends(guard.authenticate)) -> ProfileResponse:
        """Return the current user's profile."""
        user = await service.get_user_by_id(claims.id)
        return ProfileResponse(
            id=user.id, email=user.email, role=user.role, created_at=user.created_at
        )

    @router.post(
        "/refresh",
        response_model=AccessTokenResponse,
        responses=gate_errors,
    )
    async def refresh(claims: TokenClaims = Depends(guard.authenticate)) -> AccessTokenResponse:
        """Issue a new access token for the refresh cookie's identity."""
        tokens = service.issue_token_pair(claims)
        return AccessTokenResponse(access_token=tokens.access_token)

    return router
