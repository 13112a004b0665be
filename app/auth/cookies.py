"""Refresh token cookie helpers."""

from __future__ import annotations

from starlette.responses import Response

REFRESH_COOKIE_NAME = "refreshToken"


def set_refresh_cookie(response: Response, token: str, *, max_age: int) -> None:
    """Deliver the refresh token as an HTTP-only cross-site cookie."""
    response.set_cookie(
        REFRESH_COOKIE_NAME,
        token,
        max_age=max_age,
        path="/",
        secure=True,
        httponly=True,
        samesite="none",
    )


def clear_refresh_cookie(response: Response) -> None:
    """Expire the refresh token cookie with the flags it was set with."""
    response.delete_cookie(
        REFRESH_COOKIE_NAME,
        path="/",
        secure=True,
        httponly=True,
        samesite="none",
    )


def clear_refresh_cookie_headers() -> dict[str, str]:
    """Return the ``Set-Cookie`` header that expires the refresh cookie."""
    response = Response()
    clear_refresh_cookie(response)
    return {"set-cookie": response.headers["set-cookie"]}
