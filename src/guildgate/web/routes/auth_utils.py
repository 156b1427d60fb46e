from __future__ import annotations

from urllib.parse import urlencode
from typing import AsyncIterator

import httpx
from fastapi.responses import RedirectResponse

from .schemas import DiscordUser

__all__ = [
    "STATE_COOKIE",
    "STATE_COOKIE_MAX_AGE",
    "get_http_client",
    "build_error_url",
    "build_success_url",
    "clear_state_cookie",
    "flow_redirect",
]

# ---------------------------------------------------------------------------
# CSRF state cookie
# ---------------------------------------------------------------------------

STATE_COOKIE = "oauth_state"
STATE_COOKIE_MAX_AGE = 300  # seconds


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """Yield a per-request client for the outbound Discord calls."""
    async with httpx.AsyncClient() as client:
        yield client


# ---------------------------------------------------------------------------
# Frontend redirects
# ---------------------------------------------------------------------------

def build_error_url(frontend_url: str, message: str) -> str:
    return f"{frontend_url}/verification/error?{urlencode({'msg': message})}"


def build_success_url(frontend_url: str, user: DiscordUser) -> str:
    params = {
        "name": user.display_name,
        "id": user.id,
        "tag": user.username,
        "avatar": user.avatar_url,
    }
    return f"{frontend_url}/verification/callback?{urlencode(params)}"


def clear_state_cookie(response: RedirectResponse) -> RedirectResponse:
    response.delete_cookie(STATE_COOKIE, path="/")
    return response


def flow_redirect(url: str) -> RedirectResponse:
    """302 to *url* with the CSRF state cookie cleared."""
    return clear_state_cookie(RedirectResponse(url, status_code=302))
