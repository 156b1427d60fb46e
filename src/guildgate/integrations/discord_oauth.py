"""Thin async wrapper around the three Discord endpoints the login flow needs.

The caller owns the :class:`httpx.AsyncClient`; this module never creates or
closes one.
Failures are reported as :class:`DiscordAPIError` carrying the short message
that ends up on the frontend error page.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

import httpx

__all__ = [
    "DISCORD_AUTHORIZE_URL",
    "DISCORD_TOKEN_URL",
    "DISCORD_USER_ENDPOINT",
    "DISCORD_GUILDS_ENDPOINT",
    "OAUTH_SCOPES",
    "VerificationError",
    "DiscordAPIError",
    "DiscordOAuthClient",
    "build_authorize_url",
    "is_guild_member",
    "DISCORD_AVATAR_URL",
    "DISCORD_DEFAULT_AVATAR_URL",
]

_log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Discord OAuth constants
# ---------------------------------------------------------------------------

OAUTH_SCOPES = ("identify", "guilds")
DISCORD_AUTHORIZE_URL = "https://discord.com/api/oauth2/authorize"
DISCORD_TOKEN_URL = "https://discord.com/api/oauth2/token"
DISCORD_USER_ENDPOINT = "https://discord.com/api/users/@me"
DISCORD_GUILDS_ENDPOINT = "https://discord.com/api/users/@me/guilds"
DISCORD_AVATAR_URL = "https://cdn.discordapp.com/avatars/{user_id}/{avatar}.png"
DISCORD_DEFAULT_AVATAR_URL = "https://cdn.discordapp.com/embed/avatars/{index}.png"


class VerificationError(Exception):
    """A step of the verification flow failed with a user-facing message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class DiscordAPIError(VerificationError):
    """Discord answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


def build_authorize_url(client_id: str, redirect_uri: str, state: str) -> str:
    params = {
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "scope": " ".join(OAUTH_SCOPES),
        "state": state,
    }
    return f"{DISCORD_AUTHORIZE_URL}?{urlencode(params)}"


class DiscordOAuthClient:
    """Token exchange plus the two user-scoped reads, over a borrowed client."""

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    async def exchange_code(
        self, code: str, *, client_id: str, client_secret: str, redirect_uri: str
    ) -> Any:
        data = {
            "client_id": client_id,
            "client_secret": client_secret,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
        }
        headers = {"Content-Type": "application/x-www-form-urlencoded"}
        resp = await self._http.post(DISCORD_TOKEN_URL, data=data, headers=headers)
        return self._json_or_raise(resp, "Token exchange failed")

    async def fetch_user(self, access_token: str) -> Any:
        resp = await self._http.get(DISCORD_USER_ENDPOINT, headers=_bearer(access_token))
        return self._json_or_raise(resp, "Failed to fetch user profile")

    async def fetch_guilds(self, access_token: str) -> Any:
        resp = await self._http.get(DISCORD_GUILDS_ENDPOINT, headers=_bearer(access_token))
        return self._json_or_raise(resp, "Failed to fetch guilds")

    @staticmethod
    def _json_or_raise(resp: httpx.Response, message: str) -> Any:
        if not resp.is_success:
            _log.warning("%s %s returned %d", resp.request.method, resp.request.url, resp.status_code)
            raise DiscordAPIError(message, resp.status_code)
        return resp.json()


def _bearer(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


# ---------------------------------------------------------------------------
# Response inspection helpers
# ---------------------------------------------------------------------------

def is_guild_member(guilds: list[Any], guild_id: str) -> bool:
    return any(isinstance(g, dict) and g.get("id") == guild_id for g in guilds)
