from __future__ import annotations

import logging
from typing import Any

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from guildgate.config import Settings, get_settings
from guildgate.integrations.discord_oauth import (
    DiscordOAuthClient,
    VerificationError,
    is_guild_member,
)

from .auth_utils import (
    STATE_COOKIE,
    build_error_url,
    build_success_url,
    flow_redirect,
    get_http_client,
)
from .schemas import DiscordUser, TokenResponse

router = APIRouter(tags=["auth"])

_log = logging.getLogger(__name__)

NOT_IN_GUILD_MESSAGE = "You are not in our server please join the server first"
UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"


@router.get("/callback")
async def oauth_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    settings: Settings = Depends(get_settings),
    http: httpx.AsyncClient = Depends(get_http_client),
):
    """Handle redirect from Discord, verify guild membership and hand off to the frontend.

    Every outcome except a misconfigured server is a redirect to the frontend,
    and every redirect clears the CSRF state cookie.
    """

    if not settings.callback_configured:
        _log.error("Callback requested but required environment variables are missing")
        return PlainTextResponse(
            "Server configuration error: missing required environment variables",
            status_code=500,
        )

    frontend_url = settings.frontend_base_url

    stored_state = request.cookies.get(STATE_COOKIE)
    if not state or not stored_state or state != stored_state:
        _log.warning("Rejected callback with invalid or missing state")
        return flow_redirect(build_error_url(frontend_url, "Invalid or missing state parameter"))

    if not code:
        _log.warning("Rejected callback without authorization code")
        return flow_redirect(build_error_url(frontend_url, "Missing code"))

    try:
        user = await _verify_member(DiscordOAuthClient(http), code, settings)
    except VerificationError as exc:
        _log.warning("Verification failed: %s", exc.message)
        return flow_redirect(build_error_url(frontend_url, exc.message))
    except Exception as exc:
        # The exception text is shown on the frontend error page as-is.
        _log.exception("Unexpected error during Discord verification")
        return flow_redirect(build_error_url(frontend_url, str(exc) or UNKNOWN_ERROR_MESSAGE))

    _log.info("Verified guild member %s", user.id)
    return flow_redirect(build_success_url(frontend_url, user))


async def _verify_member(client: DiscordOAuthClient, code: str, settings: Settings) -> DiscordUser:
    """Run the token exchange and both reads, raising on the first failed check."""

    raw_token: Any = await client.exchange_code(
        code,
        client_id=settings.discord_client_id,
        client_secret=settings.discord_client_secret,
        redirect_uri=settings.discord_redirect_uri,
    )
    if not isinstance(raw_token, dict) or not raw_token.get("access_token"):
        raise VerificationError("Token exchange failed")

    token = TokenResponse.model_validate(raw_token)
    if not token.has_required_scopes:
        raise VerificationError("Required scopes missing")

    raw_user: Any = await client.fetch_user(token.access_token)
    if not isinstance(raw_user, dict) or not raw_user.get("id") or not raw_user.get("username"):
        raise VerificationError("Invalid user data")

    user = DiscordUser.model_validate(raw_user)

    guilds: Any = await client.fetch_guilds(token.access_token)
    if not isinstance(guilds, list):
        raise VerificationError("Invalid guild data")

    if not is_guild_member(guilds, settings.discord_guild_id):
        raise VerificationError(NOT_IN_GUILD_MESSAGE)

    return user
