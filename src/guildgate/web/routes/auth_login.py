import logging
import secrets

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, RedirectResponse

from guildgate.config import Settings, get_settings
from guildgate.integrations.discord_oauth import build_authorize_url

from .auth_utils import STATE_COOKIE, STATE_COOKIE_MAX_AGE

router = APIRouter(tags=["auth"])

_log = logging.getLogger(__name__)


@router.get("/")
async def login(request: Request, settings: Settings = Depends(get_settings)):
    """Kick-off Discord OAuth2 flow and redirect the user."""

    if not settings.login_configured:
        _log.error("DISCORD_CLIENT_ID or DISCORD_REDIRECT_URI is not set")
        return PlainTextResponse("Server configuration error", status_code=500)

    state = secrets.token_urlsafe(16)
    url = build_authorize_url(settings.discord_client_id, settings.discord_redirect_uri, state)

    response = RedirectResponse(url, status_code=302)
    response.set_cookie(
        STATE_COOKIE,
        state,
        max_age=STATE_COOKIE_MAX_AGE,
        path="/",
        secure=request.url.scheme == "https",
        httponly=True,
        samesite="lax",
    )
    return response
