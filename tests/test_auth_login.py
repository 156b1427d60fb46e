from urllib.parse import parse_qs, urlsplit

from fastapi.testclient import TestClient

from guildgate.config import get_settings
from guildgate.web.routes.auth_utils import STATE_COOKIE

from .conftest import make_settings


def _state_cookie_attrs(resp) -> set[str]:
    headers = [h for h in resp.headers.get_list("set-cookie") if h.startswith(f"{STATE_COOKIE}=")]
    assert len(headers) == 1
    return {part.strip().lower() for part in headers[0].split(";")[1:]}


def test_login_redirects_to_discord_authorize(client):
    resp = client.get("/")

    assert resp.status_code == 302
    location = urlsplit(resp.headers["location"])
    assert location.scheme == "https"
    assert location.netloc == "discord.com"
    assert location.path == "/api/oauth2/authorize"

    query = parse_qs(location.query)
    assert query["client_id"] == ["client-id"]
    assert query["redirect_uri"] == ["http://testserver/callback"]
    assert query["response_type"] == ["code"]
    assert set(query["scope"][0].split(" ")) == {"identify", "guilds"}
    assert query["state"] == [resp.cookies[STATE_COOKIE]]


def test_login_state_cookie_attributes(client):
    attrs = _state_cookie_attrs(client.get("/"))

    assert "httponly" in attrs
    assert "samesite=lax" in attrs
    assert "max-age=300" in attrs
    assert "path=/" in attrs
    assert "secure" not in attrs


def test_login_cookie_is_secure_over_https(app):
    client = TestClient(app, base_url="https://testserver", follow_redirects=False)

    attrs = _state_cookie_attrs(client.get("/"))

    assert "secure" in attrs


def test_login_generates_fresh_state_each_time(client):
    first = client.get("/").cookies[STATE_COOKIE]
    second = client.get("/").cookies[STATE_COOKIE]

    assert first and second
    assert first != second


def test_login_missing_client_id_is_server_error(app):
    app.dependency_overrides[get_settings] = lambda: make_settings(discord_client_id=None)
    resp = TestClient(app, follow_redirects=False).get("/")

    assert resp.status_code == 500
    assert resp.text == "Server configuration error"
    assert "set-cookie" not in resp.headers


def test_login_only_needs_client_id_and_redirect_uri(app):
    app.dependency_overrides[get_settings] = lambda: make_settings(
        frontend_url=None, discord_client_secret=None, discord_guild_id=None
    )
    resp = TestClient(app, follow_redirects=False).get("/")

    assert resp.status_code == 302


def test_login_empty_redirect_uri_counts_as_missing(app):
    app.dependency_overrides[get_settings] = lambda: make_settings(discord_redirect_uri="")
    resp = TestClient(app, follow_redirects=False).get("/")

    assert resp.status_code == 500
