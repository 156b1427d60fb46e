from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from guildgate.config import Settings, get_settings
from guildgate.web.routes.auth_utils import get_http_client
from guildgate.web.server import get_app

FRONTEND_URL = "https://frontend.example"
GUILD_ID = "111222333"


class FakeDiscord:
    """Canned responses for the three Discord endpoints, keyed by path."""

    def __init__(self) -> None:
        self.routes: dict[str, httpx.Response | Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []
        self.ok()

    def ok(
        self,
        *,
        token: Any = None,
        user: Any = None,
        guilds: Any = None,
    ) -> "FakeDiscord":
        self.routes["/api/oauth2/token"] = httpx.Response(
            200, json=token if token is not None else {"access_token": "T", "scope": "identify guilds"}
        )
        self.routes["/api/users/@me"] = httpx.Response(
            200,
            json=user if user is not None else {"id": "123", "username": "bob", "global_name": "Bob", "avatar": "abc"},
        )
        self.routes["/api/users/@me/guilds"] = httpx.Response(
            200, json=guilds if guilds is not None else [{"id": "999"}, {"id": GUILD_ID}]
        )
        return self

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes[request.url.path]
        if callable(route):
            return route(request)
        return route


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "frontend_url": FRONTEND_URL,
        "discord_client_id": "client-id",
        "discord_client_secret": "client-secret",
        "discord_redirect_uri": "http://testserver/callback",
        "discord_guild_id": GUILD_ID,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def discord() -> FakeDiscord:
    return FakeDiscord()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def app(settings: Settings, discord: FakeDiscord):
    app = get_app()

    async def _client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(discord.handler)) as client:
            yield client

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_http_client] = _client
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app, follow_redirects=False)
