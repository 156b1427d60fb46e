from __future__ import annotations

from fastapi import FastAPI

from guildgate import __version__


def get_app() -> FastAPI:  # noqa: D401
    """Return the FastAPI app serving the Discord verification flow."""

    app = FastAPI(title="Guildgate", version=__version__, docs_url=None, redoc_url=None)

    # Routes live in dedicated modules under ``guildgate.web.routes``.
    from .routes import register_routes

    register_routes(app)

    return app
