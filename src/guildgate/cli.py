import logging
import sys

import uvicorn

from .config import get_settings
from .web.server import get_app

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

_log = logging.getLogger(__name__)


def main() -> None:  # noqa: D401
    """CLI entry point declared in pyproject.toml."""

    settings = get_settings()
    if not settings.callback_configured:
        _log.warning("Some required environment variables are missing; requests will fail with 500")

    _log.info("Serving verification flow on %s:%d", settings.host, settings.port)
    try:
        uvicorn.run(get_app(), host=settings.host, port=settings.port, log_level=settings.log_level)
    except KeyboardInterrupt:
        sys.exit(0)
