"""
Server runner for catscii.

Usage:
    catscii
    python -m catscii.run

Or with uvicorn directly:
    uvicorn catscii.main:app --reload --host 0.0.0.0 --port 8080
"""
import logging

import uvicorn

from .config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)

    logger = logging.getLogger("catscii")
    logger.info("Starting server on http://%s:%d", settings.host, settings.port)
    logger.info("  Health check: http://localhost:%d/api/health", settings.port)

    uvicorn.run(
        "catscii.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
