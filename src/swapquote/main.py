"""Main entry point - runs the swap API server."""

import logging

import uvicorn

from swapquote.api.app import create_app
from swapquote.config import get_settings

logger = logging.getLogger(__name__)


def main() -> None:
    """Configure logging and serve the API."""
    settings = get_settings()

    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logger.info("Starting swapquote...")
    logger.info(f"Environment: {settings.environment}, chain: {settings.chain_id}")

    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
