"""Entry point for `python -m src.podcast_studio`."""

import logging

import structlog
import uvicorn

from src.podcast_studio.api.app import create_app
from src.podcast_studio.config import Settings

logger = structlog.get_logger()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    settings = Settings()
    logger.info("Starting Podcast Studio", host=settings.host, port=settings.port)
    app = create_app(settings)
    # Jobs live in process memory, so a single worker is required
    uvicorn.run(app, host=settings.host, port=settings.port, reload=False, workers=1)


if __name__ == "__main__":
    main()
