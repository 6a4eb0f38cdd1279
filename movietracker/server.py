"""Web server entry point."""

import logging
import sys

import uvicorn

from movietracker.config import Config
from movietracker.sources.movie_api import MovieApiSource

# Setup logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(),
    ],
)

logger = logging.getLogger(__name__)


def log_banner() -> None:
    """Log where the tracker keeps its data and where it fetches it from."""
    logger.info("=" * 50)
    logger.info("Movie Tracker - Web Interface")
    logger.info("=" * 50)
    logger.info(f"Dashboard: http://localhost:{Config.WEB_PORT}")
    logger.info(f"Movie service: {Config.API_BASE_URL} (timeout {Config.NETWORK_TIMEOUT}s)")
    logger.info(f"Local movie cache: {Config.DATABASE_PATH.resolve()}")
    logger.info(
        f"Live search: {Config.SEARCH_DEBOUNCE_MS} ms debounce, "
        f"at least {Config.SEARCH_MIN_LENGTH} characters"
    )
    if Config.SYNC_INTERVAL > 0:
        logger.info(f"Scheduled refresh: every {Config.SYNC_INTERVAL} minutes")
    else:
        logger.info("Scheduled refresh: off, use POST /api/sync/trigger")
    logger.info("=" * 50)


def main() -> int:
    """Run the web server."""
    # Validate config
    errors = Config.validate()
    if errors:
        print("Configuration errors:")
        for error in errors:
            print(f"  - {error}")
        print("\nPlease check your .env file")
        return 1

    Config.ensure_directories()
    log_banner()

    # Cached movies stay browsable while the service is down
    source = MovieApiSource(Config.API_BASE_URL, timeout=Config.NETWORK_TIMEOUT)
    if not source.test_connection():
        logger.warning(f"Failed to connect to {source.name}, serving cached movies only")

    uvicorn.run(
        "movietracker.web.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=Config.WEB_PORT,
        reload=False,
        log_level=Config.LOG_LEVEL.lower(),
    )

    return 0


if __name__ == "__main__":
    sys.exit(main())
