"""
Runtime entry point for the governance query gateway.

This module is invoked via `python -m nouns_gateway.runtime` or the
`nouns-gateway` console script.
"""

import logging
import signal
import sys
from types import FrameType

import uvicorn

from .app_factory import create_app
from .config import get_settings
from .telemetry import setup_tracing


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def setup_signal_handlers(server: uvicorn.Server) -> None:
    """
    Setup graceful shutdown handlers for SIGINT and SIGTERM.

    Args:
        server: The uvicorn server instance to shutdown
    """

    def signal_handler(signum: int, _frame: FrameType | None) -> None:
        logger.info("Received signal %d, initiating graceful shutdown...", signum)
        server.should_exit = True

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def main() -> None:
    """
    Main entry point for the gateway runtime.
    """
    try:
        settings = get_settings()

        # Initialize tracing before the app is built
        tracing_enabled = setup_tracing(settings, service_name="nouns-gateway")

        # Configure logging level from settings
        logging.getLogger().setLevel(settings.log_level)
        logger.setLevel(settings.log_level)

        logger.info("=" * 70)
        logger.info("Nouns Governance Gateway - Startup")
        logger.info("=" * 70)
        logger.info("Database: %s", settings.mongodb_database)
        logger.info("API Base Path: %s", settings.api_base_path or "/")
        logger.info(
            "Page Limit: default=%d max=%d", settings.default_page_limit, settings.max_page_limit
        )
        logger.info("Listen Address: %s:%d", settings.listen_host, settings.listen_port)
        logger.info("Tracing: %s", "enabled" if tracing_enabled else "disabled")
        logger.info("=" * 70)

        app = create_app(settings)

        config = uvicorn.Config(
            app,
            host=settings.listen_host,
            port=settings.listen_port,
            log_level=settings.log_level.lower(),
            access_log=True,
            server_header=False,
            date_header=False,
        )

        server = uvicorn.Server(config)
        setup_signal_handlers(server)

        logger.info(
            "Starting gateway on http://%s:%d", settings.listen_host, settings.listen_port
        )
        server.run()

        logger.info("Gateway shutdown complete")

    except Exception:
        logger.exception("Fatal error during startup")
        sys.exit(1)


if __name__ == "__main__":
    main()
