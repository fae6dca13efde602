"""
Main entrypoint: registry API server.

Env: REGISTRY_ADMIN (required), REGISTRY_NAME, REGISTRY_SYMBOL, REGISTRY_DB_URL,
API_HOST, API_PORT, LOG_LEVEL, LOG_FORMAT.

Equivalent: uvicorn identity_registry.api_server.server:app --host 0.0.0.0 --port 8000
"""

import sys

# Configure structured JSON logging before other imports that may log
from identity_registry.registry_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Build the app from environment settings and serve it with uvicorn."""
    from identity_registry.config import get_settings
    from identity_registry.core.exceptions import RegistryError

    try:
        settings = get_settings()
        from identity_registry.api_server.server import create_app

        app = create_app(settings)
    except RegistryError as e:
        logger.error("main_config_error", error=e.code, message=e.message)
        sys.exit(1)

    import uvicorn

    logger.info(
        "main_server_starting",
        host=settings.api_host,
        port=settings.api_port,
        persistence=settings.persistence_enabled,
    )
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
