"""Main application entry point for the QR menu service.

Run locally with ``python src/main.py`` (developer mode needs no AWS
resources) or serve ``main:app`` with uvicorn.
"""

import logging
import os

from fastapi import FastAPI

from qr_menu_service.bootstrap import create_application
from qr_menu_service.observability import configure_logging, setup_observability

logger = logging.getLogger(__name__)


def create_service_app() -> FastAPI:
    """Configure logging and observability around the application factory."""
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))
    logger.info("Initializing QR menu service...")

    app = create_application()
    setup_observability(app)
    return app


# Only build the real app outside tests so importing this module has no side effects
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_service_app()
else:
    app = FastAPI()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8001"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting development server on {host}:{port}")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
