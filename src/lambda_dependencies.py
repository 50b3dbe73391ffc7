"""Cached application for the Lambda entry point.

The app is built once per container and reused across warm invocations.
"""

import logging
import os

from fastapi import FastAPI

from qr_menu_service.bootstrap import create_application
from qr_menu_service.observability import configure_logging, setup_observability

logger = logging.getLogger(__name__)

_fastapi_app: FastAPI | None = None


def get_fastapi_app() -> FastAPI:
    """Create or retrieve the cached FastAPI application."""
    global _fastapi_app

    if _fastapi_app is not None:
        return _fastapi_app

    _fastapi_app = create_application()
    setup_observability(_fastapi_app)

    logger.info("FastAPI application initialized")
    return _fastapi_app


def reset_cache() -> None:
    global _fastapi_app
    _fastapi_app = None


def initialize_lambda_environment() -> None:
    """Configure logging; called once per cold start."""
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))
    logger.info("Lambda environment initialized")
