"""Tracing, metrics and structured logging for the QR menu service."""

from qr_menu_service.observability.config import configure_logging, setup_observability
from qr_menu_service.observability.decorators import traced

__all__ = ["configure_logging", "setup_observability", "traced"]
