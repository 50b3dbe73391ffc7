"""Unit tests for main application entry point."""

import os
from unittest.mock import MagicMock, Mock, patch

import pytest

from src.main import create_service_app


@pytest.mark.unit
class TestCreateServiceApp:
    """Tests for create_service_app function."""

    @patch.dict(os.environ, {"LOG_LEVEL": "DEBUG"}, clear=True)
    @patch("src.main.setup_observability")
    @patch("src.main.create_application")
    @patch("src.main.configure_logging")
    def test_configures_logging_and_observability(
        self,
        mock_configure_logging: Mock,
        mock_create_application: Mock,
        mock_setup_observability: Mock,
    ) -> None:
        """Test that logging is configured before the app and observability wraps it."""
        mock_app = MagicMock()
        mock_create_application.return_value = mock_app

        result = create_service_app()

        mock_configure_logging.assert_called_once_with("DEBUG")
        mock_create_application.assert_called_once()
        mock_setup_observability.assert_called_once_with(mock_app)
        assert result is mock_app

    def test_module_app_is_placeholder_under_test(self) -> None:
        """Test that importing under ENVIRONMENT=test builds no real application."""
        import src.main as main_module

        assert not hasattr(main_module.app.state, "menu_service")
