"""Unit tests for logging and tracing helpers."""

import logging

import pytest
from pythonjsonlogger import jsonlogger

from qr_menu_service.observability import configure_logging, traced


@pytest.mark.unit
class TestTraced:
    """Test suite for the traced decorator."""

    def test_sync_function(self) -> None:
        @traced("add")
        def add(a: int, b: int) -> int:
            return a + b

        assert add(2, 3) == 5
        assert add.__name__ == "add"

    @pytest.mark.asyncio
    async def test_async_function(self) -> None:
        @traced()
        async def fetch(value: str) -> str:
            return value.upper()

        assert await fetch("menu") == "MENU"

    def test_sync_exception_is_reraised(self) -> None:
        @traced()
        def explode() -> None:
            raise KeyError("missing")

        with pytest.raises(KeyError):
            explode()

    @pytest.mark.asyncio
    async def test_async_exception_is_reraised(self) -> None:
        @traced("explode")
        async def explode() -> None:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            await explode()


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for JSON logging setup."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root_logger = logging.getLogger()
        handlers = root_logger.handlers[:]
        level = root_logger.level
        yield
        root_logger.handlers = handlers
        root_logger.setLevel(level)

    def test_installs_json_handler(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        configure_logging("DEBUG")

        root_logger = logging.getLogger()
        assert root_logger.level == logging.DEBUG
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, jsonlogger.JsonFormatter)
        assert logging.getLogger("botocore").level == logging.WARNING

    def test_environment_overrides_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "error")

        configure_logging()

        assert logging.getLogger().level == logging.ERROR
