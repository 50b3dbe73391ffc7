"""OpenTelemetry tracing decorators."""

import asyncio
import functools
from collections.abc import Callable
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

F = TypeVar("F", bound=Callable[..., Any])


def _start(span: Span, service_name: str, func: Callable[..., Any], custom_name: bool) -> None:
    span.set_attribute("service.name", service_name)
    if custom_name:
        span.set_attribute("function.name", func.__qualname__)


def _fail(span: Span, error: Exception) -> None:
    span.set_attribute("success", False)
    span.set_attribute("error.type", type(error).__name__)
    span.record_exception(error)
    span.set_status(Status(StatusCode.ERROR, str(error)))


def traced(span_name: str | None = None, service_name: str = "qr-menu-svc") -> Callable[[F], F]:
    """Wrap a function (sync or async) in an OpenTelemetry span.

    Exceptions are recorded on the span and re-raised.

    Args:
        span_name: Span name, defaults to the function name
        service_name: Tracer name and ``service.name`` attribute

    Example:
        @traced("update_menu")
        async def update_menu(self, restaurant_id: str, menu_id: str, draft: MenuDraft) -> MenuAccess:
            ...
    """

    def decorator(func: F) -> F:
        name = span_name or func.__name__
        tracer = trace.get_tracer(service_name)

        if asyncio.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with tracer.start_as_current_span(name, record_exception=False) as span:
                    _start(span, service_name, func, span_name is not None)
                    try:
                        result = await func(*args, **kwargs)
                    except Exception as e:
                        _fail(span, e)
                        raise
                    span.set_attribute("success", True)
                    return result

            return async_wrapper  # type: ignore

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(name, record_exception=False) as span:
                _start(span, service_name, func, span_name is not None)
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    _fail(span, e)
                    raise
                span.set_attribute("success", True)
                return result

        return sync_wrapper  # type: ignore

    return decorator
