"""
OpenTelemetry tracing helpers for MediVoice.

Provides custom tracing spans for consultation turns and external calls.
Without a configured SDK the API falls back to non-recording spans.
"""
import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

logger = logging.getLogger(__name__)

tracer = trace.get_tracer("medivoice")


@contextmanager
def trace_operation(operation_name: str, attributes: Optional[dict] = None) -> Iterator[Span]:
    """
    Context manager for creating custom tracing spans.

    Example:
        with trace_operation("voice_turn", {"turn.stage": "ongoing"}) as span:
            ...
    """
    with tracer.start_as_current_span(operation_name) as span:
        if attributes:
            for key, value in attributes.items():
                span.set_attribute(key, str(value))
        yield span


def set_span_status(span: Optional[Span], success: bool, error_message: Optional[str] = None) -> None:
    """Set the status of a tracing span."""
    if span is None:
        return
    try:
        if success:
            span.set_status(Status(StatusCode.OK))
        else:
            span.set_status(Status(StatusCode.ERROR, error_message or "Operation failed"))
    except Exception as e:
        logger.warning(f"Failed to set span status: {e}")


def add_span_attribute(span: Optional[Span], key: str, value: Any) -> None:
    """Add an attribute to a tracing span (value is stringified)."""
    if span is None:
        return
    try:
        span.set_attribute(key, str(value))
    except Exception as e:
        logger.warning(f"Failed to add span attribute {key}: {e}")
