"""
Observability module for tracing.

Provides custom tracing spans for consultation turns, LLM calls and
external voice/enrichment services.
"""

from .tracing import (
    trace_operation,
    set_span_status,
    add_span_attribute,
)

__all__ = [
    "trace_operation",
    "set_span_status",
    "add_span_attribute",
]
