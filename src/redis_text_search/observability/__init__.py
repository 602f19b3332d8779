"""Observability module for OpenTelemetry-aligned tracing, metrics, and logging."""

from redis_text_search.observability.context import (
    OperationContext,
    current_operation,
    operation_scope,
    span_scope,
)
from redis_text_search.observability.logging import JsonFormatter, configure_logging, mask_credentials
from redis_text_search.observability.metrics import (
    ERROR_COUNT,
    INDEX_UPDATES,
    SEARCH_LATENCY,
    init_metrics,
    track_latency,
)
from redis_text_search.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "ERROR_COUNT",
    "INDEX_UPDATES",
    "SEARCH_LATENCY",
    "JsonFormatter",
    "OperationContext",
    "configure_logging",
    "create_span",
    "current_operation",
    "get_tracer",
    "init_metrics",
    "init_tracing",
    "mask_credentials",
    "operation_scope",
    "span_scope",
    "track_latency",
]
