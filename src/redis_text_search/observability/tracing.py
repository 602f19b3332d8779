"""OpenTelemetry spans around index maintenance and searches.

Spans are named ``text_search.<operation>`` and every attribute is namespaced
under ``text_search.``. Without ``init_tracing`` the global no-op provider
is used and spans cost almost nothing.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager, nullcontext
from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.trace import Span, Status, StatusCode

from redis_text_search.observability.context import span_scope


SPAN_NAMESPACE = "text_search"

_tracer_holder: dict[str, trace.Tracer | None] = {"tracer": None}


def init_tracing(service_name: str, span_processors: Iterable[SpanProcessor] = ()) -> TracerProvider:
    """Install an SDK tracer provider once per process and attach ``span_processors`` to it."""
    provider = trace.get_tracer_provider()
    if not isinstance(provider, TracerProvider):
        provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
        trace.set_tracer_provider(provider)
    for processor in span_processors:
        provider.add_span_processor(processor)
    _tracer_holder["tracer"] = provider.get_tracer(__name__)
    return provider


def get_tracer() -> trace.Tracer:
    return _tracer_holder["tracer"] or trace.get_tracer(__name__)


@contextmanager
def create_span(operation: str, entity: str, **attributes: Any) -> Iterator[Span]:
    """Span for one engine operation on ``entity``.

    The span's ids are bound to the operation context for log correlation.
    An exception marks the span as failed and propagates.
    """
    span_attributes = {f"{SPAN_NAMESPACE}.entity": entity}
    span_attributes.update({f"{SPAN_NAMESPACE}.{key}": value for key, value in attributes.items()})

    with get_tracer().start_as_current_span(
        f"{SPAN_NAMESPACE}.{operation}",
        attributes=span_attributes,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        ids = span.get_span_context()
        scope = span_scope(ids.trace_id, ids.span_id) if ids.is_valid else nullcontext()
        with scope:
            try:
                yield span
            except Exception as exc:
                span.set_status(Status(StatusCode.ERROR, str(exc)))
                span.record_exception(exc)
                raise
