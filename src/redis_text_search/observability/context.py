"""Operation context shared by log records and spans.

``TextSearch`` opens an operation scope for every update, delete and search,
and ``create_span`` adds the active span's ids inside it. ``JsonFormatter``
reads the current value so each log line says which entity and operation it
belongs to.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass, replace


@dataclass(frozen=True)
class OperationContext:
    entity: str = ""
    operation: str = ""
    trace_id: str = ""
    span_id: str = ""

    def as_log_fields(self) -> dict[str, str]:
        """Non-empty fields, ready to merge into a log entry."""
        return {key: value for key, value in asdict(self).items() if value}


_current: ContextVar[OperationContext] = ContextVar("text_search_operation", default=OperationContext())


def current_operation() -> OperationContext:
    return _current.get()


@contextmanager
def _bound(context: OperationContext) -> Iterator[OperationContext]:
    token = _current.set(context)
    try:
        yield context
    finally:
        _current.reset(token)


def operation_scope(entity: str, operation: str) -> AbstractContextManager[OperationContext]:
    """Bind ``entity`` and ``operation`` until the block exits."""
    return _bound(replace(_current.get(), entity=entity, operation=operation))


def span_scope(trace_id: int, span_id: int) -> AbstractContextManager[OperationContext]:
    """Bind the ids of an OpenTelemetry span, keeping the entity and operation."""
    return _bound(replace(_current.get(), trace_id=format(trace_id, "032x"), span_id=format(span_id, "016x")))
