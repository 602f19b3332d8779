"""Text search orchestration layer.

``TextSearch`` wires the tokenizer, the index maintainer, the query engine and
the pagination overlay around one entity type and one store. Hosts call the
update methods after saving a record, the delete method after destroying one,
and ``text_search`` to find records.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
import logging
from typing import TYPE_CHECKING, Any

from redis_text_search.adapters.finders import Finder
from redis_text_search.adapters.set_store import AbstractSetStore
from redis_text_search.config import TextSearchSettings
from redis_text_search.errors import NoFinderError, StoreFailureError, TextSearchError, UnknownIndexError
from redis_text_search.observability import (
    ERROR_COUNT,
    INDEX_UPDATES,
    SEARCH_LATENCY,
    create_span,
    operation_scope,
    track_latency,
)
from redis_text_search.search.analyzers import build_exclude_list
from redis_text_search.search.maintenance import IndexMaintainer, IndexUpdateResult
from redis_text_search.search.pagination import SearchPage, paginate
from redis_text_search.search.query import QueryEngine, SearchConditions
from redis_text_search.search.reverse_map import ReverseMapStore
from redis_text_search.search.schema import DEFAULT_SPLIT, TextIndexField, TextIndexSchema, default_prefix


if TYPE_CHECKING:
    from opentelemetry.trace import Span


logger = logging.getLogger(__name__)


class TextSearch:
    """Text search over one entity type.

    Example:
        posts = TextSearch.for_entity("BlogPost", store, finder=load_posts)
        posts.text_index("title", "body")
        posts.text_index("tags", exact=True)

        posts.update_text_indexes({"id": 7, "title": "Hello world", "tags": ["python"]})
        posts.text_search("hel")                                   # any field
        posts.text_search({"title": "hel", "tags": "python"})      # every field
        posts.text_search("hel", page=2, per_page=10)              # SearchPage
    """

    def __init__(
        self,
        store: AbstractSetStore,
        schema: TextIndexSchema,
        *,
        settings: TextSearchSettings | None = None,
        finder: Finder | None = None,
    ) -> None:
        """Initialize the engine with explicit collaborators.

        Args:
            store: Key-value set store holding the indexes
            schema: Indexed field declarations and key prefix
            settings: Separators and paging defaults (environment-driven when omitted)
            finder: Default ``finder(ids, options)`` used to hydrate results
        """
        self.settings = settings or TextSearchSettings()
        self.store = store
        self.schema = schema
        self.finder = finder
        self.reverse_map = ReverseMapStore(store, schema, self.settings.reverse_map_delimiter)
        self.maintainer = IndexMaintainer(store, schema, self.reverse_map, separator=self.settings.key_separator)
        self.query_engine = QueryEngine(store, schema, separator=self.settings.key_separator)

    @classmethod
    def for_entity(
        cls,
        entity_name: str,
        store: AbstractSetStore,
        *,
        prefix: str | None = None,
        settings: TextSearchSettings | None = None,
        finder: Finder | None = None,
        exclude_list: Iterable[str] | Mapping[str, bool] | None = None,
        id_attribute: str = "id",
    ) -> TextSearch:
        """Build an engine whose key prefix defaults to the snake_case entity name."""
        settings = settings or TextSearchSettings()
        words = settings.exclude_list if exclude_list is None else exclude_list
        schema = TextIndexSchema(
            prefix=prefix or default_prefix(entity_name),
            exclude_list=build_exclude_list(words),
            id_attribute=id_attribute,
        )
        return cls(store, schema, settings=settings, finder=finder)

    @property
    def prefix(self) -> str:
        return self.schema.prefix

    @property
    def fields(self) -> list[TextIndexField]:
        return list(self.schema)

    def text_index(
        self,
        *names: str,
        minlength: int = 1,
        split: str | None = DEFAULT_SPLIT,
        exact: bool = False,
    ) -> list[TextIndexField]:
        """Declare fields to be indexed.

        Indexes are not maintained automatically: call ``update_text_indexes``
        after a record is saved.
        """
        return self.schema.declare(*names, minlength=minlength, split=split, exact=exact)

    # Writers

    def id_of(self, record: Any) -> Any:
        """Identifier of a record given as a mapping or an object."""
        return self._read(record, self.schema.id_attribute)

    def update_text_indexes(
        self,
        record: Any,
        *fields: str,
        record_id: Any = None,
    ) -> dict[str, IndexUpdateResult]:
        """Update the indexes of ``fields`` (all declared fields when none given).

        A field whose value is too short is reported as ``TOO_SHORT`` and the
        remaining fields are still processed.
        """
        with self._observe("update") as span:
            index_fields = self.schema.resolve(fields)
            span.set_attribute("text_search.fields", len(index_fields))
            record_id = self.id_of(record) if record_id is None else record_id
            return {
                index_field.name: self._update_field(record_id, index_field.name, self._read(record, index_field.name))
                for index_field in index_fields
            }

    def update_field(self, record_id: Any, field_name: str, value: Any) -> IndexUpdateResult:
        """Reconcile one field's indexes with its current ``value``."""
        with self._observe("update", field=field_name):
            return self._update_field(record_id, field_name, value)

    def _update_field(self, record_id: Any, field_name: str, value: Any) -> IndexUpdateResult:
        with create_span("update_field", self.prefix, field=field_name) as span:
            result = self.maintainer.update(record_id, field_name, value)
            span.set_attribute("text_search.result", result.value)
        INDEX_UPDATES.labels(entity=self.prefix, field=field_name, result=result.value).inc()
        return result

    def delete_text_indexes(self, record_id: Any, *fields: str) -> int:
        """Remove ``record_id`` from the indexes of ``fields`` (all when none given)."""
        with self._observe("delete") as span:
            names = [index_field.name for index_field in self.schema.resolve(fields)]
            span.set_attribute("text_search.fields", len(names))
            removed = self.maintainer.delete(record_id, names)
        logger.debug("Removed %s:%s from %d index keys", self.prefix, record_id, removed)
        return removed

    def text_indexes_for(self, record_id: Any, field_name: str) -> list[str]:
        """Index keys the record currently belongs to for one field."""
        with self._observe("inspect", field=field_name):
            if field_name not in self.schema:
                raise UnknownIndexError(field_name, self.prefix)
            return self.reverse_map.read(record_id, field_name)

    def text_indexes(self, record_id: Any) -> list[str]:
        """Index keys the record currently belongs to across all fields."""
        keys: list[str] = []
        with self._observe("inspect"):
            for index_field in self.schema:
                keys.extend(self.reverse_map.read(record_id, index_field.name))
        return keys

    # Readers

    def search_ids(self, *args: Any, fields: Iterable[str] | None = None) -> list[str]:
        """Matching record ids without hydrating them."""
        with self._observe("search") as span:
            return self._search_ids(span, args, fields)

    def text_search(
        self,
        *args: Any,
        fields: Iterable[str] | None = None,
        finder: Finder | None = None,
        page: int | None = None,
        per_page: int | None = None,
        **options: Any,
    ) -> Sequence[Any] | SearchPage:
        """Search and hydrate matching records.

        Args:
            *args: Either one mapping ``{field: value(s)}`` (AND across every
                value) or bare values (OR across ``fields``)
            fields: Fields searched by bare values (default: all declared)
            finder: Overrides the finder declared for the index
            page: Requests a ``SearchPage``; pages start at 1
            per_page: Page size (default ``settings.default_per_page``)
            **options: Passed through to the finder

        Returns:
            Records from the finder, or a ``SearchPage`` when paginating
        """
        with self._observe("search") as span:
            finder = self._resolve_finder(finder)
            ids = self._search_ids(span, args, fields)

            if page is not None or per_page is not None:
                size = self.settings.default_per_page if per_page is None else per_page
                return paginate(ids, finder, page=page, per_page=size, options=options)

            if not ids:
                return []
            return finder(ids, dict(options))

    def _search_ids(self, span: Span, args: Sequence[Any], fields: Iterable[str] | None) -> list[str]:
        conditions = SearchConditions.parse(args, fields)
        form = "mapping" if conditions.is_mapping else "positional"
        span.set_attribute("text_search.form", form)
        with track_latency(SEARCH_LATENCY, entity=self.prefix, form=form):
            ids = self.query_engine.search_ids(conditions)
        span.set_attribute("text_search.matches", len(ids))
        return ids

    def _resolve_finder(self, finder: Finder | None) -> Finder:
        resolved = finder or self.finder
        if resolved is None:
            msg = f"Could not detect how to find {self.prefix} records; pass finder= to TextSearch or text_search()"
            raise NoFinderError(msg)
        return resolved

    @staticmethod
    def _read(record: Any, name: str) -> Any:
        if isinstance(record, Mapping):
            return record[name]
        return getattr(record, name)

    @contextmanager
    def _observe(self, operation: str, **attributes: Any) -> Iterator[Span]:
        """Operation scope and span for one public call; errors are logged and counted once here."""
        with operation_scope(self.prefix, operation), create_span(operation, self.prefix, **attributes) as span:
            try:
                yield span
            except StoreFailureError as exc:
                logger.error("Text search %s failed for %s: %s", operation, self.prefix, exc, exc_info=True)
                self._count_error(operation, exc)
                raise
            except (TextSearchError, ValueError) as exc:
                logger.warning("Text search %s rejected for %s: %s", operation, self.prefix, exc)
                self._count_error(operation, exc)
                raise

    def _count_error(self, operation: str, exc: Exception) -> None:
        ERROR_COUNT.labels(entity=self.prefix, operation=operation, error_type=type(exc).__name__).inc()
