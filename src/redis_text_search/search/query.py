"""Evaluation of text search conditions with set intersections.

Two query shapes are accepted:

* mapping form, ``{"title": "hel", "tags": ["a", "b"]}``: every value of every
  field becomes one index key and a single intersection runs over all of them,
  so a record must match every value of every field (AND).
* positional form, ``("hel", "wor")`` plus a field list: each field gets its
  own intersection over all values and the per-field results are concatenated
  (OR across fields, AND within a field). Duplicates are kept.

Result order is whatever the store's intersection returns; it is
deterministic for a fixed store state but not sorted.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
import logging
from typing import Any

from redis_text_search.adapters.set_store import AbstractSetStore
from redis_text_search.search.analyzers import DEFAULT_KEY_SEPARATOR, is_sequence_value, query_index_keys
from redis_text_search.search.schema import TextIndexSchema


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchConditions:
    """Normalized search request.

    ``by_field`` is set for the mapping form; ``values`` and ``fields`` for the
    positional form.
    """

    by_field: tuple[tuple[str, Any], ...] = ()
    values: tuple[Any, ...] = ()
    fields: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_mapping(self) -> bool:
        return bool(self.by_field)

    @classmethod
    def parse(cls, args: Sequence[Any], fields: Iterable[str] | None = None) -> SearchConditions:
        """Build conditions from ``text_search`` positional arguments."""
        if not args:
            raise ValueError("Must specify search string(s) to text_search")
        first = args[0]
        if isinstance(first, Mapping):
            if not first:
                raise ValueError("Must specify at least one field to text_search")
            return cls(by_field=tuple(first.items()))
        values: list[Any] = []
        for arg in args:
            if is_sequence_value(arg):
                values.extend(arg)
            else:
                values.append(arg)
        return cls(values=tuple(values), fields=tuple(fields or ()))


class QueryEngine:
    """Turns search conditions into matching record ids."""

    def __init__(
        self,
        store: AbstractSetStore,
        schema: TextIndexSchema,
        *,
        separator: str = DEFAULT_KEY_SEPARATOR,
    ) -> None:
        self.store = store
        self.schema = schema
        self.separator = separator

    def keys_for(self, field_name: str, values: Any) -> list[str]:
        """Index keys a field's query values map to."""
        return query_index_keys(self.schema[field_name], values, self.separator)

    def search_ids(self, conditions: SearchConditions) -> list[str]:
        if conditions.is_mapping:
            return self._search_all(conditions.by_field)
        return self._search_any(conditions.values, conditions.fields)

    def _search_all(self, by_field: Iterable[tuple[str, Any]]) -> list[str]:
        keys: list[str] = []
        for field_name, values in by_field:
            keys.extend(self.keys_for(field_name, values))
        ids = self._intersect(keys)
        logger.debug("AND search over %d keys matched %d ids", len(keys), len(ids))
        return ids

    def _search_any(self, values: Sequence[Any], field_names: Sequence[str]) -> list[str]:
        index_fields = self.schema.resolve(field_names)
        ids: list[str] = []
        for index_field in index_fields:
            keys = self.keys_for(index_field.name, list(values))
            ids.extend(self._intersect(keys))
        logger.debug("OR search across %d fields matched %d ids", len(index_fields), len(ids))
        return ids

    def _intersect(self, keys: Sequence[str]) -> list[str]:
        if not keys:
            return []
        return self.store.sinter(keys)
