"""Per-record record of which index keys a field currently belongs to."""

from __future__ import annotations

from collections.abc import Sequence
import logging
from typing import Any

from redis_text_search.adapters.set_store import AbstractSetStore, StoreBatch
from redis_text_search.search.schema import TextIndexSchema


logger = logging.getLogger(__name__)

DEFAULT_DELIMITER = ";"


class ReverseMapStore:
    """Reads and writes reverse map entries (``<prefix>:<id>:<field>_indexes``).

    An entry holds the delimiter-joined index keys asserted for one record and
    field. Diffs are computed against it instead of scanning the index sets.
    """

    def __init__(
        self,
        store: AbstractSetStore,
        schema: TextIndexSchema,
        delimiter: str = DEFAULT_DELIMITER,
    ) -> None:
        self.store = store
        self.schema = schema
        self.delimiter = delimiter

    def key_for(self, record_id: Any, field_name: str) -> str:
        return self.schema.reverse_map_key(record_id, field_name)

    def lookup(self, record_id: Any, field_name: str) -> list[str] | None:
        """Index keys asserted for the record, or None when no entry exists."""
        raw = self.store.get(self.key_for(record_id, field_name))
        if raw is None:
            return None
        return raw.split(self.delimiter) if raw else []

    def read(self, record_id: Any, field_name: str) -> list[str]:
        """Index keys currently asserted for the record; empty when no entry exists."""
        return self.lookup(record_id, field_name) or []

    def encode(self, keys: Sequence[str]) -> str:
        return self.delimiter.join(keys)

    def write(self, batch: StoreBatch, record_id: Any, field_name: str, keys: Sequence[str]) -> None:
        batch.set(self.key_for(record_id, field_name), self.encode(keys))

    def remove(self, batch: StoreBatch, record_id: Any, field_name: str) -> None:
        batch.delete(self.key_for(record_id, field_name))
