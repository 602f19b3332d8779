"""Incremental maintenance of a record's index membership.

For one record and field the maintainer diffs the freshly generated index keys
against the reverse map entry and submits only the difference. Set additions,
removals and the new reverse map entry travel in a single batch, so readers
never see the entry disagree with the set memberships.

Concurrent updates of the same record (same field or different fields) are
not coordinated: the last batch to land wins.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
import logging
from typing import Any

from redis_text_search.adapters.set_store import AbstractSetStore
from redis_text_search.errors import UnknownIndexError
from redis_text_search.search.analyzers import DEFAULT_KEY_SEPARATOR, generate_index_keys, raw_length
from redis_text_search.search.reverse_map import ReverseMapStore
from redis_text_search.search.schema import TextIndexSchema


logger = logging.getLogger(__name__)


class IndexUpdateResult(str, Enum):
    """Outcome of updating one field's indexes."""

    UPDATED = "updated"
    UNCHANGED = "unchanged"
    TOO_SHORT = "too_short"


@dataclass(frozen=True)
class IndexDiff:
    """Keys to add and remove for one record and field."""

    new_keys: tuple[str, ...]
    to_add: tuple[str, ...]
    to_remove: tuple[str, ...]

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove


def diff_keys(old_keys: Iterable[str], new_keys: Iterable[str]) -> IndexDiff:
    """Set difference in both directions, keeping generation order."""
    old = list(dict.fromkeys(old_keys))
    new = list(dict.fromkeys(new_keys))
    old_set = set(old)
    new_set = set(new)
    return IndexDiff(
        new_keys=tuple(new),
        to_add=tuple(key for key in new if key not in old_set),
        to_remove=tuple(key for key in old if key not in new_set),
    )


class IndexMaintainer:
    """Keeps index sets and reverse map entries in step with record values."""

    def __init__(
        self,
        store: AbstractSetStore,
        schema: TextIndexSchema,
        reverse_map: ReverseMapStore,
        *,
        separator: str = DEFAULT_KEY_SEPARATOR,
    ) -> None:
        self.store = store
        self.schema = schema
        self.reverse_map = reverse_map
        self.separator = separator

    def update(self, record_id: Any, field_name: str, value: Any) -> IndexUpdateResult:
        """Reconcile the indexes of ``field_name`` for ``record_id`` with ``value``.

        The length check looks at the raw value (characters, or elements for
        sequences); a value that is too short leaves existing indexes alone.
        """
        index_field = self.schema[field_name]
        if raw_length(value) < index_field.minlength:
            logger.debug("Skipping %s for %s: value shorter than %d", field_name, record_id, index_field.minlength)
            return IndexUpdateResult.TOO_SHORT

        new_keys = generate_index_keys(index_field, value, self.schema.exclude_list, self.separator)
        old_keys = self.reverse_map.read(record_id, field_name)
        diff = diff_keys(old_keys, new_keys)

        # No change, so no trip to the store
        if diff.is_empty:
            return IndexUpdateResult.UNCHANGED

        logger.debug(
            "[%s:%s] +%d -%d index keys",
            field_name,
            record_id,
            len(diff.to_add),
            len(diff.to_remove),
        )
        member = str(record_id)
        with self.store.batch() as batch:
            for key in diff.to_add:
                batch.sadd(key, member)
            for key in diff.to_remove:
                batch.srem(key, member)
            self.reverse_map.write(batch, record_id, field_name, diff.new_keys)
        return IndexUpdateResult.UPDATED

    def delete(self, record_id: Any, field_names: Iterable[str]) -> int:
        """Drop ``record_id`` from every index it holds for the given fields.

        Returns the number of index keys the record was removed from. Deleting
        twice is harmless: the second pass finds no reverse map entry.
        """
        member = str(record_id)
        removed = 0
        for field_name in field_names:
            if field_name not in self.schema:
                raise UnknownIndexError(field_name, self.schema.prefix)
            keys = self.reverse_map.lookup(record_id, field_name)
            if keys is None:
                continue
            with self.store.batch() as batch:
                for key in keys:
                    batch.srem(key, member)
                self.reverse_map.remove(batch, record_id, field_name)
            removed += len(keys)
        return removed
