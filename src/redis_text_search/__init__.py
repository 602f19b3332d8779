"""Partial-word text search over any record store, indexed in Redis sets."""

from redis_text_search.adapters.finders import conditions_finder, merge_id_conditions
from redis_text_search.adapters.set_store import AbstractSetStore, FakeSetStore, RedisSetStore, create_redis_store
from redis_text_search.config import DEFAULT_EXCLUDE_LIST, TextSearchSettings
from redis_text_search.errors import (
    BadConditionsError,
    NoFinderError,
    StoreFailureError,
    TextSearchError,
    UnknownIndexError,
)
from redis_text_search.search.maintenance import IndexUpdateResult
from redis_text_search.search.pagination import SearchPage
from redis_text_search.search.schema import TextIndexField, TextIndexSchema
from redis_text_search.service_layer import TextSearch, bootstrap


__all__ = [
    "DEFAULT_EXCLUDE_LIST",
    "AbstractSetStore",
    "BadConditionsError",
    "FakeSetStore",
    "IndexUpdateResult",
    "NoFinderError",
    "RedisSetStore",
    "SearchPage",
    "StoreFailureError",
    "TextIndexField",
    "TextIndexSchema",
    "TextSearch",
    "TextSearchError",
    "TextSearchSettings",
    "UnknownIndexError",
    "bootstrap",
    "conditions_finder",
    "create_redis_store",
    "merge_id_conditions",
]
