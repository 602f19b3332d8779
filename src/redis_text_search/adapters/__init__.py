"""Adapters layer - store and finder implementations."""

from .finders import WINDOW_OPTION, Finder, conditions_finder, merge_id_conditions
from .set_store import AbstractSetStore, FakeSetStore, RedisSetStore, StoreBatch, create_redis_store


__all__ = [
    "WINDOW_OPTION",
    "AbstractSetStore",
    "FakeSetStore",
    "Finder",
    "RedisSetStore",
    "StoreBatch",
    "conditions_finder",
    "create_redis_store",
    "merge_id_conditions",
]
