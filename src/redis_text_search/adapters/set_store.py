"""Key-value set store abstractions and implementations.

The engine talks to its index backend through ``AbstractSetStore`` so the
Redis client stays at the edge. ``RedisSetStore`` wraps a redis-py client and
submits batches as MULTI/EXEC pipelines; ``FakeSetStore`` keeps everything in
memory for tests and local experiments.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from contextlib import AbstractContextManager, contextmanager
from typing import TYPE_CHECKING, Any

import redis

from redis_text_search.errors import StoreFailureError


if TYPE_CHECKING:
    from redis_text_search.config import TextSearchSettings


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class StoreBatch(ABC):
    """Store operations queued for atomic submission."""

    @abstractmethod
    def sadd(self, key: str, member: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def srem(self, key: str, member: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError

    @property
    @abstractmethod
    def size(self) -> int:
        """Number of queued operations."""


class AbstractSetStore(ABC):
    """Abstract key-value set store used as the only index backend."""

    @abstractmethod
    def sadd(self, key: str, member: str) -> None:
        """Add ``member`` to the set at ``key``."""
        raise NotImplementedError

    @abstractmethod
    def srem(self, key: str, member: str) -> None:
        """Remove ``member`` from the set at ``key``."""
        raise NotImplementedError

    @abstractmethod
    def sinter(self, keys: Sequence[str]) -> list[str]:
        """Return the members present in every set listed in ``keys``."""
        raise NotImplementedError

    @abstractmethod
    def get(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def batch(self) -> AbstractContextManager[StoreBatch]:
        """Context manager queuing operations that are applied together on exit.

        The batch is discarded when the body raises. Store failures while
        applying surface as ``StoreFailureError`` with nothing visible to readers.
        """
        raise NotImplementedError


class _RedisBatch(StoreBatch):
    def __init__(self, pipeline: redis.client.Pipeline) -> None:
        self._pipeline = pipeline
        self._size = 0

    def sadd(self, key: str, member: str) -> None:
        self._pipeline.sadd(key, member)
        self._size += 1

    def srem(self, key: str, member: str) -> None:
        self._pipeline.srem(key, member)
        self._size += 1

    def set(self, key: str, value: str) -> None:
        self._pipeline.set(key, value)
        self._size += 1

    def delete(self, key: str) -> None:
        self._pipeline.delete(key)
        self._size += 1

    @property
    def size(self) -> int:
        return self._size


class RedisSetStore(AbstractSetStore):
    """Set store backed by a redis-py client."""

    def __init__(self, client: redis.Redis) -> None:
        self.client = client

    def _call(self, operation: str, func, *args: Any) -> Any:
        try:
            return func(*args)
        except redis.RedisError as exc:
            raise StoreFailureError(f"Redis {operation} failed: {exc}") from exc

    def sadd(self, key: str, member: str) -> None:
        self._call("SADD", self.client.sadd, key, member)

    def srem(self, key: str, member: str) -> None:
        self._call("SREM", self.client.srem, key, member)

    def sinter(self, keys: Sequence[str]) -> list[str]:
        if not keys:
            return []
        members = self._call("SINTER", self.client.sinter, list(keys))
        return [_text(member) for member in members]

    def get(self, key: str) -> str | None:
        value = self._call("GET", self.client.get, key)
        return None if value is None else _text(value)

    def set(self, key: str, value: str) -> None:
        self._call("SET", self.client.set, key, value)

    def delete(self, key: str) -> None:
        self._call("DEL", self.client.delete, key)

    @contextmanager
    def batch(self) -> Iterator[StoreBatch]:
        pipeline = self.client.pipeline(transaction=True)
        queued = _RedisBatch(pipeline)
        try:
            yield queued
            if queued.size:
                pipeline.execute()
        except redis.RedisError as exc:
            raise StoreFailureError(f"Redis batch of {queued.size} operations failed: {exc}") from exc
        finally:
            pipeline.reset()


def create_redis_store(settings: TextSearchSettings) -> RedisSetStore:
    """Build a Redis-backed store from explicit settings."""
    client = redis.Redis.from_url(
        settings.redis_url,
        decode_responses=True,
        socket_timeout=settings.socket_timeout,
    )
    return RedisSetStore(client)


class _FakeBatch(StoreBatch):
    def __init__(self) -> None:
        self.operations: list[tuple[str, str, str | None]] = []

    def sadd(self, key: str, member: str) -> None:
        self.operations.append(("sadd", key, member))

    def srem(self, key: str, member: str) -> None:
        self.operations.append(("srem", key, member))

    def set(self, key: str, value: str) -> None:
        self.operations.append(("set", key, value))

    def delete(self, key: str) -> None:
        self.operations.append(("delete", key, None))

    @property
    def size(self) -> int:
        return len(self.operations)


class FakeSetStore(AbstractSetStore):
    """In-memory store for testing.

    Every mutating call is appended to ``mutations`` and every read to
    ``reads``, so tests can assert on round trips. Setting ``fail_with`` makes
    the next batch raise it before applying anything.
    """

    def __init__(self) -> None:
        self.sets: dict[str, dict[str, None]] = {}
        self.strings: dict[str, str] = {}
        self.mutations: list[tuple[str, str, str | None]] = []
        self.reads: list[tuple[str, tuple[str, ...]]] = []
        self.batches = 0
        self.fail_with: Exception | None = None

    def _apply(self, operation: str, key: str, value: str | None) -> None:
        self.mutations.append((operation, key, value))
        if operation == "sadd":
            self.sets.setdefault(key, {})[str(value)] = None
        elif operation == "srem":
            self.sets.get(key, {}).pop(str(value), None)
        elif operation == "set":
            self.strings[key] = str(value)
        elif operation == "delete":
            self.sets.pop(key, None)
            self.strings.pop(key, None)

    def sadd(self, key: str, member: str) -> None:
        self._apply("sadd", key, member)

    def srem(self, key: str, member: str) -> None:
        self._apply("srem", key, member)

    def sinter(self, keys: Sequence[str]) -> list[str]:
        self.reads.append(("sinter", tuple(keys)))
        if not keys:
            return []
        first, *rest = [self.sets.get(key, {}) for key in keys]
        return [member for member in first if all(member in other for other in rest)]

    def get(self, key: str) -> str | None:
        self.reads.append(("get", (key,)))
        return self.strings.get(key)

    def set(self, key: str, value: str) -> None:
        self._apply("set", key, value)

    def delete(self, key: str) -> None:
        self._apply("delete", key, None)

    @contextmanager
    def batch(self) -> Iterator[StoreBatch]:
        queued = _FakeBatch()
        yield queued
        if self.fail_with is not None:
            failure, self.fail_with = self.fail_with, None
            raise failure
        self.batches += 1
        for operation, key, value in queued.operations:
            self._apply(operation, key, value)

    def members(self, key: str) -> set[str]:
        """Current members of the set at ``key`` (test helper)."""
        return set(self.sets.get(key, {}))

    def keys_containing(self, member: str) -> set[str]:
        """Every non-empty set key that holds ``member`` (test helper)."""
        return {key for key, members in self.sets.items() if member in members}
