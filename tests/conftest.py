"""Shared test fixtures and configuration."""

import os
from pathlib import Path
import sys

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


# Explicit test environment so a developer's TEXT_SEARCH_* variables never leak in
TEST_ENV = {
    "TEXT_SEARCH_REDIS_URL": "redis://localhost:6379/15",
    "TEXT_SEARCH_KEY_SEPARATOR": ".",
    "TEXT_SEARCH_REVERSE_MAP_DELIMITER": ";",
    "TEXT_SEARCH_DEFAULT_PER_PAGE": "30",
    "TEXT_SEARCH_LOG_LEVEL": "info",
    "TEXT_SEARCH_JSON_LOGS": "true",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value

from redis_text_search.adapters.set_store import FakeSetStore
from redis_text_search.config import TextSearchSettings
from redis_text_search.service_layer import TextSearch


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset TEXT_SEARCH_* variables before each test."""
    for key in list(os.environ):
        if key.startswith("TEXT_SEARCH_") and key not in TEST_ENV:
            monkeypatch.delenv(key, raising=False)
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def settings() -> TextSearchSettings:
    return TextSearchSettings(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def store() -> FakeSetStore:
    return FakeSetStore()


class RecordingFinder:
    """Finder that returns ``{"id": ...}`` records and remembers its calls."""

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], dict]] = []

    def __call__(self, ids, options):
        self.calls.append((list(ids), dict(options)))
        return [{"id": record_id} for record_id in ids]


@pytest.fixture
def finder() -> RecordingFinder:
    return RecordingFinder()


@pytest.fixture
def posts(store, settings, finder) -> TextSearch:
    """Post index with prefix title/body fields and exact tags."""
    engine = TextSearch.for_entity("Post", store, settings=settings, finder=finder)
    engine.text_index("title", "body", minlength=2)
    engine.text_index("tags", exact=True)
    return engine
