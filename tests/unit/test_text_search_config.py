"""Unit tests for TextSearchSettings."""

from __future__ import annotations

from pydantic import ValidationError
import pytest

from redis_text_search.config import DEFAULT_EXCLUDE_LIST, TextSearchSettings


pytestmark = pytest.mark.unit


def _settings(**overrides) -> TextSearchSettings:
    return TextSearchSettings(_env_file=None, **overrides)  # type: ignore[call-arg]


def test_defaults(monkeypatch):
    for key in ("TEXT_SEARCH_REDIS_URL", "TEXT_SEARCH_JSON_LOGS"):
        monkeypatch.delenv(key, raising=False)

    settings = _settings()

    assert settings.redis_url == "redis://localhost:6379/0"
    assert settings.socket_timeout == 5.0
    assert settings.key_separator == "."
    assert settings.reverse_map_delimiter == ";"
    assert settings.default_per_page == 30
    assert settings.exclude_list == list(DEFAULT_EXCLUDE_LIST)
    assert settings.json_logs is True
    assert settings.service_name == "redis-text-search"
    assert settings.logger_levels == {}


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("TEXT_SEARCH_REDIS_URL", "redis://cache:6380/3")
    monkeypatch.setenv("TEXT_SEARCH_DEFAULT_PER_PAGE", "10")
    monkeypatch.setenv("TEXT_SEARCH_KEY_SEPARATOR", "-")
    monkeypatch.setenv("TEXT_SEARCH_EXCLUDE_LIST", '["the", "of"]')

    settings = _settings()

    assert settings.redis_url == "redis://cache:6380/3"
    assert settings.default_per_page == 10
    assert settings.key_separator == "-"
    assert settings.exclude_list == ["the", "of"]


def test_explicit_values_win_over_environment(monkeypatch):
    monkeypatch.setenv("TEXT_SEARCH_DEFAULT_PER_PAGE", "10")

    assert _settings(default_per_page=50).default_per_page == 50


@pytest.mark.parametrize("separator", ["a", "_", " ", ":", "7"])
def test_separator_must_not_collide_with_key_text(separator):
    with pytest.raises(ValidationError, match="key_separator"):
        _settings(key_separator=separator)


def test_delimiter_must_not_collide_with_key_text():
    with pytest.raises(ValidationError, match="reverse_map_delimiter"):
        _settings(reverse_map_delimiter=":")


def test_separator_and_delimiter_must_differ():
    with pytest.raises(ValidationError, match="must differ"):
        _settings(key_separator="|", reverse_map_delimiter="|")


@pytest.mark.parametrize(
    ("field", "value"),
    [("default_per_page", 0), ("socket_timeout", 0), ("key_separator", ""), ("reverse_map_delimiter", ";;")],
)
def test_invalid_values(field, value):
    with pytest.raises(ValidationError):
        _settings(**{field: value})


def test_socket_timeout_can_be_disabled():
    assert _settings(socket_timeout=None).socket_timeout is None
