"""Centralized configuration for redis-text-search using Pydantic Settings."""

import re

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_EXCLUDE_LIST: tuple[str, ...] = (
    "a",
    "an",
    "and",
    "as",
    "at",
    "but",
    "by",
    "for",
    "in",
    "into",
    "of",
    "on",
    "onto",
    "to",
    "the",
)

_FORBIDDEN_SEPARATOR = re.compile(r"[\w\s:]")


class TextSearchSettings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Settings are passed explicitly to the engine; nothing reads a process-wide
    connection or default instance.
    """

    model_config = SettingsConfigDict(
        env_prefix="TEXT_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Store connection
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis connection URL")
    socket_timeout: float | None = Field(
        default=5.0,
        gt=0,
        description="Socket timeout in seconds for store calls (None disables the timeout)",
    )

    # Key layout
    key_separator: str = Field(
        default=".",
        min_length=1,
        max_length=1,
        description="Replaces whitespace inside index key fragments",
    )
    reverse_map_delimiter: str = Field(
        default=";",
        min_length=1,
        max_length=1,
        description="Joins the index keys stored in a reverse map entry",
    )

    # Search behaviour
    default_per_page: int = Field(default=30, ge=1, description="Page size used when a page is requested without one")
    exclude_list: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_LIST),
        description="Words never indexed",
    )

    # Observability
    service_name: str = Field(default="redis-text-search", description="service.name reported to OpenTelemetry")
    log_level: str = Field(default="info", description="Root logging level")
    json_logs: bool = Field(default=True, description="Emit structured JSON logs")
    logger_levels: dict[str, str] = Field(
        default_factory=dict,
        description='Per-logger level overrides, e.g. {"redis_text_search.search": "debug"}',
    )

    @model_validator(mode="after")
    def _check_separators(self) -> "TextSearchSettings":
        for name in ("key_separator", "reverse_map_delimiter"):
            value = getattr(self, name)
            if _FORBIDDEN_SEPARATOR.match(value):
                raise ValueError(f"{name} must not be a word character, whitespace or ':' (got {value!r})")
        if self.key_separator == self.reverse_map_delimiter:
            raise ValueError("key_separator and reverse_map_delimiter must differ")
        return self
