"""Host-side startup: apply settings to logging and telemetry, then connect to Redis."""

from __future__ import annotations

import logging

from redis_text_search.adapters.set_store import RedisSetStore, create_redis_store
from redis_text_search.config import TextSearchSettings
from redis_text_search.observability import configure_logging, init_metrics, init_tracing


logger = logging.getLogger(__name__)


def bootstrap(settings: TextSearchSettings | None = None) -> RedisSetStore:
    """Configure the process from ``settings`` and return a Redis-backed store.

    Call once at startup, then build one ``TextSearch`` per entity on the
    returned store. Libraries embedding the engine can skip this and keep
    their own logging setup.
    """
    settings = settings or TextSearchSettings()
    configure_logging(settings.log_level, settings.json_logs, logger_levels=settings.logger_levels)
    init_metrics(settings.service_name)
    init_tracing(settings.service_name)

    store = create_redis_store(settings)
    logger.info("Text search store ready at %s", settings.redis_url)
    return store
