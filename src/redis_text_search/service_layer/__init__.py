"""Service layer - orchestration of index maintenance and search."""

from redis_text_search.service_layer.startup import bootstrap
from redis_text_search.service_layer.text_search_service import TextSearch


__all__ = ["TextSearch", "bootstrap"]
