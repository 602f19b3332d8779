"""Helpers for hydrating matched ids through a host-supplied finder.

A finder is any callable ``finder(ids, options) -> records``. The engine never
guesses how records are loaded; hosts pass a finder when declaring an index or
per search. ``conditions_finder`` adapts the common "find all with conditions"
style of data-access layer, merging an "id in ids" constraint into whichever
conditions shape the caller already uses.

When a search is paginated the ids are already one page, and the page's
position arrives under ``WINDOW_OPTION``. ``conditions_finder`` drops it so
the data layer never applies an offset to a pre-sliced id list.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
import logging
from typing import Any

from redis_text_search.errors import BadConditionsError


logger = logging.getLogger(__name__)

Finder = Callable[[list[str], dict[str, Any]], Sequence[Any]]

WINDOW_OPTION = "window"


def merge_id_conditions(primary_key: str, ids: Sequence[Any], options: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``options`` whose ``conditions`` also require ``primary_key IN ids``.

    Supported ``conditions`` shapes:
        - mapping: ``{"status": "live"}`` -> ``{"status": "live", "id": ids}``
        - sequence: ``["status = ?", "live"]`` -> ``["(status = ?) AND id IN (?)", "live", ids]``
        - string: ``"status = 'live'"`` -> ``["(status = 'live') AND id IN (?)", ids]``
        - absent: ``{"id": ids}``

    Raises:
        BadConditionsError: mapping conditions already constrain the primary key
    """
    merged = dict(options)
    conditions = merged.get("conditions")
    ids = list(ids)

    if conditions is None:
        merged["conditions"] = {primary_key: ids}
    elif isinstance(conditions, Mapping):
        if primary_key in conditions:
            msg = f"Cannot specify primary key ({primary_key}) in conditions to text_search"
            raise BadConditionsError(msg)
        merged["conditions"] = {**conditions, primary_key: ids}
    elif isinstance(conditions, str):
        merged["conditions"] = [f"({conditions}) AND {primary_key} IN (?)", ids]
    elif isinstance(conditions, Sequence) and conditions:
        template, *params = conditions
        merged["conditions"] = [f"({template}) AND {primary_key} IN (?)", *params, ids]
    else:
        msg = f"Unsupported conditions for text_search: {conditions!r}"
        raise BadConditionsError(msg)
    return merged


def conditions_finder(find_all: Callable[..., Sequence[Any]], primary_key: str = "id") -> Finder:
    """Adapt ``find_all(**options)`` into a finder that filters on ``primary_key``."""

    def finder(ids: list[str], options: dict[str, Any]) -> Sequence[Any]:
        options = {key: value for key, value in options.items() if key != WINDOW_OPTION}
        merged = merge_id_conditions(primary_key, ids, options)
        logger.debug("Hydrating %d ids through %s", len(ids), getattr(find_all, "__name__", find_all))
        return find_all(**merged)

    return finder
