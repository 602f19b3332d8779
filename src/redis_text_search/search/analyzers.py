"""Tokenizer that turns field values into index keys.

The design mirrors a composable tokenizer/filter pipeline: a value is split
into tokens, filters drop what should not be indexed, and an emitter turns the
surviving tokens into index keys (whole tokens in exact mode, the prefix
ladder otherwise). Every function here is pure; caller-owned values are never
modified.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence, Set
import re
from typing import Any

from redis_text_search.search.schema import TextIndexField


DEFAULT_KEY_SEPARATOR = "."

_PUNCTUATION = re.compile(r"[^\w\s]+", re.UNICODE)
_WHITESPACE = re.compile(r"\s+", re.UNICODE)


def normalize_text(value: str) -> str:
    """Lowercase, strip punctuation and collapse whitespace runs to one space."""
    stripped = _PUNCTUATION.sub("", value.lower())
    return _WHITESPACE.sub(" ", stripped).strip()


def to_fragment(text: str, separator: str = DEFAULT_KEY_SEPARATOR) -> str:
    """Replace whitespace with a separator the store's command syntax accepts."""
    return _WHITESPACE.sub(separator, text)


def is_sequence_value(value: Any) -> bool:
    """Return True for tag-like values where every element is a token."""
    if isinstance(value, (str, bytes)):
        return False
    return isinstance(value, (Sequence, Set))


def raw_length(value: Any) -> int:
    """Length of a field value before tokenization (element count for sequences)."""
    if value is None:
        return 0
    if isinstance(value, str) or is_sequence_value(value):
        return len(value)
    return len(str(value))


def build_exclude_list(words: Iterable[str] | Mapping[str, bool] | None) -> frozenset[str]:
    """Normalize an exclusion list given as words or as a ``word -> bool`` mapping."""
    if words is None:
        return frozenset()
    if isinstance(words, Mapping):
        words = [word for word, excluded in words.items() if excluded]
    return frozenset(normalize_text(word) for word in words)


class ValueTokenizer:
    """Splits a raw field value into normalized tokens."""

    def __init__(self, split: str | None) -> None:
        self.pattern = re.compile(split, re.UNICODE) if split else None

    def __call__(self, value: Any) -> Iterator[str]:
        if value is None:
            return
        if is_sequence_value(value):
            pieces: Iterable[Any] = value
        elif self.pattern is None:
            pieces = [value]
        else:
            pieces = self.pattern.split(str(value))
        for piece in pieces:
            token = normalize_text(str(piece))
            if token:
                yield token


class MinLengthFilter:
    """Drops tokens shorter than the field's minimum length."""

    def __init__(self, minlength: int) -> None:
        self.minlength = minlength

    def __call__(self, tokens: Iterable[str]) -> Iterator[str]:
        for token in tokens:
            if len(token) >= self.minlength:
                yield token


class StopFilter:
    """Removes excluded words from the stream."""

    def __init__(self, exclude_list: Iterable[str]) -> None:
        self.exclude_list = {word.lower() for word in exclude_list}

    def __call__(self, tokens: Iterable[str]) -> Iterator[str]:
        for token in tokens:
            if token not in self.exclude_list:
                yield token


def exact_fragments(token: str, separator: str = DEFAULT_KEY_SEPARATOR) -> list[str]:
    """Whole-token fragment used by exact fields."""
    return [to_fragment(token, separator)]


def prefix_ladder(token: str, minlength: int, separator: str = DEFAULT_KEY_SEPARATOR) -> list[str]:
    """Every prefix of ``token`` from ``minlength`` characters up to the full token.

    >>> prefix_ladder("hello", 2)
    ['he', 'hel', 'hell', 'hello']
    """
    return [to_fragment(token[:length], separator) for length in range(minlength, len(token) + 1)]


def analyze_tokens(
    index_field: TextIndexField,
    value: Any,
    exclude_list: Iterable[str] = (),
) -> list[str]:
    """Return the surviving tokens of ``value`` for ``index_field``."""
    stream: Iterable[str] = ValueTokenizer(index_field.split)(value)
    for token_filter in (MinLengthFilter(index_field.minlength), StopFilter(exclude_list)):
        stream = token_filter(stream)
    return list(stream)


def generate_index_keys(
    index_field: TextIndexField,
    value: Any,
    exclude_list: Iterable[str] = (),
    separator: str = DEFAULT_KEY_SEPARATOR,
) -> list[str]:
    """Turn a field value into its index keys, de-duplicated in generation order."""
    keys: dict[str, None] = {}
    for token in analyze_tokens(index_field, value, exclude_list):
        if index_field.exact:
            fragments = exact_fragments(token, separator)
        else:
            fragments = prefix_ladder(token, index_field.minlength, separator)
        for fragment in fragments:
            keys.setdefault(index_field.index_key(fragment), None)
    return list(keys)


def query_index_keys(
    index_field: TextIndexField,
    values: Any,
    separator: str = DEFAULT_KEY_SEPARATOR,
) -> list[str]:
    """One index key per query value, always using exact normalization.

    A query term is matched against whichever ladder produced it, so prefix
    fields are queried the same way as exact ones.
    """
    if values is None:
        return []
    items = values if is_sequence_value(values) else [values]
    return [index_field.index_key(to_fragment(normalize_text(str(item)), separator)) for item in items]
