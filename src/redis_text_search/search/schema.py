"""
Declarations of text-indexed fields and the store key layout.

A ``TextIndexSchema`` belongs to one entity type (posts, users, ...) and owns:
- the key prefix every store key of the entity starts with
- the indexed fields, each a frozen ``TextIndexField``
- the exclusion list applied while tokenizing

Key layout:
- index key: ``<prefix>:<field>:text_index:<fragment>``
- reverse map entry: ``<prefix>:<record id>:<field>_indexes``
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
import re
from typing import Any

from redis_text_search.config import DEFAULT_EXCLUDE_LIST
from redis_text_search.errors import UnknownIndexError


DEFAULT_SPLIT = r"\s+"
TEXT_INDEX_SUFFIX = "text_index"
REVERSE_MAP_SUFFIX = "_indexes"

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")


def default_prefix(entity_name: str) -> str:
    """Derive a key prefix from an entity name: ``Admin::BlogPost`` -> ``blog_post``."""
    name = re.sub(r".*(::|\.)", "", entity_name)
    name = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    name = _CAMEL_BOUNDARY.sub(r"\1_\2", name)
    return name.lower()


def field_key(prefix: str, name: str, record_id: Any) -> str:
    """Return ``<prefix>:<record_id>:<name>``."""
    return f"{prefix}:{record_id}:{name}"


@dataclass(frozen=True)
class TextIndexField:
    """
    One text-indexed field.

    Args:
        name: Field name on the record (e.g., "title", "tags")
        namespace: Index key namespace, ``<prefix>:<name>:text_index``
        minlength: Shortest token (and shortest prefix) that gets indexed
        split: Regex used to break string values into tokens; ``None`` keeps
            the whole value as a single token
        exact: Index whole tokens only instead of their prefix ladder
    """

    name: str
    namespace: str
    minlength: int = 1
    split: str | None = DEFAULT_SPLIT
    exact: bool = False

    def __post_init__(self) -> None:
        if self.minlength < 1:
            msg = f"minlength must be at least 1 for {self.name!r} (got {self.minlength})"
            raise ValueError(msg)

    def index_key(self, fragment: str) -> str:
        """Return the index key for an already normalized fragment."""
        return f"{self.namespace}:{fragment}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "namespace": self.namespace,
            "minlength": self.minlength,
            "split": self.split,
            "exact": self.exact,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TextIndexField:
        return cls(
            name=data["name"],
            namespace=data["namespace"],
            minlength=data.get("minlength", 1),
            split=data.get("split", DEFAULT_SPLIT),
            exact=data.get("exact", False),
        )


@dataclass
class TextIndexSchema:
    """
    Indexed fields of one entity type.

    Example:
        schema = TextIndexSchema(prefix="post")
        schema.declare("title", "body")
        schema.declare("tags", exact=True)
    """

    prefix: str
    exclude_list: frozenset[str] = field(default_factory=lambda: frozenset(DEFAULT_EXCLUDE_LIST))
    id_attribute: str = "id"

    def __post_init__(self) -> None:
        if not self.prefix:
            raise ValueError("A key prefix is required")
        self._fields: dict[str, TextIndexField] = {}

    @classmethod
    def for_entity(cls, entity_name: str, **kwargs: Any) -> TextIndexSchema:
        """Build a schema whose prefix is derived from ``entity_name``."""
        return cls(prefix=default_prefix(entity_name), **kwargs)

    def declare(
        self,
        *names: str,
        minlength: int = 1,
        split: str | None = DEFAULT_SPLIT,
        exact: bool = False,
    ) -> list[TextIndexField]:
        """Declare fields to be indexed; redeclaring a field replaces it."""
        if not names:
            msg = f"Must specify fields to index for {self.prefix}"
            raise ValueError(msg)
        declared = []
        for name in names:
            index_field = TextIndexField(
                name=name,
                namespace=self.namespace_for(name),
                minlength=minlength,
                split=split,
                exact=exact,
            )
            self._fields[name] = index_field
            declared.append(index_field)
        return declared

    def namespace_for(self, name: str) -> str:
        return f"{self.prefix}:{name}:{TEXT_INDEX_SUFFIX}"

    def reverse_map_key(self, record_id: Any, name: str) -> str:
        return field_key(self.prefix, f"{name}{REVERSE_MAP_SUFFIX}", record_id)

    def resolve(self, names: Iterable[str] | None = None) -> list[TextIndexField]:
        """Return the requested fields (all when ``names`` is empty or None)."""
        if not names:
            return list(self._fields.values())
        return [self[name] for name in names]

    def __getitem__(self, name: str) -> TextIndexField:
        try:
            return self._fields[name]
        except KeyError:
            raise UnknownIndexError(name, self.prefix) from None

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[TextIndexField]:
        return iter(self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)

    @property
    def field_names(self) -> list[str]:
        return list(self._fields)

    def to_dict(self) -> dict[str, Any]:
        """Serialize schema to dict."""
        return {
            "prefix": self.prefix,
            "id_attribute": self.id_attribute,
            "exclude_list": sorted(self.exclude_list),
            "fields": [f.to_dict() for f in self._fields.values()],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TextIndexSchema:
        """Deserialize schema from dict."""
        schema = cls(
            prefix=data["prefix"],
            exclude_list=frozenset(data.get("exclude_list", DEFAULT_EXCLUDE_LIST)),
            id_attribute=data.get("id_attribute", "id"),
        )
        for raw in data.get("fields", []):
            index_field = TextIndexField.from_dict(raw)
            schema._fields[index_field.name] = index_field
        return schema
