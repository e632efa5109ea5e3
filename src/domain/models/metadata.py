"""Typed metadata map for governance entities.

Proposals and sessions carry an opaque key/value bag. Values are restricted
to JSON scalars so the map is hashable into the audit chain and survives a
round trip through persistence unchanged. The schema version is stored with
the map so readers can migrate older shapes.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union

MetadataValue = Union[str, int, float, bool, None]

# Current metadata schema version
METADATA_SCHEMA_VERSION = 1

# Reserved key holding the schema version in serialized form
SCHEMA_VERSION_KEY = "_schema_version"

# Well-known keys
ELIGIBLE_VOTERS_KEY = "eligible_voters"
RESOLUTION_OUTCOME_KEY = "resolution_outcome"


def _freeze(entries: Mapping[str, Any]) -> Mapping[str, MetadataValue]:
    for key, value in entries.items():
        if not isinstance(key, str):
            raise ValueError(f"Metadata keys must be strings, got {key!r}")
        if value is not None and not isinstance(value, (str, int, float, bool)):
            raise ValueError(
                f"Metadata value for {key!r} must be a JSON scalar, "
                f"got {type(value).__name__}"
            )
    return MappingProxyType(dict(entries))


@dataclass(frozen=True)
class MetadataMap(Mapping[str, MetadataValue]):
    """Immutable, versioned key/value metadata.

    Attributes:
        entries: Read-only mapping of metadata keys to scalar values.
        schema_version: Version of the metadata schema.
    """

    entries: Mapping[str, MetadataValue] = field(
        default_factory=lambda: MappingProxyType({})
    )
    schema_version: int = METADATA_SCHEMA_VERSION

    def __post_init__(self) -> None:
        """Validate and freeze entries."""
        object.__setattr__(self, "entries", _freeze(self.entries))

    def __getitem__(self, key: str) -> MetadataValue:
        return self.entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __hash__(self) -> int:
        return hash((self.schema_version, tuple(sorted(self.entries.items()))))

    def get_int(self, key: str) -> int | None:
        """Get an integer value, ignoring booleans and non-integers."""
        value = self.entries.get(key)
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        return value

    def with_entries(self, **changes: MetadataValue) -> MetadataMap:
        """Return a copy with the given keys replaced."""
        merged = dict(self.entries)
        merged.update(changes)
        return MetadataMap(entries=merged, schema_version=self.schema_version)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the schema version embedded."""
        data: dict[str, Any] = dict(self.entries)
        data[SCHEMA_VERSION_KEY] = self.schema_version
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> MetadataMap:
        """Deserialize, accepting maps with or without a schema version."""
        if not data:
            return cls()
        entries = dict(data)
        version = entries.pop(SCHEMA_VERSION_KEY, METADATA_SCHEMA_VERSION)
        return cls(entries=entries, schema_version=int(version))
