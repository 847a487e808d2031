"""Data model for the persisted IP ranges snapshot."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .config import CACHE_ENTRIES_FIELD, CACHE_TIMESTAMP_FIELD
from .errors import CacheParseError
from .utilities.timestamps import parse_iso_timestamp, utc_timestamp

# One record of the published dataset, e.g.
# {"ip_prefix": "3.5.140.0/22", "region": "ap-northeast-2", "service": "S3", ...}
Entry = dict[str, Any]


@dataclass
class CacheRecord:
    """Snapshot of the dataset together with the instant it was produced."""

    timestamp: Any
    entries: list[Entry] = field(default_factory=list)

    @classmethod
    def create(cls, entries: list[Entry]) -> "CacheRecord":
        """Build a record stamped with the current UTC time."""
        return cls(timestamp=utc_timestamp(), entries=entries)

    @property
    def produced_at(self) -> datetime | None:
        """Parsed timestamp, or None if it is missing or invalid."""
        return parse_iso_timestamp(self.timestamp)

    def to_dict(self) -> dict[str, Any]:
        return {
            CACHE_TIMESTAMP_FIELD: self.timestamp,
            CACHE_ENTRIES_FIELD: self.entries,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "CacheRecord":
        """
        Build a record from a decoded cache document.

        The timestamp is kept as-is; its validity is judged when freshness
        is checked. The entries must be a list of objects.

        Raises:
            CacheParseError: If the document does not have the record shape
        """
        if not isinstance(data, dict):
            raise CacheParseError(
                f"Cache document must be an object, got {type(data).__name__}"
            )

        entries = data.get(CACHE_ENTRIES_FIELD)
        if not isinstance(entries, list):
            raise CacheParseError(f"Cache document has no '{CACHE_ENTRIES_FIELD}' list")
        if not all(isinstance(entry, dict) for entry in entries):
            raise CacheParseError("Cache entries must all be objects")

        return cls(timestamp=data.get(CACHE_TIMESTAMP_FIELD), entries=entries)
