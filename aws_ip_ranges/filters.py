"""Filtering of cached entries down to IP prefixes."""

from collections.abc import Iterable, Mapping
from typing import Any

from .models import Entry

# A service name, a field -> value mapping, or None for every entry
Filter = str | Mapping[str, Any] | None

_MISSING = object()


def _strict_equal(a: Any, b: Any) -> bool:
    # True == 1 in Python; JSON booleans and numbers must not match each other
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    return a == b


def matches(entry: Entry, filter: Filter) -> bool:
    """
    Test one entry against a filter.

    A string filter is upper-cased and trimmed, then compared with the
    entry's ``service`` field as stored. A mapping filter requires every key
    to be present in the entry with a strictly equal value.

    Raises:
        TypeError: If the filter is not a str, mapping, or None
    """
    if filter is None:
        return True
    if isinstance(filter, str):
        return entry.get("service") == filter.upper().strip()
    if isinstance(filter, Mapping):
        return all(
            _strict_equal(entry.get(key, _MISSING), expected)
            for key, expected in filter.items()
        )
    raise TypeError(f"Unsupported filter type: {type(filter).__name__}")


def apply_filter(entries: Iterable[Entry], filter: Filter) -> list[str]:
    """
    Return the ``ip_prefix`` of every matching entry, in record order.

    Entries without a string ``ip_prefix`` are skipped.
    """
    if filter is not None and not isinstance(filter, (str, Mapping)):
        raise TypeError(f"Unsupported filter type: {type(filter).__name__}")

    results: list[str] = []
    for entry in entries:
        if not matches(entry, filter):
            continue
        prefix = entry.get("ip_prefix")
        if isinstance(prefix, str):
            results.append(prefix)
    return results
