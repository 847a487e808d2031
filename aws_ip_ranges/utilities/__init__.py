"""Utilities for the AWS IP ranges cache.

``storage`` is not re-exported here: it depends on ``models``, which in turn
uses the timestamp helpers from this package.
"""

from .retry import ServerError, make_request_with_retry
from .timestamps import is_not_after, parse_http_date, parse_iso_timestamp, utc_timestamp

__all__ = [
    "ServerError",
    "make_request_with_retry",
    "is_not_after",
    "parse_http_date",
    "parse_iso_timestamp",
    "utc_timestamp",
]
