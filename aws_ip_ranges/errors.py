"""Exceptions raised by the IP ranges cache."""


class IPRangesError(Exception):
    """Base class for all errors raised by this package."""


class CacheError(IPRangesError):
    """Raised when the local cache file cannot be used."""


class CacheNotFoundError(CacheError):
    """Raised when the cache file does not exist or is not a regular file."""


class CachePermissionError(CacheError):
    """Raised when the cache file lacks the required read/write permission."""


class CacheParseError(CacheError):
    """Raised when the cache file content is not a well-formed record."""


class CacheIOError(CacheError):
    """Raised for any other filesystem failure reading or writing the cache."""


class RemoteError(IPRangesError):
    """Raised when the remote dataset endpoint cannot be used."""


class NetworkError(RemoteError):
    """Raised on transport failures or HTTP error responses."""


class PayloadError(RemoteError):
    """Raised when the fetched dataset is not the expected JSON document."""


class MissingMetadataError(RemoteError):
    """Raised when a HEAD response has no Last-Modified header."""


class CacheUnavailableError(IPRangesError):
    """Raised by the cache-only read path when no usable record exists."""


class ResolutionError(IPRangesError):
    """Raised when the fallback chain ends without a usable record."""
