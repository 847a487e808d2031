"""Configuration for the AWS IP ranges cache."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Final

IP_RANGES_URL: Final[str] = "https://ip-ranges.amazonaws.com/ip-ranges.json"

CACHE_DIR: Final[Path] = Path.home() / ".cache" / "aws-ip-ranges"
DEFAULT_CACHE_FILE: Final[Path] = CACHE_DIR / "ip-ranges.json"

# HTTP client settings
REQUEST_TIMEOUT: Final[float] = 30.0
RETRY_MAX_ATTEMPTS: Final[int] = 3
RETRY_MIN_WAIT: Final[int] = 1
RETRY_MAX_WAIT: Final[int] = 10

# Field names in the published dataset and in the persisted cache file
REMOTE_ENTRIES_FIELD: Final[str] = "prefixes"
CACHE_TIMESTAMP_FIELD: Final[str] = "timestamp"
CACHE_ENTRIES_FIELD: Final[str] = "entries"


@dataclass(frozen=True)
class CacheConfig:
    """Settings threaded into the resolver and its collaborators."""

    url: str = IP_RANGES_URL
    cache_file: Path = DEFAULT_CACHE_FILE
    debug: bool = False
    timeout: float = REQUEST_TIMEOUT
    max_attempts: int = RETRY_MAX_ATTEMPTS
    min_wait: int = RETRY_MIN_WAIT
    max_wait: int = RETRY_MAX_WAIT


def setup_logging(debug: bool = False) -> None:
    """Configure logging for the application."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
