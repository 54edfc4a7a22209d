"""Runtime configuration for finsync."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from finsync.domain.csv_format import DEFAULT_PREVIEW_ROWS
from finsync.domain.errors import ValidationError
from finsync.remote.http_store import (
    DEFAULT_API_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    normalize_base_url,
)

DEFAULT_SYNC_INTERVAL_SECONDS = 30


@dataclass(frozen=True)
class SyncConfig:
    """Sync and import settings.

    ``max_attempts`` of None keeps failing queue operations forever; a number
    drops an operation once it has failed that many times.
    """

    api_base_url: str = DEFAULT_API_BASE_URL
    sync_interval_seconds: int = DEFAULT_SYNC_INTERVAL_SECONDS
    max_attempts: Optional[int] = None
    preview_rows: int = DEFAULT_PREVIEW_ROWS
    request_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SyncConfig":
        """Build configuration from FINSYNC_* environment variables.

        Raises:
            ValidationError: If a numeric variable is not a positive integer
        """
        env = os.environ if environ is None else environ
        return cls(
            api_base_url=normalize_base_url(env.get("FINSYNC_API_URL") or DEFAULT_API_BASE_URL),
            sync_interval_seconds=_positive_int(
                env, "FINSYNC_SYNC_INTERVAL", DEFAULT_SYNC_INTERVAL_SECONDS
            ),
            max_attempts=_positive_int(env, "FINSYNC_MAX_ATTEMPTS", None),
            preview_rows=_positive_int(env, "FINSYNC_PREVIEW_ROWS", DEFAULT_PREVIEW_ROWS),
        )


def _positive_int(env: Mapping[str, str], name: str, default: Optional[int]) -> Optional[int]:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got '{raw}'")
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    return value
