# shortener/config.py
# Process configuration, read from environment variables.

import os
import tempfile
from dataclasses import dataclass, field
from typing import Mapping, Optional

from shortener.utils import safe_float, safe_int


def _default_upload_dir() -> str:
    return os.path.join(tempfile.gettempdir(), "shortener_uploads")


@dataclass
class Settings:
    public_base_url: str = ""                  # empty: derive from the request host
    upload_dir: str = field(default_factory=_default_upload_dir)
    default_ttl_seconds: int = 60 * 60
    min_token_length: int = 2
    max_token_length: int = 12
    max_generation_attempts: int = 16
    purge_interval_minutes: int = 5
    reconcile_timeout_seconds: float = 2.0
    max_upload_mb: int = 100
    log_level: str = "INFO"
    log_file: str = ""

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from *env* (defaults to os.environ).

    Unparseable numbers fall back to their defaults; out-of-range numbers
    are clamped."""
    env = os.environ if env is None else env
    defaults = Settings()

    min_len = safe_int(env.get("SHORTENER_MIN_TOKEN_LENGTH"), defaults.min_token_length, 1, 8)
    return Settings(
        public_base_url=env.get("SHORTENER_PUBLIC_URL", "").strip().rstrip("/"),
        upload_dir=env.get("SHORTENER_UPLOAD_DIR") or defaults.upload_dir,
        default_ttl_seconds=safe_int(
            env.get("SHORTENER_DEFAULT_TTL_SECONDS"), defaults.default_ttl_seconds, 1, 30 * 24 * 3600
        ),
        min_token_length=min_len,
        max_token_length=safe_int(
            env.get("SHORTENER_MAX_TOKEN_LENGTH"), defaults.max_token_length, min_len + 1, 64
        ),
        max_generation_attempts=safe_int(
            env.get("SHORTENER_MAX_ATTEMPTS"), defaults.max_generation_attempts, 1, 1000
        ),
        purge_interval_minutes=safe_int(
            env.get("SHORTENER_PURGE_MINUTES"), defaults.purge_interval_minutes, 1, 24 * 60
        ),
        reconcile_timeout_seconds=safe_float(
            env.get("SHORTENER_RECONCILE_TIMEOUT"), defaults.reconcile_timeout_seconds, 0.05, 60.0
        ),
        max_upload_mb=safe_int(env.get("SHORTENER_MAX_UPLOAD_MB"), defaults.max_upload_mb, 1, 4096),
        log_level=(env.get("LOG_LEVEL") or defaults.log_level).upper(),
        log_file=env.get("SHORTENER_LOG_FILE", ""),
    )
