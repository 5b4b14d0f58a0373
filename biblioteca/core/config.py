"""
Configuration helpers for the Biblioteca admin.

Settings are read once from the environment so that stores, controllers and
routers never touch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

DEFAULT_STORAGE_PATH = Path(__file__).resolve().parents[2] / "data" / "local_storage.json"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    supabase_url: str
    supabase_anon_key: str
    remote_timeout_seconds: float
    local_storage_path: Path
    local_storage_url: str
    local_latency_min_ms: int
    local_latency_max_ms: int
    notification_timeout_ms: int
    log_level: str

    @property
    def remote_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str | None, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _float(value: str | None, default: float = 0.0) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    latency_min = max(0, _int(os.getenv("LOCAL_LATENCY_MIN_MS"), 300))
    latency_max = max(latency_min, _int(os.getenv("LOCAL_LATENCY_MAX_MS"), 500))

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        supabase_url=(os.getenv("SUPABASE_URL") or "").strip().rstrip("/"),
        supabase_anon_key=(os.getenv("SUPABASE_ANON_KEY") or "").strip(),
        remote_timeout_seconds=_float(os.getenv("REMOTE_TIMEOUT_SECONDS"), 10.0),
        local_storage_path=Path(os.getenv("LOCAL_STORAGE_PATH") or DEFAULT_STORAGE_PATH),
        local_storage_url=(os.getenv("LOCAL_STORAGE_URL") or "").strip(),
        local_latency_min_ms=latency_min,
        local_latency_max_ms=latency_max,
        notification_timeout_ms=_int(os.getenv("NOTIFICATION_TIMEOUT_MS"), 3000),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
