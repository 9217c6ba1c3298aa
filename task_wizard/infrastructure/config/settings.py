from dataclasses import dataclass
from typing import List, Optional
import os


PLACEHOLDER_VALUES = {"your_kv_url_here", "your_kv_rest_api_url_here"}


def _env_str(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _configured(value: str) -> bool:
    return bool(value) and value not in PLACEHOLDER_VALUES


@dataclass(frozen=True)
class ServerSettings:
    kv_url: str
    kv_rest_api_url: str
    session_ttl_seconds: Optional[int]
    log_level: str
    log_format: str
    service_name: str
    cors_allow_origins: List[str]
    version: str

    @property
    def use_remote_store(self) -> bool:
        """Remote KV is used only when both URLs carry real values"""
        return _configured(self.kv_url) and _configured(self.kv_rest_api_url)


def get_settings() -> ServerSettings:
    cors_raw = _env_str("CORS_ALLOW_ORIGINS")
    ttl = _env_int("SESSION_TTL_SECONDS", 0)
    return ServerSettings(
        kv_url=_env_str("KV_URL"),
        kv_rest_api_url=_env_str("KV_REST_API_URL"),
        session_ttl_seconds=ttl if ttl > 0 else None,
        log_level=_env_str("LOG_LEVEL", "INFO") or "INFO",
        log_format=_env_str("LOG_FORMAT", "json") or "json",
        service_name=_env_str("SERVICE_NAME", "task-wizard") or "task-wizard",
        cors_allow_origins=[origin.strip() for origin in cors_raw.split(",") if origin.strip()],
        version=_env_str("TASK_WIZARD_VERSION", "0.1.0") or "0.1.0",
    )
