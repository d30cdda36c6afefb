"""Application configuration and settings helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class Settings(BaseModel):
    """Centralized control-plane configuration."""

    proxy_backend_url: str = Field(
        default="http://127.0.0.1:8046",
        description="Base URL of the proxy service command interface",
    )
    backend_timeout: float = Field(default=10.0)
    poll_interval: float = Field(default=3.0, description="Seconds between status polls")
    confirmation_ttl: float = Field(default=60.0, description="Seconds a key regeneration token stays valid")
    default_proxy_port: int = Field(default=8045)
    control_api_keys: List[str] = Field(default_factory=list, description="Comma separated CONTROL_API_KEYS value")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8050)
    debug_mode: bool = Field(default=False)

    @field_validator("backend_timeout", "poll_interval", "confirmation_ttl")
    @classmethod
    def _ensure_positive(cls, value: float, info):
        if value <= 0:
            raise ValueError(f"{info.field_name} must be positive")
        return value

    @field_validator("proxy_backend_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache()
def get_settings() -> Settings:
    """Load settings from environment variables."""

    import os
    from dotenv import load_dotenv

    load_dotenv()

    def _split_env_list(raw: Optional[str]) -> List[str]:
        if not raw:
            return []
        return [item.strip() for item in raw.split(",") if item.strip()]

    return Settings(
        proxy_backend_url=os.getenv("PROXY_BACKEND_URL", "http://127.0.0.1:8046"),
        backend_timeout=float(os.getenv("BACKEND_TIMEOUT", "10")),
        poll_interval=float(os.getenv("POLL_INTERVAL", "3")),
        confirmation_ttl=float(os.getenv("CONFIRMATION_TTL", "60")),
        default_proxy_port=int(os.getenv("DEFAULT_PROXY_PORT", "8045")),
        control_api_keys=_split_env_list(os.getenv("CONTROL_API_KEYS")),
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8050")),
        debug_mode=os.getenv("DEBUG_MODE", "false").lower() == "true",
    )
