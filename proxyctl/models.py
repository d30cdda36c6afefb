"""Pydantic models for control-plane state and API payloads."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

DEFAULT_PROXY_PORT = 8045
MIN_PROXY_PORT = 1024
MAX_PROXY_PORT = 65535


def new_api_key() -> str:
    return f"sk-{uuid.uuid4().hex}"


class ProxyDesiredConfig(BaseModel):
    """Desired proxy settings, edited by the user and persisted."""

    model_config = ConfigDict(extra="allow")

    enabled: bool = False
    port: int = Field(default=DEFAULT_PROXY_PORT, ge=MIN_PROXY_PORT, le=MAX_PROXY_PORT)
    api_key: str = Field(default_factory=new_api_key)
    auto_start: bool = False


class ProxyConfigPatch(BaseModel):
    """Partial update to ProxyDesiredConfig; only explicitly set fields apply."""

    model_config = ConfigDict(extra="forbid")

    enabled: Optional[bool] = None
    port: Optional[int] = None
    api_key: Optional[str] = None
    auto_start: Optional[bool] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class ProxySettingsUpdate(BaseModel):
    """User-editable proxy settings; the key only changes through regeneration."""

    model_config = ConfigDict(extra="forbid")

    enabled: Optional[bool] = None
    port: Optional[int] = None
    auto_start: Optional[bool] = None

    def to_patch(self) -> ProxyConfigPatch:
        return ProxyConfigPatch(**self.model_dump(exclude_unset=True))


class ApplicationConfig(BaseModel):
    """
    Persisted application settings.

    Only the ``proxy`` field is interpreted here. Every other field is kept
    as an extra and written back untouched.
    """

    model_config = ConfigDict(extra="allow")

    proxy: ProxyDesiredConfig = Field(default_factory=ProxyDesiredConfig)

    def with_proxy(self, proxy: ProxyDesiredConfig) -> "ApplicationConfig":
        return self.model_copy(update={"proxy": proxy}, deep=True)


class RuntimeStatus(BaseModel):
    """Observed state of the proxy service, recreated on every poll."""

    model_config = ConfigDict(frozen=True)

    running: bool = False
    port: int = 0
    base_url: str = ""
    active_account_count: int = Field(
        default=0,
        validation_alias=AliasChoices("active_account_count", "active_accounts"),
    )


class ModelDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    description: str
    icon: str


class ModelList(BaseModel):
    object: str = "list"
    data: List[ModelDescriptor]


class ChatMessage(BaseModel):
    role: str
    content: Union[str, List[Dict[str, Any]]]


class ChatCompletionRequest(BaseModel):
    model: str
    messages: List[ChatMessage]


class ClientExamples(BaseModel):
    model_id: str
    request_snippet: str
    client_snippet: str


class ConfirmationToken(BaseModel):
    token: str
    expires_at: float


class RegeneratedKey(BaseModel):
    api_key: str


class ProxyStatusResponse(BaseModel):
    status: RuntimeStatus
    lifecycle_state: str
    busy: bool
    config_available: bool
    consecutive_poll_failures: int = 0
