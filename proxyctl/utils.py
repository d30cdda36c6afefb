"""Utility functions used across modules."""

from __future__ import annotations

import json
from typing import Optional

import requests
from requests import Session

from .config import Settings
from .errors import ErrorType


def create_requests_session() -> Session:
    """Create a requests session with retries that bypasses environment proxies."""
    session = requests.Session()
    # The proxy service listens on loopback; never route it through HTTP(S)_PROXY.
    session.trust_env = False
    session.proxies = {"http": None, "https": None}

    adapter = requests.adapters.HTTPAdapter(max_retries=3)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def mask_token(token: Optional[str], visible_chars: int = 4) -> str:
    """Safely mask a token for logging, showing only last N characters"""
    if not token or len(token) <= visible_chars:
        return "***"
    return f"...{token[-visible_chars:]}"


def classify_error(error: Exception) -> ErrorType:
    """Classify a backend call exception into an ErrorType"""
    if isinstance(error, requests.exceptions.HTTPError):
        status_code = error.response.status_code if error.response is not None else 0
        if status_code >= 500:
            return ErrorType.SERVER_ERROR
        elif 400 <= status_code < 500:
            return ErrorType.CLIENT_ERROR
    elif isinstance(error, (requests.exceptions.ConnectionError,
                           requests.exceptions.Timeout)):
        return ErrorType.NETWORK_ERROR
    elif isinstance(error, (json.JSONDecodeError, ValueError)):
        return ErrorType.PARSE_ERROR

    return ErrorType.UNKNOWN_ERROR


def log_error(error_type: ErrorType, message: str, endpoint: Optional[str] = None,
              exception: Optional[Exception] = None) -> None:
    """Centralized error logging with context"""
    endpoint_str = endpoint if endpoint else "N/A"
    exception_str = f" | Exception: {exception}" if exception else ""
    print(f"[ERROR] Type: {error_type.value} | Endpoint: {endpoint_str} | {message}{exception_str}")


def log_debug(settings: Settings, message: str) -> None:
    """Log message only if DEBUG_MODE is enabled."""
    if settings.debug_mode:
        print(f"[DEBUG] {message}")
