"""Error taxonomy for control-plane operations."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorType(Enum):
    """Classification of error types for better handling"""
    CONFIG_UNAVAILABLE = "config_unavailable"   # load_config failed or not yet loaded
    PERSIST_FAILED = "persist_failed"           # save_config failed
    OPERATION_FAILED = "operation_failed"       # start/stop rejected
    BUSY = "busy"                               # lifecycle transition in flight
    KEY_GENERATION_FAILED = "key_generation_failed"
    PORT_LOCKED = "port_locked"                 # port edit while service is live
    INVALID_CONFIG = "invalid_config"
    CONFIRMATION_REJECTED = "confirmation_rejected"
    NETWORK_ERROR = "network_error"             # Connection, timeout errors
    SERVER_ERROR = "server_error"               # 5xx from the proxy service
    CLIENT_ERROR = "client_error"               # 4xx from the proxy service
    PARSE_ERROR = "parse_error"                 # JSON or response parsing errors
    UNKNOWN_ERROR = "unknown_error"             # Catch-all


def build_error_detail(message: str, error_type: ErrorType, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    detail = {"message": message, "type": error_type.value}
    if extra:
        detail.update(extra)
    return detail


class ControlPlaneError(Exception):
    """Base class for recoverable control-plane failures."""

    error_type: ErrorType = ErrorType.UNKNOWN_ERROR
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> Dict[str, Any]:
        return build_error_detail(self.message, self.error_type)


class BackendError(ControlPlaneError):
    """A proxy service command failed at the transport or command level."""

    status_code = 502

    def __init__(self, command: str, reason: str, error_type: ErrorType = ErrorType.UNKNOWN_ERROR):
        super().__init__(f"{command} failed: {reason}")
        self.command = command
        self.reason = reason
        self.error_type = error_type


class ConfigUnavailable(ControlPlaneError):
    error_type = ErrorType.CONFIG_UNAVAILABLE
    status_code = 503


class PersistFailed(ControlPlaneError):
    error_type = ErrorType.PERSIST_FAILED
    status_code = 502


class OperationFailed(ControlPlaneError):
    error_type = ErrorType.OPERATION_FAILED
    status_code = 502

    def __init__(self, reason: str):
        super().__init__(f"Operation failed: {reason}")
        self.reason = reason

    def to_detail(self) -> Dict[str, Any]:
        return build_error_detail(self.message, self.error_type, {"reason": self.reason})


class Busy(ControlPlaneError):
    error_type = ErrorType.BUSY
    status_code = 409

    def __init__(self, message: str = "A lifecycle transition is already in progress."):
        super().__init__(message)


class KeyGenerationFailed(ControlPlaneError):
    error_type = ErrorType.KEY_GENERATION_FAILED
    status_code = 502


class PortLocked(ControlPlaneError):
    error_type = ErrorType.PORT_LOCKED
    status_code = 409

    def __init__(self, message: str = "The listening port cannot be changed while the proxy service is running."):
        super().__init__(message)


class InvalidConfig(ControlPlaneError):
    error_type = ErrorType.INVALID_CONFIG
    status_code = 422


class ConfirmationRejected(ControlPlaneError):
    error_type = ErrorType.CONFIRMATION_REJECTED
    status_code = 400


def failure_reason(exc: Exception) -> str:
    """Short human readable reason for a failed backend call."""
    if isinstance(exc, BackendError):
        return exc.reason
    return str(exc) or exc.__class__.__name__
