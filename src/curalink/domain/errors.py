"""Domain error taxonomy, converted to ``{"error": ...}`` JSON at the API boundary."""

from __future__ import annotations

from typing import Any, Dict, Optional


class CuraLinkError(Exception):
    status_code: int = 500

    def __init__(self, message: str, *, extra: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra: Dict[str, Any] = dict(extra or {})

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message}
        payload.update(self.extra)
        return payload


class Unauthenticated(CuraLinkError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized", **kwargs):
        super().__init__(message, **kwargs)


class Forbidden(CuraLinkError):
    status_code = 403


class InvalidRequest(CuraLinkError):
    status_code = 400


class Conflict(CuraLinkError):
    """Duplicate or state-violating write; reported as 400 with the current status echoed."""

    status_code = 400


class NotFound(CuraLinkError):
    status_code = 404


class StorageFailure(CuraLinkError):
    """The store is unavailable. The message sent to clients is always generic."""

    status_code = 500

    def __init__(self, message: str = "Internal server error", **kwargs):
        super().__init__(message, **kwargs)
