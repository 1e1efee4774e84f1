from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ApiError(Exception):
    code: str
    message: str
    details: object | None = None
    status_code: int = 0
    raw_payload: object | None = None

    def __str__(self) -> str:
        return f"[{self.status_code}] {self.code}: {self.message}"


class UnauthorizedError(ApiError):
    """401: credentials rejected or session no longer accepted."""


class ForbiddenError(ApiError):
    """403: authenticated but not allowed."""


class NotFoundError(ApiError):
    pass


class ValidationError(ApiError):
    pass


class ConflictError(ApiError):
    pass


class RateLimitError(ApiError):
    pass


class ServerError(ApiError):
    """5xx server-side failures."""


class TransportError(ApiError):
    """Network failure or an unreadable response body."""


class StorageError(Exception):
    """Session storage backend could not read or write."""
