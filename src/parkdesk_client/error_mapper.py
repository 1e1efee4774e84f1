from __future__ import annotations

from typing import Mapping

from .exceptions import (
    ApiError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    ServerError,
    UnauthorizedError,
    ValidationError,
)


def error_message(payload: Mapping[str, object] | None, status_code: int) -> str:
    payload = payload or {}
    for key in ("message", "error"):
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return f"Request failed with status {status_code}"


def map_error(status_code: int, payload: Mapping[str, object] | None) -> ApiError:
    payload = payload or {}
    code = str(payload.get("code") or "HTTP_ERROR")
    mapped: type[ApiError]
    if status_code == 401:
        mapped = UnauthorizedError
    elif status_code == 403:
        mapped = ForbiddenError
    elif status_code == 404:
        mapped = NotFoundError
    elif status_code in {400, 422}:
        mapped = ValidationError
    elif status_code == 409:
        mapped = ConflictError
    elif status_code == 429:
        mapped = RateLimitError
    elif status_code >= 500:
        mapped = ServerError
    else:
        mapped = ApiError
    return mapped(
        code=code,
        message=error_message(payload, status_code),
        details=payload.get("details"),
        status_code=status_code,
        raw_payload=dict(payload),
    )
