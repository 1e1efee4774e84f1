from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError

from ..http_client import ApiResult, HttpClient

M = TypeVar("M", bound=BaseModel)

UNEXPECTED_RESPONSE_MESSAGE = "Unexpected response from the parking server"


@dataclass
class BaseClient:
    http: HttpClient
    access_token: str | None = None

    def _send(self, method: str, path: str, **kwargs: Any) -> ApiResult:
        return self.http.send(method, path, token=self.access_token, **kwargs)

    @staticmethod
    def _parse(result: ApiResult, model: type[M], payload: Any) -> ApiResult:
        if not result.success:
            return result
        try:
            parsed = model.model_validate(payload if payload is not None else {})
        except ModelValidationError:
            return ApiResult.fail(UNEXPECTED_RESPONSE_MESSAGE, result.status_code)
        return ApiResult.ok(parsed, result.status_code)

    @staticmethod
    def _parse_list(result: ApiResult, model: type[M], rows: Any) -> ApiResult:
        if not result.success:
            return result
        if not isinstance(rows, list):
            rows = []
        try:
            parsed = [model.model_validate(row) for row in rows]
        except ModelValidationError:
            return ApiResult.fail(UNEXPECTED_RESPONSE_MESSAGE, result.status_code)
        return ApiResult.ok(parsed, result.status_code)


def payload_of(result: ApiResult) -> dict[str, Any]:
    return result.data if isinstance(result.data, dict) else {}
