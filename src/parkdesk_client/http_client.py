from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter

from .config import ClientConfig
from .error_mapper import map_error
from .exceptions import ApiError, TransportError

NETWORK_ERROR_MESSAGE = "Network error: unable to reach the parking server"
INVALID_RESPONSE_MESSAGE = "Invalid response from the parking server"


@dataclass
class ApiResult:
    """Uniform outcome of every client and store operation."""

    success: bool
    data: Any = None
    error: str | None = None
    status_code: int | None = None
    stale: bool = False

    @classmethod
    def ok(cls, data: Any = None, status_code: int | None = None) -> "ApiResult":
        return cls(success=True, data=data, status_code=status_code)

    @classmethod
    def fail(cls, error: str, status_code: int | None = None) -> "ApiResult":
        return cls(success=False, error=error, status_code=status_code)

    @classmethod
    def from_error(cls, error: ApiError) -> "ApiResult":
        return cls(success=False, error=error.message, status_code=error.status_code or None)


@dataclass
class HttpClient:
    config: ClientConfig
    session: requests.Session | None = None

    def __post_init__(self) -> None:
        if self.session is None:
            self.session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=self.config.max_connections,
                pool_maxsize=self.config.max_connections,
            )
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)

    def _build_url(self, path: str) -> str:
        base = self.config.api_base_url.rstrip("/") + "/"
        return urljoin(base, path.lstrip("/"))

    def request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        if self.session is None:
            raise RuntimeError("HTTP session not initialized")
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self.session.request(
                method=method.upper(),
                url=self._build_url(path),
                headers=headers,
                json=json_body,
                params=params,
                timeout=(self.config.connect_timeout_seconds, self.config.read_timeout_seconds),
                verify=self.config.verify_ssl,
            )
        except requests.RequestException as exc:
            raise TransportError(
                code="NETWORK_ERROR",
                message=NETWORK_ERROR_MESSAGE,
                details={"type": type(exc).__name__, "reason": str(exc)},
                status_code=0,
            ) from exc

        payload = self._decode(response)
        if response.ok:
            if payload is None:
                raise TransportError(
                    code="INVALID_RESPONSE",
                    message=INVALID_RESPONSE_MESSAGE,
                    details={"body": response.text[:200]},
                    status_code=response.status_code,
                )
            return payload
        raise map_error(response.status_code, payload or {})

    def send(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> ApiResult:
        try:
            payload = self.request(method, path, token=token, json_body=json_body, params=params)
        except ApiError as error:
            return ApiResult.from_error(error)
        return ApiResult.ok(payload)

    @staticmethod
    def _decode(response: requests.Response) -> dict[str, Any] | None:
        if not response.content:
            return {}
        try:
            parsed = response.json()
        except ValueError:
            return None
        return parsed if isinstance(parsed, dict) else {"data": parsed}
