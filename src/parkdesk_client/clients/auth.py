from __future__ import annotations

from ..http_client import ApiResult
from ..models import LoginResponse, UserRecord
from .base import BaseClient, payload_of


class AuthClient(BaseClient):
    def login(self, username: str, password: str) -> ApiResult:
        result = self.http.send("POST", "/api/loginUser", json_body={"username": username, "password": password})
        return self._parse(result, LoginResponse, payload_of(result))

    def signup(self, username: str, email: str, password: str) -> ApiResult:
        payload = {"username": username, "email": email, "password": password}
        return self.http.send("POST", "/api/register", json_body=payload)

    def update_profile(
        self,
        username: str,
        old_password: str | None,
        new_password: str | None = None,
        avatar: str | None = None,
    ) -> ApiResult:
        body: dict[str, str | None] = {"username": username, "oldPassword": old_password}
        if new_password:
            body["password"] = new_password
        if avatar:
            body["profileImage"] = avatar
        result = self._send("PUT", "/api/updateAdmin/", json_body=body)
        return self._parse(result, UserRecord, payload_of(result).get("admin"))
