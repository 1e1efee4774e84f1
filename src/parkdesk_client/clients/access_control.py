from __future__ import annotations

from ..http_client import ApiResult
from ..models import PermissionsResponse
from .base import BaseClient, payload_of


class AccessControlClient(BaseClient):
    def set_permissions(self, staff_id: str, permissions: list[str]) -> ApiResult:
        body = {"staffId": staff_id, "permissions": permissions}
        result = self._send("POST", f"/api/setPermissions/{staff_id}", json_body=body)
        staff = payload_of(result).get("staff")
        return self._parse(result, PermissionsResponse, staff if isinstance(staff, dict) else {})

    def get_permissions(self, staff_id: str) -> ApiResult:
        result = self._send("POST", "/api/staff/getPermissions", json_body={"staffId": staff_id})
        return self._parse(result, PermissionsResponse, payload_of(result))
