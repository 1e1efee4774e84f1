from __future__ import annotations

from typing import Any

from ..http_client import ApiResult
from ..models import Building, StaffRecord
from .base import BaseClient, payload_of


class StaffClient(BaseClient):
    def list_staffs(self) -> ApiResult:
        result = self._send("GET", "/api/all")
        return self._parse_list(result, StaffRecord, payload_of(result).get("staffs"))

    def create_staff(self, admin_id: str, username: str, password: str, building: Building) -> ApiResult:
        body = {"username": username, "password": password, "building": building.model_dump()}
        result = self._send("POST", f"/api/create/{admin_id}", json_body=body)
        return self._parse(result, StaffRecord, payload_of(result).get("staff"))

    def update_staff(self, staff_id: str, updates: dict[str, Any]) -> ApiResult:
        """Returns the raw `staff` object so callers can merge only the fields sent back."""
        result = self._send("PUT", f"/api/update/{staff_id}", json_body=updates)
        if not result.success:
            return result
        staff = payload_of(result).get("staff")
        return ApiResult.ok(staff if isinstance(staff, dict) else {}, result.status_code)

    def delete_staff(self, staff_id: str) -> ApiResult:
        return self._send("DELETE", f"/api/delete/{staff_id}")
