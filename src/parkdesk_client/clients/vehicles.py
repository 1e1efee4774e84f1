from __future__ import annotations

from typing import Any

from ..http_client import ApiResult
from ..models import CheckInResult, CheckOutResult, VehicleRecord
from .base import BaseClient, payload_of

CHECK_TYPE_PATHS = {
    "checkins": "/api/checkins",
    "checkouts": "/api/checkouts",
    "all": "/api/vehicleList",
    "vehicleList": "/api/vehicleList",
}


def _vehicle_query(vehicle_type: str, staff_id: str | None) -> dict[str, str]:
    params = {"vehicle": vehicle_type or "all"}
    if staff_id:
        params["staffId"] = staff_id
    return params


class VehiclesClient(BaseClient):
    def list_vehicles(self, check_type: str, vehicle_type: str = "all", staff_id: str | None = None) -> ApiResult:
        path = CHECK_TYPE_PATHS.get(check_type)
        if path is None:
            return ApiResult.fail(f"Unknown vehicle list type: {check_type}")
        result = self._send("GET", path, params=_vehicle_query(vehicle_type, staff_id))
        payload = payload_of(result)
        rows = payload.get("vehicle")
        if rows is None:
            rows = payload.get("vehicles")
        return self._parse_list(result, VehicleRecord, rows)

    def check_in(
        self,
        name: str,
        vehicle_no: str,
        vehicle_type: str,
        mobile: str,
        payment_method: str,
        days: str,
        amount: float,
    ) -> ApiResult:
        body: dict[str, Any] = {
            "name": name,
            "vehicleNo": vehicle_no,
            "vehicleType": vehicle_type,
            "mobile": mobile,
            "paymentMethod": payment_method,
            "days": days,
            "amount": amount,
        }
        result = self._send("POST", "/api/checkin", json_body=body)
        return self._parse(result, CheckInResult, payload_of(result))

    def check_out(self, token_id: str, preview_only: bool = False) -> ApiResult:
        body: dict[str, Any] = {"tokenId": token_id}
        if preview_only:
            body["previewOnly"] = True
        result = self._send("POST", "/api/checkout", json_body=body)
        return self._parse(result, CheckOutResult, payload_of(result))
