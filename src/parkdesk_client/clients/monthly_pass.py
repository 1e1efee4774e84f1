from __future__ import annotations

from ..http_client import ApiResult
from ..models import MonthlyPass, MonthlyPassRequest, PassStatus
from .base import BaseClient, payload_of


class MonthlyPassClient(BaseClient):
    def create(self, request: MonthlyPassRequest) -> ApiResult:
        result = self._send("POST", "/api/createMonthlyPass", json_body=request.to_payload())
        payload = payload_of(result)
        parsed = self._parse(result, MonthlyPass, payload.get("pass"))
        if parsed.success:
            parsed.data = {"pass": parsed.data, "qrCode": payload.get("qrCode")}
        return parsed

    def list_by_status(self, status: PassStatus) -> ApiResult:
        # the backend route really is spelled "getMontlyPass"
        result = self._send("GET", f"/api/getMontlyPass/{status.value}")
        payload = payload_of(result)
        rows = payload.get("data")
        if rows is None:
            rows = payload.get("passes")
        return self._parse_list(result, MonthlyPass, rows)

    def extend(self, pass_id: str, months: int) -> ApiResult:
        return self._send("PUT", f"/api/extendPass/{pass_id}", json_body={"months": months})
