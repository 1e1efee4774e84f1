from __future__ import annotations

from ..http_client import ApiResult
from ..models import DashboardData, RevenueReport, TodayReport
from .base import BaseClient, payload_of


class ReportsClient(BaseClient):
    def dashboard(self) -> ApiResult:
        result = self._send("GET", "/api/getDashboardData")
        return self._parse(result, DashboardData, payload_of(result).get("data"))

    def today_vehicles(self) -> ApiResult:
        result = self._send("GET", "/api/getTodayVehicle")
        return self._parse(result, TodayReport, payload_of(result))

    def revenue_report(self, staff_id: str) -> ApiResult:
        result = self._send("GET", "/api/getRevenueReport", params={"staffId": staff_id})
        return self._parse(result, RevenueReport, payload_of(result))
