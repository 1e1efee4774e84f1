from __future__ import annotations

from ..http_client import ApiResult
from ..models import PriceTable, PriceUpdateResponse
from .base import BaseClient, payload_of

PRICE_FIELDS = {"daily": "dailyPrices", "monthly": "monthlyPrices"}


class PricingClient(BaseClient):
    def get_prices(self, admin_id: str) -> ApiResult:
        result = self._send("GET", f"/api/getPrices/{admin_id}")
        payload = payload_of(result)
        body = payload.get("data") if isinstance(payload.get("data"), dict) else payload
        return self._parse(result, PriceTable, body)

    def update_prices(self, kind: str, admin_id: str, prices: dict[str, str]) -> ApiResult:
        field = PRICE_FIELDS.get(kind)
        if field is None:
            return ApiResult.fail(f"Unknown price table: {kind}")
        result = self._send("POST", f"/api/updatePrice/{kind}", json_body={"adminId": admin_id, field: prices})
        return self._parse(result, PriceUpdateResponse, payload_of(result))
