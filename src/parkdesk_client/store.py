from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from contextlib import contextmanager
from datetime import date
from typing import Any, Iterator, TypeVar

from .access_gate import AccessGate, validate_permissions
from .auth_controller import AuthController
from .clients import (
    AccessControlClient,
    MonthlyPassClient,
    PricingClient,
    ReportsClient,
    StaffClient,
    VehiclesClient,
)
from .clients.base import BaseClient
from .http_client import ApiResult, HttpClient
from .logger import get_logger, log_action
from .models import (
    VEHICLE_TYPES,
    Building,
    DashboardData,
    MonthlyPassRequest,
    PassStatus,
    PriceTable,
    StaffRecord,
    VehicleRecord,
    entry_date,
)
from .session_storage import PRICES_KEY, TOKEN_KEY, SessionStore
from .state import AppState, SlotSequencer

C = TypeVar("C", bound=BaseClient)

NO_TOKEN_MESSAGE = "No token found"

logger = get_logger("parkdesk_client.store")


def filter_vehicles(
    records: Iterable[VehicleRecord],
    search: str = "",
    on_date: date | None = None,
) -> list[VehicleRecord]:
    """Client-side search over a cached vehicle list: number or name substring, plus entry date."""
    needle = search.strip().lower()
    matches: list[VehicleRecord] = []
    for record in records:
        if needle and needle not in record.vehicle_no.lower() and needle not in record.name.lower():
            continue
        if on_date is not None and entry_date(record) != on_date:
            continue
        matches.append(record)
    return matches


class ParkingStore:
    """Application state plus every fetch/mutate operation against the parking backend."""

    def __init__(
        self,
        http: HttpClient,
        session: SessionStore,
        state: AppState | None = None,
        on_session_invalid: Callable[[str], None] | None = None,
    ) -> None:
        self.http = http
        self.session = session
        self.state = state or AppState()
        self.sequencer = SlotSequencer()
        self.auth = AuthController(self, on_session_invalid=on_session_invalid)
        self.gate = AccessGate(self.state)

    # plumbing

    def _token(self, token: str | None = None) -> str | None:
        return token or self.state.token or self.session.read(TOKEN_KEY)

    def _client(self, client_type: type[C], token: str | None = None) -> C:
        return client_type(http=self.http, access_token=token)

    @contextmanager
    def _loading(self, group: str) -> Iterator[None]:
        self.state.loading.add(group)
        try:
            yield
        finally:
            self.state.loading.discard(group)

    def _apply(self, slot: str, ticket: int, result: ApiResult, apply: Callable[[], None]) -> ApiResult:
        if self.sequencer.is_current(slot, ticket):
            apply()
        else:
            result.stale = True
            log_action(logger, "store", "apply", self.state.role, "stale", logging.DEBUG, slot=slot)
        return result

    def _log(self, module: str, action: str, result: ApiResult, **context: Any) -> ApiResult:
        if result.success:
            log_action(logger, module, action, self.state.role, "success", **context)
        else:
            log_action(
                logger,
                module,
                action,
                self.state.role,
                "error",
                logging.WARNING,
                error=result.error,
                status_code=result.status_code,
                **context,
            )
        return result

    # staff roster

    def get_all_staffs(self) -> ApiResult:
        token = self._token()
        if not token:
            return ApiResult.fail(NO_TOKEN_MESSAGE)
        ticket = self.sequencer.begin("staffs")
        with self._loading("staff"):
            result = self._client(StaffClient, token).list_staffs()
            if result.success:
                self._apply("staffs", ticket, result, lambda: setattr(self.state, "staffs", result.data))
        return self._log("staff", "get_all_staffs", result)

    def create_staff(self, username: str, password: str, building: Building | dict[str, str]) -> ApiResult:
        token = self._token()
        if not token:
            return ApiResult.fail(NO_TOKEN_MESSAGE)
        admin = self.state.user
        if admin is None or not admin.id:
            return ApiResult.fail("Admin ID not found")
        building = building if isinstance(building, Building) else Building.model_validate(building)
        with self._loading("staff"):
            result = self._client(StaffClient, token).create_staff(admin.id, username, password, building)
        self._log("staff", "create_staff", result)
        if result.success:
            self.get_all_staffs()
        return result

    def update_staff(
        self,
        staff_id: str,
        username: str,
        building: Building | dict[str, str],
        password: str | None = None,
    ) -> ApiResult:
        token = self._token()
        if not token:
            return ApiResult.fail(NO_TOKEN_MESSAGE)
        building = building if isinstance(building, Building) else Building.model_validate(building)
        updates: dict[str, Any] = {"username": username, "building": building.model_dump()}
        if password:
            updates["password"] = password
        with self._loading("staff"):
            result = self._client(StaffClient, token).update_staff(staff_id, updates)
        if result.success:
            returned = result.data or {"username": username, "building": building.model_dump()}
            self.state.staffs = [_merge_staff(staff, returned) if staff.id == staff_id else staff for staff in self.state.staffs]
            result.data = next((staff for staff in self.state.staffs if staff.id == staff_id), None)
        return self._log("staff", "update_staff", result, staff_id=staff_id)

    def delete_staff(self, staff_id: str) -> ApiResult:
        token = self._token()
        if not token:
            return ApiResult.fail(NO_TOKEN_MESSAGE)
        with self._loading("staff"):
            result = self._client(StaffClient, token).delete_staff(staff_id)
        self._log("staff", "delete_staff", result, staff_id=staff_id)
        if result.success:
            self.get_all_staffs()
        return result

    # vehicles

    def vehicle_list(self, vehicle_type: str, check_type: str, staff_id: str | None = None) -> ApiResult:
        token = self._token()
        if not token:
            return ApiResult.fail(NO_TOKEN_MESSAGE)
        ticket = self.sequencer.begin("vehicle_list")
        with self._loading("vehicles"):
            result = self._client(VehiclesClient, token).list_vehicles(check_type, vehicle_type, staff_id)
            if result.success:
                self._apply("vehicle_list", ticket, result, lambda: setattr(self.state, "vehicle_list", result.data))
        return self._log("vehicles", "vehicle_list", result, check_type=check_type, vehicle=vehicle_type)

    def fetch_checkins(self, vehicle_type: str = "all", staff_id: str | None = None) -> ApiResult:
        return self._fetch_records("checkins", "checkin_records", vehicle_type, staff_id)

    def fetch_checkouts(self, vehicle_type: str = "all", staff_id: str | None = None) -> ApiResult:
        return self._fetch_records("checkouts", "checkout_records", vehicle_type, staff_id)

    def _fetch_records(self, check_type: str, slot: str, vehicle_type: str, staff_id: str | None) -> ApiResult:
        token = self._token()
        ticket = self.sequencer.begin(slot)
        with self._loading("vehicles"):
            if token:
                result = self._client(VehiclesClient, token).list_vehicles(check_type, vehicle_type, staff_id)
            else:
                result = ApiResult.fail(NO_TOKEN_MESSAGE)
            rows = result.data if result.success else []
            self._apply(slot, ticket, result, lambda: setattr(self.state, slot, rows))
        return self._log("vehicles", f"fetch_{check_type}", result, vehicle=vehicle_type)

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
        if vehicle_type not in VEHICLE_TYPES:
            return ApiResult.fail(f"Unknown vehicle type: {vehicle_type}")
        token = self._token()
        if not token:
            return ApiResult.fail(NO_TOKEN_MESSAGE)
        with self._loading("vehicles"):
            result = self._client(VehiclesClient, token).check_in(
                name, vehicle_no, vehicle_type, mobile, payment_method, days, amount
            )
        return self._log("vehicles", "check_in", result, vehicle=vehicle_type)

    def check_out(self, token_id: str, preview_only: bool = False) -> ApiResult:
        if not token_id.strip():
            return ApiResult.fail("Enter the Token ID")
        token = self._token()
        if not token:
            return ApiResult.fail(NO_TOKEN_MESSAGE)
        with self._loading("vehicles"):
            result = self._client(VehiclesClient, token).check_out(token_id.strip(), preview_only)
        if result.success and not preview_only:
            self.state.receipt = dict(result.data.receipt or {})
        return self._log("vehicles", "check_out", result, preview_only=preview_only)

    # pricing

    def fetch_prices(self, admin_id: str, token: str | None = None) -> ApiResult:
        token = self._token(token)
        if not token:
            return ApiResult.fail(NO_TOKEN_MESSAGE)
        ticket = self.sequencer.begin("price_table")
        with self._loading("prices"):
            result = self._client(PricingClient, token).get_prices(admin_id)
            if result.success:
                self._apply("price_table", ticket, result, lambda: self._store_prices(result.data))
        return self._log("prices", "fetch_prices", result)

    def update_daily_prices(self, admin_id: str, daily_prices: dict[str, str]) -> ApiResult:
        return self._update_prices("daily", admin_id, daily_prices)

    def update_monthly_prices(self, admin_id: str, monthly_prices: dict[str, str]) -> ApiResult:
        return self._update_prices("monthly", admin_id, monthly_prices)

    def _update_prices(self, kind: str, admin_id: str, prices: dict[str, str]) -> ApiResult:
        token = self._token()
        if not token:
            return ApiResult.fail(NO_TOKEN_MESSAGE)
        field = f"{kind}_prices"
        submitted = {str(key): str(value) for key, value in prices.items()}
        ticket = self.sequencer.begin("price_table")
        with self._loading("prices"):
            result = self._client(PricingClient, token).update_prices(kind, admin_id, submitted)
        if not result.success:
            result.error = result.error or f"Failed to update {kind} prices"
            return self._log("prices", f"update_{kind}_prices", result)

        response = result.data
        echoed = getattr(response.data, field) if field in response.data.model_fields_set else submitted

        def merge() -> None:
            self._store_prices(self.state.price_table.model_copy(update={field: dict(echoed)}))

        self._apply("price_table", ticket, result, merge)
        result.data = response.message
        return self._log("prices", f"update_{kind}_prices", result)

    def load_prices_if_not_set(self) -> PriceTable:
        table = self.state.price_table
        if table.daily_prices or table.monthly_prices:
            return table
        cached = self.session.read_json(PRICES_KEY)
        if isinstance(cached, dict):
            self.state.price_table = _price_table_or_empty(cached)
        return self.state.price_table

    def _store_prices(self, table: PriceTable) -> None:
        self.state.price_table = table
        self.session.write_json(PRICES_KEY, table.model_dump(by_alias=True))

    # dashboard and reports

    def get_dashboard_data(self, token: str | None = None) -> ApiResult:
        token = self._token(token)
        ticket = self.sequencer.begin("aggregates")
        with self._loading("dashboard"):
            if token:
                result = self._client(ReportsClient, token).dashboard()
            else:
                result = ApiResult.fail(NO_TOKEN_MESSAGE)
            data = result.data if result.success else DashboardData()
            self._apply("aggregates", ticket, result, lambda: self._store_dashboard(data))
        return self._log("dashboard", "get_dashboard_data", result)

    def _store_dashboard(self, data: DashboardData) -> None:
        self.state.checkins = data.checkins
        self.state.checkouts = data.checkouts
        self.state.all_data = data.all_data
        self.state.vehicle_total_money = data.vehicle_total_money
        self.state.payment_method = data.payment_method
        self.state.staff_data = data.staff_data
        self.state.transaction_logs = data.transaction_logs

    def get_today_vehicles(self) -> ApiResult:
        token = self._token()
        if not token:
            return ApiResult.fail(NO_TOKEN_MESSAGE)
        ticket = self.sequencer.begin("aggregates")
        with self._loading("dashboard"):
            result = self._client(ReportsClient, token).today_vehicles()
            if result.success:
                report = result.data

                def apply() -> None:
                    self.state.checkins = report.checkins
                    self.state.checkouts = report.checkouts
                    self.state.all_data = report.all_data
                    self.state.vehicle_total_money = report.vehicle_total_money
                    self.state.payment_method = report.payment_method
                    self.state.full_data = report.full_data

                self._apply("aggregates", ticket, result, apply)
        return self._log("dashboard", "get_today_vehicles", result)

    def fetch_revenue_report(self, staff_id: str) -> ApiResult:
        token = self._token()
        if not token:
            return ApiResult.fail(NO_TOKEN_MESSAGE)
        ticket = self.sequencer.begin("revenue")
        with self._loading("revenue"):
            result = self._client(ReportsClient, token).revenue_report(staff_id)
            if result.success:
                report = result.data

                def apply() -> None:
                    self.state.selected_staff_revenue = report.vehicles
                    self.state.total_revenue = report.revenue
                    self.state.total_vehicles = report.total_vehicles

                self._apply("revenue", ticket, result, apply)
        return self._log("dashboard", "fetch_revenue_report", result, staff_id=staff_id)

    # monthly passes

    def create_monthly_pass(self, request: MonthlyPassRequest) -> ApiResult:
        if request.missing_fields():
            return ApiResult.fail("All required fields must be provided")
        try:
            int(request.duration)
        except ValueError:
            return ApiResult.fail("Duration must be a whole number of months")
        token = self._token()
        if not token:
            return ApiResult.fail(NO_TOKEN_MESSAGE)
        with self._loading("monthly_pass"):
            result = self._client(MonthlyPassClient, token).create(request)
        return self._log("monthly_pass", "create_monthly_pass", result)

    def get_monthly_pass(self, status: str) -> ApiResult:
        try:
            pass_status = PassStatus(status)
        except ValueError:
            return ApiResult.fail("Status must be 'active' or 'expired'")
        token = self._token()
        if not token:
            return ApiResult.fail(NO_TOKEN_MESSAGE)
        slot = f"monthly_pass_{pass_status.value}"
        ticket = self.sequencer.begin(slot)
        with self._loading("monthly_pass"):
            result = self._client(MonthlyPassClient, token).list_by_status(pass_status)
            if result.success:
                self._apply(slot, ticket, result, lambda: setattr(self.state, slot, result.data))
        return self._log("monthly_pass", "get_monthly_pass", result, status=pass_status.value)

    def extend_monthly_pass(self, pass_id: str, months: int) -> ApiResult:
        if months < 1:
            return ApiResult.fail("Months must be at least 1")
        token = self._token()
        if not token:
            return ApiResult.fail(NO_TOKEN_MESSAGE)
        with self._loading("monthly_pass"):
            result = self._client(MonthlyPassClient, token).extend(pass_id, months)
        self._log("monthly_pass", "extend_monthly_pass", result, pass_id=pass_id)
        if not result.success:
            return result
        self.get_monthly_pass(PassStatus.ACTIVE.value)
        return ApiResult.ok(None, result.status_code)

    # permissions

    def set_staff_permission(self, staff_id: str, permissions: list[str]) -> ApiResult:
        unknown = validate_permissions(permissions)
        if unknown:
            return ApiResult.fail(f"Unknown permissions: {', '.join(unknown)}")
        token = self._token()
        if not token:
            return ApiResult.fail(NO_TOKEN_MESSAGE)
        ticket = self.sequencer.begin("permissions")
        with self._loading("permissions"):
            result = self._client(AccessControlClient, token).set_permissions(staff_id, list(permissions))
            if result.success:
                saved = result.data.permissions if "permissions" in result.data.model_fields_set else list(permissions)
                result.data = saved
                self._apply("permissions", ticket, result, lambda: setattr(self.state, "permissions", list(saved)))
        return self._log("permissions", "set_staff_permission", result, staff_id=staff_id)

    def get_staff_permission(self, staff_id: str, token: str | None = None) -> ApiResult:
        token = self._token(token)
        if not token:
            return ApiResult.fail(NO_TOKEN_MESSAGE)
        ticket = self.sequencer.begin("permissions")
        with self._loading("permissions"):
            result = self._client(AccessControlClient, token).get_permissions(staff_id)
            if result.success:
                fetched = list(result.data.permissions)
                result.data = fetched
                self._apply("permissions", ticket, result, lambda: setattr(self.state, "permissions", fetched))
        return self._log("permissions", "get_staff_permission", result, staff_id=staff_id)


def _merge_staff(staff: StaffRecord, returned: dict[str, Any]) -> StaffRecord:
    merged = {**staff.model_dump(by_alias=True), **returned}
    return StaffRecord.model_validate(merged)


def _price_table_or_empty(raw: dict[str, Any]) -> PriceTable:
    try:
        return PriceTable.model_validate(raw)
    except ValueError:
        return PriceTable()
