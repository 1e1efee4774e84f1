from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

from .models import (
    MonthlyPass,
    PriceTable,
    StaffPerformance,
    StaffRecord,
    TransactionLog,
    UserRecord,
    VehicleRecord,
)


class AuthStatus(str, Enum):
    UNINITIALIZED = "uninitialized"
    RESTORING = "restoring"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


@dataclass
class AppState:
    # session
    token: str | None = None
    user: UserRecord | None = None
    role: str = ""
    staff_permission: list[str] = field(default_factory=list)
    status: AuthStatus = AuthStatus.UNINITIALIZED
    hydrated: bool = False

    # staff roster and permission editing
    staffs: list[StaffRecord] = field(default_factory=list)
    permissions: list[str] = field(default_factory=list)

    # vehicles
    vehicle_list: list[VehicleRecord] = field(default_factory=list)
    checkin_records: list[VehicleRecord] = field(default_factory=list)
    checkout_records: list[VehicleRecord] = field(default_factory=list)
    receipt: dict[str, Any] = field(default_factory=dict)

    # dashboard and reports
    checkins: dict[str, float] = field(default_factory=dict)
    checkouts: dict[str, float] = field(default_factory=dict)
    all_data: dict[str, float] = field(default_factory=dict)
    vehicle_total_money: dict[str, float] = field(default_factory=dict)
    payment_method: dict[str, float] = field(default_factory=dict)
    staff_data: list[StaffPerformance] = field(default_factory=list)
    transaction_logs: list[TransactionLog] = field(default_factory=list)
    full_data: list[dict[str, Any]] = field(default_factory=list)
    selected_staff_revenue: list[dict[str, Any]] = field(default_factory=list)
    total_revenue: float = 0
    total_vehicles: int = 0

    # pricing
    price_table: PriceTable = field(default_factory=PriceTable)

    # monthly passes
    monthly_pass_active: list[MonthlyPass] | None = None
    monthly_pass_expired: list[MonthlyPass] | None = None

    loading: set[str] = field(default_factory=set)

    @property
    def is_loading(self) -> bool:
        return bool(self.loading)

    @property
    def is_logged(self) -> bool:
        return self.status is AuthStatus.AUTHENTICATED

    def reset(self, **overrides: Any) -> None:
        """Replace every field with its default in a single assignment."""
        fresh = AppState(**overrides)
        self.__dict__.update({item.name: getattr(fresh, item.name) for item in fields(self)})


class SlotSequencer:
    """Per-slot request tickets; only the most recently issued ticket may apply its response."""

    def __init__(self) -> None:
        self._issued: dict[str, int] = {}
        self._epoch = 0

    def begin(self, slot: str) -> int:
        ticket = max(self._issued.get(slot, 0), self._epoch) + 1
        self._issued[slot] = ticket
        return ticket

    def is_current(self, slot: str, ticket: int) -> bool:
        return ticket > self._epoch and self._issued.get(slot) == ticket

    def invalidate_all(self) -> None:
        self._epoch = max([self._epoch, *self._issued.values()])
