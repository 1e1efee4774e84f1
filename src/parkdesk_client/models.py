from __future__ import annotations

import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class VehicleType(str, Enum):
    CYCLE = "cycle"
    BIKE = "bike"
    CAR = "car"
    VAN = "van"
    LORRY = "lorry"
    BUS = "bus"


VEHICLE_TYPES = tuple(item.value for item in VehicleType)


class Role(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"


class PassStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"


class ApiModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Building(ApiModel):
    name: str = ""
    location: str = ""


class UserRecord(ApiModel):
    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    username: str = ""
    email: str | None = None
    role: str | None = None
    profile_image: str | None = Field(
        default=None,
        validation_alias=AliasChoices("profileImage", "avatar", "profile_image"),
        serialization_alias="profileImage",
    )
    building: Building | None = None


class StaffRecord(ApiModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    username: str = ""
    password: str | None = None
    building: Building | None = Field(
        default=None,
        validation_alias=AliasChoices("building", "buildingId"),
    )
    permissions: List[str] = Field(default_factory=list)

    @field_validator("building", mode="before")
    @classmethod
    def _building_reference(cls, value: Any) -> Any:
        # populated references arrive as objects, unpopulated ones as bare ids
        if isinstance(value, str):
            return None
        return value


class PriceTable(ApiModel):
    daily_prices: Dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("dailyPrices", "daily_prices"),
        serialization_alias="dailyPrices",
    )
    monthly_prices: Dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("monthlyPrices", "monthly_prices"),
        serialization_alias="monthlyPrices",
    )

    @field_validator("daily_prices", "monthly_prices", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {str(key): "" if price is None else str(price) for key, price in value.items()}
        return value


class PriceUpdateResponse(ApiModel):
    message: str = ""
    data: PriceTable = Field(default_factory=PriceTable)

    @field_validator("data", mode="before")
    @classmethod
    def _table(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}


class VehicleRecord(ApiModel):
    id: str = Field(default="", validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    name: str = ""
    vehicle_no: str = Field(default="", validation_alias=AliasChoices("vehicleNo", "vehicle_no"))
    vehicle_type: str = Field(default="", validation_alias=AliasChoices("vehicleType", "vehicle_type"))
    mobile: str = ""
    token_id: str | None = Field(default=None, validation_alias=AliasChoices("tokenId", "token_id"))
    entry_date_time: datetime | None = Field(
        default=None, validation_alias=AliasChoices("entryDateTime", "entry_date_time")
    )
    exit_date_time: datetime | None = Field(
        default=None, validation_alias=AliasChoices("exitDateTime", "exit_date_time")
    )
    is_checked_out: bool = Field(default=False, validation_alias=AliasChoices("isCheckedOut", "is_checked_out"))
    paid_days: int | None = Field(default=None, validation_alias=AliasChoices("paidDays", "paid_days"))
    per_day_rate: float | None = Field(default=None, validation_alias=AliasChoices("perDayRate", "per_day_rate"))
    amount: float | None = None
    payment_method: str | None = Field(
        default=None, validation_alias=AliasChoices("paymentMethod", "payment_method")
    )

    @field_validator("mobile", "token_id", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class MonthlyPass(ApiModel):
    id: str = Field(default="", validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    name: str = ""
    vehicle_no: str = Field(default="", validation_alias=AliasChoices("vehicleNo", "vehicle_no"))
    mobile: str = ""
    start_date: str | None = Field(default=None, validation_alias=AliasChoices("startDate", "start_date"))
    end_date: str | None = Field(default=None, validation_alias=AliasChoices("endDate", "end_date"))
    duration: int = 0
    amount: float = 0
    payment_mode: str | None = Field(default=None, validation_alias=AliasChoices("paymentMode", "payment_mode"))
    vehicle_type: str = Field(default="", validation_alias=AliasChoices("vehicleType", "vehicle_type"))
    is_expired: bool = Field(default=False, validation_alias=AliasChoices("isExpired", "is_expired"))

    @field_validator("mobile", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class MonthlyPassRequest(BaseModel):
    """Creation form for a monthly pass; `to_payload` builds the request body."""

    name: str = ""
    vehicle_no: str = ""
    mobile: str = ""
    vehicle_type: str = ""
    duration: str = ""
    start_date: str = ""
    end_date: str = ""
    payment_method: str = ""
    amount: float | None = None
    transaction_id: str | None = None

    def missing_fields(self) -> list[str]:
        required = (
            "name",
            "vehicle_no",
            "mobile",
            "vehicle_type",
            "duration",
            "start_date",
            "end_date",
            "payment_method",
        )
        return [name for name in required if not str(getattr(self, name) or "").strip()]

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "vehicleNo": re.sub(r"\s", "", self.vehicle_no.upper()),
            "mobile": self.mobile,
            "vehicleType": self.vehicle_type.lower(),
            "startDate": self.start_date,
            "duration": int(self.duration),
            "endDate": self.end_date,
            "amount": self.amount,
            "paymentMode": self.payment_method or "cash",
        }
        if self.transaction_id:
            payload["transactionId"] = self.transaction_id
        return payload


class StaffPerformance(ApiModel):
    username: str = ""
    check_ins: int = Field(default=0, validation_alias=AliasChoices("checkIns", "check_ins"))
    check_outs: int = Field(default=0, validation_alias=AliasChoices("checkOuts", "check_outs"))
    revenue: float = 0


class TransactionLog(ApiModel):
    id: str = ""
    type: str = ""
    vehicle_type: str = Field(default="", validation_alias=AliasChoices("vehicleType", "vehicle_type"))
    timestamp: str = ""
    staff: str = ""
    amount: float = 0
    payment_method: str | None = Field(
        default=None, validation_alias=AliasChoices("paymentMethod", "payment_method")
    )


def _dict_or_empty(value: Any) -> Any:
    return value if isinstance(value, dict) else {}


def _list_or_empty(value: Any) -> Any:
    return value if isinstance(value, list) else []


class DashboardData(ApiModel):
    checkins: Dict[str, float] = Field(default_factory=dict)
    checkouts: Dict[str, float] = Field(default_factory=dict)
    all_data: Dict[str, float] = Field(default_factory=dict, validation_alias=AliasChoices("allData", "all_data"))
    vehicle_total_money: Dict[str, float] = Field(
        default_factory=dict, validation_alias=AliasChoices("VehicleTotalMoney", "vehicle_total_money")
    )
    payment_method: Dict[str, float] = Field(
        default_factory=dict, validation_alias=AliasChoices("PaymentMethod", "payment_method")
    )
    staff_data: List[StaffPerformance] = Field(
        default_factory=list, validation_alias=AliasChoices("staffData", "staff_data")
    )
    transaction_logs: List[TransactionLog] = Field(
        default_factory=list, validation_alias=AliasChoices("transactionLogs", "transaction_logs")
    )

    @field_validator("checkins", "checkouts", "all_data", "vehicle_total_money", "payment_method", mode="before")
    @classmethod
    def _aggregate(cls, value: Any) -> Any:
        return _dict_or_empty(value)

    @field_validator("staff_data", "transaction_logs", mode="before")
    @classmethod
    def _rows(cls, value: Any) -> Any:
        return _list_or_empty(value)


class TodayReport(ApiModel):
    checkins: Dict[str, float] = Field(
        default_factory=dict, validation_alias=AliasChoices("checkinsCount", "checkins")
    )
    checkouts: Dict[str, float] = Field(
        default_factory=dict, validation_alias=AliasChoices("checkoutsCount", "checkouts")
    )
    all_data: Dict[str, float] = Field(
        default_factory=dict, validation_alias=AliasChoices("allDataCount", "all_data")
    )
    vehicle_total_money: Dict[str, float] = Field(
        default_factory=dict, validation_alias=AliasChoices("money", "vehicle_total_money")
    )
    payment_method: Dict[str, float] = Field(
        default_factory=dict, validation_alias=AliasChoices("PaymentMethod", "payment_method")
    )
    full_data: List[Dict[str, Any]] = Field(
        default_factory=list, validation_alias=AliasChoices("fullData", "full_data")
    )

    @field_validator("checkins", "checkouts", "all_data", "vehicle_total_money", "payment_method", mode="before")
    @classmethod
    def _aggregate(cls, value: Any) -> Any:
        return _dict_or_empty(value)

    @field_validator("full_data", mode="before")
    @classmethod
    def _rows(cls, value: Any) -> Any:
        return _list_or_empty(value)


class RevenueReport(ApiModel):
    vehicles: List[Dict[str, Any]] = Field(default_factory=list)
    revenue: float = 0
    total_vehicles: int = Field(default=0, validation_alias=AliasChoices("totalVehicles", "total_vehicles"))

    @field_validator("vehicles", mode="before")
    @classmethod
    def _rows(cls, value: Any) -> Any:
        return _list_or_empty(value)


class LoginResponse(ApiModel):
    token: str
    user: UserRecord


class PermissionsResponse(ApiModel):
    permissions: List[str] = Field(default_factory=list)

    @field_validator("permissions", mode="before")
    @classmethod
    def _rows(cls, value: Any) -> Any:
        return _list_or_empty(value)


class CheckInResult(ApiModel):
    token_id: str | None = Field(default=None, validation_alias=AliasChoices("tokenId", "token_id"))

    @field_validator("token_id", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class CheckOutResult(ApiModel):
    receipt: Optional[Dict[str, Any]] = None
    preview: Optional[Dict[str, Any]] = Field(default=None, validation_alias=AliasChoices("data", "preview"))

    @property
    def extra_days(self) -> int:
        table = (self.preview or {}).get("table") or {}
        try:
            return int(table.get("extraDays") or 0)
        except (TypeError, ValueError):
            return 0


def entry_date(record: VehicleRecord) -> date | None:
    return record.entry_date_time.date() if record.entry_date_time else None
