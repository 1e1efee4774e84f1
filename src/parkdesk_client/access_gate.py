from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from .models import Role
from .state import AppState

T = TypeVar("T")

PERMISSION_VOCABULARY: tuple[str, ...] = (
    "home",
    "vehicles",
    "todayReport",
    "monthlyPass",
    "accountSettings",
    "dashboard",
    "account",
    "priceDetails",
    "staffSettings",
    "edit/DeleteStaff",
    "createStaff",
    "ViewStaff",
    "InStaff",
    "staffDetails",
    "staffVehicles",
    "staffRevenue",
    "staffPermissionPage",
    "adminUpdate",
    "printerSettings",
)

ACCESS_DENIED_TITLE = "Access Denied"
ACCESS_DENIED_MESSAGE = "You are not authorized to view this page."
LOADING_MESSAGE = "Loading..."


class GateDecision(str, Enum):
    ALLOWED = "allowed"
    DENIED = "denied"
    LOADING = "loading"


@dataclass(frozen=True)
class GateResult:
    decision: GateDecision
    reason: str = ""

    @property
    def allowed(self) -> bool:
        return self.decision is GateDecision.ALLOWED


@dataclass(frozen=True)
class GateOutcome(Generic[T]):
    result: GateResult
    content: T | None = None
    title: str = ""
    message: str = ""


def check_access(
    required: str,
    role: str | None,
    permissions: Iterable[str],
    *,
    hydrated: bool = True,
) -> GateResult:
    if not hydrated:
        return GateResult(GateDecision.LOADING, "session not hydrated")
    if role == Role.ADMIN.value:
        return GateResult(GateDecision.ALLOWED)
    if role == Role.STAFF.value:
        if required in set(permissions):
            return GateResult(GateDecision.ALLOWED)
        return GateResult(GateDecision.DENIED, f"missing permission: {required}")
    return GateResult(GateDecision.DENIED, f"unknown role: {role or 'unset'}")


def validate_permissions(permissions: Iterable[str]) -> list[str]:
    """Return the unknown capability strings, preserving order."""
    vocabulary = set(PERMISSION_VOCABULARY)
    return [item for item in permissions if item not in vocabulary]


class AccessGate:
    def __init__(self, state: AppState) -> None:
        self.state = state

    def check(self, required: str) -> GateResult:
        return check_access(
            required,
            self.state.role,
            self.state.staff_permission,
            hydrated=self.state.hydrated,
        )

    def render(
        self,
        required: str,
        content: Callable[[], T],
        fallback: Callable[[GateResult], T] | None = None,
    ) -> GateOutcome[T]:
        result = self.check(required)
        if result.allowed:
            return GateOutcome(result=result, content=content())
        if result.decision is GateDecision.LOADING:
            return GateOutcome(result=result, message=LOADING_MESSAGE)
        if fallback is not None:
            return GateOutcome(
                result=result,
                content=fallback(result),
                title=ACCESS_DENIED_TITLE,
                message=ACCESS_DENIED_MESSAGE,
            )
        return GateOutcome(result=result, title=ACCESS_DENIED_TITLE, message=ACCESS_DENIED_MESSAGE)
