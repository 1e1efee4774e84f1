from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import ValidationError as ModelValidationError

from .clients import AuthClient
from .http_client import ApiResult
from .logger import get_logger, log_action
from .models import PriceTable, Role, UserRecord
from .session_storage import (
    PRICES_KEY,
    ROLE_KEY,
    STAFF_PERMISSION_KEY,
    TOKEN_KEY,
    USER_KEY,
)
from .state import AuthStatus
from .token_guard import validate_token

if TYPE_CHECKING:
    from .store import ParkingStore

INVALID_TOKEN_MESSAGE = "Received an invalid session token"

logger = get_logger("parkdesk_client.auth")


class AuthController:
    """Login, logout, session restore and token expiry for a `ParkingStore`."""

    def __init__(
        self,
        store: "ParkingStore",
        on_session_invalid: Callable[[str], None] | None = None,
    ) -> None:
        self.store = store
        self.on_session_invalid = on_session_invalid

    @property
    def state(self):
        return self.store.state

    @property
    def session(self):
        return self.store.session

    def _log(self, action: str, outcome: str, level: int = logging.INFO, **context) -> None:
        log_action(logger, "auth", action, self.state.role or None, outcome, level, **context)

    def hydrate(self) -> None:
        """Load role and staff permissions from storage; always marks the state hydrated."""
        try:
            role = self.session.read(ROLE_KEY)
            permissions = self.session.read_json(STAFF_PERMISSION_KEY)
            self.state.role = role or ""
            self.state.staff_permission = _string_list(permissions)
        finally:
            self.state.hydrated = True

    def restore_session(self) -> None:
        state = self.state
        state.status = AuthStatus.RESTORING
        try:
            token = self.session.read(TOKEN_KEY)
            if not token:
                self._log("restore_session", "no_session")
                return

            validation = validate_token(token)
            if not validation.valid:
                self._invalidate(validation.reason)
                return
            raw_user = self.session.read_json(USER_KEY)
            if not isinstance(raw_user, dict):
                self._invalidate("missing_user")
                return
            try:
                user = UserRecord.model_validate(raw_user)
            except ModelValidationError:
                self._invalidate("corrupt_user")
                return

            state.token = token
            state.user = user
            state.role = self.session.read(ROLE_KEY) or user.role or ""
            state.staff_permission = _string_list(self.session.read_json(STAFF_PERMISSION_KEY))
            cached_prices = self.session.read_json(PRICES_KEY)
            if isinstance(cached_prices, dict):
                try:
                    state.price_table = PriceTable.model_validate(cached_prices)
                except ModelValidationError:
                    state.price_table = PriceTable()
            state.status = AuthStatus.AUTHENTICATED
            self._log("restore_session", "success")

            if state.role == Role.STAFF.value:
                # cached permissions stay in place when the refresh fails
                self._refresh_staff_permissions(user.id, token)
            self.store.fetch_prices(user.id, token=token)
        finally:
            if state.status is AuthStatus.RESTORING:
                state.status = AuthStatus.UNAUTHENTICATED
            state.hydrated = True

    def login(self, username: str, password: str) -> ApiResult:
        state = self.state
        state.loading.add("auth")
        try:
            result = AuthClient(http=self.store.http).login(username, password)
            if not result.success:
                self._mark_unauthenticated()
                self._log("login", "error", logging.WARNING, error=result.error, status_code=result.status_code)
                return result

            token = result.data.token
            user = result.data.user
            validation = validate_token(token)
            if not validation.valid:
                self._mark_unauthenticated()
                self._log("login", "invalid_token", logging.WARNING, reason=validation.reason)
                return ApiResult.fail(INVALID_TOKEN_MESSAGE, result.status_code)

            role = user.role or ""
            self.session.write(TOKEN_KEY, token)
            self.session.write_json(USER_KEY, _user_payload(user))
            self.store.fetch_prices(user.id, token=token)

            if role == Role.STAFF.value:
                state.permissions = []
                refreshed = self._refresh_staff_permissions(user.id, token)
                if not refreshed.success or refreshed.stale:
                    state.staff_permission = []
                    self.session.write_json(STAFF_PERMISSION_KEY, [])
                self.session.write(ROLE_KEY, role)
            else:
                state.staff_permission = []
                self.session.write(ROLE_KEY, role)
                self.session.write_json(STAFF_PERMISSION_KEY, [])
                self.store.get_dashboard_data(token=token)

            state.role = role
            state.token = token
            state.user = user
            state.status = AuthStatus.AUTHENTICATED
            self._log("login", "success")
            return ApiResult.ok(user, result.status_code)
        finally:
            state.loading.discard("auth")

    def _refresh_staff_permissions(self, staff_id: str, token: str) -> ApiResult:
        result = self.store.get_staff_permission(staff_id, token=token)
        if result.success and not result.stale:
            self.state.staff_permission = list(result.data)
            self.session.write_json(STAFF_PERMISSION_KEY, self.state.staff_permission)
        else:
            self._log("refresh_permissions", "error", logging.WARNING, error=result.error)
        return result

    def signup(self, username: str, email: str, password: str) -> ApiResult:
        self.state.loading.add("auth")
        try:
            result = AuthClient(http=self.store.http).signup(username, email, password)
        finally:
            self.state.loading.discard("auth")
        if result.success:
            self._log("signup", "success")
            return ApiResult.ok(None, result.status_code)
        self._log("signup", "error", logging.WARNING, error=result.error, status_code=result.status_code)
        return result

    def update_profile(
        self,
        username: str,
        old_password: str,
        new_password: str | None = None,
        avatar: str | None = None,
    ) -> ApiResult:
        token = self.state.token or self.session.read(TOKEN_KEY)
        if not token:
            return ApiResult.fail("No token found")
        self.state.loading.add("auth")
        try:
            result = AuthClient(http=self.store.http, access_token=token).update_profile(
                username, old_password, new_password, avatar
            )
        finally:
            self.state.loading.discard("auth")
        if not result.success:
            self._log("update_profile", "error", logging.WARNING, error=result.error, status_code=result.status_code)
            return result
        self.state.user = result.data
        self.session.write_json(USER_KEY, _user_payload(result.data))
        self._log("update_profile", "success")
        return result

    def log_out(self) -> None:
        self.store.sequencer.invalidate_all()
        self.session.clear()
        role = self.state.role or None
        self.state.reset(status=AuthStatus.UNAUTHENTICATED, hydrated=self.state.hydrated)
        log_action(logger, "auth", "logout", role, "success")

    def check_token_expiry(self, now: datetime | None = None) -> bool:
        """Return True while the in-memory token is valid; forces logout otherwise."""
        if not self.state.hydrated or not self.state.token:
            return False
        validation = validate_token(self.state.token, now_utc=now)
        if validation.valid:
            return True
        self._invalidate(validation.reason)
        return False

    def _invalidate(self, reason: str) -> None:
        self._log("session_invalid", reason, logging.WARNING)
        self.log_out()
        if self.on_session_invalid is not None:
            self.on_session_invalid(reason)

    def _mark_unauthenticated(self) -> None:
        if self.state.status is not AuthStatus.AUTHENTICATED:
            self.state.status = AuthStatus.UNAUTHENTICATED


def _user_payload(user: UserRecord) -> dict:
    return user.model_dump(mode="json", by_alias=True, exclude_none=True)


def _string_list(value) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]
