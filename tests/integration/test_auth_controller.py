from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone

import responses

from parkdesk_client.access_gate import GateDecision
from parkdesk_client.models import PriceTable, StaffRecord, UserRecord
from parkdesk_client.session_storage import (
    PRICES_KEY,
    ROLE_KEY,
    STAFF_PERMISSION_KEY,
    TOKEN_KEY,
    USER_KEY,
    MemorySessionStorage,
)
from parkdesk_client.state import AppState, AuthStatus
from parkdesk_client.store import ParkingStore

BASE_URL = "https://api.example.com"

ADMIN = {"_id": "admin-1", "username": "boss", "email": "boss@example.com", "role": "admin"}
STAFF = {"_id": "staff-1", "username": "ana", "role": "staff"}
PRICES = {"data": {"dailyPrices": {"car": 50, "bike": 20}, "monthlyPrices": {"car": 900}}}


def _persist_session(backend: MemorySessionStorage, token: str, user: dict, permissions=None) -> None:
    backend.set_item(TOKEN_KEY, token)
    backend.set_item(USER_KEY, json.dumps(user))
    backend.set_item(ROLE_KEY, user["role"])
    if permissions is not None:
        backend.set_item(STAFF_PERMISSION_KEY, json.dumps(permissions))


def test_restore_without_stored_session(store: ParkingStore) -> None:
    store.auth.restore_session()

    assert store.state.status is AuthStatus.UNAUTHENTICATED
    assert store.state.hydrated is True
    assert store.state.user is None
    assert store.state.staff_permission == []

    store.auth.restore_session()
    assert store.state.status is AuthStatus.UNAUTHENTICATED


def test_restore_with_expired_token_forces_logout(store: ParkingStore, backend, make_token) -> None:
    reasons: list[str] = []
    store.auth.on_session_invalid = reasons.append
    _persist_session(backend, make_token(exp=1), ADMIN)

    store.auth.restore_session()

    assert store.state.status is AuthStatus.UNAUTHENTICATED
    assert store.state.hydrated is True
    assert store.state.token is None
    assert backend.items == {}
    assert reasons == ["expired_token"]


def test_restore_with_expired_token_and_no_user_clears_storage(store: ParkingStore, backend, make_token) -> None:
    reasons: list[str] = []
    store.auth.on_session_invalid = reasons.append
    backend.set_item(TOKEN_KEY, make_token(exp=1))

    store.auth.restore_session()

    assert store.state.status is AuthStatus.UNAUTHENTICATED
    assert store.state.hydrated is True
    assert backend.items == {}
    assert reasons == ["expired_token"]
    assert store.get_all_staffs().error == "No token found"


def test_restore_with_valid_token_but_missing_user_clears_storage(
    store: ParkingStore, backend, valid_token
) -> None:
    reasons: list[str] = []
    store.auth.on_session_invalid = reasons.append
    backend.set_item(TOKEN_KEY, valid_token)
    backend.set_item(USER_KEY, "{not json")

    store.auth.restore_session()

    assert store.state.status is AuthStatus.UNAUTHENTICATED
    assert store.state.token is None
    assert backend.items == {}
    assert reasons == ["missing_user"]


def test_restore_with_corrupt_user_forces_logout(store: ParkingStore, backend, valid_token) -> None:
    backend.set_item(TOKEN_KEY, valid_token)
    backend.set_item(USER_KEY, json.dumps({"username": "no-id"}))

    store.auth.restore_session()

    assert store.state.status is AuthStatus.UNAUTHENTICATED
    assert backend.items == {}


@responses.activate
def test_restore_admin_session_refreshes_prices(store: ParkingStore, backend, valid_token) -> None:
    _persist_session(backend, valid_token, ADMIN, permissions=[])
    responses.add(responses.GET, f"{BASE_URL}/api/getPrices/admin-1", json=PRICES, status=200)

    store.auth.restore_session()

    assert store.state.status is AuthStatus.AUTHENTICATED
    assert store.state.is_logged is True
    assert store.state.user.id == "admin-1"
    assert store.state.role == "admin"
    assert store.state.price_table.daily_prices == {"car": "50", "bike": "20"}
    assert json.loads(backend.items[PRICES_KEY])["monthlyPrices"] == {"car": "900"}
    assert responses.calls[0].request.headers["Authorization"] == f"Bearer {valid_token}"


@responses.activate
def test_restore_staff_session_promotes_fresh_permissions(store: ParkingStore, backend, valid_token) -> None:
    _persist_session(backend, valid_token, STAFF, permissions=["home"])
    responses.add(
        responses.POST,
        f"{BASE_URL}/api/staff/getPermissions",
        json={"permissions": ["home", "vehicles"]},
        status=200,
    )
    responses.add(responses.GET, f"{BASE_URL}/api/getPrices/staff-1", json=PRICES, status=200)

    store.auth.restore_session()

    assert store.state.staff_permission == ["home", "vehicles"]
    assert json.loads(backend.items[STAFF_PERMISSION_KEY]) == ["home", "vehicles"]
    assert json.loads(responses.calls[0].request.body) == {"staffId": "staff-1"}


@responses.activate
def test_restore_staff_session_keeps_cached_permissions_when_refresh_fails(
    store: ParkingStore, backend, valid_token
) -> None:
    _persist_session(backend, valid_token, STAFF, permissions=["home"])
    responses.add(responses.POST, f"{BASE_URL}/api/staff/getPermissions", json={"message": "boom"}, status=500)
    responses.add(responses.GET, f"{BASE_URL}/api/getPrices/staff-1", json=PRICES, status=200)

    store.auth.restore_session()

    assert store.state.status is AuthStatus.AUTHENTICATED
    assert store.state.staff_permission == ["home"]
    assert store.gate.check("home").allowed
    assert not store.gate.check("vehicles").allowed


def test_hydrate_reads_role_and_permissions(store: ParkingStore, backend) -> None:
    backend.set_item(ROLE_KEY, "staff")
    backend.set_item(STAFF_PERMISSION_KEY, json.dumps(["home", 3]))
    assert store.gate.check("home").decision is GateDecision.LOADING

    store.auth.hydrate()

    assert store.state.hydrated is True
    assert store.state.role == "staff"
    assert store.state.staff_permission == ["home"]
    assert store.gate.check("home").allowed


@responses.activate
def test_admin_login_persists_session_and_loads_dashboard(store: ParkingStore, backend, valid_token) -> None:
    responses.add(
        responses.POST,
        f"{BASE_URL}/api/loginUser",
        json={"token": valid_token, "user": ADMIN},
        status=200,
    )
    responses.add(responses.GET, f"{BASE_URL}/api/getPrices/admin-1", json=PRICES, status=200)
    responses.add(
        responses.GET,
        f"{BASE_URL}/api/getDashboardData",
        json={"data": {"checkins": {"car": 3}, "PaymentMethod": {"cash": 100}}},
        status=200,
    )

    result = store.auth.login("boss", "secret")

    assert result.success is True
    assert result.data.username == "boss"
    assert store.state.status is AuthStatus.AUTHENTICATED
    assert store.state.token == valid_token
    assert store.state.role == "admin"
    assert store.state.staff_permission == []
    assert store.state.checkins == {"car": 3}
    assert store.state.payment_method == {"cash": 100}
    assert store.state.loading == set()
    assert backend.items[TOKEN_KEY] == valid_token
    assert backend.items[ROLE_KEY] == "admin"
    assert json.loads(backend.items[STAFF_PERMISSION_KEY]) == []
    assert json.loads(backend.items[USER_KEY])["id"] == "admin-1"
    assert [call.request.path_url for call in responses.calls] == [
        "/api/loginUser",
        "/api/getPrices/admin-1",
        "/api/getDashboardData",
    ]
    assert json.loads(responses.calls[0].request.body) == {"username": "boss", "password": "secret"}


@responses.activate
def test_staff_login_applies_permissions_to_gate(store: ParkingStore, backend, valid_token) -> None:
    responses.add(
        responses.POST,
        f"{BASE_URL}/api/loginUser",
        json={"token": valid_token, "user": STAFF},
        status=200,
    )
    responses.add(responses.GET, f"{BASE_URL}/api/getPrices/staff-1", json=PRICES, status=200)
    responses.add(
        responses.POST,
        f"{BASE_URL}/api/staff/getPermissions",
        json={"permissions": ["home", "vehicles"]},
        status=200,
    )
    store.auth.hydrate()

    result = store.auth.login("ana", "pw")

    assert result.success is True
    assert store.state.role == "staff"
    assert json.loads(backend.items[STAFF_PERMISSION_KEY]) == ["home", "vehicles"]
    assert store.gate.check("vehicles").allowed
    assert store.gate.check("dashboard").decision is GateDecision.DENIED


@responses.activate
def test_staff_login_with_failed_permission_fetch_is_fail_closed(store: ParkingStore, backend, valid_token) -> None:
    store.state.staff_permission = ["home"]
    responses.add(
        responses.POST,
        f"{BASE_URL}/api/loginUser",
        json={"token": valid_token, "user": STAFF},
        status=200,
    )
    responses.add(responses.GET, f"{BASE_URL}/api/getPrices/staff-1", json=PRICES, status=200)
    responses.add(responses.POST, f"{BASE_URL}/api/staff/getPermissions", json={"message": "down"}, status=503)

    result = store.auth.login("ana", "pw")

    assert result.success is True
    assert store.state.staff_permission == []
    assert json.loads(backend.items[STAFF_PERMISSION_KEY]) == []


@responses.activate
def test_login_failure_returns_server_message(store: ParkingStore, backend) -> None:
    responses.add(
        responses.POST,
        f"{BASE_URL}/api/loginUser",
        json={"message": "Invalid credentials"},
        status=401,
    )

    result = store.auth.login("boss", "wrong")

    assert result.success is False
    assert result.error == "Invalid credentials"
    assert store.state.status is AuthStatus.UNAUTHENTICATED
    assert backend.items == {}


@responses.activate
def test_login_rejects_expired_token(store: ParkingStore, backend, make_token) -> None:
    responses.add(
        responses.POST,
        f"{BASE_URL}/api/loginUser",
        json={"token": make_token(exp=1), "user": ADMIN},
        status=200,
    )

    result = store.auth.login("boss", "secret")

    assert result.success is False
    assert store.state.token is None
    assert TOKEN_KEY not in backend.items


@responses.activate
def test_signup_does_not_authenticate(store: ParkingStore) -> None:
    responses.add(responses.POST, f"{BASE_URL}/api/register", json={"message": "created"}, status=201)

    result = store.auth.signup("boss", "boss@example.com", "secret")

    assert result.success is True
    assert store.state.token is None
    assert store.state.is_logged is False


@responses.activate
def test_update_profile_replaces_user_record(store: ParkingStore, backend, valid_token) -> None:
    store.state.token = valid_token
    store.state.user = None
    responses.add(
        responses.PUT,
        f"{BASE_URL}/api/updateAdmin/",
        json={"admin": {"_id": "admin-1", "username": "chief", "role": "admin", "profileImage": "img.png"}},
        status=200,
    )

    result = store.auth.update_profile("chief", "old-pw", new_password="new-pw", avatar="img.png")

    assert result.success is True
    assert store.state.user.username == "chief"
    assert store.state.user.profile_image == "img.png"
    stored = json.loads(backend.items[USER_KEY])
    assert stored["username"] == "chief"
    assert stored["profileImage"] == "img.png"
    assert json.loads(responses.calls[0].request.body) == {
        "username": "chief",
        "oldPassword": "old-pw",
        "password": "new-pw",
        "profileImage": "img.png",
    }


def test_update_profile_without_token(store: ParkingStore) -> None:
    result = store.auth.update_profile("chief", "old-pw")

    assert result.success is False
    assert result.error == "No token found"


def test_log_out_clears_everything_but_hydration(store: ParkingStore, backend, valid_token) -> None:
    _persist_session(backend, valid_token, ADMIN, permissions=[])
    store.state.token = valid_token
    store.state.role = "admin"
    store.state.status = AuthStatus.AUTHENTICATED
    store.state.hydrated = True
    store.state.user = UserRecord(id="admin-1", username="boss", role="admin")
    store.state.staff_permission = ["home"]
    store.state.staffs = [StaffRecord(id="s1", username="ana")]
    store.state.checkins = {"car": 1}
    store.state.receipt = {"tokenId": "7"}
    store.state.price_table = PriceTable(daily_prices={"car": "50"})
    store.state.monthly_pass_active = []
    store.state.total_revenue = 120
    store.state.loading.add("staff")

    store.auth.log_out()

    assert backend.items == {}
    cleared = asdict(store.state)
    defaults = asdict(AppState())
    for key in ("status", "hydrated"):
        cleared.pop(key)
        defaults.pop(key)
    assert cleared == defaults
    assert store.state.status is AuthStatus.UNAUTHENTICATED
    assert store.state.hydrated is True


def test_check_token_expiry_forces_logout(store: ParkingStore, backend, make_token) -> None:
    reasons: list[str] = []
    store.auth.on_session_invalid = reasons.append
    token = make_token(exp=1_700_000_000)
    _persist_session(backend, token, ADMIN)
    store.state.token = token
    store.state.hydrated = True
    store.state.status = AuthStatus.AUTHENTICATED

    before = datetime.fromtimestamp(1_699_999_000, tz=timezone.utc)
    after = datetime.fromtimestamp(1_700_000_001, tz=timezone.utc)

    assert store.auth.check_token_expiry(now=before) is True
    assert reasons == []

    assert store.auth.check_token_expiry(now=after) is False
    assert reasons == ["expired_token"]
    assert store.state.token is None
    assert backend.items == {}


def test_check_token_expiry_without_session_is_noop(store: ParkingStore) -> None:
    store.state.hydrated = True

    assert store.auth.check_token_expiry() is False
    assert store.state.status is AuthStatus.UNINITIALIZED
