from __future__ import annotations

from parkdesk_client.models import PriceTable, StaffRecord
from parkdesk_client.state import AppState, AuthStatus, SlotSequencer


def test_defaults_are_documented_empties() -> None:
    state = AppState()

    assert state.status is AuthStatus.UNINITIALIZED
    assert state.hydrated is False
    assert state.staffs == []
    assert state.checkins == {}
    assert state.price_table == PriceTable()
    assert state.monthly_pass_active is None
    assert state.monthly_pass_expired is None
    assert state.total_revenue == 0
    assert state.is_loading is False
    assert state.is_logged is False


def test_reset_replaces_all_fields_and_keeps_identity() -> None:
    state = AppState(token="abc", role="admin", status=AuthStatus.AUTHENTICATED, hydrated=True)
    state.staffs.append(StaffRecord(_id="s1", username="ana"))
    state.loading.add("staff")
    original = state

    state.reset(status=AuthStatus.UNAUTHENTICATED, hydrated=True)

    assert state is original
    assert state.token is None
    assert state.role == ""
    assert state.staffs == []
    assert state.loading == set()
    assert state.status is AuthStatus.UNAUTHENTICATED
    assert state.hydrated is True


def test_sequencer_only_latest_ticket_is_current() -> None:
    sequencer = SlotSequencer()

    first = sequencer.begin("staffs")
    second = sequencer.begin("staffs")
    other = sequencer.begin("prices")

    assert sequencer.is_current("staffs", second)
    assert not sequencer.is_current("staffs", first)
    assert sequencer.is_current("prices", other)


def test_invalidate_all_retires_outstanding_tickets() -> None:
    sequencer = SlotSequencer()
    ticket = sequencer.begin("staffs")

    sequencer.invalidate_all()

    assert not sequencer.is_current("staffs", ticket)
    fresh = sequencer.begin("staffs")
    assert fresh > ticket
    assert sequencer.is_current("staffs", fresh)
    assert sequencer.is_current("new-slot", sequencer.begin("new-slot"))
