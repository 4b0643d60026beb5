from __future__ import annotations

import asyncio
import json

import pytest
import requests

from fakes import FakeGateway, build_memory_container, entry, person_ref, wait_until

from src.church_checkin.church_checkin.checkin.gateway import HttpCheckInGateway, ServiceCheckInGateway
from src.church_checkin.church_checkin.checkin.model import LookupResult, Ministry
from src.church_checkin.church_checkin.checkin.modes import NewMember, QuickCheckIn, Search
from src.church_checkin.church_checkin.checkin.workflow import CheckInWorkflow, WorkflowSettings
from src.church_checkin.church_checkin.core.enums import NotificationKind
from src.church_checkin.church_checkin.core.exceptions import GatewayError

FAST = WorkflowSettings(debounce_seconds=0.01, roster_refresh_seconds=60, notification_seconds=10)


async def type_names(desk: CheckInWorkflow, first: str, last: str) -> None:
    desk.set_names(first, last)
    await wait_until(lambda: not desk.resolver.pending)


def _memory_desk():
    container, people, attendance = build_memory_container()
    return CheckInWorkflow(ServiceCheckInGateway(container), settings=FAST), container, people, attendance


def test_existing_member_quick_check_in():
    async def scenario():
        desk, _, people, attendance = _memory_desk()
        people.add("Jane", "Doe", "jane@example.org")
        async with desk:
            await type_names(desk, "Jane", "Doe")
            mode, note, can_submit = desk.mode, desk.notifications.current, desk.can_submit
            outcome = await desk.submit()
            return desk, attendance, mode, note, can_submit, outcome

    desk, attendance, mode, note, can_submit, outcome = asyncio.run(scenario())

    assert isinstance(mode, QuickCheckIn)
    assert note.kind == NotificationKind.SUCCESS
    assert can_submit is True
    assert outcome.is_new_member is False
    assert isinstance(desk.mode, Search)
    assert desk.form.first_name == "" and desk.form.last_name == ""
    assert len(attendance.by_id) == 1
    assert [r.name for r in desk.roster.rows()] == ["Jane Doe"]
    assert desk.roster.page == 1


def test_member_already_checked_in_is_blocked():
    async def scenario():
        desk, container, people, attendance = _memory_desk()
        people.add("Jane", "Doe")
        container.attendance_service.check_in(first_name="Jane", last_name="Doe")
        async with desk:
            await type_names(desk, "Jane", "Doe")
            note = desk.notifications.current
            submitted = await desk.submit()
            return desk, attendance, note, submitted

    desk, attendance, note, submitted = asyncio.run(scenario())

    assert desk.mode == Search(blocked=desk.last_result)
    assert desk.last_result.already_checked_in_today is True
    assert desk.can_submit is False
    assert note.kind == NotificationKind.WARNING
    assert submitted is None
    assert len(attendance.by_id) == 1


def test_unknown_person_registers_with_email():
    async def scenario():
        desk, _, people, attendance = _memory_desk()
        async with desk:
            await type_names(desk, "New", "Visitor")
            mode = desk.mode
            blocked_without_email = (desk.can_submit, await desk.submit(), dict(desk.field_errors))
            desk.set_email("new.visitor@")
            malformed = desk.can_submit
            desk.set_email("new.visitor@example.org")
            ready = desk.can_submit
            outcome = await desk.submit()
            return desk, people, attendance, mode, blocked_without_email, malformed, ready, outcome

    desk, people, attendance, mode, blocked, malformed, ready, outcome = asyncio.run(scenario())

    assert isinstance(mode, NewMember)
    assert blocked == (False, None, {"email": "Email is required for new members"})
    assert malformed is False
    assert ready is True
    assert outcome.is_new_member is True
    assert len(people.by_id) == 1
    rows = desk.roster.rows()
    assert [(r.name, r.is_first_time_visitor) for r in rows] == [("New Visitor", True)]


def test_second_desk_gets_duplicate_error_and_keeps_form():
    async def scenario():
        container, people, attendance = build_memory_container()
        people.add("Jane", "Doe")
        desk_a = CheckInWorkflow(ServiceCheckInGateway(container), settings=FAST)
        desk_b = CheckInWorkflow(ServiceCheckInGateway(container), settings=FAST)
        async with desk_a, desk_b:
            await type_names(desk_a, "Jane", "Doe")
            await type_names(desk_b, "Jane", "Doe")
            first = await desk_a.submit()
            second = await desk_b.submit()
            await desk_b.roster.refresh()
            return desk_b, attendance, first, second, desk_b.notifications.current

    desk_b, attendance, first, second, note = asyncio.run(scenario())

    assert first is not None
    assert second is None
    assert note.kind == NotificationKind.ERROR
    assert "already checked in" in note.message
    assert (desk_b.form.first_name, desk_b.form.last_name) == ("Jane", "Doe")
    assert isinstance(desk_b.mode, QuickCheckIn)
    assert len(attendance.by_id) == 1
    assert desk_b.roster.total == 1


def test_lookup_failure_routes_to_registration():
    async def scenario():
        gateway = FakeGateway()
        gateway.lookup_results[("Jane", "Doe")] = GatewayError("Service unavailable", status_code=503)
        async with CheckInWorkflow(gateway, settings=FAST) as desk:
            await type_names(desk, "Jane", "Doe")
            return desk.mode, desk.notifications.current

    mode, note = asyncio.run(scenario())

    assert isinstance(mode, NewMember)
    assert mode.result.failed is True
    assert note.kind == NotificationKind.WARNING


def test_editing_name_leaves_quick_check_in():
    async def scenario():
        gateway = FakeGateway()
        gateway.lookup_results[("Jane", "Doe")] = LookupResult(exists=True, person=person_ref())
        async with CheckInWorkflow(gateway, settings=FAST) as desk:
            await type_names(desk, "Jane", "Doe")
            before = desk.mode
            desk.set_last_name("Do")
            return before, desk.mode, desk.last_result, desk.can_submit

    before, after, last_result, can_submit = asyncio.run(scenario())

    assert isinstance(before, QuickCheckIn)
    assert after == Search()
    assert last_result is None
    assert can_submit is False


def test_submit_blocked_while_lookup_pending():
    async def scenario():
        gateway = FakeGateway()
        gateway.lookup_gates[("Jane", "Doe")] = asyncio.Event()
        gateway.lookup_results[("Jane", "Doe")] = LookupResult(exists=True, person=person_ref())
        async with CheckInWorkflow(gateway, settings=FAST) as desk:
            desk.set_names("Jane", "Doe")
            await wait_until(lambda: gateway.lookup_calls)
            pending_mode = desk.mode
            result = await desk.submit()
            gateway.lookup_gates[("Jane", "Doe")].set()
            await wait_until(lambda: not desk.resolver.pending)
            return gateway, pending_mode, result, desk.mode

    gateway, pending_mode, result, final_mode = asyncio.run(scenario())

    assert pending_mode == Search(pending=True)
    assert result is None
    assert gateway.checkin_requests == []
    assert isinstance(final_mode, QuickCheckIn)


def test_submission_failure_preserves_form_and_allows_retry():
    async def scenario():
        gateway = FakeGateway()
        gateway.checkin_result = GatewayError("Database is read-only", status_code=503)
        async with CheckInWorkflow(gateway, settings=FAST) as desk:
            await type_names(desk, "New", "Visitor")
            desk.set_email("nv@example.org")
            desk.set_phone("555-0199")
            failed = await desk.submit()
            state = (desk.form.email, desk.form.phone, desk.notifications.current, desk.can_submit)
            gateway.checkin_result = None
            retried = await desk.submit()
            return gateway, failed, state, retried

    gateway, failed, (email, phone, note, can_submit), retried = asyncio.run(scenario())

    assert failed is None
    assert (email, phone) == ("nv@example.org", "555-0199")
    assert note.kind == NotificationKind.ERROR
    assert note.message == "Database is read-only"
    assert can_submit is True
    assert retried is not None
    assert len(gateway.checkin_requests) == 2


def test_success_refreshes_roster_and_resets_page():
    async def scenario():
        gateway = FakeGateway()
        gateway.lookup_results[("Jane", "Doe")] = LookupResult(exists=True, person=person_ref())
        desk = CheckInWorkflow(gateway, settings=FAST)
        desk.roster.replace([entry(i) for i in range(20)])
        desk.roster.set_page(3)
        gateway.today = [entry(i) for i in range(21)]
        await type_names(desk, "Jane", "Doe")
        page_before = desk.roster.page
        await desk.submit()
        await desk.close()
        return desk, gateway, page_before

    desk, gateway, page_before = asyncio.run(scenario())

    assert page_before == 3
    assert gateway.today_calls == 1
    assert desk.roster.total == 21
    assert desk.roster.page == 1


def test_reset_clears_everything():
    async def scenario():
        gateway = FakeGateway()
        async with CheckInWorkflow(gateway, settings=FAST) as desk:
            await type_names(desk, "New", "Visitor")
            desk.set_email("bad")
            await desk.submit()
            desk.reset()
            return desk

    desk = asyncio.run(scenario())

    assert desk.mode == Search()
    assert desk.form.first_name == "" and desk.form.email == ""
    assert desk.field_errors == {}


def test_close_stops_background_work():
    async def scenario():
        gateway = FakeGateway()
        desk = CheckInWorkflow(gateway, settings=FAST)
        await desk.start()
        desk.set_names("Jane", "Doe")
        polling = desk.roster.polling
        await desk.close()
        await asyncio.sleep(0.05)
        return gateway, desk, polling

    gateway, desk, polling = asyncio.run(scenario())

    assert polling is True
    assert desk.roster.polling is False
    assert desk.resolver.pending is False
    assert gateway.lookup_calls == []
    assert desk.notifications.current is None


def test_ministries_fall_back_to_defaults():
    async def scenario():
        gateway = FakeGateway()
        gateway.ministries_error = GatewayError("down")
        desk = CheckInWorkflow(gateway, settings=FAST)
        loaded = await desk.load_ministries()
        gateway.ministries_error = None
        gateway.ministries = [Ministry(id="3", name="Choir Ministry")]
        reloaded = await desk.load_ministries()
        return desk, loaded, reloaded

    desk, loaded, reloaded = asyncio.run(scenario())

    assert loaded[0].name == "New Comer"
    assert all(m.is_placeholder for m in loaded)
    assert reloaded == [Ministry(id="3", name="Choir Ministry")]
    desk.select_ministry("3")
    assert desk.form.ministry.name == "Choir Ministry"
    desk.select_ministry(None)
    assert desk.form.ministry is None
    with pytest.raises(ValueError):
        desk.select_ministry("nope")


def test_settings_from_module():
    import config.testing as testing_settings

    settings = WorkflowSettings.from_settings(testing_settings)

    assert settings.debounce_seconds == 0.01
    assert settings.roster_page_size == 6


def test_page_resets_after_check_in_even_if_roster_refresh_fails():
    async def scenario():
        gateway = FakeGateway()
        gateway.lookup_results[("Jane", "Doe")] = LookupResult(exists=True, person=person_ref())
        desk = CheckInWorkflow(gateway, settings=FAST)
        desk.roster.replace([entry(i) for i in range(20)])
        desk.roster.set_page(3)
        gateway.today_error = GatewayError("down")
        await type_names(desk, "Jane", "Doe")
        outcome = await desk.submit()
        await desk.close()
        return desk, outcome

    desk, outcome = asyncio.run(scenario())

    assert outcome is not None
    assert desk.roster.page == 1
    assert desk.roster.total == 20


class _MinistryPayloadSession:
    """Every endpoint answers with a ministry list whose item has no name."""

    def request(self, method, url, **kwargs):
        return _json_response(200, {"success": True, "data": {"data": [{"id": 1}]}})

    def close(self):
        pass


def _json_response(status, body):
    resp = requests.Response()
    resp.status_code = status
    resp._content = json.dumps(body).encode("utf-8")
    return resp


def test_malformed_ministries_fall_back_to_defaults_at_startup():
    async def scenario():
        gateway = HttpCheckInGateway("http://desk.local/api/v1", session=_MinistryPayloadSession())
        async with CheckInWorkflow(gateway, settings=FAST) as desk:
            return list(desk.ministries)

    ministries = asyncio.run(scenario())

    assert [m.name for m in ministries][:2] == ["New Comer", "Worship Ministry"]
    assert all(m.is_placeholder for m in ministries)
