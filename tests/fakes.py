from __future__ import annotations

import asyncio
from datetime import date, datetime
from typing import Callable, Optional

from src.church_checkin.church_checkin.attendance.model import AttendanceRecord
from src.church_checkin.church_checkin.checkin.model import (
    AttendanceEntry,
    CheckInOutcome,
    LookupResult,
    Ministry,
    PersonRef,
)
from src.church_checkin.church_checkin.container import wire_container
from src.church_checkin.church_checkin.core.enums import AttendanceStatus
from src.church_checkin.church_checkin.core.exceptions import DuplicateCheckInError
from src.church_checkin.church_checkin.ministries.model import Ministry as MinistryRow
from src.church_checkin.church_checkin.people.model import Person, normalize_name

SUNDAY = datetime(2026, 10, 18, 9, 30, 0)


class InMemoryPeople:
    def __init__(self):
        self.by_id: dict[int, Person] = {}
        self._id = 0

    def add(self, first_name: str, last_name: str, email: Optional[str] = None, phone: Optional[str] = None) -> Person:
        pid = self.create_person(first_name=first_name, last_name=last_name, email=email, phone=phone, ministry_id=None)
        return self.by_id[pid]

    def get_by_id(self, person_id: int) -> Optional[Person]:
        return self.by_id.get(int(person_id))

    def find_by_name(self, first_name: str, last_name: str):
        key = (normalize_name(first_name), normalize_name(last_name))
        return [
            p
            for p in sorted(self.by_id.values(), key=lambda p: p.person_id)
            if (normalize_name(p.first_name), normalize_name(p.last_name)) == key
        ]

    def create_person(self, *, first_name, last_name, email, phone, ministry_id) -> int:
        self._id += 1
        self.by_id[self._id] = Person(
            person_id=self._id,
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=phone,
            ministry_id=ministry_id,
        )
        return self._id


class InMemoryAttendance:
    """Mirrors the UNIQUE(person_id, work_date) key of the real table."""

    def __init__(self, people: InMemoryPeople):
        self._people = people
        self.by_id: dict[int, AttendanceRecord] = {}
        self._id = 0

    def _with_person(self, rec: AttendanceRecord) -> AttendanceRecord:
        person = self._people.get_by_id(rec.person_id) if rec.person_id is not None else None
        return AttendanceRecord(
            attendance_id=rec.attendance_id,
            person_id=rec.person_id,
            work_date=rec.work_date,
            check_in_time=rec.check_in_time,
            status=rec.status,
            is_first_time_visitor=rec.is_first_time_visitor,
            person=person,
        )

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        rec = self.by_id.get(int(attendance_id))
        return self._with_person(rec) if rec else None

    def get_for_person_and_date(self, person_id: int, work_date: date) -> Optional[AttendanceRecord]:
        for rec in self.by_id.values():
            if rec.person_id == person_id and rec.work_date == work_date:
                return self._with_person(rec)
        return None

    def create_checkin(self, *, person_id, work_date, check_in_time, status=AttendanceStatus.PRESENT, is_first_time_visitor=False) -> int:
        if any(r.person_id == person_id and r.work_date == work_date for r in self.by_id.values()):
            raise DuplicateCheckInError("Already checked in today")
        self._id += 1
        self.by_id[self._id] = AttendanceRecord(
            attendance_id=self._id,
            person_id=person_id,
            work_date=work_date,
            check_in_time=check_in_time,
            status=status,
            is_first_time_visitor=is_first_time_visitor,
        )
        return self._id

    def register_and_check_in(self, *, first_name, last_name, email, phone, ministry_id, work_date, check_in_time):
        person_id = self._people.create_person(
            first_name=first_name, last_name=last_name, email=email, phone=phone, ministry_id=ministry_id
        )
        attendance_id = self.create_checkin(
            person_id=person_id, work_date=work_date, check_in_time=check_in_time, is_first_time_visitor=True
        )
        return person_id, attendance_id

    def add_orphan(self, work_date: date, check_in_time: datetime) -> int:
        """A record whose person row is gone."""
        self._id += 1
        self.by_id[self._id] = AttendanceRecord(
            attendance_id=self._id, person_id=None, work_date=work_date, check_in_time=check_in_time
        )
        return self._id

    def list_for_date(self, work_date: date):
        items = [self._with_person(r) for r in self.by_id.values() if r.work_date == work_date]
        items.sort(key=lambda r: (r.check_in_time, r.attendance_id), reverse=True)
        return items


class InMemoryMinistries:
    def __init__(self, names=()):
        self.items = [MinistryRow(ministry_id=i + 1, name=n) for i, n in enumerate(names)]

    def get_by_id(self, ministry_id: int):
        return next((m for m in self.items if m.ministry_id == int(ministry_id)), None)

    def count(self) -> int:
        return len(self.items)

    def list_page(self, *, offset: int, limit: int):
        return sorted(self.items, key=lambda m: m.name)[offset : offset + limit]


class Clock:
    """Settable clock for the attendance service."""

    def __init__(self, now: datetime = SUNDAY):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def build_memory_container(*, ministries=("Choir Ministry", "Youth Ministry"), clock: Optional[Callable[[], datetime]] = None):
    people = InMemoryPeople()
    attendance = InMemoryAttendance(people)
    container = wire_container(
        people_repo=people,
        attendance_repo=attendance,
        ministries_repo=InMemoryMinistries(ministries),
        clock=clock or Clock(),
    )
    return container, people, attendance


def person_ref(first: str = "Jane", last: str = "Doe", pid: str = "1") -> PersonRef:
    return PersonRef(id=pid, first_name=first, last_name=last, email=f"{first.lower()}@example.org")


class FakeGateway:
    """Scriptable async gateway.

    ``lookup_results`` maps (first, last) to a LookupResult or an exception;
    ``lookup_gates`` holds events a lookup waits on before answering.
    """

    def __init__(self):
        self.lookup_calls: list[tuple[str, str]] = []
        self.lookup_results: dict[tuple[str, str], object] = {}
        self.lookup_gates: dict[tuple[str, str], asyncio.Event] = {}

        self.checkin_requests = []
        self.checkin_result: object = None
        self.checkin_gate: Optional[asyncio.Event] = None

        self.today: list[AttendanceEntry] = []
        self.today_calls = 0
        self.today_error: Optional[Exception] = None

        self.ministries: list[Ministry] = []
        self.ministries_error: Optional[Exception] = None

    async def lookup_user(self, first_name: str, last_name: str) -> LookupResult:
        key = (first_name, last_name)
        self.lookup_calls.append(key)
        gate = self.lookup_gates.get(key)
        if gate is not None:
            await gate.wait()
        result = self.lookup_results.get(key, LookupResult(exists=False))
        if isinstance(result, Exception):
            raise result
        return result

    async def check_in(self, request) -> CheckInOutcome:
        self.checkin_requests.append(request)
        if self.checkin_gate is not None:
            await self.checkin_gate.wait()
        result = self.checkin_result
        if isinstance(result, Exception):
            raise result
        if result is None:
            result = CheckInOutcome(person=person_ref(request.first_name, request.last_name), is_new_member=False)
        return result

    async def get_today_attendance(self):
        self.today_calls += 1
        await asyncio.sleep(0)
        if self.today_error is not None:
            raise self.today_error
        return list(self.today)

    async def get_ministries(self, page: int = 1, page_size: int = 50):
        if self.ministries_error is not None:
            raise self.ministries_error
        return list(self.ministries)


def entry(idx: int, person: Optional[PersonRef] = None, *, first_time: bool = False) -> AttendanceEntry:
    return AttendanceEntry(
        id=str(idx),
        person_id=person.id if person else None,
        check_in_time=SUNDAY,
        is_first_time_visitor=first_time,
        person=person,
    )


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    async def _poll():
        while not predicate():
            await asyncio.sleep(0.002)

    await asyncio.wait_for(_poll(), timeout)
