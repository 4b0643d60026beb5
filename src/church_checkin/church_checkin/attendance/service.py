from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional, Union

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_email, require_non_empty
from ..core.exceptions import DuplicateCheckInError, ValidationError
from ..ministries.service import MinistryService
from ..people.model import Person
from ..people.service import PersonService
from .model import AttendanceRecord, CheckInResult, LookupOutcome
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use cases behind the check-in desk: lookup, check-in, today's list.

    At most one record exists per person per calendar day. The repository
    enforces it as well (unique key), so a concurrent second insert still
    surfaces as DuplicateCheckInError.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        people: PersonService,
        ministries: MinistryService | None = None,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._people = people
        self._ministries = ministries
        self._clock = clock

    def lookup(self, first_name: str, last_name: str, *, now: datetime | None = None) -> LookupOutcome:
        now = now or self._clock()
        person = self._people.find_by_name(first_name, last_name)
        if not person:
            return LookupOutcome(exists=False, person=None, already_checked_in_today=False)

        existing = self._attendance.get_for_person_and_date(person.person_id, now.date())
        return LookupOutcome(exists=True, person=person, already_checked_in_today=existing is not None)

    def check_in(
        self,
        *,
        first_name: str,
        last_name: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        ministry_id: Union[int, str, None] = None,
        now: datetime | None = None,
    ) -> CheckInResult:
        now = now or self._clock()
        today = now.date()
        first = require_non_empty(first_name, "First name")
        last = require_non_empty(last_name, "Last name")

        person = self._people.find_by_name(first, last)
        if person:
            if self._attendance.get_for_person_and_date(person.person_id, today):
                raise DuplicateCheckInError(f"{person.full_name} is already checked in today")

            attendance_id = self._attendance.create_checkin(
                person_id=person.person_id,
                work_date=today,
                check_in_time=now,
            )
            logger.info("Checked in person_id=%s attendance_id=%s", person.person_id, attendance_id)
            return CheckInResult(
                attendance=self._load_record(attendance_id, person, now, first_time=False),
                person=person,
                is_new_member=False,
            )

        clean_email = require_email(email)
        clean_phone = optional_text(phone)
        resolved_ministry = self._resolve_ministry(ministry_id)

        person_id, attendance_id = self._attendance.register_and_check_in(
            first_name=first,
            last_name=last,
            email=clean_email,
            phone=clean_phone,
            ministry_id=resolved_ministry,
            work_date=today,
            check_in_time=now,
        )
        person = self._people.get(person_id) or Person(
            person_id=person_id,
            first_name=first,
            last_name=last,
            email=clean_email,
            phone=clean_phone,
            ministry_id=resolved_ministry,
        )
        logger.info("Registered and checked in person_id=%s attendance_id=%s", person_id, attendance_id)
        return CheckInResult(
            attendance=self._load_record(attendance_id, person, now, first_time=True),
            person=person,
            is_new_member=True,
        )

    def today(self, *, now: datetime | None = None) -> List[AttendanceRecord]:
        now = now or self._clock()
        return list(self._attendance.list_for_date(now.date()))

    def _resolve_ministry(self, ministry_id: Union[int, str, None]) -> Optional[int]:
        if ministry_id is None or (isinstance(ministry_id, str) and not ministry_id.strip()):
            return None
        try:
            value = int(ministry_id)
        except (TypeError, ValueError):
            raise ValidationError("Unknown ministry") from None

        if self._ministries and not self._ministries.get(value):
            raise ValidationError("Unknown ministry")
        return value

    def _load_record(self, attendance_id: int, person: Person, now: datetime, *, first_time: bool) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if record:
            return record
        return AttendanceRecord(
            attendance_id=attendance_id,
            person_id=person.person_id,
            work_date=now.date(),
            check_in_time=now,
            is_first_time_visitor=first_time,
            person=person,
        )
