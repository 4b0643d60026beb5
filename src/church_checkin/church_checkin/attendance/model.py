from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus
from ..people.model import Person


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one person's attendance for one calendar day.

    ``person`` is the denormalized person row; it is ``None`` when the
    person was deleted or the join found nothing.
    """

    attendance_id: int
    person_id: Optional[int]
    work_date: date
    check_in_time: datetime
    status: AttendanceStatus = AttendanceStatus.PRESENT
    is_first_time_visitor: bool = False
    person: Optional[Person] = None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "personId": self.person_id,
            "date": self.work_date.isoformat(),
            "checkInTime": self.check_in_time.isoformat(),
            "status": self.status.value,
            "isFirstTimeVisitor": self.is_first_time_visitor,
            "user": self.person.to_dict() if self.person else None,
        }


@dataclass(frozen=True)
class LookupOutcome:
    exists: bool
    person: Optional[Person]
    already_checked_in_today: bool

    def to_dict(self) -> dict:
        return {
            "exists": self.exists,
            "user": self.person.to_dict() if self.person else None,
            "alreadyCheckedInToday": self.already_checked_in_today,
        }


@dataclass(frozen=True)
class CheckInResult:
    attendance: AttendanceRecord
    person: Person
    is_new_member: bool

    def to_dict(self) -> dict:
        return {
            "attendance": self.attendance.to_dict(),
            "user": self.person.to_dict(),
            "isNewMember": self.is_new_member,
        }
