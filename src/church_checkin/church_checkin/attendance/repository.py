from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence, Tuple

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_person_and_date(self, person_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        person_id: int,
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus = AttendanceStatus.PRESENT,
        is_first_time_visitor: bool = False,
    ) -> int:
        """Insert today's record.

        Raises DuplicateCheckInError if (person_id, work_date) already exists.
        """
        raise NotImplementedError

    def register_and_check_in(
        self,
        *,
        first_name: str,
        last_name: str,
        email: Optional[str],
        phone: Optional[str],
        ministry_id: Optional[int],
        work_date: date,
        check_in_time: datetime,
    ) -> Tuple[int, int]:
        """Create the person and a first-time-visitor record atomically.

        Returns (person_id, attendance_id).
        """
        raise NotImplementedError

    def list_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        """Records of the day joined with their person, newest first."""
        raise NotImplementedError
