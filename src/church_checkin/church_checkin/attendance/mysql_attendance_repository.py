from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence, Tuple

from mysql.connector.errors import IntegrityError

from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateCheckInError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from ..people.mysql_person_repository import row_to_person
from .model import AttendanceRecord
from .repository import AttendanceRepository

_SELECT = """
    SELECT a.attendance_id, a.person_id, a.work_date, a.check_in_time, a.status, a.is_first_time_visitor,
           p.person_id AS p_person_id, p.first_name AS p_first_name, p.last_name AS p_last_name,
           p.email AS p_email, p.phone AS p_phone, p.ministry_id AS p_ministry_id, p.created_at AS p_created_at
    FROM attendance_records a
    LEFT JOIN people p ON p.person_id = a.person_id
"""

_PERSON_DAY_KEY = "uq_attendance_person_day"

_INSERT = """
    INSERT INTO attendance_records(person_id, work_date, check_in_time, status, is_first_time_visitor)
    VALUES(%s,%s,%s,%s,%s)
"""


def _row_to_record(r: Dict[str, Any]) -> AttendanceRecord:
    person = row_to_person(r, prefix="p_") if r.get("p_person_id") is not None else None
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        person_id=r.get("person_id"),
        work_date=r["work_date"],
        check_in_time=r["check_in_time"],
        status=AttendanceStatus(r["status"]),
        is_first_time_visitor=bool(r.get("is_first_time_visitor")),
        person=person,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE a.attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_for_person_and_date(self, person_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE a.person_id=%s AND a.work_date=%s", (int(person_id), work_date))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def create_checkin(
        self,
        *,
        person_id: int,
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus = AttendanceStatus.PRESENT,
        is_first_time_visitor: bool = False,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(_INSERT, (int(person_id), work_date, check_in_time, status.value, int(is_first_time_visitor)))
                return int(cur.lastrowid)
        except IntegrityError as e:
            if is_duplicate_key(e, _PERSON_DAY_KEY):
                raise DuplicateCheckInError("Already checked in today") from e
            raise

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
        # Single transaction: the person row is rolled back if the check-in insert fails.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO people(first_name, last_name, email, phone, ministry_id)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (first_name, last_name, email, phone, ministry_id),
            )
            person_id = int(cur.lastrowid)
            cur.execute(_INSERT, (person_id, work_date, check_in_time, AttendanceStatus.PRESENT.value, 1))
            return person_id, int(cur.lastrowid)

    def list_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE a.work_date=%s ORDER BY a.check_in_time DESC, a.attendance_id DESC",
                (work_date,),
            )
            return [_row_to_record(r) for r in fetchall(cur)]
