from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .ministries.mysql_ministry_repository import MySQLMinistryRepository
from .ministries.repository import MinistryRepository
from .ministries.service import MinistryService
from .people.mysql_person_repository import MySQLPersonRepository
from .people.repository import PersonRepository
from .people.service import PersonService


@dataclass(frozen=True)
class Container:
    people_repo: PersonRepository
    attendance_repo: AttendanceRepository
    ministries_repo: MinistryRepository

    person_service: PersonService
    attendance_service: AttendanceService
    ministry_service: MinistryService


def wire_container(
    *,
    people_repo: PersonRepository,
    attendance_repo: AttendanceRepository,
    ministries_repo: MinistryRepository,
    **service_kwargs,
) -> Container:
    """Build the services over any repository implementation."""
    person_service = PersonService(people_repo)
    ministry_service = MinistryService(ministries_repo)
    attendance_service = AttendanceService(attendance_repo, person_service, ministry_service, **service_kwargs)

    return Container(
        people_repo=people_repo,
        attendance_repo=attendance_repo,
        ministries_repo=ministries_repo,
        person_service=person_service,
        attendance_service=attendance_service,
        ministry_service=ministry_service,
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return wire_container(
        people_repo=MySQLPersonRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        ministries_repo=MySQLMinistryRepository(conn),
    )
