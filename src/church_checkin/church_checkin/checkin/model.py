"""Value objects exchanged between the check-in desk and the API.

Field names follow the API's camelCase JSON on the wire (``from_dict`` /
``to_dict``) and snake_case in Python.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..common.datetime_utils import parse_iso_datetime
from ..core.constants import DEFAULT_MINISTRIES, LOOKUP_MIN_NAME_LENGTH

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NameQuery:
    first_name: str = ""
    last_name: str = ""

    def normalized(self) -> "NameQuery":
        return NameQuery(self.first_name.strip(), self.last_name.strip())

    def is_resolvable(self, min_length: int = LOOKUP_MIN_NAME_LENGTH) -> bool:
        q = self.normalized()
        return len(q.first_name) >= min_length and len(q.last_name) >= min_length


@dataclass(frozen=True)
class PersonRef:
    id: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PersonRef":
        return cls(
            id=str(data.get("id") if data.get("id") is not None else data["_id"]),
            first_name=str(data.get("firstName") or ""),
            last_name=str(data.get("lastName") or ""),
            email=data.get("email"),
            phone=data.get("phone"),
        )


@dataclass(frozen=True)
class LookupResult:
    """Outcome of one settled lookup.

    ``failed`` marks a lookup that errored and was turned into "not found".
    """

    exists: bool
    person: Optional[PersonRef] = None
    already_checked_in_today: bool = False
    failed: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LookupResult":
        user = data.get("user")
        person = PersonRef.from_dict(user) if isinstance(user, dict) else None
        # "exists" without a person is unusable for a quick check-in
        exists = bool(data.get("exists")) and person is not None
        return cls(
            exists=exists,
            person=person if exists else None,
            already_checked_in_today=exists and bool(data.get("alreadyCheckedInToday")),
        )

    @classmethod
    def unavailable(cls) -> "LookupResult":
        return cls(exists=False, failed=True)


@dataclass(frozen=True)
class CheckInRequest:
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    ministry_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"firstName": self.first_name, "lastName": self.last_name}
        if self.email:
            body["email"] = self.email
        if self.phone:
            body["phone"] = self.phone
        if self.ministry_id:
            body["ministryId"] = self.ministry_id
        return body


@dataclass(frozen=True)
class AttendanceEntry:
    id: str
    person_id: Optional[str]
    check_in_time: Optional[datetime]
    is_first_time_visitor: bool = False
    person: Optional[PersonRef] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AttendanceEntry":
        """Lenient parse: a broken person or timestamp degrades to ``None``."""
        person = None
        user = data.get("user") or data.get("userId")
        if isinstance(user, dict):
            try:
                person = PersonRef.from_dict(user)
            except (KeyError, TypeError, ValueError):
                logger.warning("Attendance %s has an unreadable person reference", data.get("id"))

        person_id = data.get("personId")
        if person_id is None and isinstance(data.get("userId"), (str, int)):
            person_id = data.get("userId")

        check_in_time = None
        raw_time = data.get("checkInTime")
        if isinstance(raw_time, str):
            try:
                check_in_time = parse_iso_datetime(raw_time)
            except ValueError:
                logger.warning("Attendance %s has an unreadable checkInTime %r", data.get("id"), raw_time)

        return cls(
            id=str(data.get("id") if data.get("id") is not None else data.get("_id", "")),
            person_id=str(person_id) if person_id is not None else None,
            check_in_time=check_in_time,
            is_first_time_visitor=bool(data.get("isFirstTimeVisitor")),
            person=person,
        )


@dataclass(frozen=True)
class CheckInOutcome:
    person: PersonRef
    is_new_member: bool
    attendance: Optional[AttendanceEntry] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CheckInOutcome":
        attendance = data.get("attendance")
        return cls(
            person=PersonRef.from_dict(data["user"]),
            is_new_member=bool(data.get("isNewMember")),
            attendance=AttendanceEntry.from_dict(attendance) if isinstance(attendance, dict) else None,
        )


@dataclass(frozen=True)
class Ministry:
    id: str
    name: str
    # Built-in fallback entries have no server-side id
    is_placeholder: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ministry":
        return cls(id=str(data.get("id") if data.get("id") is not None else data["_id"]), name=str(data["name"]))


def default_ministries() -> list[Ministry]:
    return [Ministry(id=key, name=name, is_placeholder=True) for key, name in DEFAULT_MINISTRIES]
