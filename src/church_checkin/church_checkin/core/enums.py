from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Attendance status stored with each record."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"


class ModeName(str, Enum):
    """Names of the check-in form modes (for display and logging)."""

    SEARCH = "search"
    QUICK_CHECK_IN = "quick_check_in"
    NEW_MEMBER = "new_member"
