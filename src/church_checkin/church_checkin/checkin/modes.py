"""Check-in form modes and the transitions between them.

    Search ──(debounce elapses)──> Search(pending)
    Search(pending) ──exists, already checked in──> Search(blocked)
    Search(pending) ──exists──> QuickCheckIn
    Search(pending) ──not found / lookup failed──> NewMember
    QuickCheckIn | NewMember ──name edited──> Search
    any ──reset──> Search

Each mode is its own frozen dataclass so a mode can only carry the data that
makes sense for it (a QuickCheckIn always has a matched person).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Dict, Optional, Tuple, Union

from ..common.validators import is_valid_email
from ..core.enums import ModeName, NotificationKind
from .model import CheckInRequest, LookupResult, Ministry, NameQuery, PersonRef


@dataclass(frozen=True)
class Search:
    pending: bool = False
    # Set when the typed name matched someone already checked in today
    blocked: Optional[LookupResult] = None

    name: ClassVar[ModeName] = ModeName.SEARCH


@dataclass(frozen=True)
class QuickCheckIn:
    result: LookupResult

    name: ClassVar[ModeName] = ModeName.QUICK_CHECK_IN

    def __post_init__(self):
        r = self.result
        if not r.exists or r.person is None or r.already_checked_in_today:
            raise ValueError("QuickCheckIn needs a matched person not yet checked in")

    @property
    def person(self) -> PersonRef:
        return self.result.person


@dataclass(frozen=True)
class NewMember:
    result: LookupResult = field(default_factory=lambda: LookupResult(exists=False))

    name: ClassVar[ModeName] = ModeName.NEW_MEMBER

    def __post_init__(self):
        if self.result.exists:
            raise ValueError("NewMember cannot carry a matched person")


Mode = Union[Search, QuickCheckIn, NewMember]


@dataclass(frozen=True)
class Notice:
    kind: NotificationKind
    message: str


@dataclass
class CheckInForm:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    ministry: Optional[Ministry] = None

    @property
    def query(self) -> NameQuery:
        return NameQuery(self.first_name, self.last_name).normalized()

    def clear(self) -> None:
        self.first_name = ""
        self.last_name = ""
        self.email = ""
        self.phone = ""
        self.ministry = None


def transition_on_result(mode: Mode, result: LookupResult) -> Tuple[Mode, Optional[Notice]]:
    """Apply a settled lookup. Only a pending Search reacts to results."""
    if not isinstance(mode, Search) or not mode.pending:
        return mode, None

    if result.exists and result.already_checked_in_today:
        who = result.person.full_name if result.person else "This person"
        return Search(blocked=result), Notice(NotificationKind.WARNING, f"{who} is already checked in today")

    if result.exists:
        return QuickCheckIn(result), Notice(
            NotificationKind.SUCCESS, f"Welcome back, {result.person.full_name}! Ready to check in."
        )

    if result.failed:
        return NewMember(result), Notice(
            NotificationKind.WARNING, "Could not verify membership right now. Continue with registration."
        )
    return NewMember(result), Notice(
        NotificationKind.WARNING, "No member found with that name. Please complete registration."
    )


def required_fields(mode: Mode) -> Tuple[str, ...]:
    if isinstance(mode, NewMember):
        return ("first_name", "last_name", "email")
    return ("first_name", "last_name")


def validate_form(mode: Mode, form: CheckInForm) -> Dict[str, str]:
    """Per-field error messages; empty when the form can be submitted in ``mode``."""
    errors: Dict[str, str] = {}
    if not form.first_name.strip():
        errors["first_name"] = "First name is required"
    if not form.last_name.strip():
        errors["last_name"] = "Last name is required"

    email = form.email.strip()
    if "email" in required_fields(mode) and not email:
        errors["email"] = "Email is required for new members"
    elif email and not is_valid_email(email):
        errors["email"] = "Invalid email format"
    return errors


class ModeController:
    """Holds the current mode and applies the transition table."""

    def __init__(self):
        self._mode: Mode = Search()

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def last_result(self) -> Optional[LookupResult]:
        mode = self._mode
        if isinstance(mode, Search):
            return mode.blocked
        return mode.result

    def lookup_issued(self) -> Mode:
        self._mode = Search(pending=True)
        return self._mode

    def lookup_settled(self, result: LookupResult) -> Optional[Notice]:
        self._mode, notice = transition_on_result(self._mode, result)
        return notice

    def names_edited(self) -> Mode:
        self._mode = Search()
        return self._mode

    def reset(self) -> Mode:
        self._mode = Search()
        return self._mode

    def validate(self, form: CheckInForm) -> Dict[str, str]:
        return validate_form(self._mode, form)

    def can_submit(self, form: CheckInForm, *, submitting: bool = False) -> bool:
        if submitting or isinstance(self._mode, Search):
            return False
        last = self.last_result
        if last is not None and last.already_checked_in_today:
            return False
        return not self.validate(form)

    def build_request(self, form: CheckInForm) -> CheckInRequest:
        ministry = form.ministry
        return CheckInRequest(
            first_name=form.first_name.strip(),
            last_name=form.last_name.strip(),
            email=form.email.strip() or None,
            phone=form.phone.strip() or None,
            ministry_id=ministry.id if ministry and not ministry.is_placeholder else None,
        )
