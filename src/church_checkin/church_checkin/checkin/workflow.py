from __future__ import annotations

import logging
from dataclasses import dataclass
from types import ModuleType
from typing import Dict, List, Optional

from ..core import constants
from ..core.exceptions import DomainError, GatewayError
from .gateway import CheckInGateway
from .model import CheckInOutcome, LookupResult, Ministry, NameQuery, default_ministries
from .modes import CheckInForm, Mode, ModeController, Search
from .notifications import NotificationBus
from .resolver import IdentityResolver
from .roster import TodayRoster
from .submitter import CheckInSubmitter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkflowSettings:
    debounce_seconds: float = constants.LOOKUP_DEBOUNCE_SECONDS
    min_name_length: int = constants.LOOKUP_MIN_NAME_LENGTH
    roster_refresh_seconds: float = constants.ROSTER_REFRESH_SECONDS
    roster_page_size: int = constants.ROSTER_PAGE_SIZE
    notification_seconds: float = constants.NOTIFICATION_SECONDS

    @classmethod
    def from_settings(cls, settings: ModuleType) -> "WorkflowSettings":
        defaults = cls()
        return cls(
            debounce_seconds=float(getattr(settings, "LOOKUP_DEBOUNCE_SECONDS", defaults.debounce_seconds)),
            min_name_length=int(getattr(settings, "LOOKUP_MIN_NAME_LENGTH", defaults.min_name_length)),
            roster_refresh_seconds=float(getattr(settings, "ROSTER_REFRESH_SECONDS", defaults.roster_refresh_seconds)),
            roster_page_size=int(getattr(settings, "ROSTER_PAGE_SIZE", defaults.roster_page_size)),
            notification_seconds=float(getattr(settings, "NOTIFICATION_SECONDS", defaults.notification_seconds)),
        )


class CheckInWorkflow:
    """The check-in desk: typed name -> lookup -> mode -> submit -> roster.

    Use as ``async with CheckInWorkflow(gateway) as desk:``; leaving the block
    cancels the debounce timer, any in-flight lookup and the roster poll.
    """

    def __init__(
        self,
        gateway: CheckInGateway,
        *,
        settings: Optional[WorkflowSettings] = None,
        notifications: Optional[NotificationBus] = None,
    ):
        self.settings = settings or WorkflowSettings()
        self._gateway = gateway
        self.notifications = notifications or NotificationBus(duration=self.settings.notification_seconds)
        self.form = CheckInForm()
        self.modes = ModeController()
        self.resolver = IdentityResolver(
            gateway,
            on_result=self._on_lookup_result,
            on_issued=self._on_lookup_issued,
            debounce_seconds=self.settings.debounce_seconds,
            min_name_length=self.settings.min_name_length,
        )
        self.submitter = CheckInSubmitter(gateway, self.notifications)
        self.roster = TodayRoster(
            gateway,
            page_size=self.settings.roster_page_size,
            refresh_seconds=self.settings.roster_refresh_seconds,
        )
        self.ministries: List[Ministry] = default_ministries()
        self.field_errors: Dict[str, str] = {}

    async def __aenter__(self) -> "CheckInWorkflow":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def start(self) -> None:
        await self.load_ministries()
        self.roster.start()

    async def close(self) -> None:
        await self.resolver.aclose()
        await self.roster.stop()
        self.notifications.close()

    @property
    def mode(self) -> Mode:
        return self.modes.mode

    @property
    def last_result(self) -> Optional[LookupResult]:
        return self.modes.last_result

    @property
    def can_submit(self) -> bool:
        if self.resolver.pending:
            return False
        return self.modes.can_submit(self.form, submitting=self.submitter.in_flight)

    async def load_ministries(self) -> List[Ministry]:
        try:
            ministries = await self._gateway.get_ministries(1, constants.DEFAULT_MINISTRY_PAGE_SIZE)
        except (GatewayError, DomainError) as e:
            logger.warning("Could not load ministries, using defaults: %s", e)
            ministries = []
        self.ministries = list(ministries) or default_ministries()
        return self.ministries

    def set_first_name(self, value: str) -> None:
        self._edit_names(value, self.form.last_name)

    def set_last_name(self, value: str) -> None:
        self._edit_names(self.form.first_name, value)

    def set_names(self, first_name: str, last_name: str) -> None:
        self._edit_names(first_name, last_name)

    def set_email(self, value: str) -> None:
        self.form.email = value
        self.field_errors.pop("email", None)

    def set_phone(self, value: str) -> None:
        self.form.phone = value

    def select_ministry(self, ministry_id: Optional[str]) -> None:
        if not ministry_id:
            self.form.ministry = None
            return
        for ministry in self.ministries:
            if ministry.id == ministry_id:
                self.form.ministry = ministry
                return
        raise ValueError(f"Unknown ministry: {ministry_id}")

    async def submit(self) -> Optional[CheckInOutcome]:
        """Check in the current form. Returns ``None`` when blocked or failed."""
        if self.resolver.pending or isinstance(self.mode, Search) or self.submitter.in_flight:
            logger.debug("Submit blocked in mode %s", self.mode.name.value)
            return None

        self.field_errors = self.modes.validate(self.form)
        if self.field_errors:
            return None

        outcome = await self.submitter.submit(self.modes.build_request(self.form))
        if outcome is None:
            return None

        self.reset()
        await self.roster.refresh(reset_page=True)
        return outcome

    def reset(self) -> None:
        self.resolver.cancel()
        self.form.clear()
        self.modes.reset()
        self.field_errors = {}

    def _edit_names(self, first_name: str, last_name: str) -> None:
        if first_name == self.form.first_name and last_name == self.form.last_name:
            return
        self.form.first_name = first_name
        self.form.last_name = last_name
        self.field_errors.pop("first_name", None)
        self.field_errors.pop("last_name", None)
        self.modes.names_edited()
        self.resolver.update(self.form.query)

    def _on_lookup_issued(self, query: NameQuery) -> None:
        self.modes.lookup_issued()

    def _on_lookup_result(self, query: NameQuery, result: LookupResult) -> None:
        if query != self.form.query:
            logger.debug("Dropping lookup result for outdated name %s %s", query.first_name, query.last_name)
            return
        notice = self.modes.lookup_settled(result)
        if notice:
            self.notifications.notify(notice.kind, notice.message)
