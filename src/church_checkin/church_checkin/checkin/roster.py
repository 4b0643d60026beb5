from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from ..common.datetime_utils import format_clock, now_local
from ..core.constants import ROSTER_PAGE_SIZE, ROSTER_REFRESH_SECONDS, UNKNOWN_PERSON_LABEL
from ..core.exceptions import DomainError, GatewayError
from .gateway import CheckInGateway
from .model import AttendanceEntry

logger = logging.getLogger(__name__)


def total_pages(total: int, page_size: int) -> int:
    return max(1, math.ceil(max(0, total) / page_size))


def clamp_page(page: int, total: int, page_size: int = ROSTER_PAGE_SIZE) -> int:
    """Keep ``page`` within [1, max(1, ceil(total / page_size))]."""
    return max(1, min(int(page), total_pages(total, page_size)))


@dataclass(frozen=True)
class RosterRow:
    attendance_id: str
    name: str
    check_in_time: str
    is_first_time_visitor: bool

    @classmethod
    def from_entry(cls, entry: AttendanceEntry) -> "RosterRow":
        name = entry.person.full_name if entry.person and entry.person.full_name else UNKNOWN_PERSON_LABEL
        return cls(
            attendance_id=entry.id,
            name=name,
            check_in_time=format_clock(entry.check_in_time) if entry.check_in_time else "-",
            is_first_time_visitor=entry.is_first_time_visitor,
        )


class TodayRoster:
    """Paginated list of today's check-ins, polled in the background.

    Refreshes are not ordered against each other: whichever response arrives
    last replaces the data.
    """

    def __init__(
        self,
        gateway: CheckInGateway,
        *,
        page_size: int = ROSTER_PAGE_SIZE,
        refresh_seconds: float = ROSTER_REFRESH_SECONDS,
    ):
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self._gateway = gateway
        self._page_size = int(page_size)
        self._refresh_seconds = float(refresh_seconds)
        self._records: Tuple[AttendanceEntry, ...] = ()
        self._page = 1
        self._poll_task: Optional[asyncio.Task] = None
        self.last_refreshed: Optional[datetime] = None

    @property
    def records(self) -> Tuple[AttendanceEntry, ...]:
        return self._records

    @property
    def total(self) -> int:
        return len(self._records)

    @property
    def page(self) -> int:
        return self._page

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def total_pages(self) -> int:
        return total_pages(self.total, self._page_size)

    @property
    def polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def rows(self) -> List[RosterRow]:
        start = (self._page - 1) * self._page_size
        return [RosterRow.from_entry(e) for e in self._records[start : start + self._page_size]]

    def set_page(self, page: int) -> int:
        self._page = clamp_page(page, self.total, self._page_size)
        return self._page

    def next_page(self) -> int:
        return self.set_page(self._page + 1)

    def previous_page(self) -> int:
        return self.set_page(self._page - 1)

    def replace(self, records: Sequence[AttendanceEntry], *, reset_page: bool = False) -> None:
        self._records = tuple(records)
        self.set_page(1 if reset_page else self._page)

    async def refresh(self, *, reset_page: bool = False) -> bool:
        """Fetch today's records. On failure the previous data is kept.

        ``reset_page`` moves back to page 1 even when the fetch fails.
        """
        if reset_page:
            self.set_page(1)
        try:
            records = await self._gateway.get_today_attendance()
        except (GatewayError, DomainError) as e:
            logger.warning("Roster refresh failed: %s", e)
            return False

        self.replace(records, reset_page=reset_page)
        self.last_refreshed = now_local()
        logger.debug("Roster refreshed: %d records", self.total)
        return True

    def start(self) -> None:
        if self.polling:
            return
        self._poll_task = asyncio.get_running_loop().create_task(self._poll())

    async def stop(self) -> None:
        task, self._poll_task = self._poll_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _poll(self) -> None:
        while True:
            try:
                await self.refresh()
            except Exception:
                logger.exception("Roster poll failed; retrying in %ss", self._refresh_seconds)
            await asyncio.sleep(self._refresh_seconds)
