from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from ..core.constants import LOOKUP_DEBOUNCE_SECONDS, LOOKUP_MIN_NAME_LENGTH
from .gateway import CheckInGateway
from .model import LookupResult, NameQuery

logger = logging.getLogger(__name__)

ResultCallback = Callable[[NameQuery, LookupResult], None]
IssuedCallback = Callable[[NameQuery], None]


class IdentityResolver:
    """Debounced, cancellable name lookup.

    Every ``update()`` bumps a sequence number and cancels the previous
    debounce/lookup task. A lookup result is delivered to ``on_result`` only
    if its sequence number is still the latest one issued; anything older is
    dropped. Lookup errors are delivered as ``LookupResult.unavailable()``.
    """

    def __init__(
        self,
        gateway: CheckInGateway,
        *,
        on_result: ResultCallback,
        on_issued: Optional[IssuedCallback] = None,
        debounce_seconds: float = LOOKUP_DEBOUNCE_SECONDS,
        min_name_length: int = LOOKUP_MIN_NAME_LENGTH,
    ):
        self._gateway = gateway
        self._on_result = on_result
        self._on_issued = on_issued
        self._debounce_seconds = float(debounce_seconds)
        self._min_name_length = int(min_name_length)
        self._seq = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def sequence(self) -> int:
        return self._seq

    @property
    def pending(self) -> bool:
        """True while a debounce window or lookup call is outstanding."""
        return self._task is not None and not self._task.done()

    def update(self, query: NameQuery) -> bool:
        """Restart the debounce window for ``query``.

        Returns False (and schedules nothing) when either name is too short.
        """
        self.cancel()
        query = query.normalized()
        if not query.is_resolvable(self._min_name_length):
            return False

        seq = self._seq
        self._task = asyncio.get_running_loop().create_task(self._run(seq, query))
        return True

    def cancel(self) -> None:
        """Invalidate any scheduled or in-flight lookup."""
        self._seq += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def aclose(self) -> None:
        task = self._task
        self.cancel()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _run(self, seq: int, query: NameQuery) -> None:
        await asyncio.sleep(self._debounce_seconds)
        if seq != self._seq:
            return

        if self._on_issued:
            self._on_issued(query)
        logger.debug("Lookup #%d issued for %s %s", seq, query.first_name, query.last_name)

        try:
            result = await self._gateway.lookup_user(query.first_name, query.last_name)
        except Exception as e:
            logger.warning("Lookup #%d for %s %s failed: %s", seq, query.first_name, query.last_name, e)
            result = LookupResult.unavailable()

        if seq != self._seq:
            logger.debug("Discarding stale lookup #%d (latest is #%d)", seq, self._seq)
            return

        self._task = None
        self._on_result(query, result)
