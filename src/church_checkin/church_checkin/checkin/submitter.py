from __future__ import annotations

import logging
from typing import Optional

from ..core.exceptions import DomainError, DuplicateCheckInError, GatewayError
from .gateway import CheckInGateway
from .model import CheckInOutcome, CheckInRequest
from .notifications import NotificationBus

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Check-in failed. Please try again."


class CheckInSubmitter:
    """Sends one check-in at a time and reports the outcome.

    Failures are reported through the notification bus and return ``None``;
    the caller keeps the form as it is so the operator can retry.
    """

    def __init__(self, gateway: CheckInGateway, notifications: NotificationBus):
        self._gateway = gateway
        self._notifications = notifications
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def submit(self, request: CheckInRequest) -> Optional[CheckInOutcome]:
        if self._in_flight:
            logger.debug("Ignoring submit while another check-in is in flight")
            return None

        self._in_flight = True
        try:
            outcome = await self._gateway.check_in(request)
        except DuplicateCheckInError as e:
            self._notifications.error(str(e) or "Already checked in today")
            return None
        except DomainError as e:
            self._notifications.error(str(e) or GENERIC_FAILURE)
            return None
        except GatewayError as e:
            self._notifications.error(e.message or GENERIC_FAILURE)
            return None
        finally:
            self._in_flight = False

        if outcome.is_new_member:
            self._notifications.success(f"Welcome, {outcome.person.full_name}! Registered and checked in.")
        else:
            self._notifications.success(f"{outcome.person.full_name} checked in successfully.")
        return outcome
