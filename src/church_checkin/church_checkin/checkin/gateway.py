from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Protocol

import requests

from ..container import Container
from ..core.constants import DEFAULT_MINISTRY_PAGE_SIZE
from ..core.exceptions import DomainError, DuplicateCheckInError, GatewayError, NotFoundError, ValidationError
from .model import AttendanceEntry, CheckInOutcome, CheckInRequest, LookupResult, Ministry

logger = logging.getLogger(__name__)


class CheckInGateway(Protocol):
    """Backend calls used by the check-in desk. Every call is a suspension point."""

    async def lookup_user(self, first_name: str, last_name: str) -> LookupResult:
        raise NotImplementedError

    async def check_in(self, request: CheckInRequest) -> CheckInOutcome:
        """Raises DuplicateCheckInError when today's record already exists."""
        raise NotImplementedError

    async def get_today_attendance(self) -> List[AttendanceEntry]:
        raise NotImplementedError

    async def get_ministries(self, page: int = 1, page_size: int = DEFAULT_MINISTRY_PAGE_SIZE) -> List[Ministry]:
        raise NotImplementedError


def _extract_data(body: Any) -> Any:
    # Responses are wrapped as {"success": ..., "data": ...}
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


@contextmanager
def _malformed(what: str) -> Iterator[None]:
    """Turn a response body of the wrong shape into a GatewayError."""
    try:
        yield
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.warning("Malformed %s response: %r", what, e)
        raise GatewayError(f"Invalid {what} response from the check-in server") from e


class HttpCheckInGateway(CheckInGateway):
    """Talks to the JSON API with ``requests``; blocking calls run in a worker thread."""

    def __init__(self, base_url: str, *, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self._base_url = base_url.rstrip("/")
        self._timeout = float(timeout)
        self._session = session or requests.Session()

    def close(self) -> None:
        self._session.close()

    def _request(self, method: str, path: str, *, params: Optional[dict] = None, json: Optional[dict] = None) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.request(method, url, params=params, json=json, timeout=self._timeout)
        except requests.exceptions.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise GatewayError("Could not reach the check-in server") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        message = body.get("message") if isinstance(body, dict) else None
        if response.status_code == 409:
            raise DuplicateCheckInError(message or "Already checked in today")
        if response.status_code == 400:
            raise ValidationError(message or "Invalid request")
        if response.status_code == 404:
            raise NotFoundError(message or "Not found")
        if not response.ok:
            raise GatewayError(message or f"Request failed ({response.status_code})", status_code=response.status_code)
        if body is None:
            raise GatewayError("Invalid response from the check-in server", status_code=response.status_code)
        return _extract_data(body)

    async def _call(self, method: str, path: str, **kwargs) -> Any:
        return await asyncio.to_thread(self._request, method, path, **kwargs)

    async def lookup_user(self, first_name: str, last_name: str) -> LookupResult:
        data = await self._call("GET", "/attendance/lookup", params={"firstName": first_name, "lastName": last_name})
        with _malformed("lookup"):
            return LookupResult.from_dict(data or {})

    async def check_in(self, request: CheckInRequest) -> CheckInOutcome:
        data = await self._call("POST", "/attendance/checkin", json=request.to_dict())
        with _malformed("check-in"):
            return CheckInOutcome.from_dict(data)

    async def get_today_attendance(self) -> List[AttendanceEntry]:
        data = await self._call("GET", "/attendance/today")
        with _malformed("attendance"):
            items = (data.get("attendance") if isinstance(data, dict) else data) or []
            return [AttendanceEntry.from_dict(item) for item in items if isinstance(item, dict)]

    async def get_ministries(self, page: int = 1, page_size: int = DEFAULT_MINISTRY_PAGE_SIZE) -> List[Ministry]:
        data = await self._call("GET", "/ministries", params={"page": page, "limit": page_size})
        with _malformed("ministries"):
            items = (data.get("data") if isinstance(data, dict) else data) or []
            return [Ministry.from_dict(item) for item in items if isinstance(item, dict)]


class ServiceCheckInGateway(CheckInGateway):
    """Calls the backend services in-process (demo script, end-to-end tests).

    Results go through the same dict shape the HTTP API returns.
    """

    def __init__(self, container: Container):
        self._container = container

    async def _call(self, func, *args, **kwargs) -> Any:
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except DomainError:
            raise
        except Exception as e:
            logger.exception("Backend call %s failed", getattr(func, "__name__", func))
            raise GatewayError("System error in the check-in service") from e

    async def lookup_user(self, first_name: str, last_name: str) -> LookupResult:
        outcome = await self._call(self._container.attendance_service.lookup, first_name, last_name)
        return LookupResult.from_dict(outcome.to_dict())

    async def check_in(self, request: CheckInRequest) -> CheckInOutcome:
        result = await self._call(
            self._container.attendance_service.check_in,
            first_name=request.first_name,
            last_name=request.last_name,
            email=request.email,
            phone=request.phone,
            ministry_id=request.ministry_id,
        )
        return CheckInOutcome.from_dict(result.to_dict())

    async def get_today_attendance(self) -> List[AttendanceEntry]:
        records = await self._call(self._container.attendance_service.today)
        return [AttendanceEntry.from_dict(r.to_dict()) for r in records]

    async def get_ministries(self, page: int = 1, page_size: int = DEFAULT_MINISTRY_PAGE_SIZE) -> List[Ministry]:
        result = await self._call(self._container.ministry_service.list, page, page_size)
        payload: Dict[str, Any] = result.to_dict()
        return [Ministry.from_dict(item) for item in payload["data"]]
