from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..core.exceptions import DomainError, DuplicateCheckInError, NotFoundError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def _ok(data, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def _fail(message: str, status: int, *, code: str | None = None):
    body = {"success": False, "message": message}
    if code:
        body["code"] = code
    return jsonify(body), status


def register(app: Flask, container: Container) -> None:
    @app.errorhandler(ValidationError)
    def _validation_error(e: ValidationError):
        return _fail(str(e), 400, code=e.code)

    @app.errorhandler(DuplicateCheckInError)
    def _duplicate_error(e: DuplicateCheckInError):
        return _fail(str(e), 409, code=e.code)

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return _fail(str(e), 404, code=e.code)

    @app.errorhandler(DomainError)
    def _domain_error(e: DomainError):
        return _fail(str(e), 400, code=e.code)

    @app.route(f"{API_PREFIX}/health", methods=["GET"], endpoint="api_health")
    def health():
        return _ok({"status": "ok"})

    @app.route(f"{API_PREFIX}/attendance/lookup", methods=["GET"], endpoint="api_attendance_lookup")
    def lookup():
        first_name = request.args.get("firstName", "")
        last_name = request.args.get("lastName", "")
        try:
            outcome = container.attendance_service.lookup(first_name, last_name)
        except DomainError:
            raise
        except Exception:
            logger.exception("Lookup failed")
            return _fail("System error during lookup", 500)
        return _ok(outcome.to_dict())

    @app.route(f"{API_PREFIX}/attendance/checkin", methods=["POST"], endpoint="api_attendance_checkin")
    def checkin():
        data = request.get_json(silent=True) or {}
        try:
            result = container.attendance_service.check_in(
                first_name=str(data.get("firstName") or ""),
                last_name=str(data.get("lastName") or ""),
                email=data.get("email"),
                phone=data.get("phone"),
                ministry_id=data.get("ministryId"),
            )
        except DomainError:
            raise
        except Exception:
            logger.exception("Check-in failed")
            return _fail("System error during check-in", 500)
        return _ok(result.to_dict(), 201)

    @app.route(f"{API_PREFIX}/attendance/today", methods=["GET"], endpoint="api_attendance_today")
    def today():
        try:
            records = container.attendance_service.today()
        except Exception:
            logger.exception("Loading today's attendance failed")
            return _fail("System error while loading attendance", 500)
        return _ok({"attendance": [r.to_dict() for r in records]})

    @app.route(f"{API_PREFIX}/ministries", methods=["GET"], endpoint="api_ministries")
    def ministries():
        try:
            page = int(request.args.get("page", "1"))
            limit = int(request.args.get("limit", "50"))
        except ValueError:
            return _fail("page and limit must be integers", 400, code=ValidationError.code)
        try:
            result = container.ministry_service.list(page, limit)
        except DomainError:
            raise
        except Exception:
            logger.exception("Loading ministries failed")
            return _fail("System error while loading ministries", 500)
        return _ok(result.to_dict())
