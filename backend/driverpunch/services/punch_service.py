# Overview: Punch ledger and punch-state machine; encapsulates business logic and database work.

"""
Punch Service

WHY: Drivers punch in at the start of a run and out at the end. The ledger
(punch_logs) is the only source of truth; a driver's state is derived from
the latest row, never stored.

STATE MACHINE (per driver):
- OUT (initial, or latest row is "out") -> next punch is "in"
- IN (latest row is "in")               -> next punch is "out"

AUTHORIZATION: PIN (exact match) or face (see face_service). Failed
attempts create no row and are not counted; retries are unlimited.

CONCURRENCY: read-latest-then-append is not atomic. Two sessions punching
the same driver at once can both append the same direction.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Driver, PunchLog
from ..models.punches import PUNCH_IN, PUNCH_OUT, PUNCH_TYPES, METHOD_FACE, METHOD_PIN, PUNCH_METHODS
from . import snapshot_service
from .driver_service import verify_pin
from .face_service import FaceMatchResult, compare_faces
from driverpunch.time_utils import utcnow


class PunchError(Exception):
    """Raised for invalid punch operations."""
    pass


class DriverUnavailable(PunchError):
    """Driver missing from the directory or deactivated."""
    pass


class PunchRejected(PunchError):
    """Authorization failed (wrong PIN or face mismatch). No row was written."""

    def __init__(self, message: str, *, reason: str, face: FaceMatchResult | None = None):
        super().__init__(message)
        self.reason = reason
        self.face = face

    def to_dict(self) -> dict:
        body = {"error": str(self), "reason": self.reason}
        if self.face is not None:
            body["face"] = self.face.to_dict()
        return body


@dataclass
class PunchResult:
    punch_log: PunchLog
    face: FaceMatchResult | None = None

    @property
    def opens_return_form(self) -> bool:
        return self.punch_log.punch_type == PUNCH_IN

    def to_dict(self) -> dict:
        body = {
            "punch_log": self.punch_log.to_dict(),
            "next_step": "return_form" if self.opens_return_form else None,
        }
        if self.face is not None:
            body["face"] = self.face.to_dict()
        return body


# =============================================================================
# STATE MACHINE
# =============================================================================

def next_punch_type(last_punch: PunchLog | None) -> str:
    """Only the latest entry matters: none or "out" -> "in", otherwise "out"."""
    if last_punch is None or last_punch.punch_type == PUNCH_OUT:
        return PUNCH_IN
    return PUNCH_OUT


def is_punched_in(last_punch: PunchLog | None) -> bool:
    return last_punch is not None and last_punch.punch_type == PUNCH_IN


# =============================================================================
# LEDGER READS
# =============================================================================

def get_last_punch(driver_id: str) -> PunchLog | None:
    try:
        return (
            db.session.query(PunchLog)
            .filter_by(driver_id=driver_id)
            .order_by(PunchLog.timestamp.desc(), PunchLog.id.desc())
            .first()
        )
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error fetching last punch log for %s", driver_id)
        return None


def list_punches(driver_id: str | None = None, limit: int | None = None) -> list[PunchLog]:
    """Newest first, optionally for one driver."""
    try:
        query = db.session.query(PunchLog)
        if driver_id:
            query = query.filter_by(driver_id=driver_id)
        query = query.order_by(PunchLog.timestamp.desc(), PunchLog.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error fetching punch logs")
        return []


def punch_status(driver: Driver) -> dict:
    last = get_last_punch(driver.driver_id)
    return {
        "driver": driver.to_dict(),
        "last_punch": last.to_dict() if last else None,
        "is_punched_in": is_punched_in(last),
        "next_action": next_punch_type(last),
    }


# =============================================================================
# LEDGER WRITES
# =============================================================================

def record_punch(
    driver: Driver,
    punch_type: str,
    method: str,
    location: str | None = None,
    timestamp: datetime | None = None,
) -> PunchLog:
    """Append one ledger row and push the new punch snapshot."""
    if punch_type not in PUNCH_TYPES:
        raise PunchError(f"Invalid punch type: {punch_type}")
    if method not in PUNCH_METHODS:
        raise PunchError(f"Invalid punch method: {method}")

    log = PunchLog(
        driver_id=driver.driver_id,
        driver_name=driver.name,
        punch_type=punch_type,
        timestamp=timestamp or utcnow(),
        method=method,
        location=(location or "").strip() or None,
    )
    db.session.add(log)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error recording punch for %s", driver.driver_id)
        raise

    snapshot_service.hub.publish(snapshot_service.TOPIC_PUNCH_LOGS)
    return log


def _require_active(driver: Driver | None) -> Driver:
    if driver is None:
        raise DriverUnavailable("Driver not found")
    if not driver.is_active:
        raise DriverUnavailable("Driver is inactive")
    return driver


def punch_with_pin(driver: Driver | None, pin: str | None, location: str | None = None) -> PunchResult:
    driver = _require_active(driver)
    if not verify_pin(pin, driver.pin_hash):
        raise PunchRejected("Invalid PIN", reason="invalid_pin")

    punch_type = next_punch_type(get_last_punch(driver.driver_id))
    log = record_punch(driver, punch_type, METHOD_PIN, location=location)
    current_app.logger.info("Driver %s punched %s by PIN", driver.driver_id, punch_type)
    return PunchResult(punch_log=log)


def punch_with_face(driver: Driver | None, descriptor: list[float] | None, location: str | None = None) -> PunchResult:
    """
    Authorize one punch with a captured descriptor.

    descriptor is None when the browser found no face in the frame.
    """
    driver = _require_active(driver)
    result = compare_faces(descriptor, driver.face_descriptor)
    if not result.matched:
        if result.reason == "not_enrolled":
            message = "Face recognition unavailable: no enrolled face"
        else:
            message = "Face verification failed"
        raise PunchRejected(message, reason=result.reason, face=result)

    punch_type = next_punch_type(get_last_punch(driver.driver_id))
    log = record_punch(driver, punch_type, METHOD_FACE, location=location)
    current_app.logger.info(
        "Driver %s punched %s by face (distance %.4f)", driver.driver_id, punch_type, result.distance
    )
    return PunchResult(punch_log=log, face=result)


def _punch_log_snapshot() -> list[dict]:
    limit = current_app.config.get("SNAPSHOT_LIMIT") or None
    return [log.to_dict() for log in list_punches(limit=limit)]


snapshot_service.hub.register_loader(snapshot_service.TOPIC_PUNCH_LOGS, _punch_log_snapshot)
