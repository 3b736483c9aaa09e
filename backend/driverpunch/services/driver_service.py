# Overview: Service-layer operations for the driver directory; encapsulates business logic and database work.

"""
Driver Directory Service

WHY: Punches and return forms are keyed by the external driver_id. The
directory resolves that id to a name, a PIN and an enrolled face.

ERROR POLICY:
- Reads log store failures and degrade to None / [] so listings render empty.
- Writes roll back, log and re-raise to the caller.
"""

import bcrypt
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Driver
from .face_service import validate_descriptor
from driverpunch.time_utils import utcnow

PIN_MIN_LENGTH = 4
PIN_MAX_LENGTH = 6

UPDATABLE_FIELDS = ("name", "email", "phone", "is_active")


class DriverError(ValueError):
    """Raised for invalid driver directory operations."""
    pass


class DriverNotFound(DriverError):
    pass


def _commit(action: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to %s", action)
        raise


def _text(value, field: str) -> str | None:
    """Stripped text, or None when blank. Non-string values are rejected."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise DriverError(f"{field} must be text")
    return value.strip() or None


def validate_pin(pin) -> str:
    pin = str(pin).strip() if pin is not None else ""
    if not pin.isdigit() or not (PIN_MIN_LENGTH <= len(pin) <= PIN_MAX_LENGTH):
        raise DriverError(f"PIN must be {PIN_MIN_LENGTH}-{PIN_MAX_LENGTH} digits")
    return pin


def hash_pin(pin: str) -> str:
    pin = validate_pin(pin)
    return bcrypt.hashpw(pin.encode("utf-8"), bcrypt.gensalt(rounds=12)).decode("utf-8")


def verify_pin(pin, pin_hash: str | None) -> bool:
    """Exact PIN match against the stored hash. No PIN on file never matches."""
    if not pin or not pin_hash:
        return False
    try:
        return bcrypt.checkpw(str(pin).encode("utf-8"), pin_hash.encode("utf-8"))
    except ValueError:
        return False


def create_driver(
    *,
    driver_id: str,
    name: str,
    email: str | None = None,
    phone: str | None = None,
    pin: str | None = None,
) -> Driver:
    driver_id = _text(driver_id, "driver_id")
    name = _text(name, "name")
    email = _text(email, "email")
    phone = _text(phone, "phone")
    if not driver_id:
        raise DriverError("driver_id is required")
    if not name:
        raise DriverError("name is required")

    if db.session.query(Driver).filter_by(driver_id=driver_id).first():
        raise DriverError(f"Driver {driver_id} already exists")

    driver = Driver(
        driver_id=driver_id,
        name=name,
        email=email,
        phone=phone,
        pin_hash=hash_pin(pin) if pin else None,
        is_active=True,
        created_at=utcnow(),
    )
    db.session.add(driver)
    _commit("create driver")
    return driver


def get_driver(driver_pk: int) -> Driver | None:
    try:
        return db.session.get(Driver, driver_pk)
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error getting driver %s", driver_pk)
        return None


def get_driver_by_driver_id(driver_id: str | None) -> Driver | None:
    if not driver_id:
        return None
    try:
        return db.session.query(Driver).filter_by(driver_id=driver_id).first()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error fetching driver %s", driver_id)
        return None


def list_drivers(search: str | None = None, include_inactive: bool = True) -> list[Driver]:
    """Drivers ordered by name; search matches name or driver_id, case-insensitive."""
    try:
        query = db.session.query(Driver)
        if not include_inactive:
            query = query.filter(Driver.is_active.is_(True))
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(db.or_(
                db.func.lower(Driver.name).like(pattern),
                db.func.lower(Driver.driver_id).like(pattern),
            ))
        return query.order_by(Driver.name.asc(), Driver.id.asc()).all()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error fetching drivers")
        return []


def _require(driver_pk: int) -> Driver:
    driver = db.session.get(Driver, driver_pk)
    if not driver:
        raise DriverNotFound("Driver not found")
    return driver


def update_driver(driver_pk: int, **updates) -> Driver:
    driver = _require(driver_pk)

    unknown = set(updates) - set(UPDATABLE_FIELDS)
    if unknown:
        raise DriverError(f"Cannot update: {', '.join(sorted(unknown))}")

    changes = {}
    for field in ("name", "email", "phone"):
        if field in updates:
            changes[field] = _text(updates[field], field)
    if "name" in changes and not changes["name"]:
        raise DriverError("name is required")
    if "is_active" in updates:
        if not isinstance(updates["is_active"], bool):
            raise DriverError("is_active must be true or false")
        changes["is_active"] = updates["is_active"]

    for field, value in changes.items():
        setattr(driver, field, value)

    _commit("update driver")
    return driver


def deactivate_driver(driver_pk: int) -> Driver:
    return update_driver(driver_pk, is_active=False)


def delete_driver(driver_pk: int) -> None:
    """Hard delete. Punch logs and return forms keep their driver_id copy."""
    driver = _require(driver_pk)
    db.session.delete(driver)
    _commit("delete driver")


def set_pin(driver_pk: int, pin: str) -> Driver:
    driver = _require(driver_pk)
    driver.pin_hash = hash_pin(pin)
    _commit("set driver PIN")
    return driver


def enroll_face(driver_pk: int, descriptor) -> Driver:
    """Record the enrollment descriptor. Replaces any previous enrollment."""
    driver = _require(driver_pk)
    driver.face_descriptor = validate_descriptor(descriptor)
    driver.face_enrolled_at = utcnow()
    _commit("enroll driver face")
    return driver


def clear_face(driver_pk: int) -> Driver:
    driver = _require(driver_pk)
    driver.face_descriptor = None
    driver.face_enrolled_at = None
    _commit("clear driver face")
    return driver
