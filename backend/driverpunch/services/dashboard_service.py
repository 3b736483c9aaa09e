# Overview: Read-only aggregates for the admin dashboard.

from __future__ import annotations

from datetime import datetime

from . import driver_service, punch_service, return_form_service
from ..models.punches import PUNCH_IN
from ..models.returns import STATUS_PENDING
from driverpunch.time_utils import utcnow, same_utc_day


def _matches(term: str, *values: str | None) -> bool:
    return any(term in (value or "").lower() for value in values)


def overview(now: datetime | None = None) -> dict:
    """
    Headline counts. "currently_punched_in" is derived per driver from their
    latest punch; today's counts use the UTC calendar day.
    """
    now = now or utcnow()
    drivers = driver_service.list_drivers()
    punches = punch_service.list_punches()
    forms = return_form_service.list_return_forms()

    today = [p for p in punches if same_utc_day(p.timestamp, now)]

    latest_by_driver: dict[str, str] = {}
    for punch in punches:
        latest_by_driver.setdefault(punch.driver_id, punch.punch_type)

    return {
        "total_drivers": len(drivers),
        "active_drivers": sum(1 for d in drivers if d.is_active),
        "today_punches": len(today),
        "today_punch_ins": sum(1 for p in today if p.punch_type == PUNCH_IN),
        "currently_punched_in": sum(1 for t in latest_by_driver.values() if t == PUNCH_IN),
        "pending_forms": sum(1 for f in forms if f.status == STATUS_PENDING),
    }


def search(term: str | None) -> dict:
    """Filter drivers, punches and forms by driver name or driver_id."""
    term = (term or "").strip().lower()
    drivers = driver_service.list_drivers()
    punches = punch_service.list_punches()
    forms = return_form_service.list_return_forms()

    if term:
        drivers = [d for d in drivers if _matches(term, d.name, d.driver_id)]
        punches = [p for p in punches if _matches(term, p.driver_name, p.driver_id)]
        forms = [f for f in forms if _matches(term, f.driver_name, f.driver_id)]

    return {
        "drivers": [d.to_dict() for d in drivers],
        "punch_logs": [p.to_dict() for p in punches],
        "return_forms": [f.to_dict() for f in forms],
    }
