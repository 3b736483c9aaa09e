"""
Return Form Service

WHY: After punching in, a driver lists the goods being returned from the
run. An admin then approves or rejects the form.

LIFECYCLE:
1. Submit (PENDING) - only against an existing punch-in
2. Approve / Reject (admin decision)

RULES:
- total_items is always recomputed from item quantities
- No de-duplication per punch log; the caller submits once
- A decided form may be decided again; only status changes
"""

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import PunchLog, ReturnForm, ReturnItem
from ..models.punches import PUNCH_IN
from ..models.returns import STATUS_PENDING, DECISION_STATUSES, STATUS_APPROVED, STATUS_REJECTED
from ..validation import validate_return_items, total_quantity
from . import snapshot_service
from driverpunch.time_utils import utcnow

RETURN_FORM_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED)


class ReturnFormError(Exception):
    """Raised for return form operation errors."""
    pass


class ReturnFormNotFound(ReturnFormError):
    pass


def _commit(action: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to %s", action)
        raise


def submit_return_form(*, punch_log_id: int, items, driver_id: str | None = None) -> ReturnForm:
    """
    Create a PENDING return form for a punch-in.

    Args:
        punch_log_id: The punch-in that opened the form
        items: Raw item dicts (item_name, quantity, condition, notes)
        driver_id: When given, the punch log must belong to this driver

    Raises:
        ReturnFormError: punch log missing, not a punch-in, or another driver's
        ValidationError: item problems, keyed by field
    """
    punch_log = db.session.get(PunchLog, punch_log_id) if punch_log_id else None
    if not punch_log:
        raise ReturnFormError("Punch log not found")
    if punch_log.punch_type != PUNCH_IN:
        raise ReturnFormError("Return forms can only be submitted after a punch-in")
    if driver_id is not None and punch_log.driver_id != driver_id:
        raise ReturnFormError("Punch log belongs to another driver")

    validated = validate_return_items(items)

    form = ReturnForm(
        driver_id=punch_log.driver_id,
        driver_name=punch_log.driver_name,
        punch_log_id=punch_log.id,
        total_items=total_quantity(validated),
        submitted_at=utcnow(),
        status=STATUS_PENDING,
    )
    for position, item in enumerate(validated):
        form.items.append(ReturnItem(
            position=position,
            item_name=item.item_name,
            quantity=item.quantity,
            condition=item.condition,
            notes=item.notes,
        ))

    db.session.add(form)
    _commit("create return form")

    snapshot_service.hub.publish(snapshot_service.TOPIC_RETURN_FORMS)
    return form


def get_return_form(form_id: int) -> ReturnForm | None:
    try:
        return db.session.get(ReturnForm, form_id)
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error getting return form %s", form_id)
        return None


def list_return_forms(
    driver_id: str | None = None,
    status: str | None = None,
    limit: int | None = None,
) -> list[ReturnForm]:
    """Newest submission first."""
    try:
        query = db.session.query(ReturnForm)
        if driver_id:
            query = query.filter_by(driver_id=driver_id)
        if status:
            query = query.filter_by(status=status)
        query = query.order_by(ReturnForm.submitted_at.desc(), ReturnForm.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error fetching return forms")
        return []


def set_status(form_id: int, status: str) -> ReturnForm:
    """Record an admin decision. Re-deciding is allowed and only touches status."""
    if status not in DECISION_STATUSES:
        raise ReturnFormError(f"Invalid status. Must be one of: {', '.join(DECISION_STATUSES)}")

    form = db.session.get(ReturnForm, form_id)
    if not form:
        raise ReturnFormNotFound("Return form not found")

    if form.status != STATUS_PENDING:
        current_app.logger.warning(
            "Return form %s re-decided: %s -> %s", form.id, form.status, status
        )

    form.status = status
    _commit("update return form status")

    snapshot_service.hub.publish(snapshot_service.TOPIC_RETURN_FORMS)
    return form


def _return_form_snapshot() -> list[dict]:
    limit = current_app.config.get("SNAPSHOT_LIMIT") or None
    return [form.to_dict() for form in list_return_forms(limit=limit)]


snapshot_service.hub.register_loader(snapshot_service.TOPIC_RETURN_FORMS, _return_form_snapshot)
