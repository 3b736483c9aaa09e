from __future__ import annotations

from ..extensions import db
from driverpunch.time_utils import to_utc_z

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
DECISION_STATUSES = (STATUS_APPROVED, STATUS_REJECTED)

CONDITIONS = ("good", "damaged", "missing")


class ReturnForm(db.Model):
    """
    Itemized returns submitted after a punch-in.

    LIFECYCLE: pending -> approved | rejected (admin decision).
    total_items is computed from the item quantities at submission.
    """
    __tablename__ = "return_forms"
    __table_args__ = (
        db.Index("ix_return_forms_driver_submitted", "driver_id", "submitted_at"),
        db.Index("ix_return_forms_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    driver_id = db.Column(db.String(64), nullable=False, index=True)
    driver_name = db.Column(db.String(255), nullable=False)
    punch_log_id = db.Column(db.Integer, db.ForeignKey("punch_logs.id"), nullable=False, index=True)

    total_items = db.Column(db.Integer, nullable=False, default=0)
    submitted_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    status = db.Column(db.String(16), nullable=False, default=STATUS_PENDING)

    punch_log = db.relationship("PunchLog")
    items = db.relationship(
        "ReturnItem",
        backref="return_form",
        order_by="ReturnItem.position",
        cascade="all, delete-orphan",
        lazy=True,
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "driver_id": self.driver_id,
            "driver_name": self.driver_name,
            "punch_log_id": self.punch_log_id,
            "items": [item.to_dict() for item in self.items],
            "total_items": self.total_items,
            "submitted_at": to_utc_z(self.submitted_at),
            "status": self.status,
        }


class ReturnItem(db.Model):
    __tablename__ = "return_items"
    __table_args__ = (
        db.Index("ix_return_items_form", "return_form_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    return_form_id = db.Column(db.Integer, db.ForeignKey("return_forms.id"), nullable=False)

    # Order as entered on the form
    position = db.Column(db.Integer, nullable=False)

    item_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)

    # good | damaged | missing
    condition = db.Column(db.String(16), nullable=False)
    notes = db.Column(db.Text, nullable=True)

    def to_dict(self) -> dict:
        return {
            "item_name": self.item_name,
            "quantity": self.quantity,
            "condition": self.condition,
            "notes": self.notes,
        }
