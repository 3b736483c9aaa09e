from __future__ import annotations

from ..extensions import db
from driverpunch.time_utils import to_utc_z

PUNCH_IN = "in"
PUNCH_OUT = "out"
PUNCH_TYPES = (PUNCH_IN, PUNCH_OUT)

METHOD_FACE = "face"
METHOD_PIN = "pin"
PUNCH_METHODS = (METHOD_FACE, METHOD_PIN)


class PunchLog(db.Model):
    """
    Append-only punch ledger row.

    A driver's current state is never stored; it is read from the most
    recent row. Rows are not updated after insert.
    """
    __tablename__ = "punch_logs"
    __table_args__ = (
        db.Index("ix_punch_logs_driver_time", "driver_id", "timestamp"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    driver_id = db.Column(db.String(64), nullable=False, index=True)
    driver_name = db.Column(db.String(255), nullable=False)

    # in | out
    punch_type = db.Column(db.String(8), nullable=False)
    timestamp = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    # face | pin
    method = db.Column(db.String(8), nullable=False)
    location = db.Column(db.String(255), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "driver_id": self.driver_id,
            "driver_name": self.driver_name,
            "type": self.punch_type,
            "timestamp": to_utc_z(self.timestamp),
            "method": self.method,
            "location": self.location,
        }
