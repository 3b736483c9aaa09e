from __future__ import annotations

from ..extensions import db
from driverpunch.time_utils import to_utc_z


class Driver(db.Model):
    """
    Driver directory entry.

    driver_id is the external identifier printed on badges and stored on
    punch logs and return forms. Drivers are deactivated rather than
    deleted in normal operation.
    """
    __tablename__ = "drivers"
    __table_args__ = (
        db.UniqueConstraint("driver_id", name="uq_drivers_driver_id"),
        db.Index("ix_drivers_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    driver_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(64), nullable=True)

    # Bcrypt hashed punch PIN
    pin_hash = db.Column(db.String(255), nullable=True)

    # 128-float face-api.js descriptor captured at enrollment
    face_descriptor = db.Column(db.JSON, nullable=True)
    face_enrolled_at = db.Column(db.DateTime(timezone=True), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @property
    def has_pin(self) -> bool:
        return bool(self.pin_hash)

    @property
    def has_face(self) -> bool:
        return bool(self.face_descriptor)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "driver_id": self.driver_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "has_pin": self.has_pin,
            "has_face": self.has_face,
            "face_enrolled_at": to_utc_z(self.face_enrolled_at) if self.face_enrolled_at else None,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }
