from datetime import datetime
from clinicbook.models.db import db


class AvailabilityRule(db.Model):
    __tablename__ = "doctor_availability"

    id = db.Column(db.Integer, primary_key=True)
    doctor_id = db.Column(db.Integer, db.ForeignKey("doctors.id"), nullable=False, index=True)

    weekday = db.Column(db.Integer, nullable=False)  # 0=Sunday .. 6=Saturday, UTC
    start_time = db.Column(db.Time, nullable=False)  # UTC time of day
    end_time = db.Column(db.Time, nullable=False)
    slot_minutes = db.Column(db.Integer, nullable=False, default=30)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint("weekday >= 0 AND weekday <= 6", name="ck_availability_weekday"),
        db.CheckConstraint("start_time < end_time", name="ck_availability_window"),
        db.CheckConstraint("slot_minutes > 0", name="ck_availability_slot_minutes"),
    )


class UnavailabilityException(db.Model):
    __tablename__ = "doctor_unavailability"

    id = db.Column(db.Integer, primary_key=True)
    doctor_id = db.Column(db.Integer, db.ForeignKey("doctors.id"), nullable=False, index=True)

    starts_at = db.Column(db.DateTime, nullable=False)
    ends_at = db.Column(db.DateTime, nullable=False)
    reason = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint("starts_at < ends_at", name="ck_unavailability_interval"),
    )
