from datetime import datetime
from clinicbook.models.db import db
from clinicbook.utils.timeutils import format_instant

SCHEDULED = "scheduled"
CANCELLED = "cancelled"


class Appointment(db.Model):
    __tablename__ = "appointments"

    id = db.Column(db.Integer, primary_key=True)

    patient_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    doctor_id = db.Column(db.Integer, db.ForeignKey("doctors.id"), nullable=False, index=True)

    starts_at = db.Column(db.DateTime, nullable=False, index=True)
    ends_at = db.Column(db.DateTime, nullable=False)

    status = db.Column(db.String(20), nullable=False, default=SCHEDULED)
    # status values: scheduled, cancelled

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    cancelled_at = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        # Hard business-rule: one live appointment per doctor and start instant (prevents double booking)
        db.Index(
            "uq_appointment_doctor_start_active",
            "doctor_id",
            "starts_at",
            unique=True,
            sqlite_where=db.text("status != 'cancelled'"),
            postgresql_where=db.text("status != 'cancelled'"),
        ),
        db.CheckConstraint("status IN ('scheduled', 'cancelled')", name="ck_appointments_status"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "patient_id": self.patient_id,
            "doctor_id": self.doctor_id,
            "starts_at": format_instant(self.starts_at),
            "ends_at": format_instant(self.ends_at),
            "status": self.status,
            "created_at": format_instant(self.created_at),
            "cancelled_at": format_instant(self.cancelled_at),
        }
