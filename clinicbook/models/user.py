from datetime import datetime
from clinicbook.models.db import db

ROLES = ("patient", "doctor", "admin")


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    # Subject of the verified bearer token; the external identity itself is never stored here
    external_uid = db.Column(db.String(128), unique=True, nullable=False, index=True)
    role = db.Column(db.String(20), nullable=False, default="patient")
    full_name = db.Column(db.String(120), nullable=True)
    email = db.Column(db.String(255), nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    doctor = db.relationship("Doctor", back_populates="user", uselist=False)

    __table_args__ = (
        db.CheckConstraint("role IN ('patient', 'doctor', 'admin')", name="ck_users_role"),
    )
