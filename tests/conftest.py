"""
Shared pytest fixtures: app on in-memory SQLite, bearer tokens, doctors and rules.
"""
import time as _time
from datetime import datetime, time

import pytest
from jose import jwt

from clinicbook.app import create_app
from clinicbook.config import Config
from clinicbook.models import db, AvailabilityRule, Doctor, UnavailabilityException, User
from clinicbook.models.appointment import Appointment

TEST_SECRET = "test-only-signing-secret-0123456789abcdef"

# 2026-01-19 is a Monday (weekday 1 with 0=Sunday)
MONDAY = datetime(2026, 1, 19)
TUESDAY = datetime(2026, 1, 20)


class BookingTestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    AUTH_JWT_ALGORITHM = "HS256"
    AUTH_JWT_SECRET = TEST_SECRET
    AUTH_JWT_PUBLIC_KEY = None
    AUTH_JWT_PUBLIC_KEY_B64 = None
    AUTH_JWT_AUDIENCE = None
    AUTH_JWT_ISSUER = None
    AUTH_JWT_LEEWAY_SECONDS = 0
    LOG_LEVEL = "WARNING"


def make_token(uid, email=None, secret=TEST_SECRET, expires_in=3600, **claims):
    payload = {"sub": uid, "iat": int(_time.time()), "exp": int(_time.time()) + expires_in}
    if email:
        payload["email"] = email
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


def bearer(uid, email=None):
    return {"Authorization": f"Bearer {make_token(uid, email)}"}


def create_doctor(uid="doctor-1", full_name="Dr. Ada Lovelace", role="doctor"):
    user = User(external_uid=uid, role=role, full_name=full_name, email=f"{uid}@clinic.test")
    db.session.add(user)
    db.session.flush()
    doctor = Doctor(user_id=user.id, bio="General practice", years_experience=7)
    db.session.add(doctor)
    db.session.commit()
    return doctor


def add_rule(doctor_id, weekday=1, start=time(9, 0), end=time(10, 0), slot_minutes=30):
    rule = AvailabilityRule(
        doctor_id=doctor_id, weekday=weekday, start_time=start, end_time=end, slot_minutes=slot_minutes
    )
    db.session.add(rule)
    db.session.commit()
    return rule


def add_exception(doctor_id, starts_at, ends_at, reason=None):
    exc = UnavailabilityException(doctor_id=doctor_id, starts_at=starts_at, ends_at=ends_at, reason=reason)
    db.session.add(exc)
    db.session.commit()
    return exc


def add_appointment(doctor_id, patient_uid, starts_at, ends_at, status="scheduled"):
    patient = User.query.filter_by(external_uid=patient_uid).first()
    if patient is None:
        patient = User(external_uid=patient_uid, role="patient", full_name=patient_uid)
        db.session.add(patient)
        db.session.flush()
    appt = Appointment(
        patient_id=patient.id, doctor_id=doctor_id, starts_at=starts_at, ends_at=ends_at, status=status
    )
    db.session.add(appt)
    db.session.commit()
    return appt


@pytest.fixture
def app():
    app = create_app(BookingTestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def doctor(app):
    return create_doctor()


@pytest.fixture
def monday_rule(doctor):
    return add_rule(doctor.id)
