"""
Booking Transactor

Validates one proposed booking against the doctor's rules and exceptions and
commits it inside a single unit of work.

The partial unique index uq_appointment_doctor_start_active on
(doctor_id, starts_at) is what actually prevents double booking: the rule
check below cannot see a concurrent insert for the same instant, the index
can. Exactly one of N racing inserts commits; the others surface as
SlotConflict.
"""
import logging
from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from clinicbook.models import db
from clinicbook.models.appointment import Appointment, CANCELLED, SCHEDULED
from clinicbook.models.doctor import Doctor
from clinicbook.models.user import User
from clinicbook.scheduling.intervals import weekday_of
from clinicbook.scheduling.slots import find_containing_rules, first_overlapping_exception
from clinicbook.security.rbac import resolve_account
from clinicbook.services.availability import load_exceptions, load_rules
from clinicbook.services.errors import (
    InternalError,
    InvalidSlot,
    NotFound,
    SchedulingError,
    SlotConflict,
)
from clinicbook.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", None)
    # psycopg2 exposes pgcode, psycopg 3 sqlstate; sqlite only has the message
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return code == UNIQUE_VIOLATION
    return "UNIQUE constraint failed" in str(orig)


def _get_or_create_patient(identity) -> User:
    """
    Local account for the verified identity, provisioned as a patient on first booking.
    Only flushed here; the caller's commit or rollback decides whether it survives.
    """
    user = resolve_account(identity)
    if user is not None:
        return user

    user = User(
        external_uid=identity.uid,
        role="patient",
        full_name=identity.email or "Patient",
        email=identity.email,
    )
    db.session.add(user)
    db.session.flush()
    logger.info("provisioned patient account %s for identity %s", user.id, identity.uid)
    return user


def create_booking(doctor_id: int, starts_at: datetime, identity) -> Appointment:
    """
    Book the slot starting at starts_at (naive UTC) with the given doctor.

    Checks, in order:
        1. doctor exists                        -> NotFound
        2. patient account (get-or-create)      -> InternalError on failure
        3. a rule window contains the slot and
           no exception overlaps it             -> InvalidSlot
        4. insert under the unique index        -> SlotConflict

    Steps 2-4 commit together or not at all.
    """
    if db.session.get(Doctor, doctor_id) is None:
        raise NotFound("Doctor not found")

    try:
        try:
            patient = _get_or_create_patient(identity)
        except SQLAlchemyError as exc:
            raise InternalError("Could not provision patient profile") from exc

        rules = load_rules(doctor_id, weekday=weekday_of(starts_at))
        matches = find_containing_rules(rules, starts_at)
        if not matches:
            raise InvalidSlot()

        exceptions = load_exceptions(doctor_id)
        for rule, ends_at in matches:
            if first_overlapping_exception(exceptions, starts_at, ends_at) is None:
                break
        else:
            raise InvalidSlot("Chosen time overlaps doctor unavailability")

        appointment = Appointment(
            patient_id=patient.id,
            doctor_id=doctor_id,
            starts_at=starts_at,
            ends_at=ends_at,
            status=SCHEDULED,
        )
        db.session.add(appointment)

        try:
            db.session.flush()
            db.session.commit()
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                raise SlotConflict() from exc
            raise InternalError("Could not store appointment") from exc

    except SchedulingError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("booking failed doctor=%s starts_at=%s", doctor_id, starts_at)
        raise InternalError() from exc

    logger.info(
        "appointment %s booked doctor=%s starts_at=%s rule=%s",
        appointment.id, doctor_id, starts_at, rule.id,
    )
    return appointment


def cancel_booking(appointment_id: int, user) -> int:
    """
    Move an appointment to cancelled. Idempotent: unknown, already-cancelled or
    someone else's appointments are left untouched and still count as success.
    Returns the number of rows changed (0 or 1).
    """
    if user is None:
        return 0

    q = Appointment.query.filter(Appointment.id == appointment_id, Appointment.status != CANCELLED)
    if user.role != "admin":
        owner_filters = [Appointment.patient_id == user.id]
        if user.doctor is not None:
            owner_filters.append(Appointment.doctor_id == user.doctor.id)
        q = q.filter(or_(*owner_filters))

    try:
        updated = q.update({"status": CANCELLED, "cancelled_at": utcnow()}, synchronize_session=False)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("cancel failed appointment=%s", appointment_id)
        raise InternalError() from exc

    if updated:
        logger.info("appointment %s cancelled by user %s", appointment_id, user.id)
    return updated


def list_patient_appointments(user):
    if user is None:
        return []
    return (
        Appointment.query
        .filter_by(patient_id=user.id)
        .order_by(Appointment.starts_at.asc())
        .all()
    )


def list_doctor_appointments(doctor_id: int):
    return (
        db.session.query(Appointment, User)
        .join(User, User.id == Appointment.patient_id)
        .filter(Appointment.doctor_id == doctor_id)
        .order_by(Appointment.starts_at.asc())
        .all()
    )
