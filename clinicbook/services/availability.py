"""
Availability Rule Store

Read access to a doctor's recurring weekly rules, unavailability exceptions
and taken start instants, plus the slot listing built on top of them and the
doctor-side management of rules and exceptions.
"""
import logging
from datetime import datetime
from typing import Iterator, List, Set

from clinicbook.models import db
from clinicbook.models.appointment import Appointment, CANCELLED
from clinicbook.models.availability import AvailabilityRule, UnavailabilityException
from clinicbook.models.doctor import Doctor
from clinicbook.scheduling.slots import Slot, iter_slots
from clinicbook.services.errors import BadRequest, NotFound

logger = logging.getLogger(__name__)


def load_rules(doctor_id: int, weekday: int = None) -> List[AvailabilityRule]:
    q = AvailabilityRule.query.filter_by(doctor_id=doctor_id)
    if weekday is not None:
        q = q.filter_by(weekday=weekday)
    return q.order_by(
        AvailabilityRule.weekday.asc(),
        AvailabilityRule.start_time.asc(),
        AvailabilityRule.id.asc(),
    ).all()


def load_exceptions(doctor_id: int) -> List[UnavailabilityException]:
    # Whole set, no range filter: the overlap test does the filtering
    return (
        UnavailabilityException.query
        .filter_by(doctor_id=doctor_id)
        .order_by(UnavailabilityException.starts_at.asc())
        .all()
    )


def load_taken_starts(doctor_id: int, from_instant: datetime, to_instant: datetime) -> Set[datetime]:
    rows = (
        db.session.query(Appointment.starts_at)
        .filter(
            Appointment.doctor_id == doctor_id,
            Appointment.status != CANCELLED,
            Appointment.starts_at >= from_instant,
            Appointment.starts_at < to_instant,
        )
        .all()
    )
    return {r.starts_at for r in rows}


def list_slots(doctor_id: int, from_instant: datetime, to_instant: datetime) -> Iterator[Slot]:
    """
    Free, bookable slots for a doctor with from_instant <= starts_at < to_instant.

    Read-only. The result is recomputed from live state on every call and can go
    stale as soon as it is returned; booking relies on the unique index, not on
    this listing being fresh.
    """
    if from_instant >= to_instant:
        return iter(())

    rules = load_rules(doctor_id)
    if not rules:
        return iter(())
    exceptions = load_exceptions(doctor_id)
    taken = load_taken_starts(doctor_id, from_instant, to_instant)

    logger.debug(
        "listing slots doctor=%s range=[%s, %s) rules=%d exceptions=%d taken=%d",
        doctor_id, from_instant, to_instant, len(rules), len(exceptions), len(taken),
    )
    return iter_slots(rules, exceptions, taken, from_instant, to_instant)


# ---------- doctor self-service: rules ----------

def add_rule(doctor_id: int, weekday, start_time, end_time, slot_minutes) -> AvailabilityRule:
    if isinstance(weekday, bool) or not isinstance(weekday, int) or not 0 <= weekday <= 6:
        raise BadRequest("weekday must be an integer 0-6 (0=Sunday)")
    if isinstance(slot_minutes, bool) or not isinstance(slot_minutes, int) or slot_minutes <= 0:
        raise BadRequest("slot_minutes must be a positive integer")
    if start_time >= end_time:
        raise BadRequest("start_time must be before end_time")

    rule = AvailabilityRule(
        doctor_id=doctor_id,
        weekday=weekday,
        start_time=start_time,
        end_time=end_time,
        slot_minutes=slot_minutes,
    )
    db.session.add(rule)
    db.session.commit()
    logger.info("availability rule %s added for doctor %s", rule.id, doctor_id)
    return rule


def delete_rule(doctor_id: int, rule_id: int) -> int:
    # Scoped to the owning doctor; deleting someone else's or a missing rule is a no-op
    deleted = AvailabilityRule.query.filter_by(id=rule_id, doctor_id=doctor_id).delete()
    db.session.commit()
    return deleted


# ---------- doctor self-service: exceptions ----------

def add_exception(doctor_id: int, starts_at: datetime, ends_at: datetime, reason=None) -> UnavailabilityException:
    if starts_at >= ends_at:
        raise BadRequest("starts_at must be before ends_at")

    exc = UnavailabilityException(doctor_id=doctor_id, starts_at=starts_at, ends_at=ends_at, reason=reason)
    db.session.add(exc)
    db.session.commit()
    logger.info("unavailability %s added for doctor %s", exc.id, doctor_id)
    return exc


def delete_exception(doctor_id: int, exception_id: int) -> int:
    deleted = UnavailabilityException.query.filter_by(id=exception_id, doctor_id=doctor_id).delete()
    db.session.commit()
    return deleted


def get_doctor(doctor_id: int) -> Doctor:
    doctor = db.session.get(Doctor, doctor_id)
    if doctor is None:
        raise NotFound("Doctor not found")
    return doctor
