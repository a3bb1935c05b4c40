from flask import Blueprint, request, jsonify, g

from clinicbook.security.rbac import resolve_account
from clinicbook.services.booking import cancel_booking, create_booking, list_patient_appointments
from clinicbook.services.errors import BadRequest, InvalidSlot, SlotConflict
from clinicbook.utils.audit import log_event
from clinicbook.utils.auth_context import login_required
from clinicbook.utils.timeutils import parse_instant

appointments_bp = Blueprint("appointments", __name__, url_prefix="/appointments")


# ---------- PATIENTS: view my appointments ----------
@appointments_bp.get("")
@login_required
def my_appointments():
    user = resolve_account(g.identity)
    rows = list_patient_appointments(user)
    return jsonify([a.to_dict() for a in rows]), 200


# ---------- PATIENTS: book (DOUBLE-BOOKING SAFE) ----------
@appointments_bp.post("")
@login_required
def book_appointment():
    data = request.get_json(silent=True) or {}
    doctor_id = data.get("doctor_id")
    starts_at_raw = data.get("starts_at")

    if doctor_id is None or not starts_at_raw:
        raise BadRequest("doctor_id & starts_at required")
    if isinstance(doctor_id, bool) or not isinstance(doctor_id, int):
        raise BadRequest("doctor_id must be an integer")
    try:
        starts_at = parse_instant(starts_at_raw)
    except ValueError:
        raise BadRequest("starts_at must be an ISO date")

    try:
        appointment = create_booking(doctor_id, starts_at, g.identity)
    except SlotConflict:
        account = resolve_account(g.identity)
        log_event(
            "BOOKING_FAIL_SLOT_TAKEN",
            user_id=account.id if account else None,
            entity="doctor",
            entity_id=doctor_id,
            metadata={"starts_at": starts_at},
        )
        raise
    except InvalidSlot as exc:
        account = resolve_account(g.identity)
        log_event(
            "BOOKING_FAIL_INVALID_SLOT",
            user_id=account.id if account else None,
            entity="doctor",
            entity_id=doctor_id,
            metadata={"starts_at": starts_at, "reason": exc.message},
        )
        raise

    log_event(
        "BOOKING_CREATE",
        user_id=appointment.patient_id,
        entity="appointment",
        entity_id=appointment.id,
        metadata={"doctor_id": doctor_id, "starts_at": appointment.starts_at},
    )
    return jsonify(appointment.to_dict()), 201


# ---------- cancel (idempotent) ----------
@appointments_bp.delete("/<int:appointment_id>")
@login_required
def cancel_appointment(appointment_id: int):
    user = resolve_account(g.identity)
    changed = cancel_booking(appointment_id, user)
    if changed:
        log_event("BOOKING_CANCEL", user_id=user.id, entity="appointment", entity_id=appointment_id)
    return jsonify(ok=True), 200


@appointments_bp.post("/<int:appointment_id>/cancel")
@login_required
def cancel_appointment_alias(appointment_id: int):
    return cancel_appointment(appointment_id)
