from flask import Blueprint, request, jsonify, current_app, g

from clinicbook.security.rbac import require_roles
from clinicbook.services import availability
from clinicbook.services.booking import list_doctor_appointments
from clinicbook.services.errors import BadRequest, NotFound
from clinicbook.utils.audit import log_event
from clinicbook.utils.timeutils import format_instant, parse_instant, parse_time_of_day

my_bp = Blueprint("my", __name__, url_prefix="/my")


def _require_doctor_profile():
    if g.doctor_id is None:
        raise NotFound("Doctor profile missing")
    return g.doctor_id


def _rule_json(rule):
    return {
        "id": rule.id,
        "weekday": rule.weekday,
        "start_time": rule.start_time.isoformat(),
        "end_time": rule.end_time.isoformat(),
        "slot_minutes": rule.slot_minutes,
    }


def _exception_json(exc):
    return {
        "id": exc.id,
        "starts_at": format_instant(exc.starts_at),
        "ends_at": format_instant(exc.ends_at),
        "reason": exc.reason,
    }


# ---------- DOCTORS: weekly availability rules ----------
@my_bp.get("/availability")
@require_roles("doctor")
def list_rules():
    doctor_id = _require_doctor_profile()
    return jsonify([_rule_json(r) for r in availability.load_rules(doctor_id)]), 200


@my_bp.post("/availability")
@require_roles("doctor")
def create_rule():
    doctor_id = _require_doctor_profile()
    data = request.get_json(silent=True) or {}
    weekday = data.get("weekday")
    slot_minutes = data.get("slot_minutes", current_app.config.get("DEFAULT_SLOT_MINUTES", 30))

    if weekday is None or not data.get("start_time") or not data.get("end_time"):
        raise BadRequest("weekday (0-6), start_time, end_time, slot_minutes required")
    try:
        start_time = parse_time_of_day(data["start_time"])
        end_time = parse_time_of_day(data["end_time"])
    except ValueError:
        raise BadRequest("start_time and end_time must be HH:MM or HH:MM:SS (UTC)")

    rule = availability.add_rule(doctor_id, weekday, start_time, end_time, slot_minutes)

    log_event("AVAILABILITY_RULE_CREATE", user_id=g.user.id, entity="availability_rule", entity_id=rule.id)
    return jsonify(_rule_json(rule)), 201


@my_bp.delete("/availability/<int:rule_id>")
@require_roles("doctor")
def delete_rule(rule_id: int):
    doctor_id = _require_doctor_profile()
    if availability.delete_rule(doctor_id, rule_id):
        log_event("AVAILABILITY_RULE_DELETE", user_id=g.user.id, entity="availability_rule", entity_id=rule_id)
    return jsonify(ok=True), 200


# ---------- DOCTORS: one-off unavailability ----------
@my_bp.get("/unavailability")
@require_roles("doctor")
def list_exceptions():
    doctor_id = _require_doctor_profile()
    return jsonify([_exception_json(e) for e in availability.load_exceptions(doctor_id)]), 200


@my_bp.post("/unavailability")
@require_roles("doctor")
def create_exception():
    doctor_id = _require_doctor_profile()
    data = request.get_json(silent=True) or {}
    if not data.get("starts_at") or not data.get("ends_at"):
        raise BadRequest("starts_at & ends_at required")
    try:
        starts_at = parse_instant(data["starts_at"])
        ends_at = parse_instant(data["ends_at"])
    except ValueError:
        raise BadRequest("starts_at and ends_at must be ISO dates")

    reason = (data.get("reason") or "").strip()[:255] or None
    exc = availability.add_exception(doctor_id, starts_at, ends_at, reason)

    log_event("UNAVAILABILITY_CREATE", user_id=g.user.id, entity="unavailability", entity_id=exc.id)
    return jsonify(_exception_json(exc)), 201


@my_bp.delete("/unavailability/<int:exception_id>")
@require_roles("doctor")
def delete_exception(exception_id: int):
    doctor_id = _require_doctor_profile()
    if availability.delete_exception(doctor_id, exception_id):
        log_event("UNAVAILABILITY_DELETE", user_id=g.user.id, entity="unavailability", entity_id=exception_id)
    return jsonify(ok=True), 200


# ---------- DOCTORS: agenda ----------
@my_bp.get("/appointments")
@require_roles("doctor")
def agenda():
    doctor_id = _require_doctor_profile()
    rows = list_doctor_appointments(doctor_id)
    return jsonify([
        {
            "id": a.id,
            "starts_at": format_instant(a.starts_at),
            "ends_at": format_instant(a.ends_at),
            "status": a.status,
            "patient_name": patient.full_name,
            "patient_email": patient.email,
        }
        for a, patient in rows
    ]), 200
