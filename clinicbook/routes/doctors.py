from datetime import timedelta

from flask import Blueprint, current_app, request, jsonify

from clinicbook.models.doctor import Doctor
from clinicbook.models.user import User
from clinicbook.services.availability import get_doctor, list_slots
from clinicbook.services.errors import BadRequest
from clinicbook.utils.timeutils import parse_instant

doctors_bp = Blueprint("doctors", __name__, url_prefix="/doctors")


def _doctor_json(doctor: Doctor):
    return {
        "id": doctor.id,
        "full_name": doctor.user.full_name,
        "email": doctor.user.email,
        "bio": doctor.bio,
        "years_experience": doctor.years_experience,
    }


@doctors_bp.get("")
def list_doctors():
    name_query = (request.args.get("q") or "").strip()

    q = Doctor.query.join(User, User.id == Doctor.user_id)
    if name_query:
        q = q.filter(User.full_name.ilike(f"%{name_query}%"))

    rows = q.order_by(User.full_name.asc()).limit(200).all()
    return jsonify([_doctor_json(d) for d in rows]), 200


@doctors_bp.get("/<int:doctor_id>")
def doctor_detail(doctor_id: int):
    return jsonify(_doctor_json(get_doctor(doctor_id))), 200


# ---------- PUBLIC: bookable slots ----------
@doctors_bp.get("/<int:doctor_id>/availability")
def doctor_availability(doctor_id: int):
    from_str = request.args.get("from")
    to_str = request.args.get("to")
    if not from_str or not to_str:
        raise BadRequest("from & to required (ISO)")

    try:
        from_instant = parse_instant(from_str)
        to_instant = parse_instant(to_str)
    except ValueError:
        raise BadRequest("Invalid datetime format. Use ISO e.g. 2026-01-19T00:00:00Z")

    max_days = current_app.config["MAX_AVAILABILITY_DAYS"]
    if to_instant - from_instant > timedelta(days=max_days):
        raise BadRequest(f"Range too long (max {max_days} days)")

    get_doctor(doctor_id)
    slots = list_slots(doctor_id, from_instant, to_instant)
    return jsonify([s.to_dict() for s in slots]), 200
