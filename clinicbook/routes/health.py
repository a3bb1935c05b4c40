from flask import Blueprint, jsonify

from clinicbook.utils.timeutils import format_instant, utcnow

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health():
    return jsonify(ok=True, now=format_instant(utcnow())), 200
