from flask import Blueprint, jsonify, g

from clinicbook.security.rbac import resolve_account
from clinicbook.utils.auth_context import login_required
from clinicbook.utils.timeutils import format_instant

meta_bp = Blueprint("meta", __name__)


@meta_bp.get("/me")
@login_required
def me():
    user = resolve_account(g.identity)
    if user is None:
        # Not provisioned yet: the first booking creates the account
        return jsonify(uid=g.identity.uid, email=g.identity.email), 200

    return jsonify(
        id=user.id,
        uid=user.external_uid,
        role=user.role,
        full_name=user.full_name,
        email=user.email,
        doctor_id=user.doctor.id if user.doctor else None,
        created_at=format_instant(user.created_at),
    ), 200
