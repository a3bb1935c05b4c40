from functools import wraps
from flask import g

from clinicbook.models.user import User
from clinicbook.services.errors import Forbidden, Unauthenticated


def resolve_account(identity):
    """Local account for a verified identity, or None. Never touches the external identity."""
    if identity is None:
        return None
    return User.query.filter_by(external_uid=identity.uid).first()


def has_role(user, role_name: str) -> bool:
    if user is None:
        return False
    # admin satisfies every role
    return user.role == role_name or user.role == "admin"


def require_roles(*role_names: str):
    """
    Usage: @require_roles("doctor")
    Sets g.user and, for doctor/admin accounts, g.doctor_id (None when no profile exists).
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            identity = getattr(g, "identity", None)
            if identity is None:
                raise Unauthenticated(getattr(g, "auth_error", None) or "Missing Bearer token")

            user = resolve_account(identity)
            if user is None:
                raise Forbidden("User not found")
            if not any(has_role(user, r) for r in role_names):
                raise Forbidden(f"Forbidden: role {' or '.join(role_names)} required")

            g.user = user
            g.doctor_id = user.doctor.id if user.role in ("doctor", "admin") and user.doctor else None
            return fn(*args, **kwargs)
        return wrapper
    return decorator
