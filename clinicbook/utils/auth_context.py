from functools import wraps
from flask import current_app, g, request

from clinicbook.security.tokens import bearer_token_from_header, get_verifier
from clinicbook.services.errors import Unauthenticated


def load_current_identity():
    g.identity = None
    g.auth_error = None

    header = request.headers.get("Authorization")
    if not header:
        return
    token = bearer_token_from_header(header)
    if token is None:
        g.auth_error = "Malformed Authorization header"
        return
    try:
        g.identity = get_verifier(current_app).verify(token)
    except Unauthenticated as exc:
        g.auth_error = exc.message


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "identity", None) is None:
            raise Unauthenticated(getattr(g, "auth_error", None) or "Missing Bearer token")
        return fn(*args, **kwargs)
    return wrapper
