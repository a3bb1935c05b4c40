"""
Typed failures of the scheduling core.

Each class carries a stable machine-readable ``code`` and the HTTP status the
app's error handler answers with, so callers can branch on the kind of
failure rather than on message text.
"""


class SchedulingError(Exception):
    code = "error"
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message=None, **details):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details

    def to_dict(self):
        body = {"error": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


class BadRequest(SchedulingError):
    code = "bad_request"
    status_code = 400
    default_message = "Bad request"


class Unauthenticated(SchedulingError):
    code = "unauthenticated"
    status_code = 401
    default_message = "Authentication required"


class Forbidden(SchedulingError):
    code = "forbidden"
    status_code = 403
    default_message = "Forbidden"


class NotFound(SchedulingError):
    code = "not_found"
    status_code = 404
    default_message = "Not found"


class InvalidSlot(SchedulingError):
    # Re-query the availability listing and pick an offered slot
    code = "invalid_slot"
    status_code = 422
    default_message = "Chosen time not in doctor availability"


class SlotConflict(SchedulingError):
    # Retry with a different instant, never the same one
    code = "slot_conflict"
    status_code = 409
    default_message = "Slot already booked"


class InternalError(SchedulingError):
    # Nothing was committed; the whole operation is safe to retry
    code = "internal_error"
    status_code = 500
    default_message = "Internal error"
