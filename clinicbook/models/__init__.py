from .db import db
from .user import User
from .doctor import Doctor
from .availability import AvailabilityRule, UnavailabilityException
from .appointment import Appointment
from .audit_log import AuditLog
