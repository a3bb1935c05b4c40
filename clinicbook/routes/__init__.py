from .health import health_bp
from .meta import meta_bp
from .doctors import doctors_bp
from .appointments import appointments_bp
from .my import my_bp
from .audit_logs import audit_bp
