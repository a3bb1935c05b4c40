import json
import logging
from flask import request
from clinicbook.models import db
from clinicbook.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def _client_ip():
    return request.headers.get("X-Forwarded-For", request.remote_addr)


def log_event(action: str, user_id=None, entity=None, entity_id=None, metadata=None):
    """Persist one audit row for the current request. Commits on its own session."""
    user_agent = request.headers.get("User-Agent") or ""

    row = AuditLog(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=_client_ip(),
        user_agent=user_agent[:255] or None,
        metadata_json=json.dumps(metadata, default=str) if metadata else None,
    )
    db.session.add(row)
    db.session.commit()
    logger.debug("audit %s user=%s %s=%s", action, user_id, entity, entity_id)
