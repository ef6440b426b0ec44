import json
from flask import request
from models import db
from models.audit_log import AuditLog


def client_ip() -> str:
    # ProxyFix rewrites remote_addr when TRUSTED_PROXIES is set
    return request.remote_addr or "unknown"


def user_agent() -> str | None:
    return (request.headers.get("User-Agent") or "")[:255] or None


def log_event(action: str, user_id=None, entity=None, entity_id=None, metadata=None):
    """Append a row to the audit trail and commit it."""
    db.session.add(AuditLog(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=None if entity_id is None else str(entity_id),
        ip=client_ip(),
        user_agent=user_agent(),
        metadata_json=json.dumps(metadata) if metadata else None,
    ))
    db.session.commit()
