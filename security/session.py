import hashlib
import secrets
from datetime import datetime, timedelta
from flask import request, current_app

from models import db
from models.session import Session
from utils.audit import client_ip, user_agent

AUTH_SCHEME = "Bearer"


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def token_from_request():
    """Raw token from `Authorization: Bearer <token>`, or None."""
    scheme, _, token = (request.headers.get("Authorization") or "").partition(" ")
    token = token.strip()
    if scheme != AUTH_SCHEME or not token:
        return None
    return token


def create_session(user_id: int) -> str:
    """Open a session for a buyer who just logged in; the raw token goes back in the login reply."""
    token = secrets.token_urlsafe(32)
    lifetime = current_app.config.get("SESSION_LIFETIME_SECONDS", 8 * 60 * 60)

    db.session.add(Session(
        user_id=user_id,
        token_hash=_digest(token),
        expires_at=datetime.utcnow() + timedelta(seconds=lifetime),
        ip=client_ip(),
        user_agent=user_agent(),
    ))
    db.session.commit()
    return token


def get_session_from_request():
    token = token_from_request()
    if not token:
        return None

    sess = Session.query.filter_by(token_hash=_digest(token)).first()
    now = datetime.utcnow()
    idle_seconds = current_app.config.get("IDLE_TIMEOUT_SECONDS", 20 * 60)
    if not sess or not sess.is_active(now, idle_seconds):
        return None

    sess.last_seen_at = now
    db.session.commit()
    return sess


def revoke_session(token: str) -> bool:
    if not token:
        return False
    revoked = (
        Session.query
        .filter_by(token_hash=_digest(token), revoked=False)
        .update({"revoked": True}, synchronize_session=False)
    )
    db.session.commit()
    return revoked > 0


def revoke_all_sessions(user_id: int) -> int:
    """Log a user out everywhere; returns how many sessions were still open."""
    revoked = (
        Session.query
        .filter_by(user_id=user_id, revoked=False)
        .update({"revoked": True}, synchronize_session=False)
    )
    db.session.commit()
    return revoked
