from datetime import datetime, timedelta
from flask import current_app

from models import db
from models.login_attempt import LoginAttempt
from utils.audit import client_ip

def is_locked(username: str) -> tuple[bool, int]:
    """
    Returns (locked, seconds_remaining)
    """
    ip = client_ip()
    row = LoginAttempt.query.filter_by(username=username, ip=ip).first()
    seconds = row.seconds_locked(datetime.utcnow()) if row else 0
    return seconds > 0, seconds

def register_failure(username: str) -> tuple[int, bool]:
    """
    Increments failure counter. Returns (fail_count, locked_now)
    """
    ip = client_ip()
    now = datetime.utcnow()

    row = LoginAttempt.query.filter_by(username=username, ip=ip).first()
    if not row:
        row = LoginAttempt(username=username, ip=ip, fail_count=0)
        db.session.add(row)

    # a lock that ran out starts a fresh count
    if row.locked_until and row.locked_until <= now:
        row.fail_count = 0
        row.locked_until = None

    row.fail_count += 1
    row.last_fail_at = now

    max_attempts = current_app.config.get("MAX_LOGIN_ATTEMPTS", 5)
    lock_minutes = current_app.config.get("LOCKOUT_MINUTES", 1)

    locked_now = False
    if row.fail_count >= max_attempts:
        row.locked_until = now + timedelta(minutes=lock_minutes)
        locked_now = True

    db.session.commit()
    return row.fail_count, locked_now

def reset_attempts(username: str):
    """
    Clears failure counter after successful login.
    """
    ip = client_ip()
    row = LoginAttempt.query.filter_by(username=username, ip=ip).first()
    if not row:
        return
    row.fail_count = 0
    row.last_fail_at = None
    row.locked_until = None
    db.session.commit()
