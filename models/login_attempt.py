from datetime import datetime
from models.db import db


class LoginAttempt(db.Model):
    """Failed-login counter for one username from one address."""
    __tablename__ = "login_attempts"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(50), nullable=False, index=True)
    ip = db.Column(db.String(64), nullable=False, index=True)

    fail_count = db.Column(db.Integer, default=0, nullable=False)
    last_fail_at = db.Column(db.DateTime, nullable=True)
    locked_until = db.Column(db.DateTime, nullable=True)

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def seconds_locked(self, now: datetime) -> int:
        if not self.locked_until or self.locked_until <= now:
            return 0
        return max(int((self.locked_until - now).total_seconds()), 1)
