from datetime import datetime
from models.db import db


class AuditLog(db.Model):
    """Marketplace activity: logins, purchases, key redemptions, admin edits."""
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    # acting user; empty for anonymous events such as a failed login
    user_id = db.Column(db.Integer, nullable=True)
    action = db.Column(db.String(80), nullable=False)
    entity = db.Column(db.String(80), nullable=True)
    entity_id = db.Column(db.String(80), nullable=True)

    ip = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)
    metadata_json = db.Column(db.Text, nullable=True)

    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
