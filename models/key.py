from datetime import datetime
from models.db import db

KEY_AVAILABLE = "available"
KEY_USED = "used"

class Key(db.Model):
    __tablename__ = "keys"

    id = db.Column(db.Integer, primary_key=True)
    key_value = db.Column(db.String(255), unique=True, nullable=False)
    game_id = db.Column(
        db.Integer, db.ForeignKey("games.id", ondelete="CASCADE"), nullable=False, index=True
    )
    key_type = db.Column(db.String(50), nullable=False, default="steam")

    status = db.Column(db.String(20), nullable=False, default=KEY_AVAILABLE)
    # status values: available, used

    used_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    used_date = db.Column(db.DateTime, nullable=True)

    created = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
