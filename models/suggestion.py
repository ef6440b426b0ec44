from datetime import datetime
from models.db import db


class Suggestion(db.Model):
    __tablename__ = "suggestions"

    id = db.Column(db.Integer, primary_key=True)
    game_name = db.Column(db.String(255), nullable=False)
    username = db.Column(db.String(50), nullable=False)
    description = db.Column(db.Text, nullable=True)
    created = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
