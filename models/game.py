from datetime import datetime
from models.db import db

ACCOUNT_AVAILABLE = "available"
ACCOUNT_SOLD = "sold"

class Game(db.Model):
    __tablename__ = "games"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    app_id = db.Column(db.String(100), nullable=True)
    platform = db.Column(db.String(50), nullable=True)
    price = db.Column(db.Numeric(10, 2, asdecimal=False), nullable=True)
    category = db.Column(db.String(100), nullable=True)
    description = db.Column(db.Text, nullable=True)
    library_image = db.Column(db.String(500), nullable=True)

    is_special = db.Column(db.Boolean, default=False, nullable=False)
    special_price = db.Column(db.Numeric(10, 2, asdecimal=False), nullable=True)

    created = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    # rows are removed by the database (ON DELETE CASCADE)
    accounts = db.relationship(
        "GameAccount", backref="game", cascade="all, delete-orphan", passive_deletes=True
    )
    keys = db.relationship(
        "Key", backref="game", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def effective_price(self):
        if self.is_special and self.special_price is not None:
            return self.special_price
        return self.price


class GameAccount(db.Model):
    __tablename__ = "game_accounts"

    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(
        db.Integer, db.ForeignKey("games.id", ondelete="CASCADE"), nullable=False, index=True
    )

    username = db.Column(db.String(255), nullable=False)
    password = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    guard_code = db.Column(db.String(100), nullable=True)

    status = db.Column(db.String(20), nullable=False, default=ACCOUNT_AVAILABLE)
    # status values: available, sold

    purchased_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    purchased_at = db.Column(db.DateTime, nullable=True)

    created = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
