from datetime import datetime
from models.db import db

PURCHASE_ACCOUNT = "account"
PURCHASE_KEY = "key"

class Purchase(db.Model):
    __tablename__ = "purchases"

    id = db.Column(db.Integer, primary_key=True)

    # history survives deletion of the user, game, account or key
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    game_id = db.Column(db.Integer, db.ForeignKey("games.id", ondelete="SET NULL"), nullable=True)
    account_id = db.Column(db.Integer, db.ForeignKey("game_accounts.id", ondelete="SET NULL"), nullable=True)
    key_id = db.Column(db.Integer, db.ForeignKey("keys.id", ondelete="SET NULL"), nullable=True)

    purchase_type = db.Column(db.String(20), nullable=False, default=PURCHASE_ACCOUNT)
    # purchase_type values: account, key
    price = db.Column(db.Numeric(10, 2, asdecimal=False), nullable=True)

    created = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        # Hard business-rule: an account or key can only ever be handed out once
        db.UniqueConstraint("account_id", name="uq_purchase_account_once"),
        db.UniqueConstraint("key_id", name="uq_purchase_key_once"),
    )
