"""
Purchase and key redemption.

Both flows flip a status column with a conditional UPDATE
(`... WHERE id = ? AND status = 'available'`) and write the purchase row in
the same transaction, so two buyers racing for the same account or key
cannot both win: the loser's UPDATE matches no row. The unique constraints
on `purchases.account_id` / `purchases.key_id` back this up at commit time.
"""

from datetime import datetime

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from models import db
from models.user import User
from models.game import Game, GameAccount, ACCOUNT_AVAILABLE, ACCOUNT_SOLD
from models.key import Key, KEY_AVAILABLE, KEY_USED
from models.purchase import Purchase, PURCHASE_ACCOUNT, PURCHASE_KEY
from utils.errors import ConflictError, NotFoundError


def _get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def _next_available_account_id(game_id: int):
    # Lowest id first: accounts are handed out in the order they were added
    row = (
        db.session.query(GameAccount.id)
        .filter(GameAccount.game_id == game_id, GameAccount.status == ACCOUNT_AVAILABLE)
        .order_by(GameAccount.id.asc())
        .first()
    )
    return row[0] if row else None


def _claim_account(account_id: int, user_id: int, now: datetime) -> bool:
    result = db.session.execute(
        update(GameAccount)
        .where(GameAccount.id == account_id, GameAccount.status == ACCOUNT_AVAILABLE)
        .values(status=ACCOUNT_SOLD, purchased_by=user_id, purchased_at=now)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def purchase_account(game_id: int, user_id: int):
    """Sell the next available account of `game_id` to `user_id`.

    Returns `(purchase, account)`. Raises NotFoundError for an unknown game or
    user and ConflictError when the game has no account left.
    """
    user = _get_user(user_id)
    game = db.session.get(Game, game_id)
    if not game:
        raise NotFoundError("Game not found")

    retries = int(current_app.config.get("PURCHASE_MAX_RETRIES", 5))
    now = datetime.utcnow()

    account_id = None
    for _ in range(max(retries, 1)):
        candidate = _next_available_account_id(game.id)
        if candidate is None:
            db.session.rollback()
            raise ConflictError("No accounts available for this game")
        if _claim_account(candidate, user.id, now):
            account_id = candidate
            break
        # another buyer took it between the select and the update
        db.session.rollback()

    if account_id is None:
        raise ConflictError("No accounts available for this game")

    purchase = Purchase(
        user_id=user.id,
        game_id=game.id,
        account_id=account_id,
        purchase_type=PURCHASE_ACCOUNT,
        price=game.effective_price,
        created=now,
    )
    db.session.add(purchase)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Account already sold")

    account = db.session.get(GameAccount, account_id)
    db.session.refresh(account)
    return purchase, account


def redeem_key(key_id: int, user_id: int):
    """Mark key `key_id` as used by `user_id` and record the consumption.

    Returns `(purchase, key)`. Raises NotFoundError for an unknown key or
    user and ConflictError when the key was already used.
    """
    user = _get_user(user_id)
    key = db.session.get(Key, key_id)
    if not key:
        raise NotFoundError("Key not found")
    game = db.session.get(Game, key.game_id)

    now = datetime.utcnow()
    result = db.session.execute(
        update(Key)
        .where(Key.id == key.id, Key.status == KEY_AVAILABLE)
        .values(status=KEY_USED, used_by=user.id, used_date=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.session.rollback()
        raise ConflictError("Key already used")

    purchase = Purchase(
        user_id=user.id,
        game_id=key.game_id,
        key_id=key.id,
        purchase_type=PURCHASE_KEY,
        price=game.effective_price if game else None,
        created=now,
    )
    db.session.add(purchase)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Key already used")

    db.session.refresh(key)
    return purchase, key
