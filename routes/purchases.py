from flask import Blueprint, request, g

from security.rbac import ensure_self_or_admin
from services.checkout import purchase_account
from utils.audit import log_event
from utils.auth_context import login_required
from utils.envelope import ok
from utils.errors import ConflictError
from utils.serializers import account_out, purchase_out
from utils.validation import pick, parse_id

purchases_bp = Blueprint("purchases", __name__, url_prefix="/api/purchases")


# ---------- USERS: buy an account (DOUBLE-SELLING SAFE) ----------
@purchases_bp.post("")
@login_required
def create_purchase():
    data = request.get_json(silent=True) or {}
    game_id = parse_id(pick(data, "gameId", "game_id"), "gameId")
    raw_user_id = pick(data, "userId", "user_id")
    user_id = parse_id(raw_user_id, "userId") if raw_user_id is not None else g.user.id
    ensure_self_or_admin(user_id)

    try:
        purchase, account = purchase_account(game_id, user_id)
    except ConflictError:
        log_event("PURCHASE_FAIL_SOLD_OUT", user_id=g.user.id, entity="game", entity_id=game_id)
        raise

    log_event(
        "ACCOUNT_PURCHASE",
        user_id=user_id,
        entity="purchase",
        entity_id=purchase.id,
        metadata={"game_id": game_id, "account_id": account.id},
    )
    return ok("Purchase completed", status=201, purchase=purchase_out(purchase), account=account_out(account))
