from flask import Blueprint, request, jsonify, g
from sqlalchemy.exc import IntegrityError

from models import db
from models.user import User, ROLE_ADMIN
from models.game import Game
from models.key import Key
from security.rbac import require_roles, ensure_self_or_admin
from services.checkout import redeem_key
from utils.audit import log_event
from utils.auth_context import login_required
from utils.envelope import ok
from utils.errors import ConflictError, NotFoundError
from utils.serializers import key_out, purchase_out
from utils.validation import pick, clean_text, parse_id

keys_bp = Blueprint("keys", __name__, url_prefix="/api/keys")


@keys_bp.get("")
@require_roles(ROLE_ADMIN)
def list_keys():
    rows = (
        db.session.query(Key, Game.name, User.username)
        .outerjoin(Game, Key.game_id == Game.id)
        .outerjoin(User, Key.used_by == User.id)
        .order_by(Key.created.desc(), Key.id.desc())
        .all()
    )
    out = {}
    for key, game_name, used_by_username in rows:
        item = key_out(key)
        item["game_name"] = game_name
        item["usedBy"] = used_by_username
        out[key.id] = item
    return jsonify(out), 200


@keys_bp.post("")
@require_roles(ROLE_ADMIN)
def create_key():
    data = request.get_json(silent=True) or {}
    key_value = clean_text(pick(data, "keyValue", "key_value"), "keyValue", 255, required=True)
    game_id = parse_id(pick(data, "gameId", "game_id"), "gameId")
    key_type = clean_text(pick(data, "keyType", "key_type"), "keyType", 50) or "steam"

    if not db.session.get(Game, game_id):
        raise NotFoundError("Game not found")
    if Key.query.filter_by(key_value=key_value).first():
        raise ConflictError("Key already exists")

    key = Key(key_value=key_value, game_id=game_id, key_type=key_type)
    db.session.add(key)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Key already exists")

    log_event("KEY_CREATE", user_id=g.user.id, entity="key", entity_id=key.id)
    return ok("Key added", status=201, key=key_out(key))


@keys_bp.delete("/<int:key_id>")
@require_roles(ROLE_ADMIN)
def delete_key(key_id: int):
    key = db.session.get(Key, key_id)
    if not key:
        raise NotFoundError("Key not found")

    db.session.delete(key)
    db.session.commit()

    log_event("KEY_DELETE", user_id=g.user.id, entity="key", entity_id=key_id)
    return ok("Key deleted")


# ---------- USERS: redeem a key (single use, race safe) ----------
@keys_bp.post("/<int:key_id>/use")
@login_required
def use_key(key_id: int):
    data = request.get_json(silent=True) or {}
    raw_user_id = pick(data, "userId", "user_id")
    user_id = parse_id(raw_user_id, "userId") if raw_user_id is not None else g.user.id
    ensure_self_or_admin(user_id)

    try:
        purchase, key = redeem_key(key_id, user_id)
    except ConflictError:
        log_event("KEY_USE_FAIL_ALREADY_USED", user_id=g.user.id, entity="key", entity_id=key_id)
        raise

    log_event("KEY_USE", user_id=user_id, entity="key", entity_id=key.id, metadata={"purchase_id": purchase.id})
    return ok("Key redeemed", key=key_out(key), purchase=purchase_out(purchase))
