from flask import Blueprint, request, jsonify, g

from models import db
from models.user import ROLE_ADMIN
from models.game import Game, GameAccount
from security.rbac import require_roles
from utils.audit import log_event
from utils.envelope import ok
from utils.errors import NotFoundError
from utils.serializers import game_out, account_public_out, account_out
from utils.validation import pick, clean_text, parse_price, parse_bool

games_bp = Blueprint("games", __name__, url_prefix="/api/games")


# ---------- PUBLIC: catalog ----------
@games_bp.get("")
def list_games():
    games = Game.query.order_by(Game.created.desc(), Game.id.desc()).all()

    # One query for every game's accounts instead of one per game
    game_ids = [x.id for x in games]
    accounts_by_game = {gid: [] for gid in game_ids}
    if game_ids:
        rows = (
            GameAccount.query
            .filter(GameAccount.game_id.in_(game_ids))
            .order_by(GameAccount.id.asc())
            .all()
        )
        for a in rows:
            accounts_by_game[a.game_id].append(account_public_out(a))

    out = {}
    for x in games:
        item = game_out(x)
        item["accounts"] = accounts_by_game[x.id]
        out[x.id] = item
    return jsonify(out), 200


# ---------- ADMIN: manage games ----------
@games_bp.post("")
@require_roles(ROLE_ADMIN)
def create_game():
    data = request.get_json(silent=True) or {}

    game = Game(
        name=clean_text(data.get("name"), "name", 255, required=True),
        app_id=clean_text(pick(data, "appID", "appId", "app_id"), "appId", 100),
        platform=clean_text(data.get("platform"), "platform", 50),
        price=parse_price(data.get("price"), "price"),
        category=clean_text(data.get("category"), "category", 100),
        description=clean_text(data.get("description"), "description", 10000),
        library_image=clean_text(pick(data, "libraryImage", "library_image"), "libraryImage", 500),
        is_special=parse_bool(pick(data, "isSpecial", "is_special"), "isSpecial"),
        special_price=parse_price(pick(data, "specialPrice", "special_price"), "specialPrice"),
    )
    db.session.add(game)
    db.session.commit()

    log_event("GAME_CREATE", user_id=g.user.id, entity="game", entity_id=game.id)
    return ok("Game added", status=201, game=game_out(game))


@games_bp.delete("/<int:game_id>")
@require_roles(ROLE_ADMIN)
def delete_game(game_id: int):
    game = db.session.get(Game, game_id)
    if not game:
        raise NotFoundError("Game not found")

    # accounts and keys go with it (ON DELETE CASCADE)
    db.session.delete(game)
    db.session.commit()

    log_event("GAME_DELETE", user_id=g.user.id, entity="game", entity_id=game_id)
    return ok("Game deleted")


# ---------- ADMIN: manage accounts of a game ----------
@games_bp.post("/<int:game_id>/accounts")
@require_roles(ROLE_ADMIN)
def create_account(game_id: int):
    data = request.get_json(silent=True) or {}

    game = db.session.get(Game, game_id)
    if not game:
        raise NotFoundError("Game not found")

    account = GameAccount(
        game_id=game.id,
        username=clean_text(data.get("username"), "username", 255, required=True),
        password=clean_text(data.get("password"), "password", 255, required=True),
        email=clean_text(data.get("email"), "email", 255),
        guard_code=clean_text(pick(data, "guardCode", "guard_code"), "guardCode", 100),
    )
    db.session.add(account)
    db.session.commit()

    log_event("ACCOUNT_CREATE", user_id=g.user.id, entity="game_account", entity_id=account.id)
    return ok("Account added", status=201, account=account_out(account))


@games_bp.delete("/<int:game_id>/accounts/<int:account_id>")
@require_roles(ROLE_ADMIN)
def delete_account(game_id: int, account_id: int):
    account = GameAccount.query.filter_by(id=account_id, game_id=game_id).first()
    if not account:
        raise NotFoundError("Account not found")

    db.session.delete(account)
    db.session.commit()

    log_event("ACCOUNT_DELETE", user_id=g.user.id, entity="game_account", entity_id=account_id)
    return ok("Account deleted")
