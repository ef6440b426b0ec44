from flask import Blueprint, request, jsonify, g, current_app
from sqlalchemy.exc import IntegrityError

from models import db
from models.user import User, ROLE_USER, ROLE_ADMIN
from models.game import Game, GameAccount
from models.key import Key
from models.purchase import Purchase
from security.password import hash_password, verify_password
from security.password_policy import validate_password
from security.session import create_session, revoke_session, revoke_all_sessions, token_from_request
from security.bruteforce import is_locked, register_failure, reset_attempts
from security.rbac import require_roles, ensure_self_or_admin
from utils.audit import log_event
from utils.auth_context import login_required
from utils.envelope import ok
from utils.errors import ValidationError, ConflictError, NotFoundError, AuthError, ForbiddenError, TooManyAttemptsError
from utils.serializers import user_out, purchase_out, account_out
from utils.validation import is_valid_email, clean_text


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}
    username = clean_text(data.get("username"), "username", 50, required=True)
    email = (clean_text(data.get("email"), "email", 100) or "").lower()
    password = data.get("password") or ""

    if not is_valid_email(email):
        raise ValidationError("Invalid email")
    valid, errors = validate_password(password)
    if not valid:
        raise ValidationError(errors[0])

    exists = User.query.filter((User.username == username) | (User.email == email)).first()
    if exists:
        log_event("REGISTER_FAIL_EXISTS", metadata={"username": username, "email": email})
        raise ConflictError("Username or email already in use")

    user = User(username=username, email=email, password_hash=hash_password(password), role=ROLE_USER)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Username or email already in use")

    log_event("REGISTER_SUCCESS", user_id=user.id)
    return ok("Registered successfully", user=user_out(user))


@users_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    username = data.get("username") if isinstance(data.get("username"), str) else ""
    username = username.strip()
    password = data.get("password")

    if not username or not isinstance(password, str) or not password:
        raise ValidationError("Username and password are required")

    locked, seconds_left = is_locked(username)
    if locked:
        log_event("LOGIN_LOCKED", metadata={"username": username, "seconds_left": seconds_left})
        raise TooManyAttemptsError("Account temporarily locked. Try again later.", seconds_left)

    user = User.query.filter_by(username=username).first()
    if not user or not verify_password(password, user.password_hash):
        fail_count, locked_now = register_failure(username)
        log_event(
            "LOGIN_FAIL",
            user_id=user.id if user else None,
            metadata={"username": username, "fail_count": fail_count, "locked_now": locked_now}
        )
        if locked_now:
            lock_seconds = current_app.config.get("LOCKOUT_MINUTES", 1) * 60
            raise TooManyAttemptsError("Too many failed attempts. Account locked.", lock_seconds)
        if not user:
            raise NotFoundError("User not found")
        raise AuthError("Wrong password")

    reset_attempts(username)

    # Rotate: revoke any existing sessions for this user
    revoked_count = revoke_all_sessions(user.id)
    token = create_session(user.id)

    log_event("LOGIN_SUCCESS", user_id=user.id, metadata={"revoked_sessions": revoked_count})
    return ok("Login successful", user=user_out(user), token=token)


@users_bp.post("/logout")
@login_required
def logout():
    revoke_session(token_from_request())
    log_event("LOGOUT", user_id=g.user.id)
    return ok("Logged out")


@users_bp.get("/me")
@login_required
def me():
    return ok("OK", user=user_out(g.user))


@users_bp.get("")
@require_roles(ROLE_ADMIN)
def list_users():
    users = User.query.order_by(User.created.desc(), User.id.desc()).all()
    return jsonify({u.username: user_out(u) for u in users}), 200


@users_bp.delete("/<path:username>")
@require_roles(ROLE_ADMIN)
def delete_user(username: str):
    user = User.query.filter_by(username=username).first()
    if not user:
        raise NotFoundError("User not found")

    if user.id == g.user.id:
        raise ForbiddenError("Cannot delete your own account")

    user_id = user.id
    db.session.delete(user)
    db.session.commit()

    log_event("USER_DELETE", user_id=g.user.id, entity="user", entity_id=user_id, metadata={"username": username})
    return ok("User deleted")


@users_bp.get("/<int:user_id>/purchases")
@login_required
def user_purchases(user_id: int):
    ensure_self_or_admin(user_id)

    rows = (
        Purchase.query
        .filter_by(user_id=user_id)
        .order_by(Purchase.created.desc(), Purchase.id.desc())
        .all()
    )

    # Fetch games, accounts and keys for all purchases at once
    game_ids = {p.game_id for p in rows if p.game_id}
    account_ids = {p.account_id for p in rows if p.account_id}
    key_ids = {p.key_id for p in rows if p.key_id}
    games = {x.id: x for x in Game.query.filter(Game.id.in_(game_ids)).all()} if game_ids else {}
    accounts = {x.id: x for x in GameAccount.query.filter(GameAccount.id.in_(account_ids)).all()} if account_ids else {}
    keys = {x.id: x for x in Key.query.filter(Key.id.in_(key_ids)).all()} if key_ids else {}

    out = []
    for p in rows:
        item = purchase_out(p)
        game = games.get(p.game_id)
        item["game_name"] = game.name if game else None
        account = accounts.get(p.account_id)
        item["account"] = account_out(account) if account else None
        key = keys.get(p.key_id)
        item["key_value"] = key.key_value if key else None
        out.append(item)
    return jsonify(out), 200
