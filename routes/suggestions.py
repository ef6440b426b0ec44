from flask import Blueprint, request, jsonify, g

from models import db
from models.user import ROLE_ADMIN
from models.suggestion import Suggestion
from security.rbac import require_roles
from utils.audit import log_event
from utils.auth_context import login_required
from utils.envelope import ok
from utils.errors import NotFoundError
from utils.serializers import suggestion_out
from utils.validation import pick, clean_text

suggestions_bp = Blueprint("suggestions", __name__, url_prefix="/api/suggestions")


@suggestions_bp.post("")
@login_required
def create_suggestion():
    data = request.get_json(silent=True) or {}

    # the author is the logged-in user, whatever the body claims
    suggestion = Suggestion(
        game_name=clean_text(pick(data, "gameName", "game_name"), "gameName", 255, required=True),
        username=g.user.username,
        description=clean_text(data.get("description"), "description", 5000),
    )
    db.session.add(suggestion)
    db.session.commit()

    log_event("SUGGESTION_CREATE", user_id=g.user.id, entity="suggestion", entity_id=suggestion.id)
    return ok("Suggestion sent", status=201, suggestion=suggestion_out(suggestion))


@suggestions_bp.get("")
@require_roles(ROLE_ADMIN)
def list_suggestions():
    rows = Suggestion.query.order_by(Suggestion.created.desc(), Suggestion.id.desc()).all()
    return jsonify({s.id: suggestion_out(s) for s in rows}), 200


@suggestions_bp.delete("/<int:suggestion_id>")
@require_roles(ROLE_ADMIN)
def delete_suggestion(suggestion_id: int):
    suggestion = db.session.get(Suggestion, suggestion_id)
    if not suggestion:
        raise NotFoundError("Suggestion not found")

    db.session.delete(suggestion)
    db.session.commit()

    log_event("SUGGESTION_DELETE", user_id=g.user.id, entity="suggestion", entity_id=suggestion_id)
    return ok("Suggestion deleted")
