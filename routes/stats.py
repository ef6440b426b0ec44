from flask import Blueprint, jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.user import User, ROLE_ADMIN
from models.game import Game, GameAccount
from models.key import Key
from models.suggestion import Suggestion
from security.rbac import require_roles

stats_bp = Blueprint("stats", __name__, url_prefix="/api/stats")

EMPTY_STATS = {
    "totalUsers": 0,
    "totalGames": 0,
    "totalAccounts": 0,
    "totalKeys": 0,
    "specialGames": 0,
    "totalSuggestions": 0,
    "totalAdmins": 0,
}


def collect_stats() -> dict:
    return {
        "totalUsers": User.query.count(),
        "totalGames": Game.query.count(),
        "totalAccounts": GameAccount.query.count(),
        "totalKeys": Key.query.count(),
        "specialGames": Game.query.filter(Game.is_special.is_(True)).count(),
        "totalSuggestions": Suggestion.query.count(),
        "totalAdmins": User.query.filter_by(role=ROLE_ADMIN).count(),
    }


@stats_bp.get("")
@require_roles(ROLE_ADMIN)
def get_stats():
    # Dashboard counters degrade to zero instead of failing the page
    try:
        stats = collect_stats()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to collect stats")
        stats = dict(EMPTY_STATS)
    return jsonify(stats), 200
