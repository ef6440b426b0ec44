from .users import users_bp
from .games import games_bp
from .keys import keys_bp
from .purchases import purchases_bp
from .suggestions import suggestions_bp
from .stats import stats_bp
from .audit_logs import audit_bp

ALL_BLUEPRINTS = (
    users_bp,
    games_bp,
    keys_bp,
    purchases_bp,
    suggestions_bp,
    stats_bp,
    audit_bp,
)
