from functools import wraps
from flask import g
from security.session import get_session_from_request
from models import db
from models.user import User
from utils.errors import AuthError

def load_current_user():
    sess = get_session_from_request()
    if not sess:
        g.user = None
        g.session = None
        return
    g.session = sess
    g.user = db.session.get(User, sess.user_id)

def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "user", None) is None:
            raise AuthError("Authentication required")
        return fn(*args, **kwargs)
    return wrapper
