from functools import wraps
from flask import g

from utils.errors import AuthError, ForbiddenError

def has_role(role_name: str) -> bool:
    user = getattr(g, "user", None)
    if not user:
        return False
    return user.role == role_name

def require_roles(*role_names: str):
    """
    Usage: @require_roles("admin")
    The role is always read from the session's user row, never from the request body.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = getattr(g, "user", None)
            if user is None:
                raise AuthError("Authentication required")

            if user.role not in role_names:
                raise ForbiddenError("Forbidden")

            return fn(*args, **kwargs)
        return wrapper
    return decorator

def ensure_self_or_admin(user_id: int):
    """Allow acting on `user_id` only for that user or an admin."""
    user = getattr(g, "user", None)
    if user is None:
        raise AuthError("Authentication required")
    if user.id != user_id and not user.is_admin:
        raise ForbiddenError("You can only act on your own account")
