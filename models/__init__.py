from .db import db
from .user import User, ROLE_USER, ROLE_ADMIN
from .audit_log import AuditLog
from .session import Session
from .login_attempt import LoginAttempt
from .game import Game, GameAccount, ACCOUNT_AVAILABLE, ACCOUNT_SOLD
from .key import Key, KEY_AVAILABLE, KEY_USED
from .suggestion import Suggestion
from .purchase import Purchase
