from flask import current_app

from models import db
from models.user import User, ROLE_ADMIN
from security.password import hash_password

def seed_admin():
    """Create the bootstrap admin account when no user holds its username."""
    username = current_app.config.get("ADMIN_USERNAME")
    password = current_app.config.get("ADMIN_PASSWORD")
    if not username or not password:
        return None

    existing = User.query.filter_by(username=username).first()
    if existing:
        return existing

    admin = User(
        username=username,
        email=current_app.config.get("ADMIN_EMAIL") or f"{username}@localhost",
        password_hash=hash_password(password),
        role=ROLE_ADMIN,
    )
    db.session.add(admin)
    db.session.commit()
    current_app.logger.info("Seeded admin user %s", username)
    return admin
