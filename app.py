import os

import click
from flask import Flask, request, send_from_directory
from flask_migrate import Migrate
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from config import Config
from routes import ALL_BLUEPRINTS

from models import db
from models.user import User, ROLE_ADMIN
from utils.seed import seed_admin
from utils.auth_context import load_current_user
from utils.envelope import fail
from utils.errors import MarketError, ConflictError, InternalError, NotFoundError

STATIC_DIR = os.path.join(os.path.abspath(os.path.dirname(__file__)), "static")
SPA_INDEX = "index.html"


def create_app(config_object=Config):
    app = Flask(__name__, static_folder=STATIC_DIR, static_url_path="/static")
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # client addresses come from X-Forwarded-For only behind known proxies
    proxies = app.config.get("TRUSTED_PROXIES", 0)
    if proxies:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=proxies, x_proto=proxies)

    # mappings keyed by id keep their newest-first order
    app.json.sort_keys = False

    # Register routes
    for bp in ALL_BLUEPRINTS:
        app.register_blueprint(bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db, render_as_batch=True)

    # Create tables and the bootstrap admin (safe & idempotent)
    with app.app_context():
        if app.config.get("AUTO_CREATE_TABLES", True):
            db.create_all()
            seed_admin()

    @app.before_request
    def _load_user():
        if request.path.startswith("/api/"):
            load_current_user()

    register_error_handlers(app)

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        if request.path.startswith("/api/"):
            resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app


def _is_api_request() -> bool:
    return request.path == "/api" or request.path.startswith("/api/")


def register_error_handlers(app):
    @app.errorhandler(MarketError)
    def _market_error(exc):
        if isinstance(exc, InternalError):
            app.logger.error("%s %s failed: %s", request.method, request.path, exc.message)
        return fail(exc)

    @app.errorhandler(IntegrityError)
    def _integrity_error(exc):
        db.session.rollback()
        app.logger.warning("Integrity error on %s %s: %s", request.method, request.path, exc.orig)
        return fail(ConflictError("Conflicts with existing data"))

    @app.errorhandler(SQLAlchemyError)
    def _storage_error(exc):
        db.session.rollback()
        app.logger.exception("Storage error on %s %s", request.method, request.path)
        return fail(InternalError())

    @app.errorhandler(404)
    def _not_found(exc):
        if _is_api_request():
            return fail(NotFoundError("Endpoint not found"))
        # single-page fallback for client-side routes
        return send_from_directory(STATIC_DIR, SPA_INDEX), 200

    @app.errorhandler(HTTPException)
    def _http_error(exc):
        if not _is_api_request():
            return exc
        error = MarketError(exc.description)
        error.status = exc.code
        error.kind = "validation" if exc.code == 400 else "http"
        return fail(error)

    @app.errorhandler(Exception)
    def _unexpected(exc):
        db.session.rollback()
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return fail(InternalError())


#-------------------------

def register_cli(app):
    @app.cli.command("make-admin")
    @click.argument("username")
    def make_admin(username):
        """Promote a user to admin by username (bootstrap)."""
        user = User.query.filter_by(username=username.strip()).first()
        if not user:
            click.echo("User not found")
            return

        if user.role != ROLE_ADMIN:
            user.role = ROLE_ADMIN
            db.session.commit()

        click.echo(f"{user.username} promoted to admin")

    @app.cli.command("seed-admin")
    def seed_admin_command():
        """Create tables and the configured bootstrap admin."""
        db.create_all()
        admin = seed_admin()
        if admin is None:
            click.echo("ADMIN_USERNAME / ADMIN_PASSWORD not configured")
            return
        click.echo(f"Admin user: {admin.username}")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
