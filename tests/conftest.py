import pytest

from app import create_app
from config import Config
from models import db


class MarketTestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    AUTO_CREATE_TABLES = True
    TRUSTED_PROXIES = 0
    BCRYPT_ROUNDS = 4
    ADMIN_USERNAME = "admin"
    ADMIN_EMAIL = "admin@example.com"
    ADMIN_PASSWORD = "admin123"
    LOG_LEVEL = "WARNING"


@pytest.fixture
def app():
    app = create_app(MarketTestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    def _register(username, email=None, password="secret1"):
        return client.post("/api/users/register", json={
            "username": username,
            "email": email or f"{username}@example.com",
            "password": password,
        })
    return _register


@pytest.fixture
def login(client):
    def _login(username, password="secret1"):
        resp = client.post("/api/users/login", json={"username": username, "password": password})
        body = resp.get_json()
        assert body["success"], body
        return {"Authorization": f"Bearer {body['token']}"}, body["user"]
    return _login


@pytest.fixture
def admin_headers(login):
    headers, _ = login("admin", "admin123")
    return headers


@pytest.fixture
def alice(register, login):
    register("alice", "alice@example.com")
    headers, user = login("alice")
    return {"headers": headers, "id": user["id"], "username": "alice"}


@pytest.fixture
def make_game(client, admin_headers):
    def _make_game(name="Half-Life", accounts=0, **fields):
        payload = {"name": name, "platform": "steam", "price": 10}
        payload.update(fields)
        resp = client.post("/api/games", json=payload, headers=admin_headers)
        game = resp.get_json()["game"]
        for i in range(accounts):
            client.post(
                f"/api/games/{game['id']}/accounts",
                json={"username": f"{name}-acc{i}", "password": f"pw{i}", "guardCode": f"G{i}"},
                headers=admin_headers,
            )
        return game
    return _make_game
