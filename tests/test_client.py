from urllib.parse import urlsplit

import pytest
import requests
from click.testing import CliRunner

from client.cli import cli
from client.gateway import MarketplaceClient, SessionStore


class FlaskTransport:
    """Routes the gateway's HTTP calls into the Flask test client."""

    def __init__(self, flask_client):
        self.flask_client = flask_client
        self.calls = []

    def request(self, method, url, json=None, headers=None, timeout=None):
        parts = urlsplit(url)
        self.calls.append((method, parts.path))
        return _Response(self.flask_client.open(parts.path, method=method, json=json, headers=headers))


class _Response:
    def __init__(self, resp):
        self._resp = resp

    def json(self):
        return self._resp.get_json()


class BrokenTransport:
    def request(self, *args, **kwargs):
        raise requests.ConnectionError("connection refused")


@pytest.fixture
def store(tmp_path):
    return SessionStore(str(tmp_path / "state" / "session.json"))


@pytest.fixture
def gateway(client, store):
    return MarketplaceClient("http://market.test", store=store, http=FlaskTransport(client))


def test_login_persists_user_and_token(gateway, store):
    result = gateway.login_user({"username": "admin", "password": "admin123"})

    assert result["success"] is True
    saved = store.load()
    assert saved["user"]["username"] == "admin"
    assert saved["user"]["role"] == "admin"
    assert saved["token"] == result["token"]
    assert gateway.get_current_user()["username"] == "admin"


def test_failed_login_stores_nothing(gateway, store):
    result = gateway.login_user({"username": "admin", "password": "wrong!!"})
    assert result["success"] is False
    assert store.load() == {}


def test_token_is_sent_on_later_calls(gateway):
    gateway.login_user({"username": "admin", "password": "admin123"})
    assert gateway.whoami()["user"]["username"] == "admin"
    assert "totalUsers" in gateway.get_stats()


def test_logout_clears_state(gateway, store):
    gateway.login_user({"username": "admin", "password": "admin123"})
    assert gateway.logout_user()["success"] is True
    assert store.load() == {}
    assert gateway.get_current_user() is None


def test_full_shopping_flow(gateway):
    gateway.login_user({"username": "admin", "password": "admin123"})
    game = gateway.add_game({"name": "Portal", "price": 7})["game"]
    gateway.add_game_account(game["id"], {"username": "acc", "password": "pw"})
    key = gateway.add_key({"keyValue": "P-1", "gameId": game["id"], "keyType": "steam"})["key"]
    gateway.logout_user()

    assert gateway.register_user({"username": "alice", "email": "a@x.com", "password": "secret1"})["success"]
    user = gateway.login_user({"username": "alice", "password": "secret1"})["user"]

    bought = gateway.purchase_account(game["id"], user["id"])
    assert bought["account"]["password"] == "pw"
    assert gateway.use_key(key["id"], user["id"])["success"] is True
    assert gateway.use_key(key["id"], user["id"])["success"] is False
    assert len(gateway.get_user_purchases(user["id"])) == 2
    assert gateway.add_suggestion({"gameName": "Celeste"})["success"] is True


def test_network_failure_becomes_envelope(store):
    gateway = MarketplaceClient("http://down.test", store=store, http=BrokenTransport())
    assert gateway.get_all_games() == {"success": False, "message": "Network error"}


def test_delete_user_quotes_username(client, store):
    transport = FlaskTransport(client)
    gateway = MarketplaceClient("http://market.test", store=store, http=transport)
    gateway.delete_user("a b/c")
    assert transport.calls[-1] == ("DELETE", "/api/users/a%20b%2Fc")


@pytest.fixture
def run(gateway):
    runner = CliRunner()

    def _run(*args, input=None):
        return runner.invoke(cli, list(args), obj=gateway, input=input)
    return _run


def test_cli_register_validates_before_calling_server(run):
    result = run("register", "alice", "bad-email", input="secret1\nsecret1\n")
    assert result.exit_code == 1
    assert "valid email" in result.output

    result = run("register", "alice", "a@x.com", input="abc\nabc\n")
    assert result.exit_code == 1
    assert "at least 6" in result.output


def test_cli_user_journey(run):
    assert run("login", "admin", "--password", "admin123").exit_code == 0
    assert run("admin", "add-game", "Portal", "--price", "7").exit_code == 0
    assert run("admin", "add-account", "1", "acc0", "--password", "pw0").exit_code == 0
    assert run("logout").exit_code == 0

    assert run("register", "alice", "a@x.com", input="secret1\nsecret1\n").exit_code == 0
    result = run("login", "alice", "--password", "secret1")
    assert "Logged in as alice (user)" in result.output

    result = run("games")
    assert "[1] Portal" in result.output
    assert "available=1" in result.output

    result = run("buy", "1")
    assert result.exit_code == 0
    assert "password: pw0" in result.output

    result = run("buy", "1")
    assert result.exit_code == 1
    assert "No accounts available" in result.output


def test_cli_admin_group_hidden_from_users(run):
    run("register", "alice", "a@x.com", input="secret1\nsecret1\n")
    run("login", "alice", "--password", "secret1")

    result = run("admin", "stats")
    assert result.exit_code == 1
    assert "Admin only" in result.output


def test_cli_commands_need_login(run):
    result = run("buy", "1")
    assert result.exit_code == 1
    assert "log in" in result.output
