from unittest import mock

from sqlalchemy.exc import OperationalError

from models import db, User


def test_suggestion_flow(client, admin_headers, alice):
    resp = client.post("/api/suggestions", json={
        "gameName": "Celeste", "username": "someone-else", "description": "please",
    }, headers=alice["headers"])
    body = resp.get_json()

    assert resp.status_code == 201
    suggestion = body["suggestion"]
    assert suggestion["game_name"] == "Celeste"
    # recorded under the logged-in user
    assert suggestion["username"] == "alice"

    listed = client.get("/api/suggestions", headers=admin_headers).get_json()
    assert listed[str(suggestion["id"])]["description"] == "please"

    resp = client.delete(f"/api/suggestions/{suggestion['id']}", headers=admin_headers)
    assert resp.get_json()["success"] is True
    assert client.get("/api/suggestions", headers=admin_headers).get_json() == {}


def test_suggestion_requires_game_name_and_login(client, alice):
    assert client.post("/api/suggestions", json={"gameName": "X"}).status_code == 401
    resp = client.post("/api/suggestions", json={"description": "?"}, headers=alice["headers"])
    assert resp.get_json()["error"] == "validation"


def test_suggestions_admin_only(client, alice):
    assert client.get("/api/suggestions", headers=alice["headers"]).status_code == 403
    assert client.delete("/api/suggestions/1", headers=alice["headers"]).status_code == 403


def test_list_users_keyed_by_username_without_passwords(client, admin_headers, alice):
    users = client.get("/api/users", headers=admin_headers).get_json()

    assert set(users) == {"admin", "alice"}
    assert users["alice"]["role"] == "user"
    assert users["admin"]["role"] == "admin"
    for user in users.values():
        assert set(user) == {"id", "username", "email", "role", "created"}


def test_delete_user(client, admin_headers, alice, make_game):
    game = make_game("Portal", accounts=1)
    client.post("/api/purchases", json={"gameId": game["id"]}, headers=alice["headers"])

    resp = client.delete("/api/users/alice", headers=admin_headers)
    assert resp.get_json() == {"success": True, "message": "User deleted"}
    assert "alice" not in client.get("/api/users", headers=admin_headers).get_json()

    # the sold account stays sold
    accounts = client.get("/api/games").get_json()[str(game["id"])]["accounts"]
    assert accounts[0]["status"] == "sold"
    # and the deleted user's session is gone
    assert client.get("/api/users/me", headers=alice["headers"]).status_code == 401


def test_delete_user_guards(client, admin_headers):
    assert client.delete("/api/users/nobody", headers=admin_headers).status_code == 404
    assert client.delete("/api/users/admin", headers=admin_headers).status_code == 403


def test_delete_user_with_slash_in_name(client, admin_headers, register):
    assert register("a/b", "ab@x.com").get_json()["success"] is True

    resp = client.delete("/api/users/a%2Fb", headers=admin_headers)
    assert resp.get_json() == {"success": True, "message": "User deleted"}
    assert "a/b" not in client.get("/api/users", headers=admin_headers).get_json()


def test_admin_can_delete_another_admin_but_not_self(app, client, admin_headers, register, login):
    register("root2")
    with app.app_context():
        user = User.query.filter_by(username="root2").one()
        user.role = "admin"
        db.session.commit()
    other_admin, _ = login("root2")

    assert client.delete("/api/users/admin", headers=other_admin).get_json()["success"] is True
    resp = client.delete("/api/users/root2", headers=other_admin)
    assert resp.status_code == 403


def test_stats_forbidden_for_regular_user(client, register, login):
    register("mallory")
    headers, user = login("mallory")
    assert user["role"] == "user"
    resp = client.get("/api/stats", headers={**headers, "X-Role": "admin"})
    assert resp.status_code == 403


def test_stats_counts(client, admin_headers, alice, make_game):
    make_game("Portal", accounts=2)
    special = make_game("Hades", accounts=1, isSpecial=True, specialPrice=3)
    client.post("/api/keys", json={"keyValue": "S-1", "gameId": special["id"]}, headers=admin_headers)
    client.post("/api/suggestions", json={"gameName": "Celeste"}, headers=alice["headers"])

    stats = client.get("/api/stats", headers=admin_headers).get_json()
    assert stats == {
        "totalUsers": 2,
        "totalGames": 2,
        "totalAccounts": 3,
        "totalKeys": 1,
        "specialGames": 1,
        "totalSuggestions": 1,
        "totalAdmins": 1,
    }


def test_stats_fall_back_to_zero_on_storage_error(client, admin_headers):
    with mock.patch("routes.stats.collect_stats", side_effect=OperationalError("SELECT", {}, Exception("down"))):
        stats = client.get("/api/stats", headers=admin_headers).get_json()
    assert set(stats.values()) == {0}
    assert len(stats) == 7


def test_audit_log_records_actions(client, admin_headers, alice):
    rows = client.get("/api/audit-logs", headers=admin_headers).get_json()
    actions = [r["action"] for r in rows]
    assert "REGISTER_SUCCESS" in actions
    assert "LOGIN_SUCCESS" in actions

    rows = client.get("/api/audit-logs?action=REGISTER_SUCCESS", headers=admin_headers).get_json()
    assert {r["action"] for r in rows} == {"REGISTER_SUCCESS"}
    assert client.get("/api/audit-logs", headers=alice["headers"]).status_code == 403


def test_unknown_api_route_is_envelope(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_other_routes_fall_back_to_index(client):
    resp = client.get("/games/portal")
    assert resp.status_code == 200
    assert b"<html" in resp.data


def test_seeded_admin_exists(app):
    with app.app_context():
        admin = User.query.filter_by(username="admin").one()
        assert admin.role == "admin"
        assert admin.password_hash != "admin123"
