from models import db, GameAccount, Key


def test_list_games_is_public_and_includes_empty_accounts(client, make_game):
    game = make_game("Portal")

    resp = client.get("/api/games")
    body = resp.get_json()

    assert resp.status_code == 200
    assert str(game["id"]) in body
    assert body[str(game["id"])]["accounts"] == []


def test_list_games_hides_account_credentials(client, make_game):
    game = make_game("Portal", accounts=2)

    accounts = client.get("/api/games").get_json()[str(game["id"])]["accounts"]

    assert len(accounts) == 2
    for account in accounts:
        assert set(account) == {"id", "username", "email", "status"}
        assert account["status"] == "available"


def test_list_games_newest_first(client, make_game):
    first = make_game("Old")
    second = make_game("New")

    ids = list(client.get("/api/games").get_json())
    assert ids.index(str(second["id"])) < ids.index(str(first["id"]))


def test_add_game_accepts_source_field_names(client, admin_headers):
    resp = client.post("/api/games", json={
        "name": "Hades",
        "appID": "1145360",
        "platform": "steam",
        "price": "24.99",
        "libraryImage": "https://img/hades.jpg",
        "isSpecial": True,
        "specialPrice": 9.5,
    }, headers=admin_headers)
    body = resp.get_json()

    assert resp.status_code == 201
    assert body["success"] is True
    game = body["game"]
    assert game["app_id"] == "1145360"
    assert game["price"] == 24.99
    assert game["library_image"] == "https://img/hades.jpg"
    assert game["is_special"] is True
    assert game["special_price"] == 9.5


def test_add_game_validates(client, admin_headers):
    assert client.post("/api/games", json={}, headers=admin_headers).get_json()["error"] == "validation"
    resp = client.post("/api/games", json={"name": "X", "price": "free"}, headers=admin_headers)
    assert resp.get_json()["error"] == "validation"
    resp = client.post("/api/games", json={"name": "X", "price": -1}, headers=admin_headers)
    assert resp.get_json()["error"] == "validation"


def test_catalog_writes_are_admin_only(client, alice, make_game):
    game = make_game("Portal", accounts=1)

    assert client.post("/api/games", json={"name": "X"}).status_code == 401
    assert client.post("/api/games", json={"name": "X"}, headers=alice["headers"]).status_code == 403
    assert client.delete(f"/api/games/{game['id']}", headers=alice["headers"]).status_code == 403
    resp = client.post(f"/api/games/{game['id']}/accounts", json={"username": "u", "password": "p"},
                       headers=alice["headers"])
    assert resp.get_json() == {"success": False, "message": "Forbidden", "error": "forbidden"}


def test_add_account_returns_full_account(client, admin_headers, make_game):
    game = make_game("Portal")
    resp = client.post(f"/api/games/{game['id']}/accounts", json={
        "username": "steamuser", "password": "hunter2", "email": "s@x.com", "guardCode": "ABC12",
    }, headers=admin_headers)
    account = resp.get_json()["account"]

    assert resp.status_code == 201
    assert account["game_id"] == game["id"]
    assert account["guard_code"] == "ABC12"
    assert account["status"] == "available"


def test_add_account_unknown_game(client, admin_headers):
    resp = client.post("/api/games/999/accounts", json={"username": "u", "password": "p"}, headers=admin_headers)
    assert resp.status_code == 404


def test_delete_account_must_belong_to_game(client, admin_headers, make_game):
    game = make_game("Portal", accounts=1)
    other = make_game("Doom")
    account_id = client.get("/api/games").get_json()[str(game["id"])]["accounts"][0]["id"]

    resp = client.delete(f"/api/games/{other['id']}/accounts/{account_id}", headers=admin_headers)
    assert resp.status_code == 404

    resp = client.delete(f"/api/games/{game['id']}/accounts/{account_id}", headers=admin_headers)
    assert resp.get_json()["success"] is True
    assert client.get("/api/games").get_json()[str(game["id"])]["accounts"] == []


def test_delete_game_cascades_only_to_its_own_rows(app, client, admin_headers, make_game):
    doomed = make_game("Doomed", accounts=2)
    kept = make_game("Kept", accounts=1)
    client.post("/api/keys", json={"keyValue": "AAA-1", "gameId": doomed["id"]}, headers=admin_headers)
    client.post("/api/keys", json={"keyValue": "BBB-1", "gameId": kept["id"]}, headers=admin_headers)

    resp = client.delete(f"/api/games/{doomed['id']}", headers=admin_headers)
    assert resp.get_json() == {"success": True, "message": "Game deleted"}

    with app.app_context():
        assert GameAccount.query.filter_by(game_id=doomed["id"]).count() == 0
        assert Key.query.filter_by(game_id=doomed["id"]).count() == 0
        assert GameAccount.query.filter_by(game_id=kept["id"]).count() == 1
        assert Key.query.filter_by(game_id=kept["id"]).count() == 1

    games = client.get("/api/games").get_json()
    assert str(doomed["id"]) not in games
    assert str(kept["id"]) in games


def test_delete_missing_game(client, admin_headers):
    assert client.delete("/api/games/12345", headers=admin_headers).status_code == 404
