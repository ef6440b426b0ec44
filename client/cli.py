"""`market` command line: the user-facing side of the marketplace."""

import json

import click

from client.gateway import MarketplaceClient, SessionStore, DEFAULT_BASE_URL
from utils.validation import is_valid_email

MIN_PASSWORD_LEN = 6


def _report(result):
    """Echo an envelope's message, turning failures into a non-zero exit."""
    if not isinstance(result, dict) or "success" not in result:
        click.echo(json.dumps(result, indent=2, ensure_ascii=False))
        return
    if not result["success"]:
        raise click.ClickException(result.get("message") or "Request failed")
    click.echo(result.get("message") or "OK")


def _dump(data):
    if isinstance(data, dict) and data.get("success") is False:
        _report(data)
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


@click.group()
@click.option("--url", envvar="MARKET_URL", default=DEFAULT_BASE_URL, show_default=True, help="Server base URL.")
@click.option("--state-file", envvar="MARKET_STATE_FILE", default=None, help="Where the login is remembered.")
@click.pass_context
def cli(ctx, url, state_file):
    """Browse games, buy shared accounts and redeem keys."""
    if ctx.obj is None:
        ctx.obj = MarketplaceClient(url, store=SessionStore(state_file))


@cli.command()
@click.argument("username")
@click.argument("email")
@click.password_option()
@click.pass_obj
def register(client, username, email, password):
    """Create an account."""
    if not is_valid_email(email):
        raise click.ClickException("Please enter a valid email address")
    if len(password) < MIN_PASSWORD_LEN:
        raise click.ClickException(f"Password must be at least {MIN_PASSWORD_LEN} characters")
    _report(client.register_user({"username": username, "email": email, "password": password}))


@cli.command()
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True)
@click.pass_obj
def login(client, username, password):
    """Log in and remember the session."""
    result = client.login_user({"username": username, "password": password})
    _report(result)
    click.echo(f"Logged in as {result['user']['username']} ({result['user']['role']})")


@cli.command()
@click.pass_obj
def logout(client):
    """Forget the stored session."""
    _report(client.logout_user())


@cli.command()
@click.pass_obj
def whoami(client):
    """Show the logged-in user."""
    user = client.get_current_user()
    if not user:
        raise click.ClickException("Not logged in")
    click.echo(f"{user['username']} <{user['email']}> role={user['role']}")


@cli.command()
@click.pass_obj
def games(client):
    """List games and how many accounts are left."""
    result = client.get_all_games()
    if result.get("success") is False:
        _report(result)
    for game in result.values():
        available = sum(1 for a in game["accounts"] if a["status"] == "available")
        price = game["special_price"] if game["is_special"] and game["special_price"] is not None else game["price"]
        special = " *special*" if game["is_special"] else ""
        click.echo(f"[{game['id']}] {game['name']} ({game['platform'] or '-'}) price={price}{special} available={available}")


def _require_login(client):
    user = client.get_current_user()
    if not user:
        raise click.ClickException("Please log in first")
    return user


@cli.command()
@click.argument("game_id", type=int)
@click.pass_obj
def buy(client, game_id):
    """Buy an account of GAME_ID."""
    user = _require_login(client)
    result = client.purchase_account(game_id, user["id"])
    _report(result)
    account = result.get("account") or {}
    click.echo(f"username: {account.get('username')}")
    click.echo(f"password: {account.get('password')}")
    if account.get("guard_code"):
        click.echo(f"guard code: {account['guard_code']}")


@cli.command()
@click.argument("key_id", type=int)
@click.pass_obj
def redeem(client, key_id):
    """Redeem key KEY_ID."""
    user = _require_login(client)
    result = client.use_key(key_id, user["id"])
    _report(result)
    click.echo(f"key: {result['key']['key_value']}")


@cli.command()
@click.argument("game_name")
@click.option("--description", default="", help="Why this game should be added.")
@click.pass_obj
def suggest(client, game_name, description):
    """Suggest a game for the catalog."""
    user = _require_login(client)
    _report(client.add_suggestion({"gameName": game_name, "username": user["username"], "description": description}))


@cli.command()
@click.pass_obj
def purchases(client):
    """Show what you bought."""
    user = _require_login(client)
    _dump(client.get_user_purchases(user["id"]))


# ---------- admin panel ----------
@cli.group()
@click.pass_obj
def admin(client):
    """Admin tools (only shown to admins)."""
    user = client.get_current_user()
    if not user or user.get("role") != "admin":
        raise click.ClickException("Admin only")


@admin.command("add-game")
@click.argument("name")
@click.option("--app-id", default=None)
@click.option("--platform", default=None)
@click.option("--price", type=float, default=None)
@click.option("--category", default=None)
@click.option("--description", default=None)
@click.option("--library-image", default=None)
@click.option("--special-price", type=float, default=None, help="Marks the game as special.")
@click.pass_obj
def add_game(client, name, app_id, platform, price, category, description, library_image, special_price):
    result = client.add_game({
        "name": name,
        "appID": app_id,
        "platform": platform,
        "price": price,
        "category": category,
        "description": description,
        "libraryImage": library_image,
        "isSpecial": special_price is not None,
        "specialPrice": special_price,
    })
    _report(result)
    click.echo(f"game id: {result['game']['id']}")


@admin.command("delete-game")
@click.argument("game_id", type=int)
@click.pass_obj
def delete_game(client, game_id):
    _report(client.delete_game(game_id))


@admin.command("add-account")
@click.argument("game_id", type=int)
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True)
@click.option("--email", default=None)
@click.option("--guard-code", default=None)
@click.pass_obj
def add_account(client, game_id, username, password, email, guard_code):
    _report(client.add_game_account(game_id, {
        "username": username,
        "password": password,
        "email": email,
        "guardCode": guard_code,
    }))


@admin.command("delete-account")
@click.argument("game_id", type=int)
@click.argument("account_id", type=int)
@click.pass_obj
def delete_account(client, game_id, account_id):
    _report(client.delete_game_account(game_id, account_id))


@admin.command("keys")
@click.pass_obj
def list_keys(client):
    _dump(client.get_all_keys())


@admin.command("add-key")
@click.argument("game_id", type=int)
@click.argument("key_value")
@click.option("--key-type", default="steam", show_default=True)
@click.pass_obj
def add_key(client, game_id, key_value, key_type):
    _report(client.add_key({"keyValue": key_value, "gameId": game_id, "keyType": key_type}))


@admin.command("delete-key")
@click.argument("key_id", type=int)
@click.pass_obj
def delete_key(client, key_id):
    _report(client.delete_key(key_id))


@admin.command("suggestions")
@click.pass_obj
def list_suggestions(client):
    _dump(client.get_all_suggestions())


@admin.command("delete-suggestion")
@click.argument("suggestion_id", type=int)
@click.pass_obj
def delete_suggestion(client, suggestion_id):
    _report(client.delete_suggestion(suggestion_id))


@admin.command("users")
@click.pass_obj
def list_users(client):
    _dump(client.get_all_users())


@admin.command("delete-user")
@click.argument("username")
@click.confirmation_option(prompt="Delete this user?")
@click.pass_obj
def delete_user(client, username):
    _report(client.delete_user(username))


@admin.command("stats")
@click.pass_obj
def stats(client):
    _dump(client.get_stats())


if __name__ == "__main__":
    cli()
