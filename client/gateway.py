"""
HTTP gateway to the marketplace API.

Every method returns the decoded JSON body as-is, so callers handle the
`{success, message, ...}` envelope exactly like the server sent it. The
logged-in user and its session token are kept in a small JSON state file.
"""

import json
import logging
import os

import requests
from urllib.parse import quote

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://127.0.0.1:5002"
DEFAULT_STATE_FILE = os.path.join(os.path.expanduser("~"), ".market", "session.json")
NETWORK_ERROR = {"success": False, "message": "Network error"}


class SessionStore:
    """Persists `{user, token}` between runs."""

    def __init__(self, path: str = None):
        self.path = path or os.getenv("MARKET_STATE_FILE") or DEFAULT_STATE_FILE

    def load(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable session file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, user: dict, token: str):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as fh:
            json.dump({"user": user, "token": token}, fh)

    def clear(self):
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass

    @property
    def user(self):
        return self.load().get("user")

    @property
    def token(self):
        return self.load().get("token")


class MarketplaceClient:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, store: SessionStore = None, http=None, timeout: float = 10):
        self.api_url = base_url.rstrip("/") + "/api"
        self.store = store or SessionStore()
        self.http = http or requests.Session()
        self.timeout = timeout

    def api_call(self, endpoint: str, method: str = "GET", data: dict = None):
        headers = {"Content-Type": "application/json"}
        token = self.store.token
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self.http.request(
                method,
                f"{self.api_url}{endpoint}",
                json=data,
                headers=headers,
                timeout=self.timeout,
            )
            return response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("API call %s %s failed: %s", method, endpoint, exc)
            return dict(NETWORK_ERROR)

    # ---------- session ----------
    def register_user(self, user_data: dict):
        return self.api_call("/users/register", "POST", user_data)

    def login_user(self, credentials: dict):
        result = self.api_call("/users/login", "POST", credentials)
        if result.get("success") and result.get("user"):
            self.store.save(result["user"], result.get("token"))
        return result

    def logout_user(self):
        result = {"success": True, "message": "Logged out"}
        if self.store.token:
            result = self.api_call("/users/logout", "POST")
        self.store.clear()
        return result

    def get_current_user(self):
        return self.store.user

    def whoami(self):
        return self.api_call("/users/me")

    # ---------- catalog ----------
    def get_all_games(self):
        return self.api_call("/games")

    def add_game(self, game_data: dict):
        return self.api_call("/games", "POST", game_data)

    def delete_game(self, game_id):
        return self.api_call(f"/games/{game_id}", "DELETE")

    def add_game_account(self, game_id, account_data: dict):
        return self.api_call(f"/games/{game_id}/accounts", "POST", account_data)

    def delete_game_account(self, game_id, account_id):
        return self.api_call(f"/games/{game_id}/accounts/{account_id}", "DELETE")

    # ---------- purchases & keys ----------
    def purchase_account(self, game_id, user_id=None):
        payload = {"gameId": game_id}
        if user_id is not None:
            payload["userId"] = user_id
        return self.api_call("/purchases", "POST", payload)

    def get_user_purchases(self, user_id):
        return self.api_call(f"/users/{user_id}/purchases")

    def get_all_keys(self):
        return self.api_call("/keys")

    def add_key(self, key_data: dict):
        return self.api_call("/keys", "POST", key_data)

    def delete_key(self, key_id):
        return self.api_call(f"/keys/{key_id}", "DELETE")

    def use_key(self, key_id, user_id=None):
        payload = {"userId": user_id} if user_id is not None else {}
        return self.api_call(f"/keys/{key_id}/use", "POST", payload)

    # ---------- suggestions ----------
    def add_suggestion(self, suggestion_data: dict):
        return self.api_call("/suggestions", "POST", suggestion_data)

    def get_all_suggestions(self):
        return self.api_call("/suggestions")

    def delete_suggestion(self, suggestion_id):
        return self.api_call(f"/suggestions/{suggestion_id}", "DELETE")

    # ---------- users & stats ----------
    def get_all_users(self):
        return self.api_call("/users")

    def delete_user(self, username: str):
        return self.api_call(f"/users/{quote(username, safe='')}", "DELETE")

    def get_stats(self):
        return self.api_call("/stats")
