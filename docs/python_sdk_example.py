"""
Backend Buzz API Python client example.

Uses the requests library. Mirrors the FastAPI routes under /api.
Run: pip install requests

Usage:
    from docs.python_sdk_example import BuzzClient
    client = BuzzClient("http://localhost:8000")
    me = client.login("ann@example.com", "secret")["user"]
    batch = client.discover(me["id"])
    client.swipe(me["id"], batch[0]["user_id"], "like")
"""

from __future__ import annotations

from typing import Any

import requests


class BuzzClientError(Exception):
    """Raised when the API returns an error response."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        response: requests.Response | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.response = response


class BuzzClient:
    """Client for the dating backend API."""

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = requests.Session()

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        resp = self._session.request(method, url, params=params, json=json, timeout=self.timeout)
        is_json = resp.headers.get("content-type", "").startswith("application/json")
        if not resp.ok:
            body = resp.json() if is_json else {}
            raise BuzzClientError(
                f"API error: {body.get('message', resp.text)}",
                status_code=resp.status_code,
                code=body.get("code"),
                response=resp,
            )
        return resp.json()

    def health(self) -> dict[str, str]:
        """Liveness check."""
        return self._request("GET", "/health")

    # --- Accounts ---

    def signup(self, email: str, password: str, first_name: str, gender: str) -> dict[str, Any]:
        """Create an email/password account. Women verify by face, men by wallet."""
        return self._request(
            "POST",
            "/api/auth",
            json={"action": "signup", "email": email, "password": password, "first_name": first_name, "gender": gender},
        )

    def login(self, email: str, password: str) -> dict[str, Any]:
        return self._request("POST", "/api/auth", json={"action": "login", "email": email, "password": password})

    def get_user(self, user_id: int) -> dict[str, Any]:
        """User plus current profile (either may be None)."""
        return self._request("GET", "/api/users", params={"id": user_id})

    # --- Verification ---

    def verify_face(self, user_id: int, image: str) -> dict[str, Any]:
        """Send a captured image (data URL); the server runs its face analyzer."""
        return self._request(
            "POST",
            "/api/verification",
            json={"action": "completeFaceVerification", "user_id": user_id, "image": image},
        )

    def verify_wallet(self, user_id: int, wallet_address: str, eth_balance: str | None = None) -> dict[str, Any]:
        body: dict[str, Any] = {
            "action": "completeWalletVerification",
            "user_id": user_id,
            "wallet_address": wallet_address,
        }
        if eth_balance is not None:
            body["eth_balance"] = eth_balance
        return self._request("POST", "/api/verification", json=body)

    # --- Profiles ---

    def create_profile(self, user_id: int, name: str, **fields: Any) -> dict[str, Any]:
        """fields: age, bio, interests, photos, location, gender, looking_for."""
        return self._request("POST", "/api/profiles", json={"action": "create", "user_id": user_id, "name": name, **fields})

    def update_profile(self, user_id: int, **fields: Any) -> dict[str, Any]:
        return self._request("POST", "/api/profiles", json={"action": "update", "userId": user_id, **fields})

    def get_profile(self, user_id: int) -> dict[str, Any] | None:
        return self._request("GET", "/api/profiles", params={"userId": user_id}).get("profile")

    # --- Discovery, matches, chat ---

    def discover(self, user_id: int, limit: int | None = None) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"userId": user_id}
        if limit is not None:
            params["limit"] = limit
        return self._request("GET", "/api/discover", params=params)["profiles"]

    def swipe(self, user_id: int, target_user_id: int, action_type: str = "like") -> dict[str, Any]:
        """action_type: like, pass or super_like. Response carries isMatch / matchId."""
        return self._request(
            "POST",
            "/api/discover",
            json={"action": "swipe", "userId": user_id, "targetUserId": target_user_id, "actionType": action_type},
        )

    def matches(self, user_id: int) -> dict[str, Any]:
        return self._request("GET", "/api/matches", params={"userId": user_id})

    def match_queue(self, user_id: int) -> list[dict[str, Any]]:
        """Matches nobody has written to yet."""
        return self._request("GET", "/api/match-queue", params={"userId": user_id})["matchQueue"]

    def conversations(self, user_id: int) -> list[dict[str, Any]]:
        return self._request("GET", "/api/conversations", params={"userId": user_id})["conversations"]

    def messages(self, user_id: int, conversation_id: int) -> list[dict[str, Any]]:
        return self._request(
            "GET", "/api/conversations", params={"userId": user_id, "conversationId": conversation_id}
        )["messages"]

    def send_message(
        self,
        user_id: int,
        content: str,
        *,
        conversation_id: int | None = None,
        match_id: int | None = None,
        message_type: str = "text",
    ) -> dict[str, Any]:
        """Pass match_id for the first message of a match; the conversation is created then."""
        if conversation_id is None and match_id is None:
            raise ValueError("conversation_id or match_id is required")
        body: dict[str, Any] = {"userId": user_id, "content": content, "messageType": message_type}
        if conversation_id is not None:
            body["conversationId"] = conversation_id
        if match_id is not None:
            body["matchId"] = match_id
        return self._request("POST", "/api/conversations", json=body)
