"""
HTTP tests for the /api routers, run through FastAPI TestClient on an in-memory store.
"""

from __future__ import annotations

import random

WALLET = "0x" + "d4" * 20


def _signup(client, email, gender, name="Test", password="pw123"):
    r = client.post(
        "/api/auth",
        json={"action": "signup", "email": email, "password": password, "first_name": name, "gender": gender},
    )
    assert r.status_code == 200, r.text
    return r.json()["userId"]


def _verify_and_profile(client, user_id, gender, looking_for):
    """Run the gender-specific verification flow and create a profile."""
    if gender == "female":
        body = {
            "action": "completeFaceVerification",
            "user_id": user_id,
            "detection": {"gender": "female", "confidence": 92.0, "faceDetected": True},
        }
    else:
        body = {"action": "completeWalletVerification", "user_id": user_id, "wallet_address": WALLET}
    r = client.post("/api/verification", json=body)
    assert r.status_code == 200, r.text
    assert r.json()["verification_status"] == "verified"
    r = client.post(
        "/api/profiles",
        json={"action": "create", "user_id": user_id, "name": f"User {user_id}", "age": 29,
              "gender": gender, "looking_for": looking_for},
    )
    assert r.status_code == 200, r.text


def test_health_and_stats(client):
    assert client.get("/health").json() == {"status": "ok"}
    r = client.get("/debug/stats")
    assert r.status_code == 200
    assert r.json()["stats"]["users"] == 0


def test_signup_and_login(client):
    """Signup -> pending face user; duplicate email -> 400; login checks the password."""
    r = client.post(
        "/api/auth",
        json={"action": "signup", "email": "ann@example.com", "password": "pw", "first_name": "Ann", "gender": "female"},
    )
    data = r.json()
    assert data["success"] is True
    assert data["user"]["verification_type"] == "face"
    assert data["user"]["verification_status"] == "pending"
    assert "password_hash" not in data["user"]

    dup = client.post(
        "/api/auth",
        json={"action": "signup", "email": "ann@example.com", "password": "x", "first_name": "A", "gender": "female"},
    )
    assert dup.status_code == 400
    assert dup.json() == {
        "success": False,
        "message": "User with this email already exists",
        "code": "duplicate_email",
    }

    bad = client.post("/api/auth", json={"action": "login", "email": "ann@example.com", "password": "nope"})
    assert bad.status_code == 401
    assert bad.json()["message"] == "Invalid email or password"

    ok = client.post("/api/auth", json={"action": "login", "email": "ann@example.com", "password": "pw"})
    assert ok.status_code == 200
    assert ok.json()["user"]["profile_completed"] is False


def test_unknown_action_rejected(client, db):
    """Every action-keyed endpoint answers an unknown or missing action with 'Invalid action'."""
    for path in ("/api/auth", "/api/users", "/api/profiles", "/api/verification"):
        r = client.post(path, json={"action": "deleteEverything"})
        assert r.status_code == 400, path
        assert r.json() == {"success": False, "message": "Invalid action", "code": "validation_error"}, path
    r = client.post("/api/users", json={"email": "no-action@example.com"})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid action"
    assert db.users == []


def test_action_selects_its_own_model(client):
    """A known action with a bad field reports that field, not the action."""
    r = client.post("/api/users", json={"action": "getById", "id": "not-a-number"})
    assert r.status_code == 400
    assert r.json()["message"] != "Invalid action"
    assert "id" in r.json()["message"]


def test_login_logs_bound_user(client):
    """Signup and login events carry the user id."""
    from structlog.testing import capture_logs

    with capture_logs() as logs:
        user_id = _signup(client, "logged@example.com", "female", password="pw")
        client.post("/api/auth", json={"action": "login", "email": "logged@example.com", "password": "pw"})
    events = {e["event"]: e for e in logs if e.get("user_id") == user_id}
    assert "api_signup_completed" in events
    assert events["api_login_completed"]["profile_completed"] is False
    assert all("password" not in key for e in logs for key in e)


def test_matches_without_profile_are_left_out(client, db, member):
    """A match whose other user has no profile appears in neither list."""
    from backend_buzz.services import matching

    me = member("male")
    her = member("female")
    ghost = member("female", with_profile=False)
    kept = matching.create_match(db, me.id, her.id)
    matching.create_match(db, me.id, ghost.id)
    body = client.get("/api/matches", params={"userId": me.id}).json()
    assert [m["id"] for m in body["matches"]] == [kept.id]
    assert [m["profile"]["user_id"] for m in body["matchedProfiles"]] == [her.id]


def test_malformed_store_maps_to_database_error(client):
    """A document row that cannot be loaded is a storage failure, not a crash."""
    from backend_buzz.api_server.dependencies import get_db
    from backend_buzz.database import Database, MemoryBackend

    broken = Database(MemoryBackend({"users": [{"id": 1, "email": "a@x.com"}]}))
    client.app.dependency_overrides[get_db] = lambda: broken
    r = client.get("/debug/stats")
    assert r.status_code == 500
    assert r.json() == {"success": False, "message": "Database error occurred", "code": "storage_error"}


def test_signup_missing_field(client):
    r = client.post("/api/auth", json={"action": "signup", "email": "x@example.com", "password": "pw", "gender": "male"})
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_users_endpoints(client):
    user_id = _signup(client, "u@example.com", "male")
    r = client.get("/api/users", params={"id": user_id})
    assert r.json()["user"]["email"] == "u@example.com"
    assert "password_hash" not in r.json()["user"]
    assert r.json()["profile"] is None
    assert client.get("/api/users", params={"email": "nobody@example.com"}).json()["user"] is None
    assert client.get("/api/users").status_code == 400

    r = client.post("/api/users", json={"action": "updateWalletInfo", "id": user_id, "wallet_address": WALLET})
    assert r.json()["changes"] == 1
    r = client.post("/api/users", json={"action": "getByWallet", "walletAddress": WALLET})
    assert r.json()["user"]["id"] == user_id

    r = client.post("/api/users", json={"action": "updateVerificationStatus", "id": 9999, "status": "verified"})
    assert r.json() == {"success": True, "changes": 0, "message": "Verification status updated"}

    client.post("/api/users", json={"action": "updateVerificationStatus", "id": user_id, "status": "verified"})
    r = client.post("/api/users", json={"action": "updateVerificationStatus", "id": user_id, "status": "failed"})
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_transition"


def test_profile_endpoints(client):
    user_id = _signup(client, "p@example.com", "female")
    missing = client.get("/api/profiles", params={"userId": user_id})
    assert missing.json() == {"success": False, "profile": None, "message": "No profile found for this user"}

    r = client.post("/api/profiles", json={"action": "create", "user_id": user_id, "name": "Pia", "age": 30})
    assert r.json()["success"] is True
    r = client.post("/api/profiles", json={"action": "update", "userId": user_id, "bio": "Coffee"})
    assert r.json()["changes"] == 1
    profile = client.get("/api/profiles", params={"userId": user_id}).json()["profile"]
    assert profile["bio"] == "Coffee"
    assert profile["name"] == "Pia"

    user = client.get("/api/users", params={"id": user_id}).json()["user"]
    assert user["profile_completed"] is True

    r = client.post("/api/profiles", json={"action": "create", "user_id": user_id, "name": "Pia", "age": 15})
    assert r.status_code == 400


def test_discover_validation(client):
    assert client.get("/api/discover").status_code == 400
    r = client.get("/api/discover", params={"userId": 4040})
    assert r.status_code == 404
    assert r.json()["code"] == "not_found"


def test_full_match_and_chat_flow(client):
    """Two verified users like each other, the pair shows up in the queue, then chat."""
    woman = _signup(client, "her@example.com", "female", "Her")
    man = _signup(client, "him@example.com", "male", "Him")
    _verify_and_profile(client, woman, "female", "male")
    _verify_and_profile(client, man, "male", "female")

    seen = client.get("/api/discover", params={"userId": man}).json()["profiles"]
    assert [p["user_id"] for p in seen] == [woman]

    r = client.post("/api/discover", json={"action": "swipe", "userId": man, "targetUserId": woman, "actionType": "like"})
    assert r.json()["isMatch"] is False
    assert r.json()["message"] == "Swipe recorded"
    r = client.post("/api/discover", json={"action": "swipe", "userId": woman, "targetUserId": man, "actionType": "like"})
    body = r.json()
    assert body["isMatch"] is True
    assert body["matchCreated"] is True
    assert body["message"] == "It's a match!"
    match_id = body["matchId"]

    assert client.get("/api/discover", params={"userId": man}).json()["profiles"] == []

    matches = client.get("/api/matches", params={"userId": man}).json()
    assert [m["id"] for m in matches["matches"]] == [match_id]
    assert matches["matchedProfiles"][0]["profile"]["user_id"] == woman

    queue = client.get("/api/match-queue", params={"userId": man}).json()["matchQueue"]
    assert queue[0]["status"] == "no_conversation"
    assert queue[0]["otherUser"]["user_id"] == woman

    r = client.post("/api/conversations", json={"userId": man, "matchId": match_id, "content": "Hi there"})
    assert r.status_code == 200, r.text
    conversation_id = r.json()["conversationId"]
    assert r.json()["message"]["content"] == "Hi there"

    r = client.post("/api/conversations", json={"userId": woman, "conversationId": conversation_id, "content": "Hello!"})
    assert r.status_code == 200

    assert client.get("/api/match-queue", params={"userId": woman}).json()["matchQueue"] == []

    conversations = client.get("/api/conversations", params={"userId": woman}).json()["conversations"]
    assert len(conversations) == 1
    assert conversations[0]["otherUser"]["user_id"] == man
    assert conversations[0]["lastMessage"]["content"] == "Hello!"

    history = client.get(
        "/api/conversations", params={"userId": man, "conversationId": conversation_id}
    ).json()["messages"]
    assert [m["content"] for m in history] == ["Hi there", "Hello!"]


def test_message_rules(client, db):
    from backend_buzz.services import matching

    match = matching.create_match(db, 1, 2)
    r = client.post("/api/conversations", json={"userId": 3, "matchId": match.id, "content": "intruder"})
    assert r.status_code == 403
    assert r.json()["code"] == "not_participant"
    assert db.conversations == []

    r = client.post("/api/conversations", json={"userId": 1, "matchId": match.id, "content": "   "})
    assert r.status_code == 400
    assert r.json()["code"] == "empty_content"
    assert db.conversations == []

    assert client.post("/api/conversations", json={"userId": 1, "content": "no target"}).status_code == 400
    assert client.post("/api/conversations", json={"userId": 1, "matchId": 999, "content": "hi"}).status_code == 404
    assert client.get("/api/conversations").status_code == 400

    r = client.post("/api/conversations", json={"userId": 1, "matchId": match.id, "content": "hi"})
    conversation_id = r.json()["conversationId"]
    r = client.get("/api/conversations", params={"userId": 3, "conversationId": conversation_id})
    assert r.status_code == 403


def test_face_verification_uses_analyzer_for_images(client):
    from backend_buzz.api_server.dependencies import get_face_analyzer
    from backend_buzz.api_server.server import app
    from backend_buzz.services.verification import SimulatedFaceAnalyzer

    app.dependency_overrides[get_face_analyzer] = lambda: SimulatedFaceAnalyzer(random.Random(0), detection_rate=0.0)
    user_id = _signup(client, "img@example.com", "female")
    r = client.post(
        "/api/verification",
        json={"action": "completeFaceVerification", "user_id": user_id, "image": "data:image/jpeg;base64,AAAA"},
    )
    assert r.status_code == 200
    assert r.json()["verification_status"] == "failed"
    assert r.json()["detection"]["faceDetected"] is False

    r = client.post("/api/verification", json={"action": "completeFaceVerification", "user_id": user_id})
    assert r.status_code == 400
