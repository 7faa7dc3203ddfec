from locust import HttpUser, between, task
import itertools
import random

# Each simulated user signs up, verifies, creates a profile, then discovers and swipes.
_counter = itertools.count(1)


class BuzzUser(HttpUser):
    wait_time = between(1, 2)

    def on_start(self):
        n = next(_counter)
        self.gender = "female" if n % 2 else "male"
        r = self.client.post(
            "/api/auth",
            json={
                "action": "signup",
                "email": f"load{n}-{random.randint(0, 10**9)}@example.com",
                "password": "loadtest",
                "first_name": f"load{n}",
                "gender": self.gender,
            },
        )
        self.user_id = r.json()["userId"]
        if self.gender == "female":
            body = {
                "action": "completeFaceVerification",
                "user_id": self.user_id,
                "detection": {"gender": "female", "confidence": 95, "faceDetected": True},
            }
        else:
            body = {
                "action": "completeWalletVerification",
                "user_id": self.user_id,
                "wallet_address": "0x" + "%040x" % random.getrandbits(160),
            }
        self.client.post("/api/verification", json=body)
        self.client.post(
            "/api/profiles",
            json={"action": "create", "user_id": self.user_id, "name": f"load{n}", "gender": self.gender, "looking_for": "both"},
        )

    @task(3)
    def discover_and_swipe(self):
        profiles = self.client.get("/api/discover", params={"userId": self.user_id}).json().get("profiles", [])
        for p in profiles[:3]:
            self.client.post(
                "/api/discover",
                json={
                    "action": "swipe",
                    "userId": self.user_id,
                    "targetUserId": p["user_id"],
                    "actionType": random.choice(["like", "pass", "super_like"]),
                },
            )

    @task(1)
    def open_match_queue(self):
        queue = self.client.get("/api/match-queue", params={"userId": self.user_id}).json().get("matchQueue", [])
        if queue:
            self.client.post(
                "/api/conversations",
                json={"userId": self.user_id, "matchId": queue[0]["id"], "content": "hey!"},
            )
