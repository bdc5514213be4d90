"""
Load testing for the gamepass proxy using Locust.

Mixes hot users (served from the result cache after the first hit) with a
long tail of cold users that force upstream traversals.
"""

import random

from locust import HttpUser, between, task

HOT_USER_IDS = ["123", "456", "789"]


class GamepassUser(HttpUser):
    """Simulated game client."""

    wait_time = between(0.5, 2.0)

    def _check(self, response):
        if response.status_code == 200:
            if "gamePasses" in response.json():
                response.success()
            else:
                response.failure("Missing gamePasses in response")
        elif response.status_code == 500:
            response.failure("Upstream fetch failed")
        else:
            response.failure(f"Unexpected status code: {response.status_code}")

    @task(5)
    def get_hot_user(self):
        """Requests that should mostly hit the cache."""
        user_id = random.choice(HOT_USER_IDS)
        with self.client.get(f"/gamepasses/{user_id}", name="/gamepasses/[hot]",
                             catch_response=True) as response:
            self._check(response)

    @task(1)
    def get_cold_user(self):
        """Requests that force an upstream traversal."""
        user_id = str(random.randint(1_000_000, 9_999_999))
        with self.client.get(f"/gamepasses/{user_id}", name="/gamepasses/[cold]",
                             catch_response=True) as response:
            self._check(response)

    @task(1)
    def health(self):
        self.client.get("/health")
