"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags write   # create / edit / delete churn
  locust -f locustfile.py --tags read    # list and fetch
  locust -f locustfile.py --tags edge    # bad input
  locust -f locustfile.py                # All tests

Run with EMAIL_BACKEND=console on the server so approvals do not hit SMTP.
"""

import random
import string
from datetime import datetime, timezone, timedelta

from locust import HttpUser, task, between, tag

BASE = "/api/v1/bookings/"


def random_name():
    return "Load " + "".join(random.choices(string.ascii_lowercase, k=6))


def booking_body():
    start = datetime.now(timezone.utc) + timedelta(days=random.randint(1, 90))
    return {
        "contact_name": random_name(),
        "contact_email": f"load_{random.randint(10000, 99999)}@test.com",
        "event_title": "Load test event",
        "event_start": start.isoformat(),
        "event_end": (start + timedelta(hours=2)).isoformat(),
        "event_details": "Generated by locust",
    }


class BookingWriter(HttpUser):
    """Creates bookings, edits them, approves some and deletes the rest."""

    wait_time = between(0.1, 0.5)

    def on_start(self):
        self.booking_ids = []

    @tag("write")
    @task(3)
    def create(self):
        with self.client.post(BASE, json=booking_body(), catch_response=True) as resp:
            if resp.status_code == 200:
                self.booking_ids.append(resp.json()["data"]["id"])
                resp.success()
            else:
                resp.failure(f"create returned {resp.status_code}")

    @tag("write")
    @task(2)
    def edit(self):
        if not self.booking_ids:
            return
        booking_id = random.choice(self.booking_ids)
        self.client.patch(
            f"{BASE}{booking_id}",
            json={"request_note": random.choice([None, "Updated by locust"])},
            name=f"{BASE}[id]",
        )

    @tag("write")
    @task(1)
    def approve(self):
        if not self.booking_ids:
            return
        booking_id = random.choice(self.booking_ids)
        self.client.post(f"{BASE}{booking_id}/approve", name=f"{BASE}[id]/approve")

    @tag("write")
    @task(1)
    def delete(self):
        if not self.booking_ids:
            return
        booking_id = self.booking_ids.pop(random.randrange(len(self.booking_ids)))
        self.client.delete(f"{BASE}{booking_id}", name=f"{BASE}[id]")


class BookingReader(HttpUser):
    wait_time = between(0, 0.1)

    @tag("read")
    @task(1)
    def list_all(self):
        with self.client.get(BASE, catch_response=True) as resp:
            # 404 just means the table is empty
            if resp.status_code in (200, 404):
                resp.success()

    @tag("read")
    @task(3)
    def fetch_one(self):
        with self.client.get(
            f"{BASE}{random.randint(1, 500)}", name=f"{BASE}[id]", catch_response=True
        ) as resp:
            if resp.status_code in (200, 404):
                resp.success()


class BadInputUser(HttpUser):
    wait_time = between(0.5, 1)

    @tag("edge")
    @task
    def invalid_dates(self):
        body = booking_body()
        body["event_start"] = "not a date"
        with self.client.post(BASE, json=body, catch_response=True) as resp:
            if resp.status_code == 422:
                resp.success()
            else:
                resp.failure(f"expected 422, got {resp.status_code}")
