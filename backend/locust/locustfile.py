"""
Locust Load Test Suite

Time slots are not created through the API, so seed them first and pass
their ids in:

  LOCUST_SLOT_ID=1 LOCUST_CHURN_SLOT_ID=2 locust -f locustfile.py --tags contention
  LOCUST_SLOT_ID=1 LOCUST_CHURN_SLOT_ID=2 locust -f locustfile.py --tags churn
  locust -f locustfile.py --tags edge

After a contention run, verify nothing was overbooked:
  SELECT current_enrollment, max_capacity,
         (SELECT COUNT(*) FROM bookings WHERE time_slot_id = 1)
  FROM time_slots WHERE id = 1;
All three numbers must agree and enrollment must be <= capacity.
"""

import os
import random

from locust import HttpUser, task, between, tag

ADMIN_PROMO_CODE = os.getenv("LOCUST_ADMIN_PROMO_CODE", "admin")
SLOT_ID = int(os.getenv("LOCUST_SLOT_ID", "1"))
CHURN_SLOT_ID = int(os.getenv("LOCUST_CHURN_SLOT_ID", "2"))

SLOT_FULL = "This time slot is full"
ALREADY_BOOKED = "This student is already booked for this time slot"


def random_email():
    return f"load_{random.randint(100000, 999999)}@example.com"


class PackageHolder(HttpUser):
    """Base user that owns a fresh admin package."""

    abstract = True
    lessons = 3

    def on_start(self):
        self.email = random_email()
        resp = self.client.post("/api/v1/create-free-admin-package", json={
            "program": "Load Test",
            "lessons": self.lessons,
            "customerEmail": self.email,
            "promoCode": ADMIN_PROMO_CODE,
        })
        self.package_code = resp.json().get("packageCode") if resp.status_code == 200 else None

    def booking_body(self, slot_id):
        return {
            "packageCode": self.package_code,
            "timeSlotId": slot_id,
            "studentName": "Load Student",
            "customerName": "Load Customer",
            "customerEmail": self.email,
        }


class ContentionUser(PackageHolder):
    """
    TEST 1: Contention - many users, few seats

    Run: locust -f locustfile.py --tags contention -u 200 -r 100 --run-time 30s

    Every user races for the same slot. Only "full" and "already booked"
    rejections are acceptable; a 500 means the guarded update failed.
    """
    wait_time = between(0, 0.1)

    @tag("contention")
    @task
    def book_contested_slot(self):
        if not self.package_code:
            return

        with self.client.post(
            "/api/v1/book-time-slot",
            json=self.booking_body(SLOT_ID),
            catch_response=True,
        ) as resp:
            if resp.status_code == 200:
                resp.success()
            elif resp.status_code == 400 and resp.json().get("error") in (SLOT_FULL, ALREADY_BOOKED):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code} {resp.text}")


class ChurnUser(PackageHolder):
    """
    TEST 2: Churn - book and cancel in a loop

    Run: locust -f locustfile.py --tags churn -u 50 -r 10 --run-time 60s

    Each cycle spends one lesson and restores it. When the run ends every
    load-test package must be back at lessons_remaining = lessons_total.
    """
    wait_time = between(0.05, 0.2)
    lessons = 1

    @tag("churn")
    @task
    def book_then_cancel(self):
        if not self.package_code:
            return

        resp = self.client.post("/api/v1/book-time-slot", json=self.booking_body(CHURN_SLOT_ID))
        if resp.status_code != 200:
            return

        with self.client.post(
            "/api/v1/cancel-booking",
            json={"bookingId": resp.json()["bookingId"], "customerEmail": self.email},
            catch_response=True,
        ) as cancel:
            if cancel.status_code == 200:
                cancel.success()
            else:
                cancel.failure(f"Cancel failed: {cancel.status_code} {cancel.text}")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def _expect(self, path, body, expected):
        with self.client.post(path, json=body, catch_response=True) as resp:
            if resp.status_code == expected:
                resp.success()
            else:
                resp.failure(f"Expected {expected}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_package(self):
        self._expect("/api/v1/book-time-slot", {
            "packageCode": "DOES-NOT-EXIST",
            "timeSlotId": SLOT_ID,
            "studentName": "Nobody",
            "customerName": "Nobody",
            "customerEmail": random_email(),
        }, 400)

    @tag("edge")
    @task
    def missing_fields(self):
        self._expect("/api/v1/book-time-slot", {"packageCode": "X"}, 400)

    @tag("edge")
    @task
    def cancel_someone_elses_booking(self):
        self._expect("/api/v1/cancel-booking", {
            "bookingId": random.randint(1, 1000),
            "customerEmail": random_email(),
        }, 404)

    @tag("edge")
    @task
    def bad_admin_code(self):
        self._expect("/api/v1/create-free-admin-package", {
            "program": "Load Test",
            "lessons": 1,
            "customerEmail": random_email(),
            "promoCode": "letmein",
        }, 400)
