"""HTTP tests for the care calendar API."""

from datetime import timedelta

from freezegun import freeze_time

from carecalendar.services.clock import SystemClock, get_clock
from carecalendar.services.task_service import TaskService
from tests.conftest import NOW, USER_ID, utc

BASE = f"/api/{USER_ID}"


def iso(value):
    return value.isoformat().replace("+00:00", "Z")


def create(client, **overrides):
    body = {"title": "Feed ball python", "frequency": "weekly", "type": "feeding"}
    body.update(overrides)
    response = client.post(f"{BASE}/tasks", json=body)
    assert response.status_code == 201, response.text
    return response.json()


class TestTasks:

    def test_create_and_get(self, client):
        task = create(client, scheduled_time="18:00")

        assert task["frequency"] == "weekly"
        assert task["next_due_at"].startswith("2024-03-15T18:00:00")

        response = client.get(f"{BASE}/tasks/{task['id']}")
        assert response.status_code == 200
        assert response.json()["title"] == "Feed ball python"

    def test_create_invalid_frequency(self, client):
        response = client.post(f"{BASE}/tasks", json={"title": "Soak", "frequency": "custom"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_FREQUENCY_CONFIG"

    def test_create_rejects_bad_interval_for_any_frequency(self, client):
        response = client.post(
            f"{BASE}/tasks",
            json={"title": "Feed", "frequency": "weekly", "custom_frequency_days": -5},
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_FREQUENCY_CONFIG"
        assert client.get(f"{BASE}/tasks").json()["count"] == 0

    def test_create_rejects_bad_time(self, client):
        response = client.post(f"{BASE}/tasks", json={"title": "Feed", "frequency": "daily", "scheduled_time": "7pm"})
        assert response.status_code == 422

    def test_list_with_view(self, client):
        create(client, title="today", next_due_at=iso(utc(2024, 3, 15, 20, 0)))
        create(client, title="later", next_due_at=iso(utc(2024, 3, 30, 20, 0)))

        everything = client.get(f"{BASE}/tasks").json()
        today = client.get(f"{BASE}/tasks", params={"view": "today"}).json()

        assert everything["count"] == 2
        assert [t["title"] for t in today["tasks"]] == ["today"]

    def test_unknown_task_is_404(self, client):
        response = client.get(f"{BASE}/tasks/missing")

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": {"code": "NOT_FOUND", "message": "Task missing not found", "details": {"task_id": "missing"}},
        }

    def test_other_owner_cannot_read(self, client):
        task = create(client)
        assert client.get(f"/api/intruder/tasks/{task['id']}").status_code == 404

    def test_update_keeps_due_date(self, client):
        task = create(client)

        response = client.put(f"{BASE}/tasks/{task['id']}", json={"frequency": "daily", "notes": "Juvenile"})

        assert response.status_code == 200
        assert response.json()["frequency"] == "daily"
        assert response.json()["next_due_at"] == task["next_due_at"]

    def test_update_cannot_null_required_fields(self, client):
        task = create(client)

        response = client.put(f"{BASE}/tasks/{task['id']}", json={"title": None})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        assert client.get(f"{BASE}/tasks/{task['id']}").json()["title"] == "Feed ball python"

    def test_delete(self, client):
        task = create(client)

        assert client.delete(f"{BASE}/tasks/{task['id']}").status_code == 204
        assert client.get(f"{BASE}/tasks/{task['id']}").status_code == 404


class TestScheduling:

    def test_complete(self, client):
        task = create(client)

        response = client.post(
            f"{BASE}/tasks/{task['id']}/complete",
            json={"feeder_type": "rat", "quantity_offered": 1, "quantity_eaten": 1},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["log"]["feeder_type"] == "rat"
        assert body["task"]["next_due_at"].startswith("2024-03-22T10:00:00")

    def test_completion_timestamps_carry_utc_offset(self, client):
        task = create(client)

        completed = client.post(f"{BASE}/tasks/{task['id']}/complete").json()
        skipped = client.post(f"{BASE}/tasks/{task['id']}/skip").json()

        for body in (completed, skipped):
            assert body["log"]["completed_at"].endswith(("Z", "+00:00"))
            assert body["task"]["next_due_at"].endswith(("Z", "+00:00"))

    def test_complete_without_body(self, client):
        task = create(client)
        assert client.post(f"{BASE}/tasks/{task['id']}/complete").status_code == 200

    def test_skip(self, client):
        task = create(client)

        response = client.post(f"{BASE}/tasks/{task['id']}/skip", json={"reason": "In shed"})

        assert response.status_code == 200
        assert response.json()["log"]["skipped"] is True
        assert response.json()["log"]["skip_reason"] == "In shed"

    def test_complete_other_owners_task(self, client):
        task = create(client)
        assert client.post(f"/api/intruder/tasks/{task['id']}/complete").status_code == 404

    def test_logs(self, client, clock):
        task = create(client)
        client.post(f"{BASE}/tasks/{task['id']}/complete")
        clock.advance(timedelta(days=1))
        client.post(f"{BASE}/tasks/{task['id']}/skip")

        logs = client.get(f"{BASE}/tasks/{task['id']}/logs").json()
        assert [log["skipped"] for log in logs] == [True, False]

    def test_bulk_complete(self, client):
        ids = [create(client)["id"], create(client)["id"]]

        response = client.post(f"{BASE}/tasks/bulk-complete", json={"task_ids": ids})

        assert response.status_code == 200
        assert response.json() == {"succeeded": ids}

    def test_bulk_complete_partial_failure(self, client):
        first = create(client)["id"]

        response = client.post(f"{BASE}/tasks/bulk-complete", json={"task_ids": [first, "missing"]})

        assert response.status_code == 207
        error = response.json()["error"]
        assert error["code"] == "PARTIAL_BULK_FAILURE"
        assert error["details"]["succeeded"] == [first]
        assert list(error["details"]["failed"]) == ["missing"]


class TestDashboard:

    def test_dashboard(self, client):
        create(client, title="late", next_due_at=iso(NOW - timedelta(hours=1)))
        create(client, title="tonight", next_due_at=iso(utc(2024, 3, 15, 22, 0)))

        response = client.get(f"{BASE}/dashboard")

        assert response.status_code == 200
        body = response.json()
        assert [group["bucket"] for group in body["buckets"]] == ["overdue", "night"]
        assert body["buckets"][0]["label"] == "Overdue"
        assert body["total_tasks"] == 2
        assert body["reliability"]["score"] == 0
        assert body["reliability"]["expected"] == 10

    def test_dashboard_time_zone(self, client):
        create(client, next_due_at=iso(utc(2024, 3, 16, 2, 0)))

        body = client.get(f"{BASE}/dashboard", params={"tz": "America/New_York"}).json()

        assert body["timezone"] == "America/New_York"
        assert [group["bucket"] for group in body["buckets"]] == ["night"]

    def test_unknown_time_zone(self, client):
        response = client.get(f"{BASE}/dashboard", params={"tz": "Mars/Olympus"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_TIMEZONE"

    def test_unknown_view(self, client):
        assert client.get(f"{BASE}/dashboard", params={"view": "year"}).status_code == 422

    def test_analytics(self, client):
        task = create(client)
        client.post(f"{BASE}/tasks/{task['id']}/complete")

        body = client.get(f"{BASE}/analytics").json()

        assert body["total_completions"] == 1
        assert body["current_streak"] == 1
        assert body["recent_logs"][0]["task_title"] == "Feed ball python"
        assert len(body["heatmap"]) == 90


class TestService:

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"

    def test_metrics(self, client):
        task = create(client)
        client.post(f"{BASE}/tasks/{task['id']}/complete")

        counters = client.get("/metrics").json()["counters"]
        assert counters["care_tasks_completed_total"] == 1


@freeze_time("2024-03-15 10:00:00", tz_offset=0)
class TestSystemClock:

    def test_now_is_aware_utc(self):
        assert SystemClock().now() == NOW

    def test_default_clock_dependency(self):
        assert get_clock().now() == NOW

    def test_new_tasks_use_wall_clock(self, session):
        task = TaskService(session).create_task(USER_ID, "Mist", "daily", scheduled_time="08:00")
        assert task.next_due_at == utc(2024, 3, 16, 8, 0)
