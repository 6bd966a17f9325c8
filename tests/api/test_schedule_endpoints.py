"""
Tests de los endpoints de clases, rejilla y reservas.
"""
from datetime import date

import pytest

from app.services import schedule_grid as grid_module

API = "/api/v1/schedule"


@pytest.fixture
def class_payload(discipline, rooms):
    return {
        "name": "Fundamentals",
        "discipline_id": discipline.id,
        "room_id": rooms[0].id,
        "day_of_week": 1,
        "start_time": "18:00:00",
        "end_time": "19:00:00",
        "max_capacity": 2,
        "start_date": "2025-06-02",
        "recurrence_end_date": "2025-06-16",
        "is_recurring": True,
    }


class TestClassEndpoints:
    def test_create_and_get(self, client, class_payload):
        response = client.post(f"{API}/classes", json=class_payload)
        assert response.status_code == 201
        body = response.json()
        assert body["occurrence_count"] == 3
        assert body["data_issue"] is None

        response = client.get(f"{API}/classes/{body['id']}")
        assert response.status_code == 200
        assert response.json()["name"] == "Fundamentals"

    def test_create_flags_incomplete_series(self, client, class_payload):
        class_payload["recurrence_end_date"] = None
        body = client.post(f"{API}/classes", json=class_payload).json()
        assert body["occurrence_count"] == 0
        assert body["data_issue"] == "recurring_without_end_date"

    @pytest.mark.parametrize("changes", [
        {"end_time": "17:00:00"},
        {"recurrence_end_date": "2025-05-01"},
        {"day_of_week": 7},
        {"max_capacity": 0},
    ])
    def test_create_validation(self, client, class_payload, changes):
        class_payload.update(changes)
        assert client.post(f"{API}/classes", json=class_payload).status_code == 422

    def test_create_unknown_room(self, client, class_payload):
        class_payload["room_id"] = 999
        assert client.post(f"{API}/classes", json=class_payload).status_code == 404

    def test_update_inconsistent_times(self, client, make_template):
        template = make_template()
        response = client.put(f"{API}/classes/{template.id}", json={"end_time": "17:30:00"})
        assert response.status_code == 400

    @pytest.mark.parametrize("field", [
        "name", "discipline_id", "day_of_week", "start_time", "end_time", "is_recurring", "is_active",
    ])
    def test_update_rejects_null_required_field(self, client, make_template, field):
        template = make_template()
        response = client.put(f"{API}/classes/{template.id}", json={field: None})
        assert response.status_code == 422

    def test_update_allows_clearing_optional_field(self, client, make_template):
        template = make_template()
        response = client.put(f"{API}/classes/{template.id}", json={"max_capacity": None})
        assert response.status_code == 200
        assert response.json()["max_capacity"] is None

    def test_list_filters(self, client, make_template):
        make_template(name="Monday")
        make_template(name="Tuesday", day_of_week=2, start_date=date(2025, 6, 3))
        response = client.get(f"{API}/classes", params={"day_of_week": 2})
        assert [c["name"] for c in response.json()] == ["Tuesday"]

    def test_soft_delete(self, client, make_template):
        template = make_template()
        response = client.delete(f"{API}/classes/{template.id}")
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        assert client.get(f"{API}/classes").json() == []
        # Sigue accesible por id
        assert client.get(f"{API}/classes/{template.id}").status_code == 200

    def test_bulk_delete(self, client, make_template):
        first = make_template()
        second = make_template()
        response = client.post(f"{API}/classes/bulk-delete", json={"template_ids": [first.id, second.id, first.id]})
        assert response.status_code == 200
        assert response.json() == {"deleted_count": 2}
        assert client.get(f"{API}/classes/{first.id}").status_code == 404

    def test_bulk_delete_empty(self, client):
        response = client.post(f"{API}/classes/bulk-delete", json={"template_ids": []})
        assert response.json() == {"deleted_count": 0}

    def test_reassign(self, client, make_template, rooms):
        template = make_template(room_id=rooms[0].id)
        response = client.patch(
            f"{API}/classes/{template.id}/reassign",
            json={"day_of_week": 3, "room_id": rooms[1].id},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["template"]["day_of_week"] == 3
        assert body["template"]["room_id"] == rooms[1].id
        assert body["impact"]["orphaned_reservations"] == 0

    def test_reassign_invalid_day(self, client, make_template):
        template = make_template()
        response = client.patch(f"{API}/classes/{template.id}/reassign", json={"day_of_week": 9})
        assert response.status_code == 400

    def test_reassign_missing_template_asks_reload(self, client):
        response = client.patch(f"{API}/classes/999/reassign", json={"day_of_week": 2})
        assert response.status_code == 404
        assert "Recarga" in response.json()["detail"]

    def test_occurrences(self, client, make_template):
        template = make_template()
        response = client.get(
            f"{API}/classes/{template.id}/occurrences",
            params={"start_date": "2025-06-01", "end_date": "2025-06-30"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["dates"] == ["2025-06-02", "2025-06-09", "2025-06-16"]
        assert body["count"] == 3

    def test_occurrences_default_end_near_max_date(self, client, make_template):
        template = make_template()
        response = client.get(
            f"{API}/classes/{template.id}/occurrences",
            params={"start_date": "9999-12-01"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["end_date"] == "9999-12-31"
        assert body["dates"] == []

    def test_occurrences_inverted_range(self, client, make_template):
        template = make_template()
        response = client.get(
            f"{API}/classes/{template.id}/occurrences",
            params={"start_date": "2025-06-30", "end_date": "2025-06-01"},
        )
        assert response.status_code == 400


class TestGridEndpoint:
    def test_week_grid(self, client, make_template, rooms, monkeypatch):
        monkeypatch.setattr(grid_module, "get_today_in_gym_timezone", lambda: date(2025, 6, 11))
        template = make_template(room_id=rooms[0].id)
        make_template(name="Open Mat", room_id=None, start_time=template.start_time.replace(hour=10),
                      end_time=template.start_time.replace(hour=11))

        response = client.get(f"{API}/grid", params={"view_mode": "week"})
        assert response.status_code == 200
        body = response.json()
        assert body["start_date"] == "2025-06-09"
        assert body["end_date"] == "2025-06-15"
        assert [r["name"] for r in body["rooms"]] == ["Mat Room", "Cage"]

        monday = body["days"][0]
        assert monday["weekday"] == 1
        first_cell = monday["cells"][0]
        assert [o["class_id"] for o in first_cell["occurrences"]] == [template.id]
        assert [o["name"] for o in first_cell["unassigned"]] == ["Open Mat"]

    def test_month_grid_with_range(self, client, make_template):
        make_template()
        response = client.get(
            f"{API}/grid",
            params={"view_mode": "month", "start_date": "2025-06-01", "end_date": "2025-06-30"},
        )
        assert response.status_code == 200
        assert len(response.json()["days"]) == 30

    @pytest.mark.parametrize("params", [
        {"view_mode": "year"},
        {"view_mode": "week", "start_date": "2025-06-15", "end_date": "2025-06-09"},
        {"view_mode": "week", "start_date": "2025-06-09"},
        {"view_mode": "month", "start_date": "2020-01-01", "end_date": "2025-01-01"},
    ])
    def test_invalid_requests(self, client, params):
        assert client.get(f"{API}/grid", params=params).status_code == 400


class TestReservationEndpoints:
    def _book(self, client, member, template, day="2025-06-09"):
        return client.post(
            f"{API}/reservations",
            json={"member_id": member.id, "class_id": template.id, "reservation_date": day},
        )

    def test_booking_flow(self, client, make_template, members):
        template = make_template(max_capacity=2)

        first = self._book(client, members[0], template)
        assert first.status_code == 201
        assert first.json()["status"] == "reserved"
        assert self._book(client, members[1], template).status_code == 201

        full = self._book(client, members[2], template)
        assert full.status_code == 409

        duplicate = self._book(client, members[0], template)
        assert duplicate.status_code == 409

        attendees = client.get(
            f"{API}/reservations/occurrence",
            params={"class_id": template.id, "date": "2025-06-09"},
        ).json()
        assert attendees["active_count"] == 2
        assert attendees["spots_left"] == 0
        assert [r["member_name"] for r in attendees["reservations"]] == ["Anna Claes", "Bram Wouters"]

    def test_no_occurrence_is_404(self, client, make_template, members):
        template = make_template()
        assert self._book(client, members[0], template, day="2025-06-10").status_code == 404

    def test_cancel_and_check_in(self, client, make_template, members):
        template = make_template()
        reservation_id = self._book(client, members[0], template).json()["id"]

        response = client.post(f"{API}/reservations/{reservation_id}/check-in")
        assert response.status_code == 200
        assert response.json()["status"] == "checked_in"
        assert client.post(f"{API}/reservations/{reservation_id}/check-in").status_code == 200
        assert client.post(f"{API}/reservations/{reservation_id}/cancel").status_code == 409

    def test_cancel_is_idempotent(self, client, make_template, members):
        template = make_template()
        reservation_id = self._book(client, members[0], template).json()["id"]
        for _ in range(2):
            response = client.post(f"{API}/reservations/{reservation_id}/cancel")
            assert response.status_code == 200
            assert response.json()["status"] == "cancelled"

    def test_unknown_reservation(self, client):
        assert client.post(f"{API}/reservations/999/cancel").status_code == 404

    def test_member_reservations(self, client, make_template, members):
        template = make_template()
        self._book(client, members[0], template, day="2025-06-02")
        cancelled_id = self._book(client, members[0], template, day="2025-06-09").json()["id"]
        client.post(f"{API}/reservations/{cancelled_id}/cancel")

        url = f"{API}/reservations/member/{members[0].id}"
        assert len(client.get(url).json()) == 2
        assert len(client.get(url, params={"include_cancelled": False}).json()) == 1
        assert [r["reservation_date"] for r in client.get(url, params={"date": "2025-06-09"}).json()] == ["2025-06-09"]
        assert client.get(f"{API}/reservations/member/999").status_code == 404
