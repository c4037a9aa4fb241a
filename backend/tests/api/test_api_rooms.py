"""
Room API tests
"""


class TestRoomReads:

    def test_list_rooms(self, client, manager_auth_headers):
        response = client.get("/housekeeping/rooms", headers=manager_auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert [r["number"] for r in data] == ["101", "102", "201"]
        assert data[0]["progress"] == {"completed": 0, "total": 18}
        assert data[0]["status"] == "checkout"

    def test_search_and_filter(self, client, maria_auth_headers, store):
        store.bulk_assign(["r-102"], "hk-2")

        by_number = client.get("/housekeeping/rooms?q=20", headers=maria_auth_headers).json()
        assert [r["id"] for r in by_number] == ["r-201"]

        by_status = client.get("/housekeeping/rooms?status=assigned", headers=maria_auth_headers).json()
        assert [r["id"] for r in by_status] == ["r-102"]
        assert by_status[0]["assigned_cleaner_name"] == "Ahmed Hassan"

    def test_counts(self, client, manager_auth_headers):
        response = client.get("/housekeeping/rooms/counts", headers=manager_auth_headers)
        assert response.json() == {"checkout": 3, "assigned": 0, "in_cleaning": 0, "available": 0}

    def test_unknown_room(self, client, manager_auth_headers):
        response = client.get("/housekeeping/rooms/r-999", headers=manager_auth_headers)
        assert response.status_code == 404
        assert "r-999" in response.json()["detail"]


class TestRoomSetup:

    def test_add_room(self, client, manager_auth_headers):
        response = client.post(
            "/housekeeping/rooms",
            json={"id": "r-301", "number": "301", "room_type": "Standard Twin", "floor": 3},
            headers=manager_auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["visible_tasks"][0]["task_id"] == "clean-mirror"

    def test_add_duplicate_room(self, client, manager_auth_headers):
        response = client.post(
            "/housekeeping/rooms",
            json={"id": "r-999", "number": "101", "room_type": "Deluxe King", "floor": 10},
            headers=manager_auth_headers,
        )
        assert response.status_code == 400

    def test_add_room_requires_manager(self, client, maria_auth_headers):
        response = client.post(
            "/housekeeping/rooms",
            json={"id": "r-301", "number": "301", "room_type": "Standard Twin", "floor": 3},
            headers=maria_auth_headers,
        )
        assert response.status_code == 403

    def test_add_adhoc_task(self, client, manager_auth_headers):
        response = client.post(
            "/housekeeping/rooms/r-101/tasks",
            json={"label": "Polish Brass", "category": "washroom"},
            headers=manager_auth_headers,
        )
        assert response.status_code == 201
        assert response.json() == {
            "task_id": "adhoc_polish-brass", "label": "Polish Brass",
            "category": "washroom", "completed": False,
        }

    def test_add_adhoc_task_blank_label(self, client, manager_auth_headers):
        response = client.post(
            "/housekeeping/rooms/r-101/tasks",
            json={"label": " ", "category": "washroom"},
            headers=manager_auth_headers,
        )
        assert response.status_code == 422
        assert "label" in response.json()["errors"]


class TestCleaningActions:

    def test_toggle_task(self, client, maria_auth_headers, cleaning_room):
        response = client.post(
            f"/housekeeping/rooms/{cleaning_room}/tasks/clean-mirror/toggle",
            headers=maria_auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["completed"] is True
        assert response.json()["progress"] == {"completed": 1, "total": 18}

    def test_toggle_out_of_order(self, client, maria_auth_headers, cleaning_room):
        response = client.post(
            f"/housekeeping/rooms/{cleaning_room}/tasks/scrub-toilet/toggle",
            headers=maria_auth_headers,
        )
        assert response.status_code == 400
        assert "Clean Mirror" in response.json()["detail"]

    def test_toggle_not_in_cleaning(self, client, maria_auth_headers):
        response = client.post(
            "/housekeeping/rooms/r-102/tasks/clean-mirror/toggle",
            headers=maria_auth_headers,
        )
        assert response.status_code == 409

    def test_toggle_other_cleaners_room(self, client, ahmed_auth_headers, cleaning_room):
        response = client.post(
            f"/housekeeping/rooms/{cleaning_room}/tasks/clean-mirror/toggle",
            headers=ahmed_auth_headers,
        )
        assert response.status_code == 403

    def test_manager_cannot_toggle(self, client, manager_auth_headers, cleaning_room):
        response = client.post(
            f"/housekeeping/rooms/{cleaning_room}/tasks/clean-mirror/toggle",
            headers=manager_auth_headers,
        )
        assert response.status_code == 403

    def test_toggle_view(self, client, maria_auth_headers, cleaning_room):
        response = client.post(
            f"/housekeeping/rooms/{cleaning_room}/view",
            json={"category": "bedroom"},
            headers=maria_auth_headers,
        )
        assert response.json() == {"room_id": cleaning_room, "active_category": "bedroom"}

    def test_finish(self, client, maria_auth_headers, maria, complete_room, cleaning_room, clock):
        clock.advance(minutes=30)
        complete_room(maria, cleaning_room)

        response = client.post(f"/housekeeping/rooms/{cleaning_room}/finish", headers=maria_auth_headers)

        assert response.status_code == 200
        record = response.json()
        assert record["duration_seconds"] == 1800
        assert record["housekeeper_id"] == "hk-1"
        assert len(record["completed_tasks"]) == 18
        room = client.get(f"/housekeeping/rooms/{cleaning_room}", headers=maria_auth_headers).json()
        assert room["status"] == "available"
        assert room["is_fully_clean"] is True

    def test_finish_with_open_tasks(self, client, maria_auth_headers, cleaning_room):
        response = client.post(f"/housekeeping/rooms/{cleaning_room}/finish", headers=maria_auth_headers)
        assert response.status_code == 400

    def test_abandon(self, client, maria_auth_headers, cleaning_room, clock):
        clock.advance(minutes=5)
        response = client.post(
            f"/housekeeping/rooms/{cleaning_room}/abandon",
            json={"note": "AC broken"},
            headers=maria_auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["time_spent"] == "05:00"
        assert response.json()["actionable"] is True

    def test_abandon_without_body(self, client, maria_auth_headers, cleaning_room):
        response = client.post(f"/housekeeping/rooms/{cleaning_room}/abandon", headers=maria_auth_headers)
        assert response.json()["note"] == "Unable to finish this room"

    def test_manager_cannot_abandon(self, client, manager_auth_headers, cleaning_room):
        response = client.post(f"/housekeeping/rooms/{cleaning_room}/abandon", headers=manager_auth_headers)
        assert response.status_code == 403

    def test_guest_checkout(self, client, manager_auth_headers, maria, complete_room, cleaning_room, store):
        complete_room(maria, cleaning_room)
        store.finish(maria, cleaning_room)

        response = client.post(
            f"/housekeeping/rooms/{cleaning_room}/guest-checkout",
            json={"expected_status": "available"},
            headers=manager_auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "checkout"
        assert response.json()["progress"]["completed"] == 0

    def test_guest_checkout_stale(self, client, manager_auth_headers):
        response = client.post(
            "/housekeeping/rooms/r-101/guest-checkout",
            json={"expected_status": "available"},
            headers=manager_auth_headers,
        )
        assert response.status_code == 409
