"""
Exception message and history API tests
"""


class TestMessages:

    def test_list_and_reassign(self, client, manager_auth_headers, store, maria, cleaning_room):
        message = store.abandon(maria, cleaning_room, "AC broken")

        listed = client.get("/housekeeping/messages", headers=manager_auth_headers).json()
        assert [m["id"] for m in listed] == [message.id]
        assert listed[0]["actionable"] is True

        response = client.post(
            f"/housekeeping/messages/{message.id}/reassign",
            json={"cleaner_id": "hk-2"},
            headers=manager_auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["room_id"] == cleaning_room
        assert response.json()["expected_status"] == "checkout"

    def test_reassign_stale_message(self, client, manager_auth_headers, store, maria, cleaning_room):
        message = store.abandon(maria, cleaning_room)
        store.bulk_assign([cleaning_room], "hk-2")

        response = client.post(
            f"/housekeeping/messages/{message.id}/reassign",
            json={"cleaner_id": "hk-1"},
            headers=manager_auth_headers,
        )
        assert response.status_code == 409

    def test_housekeeper_cannot_read_messages(self, client, maria_auth_headers):
        assert client.get("/housekeeping/messages", headers=maria_auth_headers).status_code == 403


class TestHistory:

    def finish_room(self, store, actor, room_id, complete_room):
        store.select_room(actor, room_id)
        store.proceed(actor)
        complete_room(actor, room_id)
        store.finish(actor, room_id)

    def test_manager_sees_all(self, client, manager_auth_headers, store, maria, ahmed, complete_room, clock):
        self.finish_room(store, maria, "r-101", complete_room)
        clock.advance(minutes=10)
        self.finish_room(store, ahmed, "r-102", complete_room)

        response = client.get("/housekeeping/history/cleaning", headers=manager_auth_headers)
        assert [r["room_number"] for r in response.json()] == ["102", "101"]

        filtered = client.get("/housekeeping/history/cleaning?housekeeper_id=hk-1", headers=manager_auth_headers)
        assert [r["room_number"] for r in filtered.json()] == ["101"]

    def test_housekeeper_sees_own(self, client, maria_auth_headers, store, maria, ahmed, complete_room):
        self.finish_room(store, maria, "r-101", complete_room)
        self.finish_room(store, ahmed, "r-102", complete_room)

        response = client.get("/housekeeping/history/cleaning?housekeeper_id=hk-2", headers=maria_auth_headers)
        assert [r["housekeeper_id"] for r in response.json()] == ["hk-1"]

    def test_room_history(self, client, maria_auth_headers, store):
        store.bulk_assign(["r-101"], "hk-1")
        response = client.get("/housekeeping/history/rooms/hk-1", headers=maria_auth_headers)
        assert response.status_code == 200
        assert response.json()[0]["room_number"] == "101"
        assert response.json()[0]["assigned_by"] == "manager"

    def test_room_history_of_other_housekeeper(self, client, maria_auth_headers):
        assert client.get("/housekeeping/history/rooms/hk-2", headers=maria_auth_headers).status_code == 403

    def test_room_history_unknown_cleaner(self, client, manager_auth_headers):
        assert client.get("/housekeeping/history/rooms/hk-9", headers=manager_auth_headers).status_code == 404
