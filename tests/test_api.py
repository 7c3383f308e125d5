"""Tests for the JSON API."""

import pytest
from fastapi.testclient import TestClient

from helix_train.web import create_app

USER = {"X-User-Id": "u1"}


@pytest.fixture
def client(temp_db_path):
    with TestClient(create_app(temp_db_path)) as client:
        yield client


@pytest.fixture
def protocol_id(client, sample_protocol_dict):
    response = client.post("/protocols", json=sample_protocol_dict)
    assert response.status_code == 201
    return response.json()["id"]


class TestProtocolRoutes:
    """Tests for /protocols."""

    def test_create_and_get(self, client, protocol_id):
        response = client.get(f"/protocols/{protocol_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Full Body A"
        assert [b["name"] for b in data["blocks"]] == ["Main lifts", "Finisher"]
        assert data["prescribed_clock"] == "22:30"

    def test_validation_error_is_422(self, client):
        response = client.post("/protocols", json={"name": "", "blocks": []})
        assert response.status_code == 422

    def test_invalid_unit_is_422(self, client):
        response = client.post("/protocols", json={
            "name": "Bad",
            "blocks": [{
                "name": "A",
                "exercises": [{"exercise_id": "plank", "duration": {"value": 1, "unit": "days"}}],
            }],
        })
        assert response.status_code == 422

    def test_missing_is_404(self, client):
        assert client.get("/protocols/nope").status_code == 404

    def test_list(self, client, protocol_id):
        assert [p["id"] for p in client.get("/protocols").json()] == [protocol_id]

    def test_create_with_existing_id_does_not_replace(self, client, protocol_id):
        response = client.post("/protocols", json={"id": protocol_id, "name": "My copy", "blocks": []})

        assert response.status_code == 201
        assert response.json()["id"] != protocol_id
        names = sorted(p["name"] for p in client.get("/protocols").json())
        assert names == ["Full Body A", "My copy"]
        assert len(client.get(f"/protocols/{protocol_id}").json()["blocks"]) == 2

    def test_reposting_a_protocol_creates_a_copy(self, client, protocol_id):
        data = client.get(f"/protocols/{protocol_id}").json()
        data.pop("id")

        response = client.post("/protocols", json=data)

        assert response.status_code == 201
        copy = response.json()
        assert copy["blocks"][0]["id"] != data["blocks"][0]["id"]
        assert len(client.get("/protocols").json()) == 2

    def test_update_keeps_identity(self, client, protocol_id):
        data = client.get(f"/protocols/{protocol_id}").json()
        data["name"] = "Full Body B"

        response = client.put(f"/protocols/{protocol_id}", json=data)

        assert response.status_code == 200
        assert response.json()["id"] == protocol_id
        assert response.json()["blocks"][0]["id"] == data["blocks"][0]["id"]

    @pytest.mark.parametrize("exercise", [
        {"exercise_id": "plank", "duration": {"value": "abc", "unit": "s"}},
        {"exercise_id": "plank", "duration": 30},
        {"exercise_id": "plank", "load": {"value": 20, "unit": "stone"}},
        {"exercise_id": "plank", "reps": -1},
    ])
    def test_malformed_exercise_is_422(self, client, exercise):
        response = client.post("/protocols", json={
            "name": "Bad",
            "blocks": [{"name": "A", "exercises": [exercise]}],
        })
        assert response.status_code == 422

    def test_unknown_block_type_is_422(self, client):
        response = client.post("/protocols", json={
            "name": "Bad",
            "blocks": [{"name": "A", "block_type": "bogus", "exercises": []}],
        })
        assert response.status_code == 422

    @pytest.mark.parametrize("value", ["Infinity", "NaN"])
    def test_non_finite_duration_is_422_and_not_stored(self, client, value):
        body = (
            '{"name": "Bad", "blocks": [{"name": "A", "exercises": '
            '[{"exercise_id": "plank", "duration": {"value": ' + value + ', "unit": "s"}}]}]}'
        )
        response = client.post(
            "/protocols", content=body, headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 422
        listing = client.get("/protocols")
        assert listing.status_code == 200
        assert listing.json() == []

    def test_prescribed_load_in_response(self, client, protocol_id):
        squat = client.get(f"/protocols/{protocol_id}").json()["blocks"][0]["exercises"][0]
        assert squat["load"] == {"value": 100, "unit": "kg"}


class TestInstanceRoutes:
    """Tests for /workout-instances."""

    def test_requires_user_header(self, client, protocol_id):
        assert client.post(f"/protocols/{protocol_id}/instances").status_code == 401

    def test_instantiate_and_log(self, client, protocol_id):
        response = client.post(f"/protocols/{protocol_id}/instances", headers=USER)
        assert response.status_code == 201
        instance = response.json()
        assert instance["progress"]["completion_ratio"] == 0
        assert instance["ended_at"] is None

        squat = instance["blocks"][0]["exercises"][0]
        plank = instance["blocks"][1]["exercises"][0]
        client.patch(
            f"/workout-instances/{instance['id']}/exercises/{squat['id']}",
            json={"reps_completed": 5, "actual_duration": {"value": 90, "unit": "s"}},
            headers=USER,
        )
        response = client.patch(
            f"/workout-instances/{instance['id']}/exercises/{plank['id']}",
            json={"actual_duration": {"value": 0.5, "unit": "min"}},
            headers=USER,
        )

        assert response.status_code == 200
        progress = response.json()["progress"]
        assert progress["elapsed_seconds"] == 120
        assert progress["elapsed_clock"] == "02:00"
        assert progress["completed"] == 2

    def test_negative_duration_rejected(self, client, protocol_id):
        instance = client.post(f"/protocols/{protocol_id}/instances", headers=USER).json()
        leaf = instance["blocks"][0]["exercises"][0]
        response = client.patch(
            f"/workout-instances/{instance['id']}/exercises/{leaf['id']}",
            json={"actual_duration": {"value": -5, "unit": "s"}},
            headers=USER,
        )
        assert response.status_code == 422

    def test_negative_reps_rejected(self, client, protocol_id):
        instance = client.post(f"/protocols/{protocol_id}/instances", headers=USER).json()
        leaf = instance["blocks"][0]["exercises"][0]
        response = client.patch(
            f"/workout-instances/{instance['id']}/exercises/{leaf['id']}",
            json={"reps_completed": -3},
            headers=USER,
        )
        assert response.status_code == 422

    def test_logged_load_counts_toward_volume(self, client, protocol_id):
        instance = client.post(f"/protocols/{protocol_id}/instances", headers=USER).json()
        squat = instance["blocks"][0]["exercises"][0]
        assert squat["prescribed_load"] == {"value": 100, "unit": "kg"}

        response = client.patch(
            f"/workout-instances/{instance['id']}/exercises/{squat['id']}",
            json={"reps_completed": 5, "actual_load": {"value": 120, "unit": "kg"}},
            headers=USER,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["blocks"][0]["exercises"][0]["actual_load"] == {"value": 120, "unit": "kg"}
        assert data["progress"]["volume_kg"] == 600
        assert data["progress"]["blocks"][0]["volume_kg"] == 600

    def test_complete_then_edit_conflicts(self, client, protocol_id):
        instance = client.post(f"/protocols/{protocol_id}/instances", headers=USER).json()
        response = client.post(f"/workout-instances/{instance['id']}/complete", headers=USER)
        assert response.json()["is_completed"] is True

        leaf = instance["blocks"][0]["exercises"][0]
        response = client.patch(
            f"/workout-instances/{instance['id']}/exercises/{leaf['id']}",
            json={"reps_completed": 5},
            headers=USER,
        )
        assert response.status_code == 409

    def test_other_user_gets_404(self, client, protocol_id):
        instance = client.post(f"/protocols/{protocol_id}/instances", headers=USER).json()
        response = client.get(
            f"/workout-instances/{instance['id']}", headers={"X-User-Id": "u2"}
        )
        assert response.status_code == 404

    def test_add_set(self, client, protocol_id):
        instance = client.post(f"/protocols/{protocol_id}/instances", headers=USER).json()
        leaf = instance["blocks"][0]["exercises"][0]

        response = client.post(
            f"/workout-instances/{instance['id']}/exercises/{leaf['id']}/sets", headers=USER
        )

        assert response.status_code == 201
        assert response.json()["set_number"] == 2
        detail = client.get(f"/workout-instances/{instance['id']}", headers=USER).json()
        assert len(detail["blocks"][0]["exercises"]) == 3

    def test_deleting_protocol_keeps_instances(self, client, protocol_id):
        instance = client.post(f"/protocols/{protocol_id}/instances", headers=USER).json()

        response = client.delete(f"/protocols/{protocol_id}")
        assert response.json()["instances_kept"] == 1

        detail = client.get(f"/workout-instances/{instance['id']}", headers=USER).json()
        assert detail["template_available"] is False
        assert detail["protocol_name"] == "Full Body A"
        assert detail["blocks"] == instance["blocks"]

    def test_adhoc_block_session(self, client):
        response = client.post(
            "/workout-block-instances",
            json={"block": {"name": "Quick core", "exercises": [{"exercise_id": "plank"}]}},
            headers=USER,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["template_protocol_id"] is None
        assert data["blocks"][0]["template_block_id"] is None
        assert len(client.get("/workout-instances", headers=USER).json()) == 1
