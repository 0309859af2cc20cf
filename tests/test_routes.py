"""
HTTP API tests: render endpoint, profile endpoints, health checks.
"""
import json

from conftest import API_KEY

AUTH = {"Authorization": f"Bearer {API_KEY}"}


class TestRenderEndpoint:

    def test_version_needs_no_key(self, client):
        response = client.post("/api/v2?action=version", json={})
        assert response.status_code == 200
        assert response.get_json() == {"success": True, "version": "2.3.0"}

    def test_action_from_body(self, client):
        response = client.post("/api/v2", json={"action": "version"})
        assert response.get_json()["success"] is True

    def test_unknown_action(self, client):
        response = client.post("/api/v2?action=explode", json={"api_key": API_KEY})
        data = response.get_json()

        assert response.status_code == 400
        assert data["success"] is False
        assert data["message"] == "Unknown action: explode"
        assert "runId" in data and "executionTimeSeconds" in data

    def test_missing_action(self, client):
        response = client.post("/api/v2", json={})
        assert response.status_code == 400
        assert response.get_json()["message"] == "Missing action"

    def test_bad_api_key(self, client, schedule_payload):
        schedule_payload["api_key"] = "wrong"
        response = client.post("/api/v2?action=generateHome", json=schedule_payload)

        assert response.status_code == 403
        assert response.get_json()["message"] == "Invalid or missing API key"

    def test_invalid_json(self, client):
        response = client.post("/api/v2?action=generateHome", data="{not json",
                               content_type="application/json")
        assert response.status_code == 400
        assert response.get_json()["message"] == "Request body is not valid JSON"

    def test_non_object_body(self, client):
        response = client.post("/api/v2?action=version", json=[1, 2])
        assert response.status_code == 400

    def test_json_string_body_decoded(self, client):
        response = client.post("/api/v2", json=json.dumps({"action": "version"}))
        assert response.status_code == 200
        assert response.get_json()["version"] == "2.3.0"

    def test_generate_home(self, client, schedule_payload):
        schedule_payload["api_key"] = API_KEY
        schedule_payload["runId"] = "run-42"

        response = client.post("/api/v2?action=generateHome", json=schedule_payload)
        data = response.get_json()

        assert response.status_code == 200
        assert data["success"] is True
        assert data["runId"] == "run-42"
        assert data["htmlUrl"] == "http://localhost:5000/storage/public/FlairApp/SummerGala/mom.html"
        assert [s["name"] for s in data["snapshots"]] == ["Full schedule", "Audio"]

        # Local artifacts are served back for browsing
        home = client.get("/storage/public/FlairApp/SummerGala/mom.html")
        assert home.status_code == 200
        assert home.mimetype == "text/html"
        assert b"Summer Gala - Home" in home.data

    def test_generate_home_with_bearer_header(self, client, schedule_payload):
        response = client.post("/api/v2?action=generateHome", json=schedule_payload, headers=AUTH)
        assert response.status_code == 200

    def test_unknown_preset_is_404(self, client, schedule_payload):
        schedule_payload["api_key"] = API_KEY
        schedule_payload["snapshots"][0]["groupPresetId"] = "byMood"

        response = client.post("/api/v2?action=generateHome", json=schedule_payload)
        data = response.get_json()

        assert response.status_code == 404
        assert data["success"] is False
        assert "byMood" in data["message"]


class TestProfileEndpoints:

    def test_requires_key(self, client, memory_profiles):
        assert client.get("/api/profiles/house").status_code == 403
        assert client.get("/api/profiles/house", headers={"Authorization": "Bearer nope"}).status_code == 403

    def test_put_get_delete(self, client, memory_profiles):
        profile = {"styles": {"row": {"new": {"backgroundColour": "yellow"}}}, "document": {"footer": "Ours"}}

        response = client.put("/api/profiles/house", json=profile, headers=AUTH)
        assert response.status_code == 200

        data = client.get("/api/profiles/house", headers=AUTH).get_json()
        assert data["profile"] == profile
        assert data["normalized"]["row"]["new"]["backgroundColour"] == "#FFFF00"
        assert data["normalized"]["document"]["footer"] == "Ours"

        assert client.delete("/api/profiles/house", headers=AUTH).status_code == 200
        assert client.get("/api/profiles/house", headers=AUTH).status_code == 404
        assert client.delete("/api/profiles/house", headers=AUTH).status_code == 404

    def test_put_rejects_non_object(self, client, memory_profiles):
        response = client.put("/api/profiles/house", json=["x"], headers=AUTH)
        assert response.status_code == 400

    def test_generate_home_uses_stored_profile(self, client, memory_profiles, schedule_payload):
        memory_profiles.set("house", {"document": {"footer": "Stored footer"}})
        schedule_payload["profileId"] = "house"

        response = client.post("/api/v2?action=generateHome", json=schedule_payload, headers=AUTH)
        assert response.status_code == 200

        page = client.get("/storage/public/FlairApp/SummerGala/Fullschedule.html")
        assert b"Stored footer" in page.data


class TestHealth:

    def test_ping(self, client):
        assert client.get("/ping").get_json() == {"status": "ok"}

    def test_healthz_without_database(self, client):
        data = client.get("/healthz").get_json()
        assert data["status"] == "ok"
        assert data["db"] == "not configured"

    def test_storage_traversal_is_404(self, client):
        assert client.get("/storage/../config.py").status_code == 404
        assert client.get("/storage/public/missing.html").status_code == 404
