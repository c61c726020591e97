"""Tests for the HTTP API using the Flask test client in DEV_MODE."""
from datetime import date

import pytest

from todo_groups.models.user_model import UserModel
from todo_groups.services.materializer_service import InstanceMaterializer


@pytest.fixture
def group_id(client, auth_headers):
    response = client.post("/api/groups", json={"name": "Home", "icon": "house"}, headers=auth_headers())
    return response.get_json()["group_id"]


def create_template(client, headers, group_id, **overrides):
    body = {
        "title": "Standup",
        "start_time": "09:00",
        "end_time": "09:30",
        "recurrence": {"type": "daily"},
    }
    body.update(overrides)
    return client.post(f"/api/groups/{group_id}/templates", json=body, headers=headers)


class TestHealthAndAuth:

    def test_health(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.get_json()["store"] == "MemoryStore"

    def test_missing_identity_is_401(self, client):
        response = client.get("/api/groups")
        assert response.status_code == 401
        assert response.get_json()["code"] == "AUTHENTICATION_ERROR"

    def test_unknown_route_is_json_404(self, client, auth_headers):
        response = client.get("/api/nothing-here", headers=auth_headers())
        assert response.status_code == 404
        assert response.get_json()["code"] == "NOT_FOUND"


class TestGroups:

    def test_create_and_list(self, client, auth_headers, group_id):
        response = client.get("/api/groups", headers=auth_headers())
        assert response.status_code == 200
        groups = response.get_json()["groups"]
        assert [(g["group_id"], g["name"], g["icon"]) for g in groups] == [(group_id, "Home", "house")]
        assert groups[0]["created_at"].endswith("Z")

    def test_create_requires_name(self, client, auth_headers):
        response = client.post("/api/groups", json={"name": "  "}, headers=auth_headers())
        assert response.status_code == 400
        assert response.get_json()["code"] == "VALIDATION_ERROR"

    def test_non_object_body_rejected(self, client, auth_headers):
        response = client.post("/api/groups", json=["Home"], headers=auth_headers())
        assert response.status_code == 400

    def test_other_users_group_is_404(self, client, auth_headers, group_id):
        response = client.get(f"/api/groups/{group_id}", headers=auth_headers("user2"))
        assert response.status_code == 404
        assert client.get("/api/groups", headers=auth_headers("user2")).get_json()["groups"] == []

    def test_delete_group_cascades(self, client, auth_headers, group_id):
        create_template(client, auth_headers(), group_id)

        response = client.delete(f"/api/groups/{group_id}", headers=auth_headers())

        assert response.status_code == 200
        assert response.get_json() == {"group_id": group_id, "deleted_templates": 1, "deleted_instances": 1}
        assert client.get(f"/api/groups/{group_id}", headers=auth_headers()).status_code == 404


class TestTemplates:

    def test_create_template_materializes_today(self, client, auth_headers, group_id):
        response = create_template(client, auth_headers(), group_id)

        assert response.status_code == 201
        body = response.get_json()
        assert body["template"]["recurrence"] == {"type": "daily"}
        assert body["today_instance"]["date"] == "2024-06-01"
        assert body["today_instance"]["status"] == "pending"

    def test_template_not_due_today_has_no_instance(self, client, auth_headers, group_id):
        # 2024-06-01 is a Saturday
        response = create_template(
            client, auth_headers(), group_id, recurrence={"type": "weekly", "days_of_week": [1, 3, 5]}
        )
        assert response.status_code == 201
        assert response.get_json()["today_instance"] is None

    def test_new_template_added_to_already_materialized_day(self, client, auth_headers, group_id):
        create_template(client, auth_headers(), group_id, title="Standup")
        create_template(client, auth_headers(), group_id, title="Retro", start_time="16:00", end_time="17:00")

        response = client.get(f"/api/groups/{group_id}/instances", headers=auth_headers())
        assert [i["title"] for i in response.get_json()["instances"]] == ["Standup", "Retro"]

    def test_invalid_template(self, client, auth_headers, group_id):
        response = create_template(client, auth_headers(), group_id, end_time="08:00")
        assert response.status_code == 400
        assert "End time" in response.get_json()["error"]

    def test_list_and_delete_template(self, client, auth_headers, group_id):
        template_id = create_template(client, auth_headers(), group_id).get_json()["template"]["template_id"]

        listed = client.get(f"/api/groups/{group_id}/templates", headers=auth_headers()).get_json()
        assert [t["template_id"] for t in listed["templates"]] == [template_id]

        response = client.delete(f"/api/groups/{group_id}/templates/{template_id}", headers=auth_headers())
        assert response.status_code == 200

        # Today's instance outlives its template
        instances = client.get(f"/api/groups/{group_id}/instances", headers=auth_headers()).get_json()["instances"]
        assert len(instances) == 1

    def test_cannot_add_template_to_other_users_group(self, client, auth_headers, group_id):
        assert create_template(client, auth_headers("user2"), group_id).status_code == 404


class TestInstances:

    def test_future_day_materialized_on_view(self, client, auth_headers, group_id):
        create_template(client, auth_headers(), group_id, recurrence={"type": "weekly", "days_of_week": [1]})

        response = client.get(f"/api/groups/{group_id}/instances?date=2024-06-03", headers=auth_headers())

        assert response.status_code == 200
        body = response.get_json()
        assert body["date"] == "2024-06-03"
        assert [i["date"] for i in body["instances"]] == ["2024-06-03"]

    def test_today_view_does_not_materialize(self, client, auth_headers, group_id, store, run, make_template):
        make_template(group_id)

        response = client.get(f"/api/groups/{group_id}/instances", headers=auth_headers())

        assert response.get_json() == {"date": "2024-06-01", "instances": []}

    def test_bad_date_param(self, client, auth_headers, group_id):
        response = client.get(f"/api/groups/{group_id}/instances?date=06-03-2024", headers=auth_headers())
        assert response.status_code == 400

    def test_bad_timezone_header(self, client, auth_headers, group_id):
        headers = {**auth_headers(), "X-Timezone-Offset": "UTC+2"}
        response = client.get(f"/api/groups/{group_id}/instances", headers=headers)
        assert response.status_code == 400

    def test_toggle_round_trip(self, client, auth_headers, group_id):
        instance_id = create_template(client, auth_headers(), group_id).get_json()["today_instance"]["instance_id"]

        first = client.patch(f"/api/instances/{instance_id}/toggle", headers=auth_headers())
        second = client.patch(f"/api/instances/{instance_id}/toggle", headers=auth_headers())

        assert first.get_json()["status"] == "completed"
        assert second.get_json()["status"] == "pending"

    def test_set_status(self, client, auth_headers, group_id):
        instance_id = create_template(client, auth_headers(), group_id).get_json()["today_instance"]["instance_id"]

        ok = client.patch(f"/api/instances/{instance_id}", json={"status": "completed"}, headers=auth_headers())
        bad = client.patch(f"/api/instances/{instance_id}", json={"status": "done"}, headers=auth_headers())

        assert ok.status_code == 200 and ok.get_json()["status"] == "completed"
        assert bad.status_code == 400

    def test_toggle_other_users_instance_is_404(self, client, auth_headers, group_id):
        instance_id = create_template(client, auth_headers(), group_id).get_json()["today_instance"]["instance_id"]
        response = client.patch(f"/api/instances/{instance_id}/toggle", headers=auth_headers("user2"))
        assert response.status_code == 404


class TestDashboard:

    def test_generate_once_per_day(self, client, auth_headers, group_id, store, run, make_template):
        make_template(group_id, title="Standup")
        make_template(group_id, title="Retro", start_time="16:00", end_time="17:00")

        first = client.post("/api/dashboard/generate", headers=auth_headers())
        second = client.post("/api/dashboard/generate", headers=auth_headers())

        assert first.get_json() == {
            "ran": True, "created": 2, "last_generated_date": "2024-06-01", "failed_groups": [],
        }
        assert second.get_json()["ran"] is False
        assert run(UserModel(store).get_user("user1")).email == "user1@example.com"

    def test_pending_counts(self, client, auth_headers, group_id, store, run, make_template):
        make_template(group_id, title="Standup")
        make_template(group_id, title="Retro", start_time="16:00", end_time="17:00")
        run(InstanceMaterializer(store).ensure_instances("user1", group_id, date(2024, 6, 1)))

        counts = client.get("/api/dashboard/pending-counts", headers=auth_headers()).get_json()
        assert counts == {"date": "2024-06-01", "counts": {group_id: 2}, "loaded": True}

        instances = client.get(f"/api/groups/{group_id}/instances", headers=auth_headers()).get_json()["instances"]
        client.patch(f"/api/instances/{instances[0]['instance_id']}/toggle", headers=auth_headers())

        counts = client.get("/api/dashboard/pending-counts", headers=auth_headers()).get_json()
        assert counts["counts"] == {group_id: 1}
