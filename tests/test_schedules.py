import pytest
from conftest import login


@pytest.fixture()
def schedule_id(admin_client):
    pid = admin_client.post(
        "/api/v1/projects",
        json={"name": "Dartmouth School", "startDate": "2025-01-01", "endDate": "2025-12-31"},
    ).json["project"]["id"]
    r = admin_client.post(
        "/api/v1/schedules",
        json={"projectId": pid, "name": "Main Construction Schedule", "startDate": "2025-01-01", "endDate": "2025-12-31"},
    )
    assert r.status_code == 201
    return r.json["schedule"]["id"]


def _task(client, sid, **payload):
    r = client.post(f"/api/v1/schedules/{sid}/tasks", json=payload)
    assert r.status_code == 201, r.json
    return r.json["task"]


def test_schedule_create_validation(admin_client):
    r = admin_client.post("/api/v1/schedules", json={"name": ""})
    assert r.status_code == 400
    errors = r.json["errors"]
    assert "Schedule name is required." in errors
    assert "projectId is required." in errors
    assert "startDate is required." in errors


def test_schedule_for_unknown_project_is_404(admin_client):
    r = admin_client.post(
        "/api/v1/schedules",
        json={"projectId": 999, "name": "X", "startDate": "2025-01-01", "endDate": "2025-02-01"},
    )
    assert r.status_code == 404


def test_list_schedules_for_project(admin_client, schedule_id):
    sch = admin_client.put(f"/api/v1/schedules/{schedule_id}", json={"status": "on_hold"}).json["schedule"]
    r = admin_client.get(f"/api/v1/schedules/project/{sch['projectId']}")
    assert [s["status"] for s in r.json["schedules"]] == ["on_hold"]


def test_schedule_update_rejects_inverted_dates(admin_client, schedule_id):
    r = admin_client.put(f"/api/v1/schedules/{schedule_id}", json={"endDate": "2024-01-01"})
    assert r.status_code == 400


def test_task_tree_and_ordering(admin_client, schedule_id):
    phase = _task(admin_client, schedule_id, name="Phase 1: Planning & Design", startDate="2025-01-01", endDate="2025-03-31")
    _task(admin_client, schedule_id, name="Architectural Drawings", parentTaskId=phase["id"], startDate="2025-02-01")
    _task(admin_client, schedule_id, name="Site Survey", parentTaskId=phase["id"], startDate="2025-01-05")
    _task(admin_client, schedule_id, name="Undated")

    r = admin_client.get(f"/api/v1/schedules/{schedule_id}/tasks")
    assert r.status_code == 200
    assert [t["name"] for t in r.json["tasks"]] == [
        "Phase 1: Planning & Design",
        "Site Survey",
        "Architectural Drawings",
        "Undated",
    ]
    tree = r.json["tree"]
    assert [n["name"] for n in tree] == ["Phase 1: Planning & Design", "Undated"]
    assert [n["name"] for n in tree[0]["subtasks"]] == ["Site Survey", "Architectural Drawings"]


def test_task_validation(admin_client, schedule_id):
    r = admin_client.post(
        f"/api/v1/schedules/{schedule_id}/tasks",
        json={"name": "Bad", "status": "done", "progressPercentage": 150, "estimatedDays": 0},
    )
    assert r.status_code == 400
    errors = r.json["errors"]
    assert any(e.startswith("Invalid status") for e in errors)
    assert "progressPercentage must be between 0 and 100." in errors
    assert "estimatedDays must be positive." in errors


def test_completing_task_sets_progress_100(admin_client, schedule_id):
    t = _task(admin_client, schedule_id, name="Tender Process", progressPercentage=40)
    r = admin_client.put(f"/api/v1/schedules/{schedule_id}/tasks/{t['id']}", json={"status": "completed"})
    assert r.json["task"]["progressPercentage"] == 100


def test_parent_cycle_rejected(admin_client, schedule_id):
    a = _task(admin_client, schedule_id, name="A")
    b = _task(admin_client, schedule_id, name="B", parentTaskId=a["id"])
    r = admin_client.put(f"/api/v1/schedules/{schedule_id}/tasks/{a['id']}", json={"parentTaskId": b["id"]})
    assert r.status_code == 400
    assert r.json["errors"] == ["Parent task would create a cycle."]


def test_parent_must_share_schedule(admin_client, schedule_id):
    project_id = admin_client.put(f"/api/v1/schedules/{schedule_id}", json={}).json["schedule"]["projectId"]
    other = admin_client.post(
        "/api/v1/schedules",
        json={"projectId": project_id, "name": "Other", "startDate": "2025-01-01", "endDate": "2025-02-01"},
    ).json["schedule"]["id"]
    foreign = _task(admin_client, other, name="Foreign")
    r = admin_client.post(f"/api/v1/schedules/{schedule_id}/tasks", json={"name": "Child", "parentTaskId": foreign["id"]})
    assert r.status_code == 400


def test_delete_task_reparents_children(admin_client, schedule_id):
    root = _task(admin_client, schedule_id, name="Phase 3: Construction")
    mid = _task(admin_client, schedule_id, name="Structure", parentTaskId=root["id"])
    _task(admin_client, schedule_id, name="Columns", parentTaskId=mid["id"])
    _task(admin_client, schedule_id, name="Slabs", parentTaskId=mid["id"])

    r = admin_client.delete(f"/api/v1/schedules/{schedule_id}/tasks/{mid['id']}")
    assert r.status_code == 200
    assert r.json["reparented"] == 2
    tasks = admin_client.get(f"/api/v1/schedules/{schedule_id}/tasks").json["tasks"]
    assert {t["name"]: t["parentTaskId"] for t in tasks} == {
        "Phase 3: Construction": None,
        "Columns": root["id"],
        "Slabs": root["id"],
    }


def test_delete_schedule_removes_tasks(admin_client, schedule_id):
    _task(admin_client, schedule_id, name="One")
    assert admin_client.delete(f"/api/v1/schedules/{schedule_id}").status_code == 200
    assert admin_client.get(f"/api/v1/schedules/{schedule_id}/tasks").status_code == 404


def test_schedules_hidden_from_other_users(client, admin_client, schedule_id):
    login(client, "bob")
    assert client.get(f"/api/v1/schedules/{schedule_id}/tasks").status_code == 404


def test_non_text_names_are_400(admin_client, schedule_id):
    r = admin_client.post("/api/v1/schedules", json={"projectId": 1, "name": 42, "startDate": "2025-01-01", "endDate": "2025-02-01"})
    assert r.status_code == 400
    assert "Schedule name must be text." in r.json["errors"]

    r = admin_client.post(f"/api/v1/schedules/{schedule_id}/tasks", json={"name": ["Excavation"]})
    assert r.status_code == 400
    assert "Task name must be text." in r.json["errors"]

    r = admin_client.put(f"/api/v1/schedules/{schedule_id}", json={"name": 7})
    assert r.status_code == 400


def test_non_object_body_is_400(admin_client, schedule_id):
    r = admin_client.post(f"/api/v1/schedules/{schedule_id}/tasks", json=["Excavation"])
    assert r.status_code == 400
    assert r.json["errors"] == ["Request body must be a JSON object."]
