from __future__ import annotations

from attendance_tracker.core.constants import CONFLICT_MESSAGE


def _create(client, headers, **body):
    return client.post("/api/attendance", json=body, headers=headers)


def test_requires_authentication(client):
    resp = client.get("/api/attendance")

    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "message": "Authentication required"}


def test_teacher_creates_and_lists(client, world, auth_headers):
    headers = auth_headers(world.teacher)
    resp = _create(
        client,
        headers,
        student=world.student.user_id,
        course=world.math.course_id,
        status="present",
        date="2024-03-01",
    )

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    assert body["data"]["course"]["code"] == "MATH101"

    listed = client.get("/api/attendance", headers=headers).get_json()
    assert listed["count"] == 1
    assert listed["data"][0]["id"] == body["data"]["id"]


def test_duplicate_create_returns_conflict_body(client, world, auth_headers):
    headers = auth_headers(world.teacher)
    payload = dict(student=world.student.user_id, course=world.math.course_id, status="present", date="2024-03-01")
    assert _create(client, headers, **payload).status_code == 201

    resp = _create(client, headers, **{**payload, "status": "late"})

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["success"] is False
    assert body["message"] == CONFLICT_MESSAGE
    assert body["errors"]["conflict"] == {"student": world.student.user_id, "course": world.math.course_id, "date": "2024-03-01"}


def test_student_post_is_routed_to_self_mark(client, world, auth_headers):
    resp = _create(
        client,
        auth_headers(world.student),
        student=world.other_student.user_id,
        course=world.math.course_id,
        status="late",
    )

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["student"]["id"] == world.student.user_id
    assert data["course"]["code"] == f"SELF-{world.student.user_id}"
    assert data["status"] == "late"


def test_self_mark_twice_keeps_one_record(client, world, auth_headers):
    headers = auth_headers(world.student)
    first = client.post("/api/attendance/self", json={"notes": "here"}, headers=headers).get_json()["data"]
    second = client.post("/api/attendance/self", json={"status": "Late"}, headers=headers).get_json()["data"]

    assert first["id"] == second["id"]
    assert second["status"] == "late"
    assert second["notes"] == "here"


def test_single_read_forbidden_and_missing(client, world, auth_headers):
    created = _create(
        client,
        auth_headers(world.teacher),
        student=world.student.user_id,
        course=world.math.course_id,
        status="present",
    ).get_json()["data"]

    forbidden = client.get(f"/api/attendance/{created['id']}", headers=auth_headers(world.other_student))
    assert forbidden.status_code == 403
    assert "Sam" not in forbidden.get_json()["message"]

    missing = client.get("/api/attendance/9999", headers=auth_headers(world.admin))
    assert missing.status_code == 404


def test_update_and_delete(client, world, auth_headers):
    headers = auth_headers(world.teacher)
    created = _create(
        client,
        headers,
        student=world.student.user_id,
        course=world.math.course_id,
        status="present",
    ).get_json()["data"]

    updated = client.put(f"/api/attendance/{created['id']}", json={"notes": ""}, headers=auth_headers(world.admin))
    assert updated.status_code == 200
    assert updated.get_json()["data"]["notes"] is None
    assert updated.get_json()["data"]["markedBy"]["role"] == "admin"

    denied = client.delete(f"/api/attendance/{created['id']}", headers=auth_headers(world.other_teacher))
    assert denied.status_code == 403

    deleted = client.delete(f"/api/attendance/{created['id']}", headers=headers)
    assert deleted.status_code == 200
    assert client.get(f"/api/attendance/{created['id']}", headers=headers).status_code == 404


def test_stats_endpoint_with_filters(client, world, auth_headers):
    headers = auth_headers(world.teacher)
    for day, status in (("2024-03-01", "present"), ("2024-03-02", "absent"), ("2024-03-05", "late")):
        _create(client, headers, student=world.student.user_id, course=world.math.course_id, status=status, date=day)

    resp = client.get("/api/attendance/stats?startDate=2024-03-01&endDate=2024-03-02", headers=headers)

    data = resp.get_json()["data"]
    assert data["total"] == 2
    assert data["attendanceRate"] == 50.0


def test_bad_filter_is_a_validation_error(client, world, auth_headers):
    resp = client.get("/api/attendance?status=asleep", headers=auth_headers(world.admin))

    assert resp.status_code == 400
    assert resp.get_json()["errors"][0]["field"] == "status"


def test_non_string_date_is_rejected(client, world, auth_headers):
    resp = _create(
        client,
        auth_headers(world.teacher),
        student=world.student.user_id,
        course=world.math.course_id,
        status="present",
        date=20240301,
    )

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["success"] is False
    assert body["errors"] == [{"field": "date", "message": "expected an ISO-8601 string"}]
    assert world.attendance.records == {}


def test_malformed_json_body_is_rejected(client, world, auth_headers):
    headers = auth_headers(world.teacher)
    resp = client.post("/api/attendance", data='{"student": 4,', content_type="application/json", headers=headers)

    assert resp.status_code == 400
    assert resp.get_json() == {"success": False, "message": "Invalid JSON body"}
    assert world.attendance.records == {}
