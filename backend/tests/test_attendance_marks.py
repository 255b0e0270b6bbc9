import uuid

from campus_erp.services.access import NOT_ASSIGNED_MESSAGE


def _attendance(campus, student, day, present, subject=None):
    return {
        "student_id": student["id"],
        "subject_id": (subject or campus.data_structures)["id"],
        "date": day,
        "present": present,
    }


def _marks(campus, student, internal1, internal2, external):
    return {
        "student_id": student["id"],
        "subject_id": campus.data_structures["id"],
        "internal1": internal1,
        "internal2": internal2,
        "external": external,
    }


def test_attendance_is_appended_not_replaced(client, campus):
    batch = {
        "records": [
            _attendance(campus, campus.asha, "2026-09-01", True),
            _attendance(campus, campus.bharat, "2026-09-01", False),
        ]
    }
    first = client.post("/api/faculty/attendance", json=batch, headers=campus.faculty_headers)
    assert first.status_code == 200
    assert first.json() == {"success": True, "message": "Attendance marked successfully", "count": 2}

    second = client.post("/api/faculty/attendance", json=batch, headers=campus.faculty_headers)
    assert second.status_code == 200

    listing = client.get(f"/api/faculty/attendance/{campus.data_structures['id']}", headers=campus.faculty_headers)
    assert listing.status_code == 200
    rows = listing.json()
    assert len(rows) == 4
    assert {row["student"]["roll_no"] for row in rows} == {"CS-A-01", "CS-A-02"}


def test_marks_are_upserted_per_student_and_subject(client, campus):
    first = client.post(
        "/api/faculty/marks",
        json={"records": [_marks(campus, campus.asha, 18, 17, 91)]},
        headers=campus.faculty_headers,
    )
    assert first.status_code == 200
    assert first.json()["message"] == "Marks entered successfully"

    second = client.post(
        "/api/faculty/marks",
        json={"records": [_marks(campus, campus.asha, 10, 10, 50)]},
        headers=campus.faculty_headers,
    )
    assert second.status_code == 200

    listing = client.get(f"/api/faculty/marks/{campus.data_structures['id']}", headers=campus.faculty_headers)
    rows = listing.json()
    assert len(rows) == 1
    assert (rows[0]["internal1"], rows[0]["internal2"], rows[0]["external"]) == (10, 10, 50)
    assert rows[0]["total"] == 70
    assert rows[0]["grade"] == "C"
    assert rows[0]["student"]["name"] == "Asha"


def test_writes_for_unassigned_section_are_forbidden(client, campus):
    attendance = client.post(
        "/api/faculty/attendance",
        json={"records": [_attendance(campus, campus.chitra, "2026-09-01", True)]},
        headers=campus.faculty_headers,
    )
    assert attendance.status_code == 403
    assert attendance.json() == {"error": NOT_ASSIGNED_MESSAGE}

    marks = client.post(
        "/api/faculty/marks",
        json={"records": [_marks(campus, campus.chitra, 10, 10, 10)]},
        headers=campus.faculty_headers,
    )
    assert marks.status_code == 403


def test_batches_are_validated(client, campus):
    empty_attendance = client.post("/api/faculty/attendance", json={"records": []}, headers=campus.faculty_headers)
    assert empty_attendance.status_code == 400
    assert empty_attendance.json() == {"error": "Attendance records required"}

    empty_marks = client.post("/api/faculty/marks", json={"records": []}, headers=campus.faculty_headers)
    assert empty_marks.json() == {"error": "Mark records required"}

    for path, error in (
        ("/api/faculty/attendance", "Attendance records required"),
        ("/api/faculty/marks", "Mark records required"),
    ):
        missing = client.post(path, json={}, headers=campus.faculty_headers)
        assert missing.status_code == 400
        assert missing.json() == {"error": error}

        null_records = client.post(path, json={"records": None}, headers=campus.faculty_headers)
        assert null_records.status_code == 400
        assert null_records.json() == {"error": error}

    out_of_range = client.post(
        "/api/faculty/marks",
        json={"records": [_marks(campus, campus.asha, 25, 10, 50)]},
        headers=campus.faculty_headers,
    )
    assert out_of_range.status_code == 400
    assert "internal1" in out_of_range.json()["error"]

    unknown_student = client.post(
        "/api/faculty/attendance",
        json={"records": [_attendance(campus, {"id": str(uuid.uuid4())}, "2026-09-01", True)]},
        headers=campus.faculty_headers,
    )
    assert unknown_student.status_code == 400
    assert unknown_student.json()["error"].startswith("Unknown student_id")


def test_only_faculty_can_write_records(client, campus):
    response = client.post(
        "/api/faculty/attendance",
        json={"records": [_attendance(campus, campus.asha, "2026-09-01", True)]},
        headers=campus.student_headers,
    )
    assert response.status_code == 403
