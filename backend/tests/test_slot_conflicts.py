import uuid

from campus_erp.services.slots import CONFLICT_MESSAGE, needs_recheck


def _slot(campus, **overrides):
    payload = {
        "section_id": campus.section_a["id"],
        "subject_id": campus.databases["id"],
        "faculty_id": campus.faculty["id"],
        "day": "Tuesday",
        "period": 2,
    }
    payload.update(overrides)
    return payload


def test_needs_recheck_only_for_full_triple():
    assert needs_recheck({"section_id": "s", "day": "Monday", "period": 1}) is True
    assert needs_recheck({"day": "Monday", "period": 1}) is False
    assert needs_recheck({"faculty_id": "f"}) is False


def test_create_rejects_occupied_section_day_period(client, campus):
    clash = client.post(
        "/api/timetable",
        json=_slot(campus, day="Monday", period=1),
        headers=campus.admin_headers,
    )
    assert clash.status_code == 400
    assert clash.json() == {"error": CONFLICT_MESSAGE}

    other_period = client.post("/api/timetable", json=_slot(campus, day="Monday", period=2), headers=campus.admin_headers)
    assert other_period.status_code == 201

    other_section = client.post(
        "/api/timetable",
        json=_slot(campus, section_id=campus.section_b["id"], day="Monday", period=1),
        headers=campus.admin_headers,
    )
    assert other_section.status_code == 201


def test_create_validates_references(client, campus):
    malformed = client.post("/api/timetable", json=_slot(campus, section_id="undefined"), headers=campus.admin_headers)
    assert malformed.status_code == 400
    assert malformed.json() == {"error": "Invalid section ID"}

    missing = client.post(
        "/api/timetable",
        json=_slot(campus, faculty_id=str(uuid.uuid4())),
        headers=campus.admin_headers,
    )
    assert missing.status_code == 400
    assert missing.json() == {"error": "Faculty does not exist"}

    bad_period = client.post("/api/timetable", json=_slot(campus, period=9), headers=campus.admin_headers)
    assert bad_period.status_code == 400


def test_update_with_full_triple_is_rechecked(client, campus):
    created = client.post("/api/timetable", json=_slot(campus), headers=campus.admin_headers)
    assert created.status_code == 201
    slot_id = created.json()["id"]

    moved = client.put(
        f"/api/timetable/{slot_id}",
        json={"section_id": campus.section_a["id"], "day": "Monday", "period": 1},
        headers=campus.admin_headers,
    )
    assert moved.status_code == 400
    assert moved.json() == {"error": CONFLICT_MESSAGE}

    # Re-saving a slot onto its own triple is not a conflict.
    unchanged = client.put(
        f"/api/timetable/{slot_id}",
        json={"section_id": campus.section_a["id"], "day": "Tuesday", "period": 2},
        headers=campus.admin_headers,
    )
    assert unchanged.status_code == 200


def test_partial_update_skips_conflict_check(client, campus):
    created = client.post("/api/timetable", json=_slot(campus), headers=campus.admin_headers)
    slot_id = created.json()["id"]

    response = client.put(
        f"/api/timetable/{slot_id}",
        json={"day": "Monday", "period": 1},
        headers=campus.admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["day"] == "Monday"

    section = client.get(f"/api/timetable/section/{campus.section_a['id']}", headers=campus.student_headers)
    monday_first = [item for item in section.json() if item["day"] == "Monday" and item["period"] == 1]
    assert len(monday_first) == 2


def test_timetable_reads_are_sorted_and_writes_admin_only(client, campus):
    client.post("/api/timetable", json=_slot(campus, day="Monday", period=3), headers=campus.admin_headers)
    client.post("/api/timetable", json=_slot(campus, day="Monday", period=2), headers=campus.admin_headers)

    listing = client.get("/api/timetable", headers=campus.faculty_headers)
    assert listing.status_code == 200
    assert [(item["day"], item["period"]) for item in listing.json()] == [
        ("Monday", 1),
        ("Monday", 2),
        ("Monday", 3),
    ]
    first = listing.json()[0]
    assert first["subject"]["code"] == "CS201"
    assert first["faculty"]["name"] == "Dr. Rao"
    assert first["section"]["department"]["code"] == "CSE"

    forbidden = client.post("/api/timetable", json=_slot(campus), headers=campus.faculty_headers)
    assert forbidden.status_code == 403


def test_delete_slot(client, campus):
    slot_id = campus.slot["id"]
    response = client.delete(f"/api/timetable/{slot_id}", headers=campus.admin_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True}

    again = client.delete(f"/api/timetable/{slot_id}", headers=campus.admin_headers)
    assert again.status_code == 404
    assert again.json() == {"error": "Timetable entry not found"}
