from campus_erp.models.user import UserRole
from campus_erp.services.access import NOT_ASSIGNED_MESSAGE, is_valid_identifier
from campus_erp.services.identity import IdentityProvider
from conftest import PASSWORD, login


def test_identifier_validation():
    assert is_valid_identifier("3f2b8c1e-6a4d-4e8b-9c1f-0a2b3c4d5e6f") is True
    assert is_valid_identifier("3F2B8C1E-6A4D-4E8B-9C1F-0A2B3C4D5E6F") is True
    assert is_valid_identifier("undefined") is False
    assert is_valid_identifier("null") is False
    assert is_valid_identifier("") is False
    assert is_valid_identifier("12345") is False


def test_assigned_classes_carry_class_keys(client, campus):
    response = client.get("/api/faculty/classes", headers=campus.faculty_headers)
    assert response.status_code == 200
    classes = response.json()
    assert len(classes) == 1
    assert classes[0]["class_key"] == f"{campus.section_a['id']}|{campus.data_structures['id']}"
    assert classes[0]["section"]["name"] == "A"
    assert classes[0]["subject"]["code"] == "CS201"


def test_roster_for_assigned_section(client, campus):
    response = client.get(f"/api/faculty/students/{campus.section_a['id']}", headers=campus.faculty_headers)
    assert response.status_code == 200
    assert [item["roll_no"] for item in response.json()] == ["CS-A-01", "CS-A-02"]


def test_roster_for_unassigned_section_is_forbidden(client, campus):
    response = client.get(f"/api/faculty/students/{campus.section_b['id']}", headers=campus.faculty_headers)
    assert response.status_code == 403
    assert response.json() == {"error": NOT_ASSIGNED_MESSAGE}


def test_roster_rejects_placeholder_section_id(client, campus):
    response = client.get("/api/faculty/students/undefined", headers=campus.faculty_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid section ID. Please select a valid class from the dropdown."}


def test_class_sheet(client, campus):
    key = f"{campus.section_a['id']}|{campus.data_structures['id']}"
    client.post(
        "/api/faculty/marks",
        json={
            "records": [
                {
                    "student_id": campus.asha["id"],
                    "subject_id": campus.data_structures["id"],
                    "internal1": 18,
                    "internal2": 17,
                    "external": 91,
                }
            ]
        },
        headers=campus.faculty_headers,
    )

    response = client.get("/api/faculty/class-sheet", params={"class_key": key}, headers=campus.faculty_headers)
    assert response.status_code == 200
    sheet = response.json()
    assert sheet["class_key"] == key
    assert [item["roll_no"] for item in sheet["students"]] == ["CS-A-01", "CS-A-02"]
    assert len(sheet["marks"]) == 1
    assert sheet["marks"][0]["total"] == 126
    assert sheet["marks"][0]["grade"] == "A+"


def test_class_sheet_rejects_malformed_keys(client, campus):
    missing = client.get("/api/faculty/class-sheet", headers=campus.faculty_headers)
    assert missing.status_code == 400
    assert missing.json() == {"error": "No class selected"}

    no_separator = client.get(
        "/api/faculty/class-sheet", params={"class_key": "abc"}, headers=campus.faculty_headers
    )
    assert no_separator.json() == {"error": "Invalid class format"}

    placeholder = client.get(
        "/api/faculty/class-sheet",
        params={"class_key": f"undefined|{campus.data_structures['id']}"},
        headers=campus.faculty_headers,
    )
    assert placeholder.json() == {"error": "Invalid section or subject ID"}


def test_faculty_user_without_profile(client, session_factory, campus):
    with session_factory() as db:
        IdentityProvider(db).create_identity(email="ghost@example.com", password=PASSWORD, role=UserRole.faculty)
    headers = login(client, "ghost@example.com")

    response = client.get(f"/api/faculty/students/{campus.section_a['id']}", headers=headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Faculty profile not found"}
