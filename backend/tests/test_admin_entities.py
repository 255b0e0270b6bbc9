from fastapi import Depends
from sqlalchemy import select

from campus_erp.api.deps import get_db, get_identity_provider
from campus_erp.core.exceptions import IdentityProviderError
from campus_erp.main import app
from campus_erp.models.activity_log import ActivityLog
from campus_erp.models.user import User
from campus_erp.services.audit import log_activity, recent_activity
from campus_erp.services.identity import IdentityProvider
from conftest import PASSWORD, created


class IdentityDeletesFail(IdentityProvider):
    def delete_identity(self, user_id: str) -> None:
        raise IdentityProviderError("Identity service unavailable")


def _failing_identity_provider(db=Depends(get_db)) -> IdentityProvider:
    return IdentityDeletesFail(db)


def _user_exists(session_factory, email: str) -> bool:
    with session_factory() as db:
        return db.execute(select(User).where(User.email == email)).scalar_one_or_none() is not None


def _student_payload(campus, **overrides):
    payload = {
        "email": "dev@example.com",
        "password": PASSWORD,
        "roll_no": "CS-A-03",
        "name": "Dev",
        "section_id": campus.section_a["id"],
        "admission_year": 2024,
    }
    payload.update(overrides)
    return payload


def test_department_crud(client, admin_headers):
    department = created(
        client.post("/api/admin/departments", json={"name": " Mechanical ", "code": "mech"}, headers=admin_headers)
    )
    assert department["name"] == "Mechanical"
    assert department["code"] == "MECH"

    duplicate = client.post("/api/admin/departments", json={"name": "Mech 2", "code": "MECH"}, headers=admin_headers)
    assert duplicate.status_code == 400
    assert duplicate.json() == {"error": "Department code already exists"}

    updated = client.put(
        f"/api/admin/departments/{department['id']}",
        json={"name": "Mechanical Engineering", "code": "ME"},
        headers=admin_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["data"][0]["code"] == "ME"

    listing = client.get("/api/admin/departments", headers=admin_headers)
    assert [item["code"] for item in listing.json()] == ["ME"]

    missing = client.put(
        "/api/admin/departments/00000000-0000-0000-0000-000000000000",
        json={"name": "Nope", "code": "NO"},
        headers=admin_headers,
    )
    assert missing.status_code == 404
    assert missing.json() == {"error": "Department not found"}


def test_section_and_subject_require_existing_department(client, admin_headers):
    section = client.post(
        "/api/admin/sections",
        json={"department_id": "00000000-0000-0000-0000-000000000000", "year": 1, "name": "A"},
        headers=admin_headers,
    )
    assert section.status_code == 400
    assert section.json() == {"error": "Department does not exist"}

    subject = client.post(
        "/api/admin/subjects",
        json={"department_id": "undefined", "semester": 1, "name": "Maths", "code": "MA101"},
        headers=admin_headers,
    )
    assert subject.status_code == 400
    assert subject.json() == {"error": "Invalid department ID"}

    bad_year = client.post(
        "/api/admin/sections",
        json={"department_id": "00000000-0000-0000-0000-000000000000", "year": 5, "name": "A"},
        headers=admin_headers,
    )
    assert bad_year.status_code == 400


def test_student_create_registers_identity(client, campus):
    student = created(client.post("/api/admin/students", json=_student_payload(campus), headers=campus.admin_headers))
    assert student["roll_no"] == "CS-A-03"
    assert student["section"]["name"] == "A"

    response = client.post("/api/auth/login", json={"email": "dev@example.com", "password": PASSWORD})
    assert response.status_code == 200
    assert response.json()["user"]["id"] == student["user_id"]


def test_student_create_rolls_back_identity_when_profile_fails(client, campus, session_factory):
    response = client.post(
        "/api/admin/students",
        json=_student_payload(campus, email="copycat@example.com", roll_no="CS-A-01"),
        headers=campus.admin_headers,
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Student roll number already exists"}
    assert _user_exists(session_factory, "copycat@example.com") is False


def test_student_create_rejects_taken_email(client, campus):
    response = client.post(
        "/api/admin/students",
        json=_student_payload(campus, email="asha@example.com"),
        headers=campus.admin_headers,
    )
    assert response.status_code == 400
    assert response.json() == {"error": "A user with this email address has already been registered"}


def test_faculty_create_rolls_back_identity_when_profile_fails(client, campus, session_factory):
    response = client.post(
        "/api/admin/faculty",
        json={
            "email": "second-rao@example.com",
            "password": PASSWORD,
            "employee_id": "EMP001",
            "name": "Another Rao",
            "department_id": campus.department["id"],
        },
        headers=campus.admin_headers,
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Faculty employee ID already exists"}
    assert _user_exists(session_factory, "second-rao@example.com") is False


def test_student_delete_removes_identity_and_records(client, campus, session_factory):
    client.post(
        "/api/faculty/attendance",
        json={
            "records": [
                {
                    "student_id": campus.asha["id"],
                    "subject_id": campus.data_structures["id"],
                    "date": "2026-09-01",
                    "present": True,
                }
            ]
        },
        headers=campus.faculty_headers,
    )

    response = client.delete(f"/api/admin/students/{campus.asha['id']}", headers=campus.admin_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "identity_deleted": True}
    assert _user_exists(session_factory, "asha@example.com") is False

    attendance = client.get(f"/api/faculty/attendance/{campus.data_structures['id']}", headers=campus.faculty_headers)
    assert attendance.json() == []

    login = client.post("/api/auth/login", json={"email": "asha@example.com", "password": PASSWORD})
    assert login.status_code == 401


def test_student_delete_keeps_identity_when_provider_fails(client, campus, session_factory):
    app.dependency_overrides[get_identity_provider] = _failing_identity_provider

    response = client.delete(f"/api/admin/students/{campus.asha['id']}", headers=campus.admin_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "identity_deleted": False}

    remaining = client.get("/api/admin/students", headers=campus.admin_headers)
    assert campus.asha["id"] not in {item["id"] for item in remaining.json()}
    assert _user_exists(session_factory, "asha@example.com") is True


def test_faculty_delete_removes_timetable(client, campus, session_factory):
    response = client.delete(f"/api/admin/faculty/{campus.faculty['id']}", headers=campus.admin_headers)
    assert response.status_code == 200
    assert response.json()["identity_deleted"] is True
    assert _user_exists(session_factory, "rao@example.com") is False

    timetable = client.get("/api/timetable", headers=campus.admin_headers)
    assert timetable.json() == []


def test_faculty_listing_reports_assignments(client, campus):
    listing = client.get("/api/admin/faculty", headers=campus.admin_headers)
    assert listing.status_code == 200
    member = listing.json()[0]
    assert member["timetable_count"] == 1
    assert member["hasAssignments"] is True
    assert member["department"]["code"] == "CSE"


def test_students_filtered_by_section(client, campus):
    response = client.get(
        "/api/admin/students", params={"section_id": campus.section_b["id"]}, headers=campus.admin_headers
    )
    assert [item["roll_no"] for item in response.json()] == ["CS-B-01"]


def test_department_delete_cascades(client, campus):
    response = client.delete(f"/api/admin/departments/{campus.department['id']}", headers=campus.admin_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True}

    assert client.get("/api/admin/sections", headers=campus.admin_headers).json() == []
    assert client.get("/api/admin/subjects", headers=campus.admin_headers).json() == []
    assert client.get("/api/timetable", headers=campus.admin_headers).json() == []

    students = client.get("/api/admin/students", headers=campus.admin_headers).json()
    assert len(students) == 3
    assert all(item["section_id"] is None for item in students)

    faculty = client.get("/api/admin/faculty", headers=campus.admin_headers).json()
    assert faculty[0]["department_id"] is None
    assert faculty[0]["hasAssignments"] is False


def test_mutations_are_audited(client, campus, session_factory):
    with session_factory() as db:
        actions = set(db.execute(select(ActivityLog.action)).scalars())
    assert {"department.create", "section.create", "student.create", "faculty.create", "timetable.create"} <= actions


def test_activity_feed_filters_by_entity(client, campus):
    response = client.get(
        "/api/admin/activity",
        params={"entity_type": "student", "entity_id": campus.asha["id"]},
        headers=campus.admin_headers,
    )
    assert response.status_code == 200
    entries = response.json()
    assert [item["action"] for item in entries] == ["student.create"]
    assert entries[0]["actor_id"] is not None

    assert client.get("/api/admin/activity", headers=campus.faculty_headers).status_code == 403


def test_activity_feed_is_newest_first_within_a_second(session_factory):
    with session_factory() as db:
        for step in range(3):
            log_activity(db, actor_id=None, action=f"bulk.step{step}", entity_type="bulk", entity_id="batch-1")
            db.commit()

        entries = recent_activity(db, entity_type="bulk", entity_id="batch-1")
        assert [item.action for item in entries] == ["bulk.step2", "bulk.step1", "bulk.step0"]
        assert len({item.created_at for item in entries}) == 3

        assert [item.action for item in recent_activity(db, entity_type="bulk", limit=1)] == ["bulk.step2"]
