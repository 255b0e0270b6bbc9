import os
import tempfile
from pathlib import Path
from types import SimpleNamespace

# The lifespan bootstrap runs against the configured engine, so point it at a throwaway file.
RUNTIME_DB = Path(tempfile.mkdtemp(prefix="campus-erp-tests-")) / "runtime.db"
os.environ["DATABASE_URL"] = f"sqlite+pysqlite:///{RUNTIME_DB}"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from campus_erp.api.deps import get_db  # noqa: E402
from campus_erp.db.base import Base  # noqa: E402
from campus_erp.main import app  # noqa: E402
from campus_erp.models.user import UserRole  # noqa: E402
from campus_erp.services.identity import IdentityProvider  # noqa: E402
from campus_erp.services.rate_limit import clear_rate_limiter  # noqa: E402

PASSWORD = "password123"


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    yield TestingSessionLocal
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def client(session_factory):
    clear_rate_limiter()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    clear_rate_limiter()


def login(client, email: str, password: str = PASSWORD) -> dict[str, str]:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def created(response) -> dict:
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["success"] is True
    return body["data"][0]


@pytest.fixture()
def admin_headers(client, session_factory):
    with session_factory() as db:
        IdentityProvider(db).create_identity(email="admin@example.com", password=PASSWORD, role=UserRole.admin)
    return login(client, "admin@example.com")


@pytest.fixture()
def campus(client, admin_headers):
    """One department with two sections, two subjects, a faculty member teaching
    section A and three students (two in A, one in B)."""
    department = created(
        client.post("/api/admin/departments", json={"name": "Computer Science", "code": "cse"}, headers=admin_headers)
    )
    section_a = created(
        client.post(
            "/api/admin/sections",
            json={"department_id": department["id"], "year": 2, "name": "A"},
            headers=admin_headers,
        )
    )
    section_b = created(
        client.post(
            "/api/admin/sections",
            json={"department_id": department["id"], "year": 2, "name": "B"},
            headers=admin_headers,
        )
    )
    data_structures = created(
        client.post(
            "/api/admin/subjects",
            json={"department_id": department["id"], "semester": 3, "name": "Data Structures", "code": "CS201"},
            headers=admin_headers,
        )
    )
    databases = created(
        client.post(
            "/api/admin/subjects",
            json={"department_id": department["id"], "semester": 3, "name": "Databases", "code": "CS202"},
            headers=admin_headers,
        )
    )
    faculty = created(
        client.post(
            "/api/admin/faculty",
            json={
                "email": "rao@example.com",
                "password": PASSWORD,
                "employee_id": "EMP001",
                "name": "Dr. Rao",
                "department_id": department["id"],
            },
            headers=admin_headers,
        )
    )

    def add_student(email: str, roll_no: str, name: str, section_id: str) -> dict:
        return created(
            client.post(
                "/api/admin/students",
                json={
                    "email": email,
                    "password": PASSWORD,
                    "roll_no": roll_no,
                    "name": name,
                    "section_id": section_id,
                    "admission_year": 2024,
                },
                headers=admin_headers,
            )
        )

    asha = add_student("asha@example.com", "CS-A-01", "Asha", section_a["id"])
    bharat = add_student("bharat@example.com", "CS-A-02", "Bharat", section_a["id"])
    chitra = add_student("chitra@example.com", "CS-B-01", "Chitra", section_b["id"])

    slot = client.post(
        "/api/timetable",
        json={
            "section_id": section_a["id"],
            "subject_id": data_structures["id"],
            "faculty_id": faculty["id"],
            "day": "Monday",
            "period": 1,
        },
        headers=admin_headers,
    )
    assert slot.status_code == 201, slot.text

    return SimpleNamespace(
        admin_headers=admin_headers,
        faculty_headers=login(client, "rao@example.com"),
        student_headers=login(client, "asha@example.com"),
        department=department,
        section_a=section_a,
        section_b=section_b,
        data_structures=data_structures,
        databases=databases,
        faculty=faculty,
        asha=asha,
        bharat=bharat,
        chitra=chitra,
        slot=slot.json(),
    )
