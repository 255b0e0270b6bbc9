def test_admin_counts(client, campus):
    response = client.get("/api/stats/admin", headers=campus.admin_headers)
    assert response.status_code == 200
    assert response.json() == {
        "totalStudents": 3,
        "totalFaculty": 1,
        "totalDepartments": 1,
        "totalSubjects": 2,
    }


def test_department_counts(client, campus):
    created = client.post(
        "/api/admin/departments", json={"name": "Electrical", "code": "EEE"}, headers=campus.admin_headers
    )
    assert created.status_code == 201

    response = client.get("/api/stats/departments", headers=campus.admin_headers)
    assert response.status_code == 200
    by_code = {item["code"]: item for item in response.json()}
    assert by_code["CSE"]["studentsCount"] == 3
    assert by_code["CSE"]["facultyCount"] == 1
    assert by_code["EEE"]["studentsCount"] == 0
    assert by_code["EEE"]["facultyCount"] == 0


def test_stats_are_admin_only(client, campus):
    assert client.get("/api/stats/admin", headers=campus.faculty_headers).status_code == 403
