"""End-to-end tests for the form, insert and listing pages."""

import re

import pytest
from fastapi.testclient import TestClient

from student_registry.config import Settings
from student_registry.main import create_app
from student_registry.services.student_store import StudentStore


def student_rows(html):
    return re.findall(r'<tr class="student-row">(.*?)</tr>', html, re.S)


class TestStudentForm:

    def test_form_posts_to_insert_handler(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert 'action="/insert_student"' in response.text
        for field in ("roll_number", "name", "age", "date_of_birth"):
            assert f'name="{field}"' in response.text


class TestInsertStudent:

    def test_get_redirects_to_form(self, client):
        response = client.get("/insert_student", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/"

    def test_redirect_target_comes_from_settings(self, tmp_path):
        settings = Settings(database_url=f"sqlite:///{tmp_path / 'r.db'}",
                            form_url="/student_form.html")
        with TestClient(create_app(settings)) as client:
            response = client.get("/insert_student", follow_redirects=False)
        assert response.headers["location"] == "/student_form.html"

    def test_valid_submission_is_registered(self, client, db_session, valid_form):
        response = client.post("/insert_student", data=valid_form)
        assert response.status_code == 200
        assert "Student Registered Successfully!" in response.text
        assert "CS-101" in response.text
        assert "Asha Verma" in response.text
        assert "2006-03-14" in response.text

        [student] = StudentStore(db_session).list_all()
        assert f"<strong>Student ID:</strong> {student.id}" in response.text
        assert student.roll_number == "CS-101"
        assert student.name == "Asha Verma"
        assert student.age == 19
        assert student.date_of_birth == "2006-03-14"

    def test_submitted_text_is_trimmed(self, client, db_session, valid_form):
        client.post("/insert_student", data=dict(valid_form, name="  Asha Verma  "))
        [student] = StudentStore(db_session).list_all()
        assert student.name == "Asha Verma"

    def test_duplicate_roll_number(self, client, db_session, valid_form):
        first = client.post("/insert_student", data=valid_form)
        second = client.post("/insert_student", data=dict(valid_form, name="Other Name"))

        assert "Student Registered Successfully!" in first.text
        assert second.status_code == 200
        assert "Error: Duplicate Roll Number" in second.text
        assert "<strong>CS-101</strong> already exists" in second.text
        assert StudentStore(db_session).count() == 1

    @pytest.mark.parametrize("field", ["roll_number", "name", "age", "date_of_birth"])
    def test_blank_field_creates_nothing(self, client, db_session, valid_form, field):
        response = client.post("/insert_student", data=dict(valid_form, **{field: "  "}))
        assert response.status_code == 400
        assert "All fields are required" in response.text
        assert StudentStore(db_session).count() == 0

    def test_omitted_field_creates_nothing(self, client, db_session, valid_form):
        form = dict(valid_form)
        del form["date_of_birth"]
        response = client.post("/insert_student", data=form)
        assert response.status_code == 400
        assert "Date of Birth" in response.text
        assert StudentStore(db_session).count() == 0

    def test_non_numeric_age_creates_nothing(self, client, db_session, valid_form):
        response = client.post("/insert_student", data=dict(valid_form, age="abc"))
        assert response.status_code == 400
        assert "Not a valid whole number: Age" in response.text
        assert StudentStore(db_session).count() == 0

    def test_oversized_age_creates_nothing(self, client, db_session, valid_form):
        response = client.post("/insert_student", data=dict(valid_form, age="99999999999999999999"))
        assert response.status_code == 400
        assert "Not a valid whole number: Age" in response.text
        assert StudentStore(db_session).count() == 0

    def test_markup_in_name_is_escaped(self, client, valid_form):
        response = client.post("/insert_student",
                               data=dict(valid_form, name="<script>alert(1)</script>"))
        assert "<script>alert(1)</script>" not in response.text
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in response.text

    def test_storage_error_renders_database_error_page(self, tmp_path, valid_form):
        settings = Settings(database_url=f"sqlite:///{tmp_path / 'no_tables.db'}",
                            auto_create_tables=False)
        with TestClient(create_app(settings)) as client:
            response = client.post("/insert_student", data=valid_form)
        assert response.status_code == 200
        assert "Database Error" in response.text
        assert "no such table: student" in response.text


class TestViewStudents:

    def test_empty_table_message(self, client):
        response = client.get("/view_students")
        assert response.status_code == 200
        assert "No student records found in the database." in response.text
        assert "<table>" not in response.text

    def test_single_row_after_insert(self, client, valid_form):
        client.post("/insert_student", data=valid_form)
        response = client.get("/view_students")

        assert "Found 1 student record(s)." in response.text
        [row] = student_rows(response.text)
        cells = re.findall(r"<td>(.*?)</td>", row)
        assert cells[1:5] == ["CS-101", "Asha Verma", "19", "2006-03-14"]
        # created_at is filled in by the database
        assert cells[5] not in ("", "None")

    def test_most_recent_first(self, client, valid_form):
        client.post("/insert_student", data=dict(valid_form, roll_number="A-1", name="First"))
        client.post("/insert_student", data=dict(valid_form, roll_number="B-2", name="Second"))

        rows = student_rows(client.get("/view_students").text)
        assert len(rows) == 2
        assert "B-2" in rows[0]
        assert "A-1" in rows[1]

    def test_values_are_escaped(self, client, valid_form):
        client.post("/insert_student",
                    data=dict(valid_form, name="<script>alert(1)</script>", roll_number="<b>R</b>"))
        response = client.get("/view_students")
        assert "<script>" not in response.text
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in response.text
        assert "&lt;b&gt;R&lt;/b&gt;" in response.text

    def test_storage_error_is_rendered(self, tmp_path):
        settings = Settings(database_url=f"sqlite:///{tmp_path / 'no_tables.db'}",
                            auto_create_tables=False)
        with TestClient(create_app(settings)) as client:
            response = client.get("/view_students")
        assert response.status_code == 200
        assert "Could not retrieve student records." in response.text
        assert "no such table: student" in response.text


class TestAppWiring:

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"

    def test_request_id_header(self, client):
        response = client.get("/view_students")
        assert len(response.headers["X-Request-ID"]) == 36
