"""Shared fixtures: a fresh SQLite database and app per test."""

import pytest
from fastapi.testclient import TestClient

from student_registry.config import Settings
from student_registry.main import create_app


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at an empty SQLite file."""
    return Settings(database_url=f"sqlite:///{tmp_path / 'students.db'}", form_url="/")


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """Test client; entering it runs the lifespan, which creates the table."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(app, client):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def valid_form():
    return {
        "roll_number": "CS-101",
        "name": "Asha Verma",
        "age": "19",
        "date_of_birth": "2006-03-14",
    }
