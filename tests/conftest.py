"""Shared fixtures: an in-memory MongoDB and an authenticated test client."""

from __future__ import annotations

from typing import Any, Callable, Dict

import mongomock
import pytest
from fastapi.testclient import TestClient

from edu_learn_api.app.core import db
from edu_learn_api.app.core.config import settings
from edu_learn_api.app.core.identity import set_identity_provider
from edu_learn_api.app.core.security import create_access_token
from edu_learn_api.app.main import create_app


INSTRUCTOR = "ada@example.com"
STUDENT = "sam@example.com"


@pytest.fixture
def mongo():
    client = mongomock.MongoClient()
    db.use_client(client)
    yield client[settings.mongodb_db]
    db.use_client(None)


@pytest.fixture
def client(mongo, monkeypatch) -> TestClient:
    monkeypatch.setattr(settings, "identity_provider_url", "")
    monkeypatch.setattr(settings, "mongodb_transactions", False)
    monkeypatch.setattr(settings, "max_enrollments_per_student", 3)
    set_identity_provider(None)
    with TestClient(create_app()) as test_client:
        yield test_client
    set_identity_provider(None)


@pytest.fixture
def auth() -> Callable[[str], Dict[str, str]]:
    def _headers(email: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token({'email': email})}"}

    return _headers


@pytest.fixture
def make_course(client: TestClient, auth) -> Callable[..., dict]:
    def _make(title: str = "Intro to Python", instructor: str = INSTRUCTOR, total_seats: int = 30) -> dict:
        resp = client.post(
            "/courses",
            json={
                "title": title,
                "instructorName": "Ada Lovelace",
                "instructorEmail": instructor,
                "duration": "6 weeks",
                "totalSeats": total_seats,
            },
            headers=auth(instructor),
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture
def enroll(client: TestClient, auth) -> Callable[..., Any]:
    def _enroll(course_id: str, student: str = STUDENT):
        return client.post(
            "/enrollments",
            json={"student": student, "courseId": course_id},
            headers=auth(student),
        )

    return _enroll
