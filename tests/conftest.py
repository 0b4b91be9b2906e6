import itertools

import pytest
from fastapi.testclient import TestClient

from exam_platform.auth.jwt_handler import create_access_token
from exam_platform.main import create_app
from exam_platform.storage.inmemory import InMemoryStorage
from tests.factories import API, PASSWORD, SAMPLE_EXAM


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def client(storage):
    with TestClient(create_app(storage=storage)) as c:
        yield c


@pytest.fixture
def signup(client):
    """Register and log in a fresh account; returns its profile and auth headers."""
    ids = itertools.count(10000001)

    def _signup(role="student"):
        n = next(ids)
        body = {
            "name": f"{role.title()} {n}",
            "email": f"{role}{n}@school.edu",
            "national_id": str(n),
            "password": PASSWORD,
            "role": role,
        }
        resp = client.post(f"{API}/auth/register", json=body)
        assert resp.status_code == 201, resp.text
        resp = client.post(f"{API}/auth/login", json={"national_id": str(n), "password": PASSWORD})
        assert resp.status_code == 200, resp.text
        data = resp.json()
        return {
            "user": data["user"],
            "headers": {"Authorization": f"Bearer {data['token']['access_token']}"},
        }

    return _signup


@pytest.fixture
def admin_headers():
    token = create_access_token(user_id="admin-1", email="admin@school.edu", role="admin")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def published_exam(client, signup):
    """A published sample exam and the teacher who wrote it."""
    teacher = signup("teacher")
    resp = client.post(f"{API}/exams", json=SAMPLE_EXAM, headers=teacher["headers"])
    assert resp.status_code == 201, resp.text
    exam_id = resp.json()["exam_id"]
    resp = client.patch(f"{API}/exams/{exam_id}", json={"is_published": True}, headers=teacher["headers"])
    assert resp.status_code == 200, resp.text
    return {"exam_id": exam_id, "teacher": teacher}
