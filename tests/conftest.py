import os

# main.py builds a module-level app from the environment
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")

import pytest
from fastapi.testclient import TestClient

from classquiz.core.config import Settings
from classquiz.domain.model import Profile, Role
from classquiz.main import create_app

from fakes import build_resources


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        SUPABASE_URL="http://localhost:54321",
        SUPABASE_SERVICE_ROLE_KEY="test-service-role-key",
    )


@pytest.fixture
def resources():
    return build_resources()


@pytest.fixture
def client(settings, resources):
    app = create_app(settings=settings, resources=resources)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def profiles(resources):
    repo = resources.profile_service.profiles
    people = {
        "teacher": Profile(user_id="t-1", name="Ms Frizzle", role=Role.TEACHER),
        "other_teacher": Profile(user_id="t-2", name="Mr Keating", role=Role.TEACHER),
        "alice": Profile(user_id="s-1", name="Alice", role=Role.STUDENT, class_label="7A"),
        "bob": Profile(user_id="s-2", name="Bob", role=Role.STUDENT, class_label="7A"),
        "carol": Profile(user_id="s-3", name="Carol", role=Role.STUDENT, class_label="8B"),
    }
    for p in people.values():
        repo.rows[p.user_id] = p
    return people


