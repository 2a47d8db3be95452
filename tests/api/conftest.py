from __future__ import annotations

import pytest

from attendance_tracker.container import wire_services
from attendance_tracker.main import create_app

TESTING_SETTINGS = "attendance_tracker.config.testing"


@pytest.fixture
def app(world):
    def container_factory(**wiring):
        return wire_services(
            conn=world.readiness,
            users_repo=world.users,
            courses_repo=world.courses,
            attendance_repo=world.attendance,
            **wiring,
        )

    return create_app(settings_module=TESTING_SETTINGS, container_factory=container_factory)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def socketio(app):
    return app.extensions["socketio"]


@pytest.fixture
def auth_headers(token_for):
    def _headers(user) -> dict:
        return {"Authorization": f"Bearer {token_for(user)}"}

    return _headers
