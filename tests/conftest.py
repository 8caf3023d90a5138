from __future__ import annotations

from datetime import datetime

import pytest

from src.hrm_system.hrm_system.main import create_app
from tests.fakes import FixedClock, make_container, make_world

# Wednesday 2026-03-04, 10:00 in Asia/Kolkata (UTC+05:30).
DEFAULT_NOW = datetime(2026, 3, 4, 4, 30)


@pytest.fixture
def clock():
    return FixedClock("Asia/Kolkata", DEFAULT_NOW)


@pytest.fixture
def world():
    return make_world()


@pytest.fixture
def container(world, clock):
    return make_container(world, clock)


@pytest.fixture
def app(container):
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_header(container, world):
    def _header(key: str) -> dict:
        employee = world.employees[key]
        issued = container.token_service.issue(
            employee_id=employee.employee_id,
            role=employee.role,
            name=employee.full_name,
        )
        return {"Authorization": f"Bearer {issued.token}"}

    return _header
