from __future__ import annotations

from datetime import time

import pytest

from src.hrm_system.hrm_system.core.exceptions import AuthorizationError, ValidationError
from src.hrm_system.hrm_system.core.permissions import Role


def test_create_parses_times_and_numbers(container):
    shift = container.shift_service.create(
        current_role=Role.HR_ADMIN,
        data={"shift_name": "Early", "start_time": "07:00", "end_time": "15:30", "grace_period_minutes": "5"},
    )

    assert shift.shift_id > 0
    assert shift.start_time == time(7, 0)
    assert shift.end_time == time(15, 30)
    assert shift.grace_period_minutes == 5


def test_equal_start_and_end_rejected(container):
    with pytest.raises(ValidationError):
        container.shift_service.create(
            current_role=Role.HR_ADMIN,
            data={"shift_name": "Broken", "start_time": "09:00", "end_time": "09:00"},
        )


def test_half_day_cannot_exceed_full_day(container, world):
    with pytest.raises(ValidationError):
        container.shift_service.update(
            current_role=Role.HR_ADMIN,
            shift_id=world.day_shift.shift_id,
            data={"half_day_hours": 9},
        )


def test_manager_cannot_edit_shifts(container, world):
    with pytest.raises(AuthorizationError):
        container.shift_service.update(
            current_role=Role.HR_MANAGER,
            shift_id=world.day_shift.shift_id,
            data={"grace_period_minutes": 30},
        )
