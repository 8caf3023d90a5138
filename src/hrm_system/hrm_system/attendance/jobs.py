from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler

from ..common.datetime_utils import CompanyClock
from ..core.permissions import Role
from ..leave.service import LeaveService
from .finalization import AttendanceFinalizer, FinalizationResult

logger = logging.getLogger(__name__)


def run_finalization(finalizer: AttendanceFinalizer, clock: CompanyClock) -> list[FinalizationResult]:
    """Settle yesterday (night shifts end today) and today."""

    today = clock.today()
    results = []
    for day in (today - timedelta(days=1), today):
        try:
            results.append(finalizer.finalize_date(day))
        except Exception:
            logger.exception("Attendance finalization failed for %s", day)
    return results


def run_leave_rollover(leave: LeaveService, clock: CompanyClock) -> Optional[dict]:
    from_year = clock.today().year - 1
    try:
        return leave.rollover(current_role=Role.SUPER_ADMIN, actor_id=None, from_year=from_year)
    except Exception:
        logger.exception("Leave rollover from %s failed", from_year)
        return None


def start_scheduler(
    finalizer: AttendanceFinalizer,
    leave: LeaveService,
    clock: CompanyClock,
    *,
    interval_minutes: int = 15,
) -> BackgroundScheduler:
    scheduler = BackgroundScheduler(
        timezone=clock.tz,
        job_defaults={
            "coalesce": True,
            "max_instances": 1,
            "misfire_grace_time": 3600,
        },
    )
    scheduler.add_job(
        run_finalization,
        "interval",
        minutes=int(interval_minutes),
        args=[finalizer, clock],
        id="attendance-finalization",
        replace_existing=True,
    )
    scheduler.add_job(
        run_leave_rollover,
        "cron",
        month=1,
        day=1,
        hour=0,
        minute=5,
        args=[leave, clock],
        id="leave-rollover",
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Scheduler started (finalization every %s min, timezone %s)", interval_minutes, clock.tz)
    return scheduler
