"""Settle attendance for one date outside the scheduler.

Usage: python scripts/finalize_attendance.py [YYYY-MM-DD]   (default: yesterday)
"""

from __future__ import annotations

import importlib
import json
import sys
from datetime import timedelta
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.hrm_system.hrm_system.common.datetime_utils import parse_date_arg
from src.hrm_system.hrm_system.container import build_container
from src.hrm_system.hrm_system.settings import Settings


def main() -> None:
    settings = Settings.from_module(importlib.import_module(get_settings_module()))
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    default = container.clock.today() - timedelta(days=1)
    work_date = parse_date_arg(sys.argv[1] if len(sys.argv) > 1 else None, "date", default)
    result = container.attendance_finalizer.finalize_date(work_date)
    print(json.dumps(result.to_dict(), indent=2, default=str))


if __name__ == "__main__":
    main()
