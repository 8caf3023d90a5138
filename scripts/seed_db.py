"""Load demo data: departments, shifts, leave types, holidays and one login per role.

Usage: python scripts/seed_db.py [--accounts-only]

Safe to re-run.
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.hrm_system.hrm_system.database.bootstrap import DEMO_PASSWORD, apply_seed_sql, ensure_demo_users


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the HRM database with demo data")
    parser.add_argument("--accounts-only", action="store_true", help="skip seed.sql and only upsert the demo logins")
    args = parser.parse_args()

    db = dict(importlib.import_module(get_settings_module()).DB_CONFIG)
    if not args.accounts_only:
        apply_seed_sql(db, seed_path=REPO_ROOT / "database" / "seed.sql")
    ensure_demo_users(db)

    print(f"OK: demo accounts ready in {db.get('database')} (password: {DEMO_PASSWORD})")


if __name__ == "__main__":
    main()
