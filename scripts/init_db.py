"""Create the database, apply ``database/schema.sql`` and pending migrations.

Usage: python scripts/init_db.py [--skip-migrations] [--seed] [--list-tables]
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

from src.hrm_system.hrm_system.database.bootstrap import (
    apply_schema,
    apply_seed_sql,
    ensure_demo_users,
    list_tables,
    run_migrations,
)


def main() -> None:
    parser = argparse.ArgumentParser(description="Initialise the HRM database")
    parser.add_argument("--skip-migrations", action="store_true", help="apply only the baseline schema")
    parser.add_argument("--seed", action="store_true", help="also load seed.sql and the demo accounts")
    parser.add_argument("--list-tables", action="store_true", help="print every table afterwards")
    args = parser.parse_args()

    db = dict(importlib.import_module(get_settings_module()).DB_CONFIG)
    target = f"{db.get('user')}@{db.get('host')}:{db.get('port', 3306)}/{db.get('database')}"

    apply_schema(db, schema_path=REPO_ROOT / "database" / "schema.sql")
    applied = [] if args.skip_migrations else run_migrations(db)
    if args.seed:
        apply_seed_sql(db, seed_path=REPO_ROOT / "database" / "seed.sql")
        ensure_demo_users(db)

    tables = list_tables(db)
    print(f"OK: {target} has {len(tables)} tables; {len(applied)} migration(s) applied")
    if args.list_tables:
        for name in tables:
            print(f"  {name}")


if __name__ == "__main__":
    main()
