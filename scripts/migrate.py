"""Apply pending schema migrations, or list them with ``--status``."""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.hrm_system.hrm_system.database.connection import DBConfig, DatabaseConnection
from src.hrm_system.hrm_system.database.migrations import MigrationRunner


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--status", action="store_true", help="show applied/pending migrations and exit")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection(DBConfig.from_mapping(settings.DB_CONFIG))
    runner = MigrationRunner(conn.connect)

    if args.status:
        for row in runner.status():
            mark = "x" if row["applied"] else " "
            print(f"[{mark}] {row['version']} {row['name']}")
        return

    applied = runner.run()
    if applied:
        print(f"OK: Applied {len(applied)} migration(s): {', '.join(applied)}")
    else:
        print("OK: Schema is up to date")


if __name__ == "__main__":
    main()
