"""Versioned, additive schema migrations.

``database/schema.sql`` is the baseline. Each migration below moves the
schema forward and is recorded in ``schema_migrations`` so it runs once.
A migration's statements run in order; a failure stops the run and leaves
the version unrecorded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Migration:
    version: str
    name: str
    statements: tuple[str, ...]


MIGRATIONS: tuple[Migration, ...] = (
    Migration(
        version="0001",
        name="attendance_flag_columns",
        statements=(
            """
            ALTER TABLE attendance_records
                ADD COLUMN flagged_reason VARCHAR(255) NULL,
                ADD COLUMN flagged_by INT NULL,
                ADD COLUMN flagged_at DATETIME NULL
            """,
            """
            ALTER TABLE attendance_records
                ADD CONSTRAINT fk_attendance_flagged_by
                FOREIGN KEY (flagged_by) REFERENCES employees(employee_id) ON DELETE SET NULL
            """,
        ),
    ),
    Migration(
        version="0002",
        name="attendance_status_pending_correction",
        statements=(
            """
            ALTER TABLE attendance_records
                MODIFY COLUMN status
                ENUM('present','absent','leave','half_day','holiday','incomplete','pending_correction')
                NOT NULL DEFAULT 'incomplete'
            """,
        ),
    ),
    Migration(
        version="0003",
        name="attendance_work_mode",
        statements=(
            """
            ALTER TABLE attendance_records
                ADD COLUMN work_mode ENUM('office','wfh','hybrid','field') NOT NULL DEFAULT 'office'
            """,
        ),
    ),
    Migration(
        version="0004",
        name="attendance_unique_employee_date",
        statements=(
            # Keep the oldest record per (employee, day) before enforcing uniqueness.
            """
            DELETE a FROM attendance_records a
            JOIN attendance_records b
              ON a.employee_id = b.employee_id
             AND a.work_date = b.work_date
             AND a.attendance_id > b.attendance_id
            """,
            """
            ALTER TABLE attendance_records
                ADD UNIQUE INDEX uq_attendance_employee_date (employee_id, work_date)
            """,
        ),
    ),
    Migration(
        version="0005",
        name="leads_created_by_nullable",
        statements=(
            "ALTER TABLE leads DROP FOREIGN KEY fk_leads_created_by",
            "ALTER TABLE leads MODIFY COLUMN created_by INT NULL",
            """
            ALTER TABLE leads
                ADD CONSTRAINT fk_leads_created_by
                FOREIGN KEY (created_by) REFERENCES employees(employee_id) ON DELETE SET NULL
            """,
        ),
    ),
    Migration(
        version="0006",
        name="correction_requests_cancelled_status",
        statements=(
            """
            ALTER TABLE attendance_correction_requests
                MODIFY COLUMN status ENUM('pending','approved','rejected','cancelled')
                NOT NULL DEFAULT 'pending'
            """,
        ),
    ),
)

_TRACKING_TABLE = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version VARCHAR(16) PRIMARY KEY,
    name VARCHAR(128) NOT NULL,
    applied_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
)
"""


def pending_migrations(applied: Iterable[str], migrations: Sequence[Migration] = MIGRATIONS) -> list[Migration]:
    done = set(applied)
    return sorted((m for m in migrations if m.version not in done), key=lambda m: m.version)


class MigrationRunner:
    def __init__(self, connect: Callable[[], object], migrations: Sequence[Migration] = MIGRATIONS):
        self._connect = connect
        self._migrations = tuple(migrations)

        versions = [m.version for m in self._migrations]
        if len(versions) != len(set(versions)):
            raise ValueError("Duplicate migration version")

    def applied_versions(self) -> list[str]:
        conn = self._connect()
        try:
            cur = conn.cursor()
            cur.execute(_TRACKING_TABLE)
            cur.execute("SELECT version FROM schema_migrations ORDER BY version")
            rows = cur.fetchall() or []
            conn.commit()
            return [str(r[0]) for r in rows]
        finally:
            conn.close()

    def status(self) -> list[dict]:
        applied = set(self.applied_versions())
        return [
            {"version": m.version, "name": m.name, "applied": m.version in applied}
            for m in sorted(self._migrations, key=lambda m: m.version)
        ]

    def run(self) -> list[str]:
        """Apply every pending migration; returns the versions applied."""

        todo = pending_migrations(self.applied_versions(), self._migrations)
        applied: list[str] = []
        for migration in todo:
            conn = self._connect()
            try:
                cur = conn.cursor()
                for stmt in migration.statements:
                    cur.execute(stmt.strip())
                cur.execute(
                    "INSERT INTO schema_migrations(version, name) VALUES(%s,%s)",
                    (migration.version, migration.name),
                )
                conn.commit()
            except Exception:
                conn.rollback()
                logger.exception("Migration %s (%s) failed", migration.version, migration.name)
                raise
            finally:
                conn.close()
            logger.info("Applied migration %s (%s)", migration.version, migration.name)
            applied.append(migration.version)
        return applied
