from __future__ import annotations

import logging
import re
from datetime import date
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig
from .migrations import MigrationRunner

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "Password@123"


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in _strip_comments(sql):
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_sql(cur, sql: str) -> int:
    count = 0
    for stmt in iter_sql_statements(sql):
        cur.execute(stmt)
        count += 1
    return count


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_mapping(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def _apply_file(db_config: dict, path: str | Path) -> int:
    target = DBConfig.from_mapping(db_config)
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))

    conn = _connect(target)
    try:
        cur = conn.cursor()
        count = _exec_sql(cur, sql)
        conn.commit()
        return count
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _apply_file(db_config, schema_path)
    logger.info("Applied %s (%d statements)", Path(schema_path).name, count)


def run_migrations(db_config: dict) -> list[str]:
    """Apply pending versioned migrations on top of the baseline schema."""

    target = DBConfig.from_mapping(db_config)
    applied = MigrationRunner(lambda: _connect(target)).run()
    if applied:
        logger.info("Applied migrations: %s", ", ".join(applied))
    return applied


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _apply_file(db_config, seed_path)
    logger.info("Applied %s (%d statements)", Path(seed_path).name, count)


def ensure_demo_users(db_config: dict) -> None:
    """Upsert one demo account per role and give them default leave balances."""

    target = DBConfig.from_mapping(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)

        id_col_map = {
            "departments": "dept_id",
            "shifts": "shift_id",
        }

        def get_id(table: str, col: str, value: str) -> int:
            id_col = id_col_map.get(table)
            if not id_col:
                raise RuntimeError(f"Unsupported lookup table: {table}")
            cur.execute(f"SELECT {id_col} AS id FROM {table} WHERE {col}=%s", (value,))
            row = cur.fetchone()
            if not row:
                raise RuntimeError(f"Missing {table} row for {col}={value}")
            return int(row["id"])

        dept_eng = get_id("departments", "dept_name", "Engineering")
        dept_hr = get_id("departments", "dept_name", "Human Resources")
        shift_general = get_id("shifts", "shift_name", "General")

        def upsert_employee(code: str, full_name: str, email: str, role: str, dept_id: int) -> None:
            password_hash = generate_password_hash(DEMO_PASSWORD)
            cur.execute("SELECT employee_id FROM employees WHERE email=%s", (email,))
            existing = cur.fetchone()
            if existing:
                cur.execute(
                    """
                    UPDATE employees
                    SET full_name=%s, password_hash=%s, role=%s, dept_id=%s, shift_id=%s, is_active=1
                    WHERE email=%s
                    """,
                    (full_name, password_hash, role, dept_id, shift_general, email),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO employees
                        (employee_code, full_name, email, password_hash, role, dept_id, shift_id, date_of_joining)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    (code, full_name, email, password_hash, role, dept_id, shift_general, date.today().replace(month=1, day=1)),
                )

        upsert_employee("EMP001", "Sam Admin", "admin@hrm.local", "SuperAdmin", dept_hr)
        upsert_employee("EMP002", "Harper Reyes", "hr@hrm.local", "HR", dept_hr)
        upsert_employee("EMP003", "Morgan Lee", "manager@hrm.local", "HR_Manager", dept_eng)
        upsert_employee("EMP004", "Alex Kim", "employee@hrm.local", "Employee", dept_eng)

        # Legacy role spellings from older dumps.
        cur.execute("UPDATE employees SET role='HR' WHERE role IN ('HR_ADMIN','hr')")
        cur.execute("UPDATE employees SET role='Employee' WHERE role IN ('EMPLOYEE','employee')")

        year = date.today().year
        cur.execute(
            """
            INSERT IGNORE INTO leave_balances (employee_id, leave_type, year, allocated)
            SELECT e.employee_id, lt.code, %s, lt.annual_quota
            FROM employees e CROSS JOIN leave_types lt
            WHERE e.is_active=1 AND lt.is_active=1
            """,
            (year,),
        )

        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_mapping(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
