from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import HolidayType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import Holiday, HolidayTemplate, WorkingRule
from .repository import CalendarRepository


def _row_to_holiday(r: dict) -> Holiday:
    return Holiday(
        holiday_id=int(r["holiday_id"]),
        name=r["name"],
        holiday_type=HolidayType(r["holiday_type"]),
        holiday_date=r.get("holiday_date"),
        recurring_md=r.get("recurring_md"),
        is_active=bool(r.get("is_active", 1)),
    )


def _row_to_template(r: dict) -> HolidayTemplate:
    return HolidayTemplate(
        template_id=int(r["template_id"]),
        name=r["name"],
        country=r.get("country"),
        holidays=load_json(r.get("holidays"), []),
        is_default=bool(r.get("is_default", 0)),
        created_by=int(r["created_by"]) if r.get("created_by") is not None else None,
        created_at=r.get("created_at"),
    )


def _parse_weekend(value: str) -> tuple[int, ...]:
    return tuple(sorted(int(x) for x in str(value or "").split(",") if x.strip() != ""))


class MySQLCalendarRepository(CalendarRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_holidays(self, *, active_only: bool = True) -> Sequence[Holiday]:
        where = "WHERE is_active=1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT holiday_id, name, holiday_date, holiday_type, recurring_md, is_active
                FROM holidays {where}
                ORDER BY COALESCE(holiday_date, STR_TO_DATE(CONCAT('2000-', recurring_md), '%Y-%m-%d'))
                """
            )
            return [_row_to_holiday(r) for r in fetchall(cur)]

    def get_holiday(self, holiday_id: int) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT holiday_id, name, holiday_date, holiday_type, recurring_md, is_active
                FROM holidays WHERE holiday_id=%s
                """,
                (int(holiday_id),),
            )
            r = fetchone(cur)
            return _row_to_holiday(r) if r else None

    def create_holiday(
        self,
        *,
        name: str,
        holiday_type: HolidayType,
        holiday_date: Optional[date],
        recurring_md: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO holidays(name, holiday_date, holiday_type, recurring_md) VALUES(%s,%s,%s,%s)",
                (name, holiday_date, holiday_type.value, recurring_md),
            )
            return int(cur.lastrowid)

    def deactivate_holiday(self, holiday_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE holidays SET is_active=0 WHERE holiday_id=%s AND is_active=1", (int(holiday_id),))
            return cur.rowcount > 0

    def list_working_rules(self) -> Sequence[WorkingRule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT rule_id, name, weekend_days, effective_from FROM working_rules ORDER BY effective_from")
            return [
                WorkingRule(
                    rule_id=int(r["rule_id"]),
                    name=r["name"],
                    effective_from=r["effective_from"],
                    weekend_days=_parse_weekend(r["weekend_days"]),
                )
                for r in fetchall(cur)
            ]

    def upsert_working_rule(self, *, name: str, weekend_days: tuple[int, ...], effective_from: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO working_rules(name, weekend_days, effective_from)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE name=VALUES(name), weekend_days=VALUES(weekend_days)
                """,
                (name, ",".join(str(d) for d in weekend_days), effective_from),
            )
            if cur.lastrowid:
                return int(cur.lastrowid)
            cur.execute("SELECT rule_id FROM working_rules WHERE effective_from=%s", (effective_from,))
            r = fetchone(cur)
            return int(r["rule_id"]) if r else 0

    def list_templates(self, *, country: Optional[str] = None) -> Sequence[HolidayTemplate]:
        where, params = ("WHERE country=%s", (country,)) if country else ("", ())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT template_id, name, country, holidays, is_default, created_by, created_at
                FROM holiday_templates {where}
                ORDER BY is_default DESC, name
                """,
                params,
            )
            return [_row_to_template(r) for r in fetchall(cur)]

    def get_template(self, template_id: int) -> Optional[HolidayTemplate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT template_id, name, country, holidays, is_default, created_by, created_at
                FROM holiday_templates WHERE template_id=%s
                """,
                (int(template_id),),
            )
            r = fetchone(cur)
            return _row_to_template(r) if r else None

    def create_template(
        self,
        *,
        name: str,
        country: Optional[str],
        holidays: list[dict],
        is_default: bool,
        created_by: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            if is_default:
                cur.execute("UPDATE holiday_templates SET is_default=0 WHERE country <=> %s", (country,))
            cur.execute(
                """
                INSERT INTO holiday_templates(name, country, holidays, is_default, created_by)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (name, country, dump_json(holidays), 1 if is_default else 0, created_by),
            )
            return int(cur.lastrowid)

    def update_template(self, template: HolidayTemplate) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if template.is_default:
                cur.execute(
                    "UPDATE holiday_templates SET is_default=0 WHERE country <=> %s AND template_id<>%s",
                    (template.country, template.template_id),
                )
            cur.execute(
                """
                UPDATE holiday_templates SET name=%s, country=%s, holidays=%s, is_default=%s
                WHERE template_id=%s
                """,
                (
                    template.name,
                    template.country,
                    dump_json(template.holidays),
                    1 if template.is_default else 0,
                    template.template_id,
                ),
            )
            return cur.rowcount > 0

    def delete_template(self, template_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM holiday_templates WHERE template_id=%s", (int(template_id),))
            return cur.rowcount > 0
