from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple

from ..core.enums import ApplyChildType, HolidayListType, HolidaySourceType, OrgType, OwnerType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    in_clause,
    normalize_mysql_bool,
    normalize_mysql_date,
)
from .model import HolidayListItem, HolidayRecord, HolidaySaveBundle, ParentHolidayOperatingSetting
from .repository import HolidayRepository

_HOLIDAY_COLUMNS = (
    "holiday_id, owner_type, owner_id, year, holiday_name, has_period, start_date, end_date, is_operating, updated_at"
)
_LEGAL_COLUMNS = "holiday_id, year, holiday_name, has_period, start_date, end_date, updated_at"


def _to_legal(r: Dict[str, Any]) -> HolidayRecord:
    return HolidayRecord(
        holiday_id=int(r["holiday_id"]),
        owner_type=OwnerType.LEGAL,
        owner_id=None,
        year=int(r["year"]),
        name=r["holiday_name"],
        has_period=normalize_mysql_bool(r["has_period"]),
        start_date=normalize_mysql_date(r["start_date"]),
        end_date=normalize_mysql_date(r.get("end_date")),
        updated_at=r.get("updated_at"),
    )


def _to_record(r: Dict[str, Any], apply_types: Sequence[ApplyChildType]) -> HolidayRecord:
    return HolidayRecord(
        holiday_id=int(r["holiday_id"]),
        owner_type=OwnerType(r["owner_type"]),
        owner_id=int(r["owner_id"]),
        year=int(r["year"]),
        name=r["holiday_name"],
        has_period=normalize_mysql_bool(r["has_period"]),
        start_date=normalize_mysql_date(r["start_date"]),
        end_date=normalize_mysql_date(r.get("end_date")),
        is_operating=normalize_mysql_bool(r["is_operating"]),
        apply_child_types=tuple(apply_types),
        updated_at=r.get("updated_at"),
    )


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # ---- legal calendar -------------------------------------------------

    def list_legal(self, *, year: int) -> Sequence[HolidayRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_LEGAL_COLUMNS} FROM legal_holidays WHERE year=%s ORDER BY start_date, holiday_id",
                (int(year),),
            )
            return [_to_legal(r) for r in fetchall(cur)]

    def get_legal(self, *, holiday_id: int) -> Optional[HolidayRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_LEGAL_COLUMNS} FROM legal_holidays WHERE holiday_id=%s", (int(holiday_id),))
            r = fetchone(cur)
            return _to_legal(r) if r else None

    def upsert_legal(self, *, records: Sequence[HolidayRecord]) -> list[int]:
        ids: list[int] = []
        with db_cursor(self._conn_factory) as (_, cur):
            for rec in records:
                params = (
                    int(rec.year),
                    rec.name,
                    int(rec.has_period),
                    rec.start_date,
                    rec.end_date if rec.has_period else None,
                )
                if rec.holiday_id is None:
                    cur.execute(
                        """
                        INSERT INTO legal_holidays(year, holiday_name, has_period, start_date, end_date)
                        VALUES(%s,%s,%s,%s,%s)
                        """,
                        params,
                    )
                    ids.append(int(cur.lastrowid))
                else:
                    cur.execute(
                        """
                        UPDATE legal_holidays
                        SET year=%s, holiday_name=%s, has_period=%s, start_date=%s, end_date=%s
                        WHERE holiday_id=%s
                        """,
                        params + (int(rec.holiday_id),),
                    )
                    ids.append(int(rec.holiday_id))
        return ids

    def delete_legal(self, *, holiday_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM legal_holidays WHERE holiday_id=%s", (int(holiday_id),))
            deleted = cur.rowcount > 0
            if deleted:
                self._delete_settings_for_source(cur, HolidaySourceType.LEGAL, int(holiday_id))
            return deleted

    # ---- owned holidays -------------------------------------------------

    def list_for_owner(self, *, owner_type: OwnerType, owner_id: int, year: int) -> Sequence[HolidayRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_HOLIDAY_COLUMNS}
                FROM holidays
                WHERE owner_type=%s AND owner_id=%s AND year=%s
                ORDER BY start_date, holiday_id
                """,
                (owner_type.value, int(owner_id), int(year)),
            )
            rows = fetchall(cur)
            apply_types = self._load_apply_types(cur, [int(r["holiday_id"]) for r in rows])
            return [_to_record(r, apply_types.get(int(r["holiday_id"]), [])) for r in rows]

    def get(self, *, holiday_id: int) -> Optional[HolidayRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_HOLIDAY_COLUMNS} FROM holidays WHERE holiday_id=%s", (int(holiday_id),))
            r = fetchone(cur)
            if not r:
                return None
            apply_types = self._load_apply_types(cur, [int(r["holiday_id"])])
            return _to_record(r, apply_types.get(int(r["holiday_id"]), []))

    def save_bundle(self, *, bundle: HolidaySaveBundle) -> list[int]:
        ids: list[int] = []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT holiday_id FROM holidays WHERE owner_type=%s AND owner_id=%s AND year=%s",
                (bundle.owner_type.value, int(bundle.owner_id), int(bundle.year)),
            )
            existing = {int(r["holiday_id"]) for r in fetchall(cur)}
            kept = {int(rec.holiday_id) for rec in bundle.records if rec.holiday_id is not None}

            for holiday_id in sorted(existing - kept):
                cur.execute("DELETE FROM holidays WHERE holiday_id=%s", (holiday_id,))
                self._delete_settings_for_source(cur, HolidaySourceType.BRANCH, holiday_id)

            for rec in bundle.records:
                params = (
                    rec.name,
                    int(rec.has_period),
                    rec.start_date,
                    rec.end_date if rec.has_period else None,
                    int(rec.is_operating),
                )
                if rec.holiday_id is None:
                    cur.execute(
                        """
                        INSERT INTO holidays(owner_type, owner_id, year, holiday_name, has_period, start_date, end_date, is_operating)
                        VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                        """,
                        (bundle.owner_type.value, int(bundle.owner_id), int(bundle.year)) + params,
                    )
                    holiday_id = int(cur.lastrowid)
                else:
                    holiday_id = int(rec.holiday_id)
                    cur.execute(
                        """
                        UPDATE holidays
                        SET holiday_name=%s, has_period=%s, start_date=%s, end_date=%s, is_operating=%s
                        WHERE holiday_id=%s
                        """,
                        params + (holiday_id,),
                    )
                    cur.execute("DELETE FROM holiday_apply_child_types WHERE holiday_id=%s", (holiday_id,))

                for child in rec.apply_child_types:
                    cur.execute(
                        "INSERT INTO holiday_apply_child_types(holiday_id, apply_child_type) VALUES(%s,%s)",
                        (holiday_id, child.value),
                    )
                ids.append(holiday_id)

            if bundle.owner_type == OwnerType.STORE:
                cur.execute(
                    "DELETE FROM parent_holiday_settings WHERE store_id=%s AND year=%s",
                    (int(bundle.owner_id), int(bundle.year)),
                )
                for setting in bundle.parent_settings:
                    cur.execute(
                        """
                        INSERT INTO parent_holiday_settings(store_id, year, source_type, source_id, is_operating)
                        VALUES(%s,%s,%s,%s,%s)
                        ON DUPLICATE KEY UPDATE year=VALUES(year), is_operating=VALUES(is_operating)
                        """,
                        (
                            int(bundle.owner_id),
                            int(bundle.year),
                            setting.source_type.value,
                            int(setting.source_id),
                            int(setting.is_operating),
                        ),
                    )
            else:
                for store_id, source_type, source_id in bundle.dropped_overrides:
                    cur.execute(
                        "DELETE FROM parent_holiday_settings WHERE store_id=%s AND source_type=%s AND source_id=%s",
                        (int(store_id), source_type.value, int(source_id)),
                    )
        return ids

    def delete(self, *, holiday_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM holidays WHERE holiday_id=%s", (int(holiday_id),))
            deleted = cur.rowcount > 0
            if deleted:
                self._delete_settings_for_source(cur, HolidaySourceType.BRANCH, int(holiday_id))
            return deleted

    # ---- overrides ------------------------------------------------------

    def list_parent_settings(self, *, store_id: int, year: int) -> Sequence[ParentHolidayOperatingSetting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT source_type, source_id, is_operating
                FROM parent_holiday_settings
                WHERE store_id=%s AND year=%s
                ORDER BY source_type, source_id
                """,
                (int(store_id), int(year)),
            )
            return [
                ParentHolidayOperatingSetting(
                    source_type=HolidaySourceType(r["source_type"]),
                    source_id=int(r["source_id"]),
                    is_operating=normalize_mysql_bool(r["is_operating"]),
                )
                for r in fetchall(cur)
            ]

    def list_settings_for_sources(
        self, *, source_type: HolidaySourceType, source_ids: Sequence[int]
    ) -> Sequence[Tuple[int, ParentHolidayOperatingSetting]]:
        if not source_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT store_id, source_type, source_id, is_operating
                FROM parent_holiday_settings
                WHERE source_type=%s AND source_id IN ({in_clause(source_ids)})
                ORDER BY store_id, source_id
                """,
                (source_type.value,) + tuple(int(i) for i in source_ids),
            )
            return [
                (
                    int(r["store_id"]),
                    ParentHolidayOperatingSetting(
                        source_type=HolidaySourceType(r["source_type"]),
                        source_id=int(r["source_id"]),
                        is_operating=normalize_mysql_bool(r["is_operating"]),
                    ),
                )
                for r in fetchall(cur)
            ]

    # ---- summary list ---------------------------------------------------

    def list_summary_rows(self, *, year: int) -> Sequence[HolidayListItem]:
        out: list[HolidayListItem] = []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS cnt, MAX(updated_at) AS updated_at FROM legal_holidays WHERE year=%s",
                (int(year),),
            )
            legal = fetchone(cur)
            if legal and int(legal["cnt"]):
                out.append(
                    HolidayListItem(
                        year=int(year),
                        holiday_type=HolidayListType.LEGAL,
                        holiday_count=int(legal["cnt"]),
                        updated_at=legal.get("updated_at"),
                    )
                )

            cur.execute(
                """
                SELECT
                    h.owner_type,
                    h.owner_id,
                    COUNT(*) AS cnt,
                    MAX(h.updated_at) AS updated_at,
                    s.store_id,
                    s.store_name,
                    o.org_id,
                    o.org_type,
                    o.org_name,
                    p.org_id AS parent_org_id,
                    p.org_name AS parent_org_name
                FROM holidays h
                LEFT JOIN stores s ON h.owner_type = 'STORE' AND s.store_id = h.owner_id
                LEFT JOIN organizations o
                    ON o.org_id = CASE WHEN h.owner_type = 'STORE' THEN s.org_id ELSE h.owner_id END
                LEFT JOIN organizations p ON p.org_id = o.parent_id
                WHERE h.year = %s
                GROUP BY h.owner_type, h.owner_id, s.store_id, s.store_name, o.org_id, o.org_type, o.org_name,
                         p.org_id, p.org_name
                ORDER BY h.owner_type, h.owner_id
                """,
                (int(year),),
            )
            for r in fetchall(cur):
                org_type = OrgType(r["org_type"]) if r.get("org_type") else None
                if org_type == OrgType.FRANCHISE:
                    head_id, head_name = r.get("parent_org_id"), r.get("parent_org_name")
                    franchise_id, franchise_name = r.get("org_id"), r.get("org_name")
                else:
                    head_id, head_name = r.get("org_id"), r.get("org_name")
                    franchise_id, franchise_name = None, None
                out.append(
                    HolidayListItem(
                        year=int(year),
                        holiday_type=HolidayListType.PARTNER,
                        holiday_count=int(r["cnt"]),
                        head_office_id=int(head_id) if head_id is not None else None,
                        head_office_name=head_name,
                        franchise_id=int(franchise_id) if franchise_id is not None else None,
                        franchise_name=franchise_name,
                        store_id=int(r["store_id"]) if r.get("store_id") is not None else None,
                        store_name=r.get("store_name"),
                        updated_at=r.get("updated_at"),
                    )
                )
        return out

    # ---- helpers --------------------------------------------------------

    @staticmethod
    def _load_apply_types(cur, holiday_ids: Sequence[int]) -> Dict[int, list[ApplyChildType]]:
        if not holiday_ids:
            return {}
        cur.execute(
            f"""
            SELECT holiday_id, apply_child_type
            FROM holiday_apply_child_types
            WHERE holiday_id IN ({in_clause(holiday_ids)})
            ORDER BY holiday_id, apply_child_type
            """,
            tuple(holiday_ids),
        )
        out: Dict[int, list[ApplyChildType]] = {}
        for r in fetchall(cur):
            out.setdefault(int(r["holiday_id"]), []).append(ApplyChildType(r["apply_child_type"]))
        return out

    @staticmethod
    def _delete_settings_for_source(cur, source_type: HolidaySourceType, source_id: int) -> None:
        cur.execute(
            "DELETE FROM parent_holiday_settings WHERE source_type=%s AND source_id=%s",
            (source_type.value, int(source_id)),
        )
