from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Dict, Optional, Tuple

from src.franchise_holidays.franchise_holidays.core.enums import HolidayListType, HolidaySourceType, OwnerType
from src.franchise_holidays.franchise_holidays.holidays.model import (
    HolidayListItem,
    HolidayRecord,
    ParentHolidayOperatingSetting,
)
from src.franchise_holidays.franchise_holidays.organizations.model import Organization, Store


class InMemoryOrganizations:
    def __init__(self):
        self.orgs: Dict[int, Organization] = {}
        self.stores: Dict[int, Store] = {}
        self.lookups = 0

    def get_organization(self, org_id):
        self.lookups += 1
        return self.orgs.get(int(org_id))

    def get_store(self, store_id):
        self.lookups += 1
        return self.stores.get(int(store_id))


class InMemoryHolidays:
    def __init__(self):
        self.legal: Dict[int, HolidayRecord] = {}
        self.holidays: Dict[int, HolidayRecord] = {}
        # (store_id, source_type, source_id) -> (year, is_operating)
        self.settings: Dict[Tuple[int, HolidaySourceType, int], Tuple[int, bool]] = {}
        self._next_id = 100
        self.fail_writes = False
        self.summary_rows: Optional[list] = None

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def _check_writable(self):
        if self.fail_writes:
            raise ConnectionError("database unavailable")

    def add_legal(self, rec: HolidayRecord) -> HolidayRecord:
        self.legal[rec.holiday_id] = rec
        return rec

    def add(self, rec: HolidayRecord) -> HolidayRecord:
        self.holidays[rec.holiday_id] = rec
        return rec

    def list_legal(self, *, year):
        return sorted((r for r in self.legal.values() if r.year == year), key=lambda r: (r.start_date, r.holiday_id))

    def get_legal(self, *, holiday_id):
        return self.legal.get(int(holiday_id))

    def upsert_legal(self, *, records):
        self._check_writable()
        ids = []
        for rec in records:
            if rec.holiday_id is None:
                rec = replace(rec, holiday_id=self._new_id())
            self.legal[rec.holiday_id] = rec
            ids.append(rec.holiday_id)
        return ids

    def delete_legal(self, *, holiday_id):
        self._check_writable()
        if self.legal.pop(int(holiday_id), None) is None:
            return False
        self._drop_settings(HolidaySourceType.LEGAL, int(holiday_id))
        return True

    def list_for_owner(self, *, owner_type, owner_id, year):
        return sorted(
            (
                r
                for r in self.holidays.values()
                if r.owner_type == owner_type and r.owner_id == owner_id and r.year == year
            ),
            key=lambda r: (r.start_date, r.holiday_id),
        )

    def get(self, *, holiday_id):
        return self.holidays.get(int(holiday_id))

    def save_bundle(self, *, bundle):
        self._check_writable()
        holidays = dict(self.holidays)
        settings = dict(self.settings)

        kept = {r.holiday_id for r in bundle.records if r.holiday_id is not None}
        for r in self.list_for_owner(owner_type=bundle.owner_type, owner_id=bundle.owner_id, year=bundle.year):
            if r.holiday_id not in kept:
                del holidays[r.holiday_id]
                settings = {k: v for k, v in settings.items() if k[1:] != (HolidaySourceType.BRANCH, r.holiday_id)}

        ids = []
        for rec in bundle.records:
            if rec.holiday_id is None:
                rec = replace(rec, holiday_id=self._new_id())
            holidays[rec.holiday_id] = rec
            ids.append(rec.holiday_id)

        if bundle.owner_type == OwnerType.STORE:
            settings = {k: v for k, v in settings.items() if not (k[0] == bundle.owner_id and v[0] == bundle.year)}
            for s in bundle.parent_settings:
                settings[(bundle.owner_id, s.source_type, s.source_id)] = (bundle.year, s.is_operating)
        else:
            for key in bundle.dropped_overrides:
                settings.pop(key, None)

        self.holidays = holidays
        self.settings = settings
        return ids

    def delete(self, *, holiday_id):
        self._check_writable()
        if self.holidays.pop(int(holiday_id), None) is None:
            return False
        self._drop_settings(HolidaySourceType.BRANCH, int(holiday_id))
        return True

    def _drop_settings(self, source_type, source_id):
        self.settings = {k: v for k, v in self.settings.items() if k[1:] != (source_type, source_id)}

    def list_parent_settings(self, *, store_id, year):
        return [
            ParentHolidayOperatingSetting(source_type=k[1], source_id=k[2], is_operating=v[1])
            for k, v in sorted(self.settings.items(), key=lambda kv: (kv[0][1].value, kv[0][2]))
            if k[0] == store_id and v[0] == year
        ]

    def list_settings_for_sources(self, *, source_type, source_ids):
        wanted = set(source_ids)
        return [
            (k[0], ParentHolidayOperatingSetting(source_type=k[1], source_id=k[2], is_operating=v[1]))
            for k, v in sorted(self.settings.items(), key=lambda kv: (kv[0][0], kv[0][2]))
            if k[1] == source_type and k[2] in wanted
        ]

    def list_summary_rows(self, *, year):
        if self.summary_rows is not None:
            return list(self.summary_rows)
        rows = []
        legal = self.list_legal(year=year)
        if legal:
            rows.append(HolidayListItem(year=year, holiday_type=HolidayListType.LEGAL, holiday_count=len(legal)))
        counts: Dict[Tuple[OwnerType, int], int] = {}
        for r in self.holidays.values():
            if r.year == year:
                counts[(r.owner_type, r.owner_id)] = counts.get((r.owner_type, r.owner_id), 0) + 1
        for (owner_type, owner_id), count in sorted(counts.items(), key=lambda kv: (kv[0][0].value, kv[0][1])):
            rows.append(HolidayListItem(year=year, holiday_type=HolidayListType.PARTNER, holiday_count=count))
        return rows


def legal(holiday_id: int, name: str, day: date, *, has_period=False, end: Optional[date] = None) -> HolidayRecord:
    return HolidayRecord(
        holiday_id=holiday_id,
        owner_type=OwnerType.LEGAL,
        owner_id=None,
        year=day.year,
        name=name,
        start_date=day,
        has_period=has_period,
        end_date=end,
    )


def owned(
    holiday_id: Optional[int],
    owner_type: OwnerType,
    owner_id: int,
    name: str,
    day: Optional[date],
    *,
    is_operating=False,
    apply=(),
    has_period=False,
    end: Optional[date] = None,
    year: int = 2025,
) -> HolidayRecord:
    return HolidayRecord(
        holiday_id=holiday_id,
        owner_type=owner_type,
        owner_id=owner_id,
        year=year,
        name=name,
        start_date=day,
        has_period=has_period,
        end_date=end,
        is_operating=is_operating,
        apply_child_types=tuple(apply),
    )


HEAD_OFFICE_A = 1
FRANCHISE_F = 2
HEAD_OFFICE_B = 3
STORE_GANGNAM = 1
STORE_YEOKSAM = 2
STORE_HONGDAE = 3

FOUNDATION_DAY = 10
HQ_WORKSHOP = 11
FRANCHISE_DAY = 20
GANGNAM_REMODEL = 30
CHILDRENS_DAY = 1
