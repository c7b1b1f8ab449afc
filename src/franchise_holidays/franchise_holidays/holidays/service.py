from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.enums import HolidayListType, HolidaySourceType, OwnerType
from ..core.exceptions import DomainError, NotFoundError, PersistenceError, RowError, ValidationError
from ..organizations.hierarchy import HierarchyIndex
from ..organizations.model import AncestorChain
from .calendar_builder import EffectiveCalendarBuilder, non_operating_dates
from .ledger import OverrideLedger
from .model import (
    HolidayListItem,
    HolidayOwnerView,
    HolidayRecord,
    HolidaySaveBundle,
    OverrideKey,
    Page,
    StoreOverrideKey,
    SummaryFilter,
)
from .repository import HolidayRepository
from .resolver import HierarchyResolver, reaching_types
from .validation import ValidationGate

logger = logging.getLogger(__name__)


class HolidayService:
    def __init__(
        self,
        holidays: HolidayRepository,
        hierarchy: HierarchyIndex,
        *,
        resolver: HierarchyResolver | None = None,
        builder: EffectiveCalendarBuilder | None = None,
        gate: ValidationGate | None = None,
    ):
        self._holidays = holidays
        self._hierarchy = hierarchy
        self._resolver = resolver or HierarchyResolver(holidays, hierarchy)
        self._builder = builder or EffectiveCalendarBuilder()
        self._gate = gate or ValidationGate()

    # ---- read side ------------------------------------------------------

    def resolve(self, *, year: int, org_id: Optional[int] = None, store_id: Optional[int] = None) -> HolidayOwnerView:
        chain = self._hierarchy.owner_for(org_id=org_id, store_id=store_id)
        records = self._resolver.resolve(chain, year)
        overrides = self._overrides_for(chain, year)
        views = self._builder.build(chain.owner_type, chain.owner_id, records, overrides)
        return HolidayOwnerView(
            owner_type=chain.owner_type,
            owner_id=chain.owner_id,
            year=int(year),
            owner_name=chain.owner_name,
            head_office_name=chain.head_office_name,
            franchise_name=chain.franchise_name,
            infos=tuple(views),
        )

    def closed_dates(self, *, year: int, org_id: Optional[int] = None, store_id: Optional[int] = None) -> List[date]:
        view = self.resolve(year=year, org_id=org_id, store_id=store_id)
        return non_operating_dates(view.infos, view.owner_type)

    def _overrides_for(self, chain: AncestorChain, year: int) -> Dict[OverrideKey, bool]:
        if chain.owner_type != OwnerType.STORE or not chain.is_known or chain.owner_id is None:
            return {}
        settings = self._holidays.list_parent_settings(store_id=chain.owner_id, year=year)
        return OverrideLedger.from_settings(chain.owner_id, settings).for_store(chain.owner_id)

    def list_summary(self, filters: SummaryFilter) -> Page[HolidayListItem]:
        size = filters.size if 0 < filters.size <= MAX_PAGE_SIZE else DEFAULT_PAGE_SIZE
        page = max(int(filters.page), 0)
        has_org_filter = any((filters.head_office_id, filters.franchise_id, filters.store_id))

        rows: List[HolidayListItem] = []
        for item in self._holidays.list_summary_rows(year=filters.year):
            if item.holiday_type == HolidayListType.LEGAL:
                if not has_org_filter:
                    rows.append(item)
                continue
            if filters.head_office_id and item.head_office_id != filters.head_office_id:
                continue
            if filters.franchise_id and item.franchise_id != filters.franchise_id:
                continue
            if filters.store_id and item.store_id != filters.store_id:
                continue
            rows.append(item)

        start = page * size
        return Page(content=rows[start : start + size], page_number=page, page_size=size, total_elements=len(rows))

    # ---- owned holidays -------------------------------------------------

    def create(self, *, year: int, bundle: HolidaySaveBundle) -> List[int]:
        if any(rec.holiday_id is not None for rec in bundle.records):
            raise ValidationError("신규 등록에는 기존 휴일을 포함할 수 없습니다.")
        return self._save(replace(bundle, year=int(year)))

    def update(self, *, bundle: HolidaySaveBundle) -> List[int]:
        return self._save(bundle)

    def _save(self, bundle: HolidaySaveBundle) -> List[int]:
        if bundle.owner_type == OwnerType.LEGAL:
            raise ValidationError("법정공휴일은 법정공휴일 관리에서 저장해주세요.")

        chain = self._chain_for_owner(bundle.owner_type, bundle.owner_id)
        records = tuple(
            replace(
                rec,
                owner_type=bundle.owner_type,
                owner_id=bundle.owner_id,
                year=bundle.year,
                end_date=rec.end_date if rec.has_period else None,
            )
            for rec in bundle.records
        )
        self._gate.check(bundle.owner_type, records, year=bundle.year)

        existing_ids = {
            rec.holiday_id
            for rec in self._holidays.list_for_owner(
                owner_type=bundle.owner_type, owner_id=bundle.owner_id, year=bundle.year
            )
        }
        foreign = [
            RowError(i, "holidayId", f"{i + 1}번째 행의 휴일을 찾을 수 없습니다.")
            for i, rec in enumerate(records)
            if rec.holiday_id is not None and rec.holiday_id not in existing_ids
        ]
        if foreign:
            raise ValidationError(foreign[0].message, foreign)

        settings = ()
        if bundle.parent_settings:
            OverrideLedger.require_store_owner(bundle.owner_type)
        if bundle.owner_type == OwnerType.STORE:
            settings = tuple(self._normalize_settings(chain, bundle))

        to_store = replace(
            bundle,
            records=records,
            parent_settings=settings,
            dropped_overrides=self._orphaned_overrides(bundle.owner_type, bundle.owner_id, records),
        )
        try:
            ids = self._holidays.save_bundle(bundle=to_store)
        except DomainError:
            raise
        except Exception as e:
            logger.exception(
                "Saving holidays failed owner=%s:%s year=%s", bundle.owner_type.value, bundle.owner_id, bundle.year
            )
            raise PersistenceError("휴일 저장에 실패했습니다. 잠시 후 다시 시도해주세요.") from e

        logger.info(
            "Saved %d holidays (%d overrides) owner=%s:%s year=%s",
            len(records),
            len(settings),
            bundle.owner_type.value,
            bundle.owner_id,
            bundle.year,
        )
        return ids

    def _chain_for_owner(self, owner_type: OwnerType, owner_id: int) -> AncestorChain:
        if not owner_id or int(owner_id) <= 0:
            raise ValidationError("휴일 소유자 정보가 없습니다.")
        if owner_type == OwnerType.STORE:
            chain = self._hierarchy.chain_for_store(int(owner_id))
        else:
            chain = self._hierarchy.chain_for_org(int(owner_id))
        if not chain.is_known or chain.owner_type != owner_type:
            raise ValidationError("휴일 소유자 정보가 올바르지 않습니다.")
        return chain

    def _normalize_settings(self, chain: AncestorChain, bundle: HolidaySaveBundle):
        """Keep only real overrides: inherited source, value differs from the source."""
        inherited = {
            rec.source_key: rec
            for rec in self._resolver.resolve(chain, bundle.year)
            if rec.owner_type != OwnerType.STORE and rec.source_key is not None
        }

        ledger = OverrideLedger()
        for s in bundle.parent_settings:
            if s.key not in inherited:
                raise ValidationError(f"상속되지 않은 휴일에는 운영 설정을 지정할 수 없습니다. (id={s.source_id})")
            if inherited[s.key].is_operating == s.is_operating:
                ledger.clear_override(bundle.owner_id, s.source_type, s.source_id)
            else:
                ledger.set_override(bundle.owner_id, s.source_type, s.source_id, s.is_operating)
        return ledger.settings_for(bundle.owner_id)

    def _orphaned_overrides(
        self, owner_type: OwnerType, owner_id: int, records: Sequence[HolidayRecord]
    ) -> Tuple[StoreOverrideKey, ...]:
        """Store overrides on kept records whose apply types no longer reach that store."""
        if owner_type not in (OwnerType.HEAD_OFFICE, OwnerType.FRANCHISE):
            return ()
        kept = {rec.holiday_id: rec for rec in records if rec.holiday_id is not None}
        if not kept:
            return ()

        by_store: Dict[int, list] = {}
        for store_id, setting in self._holidays.list_settings_for_sources(
            source_type=HolidaySourceType.BRANCH, source_ids=sorted(kept)
        ):
            by_store.setdefault(store_id, []).append(setting)

        dropped: List[StoreOverrideKey] = []
        for store_id, settings in sorted(by_store.items()):
            reaching = reaching_types(self._hierarchy.chain_for_store(store_id), owner_type, owner_id)
            still_inherited = {
                rec.source_key for rec in kept.values() if reaching.intersection(rec.apply_child_types)
            }
            ledger = OverrideLedger.from_settings(store_id, settings)
            for source_type, source_id in ledger.prune(store_id, still_inherited):
                dropped.append((store_id, source_type, source_id))

        if dropped:
            logger.info(
                "Dropping %d orphaned overrides owner=%s:%s stores=%s",
                len(dropped),
                owner_type.value,
                owner_id,
                sorted({store_id for store_id, _, _ in dropped}),
            )
        return tuple(dropped)

    def delete(self, *, owner_type: OwnerType, holiday_id: int) -> None:
        if owner_type == OwnerType.LEGAL:
            self.delete_legal(holiday_id=holiday_id)
            return

        rec = self._holidays.get(holiday_id=int(holiday_id))
        if rec is None or rec.owner_type != owner_type:
            raise NotFoundError("삭제할 휴일을 찾을 수 없습니다.")
        if not self._delete_with(lambda: self._holidays.delete(holiday_id=int(holiday_id))):
            raise NotFoundError("삭제할 휴일을 찾을 수 없습니다.")
        logger.info("Deleted holiday %s owner=%s:%s", holiday_id, owner_type.value, rec.owner_id)

    # ---- legal calendar -------------------------------------------------

    def list_legal(self, *, year: int) -> Sequence[HolidayRecord]:
        return self._holidays.list_legal(year=int(year))

    def create_legal(self, *, year: int, drafts: Sequence[HolidayRecord], skip_duplicate: bool = False) -> List[int]:
        records = [self._as_legal(rec, year=int(year)) for rec in drafts]
        if any(rec.holiday_id is not None for rec in records):
            raise ValidationError("신규 등록에는 기존 공휴일을 포함할 수 없습니다.")
        self._gate.check(OwnerType.LEGAL, records, year=int(year))

        seen = {(rec.start_date, rec.name.strip()) for rec in self._holidays.list_legal(year=int(year))}
        to_insert: List[HolidayRecord] = []
        duplicates: List[RowError] = []
        for i, rec in enumerate(records):
            key = (rec.start_date, rec.name.strip())
            if key in seen:
                duplicates.append(RowError(i, "holidayName", f"{i + 1}번째 행은 이미 등록된 공휴일입니다."))
                continue
            seen.add(key)
            to_insert.append(rec)

        if duplicates and not skip_duplicate:
            raise ValidationError(duplicates[0].message, duplicates)
        if duplicates:
            logger.info("Skipped %d duplicate legal holidays for %s", len(duplicates), year)
        if not to_insert:
            return []
        return self._write_legal(to_insert)

    def upsert_legal(self, *, drafts: Sequence[HolidayRecord]) -> List[int]:
        records = []
        for rec in drafts:
            if rec.start_date is None:
                records.append(self._as_legal(rec, year=rec.year))
            else:
                records.append(self._as_legal(rec, year=rec.start_date.year))
        self._gate.check(OwnerType.LEGAL, records)

        missing = [
            RowError(i, "id", f"{i + 1}번째 행의 공휴일을 찾을 수 없습니다.")
            for i, rec in enumerate(records)
            if rec.holiday_id is not None and self._holidays.get_legal(holiday_id=rec.holiday_id) is None
        ]
        if missing:
            raise ValidationError(missing[0].message, missing)
        return self._write_legal(records)

    def delete_legal(self, *, holiday_id: int) -> None:
        if not self._delete_with(lambda: self._holidays.delete_legal(holiday_id=int(holiday_id))):
            raise NotFoundError("삭제할 공휴일을 찾을 수 없습니다.")
        logger.info("Deleted legal holiday %s", holiday_id)

    @staticmethod
    def _as_legal(rec: HolidayRecord, *, year: int) -> HolidayRecord:
        return replace(
            rec,
            owner_type=OwnerType.LEGAL,
            owner_id=None,
            year=int(year),
            is_operating=False,
            apply_child_types=(),
            end_date=rec.end_date if rec.has_period else None,
        )

    def _write_legal(self, records: Sequence[HolidayRecord]) -> List[int]:
        try:
            ids = self._holidays.upsert_legal(records=records)
        except DomainError:
            raise
        except Exception as e:
            logger.exception("Saving legal holidays failed")
            raise PersistenceError("공휴일 저장에 실패했습니다. 잠시 후 다시 시도해주세요.") from e
        logger.info("Saved %d legal holidays", len(ids))
        return ids

    @staticmethod
    def _delete_with(action) -> bool:
        try:
            return bool(action())
        except DomainError:
            raise
        except Exception as e:
            logger.exception("Deleting holiday failed")
            raise PersistenceError("휴일 삭제에 실패했습니다.") from e
