from __future__ import annotations

from typing import Optional, Protocol, Sequence, Tuple

from ..core.enums import HolidaySourceType, OwnerType
from .model import HolidayListItem, HolidayRecord, HolidaySaveBundle, ParentHolidayOperatingSetting


class HolidayRepository(Protocol):
    def list_legal(self, *, year: int) -> Sequence[HolidayRecord]:
        raise NotImplementedError

    def get_legal(self, *, holiday_id: int) -> Optional[HolidayRecord]:
        raise NotImplementedError

    def upsert_legal(self, *, records: Sequence[HolidayRecord]) -> list[int]:
        """Insert records without id, update records with id, in one transaction.

        Returns ids in input order.
        """

        raise NotImplementedError

    def delete_legal(self, *, holiday_id: int) -> bool:
        """Delete a legal holiday and every store override pointing at it."""

        raise NotImplementedError

    def list_for_owner(self, *, owner_type: OwnerType, owner_id: int, year: int) -> Sequence[HolidayRecord]:
        raise NotImplementedError

    def get(self, *, holiday_id: int) -> Optional[HolidayRecord]:
        raise NotImplementedError

    def save_bundle(self, *, bundle: HolidaySaveBundle) -> list[int]:
        """Replace the owner's records for the year (and store overrides) atomically.

        Records with an id are updated, records without are inserted, stored ids missing
        from the bundle are deleted. For store owners the override set for the store/year
        is replaced as well; for ancestor owners ``dropped_overrides`` are deleted. Returns
        record ids in input order.
        """

        raise NotImplementedError

    def delete(self, *, holiday_id: int) -> bool:
        """Delete one owned holiday and every store override pointing at it."""

        raise NotImplementedError

    def list_parent_settings(self, *, store_id: int, year: int) -> Sequence[ParentHolidayOperatingSetting]:
        raise NotImplementedError

    def list_settings_for_sources(
        self, *, source_type: HolidaySourceType, source_ids: Sequence[int]
    ) -> Sequence[Tuple[int, ParentHolidayOperatingSetting]]:
        """Every store override pointing at one of the given sources, as (store_id, setting)."""

        raise NotImplementedError

    def list_summary_rows(self, *, year: int) -> Sequence[HolidayListItem]:
        """Holiday counts for the year: the legal row first, then one row per owner."""

        raise NotImplementedError
