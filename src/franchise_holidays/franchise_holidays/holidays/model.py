from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Generic, Optional, Sequence, Tuple, TypeVar

from ..core.enums import ApplyChildType, HolidayListType, HolidaySourceType, OwnerType

T = TypeVar("T")

OverrideKey = Tuple[HolidaySourceType, int]
# (store_id, source_type, source_id)
StoreOverrideKey = Tuple[int, HolidaySourceType, int]


@dataclass(frozen=True)
class HolidayRecord:
    """One authored holiday. ``holiday_id`` is None for a draft that was never saved."""

    owner_type: OwnerType
    owner_id: Optional[int]
    year: int
    name: str
    start_date: Optional[date]
    has_period: bool = False
    end_date: Optional[date] = None
    is_operating: bool = False
    apply_child_types: Tuple[ApplyChildType, ...] = ()
    holiday_id: Optional[int] = None
    updated_at: Optional[datetime] = None

    @property
    def source_type(self) -> HolidaySourceType:
        return self.owner_type.source_type

    @property
    def source_key(self) -> Optional[OverrideKey]:
        if self.holiday_id is None:
            return None
        return (self.source_type, self.holiday_id)

    @property
    def last_date(self) -> Optional[date]:
        if self.has_period and self.end_date:
            return self.end_date
        return self.start_date

    def applies_to(self, child: ApplyChildType) -> bool:
        return child in self.apply_child_types


@dataclass(frozen=True)
class ParentHolidayOperatingSetting:
    """A store's local operating flag for one inherited holiday."""

    source_type: HolidaySourceType
    source_id: int
    is_operating: bool

    @property
    def key(self) -> OverrideKey:
        return (self.source_type, int(self.source_id))


@dataclass(frozen=True)
class HolidayView:
    source: HolidayRecord
    is_inherited: bool
    effective_is_operating: bool
    badge_level: OwnerType


@dataclass(frozen=True)
class HolidayOwnerView:
    """Effective calendar of one owner for one year."""

    owner_type: OwnerType
    owner_id: Optional[int]
    year: int
    owner_name: str = ""
    head_office_name: Optional[str] = None
    franchise_name: Optional[str] = None
    infos: Tuple[HolidayView, ...] = ()


@dataclass(frozen=True)
class HolidaySaveBundle:
    """Full replacement set of one owner's records (and store overrides) for a year.

    ``dropped_overrides`` lists other stores' overrides that the new records no longer
    reach; they are removed in the same write.
    """

    owner_type: OwnerType
    owner_id: int
    year: int
    records: Tuple[HolidayRecord, ...] = ()
    parent_settings: Tuple[ParentHolidayOperatingSetting, ...] = ()
    dropped_overrides: Tuple[StoreOverrideKey, ...] = ()


@dataclass(frozen=True)
class HolidayListItem:
    year: int
    holiday_type: HolidayListType
    holiday_count: int
    head_office_id: Optional[int] = None
    head_office_name: Optional[str] = None
    franchise_id: Optional[int] = None
    franchise_name: Optional[str] = None
    store_id: Optional[int] = None
    store_name: Optional[str] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Page(Generic[T]):
    content: Sequence[T]
    page_number: int
    page_size: int
    total_elements: int

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total_elements / self.page_size)

    @property
    def is_first(self) -> bool:
        return self.page_number == 0

    @property
    def is_last(self) -> bool:
        return self.page_number >= max(self.total_pages - 1, 0)

    @property
    def has_next(self) -> bool:
        return not self.is_last


@dataclass
class SummaryFilter:
    year: int
    head_office_id: Optional[int] = None
    franchise_id: Optional[int] = None
    store_id: Optional[int] = None
    page: int = 0
    size: int = 50
