from __future__ import annotations

from datetime import date
from typing import Iterable, List, Mapping, Optional, Sequence

from ..common.datetime_utils import iter_days
from ..core.enums import ApplyChildType, OwnerType
from .model import HolidayRecord, HolidayView, OverrideKey


def _sort_key(view: HolidayView):
    rec = view.source
    return (
        rec.start_date or date.max,
        rec.owner_type.precedence,
        rec.holiday_id if rec.holiday_id is not None else -1,
        rec.name,
    )


class EffectiveCalendarBuilder:
    """Merge resolved records with store overrides into a date-sorted view."""

    def build(
        self,
        owner_type: OwnerType,
        owner_id: Optional[int],
        records: Iterable[HolidayRecord],
        overrides: Optional[Mapping[OverrideKey, bool]] = None,
    ) -> List[HolidayView]:
        overrides = overrides or {}
        views: List[HolidayView] = []
        for rec in records:
            is_inherited = rec.owner_type != owner_type
            effective = rec.is_operating
            if is_inherited and rec.source_key is not None:
                effective = overrides.get(rec.source_key, rec.is_operating)
            views.append(
                HolidayView(
                    source=rec,
                    is_inherited=is_inherited,
                    effective_is_operating=effective,
                    badge_level=rec.owner_type,
                )
            )
        # ties on the same date: LEGAL < HEAD_OFFICE < FRANCHISE < STORE
        return sorted(views, key=_sort_key)


def own_only(views: Sequence[HolidayView]) -> List[HolidayView]:
    return [v for v in views if not v.is_inherited]


def closes_owner(view: HolidayView, owner_type: Optional[OwnerType]) -> bool:
    """Whether a closed view keeps the owner itself closed.

    A head office's own record aimed only at stores closes those stores, not the head
    office; it counts when it has no apply types or targets HEAD_OFFICE.
    """
    if view.effective_is_operating:
        return False
    rec = view.source
    if owner_type == OwnerType.HEAD_OFFICE and not view.is_inherited and rec.apply_child_types:
        return rec.applies_to(ApplyChildType.HEAD_OFFICE)
    return True


def non_operating_dates(views: Sequence[HolidayView], owner_type: Optional[OwnerType] = None) -> List[date]:
    """Dates on which any applicable holiday keeps the owner closed."""
    closed: set[date] = set()
    for v in views:
        if v.source.start_date is None or not closes_owner(v, owner_type):
            continue
        closed.update(iter_days(v.source.start_date, v.source.last_date or v.source.start_date))
    return sorted(closed)
