"""Editable state for the holiday detail screen.

The editor works on a ``DraftState`` derived from the last resolved calendar. Derive it
again whenever a new calendar arrives; every helper here returns a new state and never
mutates its input.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Tuple

from ..common.datetime_utils import format_date, parse_optional_date
from ..core.enums import ApplyChildType, OwnerType
from ..core.exceptions import ValidationError
from .model import HolidayOwnerView, HolidayRecord, HolidaySaveBundle, HolidayView, ParentHolidayOperatingSetting

_temp_ids = itertools.count(1)


def _next_temp_id() -> str:
    return f"temp-{next(_temp_ids)}"


@dataclass(frozen=True)
class EditableHolidayRow:
    temp_id: str
    holiday_name: str = ""
    is_operating: bool = False
    has_period: bool = False
    start_date: str = ""
    end_date: str = ""
    apply_child_types: Tuple[ApplyChildType, ...] = ()
    holiday_id: Optional[int] = None
    holiday_type: Optional[OwnerType] = None
    is_inherited: bool = False


@dataclass(frozen=True)
class DraftState:
    owner_type: OwnerType
    owner_id: Optional[int]
    year: int
    rows: Tuple[EditableHolidayRow, ...] = ()
    parent_settings: Tuple[ParentHolidayOperatingSetting, ...] = field(default_factory=tuple)

    @property
    def own_rows(self) -> Tuple[EditableHolidayRow, ...]:
        return tuple(r for r in self.rows if not r.is_inherited)

    def sorted_rows(self, *, own_only: bool = False) -> List[EditableHolidayRow]:
        rows = self.own_rows if own_only else self.rows
        return sorted(rows, key=lambda r: r.start_date)


def _view_to_row(view: HolidayView) -> EditableHolidayRow:
    rec = view.source
    return EditableHolidayRow(
        temp_id=_next_temp_id(),
        holiday_id=rec.holiday_id,
        holiday_name=rec.name,
        is_operating=view.effective_is_operating,
        has_period=rec.has_period,
        start_date=format_date(rec.start_date) or "",
        end_date=format_date(rec.end_date) or "",
        apply_child_types=rec.apply_child_types,
        holiday_type=rec.owner_type,
        is_inherited=view.is_inherited,
    )


def derive_editable_state(snapshot: HolidayOwnerView) -> DraftState:
    rows = tuple(_view_to_row(v) for v in snapshot.infos)
    settings: Tuple[ParentHolidayOperatingSetting, ...] = ()
    if snapshot.owner_type == OwnerType.STORE:
        settings = tuple(
            ParentHolidayOperatingSetting(
                source_type=v.source.source_type,
                source_id=int(v.source.holiday_id),
                is_operating=v.effective_is_operating,
            )
            for v in snapshot.infos
            if v.is_inherited and v.source.holiday_id is not None
        )
    return DraftState(
        owner_type=snapshot.owner_type,
        owner_id=snapshot.owner_id,
        year=snapshot.year,
        rows=rows,
        parent_settings=settings,
    )


def add_row(state: DraftState) -> DraftState:
    return replace(state, rows=state.rows + (EditableHolidayRow(temp_id=_next_temp_id()),))


def remove_row(state: DraftState, temp_id: str) -> DraftState:
    return replace(state, rows=tuple(r for r in state.rows if r.temp_id != temp_id))


def update_row(state: DraftState, temp_id: str, **changes: Any) -> DraftState:
    rows = []
    for r in state.rows:
        if r.temp_id == temp_id:
            if r.is_inherited:
                raise ValidationError("상속된 휴일은 수정할 수 없습니다.")
            r = replace(r, **changes)
            if "has_period" in changes and not changes["has_period"]:
                r = replace(r, end_date="")
        rows.append(r)
    return replace(state, rows=tuple(rows))


def set_parent_operating(state: DraftState, holiday_id: int, holiday_type: OwnerType, is_operating: bool) -> DraftState:
    """Toggle the local operating flag of an inherited holiday."""
    source_type = holiday_type.source_type
    settings = list(state.parent_settings)
    for i, s in enumerate(settings):
        if s.source_type == source_type and s.source_id == holiday_id:
            settings[i] = replace(s, is_operating=is_operating)
            break
    else:
        settings.append(
            ParentHolidayOperatingSetting(source_type=source_type, source_id=holiday_id, is_operating=is_operating)
        )

    rows = tuple(
        replace(r, is_operating=is_operating)
        if r.is_inherited and r.holiday_id == holiday_id and r.holiday_type == holiday_type
        else r
        for r in state.rows
    )
    return replace(state, rows=rows, parent_settings=tuple(settings))


def to_save_bundle(state: DraftState) -> HolidaySaveBundle:
    if state.owner_id is None:
        raise ValidationError("휴일 소유자 정보가 없습니다.")

    is_store = state.owner_type == OwnerType.STORE
    records = []
    for r in state.own_rows:
        start = parse_optional_date(r.start_date, "시작일")
        end = parse_optional_date(r.end_date, "종료일") if r.has_period else None
        records.append(
            HolidayRecord(
                holiday_id=r.holiday_id,
                owner_type=state.owner_type,
                owner_id=state.owner_id,
                year=state.year,
                name=r.holiday_name,
                has_period=r.has_period,
                start_date=start,
                end_date=end,
                is_operating=r.is_operating,
                apply_child_types=() if is_store else r.apply_child_types,
            )
        )
    return HolidaySaveBundle(
        owner_type=state.owner_type,
        owner_id=int(state.owner_id),
        year=state.year,
        records=tuple(records),
        parent_settings=state.parent_settings if is_store else (),
    )
