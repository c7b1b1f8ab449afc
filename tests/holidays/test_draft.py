from __future__ import annotations

from datetime import date

import pytest

from src.franchise_holidays.franchise_holidays.core.enums import ApplyChildType, HolidaySourceType, OwnerType
from src.franchise_holidays.franchise_holidays.core.exceptions import ValidationError
from src.franchise_holidays.franchise_holidays.holidays.draft import (
    add_row,
    derive_editable_state,
    remove_row,
    set_parent_operating,
    to_save_bundle,
    update_row,
)

from ..fakes import CHILDRENS_DAY, FOUNDATION_DAY, GANGNAM_REMODEL, HEAD_OFFICE_A, STORE_GANGNAM


def test_derived_state_marks_inherited_rows_and_seeds_parent_settings(service):
    snapshot = service.resolve(year=2025, store_id=STORE_GANGNAM)

    state = derive_editable_state(snapshot)

    assert [r.holiday_id for r in state.own_rows] == [GANGNAM_REMODEL]
    assert {(s.source_type, s.source_id) for s in state.parent_settings} == {
        (HolidaySourceType.LEGAL, CHILDRENS_DAY),
        (HolidaySourceType.BRANCH, FOUNDATION_DAY),
    }
    assert [r.start_date for r in state.sorted_rows()] == ["2025-05-05", "2025-05-10", "2025-08-15"]


def test_non_store_state_has_no_parent_settings(service):
    state = derive_editable_state(service.resolve(year=2025, org_id=HEAD_OFFICE_A))

    assert state.owner_type == OwnerType.HEAD_OFFICE
    assert state.parent_settings == ()


def test_turning_period_off_clears_end_date(service):
    state = add_row(derive_editable_state(service.resolve(year=2025, org_id=HEAD_OFFICE_A)))
    new_row = state.rows[-1]

    state = update_row(state, new_row.temp_id, holiday_name="여름휴가", has_period=True, start_date="2025-08-01", end_date="2025-08-03")
    assert state.rows[-1].end_date == "2025-08-03"

    state = update_row(state, new_row.temp_id, has_period=False)
    assert state.rows[-1].end_date == ""


def test_inherited_rows_cannot_be_edited(service):
    state = derive_editable_state(service.resolve(year=2025, store_id=STORE_GANGNAM))
    inherited = next(r for r in state.rows if r.is_inherited)

    with pytest.raises(ValidationError):
        update_row(state, inherited.temp_id, holiday_name="x")


def test_set_parent_operating_updates_setting_and_row_without_touching_snapshot(service):
    snapshot = service.resolve(year=2025, store_id=STORE_GANGNAM)
    state = derive_editable_state(snapshot)

    toggled = set_parent_operating(state, FOUNDATION_DAY, OwnerType.HEAD_OFFICE, True)

    setting = next(s for s in toggled.parent_settings if s.source_id == FOUNDATION_DAY)
    row = next(r for r in toggled.rows if r.holiday_id == FOUNDATION_DAY)
    assert setting.is_operating is True and row.is_operating is True
    assert len(toggled.parent_settings) == len(state.parent_settings)
    assert next(r for r in state.rows if r.holiday_id == FOUNDATION_DAY).is_operating is False


def test_to_save_bundle_keeps_own_rows_only(service):
    state = derive_editable_state(service.resolve(year=2025, store_id=STORE_GANGNAM))
    state = add_row(state)
    state = update_row(state, state.rows[-1].temp_id, holiday_name="임시휴무", start_date="2025-10-01")
    state = remove_row(state, next(r.temp_id for r in state.rows if r.holiday_id == GANGNAM_REMODEL))

    bundle = to_save_bundle(state)

    assert bundle.owner_type == OwnerType.STORE and bundle.owner_id == STORE_GANGNAM
    assert [(r.holiday_id, r.name, r.start_date) for r in bundle.records] == [(None, "임시휴무", date(2025, 10, 1))]
    assert len(bundle.parent_settings) == 2


def test_to_save_bundle_drops_parent_settings_and_keeps_apply_types_for_head_office(service):
    state = derive_editable_state(service.resolve(year=2025, org_id=HEAD_OFFICE_A))

    bundle = to_save_bundle(state)

    assert bundle.parent_settings == ()
    assert any(ApplyChildType.ALL_HEAD_OFFICE_STORES in r.apply_child_types for r in bundle.records)
