"""Example: resolve a store's effective calendar and toggle one inherited day (no Flask)."""

import importlib

from config import get_settings_module

from src.franchise_holidays.franchise_holidays.container import build_container
from src.franchise_holidays.franchise_holidays.holidays.calendar_builder import non_operating_dates
from src.franchise_holidays.franchise_holidays.holidays.draft import (
    derive_editable_state,
    set_parent_operating,
    to_save_bundle,
)


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    service = container.holiday_service

    view = service.resolve(year=2025, store_id=1)
    for v in view.infos:
        print(v.badge_level.value, v.source.start_date, v.source.name, "open" if v.effective_is_operating else "closed")
    print("closed:", non_operating_dates(view.infos, view.owner_type))

    state = derive_editable_state(view)
    inherited = [r for r in state.rows if r.is_inherited and r.holiday_id is not None]
    if inherited:
        row = inherited[0]
        state = set_parent_operating(state, row.holiday_id, row.holiday_type, not row.is_operating)
        service.update(bundle=to_save_bundle(state))
        print("closed after toggle:", service.closed_dates(year=2025, store_id=1))


if __name__ == "__main__":
    main()
