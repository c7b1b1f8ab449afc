from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set

from ..core.enums import HolidaySourceType, OwnerType
from ..core.exceptions import ValidationError
from .model import OverrideKey, ParentHolidayOperatingSetting, StoreOverrideKey


class OverrideLedger:
    """Store-scoped operating flags shadowing inherited holidays.

    Entries never touch the holiday they point at; at most one entry exists per
    ``(store_id, source_type, source_id)``.
    """

    def __init__(self) -> None:
        self._entries: Dict[StoreOverrideKey, bool] = {}

    @classmethod
    def from_settings(cls, store_id: int, settings: Iterable[ParentHolidayOperatingSetting]) -> "OverrideLedger":
        ledger = cls()
        for s in settings:
            ledger.set_override(store_id, s.source_type, s.source_id, s.is_operating)
        return ledger

    @staticmethod
    def require_store_owner(owner_type: OwnerType) -> None:
        if owner_type != OwnerType.STORE:
            raise ValidationError("상위 휴일 운영 설정은 점포에서만 지정할 수 있습니다.")

    def get_override(self, store_id: int, source_type: HolidaySourceType, source_id: int) -> Optional[bool]:
        return self._entries.get((int(store_id), HolidaySourceType(source_type), int(source_id)))

    def set_override(self, store_id: int, source_type: HolidaySourceType, source_id: int, is_operating: bool) -> None:
        if int(store_id) <= 0:
            raise ValidationError("점포 정보가 올바르지 않습니다.")
        self._entries[(int(store_id), HolidaySourceType(source_type), int(source_id))] = bool(is_operating)

    def clear_override(self, store_id: int, source_type: HolidaySourceType, source_id: int) -> None:
        self._entries.pop((int(store_id), HolidaySourceType(source_type), int(source_id)), None)

    def for_store(self, store_id: int) -> Dict[OverrideKey, bool]:
        return {
            (source_type, source_id): value
            for (sid, source_type, source_id), value in self._entries.items()
            if sid == int(store_id)
        }

    def settings_for(self, store_id: int) -> List[ParentHolidayOperatingSetting]:
        items = sorted(self.for_store(store_id).items(), key=lambda kv: (kv[0][0].value, kv[0][1]))
        return [
            ParentHolidayOperatingSetting(source_type=source_type, source_id=source_id, is_operating=value)
            for (source_type, source_id), value in items
        ]

    def prune(self, store_id: int, valid_keys: Set[OverrideKey]) -> List[OverrideKey]:
        """Drop the store's entries whose source is not in ``valid_keys``; returns dropped keys."""
        dropped = [key for key in self.for_store(store_id) if key not in valid_keys]
        for source_type, source_id in dropped:
            self.clear_override(store_id, source_type, source_id)
        return dropped
