from __future__ import annotations

from enum import Enum


class OwnerType(str, Enum):
    """Organization level that authored a holiday (or a view is computed for)."""

    LEGAL = "LEGAL"
    HEAD_OFFICE = "HEAD_OFFICE"
    FRANCHISE = "FRANCHISE"
    STORE = "STORE"

    @property
    def precedence(self) -> int:
        return _OWNER_PRECEDENCE[self]

    @property
    def source_type(self) -> "HolidaySourceType":
        if self == OwnerType.LEGAL:
            return HolidaySourceType.LEGAL
        return HolidaySourceType.BRANCH


_OWNER_PRECEDENCE = {
    OwnerType.LEGAL: 0,
    OwnerType.HEAD_OFFICE: 1,
    OwnerType.FRANCHISE: 2,
    OwnerType.STORE: 3,
}


class ApplyChildType(str, Enum):
    """Who a non-store holiday cascades to."""

    HEAD_OFFICE = "HEAD_OFFICE"
    ALL_HEAD_OFFICE_STORES = "ALL_HEAD_OFFICE_STORES"
    ALL_FRANCHISE_STORES = "ALL_FRANCHISE_STORES"


class HolidaySourceType(str, Enum):
    LEGAL = "LEGAL"
    BRANCH = "BRANCH"


class HolidayListType(str, Enum):
    LEGAL = "LEGAL"
    PARTNER = "PARTNER"


class OrgType(str, Enum):
    HEAD_OFFICE = "HEAD_OFFICE"
    FRANCHISE = "FRANCHISE"
