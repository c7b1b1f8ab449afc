from __future__ import annotations

from datetime import date

import pytest

from src.franchise_holidays.franchise_holidays.core.enums import ApplyChildType, OrgType, OwnerType
from src.franchise_holidays.franchise_holidays.holidays.service import HolidayService
from src.franchise_holidays.franchise_holidays.organizations.hierarchy import HierarchyIndex
from src.franchise_holidays.franchise_holidays.organizations.model import Organization, Store

from .fakes import (
    CHILDRENS_DAY,
    FOUNDATION_DAY,
    FRANCHISE_DAY,
    FRANCHISE_F,
    GANGNAM_REMODEL,
    HEAD_OFFICE_A,
    HEAD_OFFICE_B,
    HQ_WORKSHOP,
    STORE_GANGNAM,
    STORE_HONGDAE,
    STORE_YEOKSAM,
    InMemoryHolidays,
    InMemoryOrganizations,
    legal,
    owned,
)


@pytest.fixture
def organizations() -> InMemoryOrganizations:
    orgs = InMemoryOrganizations()
    orgs.orgs = {
        HEAD_OFFICE_A: Organization(HEAD_OFFICE_A, OrgType.HEAD_OFFICE, "A 본사"),
        FRANCHISE_F: Organization(FRANCHISE_F, OrgType.FRANCHISE, "A 서울가맹", parent_id=HEAD_OFFICE_A),
        HEAD_OFFICE_B: Organization(HEAD_OFFICE_B, OrgType.HEAD_OFFICE, "B 본사"),
    }
    orgs.stores = {
        STORE_GANGNAM: Store(STORE_GANGNAM, "A-강남점", HEAD_OFFICE_A),
        STORE_YEOKSAM: Store(STORE_YEOKSAM, "A-역삼점", HEAD_OFFICE_A),
        STORE_HONGDAE: Store(STORE_HONGDAE, "A-홍대점", FRANCHISE_F),
    }
    return orgs


@pytest.fixture
def holidays() -> InMemoryHolidays:
    repo = InMemoryHolidays()
    repo.add_legal(legal(CHILDRENS_DAY, "어린이날", date(2025, 5, 5)))
    repo.add(
        owned(
            FOUNDATION_DAY,
            OwnerType.HEAD_OFFICE,
            HEAD_OFFICE_A,
            "창립기념일",
            date(2025, 5, 10),
            apply=[ApplyChildType.ALL_HEAD_OFFICE_STORES],
        )
    )
    repo.add(
        owned(
            HQ_WORKSHOP,
            OwnerType.HEAD_OFFICE,
            HEAD_OFFICE_A,
            "본사 워크숍",
            date(2025, 6, 2),
            apply=[ApplyChildType.ALL_FRANCHISE_STORES],
        )
    )
    repo.add(
        owned(
            FRANCHISE_DAY,
            OwnerType.FRANCHISE,
            FRANCHISE_F,
            "가맹 휴무",
            date(2025, 7, 1),
            has_period=True,
            end=date(2025, 7, 2),
            apply=[ApplyChildType.ALL_FRANCHISE_STORES],
        )
    )
    repo.add(owned(GANGNAM_REMODEL, OwnerType.STORE, STORE_GANGNAM, "리모델링", date(2025, 8, 15)))
    return repo


@pytest.fixture
def hierarchy(organizations):
    return HierarchyIndex(organizations)


@pytest.fixture
def service(holidays, hierarchy) -> HolidayService:
    return HolidayService(holidays, hierarchy)
