from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .database.connection import DBConfig, DatabaseConnection
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.repository import HolidayRepository
from .holidays.service import HolidayService
from .organizations.hierarchy import HierarchyIndex
from .organizations.mysql_organization_repository import MySQLOrganizationRepository
from .organizations.repository import OrganizationRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    organizations_repo: OrganizationRepository
    holidays_repo: HolidayRepository

    hierarchy: HierarchyIndex
    holiday_service: HolidayService


def assemble(
    *,
    organizations_repo: OrganizationRepository,
    holidays_repo: HolidayRepository,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    hierarchy = HierarchyIndex(organizations_repo)
    holiday_service = HolidayService(holidays_repo, hierarchy)

    return Container(
        conn=conn,
        organizations_repo=organizations_repo,
        holidays_repo=holidays_repo,
        hierarchy=hierarchy,
        holiday_service=holiday_service,
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble(
        organizations_repo=MySQLOrganizationRepository(conn),
        holidays_repo=MySQLHolidayRepository(conn),
        conn=conn,
    )
