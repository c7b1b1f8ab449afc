from __future__ import annotations

from typing import Any, Dict, Optional

from ..core.enums import OrgType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Organization, Store
from .repository import OrganizationRepository


def _to_org(r: Dict[str, Any]) -> Organization:
    return Organization(
        org_id=int(r["org_id"]),
        org_type=OrgType(r["org_type"]),
        name=r["org_name"],
        parent_id=int(r["parent_id"]) if r.get("parent_id") is not None else None,
    )


def _to_store(r: Dict[str, Any]) -> Store:
    return Store(store_id=int(r["store_id"]), name=r["store_name"], org_id=int(r["org_id"]))


class MySQLOrganizationRepository(OrganizationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_organization(self, org_id: int) -> Optional[Organization]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT org_id, org_type, org_name, parent_id FROM organizations WHERE org_id=%s",
                (int(org_id),),
            )
            r = fetchone(cur)
            return _to_org(r) if r else None

    def get_store(self, store_id: int) -> Optional[Store]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT store_id, store_name, org_id FROM stores WHERE store_id=%s", (int(store_id),))
            r = fetchone(cur)
            return _to_store(r) if r else None
