from __future__ import annotations

from typing import Optional, Protocol

from .model import Organization, Store


class OrganizationRepository(Protocol):
    def get_organization(self, org_id: int) -> Optional[Organization]:
        raise NotImplementedError

    def get_store(self, store_id: int) -> Optional[Store]:
        raise NotImplementedError
