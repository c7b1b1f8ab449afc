from __future__ import annotations

import logging
from typing import Dict, Optional

from ..core.enums import OrgType, OwnerType
from .model import AncestorChain
from .repository import OrganizationRepository

logger = logging.getLogger(__name__)


class HierarchyIndex:
    """Read-only view of the org tree with memoized ancestor chains.

    Chains are cached per node id; unknown ids are never cached. Call ``invalidate``
    after the tree changes.
    """

    def __init__(self, organizations: OrganizationRepository):
        self._organizations = organizations
        self._org_chains: Dict[int, AncestorChain] = {}
        self._store_chains: Dict[int, AncestorChain] = {}

    def invalidate(self) -> None:
        self._org_chains.clear()
        self._store_chains.clear()

    def owner_for(self, *, org_id: Optional[int] = None, store_id: Optional[int] = None) -> AncestorChain:
        """Pick the resolution target from request ids (store id wins)."""
        if store_id:
            return self.chain_for_store(int(store_id))
        if org_id:
            return self.chain_for_org(int(org_id))
        return AncestorChain(owner_type=OwnerType.LEGAL, owner_id=None)

    def chain_for_store(self, store_id: int) -> AncestorChain:
        chain = self._store_chains.get(store_id)
        if chain is not None:
            return chain

        store = self._organizations.get_store(store_id)
        if store is None:
            logger.debug("Unknown store %s, resolving legal holidays only", store_id)
            return AncestorChain.unknown(OwnerType.STORE, store_id)

        parent = self.chain_for_org(store.org_id)
        chain = AncestorChain(
            owner_type=OwnerType.STORE,
            owner_id=store.store_id,
            owner_name=store.name,
            head_office_id=parent.head_office_id,
            head_office_name=parent.head_office_name,
            franchise_id=parent.franchise_id,
            franchise_name=parent.franchise_name,
        )
        self._store_chains[store_id] = chain
        return chain

    def chain_for_org(self, org_id: int) -> AncestorChain:
        chain = self._org_chains.get(org_id)
        if chain is not None:
            return chain

        org = self._organizations.get_organization(org_id)
        if org is None:
            logger.debug("Unknown organization %s, resolving legal holidays only", org_id)
            return AncestorChain.unknown(OwnerType.HEAD_OFFICE, org_id)

        if org.org_type == OrgType.FRANCHISE:
            head = self._organizations.get_organization(org.parent_id) if org.parent_id else None
            chain = AncestorChain(
                owner_type=OwnerType.FRANCHISE,
                owner_id=org.org_id,
                owner_name=org.name,
                head_office_id=head.org_id if head else None,
                head_office_name=head.name if head else None,
                franchise_id=org.org_id,
                franchise_name=org.name,
            )
        else:
            chain = AncestorChain(
                owner_type=OwnerType.HEAD_OFFICE,
                owner_id=org.org_id,
                owner_name=org.name,
                head_office_id=org.org_id,
                head_office_name=org.name,
            )
        self._org_chains[org_id] = chain
        return chain
