from __future__ import annotations

from typing import FrozenSet, Iterator, List, Optional, Tuple

from ..core.enums import ApplyChildType, OwnerType
from ..organizations.hierarchy import HierarchyIndex
from ..organizations.model import AncestorChain
from .model import HolidayRecord
from .repository import HolidayRepository

# (ancestor owner type, ancestor id, apply types that reach the target)
_CascadeSource = Tuple[OwnerType, int, FrozenSet[ApplyChildType]]

_TO_FRANCHISE_STORES = frozenset({ApplyChildType.ALL_FRANCHISE_STORES})
_TO_HEAD_OFFICE_STORES = frozenset({ApplyChildType.ALL_HEAD_OFFICE_STORES})


class HierarchyResolver:
    """Collect every holiday that applies to one owner for one year.

    The result is the legal calendar, the owner's own records, and each ancestor record
    whose ``apply_child_types`` reaches the owner's position in the tree. Same-date
    records from different levels are kept as separate entries.
    """

    def __init__(self, holidays: HolidayRepository, hierarchy: HierarchyIndex):
        self._holidays = holidays
        self._hierarchy = hierarchy

    def resolve_owner(self, owner_type: OwnerType, owner_id: Optional[int], year: int) -> List[HolidayRecord]:
        if owner_type == OwnerType.STORE and owner_id:
            chain = self._hierarchy.chain_for_store(int(owner_id))
        elif owner_type in (OwnerType.HEAD_OFFICE, OwnerType.FRANCHISE) and owner_id:
            chain = self._hierarchy.chain_for_org(int(owner_id))
            if chain.is_known and chain.owner_type != owner_type:
                chain = AncestorChain.unknown(owner_type, owner_id)
        else:
            chain = AncestorChain(owner_type=OwnerType.LEGAL, owner_id=None)
        return self.resolve(chain, year)

    def resolve(self, chain: AncestorChain, year: int) -> List[HolidayRecord]:
        records: List[HolidayRecord] = list(self._holidays.list_legal(year=year))
        if chain.owner_type == OwnerType.LEGAL or not chain.is_known or chain.owner_id is None:
            return records

        for owner_type, owner_id, reaching in cascade_sources(chain):
            for rec in self._holidays.list_for_owner(owner_type=owner_type, owner_id=owner_id, year=year):
                if reaching.intersection(rec.apply_child_types):
                    records.append(rec)

        records.extend(self._holidays.list_for_owner(owner_type=chain.owner_type, owner_id=chain.owner_id, year=year))
        return records


def cascade_sources(chain: AncestorChain) -> Iterator[_CascadeSource]:
    """Ancestors of ``chain`` (top-down) with the apply types that reach it.

    A head office reaches its direct stores through ALL_HEAD_OFFICE_STORES and the
    stores of its franchises through ALL_FRANCHISE_STORES. A franchise reaches its own
    stores through ALL_FRANCHISE_STORES. No apply type targets a franchise itself, so a
    franchise inherits nothing but the legal calendar.
    """
    if chain.owner_type != OwnerType.STORE:
        return
    if chain.under_franchise:
        if chain.head_office_id is not None:
            yield OwnerType.HEAD_OFFICE, chain.head_office_id, _TO_FRANCHISE_STORES
        yield OwnerType.FRANCHISE, int(chain.franchise_id), _TO_FRANCHISE_STORES
    elif chain.head_office_id is not None:
        yield OwnerType.HEAD_OFFICE, chain.head_office_id, _TO_HEAD_OFFICE_STORES


def reaching_types(chain: AncestorChain, owner_type: OwnerType, owner_id: int) -> FrozenSet[ApplyChildType]:
    """Apply types through which ``owner_type:owner_id`` reaches ``chain`` (empty if none)."""
    for ancestor_type, ancestor_id, reaching in cascade_sources(chain):
        if ancestor_type == owner_type and ancestor_id == int(owner_id):
            return reaching
    return frozenset()
