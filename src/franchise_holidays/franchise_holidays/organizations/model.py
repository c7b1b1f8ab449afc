from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import OrgType, OwnerType


@dataclass(frozen=True)
class Organization:
    org_id: int
    org_type: OrgType
    name: str
    parent_id: Optional[int] = None


@dataclass(frozen=True)
class Store:
    store_id: int
    name: str
    org_id: int


@dataclass(frozen=True)
class AncestorChain:
    """Where an owner sits in the tree: store -> franchise (optional) -> head office."""

    owner_type: OwnerType
    owner_id: Optional[int]
    owner_name: str = ""
    head_office_id: Optional[int] = None
    head_office_name: Optional[str] = None
    franchise_id: Optional[int] = None
    franchise_name: Optional[str] = None
    is_known: bool = True

    @classmethod
    def unknown(cls, owner_type: OwnerType, owner_id: Optional[int]) -> "AncestorChain":
        return cls(owner_type=owner_type, owner_id=owner_id, is_known=False)

    @property
    def under_franchise(self) -> bool:
        return self.franchise_id is not None
