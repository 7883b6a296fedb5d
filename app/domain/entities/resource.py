"""Resource domain entity"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


UNLIMITED_QUANTITY = -1


class AllocationMode(str, Enum):
    """How a resource is handed out to employees"""
    EXCLUSIVE = "EXCLUSIVE"
    SHARED = "SHARED"


class ResourceStatus(str, Enum):
    """Lifecycle status of the resource itself"""
    ACTIVE = "ACTIVE"
    RETURNED = "RETURNED"
    LOST = "LOST"
    DAMAGED = "DAMAGED"


@dataclass(frozen=True)
class Capacity:
    """Maximum number of units a SHARED resource can hand out.

    ``limit`` is None for an unlimited resource. The ``-1`` quantity used by
    the storage layer is only understood by ``from_quantity``/``to_quantity``.
    """
    limit: Optional[int] = None

    def __post_init__(self):
        if self.limit is not None and self.limit < 0:
            raise ValueError(f"Capacity must be non-negative, got {self.limit}")

    @classmethod
    def unlimited(cls) -> "Capacity":
        return cls(limit=None)

    @classmethod
    def bounded(cls, limit: int) -> "Capacity":
        return cls(limit=limit)

    @classmethod
    def from_quantity(cls, quantity: Optional[int]) -> "Capacity":
        """Build a capacity from a stored quantity (-1 = unlimited, None = 1)"""
        if quantity is None:
            return cls.bounded(1)
        if quantity == UNLIMITED_QUANTITY:
            return cls.unlimited()
        return cls.bounded(quantity)

    def to_quantity(self) -> int:
        return UNLIMITED_QUANTITY if self.is_unlimited else self.limit

    @property
    def is_unlimited(self) -> bool:
        return self.limit is None

    def allows(self, used: int, requested: int = 1) -> bool:
        """Whether ``requested`` more units fit next to ``used``"""
        if self.is_unlimited:
            return True
        return used + requested <= self.limit

    def remaining(self, used: int) -> Optional[int]:
        if self.is_unlimited:
            return None
        return max(0, self.limit - used)


@dataclass
class Resource:
    """Catalog entry for a class of asset (laptops, an IDE license, a cloud account)"""
    id: str
    name: str
    type: str
    allocation_mode: AllocationMode = AllocationMode.EXCLUSIVE
    capacity: Capacity = field(default_factory=lambda: Capacity.bounded(1))
    status: ResourceStatus = ResourceStatus.ACTIVE
    custodian_id: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.created_at is None:
            self.created_at = datetime.utcnow()
        if self.updated_at is None:
            self.updated_at = datetime.utcnow()

    @property
    def is_active(self) -> bool:
        return self.status == ResourceStatus.ACTIVE
