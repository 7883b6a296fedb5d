"""Read-only availability views for resources"""
from dataclasses import dataclass
from typing import Iterable, Optional, Union
from app.domain.entities.assignment import Assignment
from app.domain.entities.item import ItemStatus, ResourceItem
from app.domain.entities.resource import AllocationMode, Capacity, Resource


@dataclass(frozen=True)
class ItemAvailability:
    """Counts for an item-backed (EXCLUSIVE) resource"""
    total: int
    assigned: int
    available: int
    maintenance: int
    lost: int
    damaged: int


@dataclass(frozen=True)
class SeatAvailability:
    """Counts for a quantity-backed (SHARED) resource.

    ``capacity`` and ``available`` are None when the resource is unlimited.
    """
    capacity: Optional[int]
    used: int
    available: Optional[int]
    unlimited: bool


def units_in_use(active_assignments: Iterable[Assignment]) -> int:
    return sum(a.quantity for a in active_assignments if a.is_active)


def item_availability(items: Iterable[ResourceItem]) -> ItemAvailability:
    counts = {status: 0 for status in ItemStatus}
    total = 0
    for item in items:
        counts[item.status] += 1
        total += 1
    return ItemAvailability(
        total=total,
        assigned=counts[ItemStatus.ASSIGNED],
        available=counts[ItemStatus.AVAILABLE],
        maintenance=counts[ItemStatus.MAINTENANCE],
        lost=counts[ItemStatus.LOST],
        damaged=counts[ItemStatus.DAMAGED],
    )


def seat_availability(capacity: Capacity, active_assignments: Iterable[Assignment]) -> SeatAvailability:
    used = units_in_use(active_assignments)
    return SeatAvailability(
        capacity=capacity.limit,
        used=used,
        available=capacity.remaining(used),
        unlimited=capacity.is_unlimited,
    )


def resource_availability(
    resource: Resource,
    items: Iterable[ResourceItem],
    active_assignments: Iterable[Assignment],
) -> Union[ItemAvailability, SeatAvailability]:
    """Pick the view matching the resource's allocation mode"""
    if resource.allocation_mode == AllocationMode.EXCLUSIVE:
        return item_availability(items)
    return seat_availability(resource.capacity, active_assignments)
