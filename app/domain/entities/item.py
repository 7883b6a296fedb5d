"""Resource item domain entity"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from app.domain.entities.assignment import AssignmentStatus


class ItemStatus(str, Enum):
    """Status of a single trackable unit"""
    AVAILABLE = "AVAILABLE"
    ASSIGNED = "ASSIGNED"
    MAINTENANCE = "MAINTENANCE"
    LOST = "LOST"
    DAMAGED = "DAMAGED"


@dataclass
class ResourceItem:
    """One laptop, one license key: a unit under an EXCLUSIVE resource"""
    id: str
    resource_id: str
    status: ItemStatus = ItemStatus.AVAILABLE
    serial_number: Optional[str] = None
    license_key: Optional[str] = None
    hostname: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.created_at is None:
            self.created_at = datetime.utcnow()
        if self.updated_at is None:
            self.updated_at = datetime.utcnow()

    @property
    def external_id(self) -> str:
        """Human-facing identifier used in timeline text"""
        return self.license_key or self.serial_number or self.hostname or self.id


def item_status_after(assignment_status: AssignmentStatus, maintenance: bool = False) -> ItemStatus:
    """Item status mirroring an assignment that just changed status"""
    if assignment_status == AssignmentStatus.LOST:
        return ItemStatus.LOST
    if assignment_status == AssignmentStatus.DAMAGED:
        return ItemStatus.DAMAGED
    if maintenance:
        return ItemStatus.MAINTENANCE
    return ItemStatus.AVAILABLE
