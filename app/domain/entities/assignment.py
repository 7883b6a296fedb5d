"""Assignment domain entity"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class AssignmentCategory(str, Enum):
    """Assignment category resolved by the allocation classifier"""
    INDIVIDUAL = "INDIVIDUAL"
    POOLED = "POOLED"
    SHARED = "SHARED"


class AssignmentStatus(str, Enum):
    """Assignment status"""
    ACTIVE = "ACTIVE"
    RETURNED = "RETURNED"
    LOST = "LOST"
    DAMAGED = "DAMAGED"


# RETURNED and LOST are terminal; a damaged unit can still come back.
ALLOWED_TRANSITIONS = {
    AssignmentStatus.ACTIVE: (
        AssignmentStatus.RETURNED,
        AssignmentStatus.LOST,
        AssignmentStatus.DAMAGED,
    ),
    AssignmentStatus.DAMAGED: (AssignmentStatus.RETURNED,),
    AssignmentStatus.RETURNED: (),
    AssignmentStatus.LOST: (),
}


def can_transition(current: AssignmentStatus, new: AssignmentStatus) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, ())


@dataclass
class Assignment:
    """Grant of a resource (and optionally one of its items) to an employee"""
    id: str
    resource_id: str
    employee_id: str
    category: AssignmentCategory = AssignmentCategory.INDIVIDUAL
    status: AssignmentStatus = AssignmentStatus.ACTIVE
    item_id: Optional[str] = None
    quantity: int = 1
    assigned_by: Optional[str] = None
    assigned_at: Optional[datetime] = None
    returned_at: Optional[datetime] = None
    return_reason: Optional[str] = None
    notes: Optional[str] = None
    split_from_id: Optional[str] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.assigned_at is None:
            self.assigned_at = datetime.utcnow()
        if self.updated_at is None:
            self.updated_at = datetime.utcnow()

    @property
    def is_active(self) -> bool:
        return self.status == AssignmentStatus.ACTIVE

    def append_notes(self, text: Optional[str]) -> None:
        if not text:
            return
        self.notes = f"{self.notes or ''}\n\n{text}".strip()


class ReturnCondition(str, Enum):
    """Condition of a unit handed back by an employee"""
    GOOD = "GOOD"
    DAMAGED = "DAMAGED"
    LOST = "LOST"
    MAINTENANCE = "MAINTENANCE"


# condition -> assignment status after the return
RETURN_CONDITION_STATUS = {
    ReturnCondition.GOOD: AssignmentStatus.RETURNED,
    ReturnCondition.DAMAGED: AssignmentStatus.DAMAGED,
    ReturnCondition.LOST: AssignmentStatus.LOST,
    ReturnCondition.MAINTENANCE: AssignmentStatus.RETURNED,
}
