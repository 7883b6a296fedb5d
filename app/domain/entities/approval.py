"""Assignment approval workflow entity"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from app.domain.entities.assignment import AssignmentCategory


class ApprovalStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ApprovalAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


@dataclass
class AssignmentApproval:
    """A requested assignment waiting on one approver's decision.

    Approving runs the normal assignment creation; the approval records the
    assignment it produced. Rejected and approved requests are final.
    """
    id: str
    resource_id: str
    employee_id: str
    approver_id: str
    item_id: Optional[str] = None
    quantity: int = 1
    assignment_type: Optional[AssignmentCategory] = None
    auto_select_item: bool = False
    requested_by: Optional[str] = None
    status: ApprovalStatus = ApprovalStatus.PENDING
    justification: Optional[str] = None
    urgency: Optional[str] = None
    comments: Optional[str] = None
    assignment_id: Optional[str] = None
    decided_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.created_at is None:
            self.created_at = datetime.utcnow()
        if self.updated_at is None:
            self.updated_at = datetime.utcnow()

    @property
    def is_pending(self) -> bool:
        return self.status == ApprovalStatus.PENDING
