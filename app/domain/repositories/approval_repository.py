"""Approval repository interface"""
from abc import ABC, abstractmethod
from typing import List, Optional
from app.domain.entities.approval import AssignmentApproval


class ApprovalRepository(ABC):
    """Interface for assignment approval repository"""

    @abstractmethod
    async def create(self, approval: AssignmentApproval) -> AssignmentApproval:
        """Create a new approval request"""
        pass

    @abstractmethod
    async def get_by_id(self, approval_id: str) -> Optional[AssignmentApproval]:
        """Get approval by ID"""
        pass

    @abstractmethod
    async def get_pending_by_approver(self, approver_id: Optional[str] = None) -> List[AssignmentApproval]:
        """Pending requests, oldest first; all approvers when ``approver_id`` is None"""
        pass

    @abstractmethod
    async def update(self, approval: AssignmentApproval) -> AssignmentApproval:
        """Update approval"""
        pass
