"""SQLAlchemy implementation of ApprovalRepository"""
from typing import List, Optional
from sqlalchemy.orm import Session
from app.domain.entities.approval import ApprovalStatus, AssignmentApproval
from app.domain.repositories.approval_repository import ApprovalRepository
from app.infrastructure.database.base import translate_conflicts
from app.infrastructure.database.models import AssignmentApprovalModel


class ApprovalRepositoryDB(ApprovalRepository):
    """SQLAlchemy implementation of ApprovalRepository"""

    def __init__(self, db: Session):
        self.db = db

    def _approval_model_to_entity(self, model: AssignmentApprovalModel) -> AssignmentApproval:
        return AssignmentApproval(
            id=str(model.id),
            resource_id=str(model.resource_id),
            employee_id=str(model.employee_id),
            approver_id=model.approver_id,
            item_id=str(model.item_id) if model.item_id else None,
            quantity=model.quantity,
            assignment_type=model.assignment_type,
            auto_select_item=model.auto_select_item,
            requested_by=model.requested_by,
            status=model.status,
            justification=model.justification,
            urgency=model.urgency,
            comments=model.comments,
            assignment_id=str(model.assignment_id) if model.assignment_id else None,
            decided_at=model.decided_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    async def create(self, approval: AssignmentApproval) -> AssignmentApproval:
        """Create a new approval request"""
        approval_model = AssignmentApprovalModel(
            id=approval.id,
            resource_id=approval.resource_id,
            employee_id=approval.employee_id,
            item_id=approval.item_id,
            quantity=approval.quantity,
            assignment_type=approval.assignment_type,
            auto_select_item=approval.auto_select_item,
            requested_by=approval.requested_by,
            approver_id=approval.approver_id,
            status=approval.status,
            justification=approval.justification,
            urgency=approval.urgency,
            comments=approval.comments,
            created_at=approval.created_at,
            updated_at=approval.updated_at,
        )
        self.db.add(approval_model)
        with translate_conflicts():
            self.db.flush()
        return self._approval_model_to_entity(approval_model)

    async def get_by_id(self, approval_id: str) -> Optional[AssignmentApproval]:
        """Get approval by ID, re-reading the row even if the session already holds it"""
        approval_model = (
            self.db.query(AssignmentApprovalModel)
            .populate_existing()
            .filter(AssignmentApprovalModel.id == approval_id)
            .first()
        )
        if not approval_model:
            return None
        return self._approval_model_to_entity(approval_model)

    async def get_pending_by_approver(self, approver_id: Optional[str] = None) -> List[AssignmentApproval]:
        """Pending requests, oldest first"""
        query = self.db.query(AssignmentApprovalModel).filter(
            AssignmentApprovalModel.status == ApprovalStatus.PENDING
        )
        if approver_id:
            query = query.filter(AssignmentApprovalModel.approver_id == approver_id)
        approval_models = query.order_by(AssignmentApprovalModel.created_at).all()
        return [self._approval_model_to_entity(model) for model in approval_models]

    async def update(self, approval: AssignmentApproval) -> AssignmentApproval:
        """Update approval"""
        approval_model = (
            self.db.query(AssignmentApprovalModel).filter(AssignmentApprovalModel.id == approval.id).first()
        )
        if not approval_model:
            raise ValueError(f"Approval with ID '{approval.id}' not found")

        approval_model.status = approval.status
        approval_model.comments = approval.comments
        approval_model.assignment_id = approval.assignment_id
        approval_model.decided_at = approval.decided_at
        approval_model.updated_at = approval.updated_at
        with translate_conflicts():
            self.db.flush()
        return self._approval_model_to_entity(approval_model)
