"""Approval workflow DTOs"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel
from app.application.dto.assignment_dto import AssignmentResponseDTO
from app.domain.entities.approval import ApprovalAction, ApprovalStatus
from app.domain.entities.assignment import AssignmentCategory
from app.domain.errors import ErrorCode


class ApprovalCreateDTO(BaseModel):
    """DTO for requesting an assignment that needs sign-off.

    ``approver_id`` defaults to the resource custodian when omitted.
    """
    resource_id: str
    employee_id: str
    item_id: Optional[str] = None
    assignment_type: Optional[AssignmentCategory] = None
    quantity: int = 1
    auto_select_item: bool = False
    approver_id: Optional[str] = None
    justification: Optional[str] = None
    urgency: Optional[str] = None


class ApprovalDecisionDTO(BaseModel):
    """DTO for approving or rejecting a pending request"""
    action: ApprovalAction
    comments: Optional[str] = None


class ApprovalResponseDTO(BaseModel):
    """DTO for approval response"""
    id: str
    resource_id: str
    employee_id: str
    item_id: Optional[str] = None
    quantity: int
    assignment_type: Optional[AssignmentCategory] = None
    auto_select_item: bool
    requested_by: Optional[str] = None
    approver_id: str
    status: ApprovalStatus
    justification: Optional[str] = None
    urgency: Optional[str] = None
    comments: Optional[str] = None
    assignment_id: Optional[str] = None
    decided_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ApprovalResultDTO(BaseModel):
    """Outcome of a request or decision; rejections are data, not errors"""
    success: bool
    approval: Optional[ApprovalResponseDTO] = None
    assignment: Optional[AssignmentResponseDTO] = None
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    current_assignments: Optional[int] = None
    max_capacity: Optional[int] = None
