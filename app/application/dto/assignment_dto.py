"""Assignment DTOs"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from app.domain.entities.assignment import AssignmentCategory, AssignmentStatus, ReturnCondition
from app.domain.errors import ErrorCode


class AssignmentCreateDTO(BaseModel):
    """DTO for creating an assignment"""
    resource_id: str
    employee_id: str
    item_id: Optional[str] = None
    assignment_type: Optional[AssignmentCategory] = None
    quantity: int = 1
    notes: Optional[str] = None
    auto_select_item: bool = False


class AssignmentStatusUpdateDTO(BaseModel):
    """DTO for moving an assignment to a new status"""
    status: AssignmentStatus
    returned_quantity: Optional[int] = None
    reason: Optional[str] = None
    notes: Optional[str] = None
    returned_at: Optional[datetime] = None


class AssignmentReturnDTO(BaseModel):
    """DTO for an employee handing a resource back"""
    reason: Optional[str] = None
    condition: ReturnCondition = ReturnCondition.GOOD
    notes: Optional[str] = None
    returned_quantity: Optional[int] = None


class AssignmentRevokeDTO(BaseModel):
    """DTO for an administrator revoking an assignment"""
    reason: str = ""


class AssignmentResponseDTO(BaseModel):
    """DTO for assignment response"""
    id: str
    resource_id: str
    employee_id: str
    item_id: Optional[str] = None
    assignment_type: AssignmentCategory
    status: AssignmentStatus
    quantity: int
    assigned_by: Optional[str] = None
    assigned_at: datetime
    returned_at: Optional[datetime] = None
    return_reason: Optional[str] = None
    notes: Optional[str] = None
    split_from_id: Optional[str] = None

    model_config = {"from_attributes": True}


class AssignmentResultDTO(BaseModel):
    """Outcome of a create or status change; rejections are data, not errors"""
    success: bool
    assignment: Optional[AssignmentResponseDTO] = None
    returned_assignment: Optional[AssignmentResponseDTO] = None
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    current_assignments: Optional[int] = None
    max_capacity: Optional[int] = None


class ValidationResultDTO(BaseModel):
    """DTO for a dry-run validation"""
    is_valid: bool
    assignment_type: Optional[AssignmentCategory] = None
    allocation_mode: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    current_assignments: Optional[int] = None
    max_capacity: Optional[int] = None


class PaginationDTO(BaseModel):
    """Pagination block for list responses"""
    page: int
    limit: int
    total: int
    total_pages: int


class AssignmentListDTO(BaseModel):
    """DTO for a page of assignments"""
    assignments: List[AssignmentResponseDTO] = Field(default_factory=list)
    pagination: PaginationDTO


class SharedResourceUserDTO(BaseModel):
    """Employee currently holding a shared resource"""
    id: str
    name: str
    email: str
    department: Optional[str] = None
    assigned_at: datetime
    assignment_id: str


class ItemAssignabilityDTO(BaseModel):
    """DTO for the item assignability check"""
    can_assign: bool
    reason: Optional[str] = None
