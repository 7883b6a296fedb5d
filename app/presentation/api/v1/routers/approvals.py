"""Assignment approvals API router"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from app.application.dto.approval_dto import (
    ApprovalCreateDTO,
    ApprovalDecisionDTO,
    ApprovalResponseDTO,
    ApprovalResultDTO,
)
from app.application.use_cases.approval_use_cases import ApprovalUseCases
from app.presentation.api.v1.dependencies import get_actor_id, get_approval_use_cases
from app.presentation.api.v1.errors import raise_for_failure

router = APIRouter(prefix="/approvals", tags=["approvals"], redirect_slashes=False)


@router.post("/", response_model=ApprovalResultDTO, status_code=status.HTTP_201_CREATED)
async def request_assignment(
    approval_data: ApprovalCreateDTO,
    use_cases: ApprovalUseCases = Depends(get_approval_use_cases),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Ask for an assignment that needs an approver's sign-off"""
    result = await use_cases.request_assignment(approval_data, actor_id)
    raise_for_failure(result)
    return result


@router.get("/", response_model=List[ApprovalResponseDTO])
async def get_pending_approvals(
    approver_id: Optional[str] = None,
    use_cases: ApprovalUseCases = Depends(get_approval_use_cases),
):
    """Pending requests, optionally for one approver"""
    return await use_cases.get_pending_approvals(approver_id)


@router.get("/{approval_id}", response_model=ApprovalResponseDTO)
async def get_approval(
    approval_id: str,
    use_cases: ApprovalUseCases = Depends(get_approval_use_cases),
):
    """Get approval by ID"""
    approval = await use_cases.get_approval(approval_id)
    if not approval:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Approval with ID '{approval_id}' not found",
        )
    return approval


@router.post("/{approval_id}/decision", response_model=ApprovalResultDTO)
async def decide_approval(
    approval_id: str,
    decision: ApprovalDecisionDTO,
    use_cases: ApprovalUseCases = Depends(get_approval_use_cases),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Approve (creating the assignment) or reject a pending request"""
    result = await use_cases.decide(approval_id, decision, actor_id)
    raise_for_failure(result)
    return result
