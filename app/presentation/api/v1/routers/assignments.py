"""Assignments API router"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from app.application.dto.assignment_dto import (
    AssignmentCreateDTO,
    AssignmentListDTO,
    AssignmentResponseDTO,
    AssignmentResultDTO,
    AssignmentReturnDTO,
    AssignmentRevokeDTO,
    AssignmentStatusUpdateDTO,
    ValidationResultDTO,
)
from app.application.use_cases.assignment_use_cases import AssignmentUseCases
from app.domain.entities.assignment import AssignmentCategory, AssignmentStatus
from app.infrastructure.config.settings import settings
from app.presentation.api.v1.dependencies import get_actor_id, get_assignment_use_cases
from app.presentation.api.v1.errors import raise_for_failure

router = APIRouter(prefix="/assignments", tags=["assignments"], redirect_slashes=False)


@router.get("/", response_model=AssignmentListDTO)
async def get_assignments(
    resource_id: Optional[str] = None,
    employee_id: Optional[str] = None,
    assignment_status: Optional[AssignmentStatus] = Query(None, alias="status"),
    assignment_type: Optional[AssignmentCategory] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    use_cases: AssignmentUseCases = Depends(get_assignment_use_cases),
):
    """List assignments, newest first"""
    return await use_cases.get_assignments(
        resource_id=resource_id,
        employee_id=employee_id,
        status=assignment_status,
        category=assignment_type,
        page=page,
        limit=limit,
    )


@router.post("/validate", response_model=ValidationResultDTO)
async def validate_assignment(
    assignment_data: AssignmentCreateDTO,
    use_cases: AssignmentUseCases = Depends(get_assignment_use_cases),
):
    """Dry run: check an assignment without creating it"""
    return await use_cases.validate_assignment(assignment_data)


@router.post("/", response_model=AssignmentResultDTO, status_code=status.HTTP_201_CREATED)
async def create_assignment(
    assignment_data: AssignmentCreateDTO,
    use_cases: AssignmentUseCases = Depends(get_assignment_use_cases),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Assign a resource (and optionally one of its items) to an employee"""
    result = await use_cases.create_assignment(assignment_data, actor_id)
    raise_for_failure(result)
    return result


@router.get("/{assignment_id}", response_model=AssignmentResponseDTO)
async def get_assignment(
    assignment_id: str,
    use_cases: AssignmentUseCases = Depends(get_assignment_use_cases),
):
    """Get assignment by ID"""
    assignment = await use_cases.get_assignment(assignment_id)
    if not assignment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Assignment with ID '{assignment_id}' not found",
        )
    return assignment


@router.patch("/{assignment_id}/status", response_model=AssignmentResultDTO)
async def update_assignment_status(
    assignment_id: str,
    status_data: AssignmentStatusUpdateDTO,
    use_cases: AssignmentUseCases = Depends(get_assignment_use_cases),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Move an assignment to RETURNED, LOST or DAMAGED; ``returned_quantity`` splits it"""
    result = await use_cases.update_assignment_status(assignment_id, status_data, actor_id)
    raise_for_failure(result)
    return result


@router.post("/{assignment_id}/return", response_model=AssignmentResultDTO)
async def return_assignment(
    assignment_id: str,
    return_data: AssignmentReturnDTO,
    use_cases: AssignmentUseCases = Depends(get_assignment_use_cases),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Return a resource in the given condition"""
    result = await use_cases.return_assignment(assignment_id, return_data, actor_id)
    raise_for_failure(result)
    return result


@router.post("/{assignment_id}/revoke", response_model=AssignmentResultDTO)
async def revoke_assignment(
    assignment_id: str,
    revoke_data: AssignmentRevokeDTO,
    use_cases: AssignmentUseCases = Depends(get_assignment_use_cases),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Force-return an assignment; a reason is required"""
    result = await use_cases.revoke_assignment(assignment_id, actor_id, revoke_data.reason)
    raise_for_failure(result)
    return result
