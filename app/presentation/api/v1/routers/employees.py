"""Employees API router"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from app.application.dto.employee_dto import EmployeeCreateDTO, EmployeeResponseDTO
from app.application.use_cases.employee_use_cases import EmployeeAlreadyExistsError, EmployeeUseCases
from app.presentation.api.v1.dependencies import get_employee_use_cases

router = APIRouter(prefix="/employees", tags=["employees"], redirect_slashes=False)


@router.post("/", response_model=EmployeeResponseDTO, status_code=status.HTTP_201_CREATED)
async def create_employee(
    employee_data: EmployeeCreateDTO,
    use_cases: EmployeeUseCases = Depends(get_employee_use_cases),
):
    """Create a new employee"""
    try:
        return await use_cases.create_employee(employee_data)
    except EmployeeAlreadyExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": str(e), "error_code": e.error_code.value},
        )


@router.get("/", response_model=List[EmployeeResponseDTO])
async def get_all_employees(use_cases: EmployeeUseCases = Depends(get_employee_use_cases)):
    """Get all employees"""
    return await use_cases.get_all_employees()


@router.get("/{employee_id}", response_model=EmployeeResponseDTO)
async def get_employee(
    employee_id: str,
    use_cases: EmployeeUseCases = Depends(get_employee_use_cases),
):
    """Get employee by ID"""
    employee = await use_cases.get_employee(employee_id)
    if not employee:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Employee with ID '{employee_id}' not found",
        )
    return employee
