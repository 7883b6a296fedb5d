"""Employee use cases"""
import logging
import uuid
from datetime import datetime
from typing import Callable, List, Optional

from app.application.dto.employee_dto import EmployeeCreateDTO, EmployeeResponseDTO
from app.domain.entities.employee import Employee
from app.domain.errors import ErrorCode
from app.domain.repositories.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class EmployeeAlreadyExistsError(ValueError):
    error_code = ErrorCode.DUPLICATE_EMAIL


class EmployeeUseCases:
    """Use cases for employee operations"""

    def __init__(self, unit_of_work_factory: Callable[[], UnitOfWork]):
        self.unit_of_work_factory = unit_of_work_factory

    async def create_employee(self, data: EmployeeCreateDTO) -> EmployeeResponseDTO:
        """Create a new employee"""
        email = data.email.lower()
        async with self.unit_of_work_factory() as uow:
            if await uow.employees.get_by_email(email):
                raise EmployeeAlreadyExistsError(f"Employee with email '{email}' already exists")
            employee = await uow.employees.create(
                Employee(
                    id=str(uuid.uuid4()),
                    name=data.name,
                    email=email,
                    department=data.department,
                    created_at=datetime.utcnow(),
                    updated_at=datetime.utcnow(),
                )
            )
            await uow.commit()

        logger.info("Employee %s created (%s)", employee.id, employee.email)
        return self._employee_to_dto(employee)

    async def get_employee(self, employee_id: str) -> Optional[EmployeeResponseDTO]:
        """Get employee by ID"""
        async with self.unit_of_work_factory() as uow:
            employee = await uow.employees.get_by_id(employee_id)
        if not employee:
            return None
        return self._employee_to_dto(employee)

    async def get_all_employees(self) -> List[EmployeeResponseDTO]:
        """Get all employees"""
        async with self.unit_of_work_factory() as uow:
            employees = await uow.employees.get_all()
        return [self._employee_to_dto(e) for e in employees]

    def _employee_to_dto(self, employee: Employee) -> EmployeeResponseDTO:
        return EmployeeResponseDTO(
            id=employee.id,
            name=employee.name,
            email=employee.email,
            department=employee.department,
            created_at=employee.created_at,
            updated_at=employee.updated_at,
        )
