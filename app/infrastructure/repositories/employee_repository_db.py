"""SQLAlchemy implementation of EmployeeRepository"""
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.domain.entities.employee import Employee
from app.domain.repositories.employee_repository import EmployeeRepository
from app.infrastructure.database.base import translate_conflicts
from app.infrastructure.database.models import EmployeeModel


class EmployeeRepositoryDB(EmployeeRepository):
    """SQLAlchemy implementation of EmployeeRepository"""

    def __init__(self, db: Session):
        self.db = db

    def _employee_model_to_entity(self, model: EmployeeModel) -> Employee:
        return Employee(
            id=str(model.id),
            name=model.name,
            email=model.email,
            department=model.department,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    async def create(self, employee: Employee) -> Employee:
        """Create a new employee"""
        employee_model = EmployeeModel(
            id=employee.id,
            name=employee.name,
            email=employee.email,
            department=employee.department,
            created_at=employee.created_at,
            updated_at=employee.updated_at,
        )
        self.db.add(employee_model)
        with translate_conflicts():
            self.db.flush()
        return self._employee_model_to_entity(employee_model)

    async def get_by_id(self, employee_id: str) -> Optional[Employee]:
        """Get employee by ID"""
        employee_model = self.db.query(EmployeeModel).filter(EmployeeModel.id == employee_id).first()
        if not employee_model:
            return None
        return self._employee_model_to_entity(employee_model)

    async def get_by_email(self, email: str) -> Optional[Employee]:
        """Get employee by email (case-insensitive)"""
        employee_model = (
            self.db.query(EmployeeModel).filter(func.lower(EmployeeModel.email) == email.lower()).first()
        )
        if not employee_model:
            return None
        return self._employee_model_to_entity(employee_model)

    async def get_all(self) -> List[Employee]:
        """Get all employees"""
        employee_models = self.db.query(EmployeeModel).order_by(EmployeeModel.name).all()
        return [self._employee_model_to_entity(model) for model in employee_models]
