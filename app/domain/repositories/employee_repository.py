"""Employee repository interface"""
from abc import ABC, abstractmethod
from typing import List, Optional
from app.domain.entities.employee import Employee


class EmployeeRepository(ABC):
    """Interface for employee repository"""

    @abstractmethod
    async def create(self, employee: Employee) -> Employee:
        """Create a new employee"""
        pass

    @abstractmethod
    async def get_by_id(self, employee_id: str) -> Optional[Employee]:
        """Get employee by ID"""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Employee]:
        """Get employee by email"""
        pass

    @abstractmethod
    async def get_all(self) -> List[Employee]:
        """Get all employees"""
        pass
