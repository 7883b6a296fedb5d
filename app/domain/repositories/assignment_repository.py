"""Assignment repository interface"""
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from app.domain.entities.assignment import Assignment, AssignmentCategory, AssignmentStatus


class AssignmentRepository(ABC):
    """Interface for assignment repository"""

    @abstractmethod
    async def create(self, assignment: Assignment) -> Assignment:
        """Create a new assignment"""
        pass

    @abstractmethod
    async def get_by_id(self, assignment_id: str) -> Optional[Assignment]:
        """Get assignment by ID"""
        pass

    @abstractmethod
    async def get_active_by_resource(self, resource_id: str) -> List[Assignment]:
        """Get ACTIVE assignments of a resource, oldest first"""
        pass

    @abstractmethod
    async def get_active_by_item(self, item_id: str) -> List[Assignment]:
        """Get ACTIVE assignments referencing an item"""
        pass

    @abstractmethod
    async def get_all(
        self,
        resource_id: Optional[str] = None,
        employee_id: Optional[str] = None,
        status: Optional[AssignmentStatus] = None,
        category: Optional[AssignmentCategory] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Assignment], int]:
        """Get a page of assignments, newest first, and the total match count"""
        pass

    @abstractmethod
    async def update(self, assignment: Assignment) -> Assignment:
        """Update assignment"""
        pass
