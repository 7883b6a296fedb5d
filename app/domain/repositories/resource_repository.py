"""Resource repository interface"""
from abc import ABC, abstractmethod
from typing import List, Optional
from app.domain.entities.resource import Resource


class ResourceRepository(ABC):
    """Interface for resource repository"""

    @abstractmethod
    async def create(self, resource: Resource) -> Resource:
        """Create a new resource"""
        pass

    @abstractmethod
    async def get_by_id(self, resource_id: str) -> Optional[Resource]:
        """Get resource by ID"""
        pass

    @abstractmethod
    async def get_for_update(self, resource_id: str) -> Optional[Resource]:
        """Get resource by ID and lock it until the unit of work ends"""
        pass

    @abstractmethod
    async def get_all(self) -> List[Resource]:
        """Get all resources"""
        pass

    @abstractmethod
    async def update(self, resource: Resource) -> Resource:
        """Update resource"""
        pass
