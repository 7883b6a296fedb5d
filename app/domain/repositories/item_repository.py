"""Resource item repository interface"""
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from app.domain.entities.item import ItemStatus, ResourceItem


class ResourceItemRepository(ABC):
    """Interface for resource item repository"""

    @abstractmethod
    async def create(self, item: ResourceItem) -> ResourceItem:
        """Create a new item"""
        pass

    @abstractmethod
    async def get_by_id(self, item_id: str) -> Optional[ResourceItem]:
        """Get item by ID"""
        pass

    @abstractmethod
    async def get_by_resource(self, resource_id: str) -> List[ResourceItem]:
        """Get all items of a resource, oldest first"""
        pass

    @abstractmethod
    async def find_by_serial_number(self, serial_number: str) -> Optional[ResourceItem]:
        """Get item by serial number"""
        pass

    @abstractmethod
    async def find_by_license_key(self, license_key: str) -> Optional[ResourceItem]:
        """Get item by license key"""
        pass

    @abstractmethod
    async def get_all(
        self,
        resource_id: Optional[str] = None,
        status: Optional[ItemStatus] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[ResourceItem], int]:
        """Get a page of items and the total match count"""
        pass

    @abstractmethod
    async def update(self, item: ResourceItem) -> ResourceItem:
        """Update item"""
        pass

    @abstractmethod
    async def delete(self, item_id: str) -> bool:
        """Delete item"""
        pass
