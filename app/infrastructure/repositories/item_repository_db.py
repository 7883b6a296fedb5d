"""SQLAlchemy implementation of ResourceItemRepository"""
from typing import List, Optional, Tuple
from sqlalchemy import or_
from sqlalchemy.orm import Session
from app.domain.entities.item import ItemStatus, ResourceItem
from app.domain.repositories.item_repository import ResourceItemRepository
from app.infrastructure.database.base import translate_conflicts
from app.infrastructure.database.models import ResourceItemModel


class ResourceItemRepositoryDB(ResourceItemRepository):
    """SQLAlchemy implementation of ResourceItemRepository"""

    def __init__(self, db: Session):
        self.db = db

    def _item_model_to_entity(self, model: ResourceItemModel) -> ResourceItem:
        """Convert ResourceItemModel to ResourceItem entity"""
        return ResourceItem(
            id=str(model.id),
            resource_id=str(model.resource_id),
            status=ItemStatus(model.status),
            serial_number=model.serial_number,
            license_key=model.license_key,
            hostname=model.hostname,
            notes=model.notes,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    async def create(self, item: ResourceItem) -> ResourceItem:
        """Create a new item"""
        item_model = ResourceItemModel(
            id=item.id,
            resource_id=item.resource_id,
            status=item.status,
            serial_number=item.serial_number,
            license_key=item.license_key,
            hostname=item.hostname,
            notes=item.notes,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )
        self.db.add(item_model)
        with translate_conflicts():
            self.db.flush()
        return self._item_model_to_entity(item_model)

    async def get_by_id(self, item_id: str) -> Optional[ResourceItem]:
        """Get item by ID"""
        item_model = (
            self.db.query(ResourceItemModel)
            .filter(ResourceItemModel.id == item_id)
            .populate_existing()
            .first()
        )
        if not item_model:
            return None
        return self._item_model_to_entity(item_model)

    async def get_by_resource(self, resource_id: str) -> List[ResourceItem]:
        """Get all items of a resource, oldest first"""
        item_models = (
            self.db.query(ResourceItemModel)
            .filter(ResourceItemModel.resource_id == resource_id)
            .order_by(ResourceItemModel.created_at, ResourceItemModel.id)
            .populate_existing()
            .all()
        )
        return [self._item_model_to_entity(model) for model in item_models]

    async def find_by_serial_number(self, serial_number: str) -> Optional[ResourceItem]:
        item_model = (
            self.db.query(ResourceItemModel).filter(ResourceItemModel.serial_number == serial_number).first()
        )
        return self._item_model_to_entity(item_model) if item_model else None

    async def find_by_license_key(self, license_key: str) -> Optional[ResourceItem]:
        item_model = self.db.query(ResourceItemModel).filter(ResourceItemModel.license_key == license_key).first()
        return self._item_model_to_entity(item_model) if item_model else None

    async def get_all(
        self,
        resource_id: Optional[str] = None,
        status: Optional[ItemStatus] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[ResourceItem], int]:
        """Get a page of items and the total match count"""
        query = self.db.query(ResourceItemModel)
        if resource_id:
            query = query.filter(ResourceItemModel.resource_id == resource_id)
        if status:
            query = query.filter(ResourceItemModel.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    ResourceItemModel.serial_number.ilike(pattern),
                    ResourceItemModel.license_key.ilike(pattern),
                    ResourceItemModel.hostname.ilike(pattern),
                )
            )

        total = query.count()
        item_models = (
            query.order_by(ResourceItemModel.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return [self._item_model_to_entity(model) for model in item_models], total

    async def update(self, item: ResourceItem) -> ResourceItem:
        """Update item"""
        item_model = self.db.query(ResourceItemModel).filter(ResourceItemModel.id == item.id).first()
        if not item_model:
            raise ValueError(f"Item with ID '{item.id}' not found")

        item_model.status = item.status
        item_model.serial_number = item.serial_number
        item_model.license_key = item.license_key
        item_model.hostname = item.hostname
        item_model.notes = item.notes
        item_model.updated_at = item.updated_at

        with translate_conflicts():
            self.db.flush()
        return self._item_model_to_entity(item_model)

    async def delete(self, item_id: str) -> bool:
        """Delete item"""
        item_model = self.db.query(ResourceItemModel).filter(ResourceItemModel.id == item_id).first()
        if not item_model:
            return False

        self.db.delete(item_model)
        with translate_conflicts():
            self.db.flush()
        return True
