"""SQLAlchemy implementation of ResourceRepository"""
from typing import List, Optional
from sqlalchemy.orm import Session
from app.domain.entities.resource import AllocationMode, Capacity, Resource, ResourceStatus
from app.domain.repositories.resource_repository import ResourceRepository
from app.infrastructure.database.base import translate_conflicts
from app.infrastructure.database.models import ResourceModel


class ResourceRepositoryDB(ResourceRepository):
    """SQLAlchemy implementation of ResourceRepository"""

    def __init__(self, db: Session):
        self.db = db

    def _resource_model_to_entity(self, model: ResourceModel) -> Resource:
        """Convert ResourceModel to Resource entity"""
        return Resource(
            id=str(model.id),
            name=model.name,
            type=model.type,
            allocation_mode=AllocationMode(model.allocation_mode),
            capacity=Capacity.from_quantity(model.quantity),
            status=ResourceStatus(model.status),
            custodian_id=str(model.custodian_id) if model.custodian_id else None,
            category=model.category,
            description=model.description,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    async def create(self, resource: Resource) -> Resource:
        """Create a new resource"""
        resource_model = ResourceModel(
            id=resource.id,
            name=resource.name,
            type=resource.type,
            allocation_mode=resource.allocation_mode,
            quantity=resource.capacity.to_quantity(),
            status=resource.status,
            custodian_id=resource.custodian_id,
            category=resource.category,
            description=resource.description,
            created_at=resource.created_at,
            updated_at=resource.updated_at,
        )
        self.db.add(resource_model)
        with translate_conflicts():
            self.db.flush()
        return self._resource_model_to_entity(resource_model)

    async def get_by_id(self, resource_id: str) -> Optional[Resource]:
        """Get resource by ID"""
        resource_model = (
            self.db.query(ResourceModel)
            .filter(ResourceModel.id == resource_id)
            .populate_existing()
            .first()
        )
        if not resource_model:
            return None
        return self._resource_model_to_entity(resource_model)

    async def get_for_update(self, resource_id: str) -> Optional[Resource]:
        """SELECT ... FOR UPDATE on the resource row"""
        with translate_conflicts():
            resource_model = (
                self.db.query(ResourceModel)
                .filter(ResourceModel.id == resource_id)
                .with_for_update()
                .populate_existing()
                .first()
            )
        if not resource_model:
            return None
        return self._resource_model_to_entity(resource_model)

    async def get_all(self) -> List[Resource]:
        """Get all resources"""
        resource_models = self.db.query(ResourceModel).order_by(ResourceModel.name).all()
        return [self._resource_model_to_entity(model) for model in resource_models]

    async def update(self, resource: Resource) -> Resource:
        """Update resource"""
        resource_model = self.db.query(ResourceModel).filter(ResourceModel.id == resource.id).first()
        if not resource_model:
            raise ValueError(f"Resource with ID '{resource.id}' not found")

        resource_model.name = resource.name
        resource_model.quantity = resource.capacity.to_quantity()
        resource_model.status = resource.status
        resource_model.custodian_id = resource.custodian_id
        resource_model.category = resource.category
        resource_model.description = resource.description
        resource_model.updated_at = resource.updated_at

        with translate_conflicts():
            self.db.flush()
        return self._resource_model_to_entity(resource_model)
