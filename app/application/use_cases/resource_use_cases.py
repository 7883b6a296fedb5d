"""Resource catalog use cases"""
import logging
import uuid
from dataclasses import asdict
from datetime import datetime
from typing import Callable, List, Optional

from app.application.dto.resource_dto import (
    ItemAvailabilityDTO,
    ResourceAvailabilityDTO,
    ResourceCreateDTO,
    ResourceResponseDTO,
    ResourceResultDTO,
    ResourceUpdateDTO,
    SeatAvailabilityDTO,
)
from app.application.use_cases.activity_recorder import record_activity
from app.domain.entities.activity import ActivityType, AuditEntry, EntityType, TimelineEntry
from app.domain.entities.resource import UNLIMITED_QUANTITY, AllocationMode, Capacity, Resource
from app.domain.errors import ErrorCode
from app.domain.repositories.unit_of_work import UnitOfWork
from app.domain.services.capacity_calculator import ItemAvailability, resource_availability, units_in_use

logger = logging.getLogger(__name__)


class ResourceUseCases:
    """Use cases for resource catalog operations"""

    def __init__(self, unit_of_work_factory: Callable[[], UnitOfWork]):
        self.unit_of_work_factory = unit_of_work_factory

    async def create_resource(self, data: ResourceCreateDTO, created_by: Optional[str]) -> ResourceResultDTO:
        """Create a new resource"""
        if not self._valid_quantity(data.quantity):
            return self._failure(ErrorCode.INVALID_QUANTITY, "Quantity must be at least 1, or -1 for unlimited")

        # item-backed resources count items, not seats
        if data.allocation_mode == AllocationMode.EXCLUSIVE:
            capacity = Capacity.bounded(1)
        else:
            capacity = Capacity.from_quantity(data.quantity)

        resource = Resource(
            id=str(uuid.uuid4()),
            name=data.name,
            type=data.type,
            allocation_mode=data.allocation_mode,
            capacity=capacity,
            custodian_id=data.custodian_id,
            category=data.category,
            description=data.description,
            created_at=datetime.utcnow(),
            updated_at=datetime.utcnow(),
        )

        async with self.unit_of_work_factory() as uow:
            if data.custodian_id and not await uow.employees.get_by_id(data.custodian_id):
                return self._failure(ErrorCode.EMPLOYEE_NOT_FOUND, "Custodian not found")
            created = await uow.resources.create(resource)
            await record_activity(
                uow,
                TimelineEntry(
                    entity_type=EntityType.RESOURCE,
                    entity_id=created.id,
                    activity_type=ActivityType.CREATED,
                    title=f"{created.name} added to catalog",
                    description=f"{created.type} resource, {created.allocation_mode.value.lower()} allocation",
                    performed_by=created_by,
                    resource_id=created.id,
                    metadata={"quantity": created.capacity.to_quantity()},
                ),
            )
            await uow.commit()

        logger.info("Resource %s created: %s (%s, %s)", created.id, created.name, created.type, created.allocation_mode.value)
        return ResourceResultDTO(success=True, resource=self._resource_to_dto(created))

    async def get_resource(self, resource_id: str) -> Optional[ResourceResponseDTO]:
        """Get resource by ID"""
        async with self.unit_of_work_factory() as uow:
            resource = await uow.resources.get_by_id(resource_id)
        if not resource:
            return None
        return self._resource_to_dto(resource)

    async def get_all_resources(self) -> List[ResourceResponseDTO]:
        """Get all resources"""
        async with self.unit_of_work_factory() as uow:
            resources = await uow.resources.get_all()
        return [self._resource_to_dto(r) for r in resources]

    async def update_resource(
        self, resource_id: str, data: ResourceUpdateDTO, updated_by: Optional[str]
    ) -> ResourceResultDTO:
        """Update resource; capacity may never drop below what is handed out"""
        async with self.unit_of_work_factory() as uow:
            resource = await uow.resources.get_for_update(resource_id)
            if not resource:
                return self._failure(ErrorCode.RESOURCE_NOT_FOUND, "Resource not found")
            if data.custodian_id and not await uow.employees.get_by_id(data.custodian_id):
                return self._failure(ErrorCode.EMPLOYEE_NOT_FOUND, "Custodian not found")

            changes = []

            if data.quantity is not None and resource.allocation_mode == AllocationMode.SHARED:
                if not self._valid_quantity(data.quantity):
                    return self._failure(ErrorCode.INVALID_QUANTITY, "Quantity must be at least 1, or -1 for unlimited")
                capacity = Capacity.from_quantity(data.quantity)
                used = units_in_use(await uow.assignments.get_active_by_resource(resource_id))
                if not capacity.is_unlimited and capacity.limit < used:
                    return self._failure(
                        ErrorCode.CAPACITY_BELOW_ALLOCATED,
                        f"Cannot reduce capacity to {capacity.limit}: {used} units are currently assigned",
                    )
                if capacity != resource.capacity:
                    changes.append(("quantity", str(resource.capacity.to_quantity()), str(capacity.to_quantity())))
                    resource.capacity = capacity

            # Update only provided fields
            for field_name in ("name", "status", "custodian_id", "category", "description"):
                value = getattr(data, field_name)
                if value is None or value == getattr(resource, field_name):
                    continue
                old = getattr(resource, field_name)
                changes.append((field_name, _as_text(old), _as_text(value)))
                setattr(resource, field_name, value)

            resource.updated_at = datetime.utcnow()
            updated = await uow.resources.update(resource)
            await record_activity(
                uow,
                *[
                    AuditEntry(
                        entity_type=EntityType.RESOURCE,
                        entity_id=resource_id,
                        changed_by_id=updated_by,
                        field_changed=name,
                        old_value=old,
                        new_value=new,
                        resource_id=resource_id,
                    )
                    for name, old, new in changes
                ],
            )
            await uow.commit()

        if changes:
            logger.info("Resource %s updated: %s", resource_id, ", ".join(c[0] for c in changes))
        return ResourceResultDTO(success=True, resource=self._resource_to_dto(updated))

    async def get_resource_availability(self, resource_id: str) -> Optional[ResourceAvailabilityDTO]:
        """Availability counts for one resource"""
        async with self.unit_of_work_factory() as uow:
            resource = await uow.resources.get_by_id(resource_id)
            if not resource:
                return None
            items = await uow.items.get_by_resource(resource_id)
            active = await uow.assignments.get_active_by_resource(resource_id)

        view = resource_availability(resource, items, active)
        if isinstance(view, ItemAvailability):
            availability = ItemAvailabilityDTO(**asdict(view))
        else:
            availability = SeatAvailabilityDTO(**asdict(view))
        return ResourceAvailabilityDTO(
            resource_id=resource.id,
            allocation_mode=resource.allocation_mode,
            availability=availability,
        )

    @staticmethod
    def _valid_quantity(quantity: int) -> bool:
        return quantity == UNLIMITED_QUANTITY or quantity >= 1

    @staticmethod
    def _failure(error_code: ErrorCode, error: str) -> ResourceResultDTO:
        return ResourceResultDTO(success=False, error=error, error_code=error_code)

    def _resource_to_dto(self, resource: Resource) -> ResourceResponseDTO:
        """Convert Resource entity to ResourceResponseDTO"""
        return ResourceResponseDTO(
            id=resource.id,
            name=resource.name,
            type=resource.type,
            allocation_mode=resource.allocation_mode,
            quantity=resource.capacity.to_quantity(),
            unlimited=resource.capacity.is_unlimited,
            status=resource.status,
            custodian_id=resource.custodian_id,
            category=resource.category,
            description=resource.description,
            created_at=resource.created_at,
            updated_at=resource.updated_at,
        )


def _as_text(value) -> Optional[str]:
    if value is None:
        return None
    return getattr(value, "value", value)
