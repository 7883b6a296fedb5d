"""Resource item registry use cases"""
import logging
import math
import uuid
from datetime import datetime
from typing import Callable, Optional

from app.application.dto.assignment_dto import PaginationDTO
from app.application.dto.item_dto import (
    ItemCreateDTO,
    ItemListDTO,
    ItemResponseDTO,
    ItemResultDTO,
    ItemStatusUpdateDTO,
)
from app.application.use_cases.activity_recorder import record_activity
from app.domain.entities.activity import AuditEntry, EntityType
from app.domain.entities.item import ItemStatus, ResourceItem
from app.domain.entities.resource import AllocationMode
from app.domain.errors import ErrorCode
from app.domain.repositories.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class ItemUseCases:
    """Use cases for the items of EXCLUSIVE resources.

    ASSIGNED is owned by the assignment lifecycle: an item can neither be
    moved into it nor out of it from here.
    """

    def __init__(self, unit_of_work_factory: Callable[[], UnitOfWork]):
        self.unit_of_work_factory = unit_of_work_factory

    async def create_item(self, data: ItemCreateDTO, created_by: Optional[str]) -> ItemResultDTO:
        """Register a new item under a resource"""
        serial_number = (data.serial_number or "").strip() or None
        license_key = (data.license_key or "").strip() or None

        async with self.unit_of_work_factory() as uow:
            resource = await uow.resources.get_for_update(data.resource_id)
            if not resource:
                return self._failure(ErrorCode.RESOURCE_NOT_FOUND, "Resource not found")
            if resource.allocation_mode != AllocationMode.EXCLUSIVE:
                return self._failure(
                    ErrorCode.INVALID_ALLOCATION_MODE,
                    "Items can only be added to exclusive resources",
                )
            if serial_number and await uow.items.find_by_serial_number(serial_number):
                return self._failure(
                    ErrorCode.DUPLICATE_SERIAL_NUMBER,
                    f"An item with serial number '{serial_number}' already exists",
                )
            if license_key and await uow.items.find_by_license_key(license_key):
                return self._failure(
                    ErrorCode.DUPLICATE_LICENSE_KEY,
                    f"An item with license key '{license_key}' already exists",
                )

            item = await uow.items.create(
                ResourceItem(
                    id=str(uuid.uuid4()),
                    resource_id=resource.id,
                    status=ItemStatus.AVAILABLE,
                    serial_number=serial_number,
                    license_key=license_key,
                    hostname=data.hostname,
                    notes=data.notes,
                    created_at=datetime.utcnow(),
                    updated_at=datetime.utcnow(),
                )
            )
            await record_activity(
                uow,
                AuditEntry(
                    entity_type=EntityType.RESOURCE,
                    entity_id=resource.id,
                    changed_by_id=created_by,
                    field_changed="itemAdded",
                    new_value=item.external_id,
                    resource_id=resource.id,
                ),
            )
            await uow.commit()

        logger.info("Item %s registered under resource %s", item.id, item.resource_id)
        return ItemResultDTO(success=True, item=self._item_to_dto(item))

    async def get_item(self, item_id: str) -> Optional[ItemResponseDTO]:
        """Get item by ID"""
        async with self.unit_of_work_factory() as uow:
            item = await uow.items.get_by_id(item_id)
        if not item:
            return None
        return self._item_to_dto(item)

    async def get_items(
        self,
        resource_id: Optional[str] = None,
        status: Optional[ItemStatus] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> ItemListDTO:
        """Get a filtered page of items"""
        page = max(1, page)
        limit = max(1, limit)
        async with self.unit_of_work_factory() as uow:
            items, total = await uow.items.get_all(
                resource_id=resource_id, status=status, search=search, page=page, limit=limit
            )
        return ItemListDTO(
            items=[self._item_to_dto(i) for i in items],
            pagination=PaginationDTO(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit)),
        )

    async def update_item_status(
        self, item_id: str, data: ItemStatusUpdateDTO, updated_by: Optional[str]
    ) -> ItemResultDTO:
        """Manual status change, e.g. AVAILABLE -> MAINTENANCE"""
        async with self.unit_of_work_factory() as uow:
            item = await uow.items.get_by_id(item_id)
            if not item:
                return self._failure(ErrorCode.ITEM_NOT_FOUND, "Item not found")
            await uow.resources.get_for_update(item.resource_id)
            item = await uow.items.get_by_id(item_id)

            old_status = item.status
            if old_status == data.status:
                return ItemResultDTO(success=True, item=self._item_to_dto(item))
            if ItemStatus.ASSIGNED in (old_status, data.status):
                return self._failure(
                    ErrorCode.ITEM_STATUS_LOCKED,
                    "Assigned status is managed through assignments",
                )

            item.status = data.status
            if data.notes:
                item.notes = f"{item.notes or ''}\n\n{data.notes}".strip()
            item.updated_at = datetime.utcnow()
            updated = await uow.items.update(item)
            await record_activity(
                uow,
                AuditEntry(
                    entity_type=EntityType.RESOURCE,
                    entity_id=item.resource_id,
                    changed_by_id=updated_by,
                    field_changed="itemStatus",
                    old_value=old_status.value,
                    new_value=data.status.value,
                    resource_id=item.resource_id,
                ),
            )
            await uow.commit()

        logger.info("Item %s status %s -> %s", item_id, old_status.value, data.status.value)
        return ItemResultDTO(success=True, item=self._item_to_dto(updated))

    async def delete_item(self, item_id: str, deleted_by: Optional[str]) -> ItemResultDTO:
        """Delete item; refused while any ACTIVE assignment references it"""
        async with self.unit_of_work_factory() as uow:
            item = await uow.items.get_by_id(item_id)
            if not item:
                return self._failure(ErrorCode.ITEM_NOT_FOUND, "Item not found")
            await uow.resources.get_for_update(item.resource_id)
            if await uow.assignments.get_active_by_item(item_id):
                return self._failure(
                    ErrorCode.ITEM_HAS_ACTIVE_ASSIGNMENT,
                    "Cannot delete an item with an active assignment",
                )
            await uow.items.delete(item_id)
            await record_activity(
                uow,
                AuditEntry(
                    entity_type=EntityType.RESOURCE,
                    entity_id=item.resource_id,
                    changed_by_id=deleted_by,
                    field_changed="itemRemoved",
                    old_value=item.external_id,
                    resource_id=item.resource_id,
                ),
            )
            await uow.commit()

        logger.info("Item %s deleted from resource %s", item_id, item.resource_id)
        return ItemResultDTO(success=True)

    @staticmethod
    def _failure(error_code: ErrorCode, error: str) -> ItemResultDTO:
        return ItemResultDTO(success=False, error=error, error_code=error_code)

    def _item_to_dto(self, item: ResourceItem) -> ItemResponseDTO:
        """Convert ResourceItem entity to ItemResponseDTO"""
        return ItemResponseDTO(
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
