"""Resources API router: catalog, items, availability"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from app.application.dto.assignment_dto import ItemAssignabilityDTO, SharedResourceUserDTO
from app.application.dto.item_dto import ItemCreateDTO, ItemListDTO, ItemResponseDTO, ItemStatusUpdateDTO
from app.application.dto.resource_dto import (
    ResourceAvailabilityDTO,
    ResourceCreateDTO,
    ResourceResponseDTO,
    ResourceUpdateDTO,
)
from app.application.use_cases.assignment_use_cases import AssignmentUseCases
from app.application.use_cases.item_use_cases import ItemUseCases
from app.application.use_cases.resource_use_cases import ResourceUseCases
from app.domain.entities.item import ItemStatus
from app.infrastructure.config.settings import settings
from app.presentation.api.v1.dependencies import (
    get_actor_id,
    get_assignment_use_cases,
    get_item_use_cases,
    get_resource_use_cases,
)
from app.presentation.api.v1.errors import raise_for_failure

router = APIRouter(prefix="/resources", tags=["resources"], redirect_slashes=False)


# Items are registered before the /{resource_id} routes so "items" is not read as an id.

@router.post("/items", response_model=ItemResponseDTO, status_code=status.HTTP_201_CREATED)
async def create_item(
    item_data: ItemCreateDTO,
    use_cases: ItemUseCases = Depends(get_item_use_cases),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Register an item under an exclusive resource"""
    result = await use_cases.create_item(item_data, actor_id)
    raise_for_failure(result)
    return result.item


@router.get("/items", response_model=ItemListDTO)
async def get_items(
    resource_id: Optional[str] = None,
    item_status: Optional[ItemStatus] = Query(None, alias="status"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    use_cases: ItemUseCases = Depends(get_item_use_cases),
):
    """List items with optional filters"""
    return await use_cases.get_items(
        resource_id=resource_id, status=item_status, search=search, page=page, limit=limit
    )


@router.get("/items/{item_id}", response_model=ItemResponseDTO)
async def get_item(item_id: str, use_cases: ItemUseCases = Depends(get_item_use_cases)):
    """Get item by ID"""
    item = await use_cases.get_item(item_id)
    if not item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Item with ID '{item_id}' not found",
        )
    return item


@router.get("/items/{item_id}/can-assign", response_model=ItemAssignabilityDTO)
async def can_assign_item(
    item_id: str,
    use_cases: AssignmentUseCases = Depends(get_assignment_use_cases),
):
    """Whether the item could be assigned right now"""
    return await use_cases.can_assign_item(item_id)


@router.patch("/items/{item_id}/status", response_model=ItemResponseDTO)
async def update_item_status(
    item_id: str,
    status_data: ItemStatusUpdateDTO,
    use_cases: ItemUseCases = Depends(get_item_use_cases),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Manual item status change (not to or from ASSIGNED)"""
    result = await use_cases.update_item_status(item_id, status_data, actor_id)
    raise_for_failure(result)
    return result.item


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: str,
    use_cases: ItemUseCases = Depends(get_item_use_cases),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Delete item"""
    result = await use_cases.delete_item(item_id, actor_id)
    raise_for_failure(result)


@router.post("/", response_model=ResourceResponseDTO, status_code=status.HTTP_201_CREATED)
async def create_resource(
    resource_data: ResourceCreateDTO,
    use_cases: ResourceUseCases = Depends(get_resource_use_cases),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Create a new resource"""
    result = await use_cases.create_resource(resource_data, actor_id)
    raise_for_failure(result)
    return result.resource


@router.get("/", response_model=List[ResourceResponseDTO])
async def get_all_resources(use_cases: ResourceUseCases = Depends(get_resource_use_cases)):
    """Get all resources"""
    return await use_cases.get_all_resources()


@router.get("/{resource_id}", response_model=ResourceResponseDTO)
async def get_resource(resource_id: str, use_cases: ResourceUseCases = Depends(get_resource_use_cases)):
    """Get resource by ID"""
    resource = await use_cases.get_resource(resource_id)
    if not resource:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Resource with ID '{resource_id}' not found",
        )
    return resource


@router.put("/{resource_id}", response_model=ResourceResponseDTO)
async def update_resource(
    resource_id: str,
    resource_data: ResourceUpdateDTO,
    use_cases: ResourceUseCases = Depends(get_resource_use_cases),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    """Update resource"""
    result = await use_cases.update_resource(resource_id, resource_data, actor_id)
    raise_for_failure(result)
    return result.resource


@router.get("/{resource_id}/availability", response_model=ResourceAvailabilityDTO)
async def get_resource_availability(
    resource_id: str,
    use_cases: ResourceUseCases = Depends(get_resource_use_cases),
):
    """Item counts (exclusive) or seat counts (shared) for a resource"""
    availability = await use_cases.get_resource_availability(resource_id)
    if not availability:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Resource with ID '{resource_id}' not found",
        )
    return availability


@router.get("/{resource_id}/users", response_model=List[SharedResourceUserDTO])
async def get_shared_resource_users(
    resource_id: str,
    use_cases: AssignmentUseCases = Depends(get_assignment_use_cases),
):
    """Employees currently holding a shared resource"""
    return await use_cases.get_shared_resource_users(resource_id)
