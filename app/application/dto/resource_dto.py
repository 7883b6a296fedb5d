"""Resource catalog DTOs"""
from datetime import datetime
from typing import Optional, Union
from pydantic import BaseModel
from app.domain.entities.resource import AllocationMode, ResourceStatus
from app.domain.errors import ErrorCode


class ResourceCreateDTO(BaseModel):
    """DTO for creating a resource. ``quantity=-1`` means unlimited."""
    name: str
    type: str
    allocation_mode: AllocationMode = AllocationMode.EXCLUSIVE
    quantity: int = 1
    custodian_id: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None


class ResourceUpdateDTO(BaseModel):
    """DTO for updating a resource"""
    name: Optional[str] = None
    quantity: Optional[int] = None
    status: Optional[ResourceStatus] = None
    custodian_id: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None


class ResourceResponseDTO(BaseModel):
    """DTO for resource response"""
    id: str
    name: str
    type: str
    allocation_mode: AllocationMode
    quantity: int
    unlimited: bool
    status: ResourceStatus
    custodian_id: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ItemAvailabilityDTO(BaseModel):
    """Availability of an item-backed resource"""
    total: int
    assigned: int
    available: int
    maintenance: int
    lost: int
    damaged: int


class SeatAvailabilityDTO(BaseModel):
    """Availability of a quantity-backed resource; None means unbounded"""
    capacity: Optional[int] = None
    used: int
    available: Optional[int] = None
    unlimited: bool


class ResourceAvailabilityDTO(BaseModel):
    """DTO for the capacity calculator view of one resource"""
    resource_id: str
    allocation_mode: AllocationMode
    availability: Union[ItemAvailabilityDTO, SeatAvailabilityDTO]


class ResourceResultDTO(BaseModel):
    """Outcome of a catalog change"""
    success: bool
    resource: Optional[ResourceResponseDTO] = None
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None
