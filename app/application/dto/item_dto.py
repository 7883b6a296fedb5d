"""Resource item DTOs"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from app.application.dto.assignment_dto import PaginationDTO
from app.domain.entities.item import ItemStatus
from app.domain.errors import ErrorCode


class ItemCreateDTO(BaseModel):
    """DTO for registering an item under a resource"""
    resource_id: str
    serial_number: Optional[str] = None
    license_key: Optional[str] = None
    hostname: Optional[str] = None
    notes: Optional[str] = None


class ItemStatusUpdateDTO(BaseModel):
    """DTO for a manual item status change (e.g. sending to maintenance)"""
    status: ItemStatus
    notes: Optional[str] = None


class ItemResponseDTO(BaseModel):
    """DTO for item response"""
    id: str
    resource_id: str
    status: ItemStatus
    serial_number: Optional[str] = None
    license_key: Optional[str] = None
    hostname: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ItemResultDTO(BaseModel):
    """Outcome of an item registry change"""
    success: bool
    item: Optional[ItemResponseDTO] = None
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None


class ItemListDTO(BaseModel):
    """DTO for a page of items"""
    items: List[ItemResponseDTO] = Field(default_factory=list)
    pagination: PaginationDTO
