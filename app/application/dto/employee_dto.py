"""Employee DTOs"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr


class EmployeeCreateDTO(BaseModel):
    """DTO for creating an employee"""
    name: str
    email: EmailStr
    department: Optional[str] = None


class EmployeeResponseDTO(BaseModel):
    """DTO for employee response"""
    id: str
    name: str
    email: str
    department: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
