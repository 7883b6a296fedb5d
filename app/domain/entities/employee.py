"""Employee domain entity"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Employee:
    """Employee domain entity"""
    id: str
    name: str
    email: str
    department: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.created_at is None:
            self.created_at = datetime.utcnow()
        if self.updated_at is None:
            self.updated_at = datetime.utcnow()
