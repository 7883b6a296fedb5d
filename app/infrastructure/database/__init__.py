# Database
from app.infrastructure.database.base import Base, SessionLocal, engine, get_db, init_db
from app.infrastructure.database.models import (
    ActivityTimelineModel,
    AssignmentApprovalModel,
    AssignmentModel,
    AuditLogModel,
    EmployeeModel,
    ResourceItemModel,
    ResourceModel,
)

__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "get_db",
    "init_db",
    "ActivityTimelineModel",
    "AssignmentApprovalModel",
    "AssignmentModel",
    "AuditLogModel",
    "EmployeeModel",
    "ResourceItemModel",
    "ResourceModel",
]
