"""SQLAlchemy database models"""
import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
    Enum as SQLEnum,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship

from app.domain.entities.activity import ActivityType, EntityType
from app.domain.entities.approval import ApprovalStatus
from app.domain.entities.assignment import AssignmentCategory, AssignmentStatus
from app.domain.entities.item import ItemStatus
from app.domain.entities.resource import AllocationMode, ResourceStatus
from app.infrastructure.config.settings import settings
from app.infrastructure.database.base import Base


def _id_type():
    return PG_UUID(as_uuid=False) if settings.DATABASE_TYPE == "postgresql" else String(36)


def get_id_column():
    """Get ID column based on database type"""
    return Column(_id_type(), primary_key=True, default=lambda: str(uuid.uuid4()))


def get_foreign_key_column(foreign_table, nullable=False, ondelete=None, index=True):
    """Get foreign key column based on database type"""
    return Column(_id_type(), ForeignKey(foreign_table, ondelete=ondelete), nullable=nullable, index=index)


class EmployeeModel(Base):
    """Employee database model"""
    __tablename__ = "employees"

    id = get_id_column()
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    department = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    assignments = relationship("AssignmentModel", back_populates="employee")


class ResourceModel(Base):
    """Resource database model. ``quantity`` of -1 means unlimited."""
    __tablename__ = "resources"

    id = get_id_column()
    name = Column(String(255), nullable=False)
    type = Column(String(100), nullable=False, index=True)
    allocation_mode = Column(
        SQLEnum(AllocationMode, native_enum=False), nullable=False, default=AllocationMode.EXCLUSIVE
    )
    quantity = Column(Integer, nullable=False, default=1)
    status = Column(SQLEnum(ResourceStatus, native_enum=False), nullable=False, default=ResourceStatus.ACTIVE)
    custodian_id = get_foreign_key_column("employees.id", nullable=True, ondelete="SET NULL")
    category = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    custodian = relationship("EmployeeModel", foreign_keys=[custodian_id])
    items = relationship("ResourceItemModel", back_populates="resource", order_by="ResourceItemModel.created_at")
    assignments = relationship("AssignmentModel", back_populates="resource")


class ResourceItemModel(Base):
    """Resource item database model"""
    __tablename__ = "resource_items"

    id = get_id_column()
    resource_id = get_foreign_key_column("resources.id", ondelete="CASCADE")
    status = Column(SQLEnum(ItemStatus, native_enum=False), nullable=False, default=ItemStatus.AVAILABLE)
    serial_number = Column(String(255), unique=True, nullable=True)
    license_key = Column(String(512), unique=True, nullable=True)
    hostname = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    resource = relationship("ResourceModel", back_populates="items")


class AssignmentModel(Base):
    """Assignment database model"""
    __tablename__ = "assignments"

    id = get_id_column()
    resource_id = get_foreign_key_column("resources.id")
    employee_id = get_foreign_key_column("employees.id")
    item_id = get_foreign_key_column("resource_items.id", nullable=True, ondelete="SET NULL")
    category = Column(SQLEnum(AssignmentCategory, native_enum=False), nullable=False)
    status = Column(
        SQLEnum(AssignmentStatus, native_enum=False), nullable=False, default=AssignmentStatus.ACTIVE, index=True
    )
    quantity = Column(Integer, nullable=False, default=1)
    assigned_by = Column(String(36), nullable=True)
    assigned_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    returned_at = Column(DateTime, nullable=True)
    return_reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    split_from_id = get_foreign_key_column("assignments.id", nullable=True, index=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    resource = relationship("ResourceModel", back_populates="assignments")
    employee = relationship("EmployeeModel", back_populates="assignments")
    item = relationship("ResourceItemModel")

    __table_args__ = (
        # at most one ACTIVE assignment per item
        Index(
            "uq_assignments_active_item",
            "item_id",
            unique=True,
            postgresql_where=text("status = 'ACTIVE' AND item_id IS NOT NULL"),
            sqlite_where=text("status = 'ACTIVE' AND item_id IS NOT NULL"),
        ),
        # at most one ACTIVE seat per employee on a quantity-backed resource
        Index(
            "uq_assignments_active_seat",
            "resource_id",
            "employee_id",
            unique=True,
            postgresql_where=text("status = 'ACTIVE' AND item_id IS NULL"),
            sqlite_where=text("status = 'ACTIVE' AND item_id IS NULL"),
        ),
    )


class AssignmentApprovalModel(Base):
    """Assignment approval request"""
    __tablename__ = "assignment_approvals"

    id = get_id_column()
    resource_id = get_foreign_key_column("resources.id")
    employee_id = get_foreign_key_column("employees.id")
    item_id = get_foreign_key_column("resource_items.id", nullable=True, ondelete="SET NULL", index=False)
    quantity = Column(Integer, nullable=False, default=1)
    assignment_type = Column(SQLEnum(AssignmentCategory, native_enum=False), nullable=True)
    auto_select_item = Column(Boolean, nullable=False, default=False)
    requested_by = Column(String(36), nullable=True)
    approver_id = Column(String(36), nullable=False, index=True)
    status = Column(
        SQLEnum(ApprovalStatus, native_enum=False), nullable=False, default=ApprovalStatus.PENDING, index=True
    )
    justification = Column(Text, nullable=True)
    urgency = Column(String(50), nullable=True)
    comments = Column(Text, nullable=True)
    assignment_id = get_foreign_key_column("assignments.id", nullable=True, index=False)
    decided_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    resource = relationship("ResourceModel")
    employee = relationship("EmployeeModel")


class AuditLogModel(Base):
    """Field-level audit trail"""
    __tablename__ = "audit_logs"

    id = get_id_column()
    entity_type = Column(SQLEnum(EntityType, native_enum=False), nullable=False)
    entity_id = Column(String(36), nullable=False, index=True)
    changed_by_id = Column(String(36), nullable=True)
    field_changed = Column(String(100), nullable=False)
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)
    resource_id = Column(String(36), nullable=True, index=True)
    assignment_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ActivityTimelineModel(Base):
    """Human-readable activity timeline"""
    __tablename__ = "activity_timeline"

    id = get_id_column()
    entity_type = Column(SQLEnum(EntityType, native_enum=False), nullable=False)
    entity_id = Column(String(36), nullable=False, index=True)
    activity_type = Column(SQLEnum(ActivityType, native_enum=False), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    performed_by = Column(String(36), nullable=True)
    resource_id = Column(String(36), nullable=True, index=True)
    assignment_id = Column(String(36), nullable=True)
    employee_id = Column(String(36), nullable=True, index=True)
    # "metadata" is reserved on declarative models
    metadata_ = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
