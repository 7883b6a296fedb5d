"""Audit trail and activity timeline events"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class EntityType(str, Enum):
    RESOURCE = "RESOURCE"
    EMPLOYEE = "EMPLOYEE"
    APPROVAL_WORKFLOW = "APPROVAL_WORKFLOW"


class ActivityType(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    ASSIGNED = "ASSIGNED"
    STATUS_CHANGED = "STATUS_CHANGED"
    WORKFLOW_STARTED = "WORKFLOW_STARTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


@dataclass
class AuditEntry:
    """Field-level change record"""
    entity_type: EntityType
    entity_id: str
    changed_by_id: Optional[str]
    field_changed: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    resource_id: Optional[str] = None
    assignment_id: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class TimelineEntry:
    """Human-readable activity record"""
    entity_type: EntityType
    entity_id: str
    activity_type: ActivityType
    title: str
    description: str
    performed_by: Optional[str]
    resource_id: Optional[str] = None
    assignment_id: Optional[str] = None
    employee_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.utcnow)
