"""SQLAlchemy implementation of ActivityLogRepository"""
import uuid
from sqlalchemy.orm import Session
from app.domain.entities.activity import AuditEntry, TimelineEntry
from app.domain.repositories.activity_repository import ActivityLogRepository
from app.infrastructure.database.models import ActivityTimelineModel, AuditLogModel


class ActivityLogRepositoryDB(ActivityLogRepository):
    """Writes each entry inside its own SAVEPOINT.

    A failed insert rolls back only the savepoint, so the caller can log the
    failure and still commit the surrounding unit of work.
    """

    def __init__(self, db: Session):
        self.db = db

    async def record_audit(self, entry: AuditEntry) -> None:
        with self.db.begin_nested():
            self.db.add(
                AuditLogModel(
                    id=str(uuid.uuid4()),
                    entity_type=entry.entity_type,
                    entity_id=entry.entity_id,
                    changed_by_id=entry.changed_by_id,
                    field_changed=entry.field_changed,
                    old_value=entry.old_value,
                    new_value=entry.new_value,
                    resource_id=entry.resource_id,
                    assignment_id=entry.assignment_id,
                    created_at=entry.created_at,
                )
            )

    async def record_timeline(self, entry: TimelineEntry) -> None:
        with self.db.begin_nested():
            self.db.add(
                ActivityTimelineModel(
                    id=str(uuid.uuid4()),
                    entity_type=entry.entity_type,
                    entity_id=entry.entity_id,
                    activity_type=entry.activity_type,
                    title=entry.title,
                    description=entry.description,
                    performed_by=entry.performed_by,
                    resource_id=entry.resource_id,
                    assignment_id=entry.assignment_id,
                    employee_id=entry.employee_id,
                    metadata_=entry.metadata or None,
                    created_at=entry.created_at,
                )
            )
