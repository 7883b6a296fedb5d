"""Best-effort audit/timeline recording shared by the use cases"""
import logging
from typing import Union
from app.domain.entities.activity import AuditEntry, TimelineEntry
from app.domain.repositories.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


async def record_activity(uow: UnitOfWork, *entries: Union[AuditEntry, TimelineEntry]) -> None:
    """Write audit/timeline entries; a failing sink never fails the operation"""
    for entry in entries:
        try:
            if isinstance(entry, AuditEntry):
                await uow.activity.record_audit(entry)
            else:
                await uow.activity.record_timeline(entry)
        except Exception as e:
            logger.warning(
                "Could not record %s for %s %s: %s",
                type(entry).__name__, entry.entity_type.value, entry.entity_id, e,
            )
