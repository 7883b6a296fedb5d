"""Audit trail / activity timeline sink interface"""
from abc import ABC, abstractmethod
from app.domain.entities.activity import AuditEntry, TimelineEntry


class ActivityLogRepository(ABC):
    """Fire-and-forget sink for audit and timeline events"""

    @abstractmethod
    async def record_audit(self, entry: AuditEntry) -> None:
        """Store an audit entry"""
        pass

    @abstractmethod
    async def record_timeline(self, entry: TimelineEntry) -> None:
        """Store a timeline entry"""
        pass
