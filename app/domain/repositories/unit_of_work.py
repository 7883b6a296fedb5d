"""Unit of work interface"""
from abc import ABC, abstractmethod
from app.domain.repositories.activity_repository import ActivityLogRepository
from app.domain.repositories.approval_repository import ApprovalRepository
from app.domain.repositories.assignment_repository import AssignmentRepository
from app.domain.repositories.employee_repository import EmployeeRepository
from app.domain.repositories.item_repository import ResourceItemRepository
from app.domain.repositories.resource_repository import ResourceRepository


class UnitOfWork(ABC):
    """One atomic transaction over all repositories.

    Usage::

        async with uow_factory() as uow:
            resource = await uow.resources.get_for_update(resource_id)
            ...
            await uow.commit()

    Leaving the block without ``commit`` rolls everything back. Implementations
    raise ``ConcurrencyConflictError`` when a concurrent writer wins.
    """

    resources: ResourceRepository
    items: ResourceItemRepository
    assignments: AssignmentRepository
    employees: EmployeeRepository
    activity: ActivityLogRepository
    approvals: ApprovalRepository

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.rollback()

    @abstractmethod
    async def commit(self) -> None:
        """Commit the unit of work"""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Discard uncommitted changes"""
        pass
