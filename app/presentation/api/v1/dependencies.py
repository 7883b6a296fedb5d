"""API dependencies"""
from typing import Callable, Optional
from fastapi import Depends, Header
from sqlalchemy.orm import Session
from app.application.use_cases.approval_use_cases import ApprovalUseCases
from app.application.use_cases.assignment_use_cases import AssignmentUseCases
from app.application.use_cases.employee_use_cases import EmployeeUseCases
from app.application.use_cases.item_use_cases import ItemUseCases
from app.application.use_cases.resource_use_cases import ResourceUseCases
from app.domain.repositories.unit_of_work import UnitOfWork
from app.infrastructure.config.settings import settings
from app.infrastructure.database.base import get_db
from app.infrastructure.repositories.unit_of_work_db import SqlAlchemyUnitOfWork


def get_unit_of_work_factory(db: Session = Depends(get_db)) -> Callable[[], UnitOfWork]:
    """Get a unit of work factory bound to the request's database session"""
    return lambda: SqlAlchemyUnitOfWork(lambda: db, owns_session=False)


def get_assignment_use_cases(
    uow_factory: Callable[[], UnitOfWork] = Depends(get_unit_of_work_factory),
) -> AssignmentUseCases:
    """Get assignment use cases instance"""
    return AssignmentUseCases(uow_factory, max_retries=settings.ASSIGNMENT_MAX_RETRIES)


def get_approval_use_cases(
    uow_factory: Callable[[], UnitOfWork] = Depends(get_unit_of_work_factory),
    assignment_use_cases: AssignmentUseCases = Depends(get_assignment_use_cases),
) -> ApprovalUseCases:
    """Get approval use cases instance"""
    return ApprovalUseCases(uow_factory, assignment_use_cases)


def get_resource_use_cases(
    uow_factory: Callable[[], UnitOfWork] = Depends(get_unit_of_work_factory),
) -> ResourceUseCases:
    """Get resource use cases instance"""
    return ResourceUseCases(uow_factory)


def get_item_use_cases(
    uow_factory: Callable[[], UnitOfWork] = Depends(get_unit_of_work_factory),
) -> ItemUseCases:
    """Get item use cases instance"""
    return ItemUseCases(uow_factory)


def get_employee_use_cases(
    uow_factory: Callable[[], UnitOfWork] = Depends(get_unit_of_work_factory),
) -> EmployeeUseCases:
    """Get employee use cases instance"""
    return EmployeeUseCases(uow_factory)


async def get_actor_id(x_actor_id: Optional[str] = Header(None, alias="X-Actor-Id")) -> Optional[str]:
    """
    Identity of the caller, recorded as assigned_by / changed_by.

    Authentication happens upstream; the gateway forwards the authenticated
    user id in the ``X-Actor-Id`` header.
    """
    if x_actor_id is None or not x_actor_id.strip():
        return None
    return x_actor_id.strip()
