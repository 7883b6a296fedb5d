"""SQLAlchemy unit of work"""
import logging
from typing import Callable
from sqlalchemy.orm import Session
from app.domain.repositories.unit_of_work import UnitOfWork
from app.infrastructure.database.base import translate_conflicts
from app.infrastructure.repositories.activity_repository_db import ActivityLogRepositoryDB
from app.infrastructure.repositories.approval_repository_db import ApprovalRepositoryDB
from app.infrastructure.repositories.assignment_repository_db import AssignmentRepositoryDB
from app.infrastructure.repositories.employee_repository_db import EmployeeRepositoryDB
from app.infrastructure.repositories.item_repository_db import ResourceItemRepositoryDB
from app.infrastructure.repositories.resource_repository_db import ResourceRepositoryDB

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork(UnitOfWork):
    """One database transaction over a session.

    ``session_factory`` is either a ``sessionmaker`` (the unit owns and closes
    its session) or a callable returning a request-scoped session (the unit
    leaves it open for the caller).
    """

    def __init__(self, session_factory: Callable[[], Session], owns_session: bool = True):
        self.session_factory = session_factory
        self.owns_session = owns_session
        self.session = None

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self.session_factory()
        self.resources = ResourceRepositoryDB(self.session)
        self.items = ResourceItemRepositoryDB(self.session)
        self.assignments = AssignmentRepositoryDB(self.session)
        self.employees = EmployeeRepositoryDB(self.session)
        self.activity = ActivityLogRepositoryDB(self.session)
        self.approvals = ApprovalRepositoryDB(self.session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await self.rollback()
        finally:
            if self.owns_session:
                self.session.close()
            self.session = None

    async def commit(self) -> None:
        with translate_conflicts():
            self.session.commit()

    async def rollback(self) -> None:
        # no-op after a successful commit: nothing is pending
        if self.session is not None and self.session.in_transaction():
            self.session.rollback()
