"""In-memory unit of work and repositories"""
import asyncio
import copy
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

from app.domain.entities.activity import AuditEntry, TimelineEntry
from app.domain.entities.approval import AssignmentApproval
from app.domain.entities.assignment import Assignment, AssignmentCategory, AssignmentStatus
from app.domain.entities.employee import Employee
from app.domain.entities.item import ItemStatus, ResourceItem
from app.domain.entities.resource import Resource
from app.domain.errors import ConcurrencyConflictError
from app.domain.repositories.activity_repository import ActivityLogRepository
from app.domain.repositories.approval_repository import ApprovalRepository
from app.domain.repositories.assignment_repository import AssignmentRepository
from app.domain.repositories.employee_repository import EmployeeRepository
from app.domain.repositories.item_repository import ResourceItemRepository
from app.domain.repositories.resource_repository import ResourceRepository
from app.domain.repositories.unit_of_work import UnitOfWork


@dataclass
class InMemoryStore:
    """Process-local state shared by every unit of work built on it"""
    resources: Dict[str, Resource] = field(default_factory=dict)
    items: Dict[str, ResourceItem] = field(default_factory=dict)
    assignments: Dict[str, Assignment] = field(default_factory=dict)
    employees: Dict[str, Employee] = field(default_factory=dict)
    approvals: Dict[str, AssignmentApproval] = field(default_factory=dict)
    audit_log: List[AuditEntry] = field(default_factory=list)
    timeline: List[TimelineEntry] = field(default_factory=list)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def snapshot(self) -> dict:
        # stored entities are replaced on write, never mutated, so copying the containers is enough
        return {
            "resources": dict(self.resources),
            "items": dict(self.items),
            "assignments": dict(self.assignments),
            "employees": dict(self.employees),
            "approvals": dict(self.approvals),
            "audit_log": list(self.audit_log),
            "timeline": list(self.timeline),
        }

    def restore(self, state: dict) -> None:
        for name, value in state.items():
            setattr(self, name, value)


def _page(rows: list, page: int, limit: int) -> list:
    start = (page - 1) * limit
    return rows[start:start + limit]


def _detach(value):
    """Copy entities on their way in or out of the store; their fields are immutable values"""
    if isinstance(value, list):
        return [copy.copy(v) for v in value]
    return copy.copy(value)


class ResourceRepositoryImpl(ResourceRepository):
    """Resource repository implementation with in-memory storage"""

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def create(self, resource: Resource) -> Resource:
        if resource.id in self.store.resources:
            raise ConcurrencyConflictError(f"Resource {resource.id} already exists")
        self.store.resources[resource.id] = _detach(resource)
        return _detach(resource)

    async def get_by_id(self, resource_id: str) -> Optional[Resource]:
        return _detach(self.store.resources.get(resource_id))

    async def get_for_update(self, resource_id: str) -> Optional[Resource]:
        # the unit of work already holds the store lock
        return await self.get_by_id(resource_id)

    async def get_all(self) -> List[Resource]:
        return [_detach(r) for r in sorted(self.store.resources.values(), key=lambda r: r.name)]

    async def update(self, resource: Resource) -> Resource:
        if resource.id not in self.store.resources:
            raise ValueError(f"Resource with ID '{resource.id}' not found")
        self.store.resources[resource.id] = _detach(resource)
        return _detach(resource)


class ResourceItemRepositoryImpl(ResourceItemRepository):
    """Item repository implementation with in-memory storage"""

    def __init__(self, store: InMemoryStore):
        self.store = store

    def _check_unique(self, item: ResourceItem) -> None:
        for other in self.store.items.values():
            if other.id == item.id:
                continue
            if item.serial_number and other.serial_number == item.serial_number:
                raise ConcurrencyConflictError(f"Duplicate serial number {item.serial_number}")
            if item.license_key and other.license_key == item.license_key:
                raise ConcurrencyConflictError(f"Duplicate license key {item.license_key}")

    async def create(self, item: ResourceItem) -> ResourceItem:
        self._check_unique(item)
        self.store.items[item.id] = _detach(item)
        return _detach(item)

    async def get_by_id(self, item_id: str) -> Optional[ResourceItem]:
        return _detach(self.store.items.get(item_id))

    async def get_by_resource(self, resource_id: str) -> List[ResourceItem]:
        items = [i for i in self.store.items.values() if i.resource_id == resource_id]
        return _detach(sorted(items, key=lambda i: i.created_at))

    async def find_by_serial_number(self, serial_number: str) -> Optional[ResourceItem]:
        for item in self.store.items.values():
            if item.serial_number == serial_number:
                return _detach(item)
        return None

    async def find_by_license_key(self, license_key: str) -> Optional[ResourceItem]:
        for item in self.store.items.values():
            if item.license_key == license_key:
                return _detach(item)
        return None

    async def get_all(
        self,
        resource_id: Optional[str] = None,
        status: Optional[ItemStatus] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[ResourceItem], int]:
        rows = list(self.store.items.values())
        if resource_id:
            rows = [i for i in rows if i.resource_id == resource_id]
        if status:
            rows = [i for i in rows if i.status == status]
        if search:
            needle = search.lower()
            rows = [
                i for i in rows
                if any(needle in (v or "").lower() for v in (i.serial_number, i.license_key, i.hostname))
            ]
        rows.sort(key=lambda i: i.created_at, reverse=True)
        return _detach(_page(rows, page, limit)), len(rows)

    async def update(self, item: ResourceItem) -> ResourceItem:
        if item.id not in self.store.items:
            raise ValueError(f"Item with ID '{item.id}' not found")
        self._check_unique(item)
        self.store.items[item.id] = _detach(item)
        return _detach(item)

    async def delete(self, item_id: str) -> bool:
        if item_id not in self.store.items:
            return False
        del self.store.items[item_id]
        for assignment in list(self.store.assignments.values()):
            if assignment.item_id == item_id:
                self.store.assignments[assignment.id] = replace(assignment, item_id=None)
        return True


class AssignmentRepositoryImpl(AssignmentRepository):
    """Assignment repository implementation with in-memory storage.

    Mirrors the partial unique indexes of the SQL schema.
    """

    def __init__(self, store: InMemoryStore):
        self.store = store

    def _check_unique(self, assignment: Assignment) -> None:
        if not assignment.is_active:
            return
        for other in self.store.assignments.values():
            if other.id == assignment.id or not other.is_active:
                continue
            if assignment.item_id and other.item_id == assignment.item_id:
                raise ConcurrencyConflictError(f"Item {assignment.item_id} already has an active assignment")
            if (
                not assignment.item_id
                and not other.item_id
                and other.resource_id == assignment.resource_id
                and other.employee_id == assignment.employee_id
            ):
                raise ConcurrencyConflictError(
                    f"Employee {assignment.employee_id} already holds resource {assignment.resource_id}"
                )

    async def create(self, assignment: Assignment) -> Assignment:
        self._check_unique(assignment)
        self.store.assignments[assignment.id] = _detach(assignment)
        return _detach(assignment)

    async def get_by_id(self, assignment_id: str) -> Optional[Assignment]:
        return _detach(self.store.assignments.get(assignment_id))

    async def get_active_by_resource(self, resource_id: str) -> List[Assignment]:
        rows = [a for a in self.store.assignments.values() if a.resource_id == resource_id and a.is_active]
        return _detach(sorted(rows, key=lambda a: a.assigned_at))

    async def get_active_by_item(self, item_id: str) -> List[Assignment]:
        return [_detach(a) for a in self.store.assignments.values() if a.item_id == item_id and a.is_active]

    async def get_all(
        self,
        resource_id: Optional[str] = None,
        employee_id: Optional[str] = None,
        status: Optional[AssignmentStatus] = None,
        category: Optional[AssignmentCategory] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Assignment], int]:
        rows = [
            a for a in self.store.assignments.values()
            if (not resource_id or a.resource_id == resource_id)
            and (not employee_id or a.employee_id == employee_id)
            and (not status or a.status == status)
            and (not category or a.category == category)
        ]
        rows.sort(key=lambda a: a.assigned_at, reverse=True)
        return _detach(_page(rows, page, limit)), len(rows)

    async def update(self, assignment: Assignment) -> Assignment:
        if assignment.id not in self.store.assignments:
            raise ValueError(f"Assignment with ID '{assignment.id}' not found")
        self._check_unique(assignment)
        self.store.assignments[assignment.id] = _detach(assignment)
        return _detach(assignment)


class EmployeeRepositoryImpl(EmployeeRepository):
    """Employee repository implementation with in-memory storage"""

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def create(self, employee: Employee) -> Employee:
        self.store.employees[employee.id] = _detach(employee)
        return _detach(employee)

    async def get_by_id(self, employee_id: str) -> Optional[Employee]:
        return _detach(self.store.employees.get(employee_id))

    async def get_by_email(self, email: str) -> Optional[Employee]:
        for employee in self.store.employees.values():
            if employee.email.lower() == email.lower():
                return _detach(employee)
        return None

    async def get_all(self) -> List[Employee]:
        return [_detach(e) for e in sorted(self.store.employees.values(), key=lambda e: e.name)]


class ApprovalRepositoryImpl(ApprovalRepository):
    """Approval repository implementation with in-memory storage"""

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def create(self, approval: AssignmentApproval) -> AssignmentApproval:
        self.store.approvals[approval.id] = _detach(approval)
        return _detach(approval)

    async def get_by_id(self, approval_id: str) -> Optional[AssignmentApproval]:
        return _detach(self.store.approvals.get(approval_id))

    async def get_pending_by_approver(self, approver_id: Optional[str] = None) -> List[AssignmentApproval]:
        rows = [
            a for a in self.store.approvals.values()
            if a.is_pending and (approver_id is None or a.approver_id == approver_id)
        ]
        return _detach(sorted(rows, key=lambda a: a.created_at))

    async def update(self, approval: AssignmentApproval) -> AssignmentApproval:
        if approval.id not in self.store.approvals:
            raise ValueError(f"Approval with ID '{approval.id}' not found")
        self.store.approvals[approval.id] = _detach(approval)
        return _detach(approval)


class ActivityLogRepositoryImpl(ActivityLogRepository):
    """Appends entries to the store"""

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def record_audit(self, entry: AuditEntry) -> None:
        self.store.audit_log.append(copy.deepcopy(entry))

    async def record_timeline(self, entry: TimelineEntry) -> None:
        self.store.timeline.append(copy.deepcopy(entry))


class InMemoryUnitOfWork(UnitOfWork):
    """Serializes units through the store lock; rollback restores a snapshot"""

    def __init__(self, store: InMemoryStore):
        self.store = store
        self.resources = ResourceRepositoryImpl(store)
        self.items = ResourceItemRepositoryImpl(store)
        self.assignments = AssignmentRepositoryImpl(store)
        self.employees = EmployeeRepositoryImpl(store)
        self.activity = ActivityLogRepositoryImpl(store)
        self.approvals = ApprovalRepositoryImpl(store)
        self._snapshot = None
        self.committed = False

    async def __aenter__(self) -> "InMemoryUnitOfWork":
        await self.store.lock.acquire()
        self._snapshot = self.store.snapshot()
        self.committed = False
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await self.rollback()
        finally:
            self.store.lock.release()

    async def commit(self) -> None:
        self._snapshot = None
        self.committed = True

    async def rollback(self) -> None:
        if self._snapshot is not None:
            self.store.restore(self._snapshot)
            self._snapshot = None
