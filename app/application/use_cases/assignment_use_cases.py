"""Assignment use cases: create assignments and move them through their lifecycle"""
import json
import logging
import math
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Union

from app.application.dto.assignment_dto import (
    AssignmentCreateDTO,
    AssignmentListDTO,
    AssignmentResponseDTO,
    AssignmentResultDTO,
    AssignmentReturnDTO,
    AssignmentStatusUpdateDTO,
    ItemAssignabilityDTO,
    PaginationDTO,
    SharedResourceUserDTO,
    ValidationResultDTO,
)
from app.application.use_cases.activity_recorder import record_activity
from app.application.use_cases.retry import with_retry
from app.domain.entities.activity import ActivityType, AuditEntry, EntityType, TimelineEntry
from app.domain.entities.assignment import (
    RETURN_CONDITION_STATUS,
    Assignment,
    AssignmentCategory,
    AssignmentStatus,
    ReturnCondition,
    can_transition,
)
from app.domain.entities.item import ItemStatus, ResourceItem, item_status_after
from app.domain.entities.resource import AllocationMode
from app.domain.errors import ErrorCode
from app.domain.repositories.unit_of_work import UnitOfWork
from app.domain.services.assignment_validator import (
    AssignmentRequest,
    ResourceSnapshot,
    ValidationOutcome,
    check_item_assignable,
    validate_assignment,
)

logger = logging.getLogger(__name__)

UnitOfWorkFactory = Callable[[], UnitOfWork]


class AssignmentUseCases:
    """Use cases for assignment operations.

    Every write runs validate-then-commit inside one unit of work that locks
    the resource row. A ``ConcurrencyConflictError`` from the store reruns the
    whole unit up to ``max_retries`` more times before giving up.
    """

    def __init__(self, unit_of_work_factory: UnitOfWorkFactory, max_retries: int = 1):
        self.unit_of_work_factory = unit_of_work_factory
        self.max_retries = max_retries

    # ------------------------------------------------------------------
    # validation / creation
    # ------------------------------------------------------------------

    async def validate_assignment(self, data: AssignmentCreateDTO) -> ValidationResultDTO:
        """Dry run: would this assignment be accepted right now?"""
        request = self._to_request(data)
        async with self.unit_of_work_factory() as uow:
            snapshot = await self._load_snapshot(uow, request, lock=False)
        outcome = validate_assignment(snapshot, self._auto_select(snapshot, request, data.auto_select_item))
        return ValidationResultDTO(
            is_valid=outcome.is_valid,
            assignment_type=outcome.category,
            allocation_mode=outcome.allocation_mode.value if outcome.allocation_mode else None,
            error=outcome.error,
            error_code=outcome.error_code,
            current_assignments=outcome.current_assignments,
            max_capacity=outcome.max_capacity,
        )

    async def create_assignment(self, data: AssignmentCreateDTO, assigned_by: Optional[str]) -> AssignmentResultDTO:
        """Validate and commit a new assignment"""
        return await self._with_retry(
            lambda: self._create_once(data, assigned_by),
            ErrorCode.ASSIGNMENT_CREATION_FAILED,
            "create assignment",
        )

    async def _create_once(self, data: AssignmentCreateDTO, assigned_by: Optional[str]) -> AssignmentResultDTO:
        async with self.unit_of_work_factory() as uow:
            result = await self.create_within(uow, data, assigned_by)
            if not result.success:
                return result
            await uow.commit()

        created = result.assignment
        logger.info(
            "Assignment %s created: resource=%s employee=%s item=%s type=%s",
            created.id, created.resource_id, created.employee_id, created.item_id, created.assignment_type.value,
        )
        return result

    async def create_within(
        self, uow: UnitOfWork, data: AssignmentCreateDTO, assigned_by: Optional[str]
    ) -> AssignmentResultDTO:
        """Validate and stage a new assignment inside an open unit of work; the caller commits"""
        request = self._to_request(data)
        snapshot = await self._load_snapshot(uow, request, lock=True)
        request = self._auto_select(snapshot, request, data.auto_select_item)

        outcome = validate_assignment(snapshot, request)
        if not outcome.is_valid:
            logger.info(
                "Assignment rejected: resource=%s employee=%s code=%s",
                request.resource_id, request.employee_id, outcome.error_code.value,
            )
            return self._rejected(outcome)

        assignment = Assignment(
            id=str(uuid.uuid4()),
            resource_id=request.resource_id,
            employee_id=request.employee_id,
            item_id=request.item_id,
            category=outcome.category,
            status=AssignmentStatus.ACTIVE,
            quantity=request.quantity,
            assigned_by=assigned_by,
            assigned_at=datetime.utcnow(),
            notes=request.notes,
        )
        created = await uow.assignments.create(assignment)

        item = snapshot.find_item(request.item_id)
        if item is not None:
            item.status = ItemStatus.ASSIGNED
            item.updated_at = datetime.utcnow()
            await uow.items.update(item)

        await record_activity(uow, *self._creation_events(snapshot, created, item, assigned_by))
        return AssignmentResultDTO(success=True, assignment=self._assignment_to_dto(created))

    # ------------------------------------------------------------------
    # status transitions
    # ------------------------------------------------------------------

    async def update_assignment_status(
        self,
        assignment_id: str,
        update: AssignmentStatusUpdateDTO,
        updated_by: Optional[str],
    ) -> AssignmentResultDTO:
        """Move an assignment along ACTIVE -> RETURNED/LOST/DAMAGED, DAMAGED -> RETURNED"""
        return await self._with_retry(
            lambda: self._transition_once(
                assignment_id,
                update.status,
                updated_by,
                returned_quantity=update.returned_quantity,
                reason=update.reason,
                notes=update.notes,
                returned_at=update.returned_at,
            ),
            ErrorCode.UPDATE_FAILED,
            "update assignment",
        )

    async def return_assignment(
        self,
        assignment_id: str,
        data: AssignmentReturnDTO,
        returned_by: Optional[str],
    ) -> AssignmentResultDTO:
        """Hand a resource back; the condition decides where the item goes"""
        return await self._with_retry(
            lambda: self._transition_once(
                assignment_id,
                RETURN_CONDITION_STATUS[data.condition],
                returned_by,
                returned_quantity=data.returned_quantity,
                reason=data.reason,
                notes=f"Return Notes: {data.notes}" if data.notes else None,
                condition=data.condition,
            ),
            ErrorCode.UPDATE_FAILED,
            "return assignment",
        )

    async def mark_lost(
        self,
        assignment_id: str,
        updated_by: Optional[str],
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> AssignmentResultDTO:
        update = AssignmentStatusUpdateDTO(status=AssignmentStatus.LOST, reason=reason, notes=notes)
        return await self.update_assignment_status(assignment_id, update, updated_by)

    async def mark_damaged(
        self,
        assignment_id: str,
        updated_by: Optional[str],
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> AssignmentResultDTO:
        update = AssignmentStatusUpdateDTO(status=AssignmentStatus.DAMAGED, reason=reason, notes=notes)
        return await self.update_assignment_status(assignment_id, update, updated_by)

    async def revoke_assignment(self, assignment_id: str, revoked_by: Optional[str], reason: str) -> AssignmentResultDTO:
        """Administrator-forced return; the reason is mandatory"""
        if not reason or not reason.strip():
            return AssignmentResultDTO(
                success=False,
                error="A reason is required to revoke an assignment",
                error_code=ErrorCode.REASON_REQUIRED,
            )
        reason = reason.strip()
        update = AssignmentStatusUpdateDTO(
            status=AssignmentStatus.RETURNED,
            reason=reason,
            notes=f"Revoked: {reason}",
        )
        return await self.update_assignment_status(assignment_id, update, revoked_by)

    async def _transition_once(
        self,
        assignment_id: str,
        new_status: AssignmentStatus,
        updated_by: Optional[str],
        returned_quantity: Optional[int] = None,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        returned_at: Optional[datetime] = None,
        condition: Optional[ReturnCondition] = None,
    ) -> AssignmentResultDTO:
        async with self.unit_of_work_factory() as uow:
            existing = await uow.assignments.get_by_id(assignment_id)
            if existing is None:
                return self._failure(ErrorCode.ASSIGNMENT_NOT_FOUND, "Assignment not found")

            # serialize with creates on the same resource, then re-read
            resource = await uow.resources.get_for_update(existing.resource_id)
            existing = await uow.assignments.get_by_id(assignment_id)
            if existing is None:
                return self._failure(ErrorCode.ASSIGNMENT_NOT_FOUND, "Assignment not found")

            current_status = existing.status
            if not can_transition(current_status, new_status):
                return self._failure(
                    ErrorCode.INVALID_STATUS_TRANSITION,
                    f"Cannot transition from {current_status.value} to {new_status.value}",
                )

            when = returned_at or datetime.utcnow()
            employee = await uow.employees.get_by_id(existing.employee_id)
            resource_name = resource.name if resource else existing.resource_id
            employee_name = employee.name if employee else existing.employee_id

            if returned_quantity is not None and returned_quantity != existing.quantity:
                return await self._split_once(
                    uow, existing, new_status, returned_quantity, updated_by,
                    reason, notes, when, resource_name, employee_name,
                )

            existing.status = new_status
            existing.returned_at = when
            existing.updated_at = datetime.utcnow()
            if reason:
                existing.return_reason = reason
            existing.append_notes(notes)
            updated = await uow.assignments.update(existing)

            item = None
            if existing.item_id:
                item = await uow.items.get_by_id(existing.item_id)
                holders = await uow.assignments.get_active_by_item(existing.item_id)
                if any(a.id != existing.id for a in holders):
                    # repaired and handed to someone else since this assignment left ACTIVE
                    logger.info(
                        "Item %s is held by another assignment; leaving its status as %s",
                        existing.item_id, item.status.value if item else None,
                    )
                    item = None
                if item is not None:
                    item.status = item_status_after(new_status, maintenance=condition == ReturnCondition.MAINTENANCE)
                    item.updated_at = datetime.utcnow()
                    await uow.items.update(item)

            await record_activity(
                uow,
                AuditEntry(
                    entity_type=EntityType.RESOURCE,
                    entity_id=existing.resource_id,
                    changed_by_id=updated_by,
                    field_changed="assignmentStatus",
                    old_value=current_status.value,
                    new_value=new_status.value,
                    resource_id=existing.resource_id,
                    assignment_id=existing.id,
                ),
                TimelineEntry(
                    entity_type=EntityType.RESOURCE,
                    entity_id=existing.resource_id,
                    activity_type=ActivityType.STATUS_CHANGED,
                    title=f"Assignment status changed to {new_status.value}",
                    description=(
                        f"{resource_name} assignment for {employee_name} changed from "
                        f"{current_status.value} to {new_status.value}"
                    ),
                    performed_by=updated_by,
                    resource_id=existing.resource_id,
                    assignment_id=existing.id,
                    employee_id=existing.employee_id,
                    metadata={
                        "previousStatus": current_status.value,
                        "newStatus": new_status.value,
                        "reason": reason,
                        "notes": notes,
                        "returnCondition": condition.value if condition else None,
                        "itemStatus": item.status.value if item else None,
                    },
                ),
                TimelineEntry(
                    entity_type=EntityType.EMPLOYEE,
                    entity_id=existing.employee_id,
                    activity_type=ActivityType.UPDATED,
                    title=f"{resource_name} {new_status.value.lower()}",
                    description=f"{employee_name}: {resource_name} is now {new_status.value}"
                    + (f". Reason: {reason}" if reason else ""),
                    performed_by=updated_by,
                    resource_id=existing.resource_id,
                    assignment_id=existing.id,
                    employee_id=existing.employee_id,
                ),
            )
            await uow.commit()

        logger.info(
            "Assignment %s moved %s -> %s by %s",
            updated.id, current_status.value, new_status.value, updated_by,
        )
        return AssignmentResultDTO(success=True, assignment=self._assignment_to_dto(updated))

    async def _split_once(
        self,
        uow: UnitOfWork,
        existing: Assignment,
        new_status: AssignmentStatus,
        returned_quantity: int,
        updated_by: Optional[str],
        reason: Optional[str],
        notes: Optional[str],
        when: datetime,
        resource_name: str,
        employee_name: str,
    ) -> AssignmentResultDTO:
        """Partial return: shrink the active assignment, record the returned part separately"""
        if existing.status != AssignmentStatus.ACTIVE:
            return self._failure(ErrorCode.INVALID_QUANTITY, "Only active assignments can be partially returned")
        if existing.item_id:
            return self._failure(ErrorCode.INVALID_QUANTITY, "Item assignments cannot be partially returned")
        if returned_quantity < 1 or returned_quantity > existing.quantity:
            return self._failure(
                ErrorCode.INVALID_QUANTITY,
                f"Returned quantity must be between 1 and {existing.quantity}",
            )

        previous_quantity = existing.quantity
        existing.quantity = previous_quantity - returned_quantity
        existing.updated_at = datetime.utcnow()
        remaining = await uow.assignments.update(existing)

        returned = await uow.assignments.create(
            Assignment(
                id=str(uuid.uuid4()),
                resource_id=existing.resource_id,
                employee_id=existing.employee_id,
                category=existing.category,
                status=new_status,
                quantity=returned_quantity,
                assigned_by=existing.assigned_by,
                assigned_at=existing.assigned_at,
                returned_at=when,
                return_reason=reason,
                notes=notes,
                split_from_id=existing.id,
            )
        )

        await record_activity(
            uow,
            AuditEntry(
                entity_type=EntityType.RESOURCE,
                entity_id=existing.resource_id,
                changed_by_id=updated_by,
                field_changed="quantityAssigned",
                old_value=str(previous_quantity),
                new_value=str(remaining.quantity),
                resource_id=existing.resource_id,
                assignment_id=existing.id,
            ),
            TimelineEntry(
                entity_type=EntityType.RESOURCE,
                entity_id=existing.resource_id,
                activity_type=ActivityType.UPDATED,
                title=f"{resource_name} partially returned by {employee_name}",
                description=(
                    f"{returned_quantity} of {previous_quantity} units marked {new_status.value}"
                    + (f". Reason: {reason}" if reason else "")
                ),
                performed_by=updated_by,
                resource_id=existing.resource_id,
                assignment_id=existing.id,
                employee_id=existing.employee_id,
                metadata={
                    "returnedQuantity": returned_quantity,
                    "remainingQuantity": remaining.quantity,
                    "returnedAssignmentId": returned.id,
                    "newStatus": new_status.value,
                },
            ),
        )
        await uow.commit()

        logger.info(
            "Assignment %s partially returned: %d of %d units -> %s (record %s)",
            existing.id, returned_quantity, previous_quantity, new_status.value, returned.id,
        )
        return AssignmentResultDTO(
            success=True,
            assignment=self._assignment_to_dto(remaining),
            returned_assignment=self._assignment_to_dto(returned),
        )

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    async def get_assignment(self, assignment_id: str) -> Optional[AssignmentResponseDTO]:
        """Get assignment by ID"""
        async with self.unit_of_work_factory() as uow:
            assignment = await uow.assignments.get_by_id(assignment_id)
        if not assignment:
            return None
        return self._assignment_to_dto(assignment)

    async def get_assignments(
        self,
        resource_id: Optional[str] = None,
        employee_id: Optional[str] = None,
        status: Optional[AssignmentStatus] = None,
        category: Optional[AssignmentCategory] = None,
        page: int = 1,
        limit: int = 20,
    ) -> AssignmentListDTO:
        """Get a filtered page of assignments, newest first"""
        page = max(1, page)
        limit = max(1, limit)
        async with self.unit_of_work_factory() as uow:
            assignments, total = await uow.assignments.get_all(
                resource_id=resource_id,
                employee_id=employee_id,
                status=status,
                category=category,
                page=page,
                limit=limit,
            )
        return AssignmentListDTO(
            assignments=[self._assignment_to_dto(a) for a in assignments],
            pagination=PaginationDTO(
                page=page,
                limit=limit,
                total=total,
                total_pages=math.ceil(total / limit),
            ),
        )

    async def get_shared_resource_users(self, resource_id: str) -> List[SharedResourceUserDTO]:
        """Employees currently holding a seat on a shared resource, first come first"""
        async with self.unit_of_work_factory() as uow:
            resource = await uow.resources.get_by_id(resource_id)
            if resource is None:
                return []
            active = await uow.assignments.get_active_by_resource(resource_id)
            users = []
            for assignment in active:
                if resource.allocation_mode != AllocationMode.SHARED and assignment.category != AssignmentCategory.SHARED:
                    continue
                employee = await uow.employees.get_by_id(assignment.employee_id)
                if employee is None:
                    continue
                users.append(
                    SharedResourceUserDTO(
                        id=employee.id,
                        name=employee.name,
                        email=employee.email,
                        department=employee.department,
                        assigned_at=assignment.assigned_at,
                        assignment_id=assignment.id,
                    )
                )
        return users

    async def can_assign_item(self, item_id: str) -> ItemAssignabilityDTO:
        """Whether an item could be assigned right now"""
        async with self.unit_of_work_factory() as uow:
            item = await uow.items.get_by_id(item_id)
            active = await uow.assignments.get_active_by_item(item_id) if item else []
        check = check_item_assignable(item, active)
        return ItemAssignabilityDTO(can_assign=check.can_assign, reason=check.reason)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    async def _with_retry(
        self,
        operation: Callable[[], Awaitable[AssignmentResultDTO]],
        failure_code: ErrorCode,
        label: str,
    ) -> AssignmentResultDTO:
        return await with_retry(
            operation,
            self.max_retries,
            label,
            lambda: self._failure(failure_code, f"Failed to {label}: concurrent modification, please retry"),
        )

    @staticmethod
    async def _load_snapshot(uow: UnitOfWork, request: AssignmentRequest, lock: bool) -> ResourceSnapshot:
        if lock:
            resource = await uow.resources.get_for_update(request.resource_id)
        else:
            resource = await uow.resources.get_by_id(request.resource_id)
        employee = await uow.employees.get_by_id(request.employee_id)
        if resource is None:
            return ResourceSnapshot(resource=None, employee=employee)
        return ResourceSnapshot(
            resource=resource,
            employee=employee,
            items=await uow.items.get_by_resource(resource.id),
            active_assignments=await uow.assignments.get_active_by_resource(resource.id),
        )

    @staticmethod
    def _auto_select(snapshot: ResourceSnapshot, request: AssignmentRequest, enabled: bool) -> AssignmentRequest:
        """Pick the oldest available item when the caller asked us to choose"""
        if not enabled or request.item_id or snapshot.resource is None:
            return request
        if snapshot.resource.allocation_mode != AllocationMode.EXCLUSIVE:
            return request
        busy = {a.item_id for a in snapshot.active_assignments}
        for item in snapshot.available_items:
            if item.id not in busy:
                return replace(request, item_id=item.id)
        return request

    @staticmethod
    def _creation_events(
        snapshot: ResourceSnapshot,
        assignment: Assignment,
        item: Optional[ResourceItem],
        assigned_by: Optional[str],
    ) -> List[Union[AuditEntry, TimelineEntry]]:
        resource = snapshot.resource
        employee = snapshot.employee
        if item is not None:
            description = f"Item {item.external_id} assigned"
        else:
            description = f"{assignment.quantity} seat(s) assigned ({assignment.category.value.lower()})"
        return [
            AuditEntry(
                entity_type=EntityType.RESOURCE,
                entity_id=resource.id,
                changed_by_id=assigned_by,
                field_changed="assigned",
                new_value=json.dumps({
                    "assignmentId": assignment.id,
                    "employeeId": employee.id,
                    "employeeName": employee.name,
                    "itemId": item.id if item else None,
                    "serialNumber": item.serial_number if item else None,
                    "licenseKey": item.license_key if item else None,
                    "quantity": assignment.quantity,
                }),
                resource_id=resource.id,
                assignment_id=assignment.id,
            ),
            TimelineEntry(
                entity_type=EntityType.RESOURCE,
                entity_id=resource.id,
                activity_type=ActivityType.ASSIGNED,
                title=f"{resource.name} assigned to {employee.name}",
                description=description,
                performed_by=assigned_by,
                resource_id=resource.id,
                assignment_id=assignment.id,
                employee_id=employee.id,
                metadata={
                    "assignmentId": assignment.id,
                    "employeeName": employee.name,
                    "employeeDepartment": employee.department,
                    "assignmentType": assignment.category.value,
                    "itemDetails": {
                        "serialNumber": item.serial_number,
                        "hostname": item.hostname,
                        "licenseKey": item.license_key,
                    } if item else None,
                    "notes": assignment.notes,
                },
            ),
        ]

    @staticmethod
    def _to_request(data: AssignmentCreateDTO) -> AssignmentRequest:
        return AssignmentRequest(
            resource_id=data.resource_id,
            employee_id=data.employee_id,
            item_id=data.item_id or None,
            requested_category=data.assignment_type,
            quantity=data.quantity,
            notes=data.notes,
        )

    @staticmethod
    def _rejected(outcome: ValidationOutcome) -> AssignmentResultDTO:
        return AssignmentResultDTO(
            success=False,
            error=outcome.error,
            error_code=outcome.error_code,
            current_assignments=outcome.current_assignments,
            max_capacity=outcome.max_capacity,
        )

    @staticmethod
    def _failure(error_code: ErrorCode, error: str) -> AssignmentResultDTO:
        return AssignmentResultDTO(success=False, error=error, error_code=error_code)

    @staticmethod
    def _assignment_to_dto(assignment: Assignment) -> AssignmentResponseDTO:
        """Convert Assignment entity to AssignmentResponseDTO"""
        return AssignmentResponseDTO(
            id=assignment.id,
            resource_id=assignment.resource_id,
            employee_id=assignment.employee_id,
            item_id=assignment.item_id,
            assignment_type=assignment.category,
            status=assignment.status,
            quantity=assignment.quantity,
            assigned_by=assignment.assigned_by,
            assigned_at=assignment.assigned_at,
            returned_at=assignment.returned_at,
            return_reason=assignment.return_reason,
            notes=assignment.notes,
            split_from_id=assignment.split_from_id,
        )
