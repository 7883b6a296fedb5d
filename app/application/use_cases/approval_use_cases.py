"""Approval use cases: request an assignment, then approve or reject it"""
import json
import logging
import uuid
from datetime import datetime
from typing import Callable, List, Optional, Union

from app.application.dto.approval_dto import (
    ApprovalCreateDTO,
    ApprovalDecisionDTO,
    ApprovalResponseDTO,
    ApprovalResultDTO,
)
from app.application.dto.assignment_dto import AssignmentCreateDTO
from app.application.use_cases.activity_recorder import record_activity
from app.application.use_cases.assignment_use_cases import AssignmentUseCases
from app.application.use_cases.retry import with_retry
from app.domain.entities.activity import ActivityType, AuditEntry, EntityType, TimelineEntry
from app.domain.entities.approval import ApprovalAction, ApprovalStatus, AssignmentApproval
from app.domain.errors import ErrorCode
from app.domain.repositories.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class ApprovalUseCases:
    """Use cases for the assignment approval workflow.

    A request names one approver. Approving runs the regular assignment
    creation, validator included, in the same unit of work as the status
    change. Deciding who may approve what (managers, custodians, escalation)
    is the caller's business: the request carries the approver it was given.
    """

    def __init__(self, unit_of_work_factory: Callable[[], UnitOfWork], assignment_use_cases: AssignmentUseCases):
        self.unit_of_work_factory = unit_of_work_factory
        self.assignment_use_cases = assignment_use_cases

    async def request_assignment(self, data: ApprovalCreateDTO, requested_by: Optional[str]) -> ApprovalResultDTO:
        """Open a PENDING request for an assignment"""
        async with self.unit_of_work_factory() as uow:
            employee = await uow.employees.get_by_id(data.employee_id)
            if not employee:
                return self._failure(ErrorCode.EMPLOYEE_NOT_FOUND, "Employee not found")
            resource = await uow.resources.get_by_id(data.resource_id)
            if not resource:
                return self._failure(ErrorCode.RESOURCE_NOT_FOUND, "Resource not found")

            approver_id = data.approver_id or resource.custodian_id
            if not approver_id:
                return self._failure(
                    ErrorCode.APPROVER_REQUIRED,
                    f"No approver given and {resource.name} has no custodian",
                )

            approval = await uow.approvals.create(
                AssignmentApproval(
                    id=str(uuid.uuid4()),
                    resource_id=resource.id,
                    employee_id=employee.id,
                    approver_id=approver_id,
                    item_id=data.item_id or None,
                    quantity=data.quantity,
                    assignment_type=data.assignment_type,
                    auto_select_item=data.auto_select_item,
                    requested_by=requested_by,
                    justification=data.justification,
                    urgency=data.urgency,
                )
            )
            await record_activity(uow, *self._request_events(approval, resource.name, employee.name))
            await uow.commit()

        logger.info(
            "Approval %s requested: resource=%s employee=%s approver=%s",
            approval.id, approval.resource_id, approval.employee_id, approval.approver_id,
        )
        return ApprovalResultDTO(success=True, approval=self._approval_to_dto(approval))

    async def decide(
        self,
        approval_id: str,
        decision: ApprovalDecisionDTO,
        decided_by: Optional[str],
    ) -> ApprovalResultDTO:
        """Approve or reject a pending request; only its approver may decide"""
        return await with_retry(
            lambda: self._decide_once(approval_id, decision, decided_by),
            self.assignment_use_cases.max_retries,
            "decide approval",
            lambda: self._failure(
                ErrorCode.UPDATE_FAILED, "Failed to decide approval: concurrent modification, please retry"
            ),
        )

    async def _decide_once(
        self,
        approval_id: str,
        decision: ApprovalDecisionDTO,
        decided_by: Optional[str],
    ) -> ApprovalResultDTO:
        async with self.unit_of_work_factory() as uow:
            approval = await uow.approvals.get_by_id(approval_id)
            if not approval:
                return self._failure(ErrorCode.APPROVAL_NOT_FOUND, "Approval not found")

            # the resource lock serializes deciders; re-read the request under it
            await uow.resources.get_for_update(approval.resource_id)
            approval = await uow.approvals.get_by_id(approval_id)

            if not approval.is_pending:
                return self._failure(
                    ErrorCode.APPROVAL_NOT_PENDING,
                    f"Approval is already {approval.status.value.lower()}",
                    approval,
                )
            if decided_by is None or decided_by != approval.approver_id:
                return self._failure(
                    ErrorCode.NOT_APPROVER, "Only the assigned approver can decide this request", approval,
                )

            assignment = None
            if decision.action == ApprovalAction.APPROVE:
                notes = f"Approved via workflow {approval.id}."
                if decision.comments:
                    notes = f"{notes} {decision.comments}"
                created = await self.assignment_use_cases.create_within(
                    uow,
                    AssignmentCreateDTO(
                        resource_id=approval.resource_id,
                        employee_id=approval.employee_id,
                        item_id=approval.item_id,
                        assignment_type=approval.assignment_type,
                        quantity=approval.quantity,
                        notes=notes,
                        auto_select_item=approval.auto_select_item,
                    ),
                    decided_by,
                )
                if not created.success:
                    logger.info(
                        "Approval %s left pending: assignment rejected with %s",
                        approval.id, created.error_code.value if created.error_code else None,
                    )
                    return ApprovalResultDTO(
                        success=False,
                        approval=self._approval_to_dto(approval),
                        error=created.error,
                        error_code=created.error_code,
                        current_assignments=created.current_assignments,
                        max_capacity=created.max_capacity,
                    )
                assignment = created.assignment
                approval.status = ApprovalStatus.APPROVED
                approval.assignment_id = assignment.id
            else:
                approval.status = ApprovalStatus.REJECTED

            approval.comments = decision.comments
            approval.decided_at = datetime.utcnow()
            approval.updated_at = approval.decided_at
            approval = await uow.approvals.update(approval)
            await record_activity(uow, *self._decision_events(approval, decision, decided_by))
            await uow.commit()

        logger.info("Approval %s %s by %s", approval.id, approval.status.value, decided_by)
        return ApprovalResultDTO(success=True, approval=self._approval_to_dto(approval), assignment=assignment)

    async def get_approval(self, approval_id: str) -> Optional[ApprovalResponseDTO]:
        """Get approval by ID"""
        async with self.unit_of_work_factory() as uow:
            approval = await uow.approvals.get_by_id(approval_id)
        if not approval:
            return None
        return self._approval_to_dto(approval)

    async def get_pending_approvals(self, approver_id: Optional[str] = None) -> List[ApprovalResponseDTO]:
        """Pending requests, optionally only those waiting on one approver"""
        async with self.unit_of_work_factory() as uow:
            approvals = await uow.approvals.get_pending_by_approver(approver_id)
        return [self._approval_to_dto(a) for a in approvals]

    @staticmethod
    def _request_events(
        approval: AssignmentApproval, resource_name: str, employee_name: str
    ) -> List[Union[AuditEntry, TimelineEntry]]:
        return [
            AuditEntry(
                entity_type=EntityType.APPROVAL_WORKFLOW,
                entity_id=approval.id,
                changed_by_id=approval.requested_by,
                field_changed="created",
                new_value=json.dumps({
                    "type": "RESOURCE_ASSIGNMENT",
                    "resourceId": approval.resource_id,
                    "employeeId": approval.employee_id,
                    "approverId": approval.approver_id,
                }),
                resource_id=approval.resource_id,
            ),
            TimelineEntry(
                entity_type=EntityType.APPROVAL_WORKFLOW,
                entity_id=approval.id,
                activity_type=ActivityType.WORKFLOW_STARTED,
                title="Resource assignment approval requested",
                description=f"Approval requested for assigning {resource_name} to {employee_name}",
                performed_by=approval.requested_by,
                resource_id=approval.resource_id,
                employee_id=approval.employee_id,
                metadata={
                    "approvalId": approval.id,
                    "approverId": approval.approver_id,
                    "justification": approval.justification,
                    "urgency": approval.urgency,
                },
            ),
        ]

    @staticmethod
    def _decision_events(
        approval: AssignmentApproval, decision: ApprovalDecisionDTO, decided_by: Optional[str]
    ) -> List[Union[AuditEntry, TimelineEntry]]:
        verb = "approved" if approval.status == ApprovalStatus.APPROVED else "rejected"
        return [
            AuditEntry(
                entity_type=EntityType.APPROVAL_WORKFLOW,
                entity_id=approval.id,
                changed_by_id=decided_by,
                field_changed="status",
                old_value=ApprovalStatus.PENDING.value,
                new_value=approval.status.value,
                resource_id=approval.resource_id,
                assignment_id=approval.assignment_id,
            ),
            TimelineEntry(
                entity_type=EntityType.APPROVAL_WORKFLOW,
                entity_id=approval.id,
                activity_type=(
                    ActivityType.APPROVED if approval.status == ApprovalStatus.APPROVED else ActivityType.REJECTED
                ),
                title=f"Resource assignment {verb}",
                description=f"Assignment request {verb}" + (f": {decision.comments}" if decision.comments else ""),
                performed_by=decided_by,
                resource_id=approval.resource_id,
                assignment_id=approval.assignment_id,
                employee_id=approval.employee_id,
                metadata={
                    "action": decision.action.value,
                    "comments": decision.comments,
                    "assignmentId": approval.assignment_id,
                },
            ),
        ]

    @staticmethod
    def _failure(
        error_code: ErrorCode, error: str, approval: Optional[AssignmentApproval] = None
    ) -> ApprovalResultDTO:
        return ApprovalResultDTO(
            success=False,
            error=error,
            error_code=error_code,
            approval=ApprovalUseCases._approval_to_dto(approval) if approval else None,
        )

    @staticmethod
    def _approval_to_dto(approval: AssignmentApproval) -> ApprovalResponseDTO:
        """Convert AssignmentApproval entity to ApprovalResponseDTO"""
        return ApprovalResponseDTO.model_validate(approval)
