"""Approval workflow against the in-memory store"""
import json

from app.application.dto.approval_dto import ApprovalCreateDTO, ApprovalDecisionDTO
from app.application.dto.assignment_dto import AssignmentCreateDTO
from app.application.use_cases.approval_use_cases import ApprovalUseCases
from app.application.use_cases.assignment_use_cases import AssignmentUseCases
from app.domain.entities.activity import ActivityType, EntityType
from app.domain.entities.approval import ApprovalAction, ApprovalStatus
from app.domain.entities.assignment import AssignmentStatus
from app.domain.entities.item import ItemStatus
from app.domain.entities.resource import AllocationMode, Capacity
from app.domain.errors import ConcurrencyConflictError, ErrorCode
from app.infrastructure.repositories.unit_of_work_impl import InMemoryUnitOfWork

from conftest import add_employee, add_item, add_resource, run

APPROVE = ApprovalDecisionDTO(action=ApprovalAction.APPROVE, comments="Go ahead")
REJECT = ApprovalDecisionDTO(action=ApprovalAction.REJECT, comments="Budget freeze")


def _laptop(store):
    resource = add_resource(store, name="ThinkPad X1")
    resource.custodian_id = add_employee(store, "Grace Hopper", "IT").id
    item = add_item(store, resource, serial_number="X1-001")
    return resource, item


def test_request_defaults_approver_to_custodian(store, approval_use_cases):
    resource, item = _laptop(store)
    employee = add_employee(store)

    result = run(approval_use_cases.request_assignment(
        ApprovalCreateDTO(
            resource_id=resource.id, employee_id=employee.id, item_id=item.id,
            justification="New hire", urgency="HIGH",
        ),
        requested_by="hr-1",
    ))

    assert result.success
    approval = result.approval
    assert approval.status == ApprovalStatus.PENDING
    assert approval.approver_id == resource.custodian_id
    assert approval.requested_by == "hr-1"
    assert [a.id for a in run(approval_use_cases.get_pending_approvals(resource.custodian_id))] == [approval.id]
    assert run(approval_use_cases.get_pending_approvals("someone-else")) == []
    # nothing is assigned until the approver decides
    assert store.items[item.id].status == ItemStatus.AVAILABLE
    assert not store.assignments

    audit = store.audit_log[-1]
    assert audit.entity_type == EntityType.APPROVAL_WORKFLOW
    assert audit.field_changed == "created"
    assert json.loads(audit.new_value)["approverId"] == resource.custodian_id
    timeline = store.timeline[-1]
    assert timeline.activity_type == ActivityType.WORKFLOW_STARTED
    assert timeline.description == f"Approval requested for assigning ThinkPad X1 to {employee.name}"


def test_explicit_approver_wins_over_custodian(store, approval_use_cases):
    resource, item = _laptop(store)
    employee = add_employee(store)

    result = run(approval_use_cases.request_assignment(
        ApprovalCreateDTO(resource_id=resource.id, employee_id=employee.id, item_id=item.id, approver_id="mgr-7"),
        requested_by=None,
    ))

    assert result.approval.approver_id == "mgr-7"


def test_request_without_any_approver_is_rejected(store, approval_use_cases):
    resource = add_resource(store)
    employee = add_employee(store)

    result = run(approval_use_cases.request_assignment(
        ApprovalCreateDTO(resource_id=resource.id, employee_id=employee.id), requested_by=None,
    ))

    assert not result.success
    assert result.error_code == ErrorCode.APPROVER_REQUIRED
    assert not store.approvals


def test_request_for_missing_employee_or_resource(store, approval_use_cases):
    resource, _ = _laptop(store)
    employee = add_employee(store)

    missing_employee = run(approval_use_cases.request_assignment(
        ApprovalCreateDTO(resource_id=resource.id, employee_id="nobody"), requested_by=None,
    ))
    missing_resource = run(approval_use_cases.request_assignment(
        ApprovalCreateDTO(resource_id="nothing", employee_id=employee.id), requested_by=None,
    ))

    assert missing_employee.error_code == ErrorCode.EMPLOYEE_NOT_FOUND
    assert missing_resource.error_code == ErrorCode.RESOURCE_NOT_FOUND


def test_approve_creates_assignment(store, approval_use_cases):
    resource, item = _laptop(store)
    employee = add_employee(store)
    approval = run(approval_use_cases.request_assignment(
        ApprovalCreateDTO(resource_id=resource.id, employee_id=employee.id, item_id=item.id), requested_by=None,
    )).approval

    result = run(approval_use_cases.decide(approval.id, APPROVE, resource.custodian_id))

    assert result.success
    assert result.approval.status == ApprovalStatus.APPROVED
    assert result.approval.decided_at is not None
    assert result.approval.comments == "Go ahead"
    assignment = result.assignment
    assert result.approval.assignment_id == assignment.id
    assert assignment.status == AssignmentStatus.ACTIVE
    assert assignment.item_id == item.id
    assert assignment.assigned_by == resource.custodian_id
    assert assignment.notes == f"Approved via workflow {approval.id}. Go ahead"
    assert store.items[item.id].status == ItemStatus.ASSIGNED
    assert run(approval_use_cases.get_pending_approvals()) == []

    decision = [t for t in store.timeline if t.entity_type == EntityType.APPROVAL_WORKFLOW][-1]
    assert decision.activity_type == ActivityType.APPROVED
    assert decision.metadata["assignmentId"] == assignment.id
    status_audit = [a for a in store.audit_log if a.field_changed == "status"][-1]
    assert (status_audit.old_value, status_audit.new_value) == ("PENDING", "APPROVED")


def test_approve_with_auto_selected_item(store, approval_use_cases):
    resource, item = _laptop(store)
    employee = add_employee(store)
    approval = run(approval_use_cases.request_assignment(
        ApprovalCreateDTO(resource_id=resource.id, employee_id=employee.id, auto_select_item=True),
        requested_by=None,
    )).approval

    result = run(approval_use_cases.decide(approval.id, APPROVE, resource.custodian_id))

    assert result.success
    assert result.assignment.item_id == item.id


def test_reject_leaves_inventory_untouched(store, approval_use_cases):
    resource, item = _laptop(store)
    employee = add_employee(store)
    approval = run(approval_use_cases.request_assignment(
        ApprovalCreateDTO(resource_id=resource.id, employee_id=employee.id, item_id=item.id), requested_by=None,
    )).approval

    result = run(approval_use_cases.decide(approval.id, REJECT, resource.custodian_id))

    assert result.success
    assert result.approval.status == ApprovalStatus.REJECTED
    assert result.approval.comments == "Budget freeze"
    assert result.assignment is None
    assert result.approval.assignment_id is None
    assert not store.assignments
    assert store.items[item.id].status == ItemStatus.AVAILABLE
    assert store.timeline[-1].activity_type == ActivityType.REJECTED


def test_only_the_approver_can_decide(store, approval_use_cases):
    resource, item = _laptop(store)
    employee = add_employee(store)
    approval = run(approval_use_cases.request_assignment(
        ApprovalCreateDTO(resource_id=resource.id, employee_id=employee.id, item_id=item.id),
        requested_by=employee.id,
    )).approval

    by_requester = run(approval_use_cases.decide(approval.id, APPROVE, employee.id))
    anonymous = run(approval_use_cases.decide(approval.id, APPROVE, None))

    assert by_requester.error_code == ErrorCode.NOT_APPROVER
    assert anonymous.error_code == ErrorCode.NOT_APPROVER
    assert store.approvals[approval.id].status == ApprovalStatus.PENDING
    assert not store.assignments


def test_decided_request_cannot_be_decided_again(store, approval_use_cases):
    resource, item = _laptop(store)
    employee = add_employee(store)
    approval = run(approval_use_cases.request_assignment(
        ApprovalCreateDTO(resource_id=resource.id, employee_id=employee.id, item_id=item.id), requested_by=None,
    )).approval
    run(approval_use_cases.decide(approval.id, REJECT, resource.custodian_id))

    again = run(approval_use_cases.decide(approval.id, APPROVE, resource.custodian_id))

    assert not again.success
    assert again.error_code == ErrorCode.APPROVAL_NOT_PENDING
    assert again.approval.status == ApprovalStatus.REJECTED
    assert not store.assignments


def test_unknown_approval(approval_use_cases):
    result = run(approval_use_cases.decide("missing", APPROVE, "anyone"))

    assert result.error_code == ErrorCode.APPROVAL_NOT_FOUND
    assert run(approval_use_cases.get_approval("missing")) is None


def test_validator_rejection_keeps_request_pending(store, approval_use_cases, assignment_use_cases):
    resource, item = _laptop(store)
    employee = add_employee(store)
    approval = run(approval_use_cases.request_assignment(
        ApprovalCreateDTO(resource_id=resource.id, employee_id=employee.id, item_id=item.id), requested_by=None,
    )).approval
    # the item goes to someone else while the request waits
    other = add_employee(store, "Dorothy Vaughan")
    run(assignment_use_cases.create_assignment(
        AssignmentCreateDTO(resource_id=resource.id, employee_id=other.id, item_id=item.id), "admin-1",
    ))

    result = run(approval_use_cases.decide(approval.id, APPROVE, resource.custodian_id))

    assert not result.success
    assert result.error_code == ErrorCode.ITEM_ALREADY_ASSIGNED
    assert result.approval.status == ApprovalStatus.PENDING
    assert store.approvals[approval.id].status == ApprovalStatus.PENDING
    assert len(store.assignments) == 1
    assert not [t for t in store.timeline if t.activity_type == ActivityType.APPROVED]


def test_approval_respects_shared_capacity(store, approval_use_cases, assignment_use_cases):
    resource = add_resource(
        store, name="Figma", type="SOFTWARE", mode=AllocationMode.SHARED, capacity=Capacity.bounded(1),
    )
    resource.custodian_id = "it-admin"
    holder, waiting = add_employee(store, "Holder"), add_employee(store, "Waiting")
    run(assignment_use_cases.create_assignment(
        AssignmentCreateDTO(resource_id=resource.id, employee_id=holder.id), None,
    ))
    approval = run(approval_use_cases.request_assignment(
        ApprovalCreateDTO(resource_id=resource.id, employee_id=waiting.id), requested_by=None,
    )).approval

    result = run(approval_use_cases.decide(approval.id, APPROVE, "it-admin"))

    assert result.error_code == ErrorCode.CAPACITY_REACHED
    assert (result.current_assignments, result.max_capacity) == (1, 1)
    assert store.approvals[approval.id].status == ApprovalStatus.PENDING


class ConflictOnFirstCommit(InMemoryUnitOfWork):
    def __init__(self, store, conflicts):
        super().__init__(store)
        self.conflicts = conflicts

    async def commit(self):
        if self.conflicts:
            self.conflicts.pop()
            raise ConcurrencyConflictError("simulated serialization failure")
        await super().commit()


def test_approve_is_retried_after_a_conflict(store, approval_use_cases):
    resource, item = _laptop(store)
    employee = add_employee(store)
    approval = run(approval_use_cases.request_assignment(
        ApprovalCreateDTO(resource_id=resource.id, employee_id=employee.id, item_id=item.id), requested_by=None,
    )).approval
    conflicts = [1]

    def factory():
        return ConflictOnFirstCommit(store, conflicts)

    flaky = ApprovalUseCases(factory, AssignmentUseCases(factory, max_retries=1))

    result = run(flaky.decide(approval.id, APPROVE, resource.custodian_id))

    assert result.success
    assert len(store.assignments) == 1
    assert store.approvals[approval.id].status == ApprovalStatus.APPROVED
    assert store.items[item.id].status == ItemStatus.ASSIGNED
