from app.domain.entities.assignment import Assignment, AssignmentCategory
from app.domain.entities.employee import Employee
from app.domain.entities.item import ItemStatus, ResourceItem
from app.domain.entities.resource import AllocationMode, Capacity, Resource, ResourceStatus
from app.domain.errors import ErrorCode
from app.domain.services.assignment_validator import (
    AssignmentRequest,
    ResourceSnapshot,
    check_item_assignable,
    validate_assignment,
)

EMPLOYEE = Employee(id="e1", name="Grace Hopper", email="grace@example.com")


def _exclusive(type_name="HARDWARE", items=(), active=(), status=ResourceStatus.ACTIVE):
    resource = Resource(id="r1", name="Laptop", type=type_name, status=status)
    return ResourceSnapshot(resource=resource, employee=EMPLOYEE, items=list(items), active_assignments=list(active))


def _shared(capacity, type_name="SOFTWARE", active=()):
    resource = Resource(
        id="r1", name="Slack", type=type_name,
        allocation_mode=AllocationMode.SHARED, capacity=capacity,
    )
    return ResourceSnapshot(resource=resource, employee=EMPLOYEE, active_assignments=list(active))


def _item(item_id="i1", status=ItemStatus.AVAILABLE):
    return ResourceItem(id=item_id, resource_id="r1", status=status)


def _active(employee_id, item_id=None, quantity=1):
    return Assignment(
        id=f"a-{employee_id}-{item_id}", resource_id="r1", employee_id=employee_id,
        item_id=item_id, quantity=quantity,
    )


def test_missing_resource():
    snapshot = ResourceSnapshot(resource=None, employee=EMPLOYEE)
    outcome = validate_assignment(snapshot, AssignmentRequest("r1", "e1"))
    assert outcome.error_code == ErrorCode.RESOURCE_NOT_FOUND


def test_inactive_resource():
    outcome = validate_assignment(_exclusive(status=ResourceStatus.LOST), AssignmentRequest("r1", "e1", "i1"))
    assert outcome.error_code == ErrorCode.RESOURCE_INACTIVE


def test_missing_employee():
    snapshot = _exclusive(items=[_item()])
    snapshot.employee = None
    outcome = validate_assignment(snapshot, AssignmentRequest("r1", "e1", "i1"))
    assert outcome.error_code == ErrorCode.EMPLOYEE_NOT_FOUND


def test_exclusive_accepts_available_item():
    outcome = validate_assignment(_exclusive(items=[_item()]), AssignmentRequest("r1", "e1", "i1"))
    assert outcome.is_valid
    assert outcome.category == AssignmentCategory.INDIVIDUAL
    assert outcome.allocation_mode == AllocationMode.EXCLUSIVE


def test_exclusive_without_item_and_none_available():
    snapshot = _exclusive(items=[_item(status=ItemStatus.ASSIGNED)])
    outcome = validate_assignment(snapshot, AssignmentRequest("r1", "e1"))
    assert outcome.error_code == ErrorCode.NO_AVAILABLE_ITEMS


def test_exclusive_without_item_but_some_available():
    outcome = validate_assignment(_exclusive(items=[_item()]), AssignmentRequest("r1", "e1"))
    assert outcome.error_code == ErrorCode.ITEM_REQUIRED


def test_item_already_assigned_wins_over_item_status():
    snapshot = _exclusive(items=[_item(status=ItemStatus.ASSIGNED)], active=[_active("e2", "i1")])
    outcome = validate_assignment(snapshot, AssignmentRequest("r1", "e1", "i1"))
    assert outcome.error_code == ErrorCode.ITEM_ALREADY_ASSIGNED


def test_item_in_maintenance_not_available():
    snapshot = _exclusive(items=[_item(status=ItemStatus.MAINTENANCE)])
    outcome = validate_assignment(snapshot, AssignmentRequest("r1", "e1", "i1"))
    assert outcome.error_code == ErrorCode.ITEM_NOT_AVAILABLE


def test_unknown_item_not_available():
    outcome = validate_assignment(_exclusive(items=[_item()]), AssignmentRequest("r1", "e1", "other"))
    assert outcome.error_code == ErrorCode.ITEM_NOT_AVAILABLE


def test_exclusive_hardware_allows_second_item_for_same_employee():
    snapshot = _exclusive(items=[_item("i1", ItemStatus.ASSIGNED), _item("i2")], active=[_active("e1", "i1")])
    outcome = validate_assignment(snapshot, AssignmentRequest("r1", "e1", "i2"))
    assert outcome.is_valid


def test_exclusive_software_one_license_per_employee():
    snapshot = _exclusive(
        type_name="SOFTWARE",
        items=[_item("i1", ItemStatus.ASSIGNED), _item("i2")],
        active=[_active("e1", "i1")],
    )
    outcome = validate_assignment(snapshot, AssignmentRequest("r1", "e1", "i2"))
    assert outcome.error_code == ErrorCode.ALREADY_ASSIGNED


def test_exclusive_rejects_quantity_above_one():
    outcome = validate_assignment(_exclusive(items=[_item()]), AssignmentRequest("r1", "e1", "i1", quantity=2))
    assert outcome.error_code == ErrorCode.MIXED_ALLOCATION_MODE


def test_shared_rejects_item_id():
    outcome = validate_assignment(_shared(Capacity.bounded(5)), AssignmentRequest("r1", "e1", "i1"))
    assert outcome.error_code == ErrorCode.MIXED_ALLOCATION_MODE


def test_quantity_must_be_positive():
    outcome = validate_assignment(_shared(Capacity.bounded(5)), AssignmentRequest("r1", "e1", quantity=0))
    assert outcome.error_code == ErrorCode.INVALID_QUANTITY


def test_shared_capacity_reached_reports_counts():
    snapshot = _shared(Capacity.bounded(2), active=[_active("e2"), _active("e3")])
    outcome = validate_assignment(snapshot, AssignmentRequest("r1", "e1"))
    assert outcome.error_code == ErrorCode.CAPACITY_REACHED
    assert outcome.current_assignments == 2
    assert outcome.max_capacity == 2


def test_shared_capacity_counts_units_not_rows():
    snapshot = _shared(Capacity.bounded(5), active=[_active("e2", quantity=4)])
    assert validate_assignment(snapshot, AssignmentRequest("r1", "e1", quantity=1)).is_valid
    outcome = validate_assignment(snapshot, AssignmentRequest("r1", "e1", quantity=2))
    assert outcome.error_code == ErrorCode.CAPACITY_REACHED


def test_shared_employee_already_holding():
    snapshot = _shared(Capacity.bounded(5), active=[_active("e1")])
    outcome = validate_assignment(snapshot, AssignmentRequest("r1", "e1"))
    assert outcome.error_code == ErrorCode.ALREADY_ASSIGNED


def test_shared_unlimited_accepts_a_thousand_holders():
    snapshot = _shared(Capacity.unlimited(), active=[_active(f"e{n}") for n in range(2, 1001)])
    outcome = validate_assignment(snapshot, AssignmentRequest("r1", "e1"))
    assert outcome.is_valid


def test_cloud_resolves_to_shared_category():
    outcome = validate_assignment(_shared(Capacity.bounded(3), type_name="CLOUD"), AssignmentRequest("r1", "e1"))
    assert outcome.is_valid
    assert outcome.category == AssignmentCategory.SHARED


def test_check_item_assignable():
    assert check_item_assignable(None, []).reason == "Item not found"
    assert not check_item_assignable(_item(status=ItemStatus.LOST), []).can_assign
    assert not check_item_assignable(_item(), [_active("e2", "i1")]).can_assign
    assert check_item_assignable(_item(), []).can_assign
