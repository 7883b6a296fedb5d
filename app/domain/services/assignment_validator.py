"""Assignment validation.

Every proposed assignment is checked against one rule table keyed by
``(allocation mode, resource family)``. Each rule inspects a read-only
``ResourceSnapshot`` and either passes or returns a rejected
``ValidationOutcome`` tagged with an ``ErrorCode``. The first rejection wins.

The validator never writes; the lifecycle manager calls it inside the same
unit of work that commits the assignment.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple
from app.domain.entities.assignment import Assignment, AssignmentCategory
from app.domain.entities.employee import Employee
from app.domain.entities.item import ItemStatus, ResourceItem
from app.domain.entities.resource import AllocationMode, Resource
from app.domain.errors import ErrorCode
from app.domain.services.allocation_classifier import (
    ResourceFamily,
    determine_assignment_category,
    resource_family,
)
from app.domain.services.capacity_calculator import units_in_use


@dataclass(frozen=True)
class AssignmentRequest:
    """A proposed assignment as received from the caller"""
    resource_id: str
    employee_id: str
    item_id: Optional[str] = None
    requested_category: Optional[AssignmentCategory] = None
    quantity: int = 1
    notes: Optional[str] = None


@dataclass
class ResourceSnapshot:
    """Current state of one resource as read inside a unit of work"""
    resource: Optional[Resource]
    employee: Optional[Employee]
    items: List[ResourceItem] = field(default_factory=list)
    active_assignments: List[Assignment] = field(default_factory=list)

    @property
    def available_items(self) -> List[ResourceItem]:
        return [i for i in self.items if i.status == ItemStatus.AVAILABLE]

    def find_item(self, item_id: Optional[str]) -> Optional[ResourceItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


@dataclass(frozen=True)
class ValidationOutcome:
    """Accepted (with the resolved category) or rejected (with an error code)"""
    is_valid: bool
    category: Optional[AssignmentCategory] = None
    allocation_mode: Optional[AllocationMode] = None
    error_code: Optional[ErrorCode] = None
    error: Optional[str] = None
    current_assignments: Optional[int] = None
    max_capacity: Optional[int] = None

    @classmethod
    def accepted(cls, category: AssignmentCategory, allocation_mode: AllocationMode) -> "ValidationOutcome":
        return cls(is_valid=True, category=category, allocation_mode=allocation_mode)

    @classmethod
    def rejected(
        cls,
        error_code: ErrorCode,
        error: str,
        category: Optional[AssignmentCategory] = None,
        allocation_mode: Optional[AllocationMode] = None,
        current_assignments: Optional[int] = None,
        max_capacity: Optional[int] = None,
    ) -> "ValidationOutcome":
        return cls(
            is_valid=False,
            category=category,
            allocation_mode=allocation_mode,
            error_code=error_code,
            error=error,
            current_assignments=current_assignments,
            max_capacity=max_capacity,
        )


@dataclass(frozen=True)
class _RuleContext:
    snapshot: ResourceSnapshot
    request: AssignmentRequest
    category: AssignmentCategory
    mode: AllocationMode

    def reject(self, error_code: ErrorCode, error: str, **extra) -> ValidationOutcome:
        return ValidationOutcome.rejected(
            error_code, error, category=self.category, allocation_mode=self.mode, **extra
        )


Rule = Callable[[_RuleContext], Optional[ValidationOutcome]]


def _item_selected(ctx: _RuleContext) -> Optional[ValidationOutcome]:
    if ctx.request.item_id:
        return None
    if not ctx.snapshot.available_items:
        return ctx.reject(
            ErrorCode.NO_AVAILABLE_ITEMS,
            "No available items for this exclusive resource. All items are assigned or unavailable.",
        )
    return ctx.reject(ErrorCode.ITEM_REQUIRED, "Item selection is required for exclusive resources")


def _item_not_double_assigned(ctx: _RuleContext) -> Optional[ValidationOutcome]:
    for assignment in ctx.snapshot.active_assignments:
        if assignment.item_id == ctx.request.item_id:
            return ctx.reject(
                ErrorCode.ITEM_ALREADY_ASSIGNED,
                "This item is already assigned to another employee",
            )
    return None


def _item_available(ctx: _RuleContext) -> Optional[ValidationOutcome]:
    item = ctx.snapshot.find_item(ctx.request.item_id)
    if item is None or item.status != ItemStatus.AVAILABLE:
        return ctx.reject(
            ErrorCode.ITEM_NOT_AVAILABLE,
            "The specified item is not available for assignment. "
            "It may already be assigned or in maintenance.",
        )
    return None


def _employee_not_holding(ctx: _RuleContext) -> Optional[ValidationOutcome]:
    for assignment in ctx.snapshot.active_assignments:
        if assignment.employee_id == ctx.request.employee_id:
            return ctx.reject(
                ErrorCode.ALREADY_ASSIGNED,
                "Employee already has an active assignment for this resource",
            )
    return None


def _within_capacity(ctx: _RuleContext) -> Optional[ValidationOutcome]:
    capacity = ctx.snapshot.resource.capacity
    used = units_in_use(ctx.snapshot.active_assignments)
    if capacity.allows(used, ctx.request.quantity):
        return None
    return ctx.reject(
        ErrorCode.CAPACITY_REACHED,
        "This resource has reached its maximum capacity",
        current_assignments=used,
        max_capacity=capacity.limit,
    )


_ITEM_RULES: Tuple[Rule, ...] = (_item_selected, _item_not_double_assigned, _item_available)
_SEAT_RULES: Tuple[Rule, ...] = (_employee_not_holding, _within_capacity)

RULE_TABLE: Dict[Tuple[AllocationMode, ResourceFamily], Tuple[Rule, ...]] = {
    (AllocationMode.EXCLUSIVE, ResourceFamily.HARDWARE): _ITEM_RULES,
    (AllocationMode.EXCLUSIVE, ResourceFamily.CUSTOM): _ITEM_RULES,
    # one license / one cloud seat per employee, even when several items exist
    (AllocationMode.EXCLUSIVE, ResourceFamily.SOFTWARE): _ITEM_RULES + (_employee_not_holding,),
    (AllocationMode.EXCLUSIVE, ResourceFamily.CLOUD): _ITEM_RULES + (_employee_not_holding,),
    (AllocationMode.SHARED, ResourceFamily.HARDWARE): _SEAT_RULES,
    (AllocationMode.SHARED, ResourceFamily.SOFTWARE): _SEAT_RULES,
    (AllocationMode.SHARED, ResourceFamily.CLOUD): _SEAT_RULES,
    (AllocationMode.SHARED, ResourceFamily.CUSTOM): _SEAT_RULES,
}


def rules_for(mode: AllocationMode, family: ResourceFamily) -> Sequence[Rule]:
    return RULE_TABLE[(mode, family)]


def _check_shape(ctx: _RuleContext) -> Optional[ValidationOutcome]:
    """A resource is either item-backed or quantity-backed, never both"""
    if ctx.request.quantity < 1:
        return ctx.reject(ErrorCode.INVALID_QUANTITY, "Quantity must be at least 1")
    if ctx.mode == AllocationMode.EXCLUSIVE and ctx.request.quantity != 1:
        return ctx.reject(
            ErrorCode.MIXED_ALLOCATION_MODE,
            "Exclusive resources are assigned one item at a time",
        )
    if ctx.mode == AllocationMode.SHARED and ctx.request.item_id:
        return ctx.reject(
            ErrorCode.MIXED_ALLOCATION_MODE,
            "Shared resources are not assigned by item",
        )
    return None


def validate_assignment(snapshot: ResourceSnapshot, request: AssignmentRequest) -> ValidationOutcome:
    """Decide whether ``request`` may be committed against ``snapshot``"""
    resource = snapshot.resource
    if resource is None:
        return ValidationOutcome.rejected(ErrorCode.RESOURCE_NOT_FOUND, "Resource not found")
    if not resource.is_active:
        return ValidationOutcome.rejected(ErrorCode.RESOURCE_INACTIVE, "Resource is not active")
    if snapshot.employee is None:
        return ValidationOutcome.rejected(ErrorCode.EMPLOYEE_NOT_FOUND, "Employee not found")

    ctx = _RuleContext(
        snapshot=snapshot,
        request=request,
        category=determine_assignment_category(resource.type, request.requested_category),
        mode=resource.allocation_mode,
    )

    rejection = _check_shape(ctx)
    if rejection is not None:
        return rejection

    for rule in rules_for(ctx.mode, resource_family(resource.type)):
        rejection = rule(ctx)
        if rejection is not None:
            return rejection

    return ValidationOutcome.accepted(ctx.category, ctx.mode)


@dataclass(frozen=True)
class ItemAssignability:
    can_assign: bool
    reason: Optional[str] = None


def check_item_assignable(
    item: Optional[ResourceItem],
    active_assignments: Sequence[Assignment],
) -> ItemAssignability:
    """Whether a single item could be handed out right now"""
    if item is None:
        return ItemAssignability(False, "Item not found")
    if item.status != ItemStatus.AVAILABLE:
        return ItemAssignability(False, f"Item is not available (status: {item.status.value})")
    if any(a.is_active and a.item_id == item.id for a in active_assignments):
        return ItemAssignability(False, "Item is already assigned to another user")
    return ItemAssignability(True)
