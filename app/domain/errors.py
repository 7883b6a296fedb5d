"""Error codes and exceptions shared by the allocation engine"""
from enum import Enum


class ErrorCode(str, Enum):
    """Codes carried by rejected results; callers map them to user messages"""
    # not found
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    EMPLOYEE_NOT_FOUND = "EMPLOYEE_NOT_FOUND"
    ASSIGNMENT_NOT_FOUND = "ASSIGNMENT_NOT_FOUND"
    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
    APPROVAL_NOT_FOUND = "APPROVAL_NOT_FOUND"
    # state conflicts
    RESOURCE_INACTIVE = "RESOURCE_INACTIVE"
    ITEM_REQUIRED = "ITEM_REQUIRED"
    NO_AVAILABLE_ITEMS = "NO_AVAILABLE_ITEMS"
    ITEM_ALREADY_ASSIGNED = "ITEM_ALREADY_ASSIGNED"
    ITEM_NOT_AVAILABLE = "ITEM_NOT_AVAILABLE"
    ALREADY_ASSIGNED = "ALREADY_ASSIGNED"
    CAPACITY_REACHED = "CAPACITY_REACHED"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    MIXED_ALLOCATION_MODE = "MIXED_ALLOCATION_MODE"
    CAPACITY_BELOW_ALLOCATED = "CAPACITY_BELOW_ALLOCATED"
    ITEM_HAS_ACTIVE_ASSIGNMENT = "ITEM_HAS_ACTIVE_ASSIGNMENT"
    ITEM_STATUS_LOCKED = "ITEM_STATUS_LOCKED"
    APPROVAL_NOT_PENDING = "APPROVAL_NOT_PENDING"
    # bad input
    INVALID_QUANTITY = "INVALID_QUANTITY"
    REASON_REQUIRED = "REASON_REQUIRED"
    INVALID_ALLOCATION_MODE = "INVALID_ALLOCATION_MODE"
    DUPLICATE_SERIAL_NUMBER = "DUPLICATE_SERIAL_NUMBER"
    DUPLICATE_LICENSE_KEY = "DUPLICATE_LICENSE_KEY"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    APPROVER_REQUIRED = "APPROVER_REQUIRED"
    # permission
    NOT_APPROVER = "NOT_APPROVER"
    # persistence gave up after retrying
    ASSIGNMENT_CREATION_FAILED = "ASSIGNMENT_CREATION_FAILED"
    UPDATE_FAILED = "UPDATE_FAILED"


NOT_FOUND_CODES = frozenset({
    ErrorCode.RESOURCE_NOT_FOUND,
    ErrorCode.EMPLOYEE_NOT_FOUND,
    ErrorCode.ASSIGNMENT_NOT_FOUND,
    ErrorCode.ITEM_NOT_FOUND,
    ErrorCode.APPROVAL_NOT_FOUND,
})

BAD_INPUT_CODES = frozenset({
    ErrorCode.INVALID_QUANTITY,
    ErrorCode.REASON_REQUIRED,
    ErrorCode.INVALID_ALLOCATION_MODE,
    ErrorCode.ITEM_REQUIRED,
    ErrorCode.MIXED_ALLOCATION_MODE,
    ErrorCode.APPROVER_REQUIRED,
})

FORBIDDEN_CODES = frozenset({
    ErrorCode.NOT_APPROVER,
})


class ConcurrencyConflictError(Exception):
    """A concurrent writer invalidated the current unit of work.

    Raised by the persistence layer for lock timeouts, serialization failures
    and unique-index violations on active assignments. Safe to retry.
    """
