"""Maps a resource type to the assignment category that governs validation"""
from enum import Enum
from typing import Optional
from app.domain.entities.assignment import AssignmentCategory


class ResourceFamily(str, Enum):
    """Normalised resource type"""
    HARDWARE = "HARDWARE"
    SOFTWARE = "SOFTWARE"
    CLOUD = "CLOUD"
    CUSTOM = "CUSTOM"


_FAMILIES = {
    "HARDWARE": ResourceFamily.HARDWARE,
    "PHYSICAL": ResourceFamily.HARDWARE,
    "SOFTWARE": ResourceFamily.SOFTWARE,
    "CLOUD": ResourceFamily.CLOUD,
}


def resource_family(type_name: Optional[str]) -> ResourceFamily:
    """Case-insensitive lookup; unknown names are custom types"""
    return _FAMILIES.get((type_name or "").strip().upper(), ResourceFamily.CUSTOM)


def determine_assignment_category(
    type_name: Optional[str],
    requested: Optional[AssignmentCategory] = None,
) -> AssignmentCategory:
    """Resolve the assignment category for a resource type.

    Hardware is always INDIVIDUAL (it cannot be pooled), software is POOLED
    only when asked for, cloud is always SHARED, and custom types keep the
    caller's request.
    """
    family = resource_family(type_name)
    if family == ResourceFamily.HARDWARE:
        return AssignmentCategory.INDIVIDUAL
    if family == ResourceFamily.SOFTWARE:
        if requested == AssignmentCategory.POOLED:
            return AssignmentCategory.POOLED
        return AssignmentCategory.INDIVIDUAL
    if family == ResourceFamily.CLOUD:
        return AssignmentCategory.SHARED
    return requested or AssignmentCategory.INDIVIDUAL
