import pytest

from app.domain.entities.assignment import AssignmentCategory
from app.domain.services.allocation_classifier import (
    ResourceFamily,
    determine_assignment_category,
    resource_family,
)


@pytest.mark.parametrize("type_name,family", [
    ("HARDWARE", ResourceFamily.HARDWARE),
    ("hardware", ResourceFamily.HARDWARE),
    ("Physical", ResourceFamily.HARDWARE),
    ("software", ResourceFamily.SOFTWARE),
    ("CLOUD", ResourceFamily.CLOUD),
    ("Furniture", ResourceFamily.CUSTOM),
    (None, ResourceFamily.CUSTOM),
])
def test_resource_family_is_case_insensitive(type_name, family):
    assert resource_family(type_name) == family


def test_hardware_is_always_individual():
    assert determine_assignment_category("HARDWARE") == AssignmentCategory.INDIVIDUAL
    assert determine_assignment_category("HARDWARE", AssignmentCategory.POOLED) == AssignmentCategory.INDIVIDUAL
    assert determine_assignment_category("HARDWARE", AssignmentCategory.SHARED) == AssignmentCategory.INDIVIDUAL


def test_software_is_pooled_only_on_request():
    assert determine_assignment_category("SOFTWARE") == AssignmentCategory.INDIVIDUAL
    assert determine_assignment_category("SOFTWARE", AssignmentCategory.POOLED) == AssignmentCategory.POOLED
    assert determine_assignment_category("SOFTWARE", AssignmentCategory.SHARED) == AssignmentCategory.INDIVIDUAL


def test_cloud_is_always_shared():
    assert determine_assignment_category("cloud") == AssignmentCategory.SHARED
    assert determine_assignment_category("CLOUD", AssignmentCategory.INDIVIDUAL) == AssignmentCategory.SHARED


def test_custom_type_keeps_requested_category():
    assert determine_assignment_category("Parking Spot") == AssignmentCategory.INDIVIDUAL
    assert determine_assignment_category("Parking Spot", AssignmentCategory.SHARED) == AssignmentCategory.SHARED
