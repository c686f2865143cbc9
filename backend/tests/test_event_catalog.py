"""
Tests for the milestone event catalog and department classification.
"""
import pytest

from services.department_classifier import DepartmentTag, classify_milestone, get_all_departments
from services.event_catalog import (
    Direction,
    MilestoneDefinition,
    index_of,
    milestone_at,
    milestone_keys,
    parse_direction,
    sequence_for,
)
from services.transit_errors import InvalidDirection, NotFound


class TestSequences:
    """Test the fixed milestone sequences."""

    def test_export_sequence(self):
        assert milestone_keys(Direction.EXPORT) == [
            "export_pregate", "warehouse_reception", "declaration",
            "export_customs_clearance", "warehouse_loading", "effective_transport",
            "vessel_loading", "departure", "estimated_arrival", "billing",
        ]

    def test_import_sequence(self):
        assert milestone_keys(Direction.IMPORT) == [
            "import_prealert", "arrival", "declaration",
            "import_customs_clearance", "maritime_company_slip", "import_pregate",
            "pickup", "delivery", "warehouse_arrival", "billing",
        ]

    @pytest.mark.parametrize("direction", list(Direction))
    def test_ten_unique_keys(self, direction):
        keys = milestone_keys(direction)
        assert len(keys) == 10
        assert len(set(keys)) == 10

    def test_definitions_carry_direction_and_department(self):
        for milestone in sequence_for("import"):
            assert isinstance(milestone, MilestoneDefinition)
            assert milestone.direction == Direction.IMPORT
            assert milestone.department == classify_milestone(milestone.key)

    def test_definitions_are_immutable(self):
        milestone = sequence_for("export")[0]
        with pytest.raises(Exception):
            milestone.key = "changed"

    def test_string_directions_accepted(self):
        assert sequence_for("export") == sequence_for(Direction.EXPORT)
        assert sequence_for("IMPORT") == sequence_for(Direction.IMPORT)

    @pytest.mark.parametrize("bad", ["transit", "", None, 3])
    def test_invalid_direction(self, bad):
        with pytest.raises(InvalidDirection):
            sequence_for(bad)

    def test_parse_direction_passthrough(self):
        assert parse_direction(Direction.EXPORT) is Direction.EXPORT


class TestLookups:
    """Test index and key lookups."""

    def test_index_of(self):
        assert index_of("export", "declaration") == 2
        assert index_of("import", "import_pregate") == 5
        assert index_of("import", "billing") == 9

    def test_index_of_unknown_key(self):
        with pytest.raises(NotFound):
            index_of("export", "pickup")

    def test_milestone_at(self):
        assert milestone_at("export", 7).key == "departure"

    def test_milestone_at_out_of_range(self):
        with pytest.raises(NotFound):
            milestone_at("export", 10)


class TestDepartmentClassifier:
    """Test keyword classification on milestone keys."""

    @pytest.mark.parametrize("key,department", [
        ("export_pregate", DepartmentTag.CUSTOMS),
        ("warehouse_reception", DepartmentTag.LOGISTICS),
        ("declaration", DepartmentTag.CUSTOMS),
        ("export_customs_clearance", DepartmentTag.CUSTOMS),
        ("warehouse_loading", DepartmentTag.TRANSPORT),
        ("effective_transport", DepartmentTag.TRANSPORT),
        ("vessel_loading", DepartmentTag.TRANSPORT),
        ("departure", DepartmentTag.TRANSPORT),
        ("estimated_arrival", DepartmentTag.TRANSPORT),
        ("billing", DepartmentTag.COMMERCIAL),
        ("import_prealert", DepartmentTag.COMMERCIAL),
        ("arrival", DepartmentTag.TRANSPORT),
        ("import_customs_clearance", DepartmentTag.CUSTOMS),
        ("maritime_company_slip", DepartmentTag.OTHER),
        ("import_pregate", DepartmentTag.CUSTOMS),
        ("pickup", DepartmentTag.LOGISTICS),
        ("delivery", DepartmentTag.LOGISTICS),
        ("warehouse_arrival", DepartmentTag.TRANSPORT),
    ])
    def test_catalog_milestones(self, key, department):
        assert classify_milestone(key) == department

    def test_total_over_catalog(self):
        for direction in Direction:
            for milestone in sequence_for(direction):
                assert classify_milestone(milestone.key) in DepartmentTag

    def test_unknown_key_is_other(self):
        assert classify_milestone("something_else") == DepartmentTag.OTHER
        assert classify_milestone("") == DepartmentTag.OTHER

    def test_case_insensitive(self):
        assert classify_milestone("BILLING") == DepartmentTag.COMMERCIAL

    def test_all_departments(self):
        assert get_all_departments() == ["customs", "transport", "logistics", "commercial", "other"]
