"""
Tests for transit file event state initialization and event statistics.
"""
import pytest
from datetime import date, datetime, timezone

from services.event_catalog import Direction, milestone_keys
from services.event_stats import aggregate, department_breakdown, files_at_event
from services.transit_errors import InvalidDirection, NotFound
from services.transit_events import EventRecord, initialize
from services.workflow_engine import COMPLETED, WorkflowEngine


def at_index(direction, count):
    state = initialize(direction, "2024-01-10")
    for index in range(count):
        state = WorkflowEngine.complete(state, index, "agent-1", "John Doe")
    return state


# =============================================================================
# EVENT STATE
# =============================================================================

class TestInitialize:
    """Test event state creation."""

    def test_ten_pending_records_aligned_with_catalog(self):
        state = initialize(Direction.EXPORT, "2024-01-10", "agent-3", "Carol White")
        assert len(state) == 10
        assert [e.milestone_key for e in state.events] == milestone_keys("export")
        assert all(not e.completed for e in state.events)
        assert all(e.date == date(2024, 1, 10) for e in state.events)
        assert state.events[0].agent_name == "Carol White"

    def test_date_defaults_to_today(self):
        state = initialize("import")
        assert state.events[0].date == datetime.now(timezone.utc).date()

    def test_datetime_creation_date(self):
        state = initialize("import", datetime(2024, 2, 3, 15, 30, tzinfo=timezone.utc))
        assert state.events[5].date == date(2024, 2, 3)

    def test_invalid_direction(self):
        with pytest.raises(InvalidDirection):
            initialize("domestic")

    def test_with_event_replaces_whole_record(self):
        state = initialize("export", "2024-01-10")
        record = EventRecord("export_pregate", date(2024, 1, 11), "a", "A", "x", True)
        updated = state.with_event(0, record)
        assert updated.events[0] is record
        assert state.events[0].completed is False


# =============================================================================
# AGGREGATION
# =============================================================================

class TestAggregate:
    """Test per-milestone counts."""

    def test_all_keys_start_at_zero(self):
        stats = aggregate([])
        assert stats["export"] == {key: 0 for key in milestone_keys("export")}
        assert stats["import"] == {key: 0 for key in milestone_keys("import")}
        assert stats[COMPLETED] == {"export": 0, "import": 0}

    def test_three_export_files(self):
        files = [at_index("export", 2), at_index("export", 2), at_index("export", 5)]
        stats = aggregate(files)
        keys = milestone_keys("export")
        assert stats["export"][keys[2]] == 2
        assert stats["export"][keys[5]] == 1
        assert sum(stats["export"].values()) == 3
        assert sum(stats["import"].values()) == 0

    def test_completed_file_goes_to_completed_bucket(self):
        stats = aggregate([at_index("export", 10)])
        assert stats[COMPLETED]["export"] == 1
        assert sum(stats["export"].values()) == 0

    def test_directions_counted_separately(self):
        stats = aggregate([at_index("export", 2), at_index("import", 2)])
        assert stats["export"]["declaration"] == 1
        assert stats["import"]["declaration"] == 1

    def test_accepts_transit_file_dicts(self):
        files = [{"id": "tf-1", "events": at_index("import", 4)}]
        assert aggregate(files)["import"]["maritime_company_slip"] == 1

    def test_repeat_aggregation_is_identical(self):
        files = [at_index("export", i) for i in range(11)] + [at_index("import", 7)]
        assert aggregate(files) == aggregate(files)

    def test_every_file_counted_once(self):
        files = [at_index("export", i) for i in range(11)] + [at_index("import", i) for i in range(11)]
        stats = aggregate(files)
        total = (
            sum(stats["export"].values())
            + sum(stats["import"].values())
            + sum(stats[COMPLETED].values())
        )
        assert total == len(files)


class TestFilesAtEvent:
    """Test the event filter."""

    def test_filters_by_direction_and_current_event(self):
        a = {"id": "a", "events": at_index("export", 2)}
        b = {"id": "b", "events": at_index("export", 3)}
        c = {"id": "c", "events": at_index("import", 2)}
        assert files_at_event([a, b, c], "export", "declaration") == [a]

    def test_completed_filter(self):
        done = {"id": "done", "events": at_index("import", 10)}
        assert files_at_event([done], "import", COMPLETED) == [done]

    def test_invalid_direction(self):
        with pytest.raises(InvalidDirection):
            files_at_event([], "sideways", "declaration")

    def test_unknown_milestone_key(self):
        with pytest.raises(NotFound):
            files_at_event([], "export", "pickup")
        with pytest.raises(NotFound):
            files_at_event([], "import", "departure")


class TestDepartmentBreakdown:
    """Test department counts of current events."""

    def test_breakdown(self):
        files = [
            at_index("export", 0),   # export_pregate -> customs
            at_index("export", 1),   # warehouse_reception -> logistics
            at_index("import", 4),   # maritime_company_slip -> other
            at_index("import", 10),  # completed, not counted
        ]
        assert department_breakdown(files) == {
            "customs": 1,
            "transport": 0,
            "logistics": 1,
            "commercial": 0,
            "other": 1,
        }
