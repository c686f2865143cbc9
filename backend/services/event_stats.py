"""
Transit Hub - Event Statistics

Read-only rollups over a collection of transit files for the dashboard chips
and the event-filter sidebar. Each file is counted once, at its current event.
Files whose milestones are all completed go to the explicit "completed" bucket
rather than to a milestone key.
"""

from typing import Any, Dict, Iterable, List, Union

from services.department_classifier import classify_milestone, get_all_departments
from services.event_catalog import Direction, index_of, milestone_keys, parse_direction
from services.transit_events import TransitFileEventState
from services.workflow_engine import COMPLETED, WorkflowEngine


def _event_state(item: Any) -> TransitFileEventState:
    """Accept a bare event state, a transit file object or a transit file dict."""
    if isinstance(item, TransitFileEventState):
        return item
    if isinstance(item, dict):
        return item["events"]
    return item.events


def aggregate(files: Iterable[Any]) -> Dict[str, Dict[str, int]]:
    """
    Count files per current event, per direction.

    Returns:
        {
            "export": {"export_pregate": 0, ...},
            "import": {"import_prealert": 0, ...},
            "completed": {"export": 0, "import": 0},
        }
    """
    stats: Dict[str, Dict[str, int]] = {
        direction.value: {key: 0 for key in milestone_keys(direction)}
        for direction in Direction
    }
    stats[COMPLETED] = {direction.value: 0 for direction in Direction}

    for item in files:
        state = _event_state(item)
        current = WorkflowEngine.current_event(state)
        if current == COMPLETED:
            stats[COMPLETED][state.direction.value] += 1
        else:
            stats[state.direction.value][current] += 1

    return stats


def files_at_event(
    files: Iterable[Any],
    direction: Union[Direction, str],
    milestone_key: str,
) -> List[Any]:
    """
    Files of a direction currently sitting at milestone_key (or COMPLETED).

    Raises:
        InvalidDirection: unknown direction
        NotFound: milestone_key is not in the direction's sequence
    """
    direction = parse_direction(direction)
    if milestone_key != COMPLETED:
        index_of(direction, milestone_key)
    matches = []
    for item in files:
        state = _event_state(item)
        if state.direction == direction and WorkflowEngine.current_event(state) == milestone_key:
            matches.append(item)
    return matches


def department_breakdown(files: Iterable[Any]) -> Dict[str, int]:
    """Count of in-progress files per department owning their current event."""
    counts = {department: 0 for department in get_all_departments()}
    for item in files:
        current = WorkflowEngine.current_event(_event_state(item))
        if current != COMPLETED:
            counts[classify_milestone(current).value] += 1
    return counts
