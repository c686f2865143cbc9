"""
Transit Hub - Transit File Event State

Per-file record of milestone completion. A state holds exactly one EventRecord
per catalog milestone, index-aligned with the direction's sequence. Records and
states are immutable: the workflow engine returns a new state for each change,
so readers never see a half-written record.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Dict, Optional, Tuple, Union

from services.event_catalog import Direction, parse_direction, sequence_for


@dataclass(frozen=True)
class EventRecord:
    """Completion record for one milestone of one transit file."""
    milestone_key: str
    date: date
    agent_id: str = ""
    agent_name: str = ""
    details: Optional[str] = None
    completed: bool = False

    def to_dict(self) -> Dict:
        return {
            "milestone_key": self.milestone_key,
            "date": self.date.isoformat(),
            "agent_id": self.agent_id,
            "agent_name": self.agent_name,
            "details": self.details,
            "completed": self.completed,
        }


@dataclass(frozen=True)
class TransitFileEventState:
    """Ordered milestone records of one transit file."""
    direction: Direction
    events: Tuple[EventRecord, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.events)

    @property
    def completed_count(self) -> int:
        return sum(1 for event in self.events if event.completed)

    def with_event(self, index: int, record: EventRecord) -> "TransitFileEventState":
        """Copy of this state with the record at index replaced."""
        events = self.events[:index] + (record,) + self.events[index + 1:]
        return replace(self, events=events)


def _parse_date(value: Union[str, date, datetime, None]) -> date:
    if value is None:
        return datetime.now(timezone.utc).date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def initialize(
    direction: Union[Direction, str],
    created_on: Optional[Union[str, date, datetime]] = None,
    agent_id: str = "",
    agent_name: str = "",
) -> TransitFileEventState:
    """
    Create the event state of a new transit file.

    One pending record per catalog milestone, dated on the file's creation day.
    This is the only place event state is built from scratch.
    """
    direction = parse_direction(direction)
    created = _parse_date(created_on)
    events = tuple(
        EventRecord(
            milestone_key=milestone.key,
            date=created,
            agent_id=agent_id,
            agent_name=agent_name,
        )
        for milestone in sequence_for(direction)
    )
    return TransitFileEventState(direction=direction, events=events)
