"""
Transit Hub - Milestone Workflow Engine

This module implements the deterministic state machine for transit file
milestones. Each milestone record is either pending or completed:

    pending   -> completed   allowed when the previous milestone is completed
    completed -> pending     ("reactivate") allowed only for the last completed one

So the completed milestones always form a contiguous prefix of the sequence and
the current event is the first pending milestone.

The workflow engine is pure business logic with no direct HTTP or storage calls.
Operations never mutate their input; they return a new TransitFileEventState.
The same guard methods drive UI button enablement and the mutating operations.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, Dict, List, Union
import logging

from services.department_classifier import classify_milestone
from services.event_catalog import sequence_for
from services.transit_errors import (
    FieldLocked,
    NotFound,
    OutOfOrderCompletion,
    ReactivationBlocked,
)
from services.transit_events import EventRecord, TransitFileEventState

logger = logging.getLogger(__name__)


# Returned by current_event() once every milestone is completed
COMPLETED = "completed"


class EventStatus(str, Enum):
    """Display status of a single milestone record."""
    COMPLETED = "completed"
    PENDING = "pending"      # the current event, can be completed
    BLOCKED = "blocked"      # waiting on a previous milestone


class BlockedReason(str, Enum):
    """Translation keys for disabled-control tooltips."""
    PREVIOUS_STEP_PENDING = "complete_previous_step_first"
    FOLLOWING_STEP_COMPLETED = "cannot_reactivate_following_completed"


# =============================================================================
# EVENT HISTORY ENTRY
# =============================================================================

class EventHistoryEntry:
    """Represents a single milestone transition in a transit file's history."""

    def __init__(
        self,
        milestone_key: str,
        index: int,
        from_status: str,
        to_status: str,
        actor: str = "system",
        reason: Optional[str] = None,
    ):
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.milestone_key = milestone_key
        self.index = index
        self.from_status = from_status
        self.to_status = to_status
        self.actor = actor
        self.reason = reason

    def to_dict(self) -> Dict:
        return {
            "timestamp": self.timestamp,
            "milestone_key": self.milestone_key,
            "index": self.index,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "actor": self.actor,
            "reason": self.reason,
        }


# =============================================================================
# MAIN WORKFLOW ENGINE
# =============================================================================

class WorkflowEngine:
    """
    Transit file milestone state machine.

    All methods are static and operate on a TransitFileEventState.
    """

    @staticmethod
    def _check_index(state: TransitFileEventState, index: int) -> None:
        if not isinstance(index, int) or not 0 <= index < len(state.events):
            raise NotFound(
                f"No event at index {index} (valid: 0..{len(state.events) - 1})",
                {"index": index},
            )

    @staticmethod
    def current_index(state: TransitFileEventState) -> int:
        """Index of the first pending milestone, or len(events) when all are completed."""
        for index, event in enumerate(state.events):
            if not event.completed:
                return index
        return len(state.events)

    @staticmethod
    def current_event(state: TransitFileEventState) -> str:
        """Key of the first pending milestone, or COMPLETED."""
        index = WorkflowEngine.current_index(state)
        if index == len(state.events):
            return COMPLETED
        return state.events[index].milestone_key

    @staticmethod
    def is_completed(state: TransitFileEventState) -> bool:
        return WorkflowEngine.current_event(state) == COMPLETED

    @staticmethod
    def can_complete(state: TransitFileEventState, index: int) -> bool:
        """Forward guard: previous milestone completed and this one still pending."""
        WorkflowEngine._check_index(state, index)
        previous_completed = index == 0 or state.events[index - 1].completed
        return previous_completed and not state.events[index].completed

    @staticmethod
    def can_reactivate(state: TransitFileEventState, index: int) -> bool:
        """Backward guard: milestone completed and no later milestone completed."""
        WorkflowEngine._check_index(state, index)
        if not state.events[index].completed:
            return False
        return not any(event.completed for event in state.events[index + 1:])

    @staticmethod
    def event_status(state: TransitFileEventState, index: int) -> EventStatus:
        WorkflowEngine._check_index(state, index)
        if state.events[index].completed:
            return EventStatus.COMPLETED
        if index == 0 or state.events[index - 1].completed:
            return EventStatus.PENDING
        return EventStatus.BLOCKED

    @staticmethod
    def blocked_reason(state: TransitFileEventState, index: int) -> Optional[str]:
        """Tooltip key explaining why the milestone's action is disabled, if it is."""
        status = WorkflowEngine.event_status(state, index)
        if status == EventStatus.BLOCKED:
            return BlockedReason.PREVIOUS_STEP_PENDING.value
        if status == EventStatus.COMPLETED and not WorkflowEngine.can_reactivate(state, index):
            return BlockedReason.FOLLOWING_STEP_COMPLETED.value
        return None

    @staticmethod
    def complete(
        state: TransitFileEventState,
        index: int,
        agent_id: str,
        agent_name: str,
        event_date: Optional[date] = None,
        details: Optional[str] = None,
    ) -> TransitFileEventState:
        """
        Complete the milestone at index.

        Args:
            state: Current event state (not modified)
            index: Milestone position in the sequence
            agent_id / agent_name: Agent recording the completion
            event_date: Completion date; keeps the record's date when omitted
            details: Free-text details; keeps the record's details when omitted

        Returns:
            New state with the record replaced

        Raises:
            OutOfOrderCompletion: previous milestone pending or milestone already completed
        """
        if not WorkflowEngine.can_complete(state, index):
            record = state.events[index]
            reason = "already completed" if record.completed else "previous milestone is not completed"
            logger.warning(
                "Blocked completion: key=%s, index=%s, agent=%s, reason=%s",
                record.milestone_key, index, agent_id, reason
            )
            raise OutOfOrderCompletion(
                f"Cannot complete '{record.milestone_key}': {reason}",
                {"index": index, "milestone_key": record.milestone_key},
            )

        record = state.events[index]
        completed = EventRecord(
            milestone_key=record.milestone_key,
            date=event_date or record.date,
            agent_id=agent_id,
            agent_name=agent_name,
            details=details if details is not None else record.details,
            completed=True,
        )
        return state.with_event(index, completed)

    @staticmethod
    def reactivate(state: TransitFileEventState, index: int) -> TransitFileEventState:
        """
        Return the milestone at index to pending so its fields can be edited again.

        Raises:
            ReactivationBlocked: milestone pending, or a later milestone is completed
        """
        if not WorkflowEngine.can_reactivate(state, index):
            record = state.events[index]
            reason = "not completed" if not record.completed else "a following milestone is completed"
            logger.warning(
                "Blocked reactivation: key=%s, index=%s, reason=%s",
                record.milestone_key, index, reason
            )
            raise ReactivationBlocked(
                f"Cannot reactivate '{record.milestone_key}': {reason}",
                {"index": index, "milestone_key": record.milestone_key},
            )

        record = state.events[index]
        return state.with_event(index, EventRecord(
            milestone_key=record.milestone_key,
            date=record.date,
            agent_id=record.agent_id,
            agent_name=record.agent_name,
            details=record.details,
            completed=False,
        ))

    @staticmethod
    def update_fields(
        state: TransitFileEventState,
        index: int,
        event_date: Optional[date] = None,
        details: Optional[str] = None,
    ) -> TransitFileEventState:
        """
        Edit date/details of the current event.

        Completed milestones must be reactivated first; blocked ones are read-only.

        Raises:
            FieldLocked: the milestone is not the current event
        """
        status = WorkflowEngine.event_status(state, index)
        if status != EventStatus.PENDING:
            record = state.events[index]
            logger.warning(
                "Blocked field edit: key=%s, index=%s, status=%s",
                record.milestone_key, index, status.value
            )
            raise FieldLocked(
                f"Fields of '{record.milestone_key}' are locked while {status.value}",
                {"index": index, "milestone_key": record.milestone_key, "status": status.value},
            )

        record = state.events[index]
        return state.with_event(index, EventRecord(
            milestone_key=record.milestone_key,
            date=event_date or record.date,
            agent_id=record.agent_id,
            agent_name=record.agent_name,
            details=details if details is not None else record.details,
            completed=False,
        ))

    @staticmethod
    def progress(state: TransitFileEventState) -> Dict[str, Union[int, float]]:
        total = len(state.events)
        completed = state.completed_count
        return {
            "completed": completed,
            "total": total,
            "percent": round(completed / total * 100) if total else 0,
        }

    @staticmethod
    def describe(state: TransitFileEventState) -> List[Dict]:
        """
        Annotated view of every milestone for display.

        Each entry carries the record fields plus index, department, status and
        the guard results used to enable or disable controls.
        """
        described = []
        for index, (milestone, record) in enumerate(zip(sequence_for(state.direction), state.events)):
            entry = record.to_dict()
            entry.update({
                "index": index,
                "display_name": milestone.display_name,
                "department": classify_milestone(record.milestone_key).value,
                "status": WorkflowEngine.event_status(state, index).value,
                "can_complete": WorkflowEngine.can_complete(state, index),
                "can_reactivate": WorkflowEngine.can_reactivate(state, index),
                "blocked_reason": WorkflowEngine.blocked_reason(state, index),
            })
            described.append(entry)
        return described
