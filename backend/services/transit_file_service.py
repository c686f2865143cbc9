"""
Transit Hub - Transit File Service

In-memory transit file store. Stands in for the future persistence backend and
keeps the CRUD-shaped contract the UI already uses.

Writes to a single file are serialized behind a per-file asyncio.Lock: the
workflow guards read the whole milestone sequence before one record changes, so
two concurrent writers on the same file could otherwise lose an update. Every
write swaps in a new file dict; readers always get a consistent snapshot.
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Literal, Optional, get_args
import asyncio
import logging
import uuid

from services.event_catalog import milestone_at, parse_direction
from services.transit_errors import InvalidFieldValue, NotFound
from services.transit_events import TransitFileEventState, initialize
from services.workflow_engine import EventHistoryEntry, WorkflowEngine

logger = logging.getLogger(__name__)


TransportType = Literal["air", "sea"]
ProductType = Literal["standard", "dangerous", "fragile"]
FileStatus = Literal["draft", "in_progress", "completed", "archived"]
ContainerType = Literal["dry", "refrigerated", "open_top", "flat_rack", "tank", "other"]
ContainerSize = Literal["20ft", "40ft", "40ft_hc", "45ft"]

TRANSPORT_TYPES = list(get_args(TransportType))
PRODUCT_TYPES = list(get_args(ProductType))
FILE_STATUSES = list(get_args(FileStatus))
CONTAINER_TYPES = list(get_args(ContainerType))
CONTAINER_SIZES = list(get_args(ContainerSize))

# Fields a plain update may touch; events only change through the workflow methods
UPDATABLE_FIELDS = {
    "bl_number", "client_ids", "origin", "destination", "transport_type",
    "product_type", "capacity", "content_description", "containers", "status",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_choice(field_name: str, value: str, choices: List[str]) -> str:
    if value not in choices:
        raise InvalidFieldValue(
            f"Invalid {field_name}: {value!r}. Valid: {choices}",
            {"field": field_name, "value": value},
        )
    return value


def _normalize_containers(containers: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """Validate container entries and give new ones an id."""
    normalized = []
    for container in containers or []:
        normalized.append({
            "id": container.get("id") or str(uuid.uuid4()),
            "container_number": container.get("container_number", ""),
            "volume": container.get("volume", 0),
            "weight": container.get("weight", 0),
            "container_type": _check_choice(
                "container_type", container.get("container_type", "dry"), CONTAINER_TYPES
            ),
            "size": _check_choice("size", container.get("size", "20ft"), CONTAINER_SIZES),
        })
    return normalized


def _derive_status(current_status: str, state: TransitFileEventState) -> str:
    """Keep draft/in_progress/completed in step with milestone progress."""
    if current_status == "archived":
        return current_status
    if WorkflowEngine.is_completed(state):
        return "completed"
    if state.completed_count > 0:
        return "in_progress"
    return "draft" if current_status == "draft" else "in_progress"


def _requested_status(requested: str, state: TransitFileEventState) -> str:
    """
    Validate a manual status change.

    Archiving is always allowed. Any other status must match what milestone
    progress gives, so unarchiving restores the progress status.
    """
    _check_choice("status", requested, FILE_STATUSES)
    if requested == "archived":
        return requested
    expected = _derive_status("draft", state)
    if requested != expected:
        raise InvalidFieldValue(
            f"Status '{requested}' does not match milestone progress (expected '{expected}')",
            {"field": "status", "value": requested, "expected": expected},
        )
    return requested


class TransitFileService:
    """Transit file CRUD plus the milestone operations exposed to the UI."""

    def __init__(self):
        self._files: Dict[str, Dict[str, Any]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._sequence = 0

    def _lock_for(self, file_id: str) -> asyncio.Lock:
        """Lock of an existing file; unknown ids raise NotFound without allocating one."""
        self._get(file_id)
        return self._locks.setdefault(file_id, asyncio.Lock())

    def _get(self, file_id: str) -> Dict[str, Any]:
        transit_file = self._files.get(file_id)
        if transit_file is None:
            raise NotFound(f"Transit file {file_id} not found", {"file_id": file_id})
        return transit_file

    # ==================== CRUD ====================

    async def create_transit_file(
        self,
        shipment_type: str,
        agent: Dict[str, str],
        bl_number: str = "",
        client_ids: Optional[List[str]] = None,
        origin: str = "",
        destination: str = "",
        transport_type: str = "sea",
        product_type: str = "standard",
        capacity: str = "",
        content_description: str = "",
        containers: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """Create a transit file with a fresh, all-pending milestone sequence."""
        direction = parse_direction(shipment_type)
        _check_choice("transport_type", transport_type, TRANSPORT_TYPES)
        _check_choice("product_type", product_type, PRODUCT_TYPES)
        containers = _normalize_containers(containers)
        now = datetime.now(timezone.utc)
        self._sequence += 1

        transit_file = {
            "id": str(uuid.uuid4()),
            "reference": f"TF-{now.year}-{10000 + self._sequence}",
            "bl_number": bl_number,
            "client_ids": list(client_ids or []),
            "origin": origin,
            "destination": destination,
            "transport_type": transport_type,
            "shipment_type": direction.value,
            "product_type": product_type,
            "capacity": capacity,
            "content_description": content_description,
            "containers": containers,
            "status": "draft",
            "events": initialize(direction, now, agent["id"], agent["name"]),
            "event_history": [],
            "created_at": now.isoformat(),
            "updated_at": now.isoformat(),
            "created_by": agent["id"],
            "updated_by": agent["id"],
        }
        transit_file["current_event"] = WorkflowEngine.current_event(transit_file["events"])
        self._files[transit_file["id"]] = transit_file
        self._locks[transit_file["id"]] = asyncio.Lock()

        logger.info(
            "Transit file created: id=%s, reference=%s, direction=%s, agent=%s",
            transit_file["id"], transit_file["reference"], direction.value, agent["id"]
        )
        return transit_file

    async def get_transit_file_by_id(self, file_id: str) -> Dict[str, Any]:
        return self._get(file_id)

    async def list_transit_files(
        self,
        shipment_type: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        files = list(self._files.values())
        if shipment_type:
            direction = parse_direction(shipment_type)
            files = [f for f in files if f["shipment_type"] == direction.value]
        if status:
            files = [f for f in files if f["status"] == status]
        return sorted(files, key=lambda f: f["created_at"], reverse=True)

    async def update_transit_file(
        self,
        file_id: str,
        fields: Dict[str, Any],
        agent: Dict[str, str],
    ) -> Dict[str, Any]:
        """
        Update descriptive fields. Shipment type and events are not editable here.

        Raises:
            InvalidFieldValue: unknown transport/product/container value, or a
                status other than 'archived' that milestone progress does not give
        """
        async with self._lock_for(file_id):
            transit_file = self._get(file_id)
            changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS and v is not None}
            if "transport_type" in changes:
                _check_choice("transport_type", changes["transport_type"], TRANSPORT_TYPES)
            if "product_type" in changes:
                _check_choice("product_type", changes["product_type"], PRODUCT_TYPES)
            if "containers" in changes:
                changes["containers"] = _normalize_containers(changes["containers"])
            if "status" in changes and changes["status"] != transit_file["status"]:
                _requested_status(changes["status"], transit_file["events"])
            updated = {**transit_file, **changes, "updated_at": _now(), "updated_by": agent["id"]}
            self._files[file_id] = updated

        logger.info("Transit file updated: id=%s, fields=%s", file_id, sorted(changes))
        return updated

    async def delete_transit_file(self, file_id: str) -> None:
        async with self._lock_for(file_id):
            self._get(file_id)
            del self._files[file_id]
        self._locks.pop(file_id, None)
        logger.info("Transit file deleted: id=%s", file_id)

    # ==================== MILESTONE OPERATIONS ====================

    def _apply(
        self,
        transit_file: Dict[str, Any],
        new_state: TransitFileEventState,
        agent: Dict[str, str],
        history_entry: Optional[EventHistoryEntry] = None,
    ) -> Dict[str, Any]:
        history = list(transit_file.get("event_history", []))
        if history_entry is not None:
            history.append(history_entry.to_dict())

        updated = {
            **transit_file,
            "events": new_state,
            "current_event": WorkflowEngine.current_event(new_state),
            "status": _derive_status(transit_file["status"], new_state),
            "event_history": history,
            "updated_at": _now(),
            "updated_by": agent["id"],
        }
        self._files[transit_file["id"]] = updated
        return updated

    async def complete_event(
        self,
        file_id: str,
        index: int,
        agent: Dict[str, str],
        event_date: Optional[date] = None,
        details: Optional[str] = None,
    ) -> Dict[str, Any]:
        async with self._lock_for(file_id):
            transit_file = self._get(file_id)
            new_state = WorkflowEngine.complete(
                transit_file["events"], index, agent["id"], agent["name"], event_date, details
            )
            key = milestone_at(new_state.direction, index).key
            entry = EventHistoryEntry(key, index, "pending", "completed", actor=agent["id"])
            updated = self._apply(transit_file, new_state, agent, entry)

        logger.info(
            "Milestone completed: file=%s, key=%s, index=%s, agent=%s, current=%s",
            file_id, key, index, agent["id"], updated["current_event"]
        )
        return updated

    async def reactivate_event(
        self,
        file_id: str,
        index: int,
        agent: Dict[str, str],
        reason: Optional[str] = None,
    ) -> Dict[str, Any]:
        async with self._lock_for(file_id):
            transit_file = self._get(file_id)
            new_state = WorkflowEngine.reactivate(transit_file["events"], index)
            key = milestone_at(new_state.direction, index).key
            entry = EventHistoryEntry(key, index, "completed", "pending", actor=agent["id"], reason=reason)
            updated = self._apply(transit_file, new_state, agent, entry)

        logger.info(
            "Milestone reactivated: file=%s, key=%s, index=%s, agent=%s",
            file_id, key, index, agent["id"]
        )
        return updated

    async def update_event_fields(
        self,
        file_id: str,
        index: int,
        agent: Dict[str, str],
        event_date: Optional[date] = None,
        details: Optional[str] = None,
    ) -> Dict[str, Any]:
        async with self._lock_for(file_id):
            transit_file = self._get(file_id)
            new_state = WorkflowEngine.update_fields(transit_file["events"], index, event_date, details)
            return self._apply(transit_file, new_state, agent)
