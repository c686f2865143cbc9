"""
Transit Hub - Transit Files Router

Transit file CRUD and milestone transitions. The per-event guard flags in
every response come from the same WorkflowEngine methods that validate the
mutations, so the UI can disable controls instead of failing after the fact.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Any, Dict, List, Optional
import datetime
from pydantic import BaseModel, Field
import logging

from routes.auth import get_current_agent
from services.transit_errors import (
    FieldLocked,
    InvalidDirection,
    InvalidFieldValue,
    NotFound,
    OutOfOrderCompletion,
    ReactivationBlocked,
    TransitWorkflowError,
)
from services.transit_file_service import (
    ContainerSize,
    ContainerType,
    FileStatus,
    ProductType,
    TransportType,
)
from services.workflow_engine import WorkflowEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transit-files", tags=["transit-files"])

# Transit file service - set by main app
service = None

def set_service(transit_file_service):
    global service
    service = transit_file_service


# ==================== MODELS ====================

class Container(BaseModel):
    id: Optional[str] = None
    container_number: str
    volume: float = Field(0, ge=0)      # m3
    weight: float = Field(0, ge=0)      # kg
    container_type: ContainerType = "dry"
    size: ContainerSize = "20ft"


class TransitFileCreate(BaseModel):
    shipment_type: str
    bl_number: str = ""
    client_ids: List[str] = []
    origin: str = ""
    destination: str = ""
    transport_type: TransportType = "sea"
    product_type: ProductType = "standard"
    capacity: str = ""
    content_description: str = ""
    containers: List[Container] = []


class TransitFileUpdate(BaseModel):
    bl_number: Optional[str] = None
    client_ids: Optional[List[str]] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    transport_type: Optional[TransportType] = None
    product_type: Optional[ProductType] = None
    capacity: Optional[str] = None
    content_description: Optional[str] = None
    containers: Optional[List[Container]] = None
    status: Optional[FileStatus] = None


class EventCompletion(BaseModel):
    date: Optional[datetime.date] = None
    details: Optional[str] = None


class EventReactivation(BaseModel):
    reason: Optional[str] = None


class EventFieldsUpdate(BaseModel):
    date: Optional[datetime.date] = None
    details: Optional[str] = None


# ==================== HELPERS ====================

def to_http_error(error: TransitWorkflowError) -> HTTPException:
    """Map a workflow validation error to its HTTP status."""
    if isinstance(error, NotFound):
        return HTTPException(status_code=404, detail=error.message)
    if isinstance(error, (InvalidDirection, InvalidFieldValue)):
        return HTTPException(status_code=400, detail=error.message)
    if isinstance(error, (OutOfOrderCompletion, ReactivationBlocked, FieldLocked)):
        return HTTPException(status_code=409, detail=error.message)
    return HTTPException(status_code=400, detail=error.message)


def serialize_transit_file(transit_file: Dict[str, Any], include_events: bool = True) -> Dict[str, Any]:
    state = transit_file["events"]
    data = {k: v for k, v in transit_file.items() if k != "events"}
    data["progress"] = WorkflowEngine.progress(state)
    if include_events:
        data["events"] = WorkflowEngine.describe(state)
    else:
        data.pop("event_history", None)
    return data


# ==================== TRANSIT FILE ENDPOINTS ====================

@router.get("")
async def list_transit_files(
    shipment_type: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    current_event: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500)
):
    """List transit files, optionally filtered by direction, status or current event."""
    try:
        files = await service.list_transit_files(shipment_type=shipment_type, status=status)
    except TransitWorkflowError as e:
        raise to_http_error(e)

    if current_event:
        files = [f for f in files if f["current_event"] == current_event]

    total = len(files)
    page = files[skip:skip + limit]
    return {
        "transit_files": [serialize_transit_file(f, include_events=False) for f in page],
        "total": total,
    }


@router.post("", status_code=201)
async def create_transit_file(
    payload: TransitFileCreate,
    agent: Dict[str, str] = Depends(get_current_agent)
):
    """Create a transit file; its milestones start all pending."""
    try:
        transit_file = await service.create_transit_file(agent=agent, **payload.model_dump())
    except TransitWorkflowError as e:
        raise to_http_error(e)
    return serialize_transit_file(transit_file)


@router.get("/{file_id}")
async def get_transit_file(file_id: str):
    try:
        transit_file = await service.get_transit_file_by_id(file_id)
    except TransitWorkflowError as e:
        raise to_http_error(e)
    return serialize_transit_file(transit_file)


@router.put("/{file_id}")
async def update_transit_file(
    file_id: str,
    payload: TransitFileUpdate,
    agent: Dict[str, str] = Depends(get_current_agent)
):
    try:
        transit_file = await service.update_transit_file(file_id, payload.model_dump(), agent)
    except TransitWorkflowError as e:
        raise to_http_error(e)
    return serialize_transit_file(transit_file)


@router.delete("/{file_id}")
async def delete_transit_file(
    file_id: str,
    agent: Dict[str, str] = Depends(get_current_agent)
):
    try:
        await service.delete_transit_file(file_id)
    except TransitWorkflowError as e:
        raise to_http_error(e)
    return {"deleted": True, "id": file_id}


# ==================== MILESTONE ENDPOINTS ====================

@router.get("/{file_id}/events")
async def get_transit_file_events(file_id: str):
    """Milestones with status, department and guard flags."""
    try:
        transit_file = await service.get_transit_file_by_id(file_id)
    except TransitWorkflowError as e:
        raise to_http_error(e)

    state = transit_file["events"]
    return {
        "file_id": file_id,
        "direction": state.direction.value,
        "current_event": WorkflowEngine.current_event(state),
        "progress": WorkflowEngine.progress(state),
        "events": WorkflowEngine.describe(state),
        "history": transit_file.get("event_history", []),
    }


@router.get("/{file_id}/current-event")
async def get_current_event(file_id: str):
    try:
        transit_file = await service.get_transit_file_by_id(file_id)
    except TransitWorkflowError as e:
        raise to_http_error(e)

    state = transit_file["events"]
    return {
        "file_id": file_id,
        "current_event": WorkflowEngine.current_event(state),
        "current_index": WorkflowEngine.current_index(state),
    }


@router.post("/{file_id}/events/{index}/complete")
async def complete_event(
    file_id: str,
    index: int,
    payload: Optional[EventCompletion] = None,
    agent: Dict[str, str] = Depends(get_current_agent)
):
    """Complete the milestone at index on behalf of the current agent."""
    payload = payload or EventCompletion()
    try:
        transit_file = await service.complete_event(
            file_id, index, agent, event_date=payload.date, details=payload.details
        )
    except TransitWorkflowError as e:
        raise to_http_error(e)
    return serialize_transit_file(transit_file)


@router.post("/{file_id}/events/{index}/reactivate")
async def reactivate_event(
    file_id: str,
    index: int,
    payload: Optional[EventReactivation] = None,
    agent: Dict[str, str] = Depends(get_current_agent)
):
    """Return the last completed milestone to pending."""
    payload = payload or EventReactivation()
    try:
        transit_file = await service.reactivate_event(file_id, index, agent, reason=payload.reason)
    except TransitWorkflowError as e:
        raise to_http_error(e)
    return serialize_transit_file(transit_file)


@router.patch("/{file_id}/events/{index}")
async def update_event_fields(
    file_id: str,
    index: int,
    payload: EventFieldsUpdate,
    agent: Dict[str, str] = Depends(get_current_agent)
):
    """Edit date/details of the current event."""
    try:
        transit_file = await service.update_event_fields(
            file_id, index, agent, event_date=payload.date, details=payload.details
        )
    except TransitWorkflowError as e:
        raise to_http_error(e)
    return serialize_transit_file(transit_file)
