"""
Transit Hub - Dashboard Router

Event statistics for the dashboard chips and the event-filter sidebar.
"""

from fastapi import APIRouter, HTTPException, Query
from typing import Optional

from routes.transit_files import serialize_transit_file
from services.event_stats import aggregate, department_breakdown, files_at_event
from services.transit_errors import InvalidDirection, NotFound

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

# Transit file service - set by main app
service = None

def set_service(transit_file_service):
    global service
    service = transit_file_service


@router.get("/event-stats")
async def get_event_stats(status: Optional[str] = Query(None)):
    """Count of files sitting at each milestone, per direction."""
    files = await service.list_transit_files(status=status)
    return {
        "total_files": len(files),
        "by_event": aggregate(files),
        "by_department": department_breakdown(files),
    }


@router.get("/files-at-event")
async def get_files_at_event(
    direction: str = Query(...),
    milestone_key: str = Query(...)
):
    """Files currently waiting on a given milestone (or 'completed')."""
    files = await service.list_transit_files()
    try:
        matches = files_at_event(files, direction, milestone_key)
    except InvalidDirection as e:
        raise HTTPException(status_code=400, detail=e.message)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=e.message)

    return {
        "direction": direction.lower(),
        "milestone_key": milestone_key,
        "count": len(matches),
        "transit_files": [serialize_transit_file(f, include_events=False) for f in matches],
    }
