"""
Transit Hub - Catalog Router

Milestone sequences and form options.
"""

from fastapi import APIRouter, HTTPException

from services.department_classifier import get_all_departments
from services.event_catalog import get_all_directions, sequence_for
from services.transit_errors import InvalidDirection
from services.transit_file_service import (
    CONTAINER_SIZES,
    CONTAINER_TYPES,
    FILE_STATUSES,
    PRODUCT_TYPES,
    TRANSPORT_TYPES,
)

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/options")
async def get_options():
    """Select options for the transit file forms."""
    return {
        "shipment_types": get_all_directions(),
        "transport_types": TRANSPORT_TYPES,
        "product_types": PRODUCT_TYPES,
        "statuses": FILE_STATUSES,
        "container_types": CONTAINER_TYPES,
        "container_sizes": CONTAINER_SIZES,
        "departments": get_all_departments(),
    }


@router.get("/{direction}")
async def get_milestones(direction: str):
    """Ordered milestone definitions for a shipment direction."""
    try:
        milestones = sequence_for(direction)
    except InvalidDirection as e:
        raise HTTPException(status_code=400, detail=e.message)

    return {
        "direction": direction.lower(),
        "milestones": [
            {"index": index, **milestone.to_dict()}
            for index, milestone in enumerate(milestones)
        ],
    }
