"""
Transit Hub - Milestone Event Catalog

Fixed, ordered milestone sequences for each shipment direction. Every transit
file walks exactly one of these sequences, in order, from the first milestone
to billing.

Export: pregate -> warehouse reception -> declaration -> customs clearance ->
        warehouse loading -> effective transport -> vessel loading ->
        departure -> estimated arrival -> billing
Import: prealert -> arrival -> declaration -> customs clearance ->
        maritime company slip -> pregate -> pickup -> delivery ->
        warehouse arrival -> billing
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple, Union

from services.department_classifier import DepartmentTag, classify_milestone
from services.transit_errors import InvalidDirection, NotFound


class Direction(str, Enum):
    """Shipment direction of a transit file."""
    EXPORT = "export"
    IMPORT = "import"


@dataclass(frozen=True)
class MilestoneDefinition:
    """One named step of a direction's workflow."""
    key: str
    display_name: str
    direction: Direction
    department: DepartmentTag

    def to_dict(self) -> Dict:
        return {
            "key": self.key,
            "display_name": self.display_name,
            "direction": self.direction.value,
            "department": self.department.value,
        }


# =============================================================================
# SEQUENCES
# =============================================================================

EXPORT_MILESTONE_KEYS = (
    "export_pregate",
    "warehouse_reception",
    "declaration",
    "export_customs_clearance",
    "warehouse_loading",
    "effective_transport",
    "vessel_loading",
    "departure",
    "estimated_arrival",
    "billing",
)

IMPORT_MILESTONE_KEYS = (
    "import_prealert",
    "arrival",
    "declaration",
    "import_customs_clearance",
    "maritime_company_slip",
    "import_pregate",
    "pickup",
    "delivery",
    "warehouse_arrival",
    "billing",
)


def _build_sequence(direction: Direction, keys: Tuple[str, ...]) -> Tuple[MilestoneDefinition, ...]:
    # display_name is the translation key; the UI resolves it through t()
    return tuple(
        MilestoneDefinition(
            key=key,
            display_name=key,
            direction=direction,
            department=classify_milestone(key),
        )
        for key in keys
    )


MILESTONE_SEQUENCES: Dict[Direction, Tuple[MilestoneDefinition, ...]] = {
    Direction.EXPORT: _build_sequence(Direction.EXPORT, EXPORT_MILESTONE_KEYS),
    Direction.IMPORT: _build_sequence(Direction.IMPORT, IMPORT_MILESTONE_KEYS),
}


# =============================================================================
# LOOKUPS
# =============================================================================

def parse_direction(direction: Union[Direction, str]) -> Direction:
    """Coerce a direction value, raising InvalidDirection for anything else."""
    if isinstance(direction, Direction):
        return direction
    try:
        return Direction((direction or "").lower())
    except (ValueError, AttributeError):
        raise InvalidDirection(direction)


def sequence_for(direction: Union[Direction, str]) -> Tuple[MilestoneDefinition, ...]:
    """Get the ordered milestone definitions for a direction."""
    return MILESTONE_SEQUENCES[parse_direction(direction)]


def milestone_keys(direction: Union[Direction, str]) -> List[str]:
    return [m.key for m in sequence_for(direction)]


def milestone_at(direction: Union[Direction, str], index: int) -> MilestoneDefinition:
    sequence = sequence_for(direction)
    if not 0 <= index < len(sequence):
        raise NotFound(
            f"No milestone at index {index} for {parse_direction(direction).value} files",
            {"index": index},
        )
    return sequence[index]


def index_of(direction: Union[Direction, str], milestone_key: str) -> int:
    """Position of a milestone key within its direction's sequence."""
    for index, milestone in enumerate(sequence_for(direction)):
        if milestone.key == milestone_key:
            return index
    raise NotFound(
        f"Unknown milestone '{milestone_key}' for {parse_direction(direction).value} files",
        {"milestone_key": milestone_key},
    )


def get_all_directions() -> List[str]:
    return [d.value for d in Direction]
