"""
Transit Hub - Department Classifier

Maps a milestone to the department that owns it. Classification runs on the
stable milestone key, never on translated display strings, so the result does
not depend on the UI language.
"""

from enum import Enum
from typing import List, Tuple


class DepartmentTag(str, Enum):
    """Organizational team responsible for a milestone."""
    CUSTOMS = "customs"
    TRANSPORT = "transport"
    LOGISTICS = "logistics"
    COMMERCIAL = "commercial"
    OTHER = "other"


# Checked in order; first match wins ("warehouse_loading" is transport,
# "warehouse_arrival" is transport, "warehouse_reception" is logistics).
DEPARTMENT_KEYWORDS: List[Tuple[DepartmentTag, Tuple[str, ...]]] = [
    (DepartmentTag.CUSTOMS, ("pregate", "declaration", "customs", "clearance")),
    (DepartmentTag.TRANSPORT, ("transport", "loading", "departure", "arrival")),
    (DepartmentTag.LOGISTICS, ("warehouse", "reception", "pickup", "delivery")),
    (DepartmentTag.COMMERCIAL, ("billing", "prealert")),
]


def classify_milestone(milestone_key: str) -> DepartmentTag:
    """Return the owning department for a milestone key."""
    key = (milestone_key or "").lower()
    for department, keywords in DEPARTMENT_KEYWORDS:
        if any(keyword in key for keyword in keywords):
            return department
    return DepartmentTag.OTHER


def get_all_departments() -> List[str]:
    return [d.value for d in DepartmentTag]
