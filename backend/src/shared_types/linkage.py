"""
Shared types describing who a patient is permitted to book with.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class LinkageMode(str, Enum):
    FIXED = "FIXED"
    SELECTABLE = "SELECTABLE"


@dataclass(frozen=True)
class LinkedPractitioner:
    id: int
    name: str
    specialization: Optional[str] = None


@dataclass(frozen=True)
class LinkedCenter:
    id: int
    name: str
    practitioners: List[LinkedPractitioner] = field(default_factory=list)


@dataclass(frozen=True)
class LinkageResult:
    """
    Resolved booking permissions for a patient.

    In FIXED mode `centers` holds exactly one center with exactly one
    practitioner. In SELECTABLE mode it holds every actively linked center
    with its actively linked practitioners (possibly none).
    """
    patient_id: int
    mode: LinkageMode
    centers: List[LinkedCenter] = field(default_factory=list)

    @property
    def practitioner(self) -> Optional[LinkedPractitioner]:
        """The fixed practitioner, or None in SELECTABLE mode."""
        if self.mode is LinkageMode.FIXED and self.centers and self.centers[0].practitioners:
            return self.centers[0].practitioners[0]
        return None

    @property
    def center(self) -> Optional[LinkedCenter]:
        """The fixed center, or None in SELECTABLE mode."""
        if self.mode is LinkageMode.FIXED and self.centers:
            return self.centers[0]
        return None

    def allows(self, center_id: int, practitioner_id: int) -> bool:
        """Check whether the (center, practitioner) pair is in the resolved set."""
        for center in self.centers:
            if center.id != center_id:
                continue
            if any(p.id == practitioner_id for p in center.practitioners):
                return True
        return False

    def center_ids(self) -> List[int]:
        return [c.id for c in self.centers]
