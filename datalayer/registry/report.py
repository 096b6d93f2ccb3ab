"""Per-declaration outcomes of association resolution."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class AssociationStatus(str, Enum):
    APPLIED = "applied"
    SKIPPED_INVALID = "skipped_invalid"
    SKIPPED_TARGET_MISSING = "skipped_target_missing"
    SKIPPED_SOURCE_MISSING = "skipped_source_missing"
    SKIPPED_REJECTED = "skipped_rejected"


@dataclass(frozen=True)
class AssociationOutcome:
    """Terminal state of one association declaration."""
    source_name: str
    index: int
    status: AssociationStatus
    declaration: Any
    reason: Optional[str] = None

    @property
    def applied(self) -> bool:
        return self.status is AssociationStatus.APPLIED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source_name,
            "index": self.index,
            "status": self.status.value,
            "reason": self.reason,
        }


@dataclass
class AssociationReport:
    outcomes: List[AssociationOutcome] = field(default_factory=list)

    def add(self, outcome: AssociationOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def applied(self) -> List[AssociationOutcome]:
        return [o for o in self.outcomes if o.applied]

    @property
    def skipped(self) -> List[AssociationOutcome]:
        return [o for o in self.outcomes if not o.applied]

    def for_source(self, source_name: str) -> List[AssociationOutcome]:
        return [o for o in self.outcomes if o.source_name == source_name]

    def counts(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in AssociationStatus}
        for outcome in self.outcomes:
            counts[outcome.status.value] += 1
        return counts

    def __len__(self) -> int:
        return len(self.outcomes)
