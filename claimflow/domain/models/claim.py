"""
Claim domain model.
Status and priority vocabularies plus the result of a denial analysis.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List


class ClaimStatus(str, Enum):
    """Lifecycle of a denied claim."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    APPEALED = "appealed"
    RESOLVED = "resolved"
    REJECTED = "rejected"
    PAID = "paid"
    PARTIAL_PAID = "partial_paid"


class ClaimPriority(str, Enum):
    """Work-queue priority of a claim."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ClaimActionType(str, Enum):
    """Kinds of entries in a claim's history."""
    CREATED = "created"
    UPDATED = "updated"
    STATUS_CHANGE = "status_change"
    ASSIGNED = "assigned"
    AI_ANALYSIS = "ai_analysis"


@dataclass(frozen=True)
class DenialAnalysis:
    """Recommendation produced for a denied claim."""

    denial_code: str
    reason: str
    recommended_action: str
    priority: ClaimPriority
    confidence: float
    required_documentation: List[str] = field(default_factory=list)
    appeal_strategy: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["priority"] = self.priority.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DenialAnalysis":
        return cls(
            denial_code=data.get("denial_code", ""),
            reason=data["reason"],
            recommended_action=data["recommended_action"],
            priority=ClaimPriority(data["priority"]),
            confidence=float(data["confidence"]),
            required_documentation=list(data.get("required_documentation", [])),
            appeal_strategy=data.get("appeal_strategy", ""),
        )
