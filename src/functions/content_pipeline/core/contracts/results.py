"""Result models returned by claims, stage batches and housekeeping jobs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .content_record import ContentRecord


class ClaimOutcome(str, Enum):
    CLAIMED = "claimed"
    LOST = "lost"


@dataclass(frozen=True)
class ClaimResult:
    """Outcome of a conditional claim.

    ``record`` is the refreshed row after a successful claim so later writes
    can be guarded on its new version.
    """

    outcome: ClaimOutcome
    record: Optional[ContentRecord] = None
    reason: Optional[str] = None

    @property
    def claimed(self) -> bool:
        return self.outcome is ClaimOutcome.CLAIMED

    @classmethod
    def won(cls, record: ContentRecord) -> "ClaimResult":
        return cls(outcome=ClaimOutcome.CLAIMED, record=record)

    @classmethod
    def lost(cls, reason: str) -> "ClaimResult":
        return cls(outcome=ClaimOutcome.LOST, reason=reason)


class BatchResult(BaseModel):
    """Summary of one stage worker invocation."""

    stage: str
    processed_count: int = Field(default=0, ge=0)
    failed_count: int = Field(default=0, ge=0)
    skipped_count: int = Field(default=0, ge=0)
    errors: List[str] = Field(default_factory=list)

    def record_failure(self, message: str, count: int = 1) -> None:
        self.failed_count += count
        self.errors.append(message)

    def to_response(self) -> Dict[str, object]:
        return {
            "success": True,
            "stage": self.stage,
            "processed_count": self.processed_count,
            "failed_count": self.failed_count,
            "skipped_count": self.skipped_count,
            "errors": list(self.errors),
        }


class StuckCleanupResult(BaseModel):
    """Summary of a stuck-content recovery run."""

    stuck_found: int = 0
    cleaned_count: int = 0
    status_breakdown: Dict[str, int] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)

    def to_response(self) -> Dict[str, object]:
        return {"success": True, **self.model_dump()}


class ExpirationResult(BaseModel):
    """Summary of an expiration housekeeping run."""

    expired_found: int = 0
    expired_count: int = 0
    errors: List[str] = Field(default_factory=list)

    def to_response(self) -> Dict[str, object]:
        return {"success": True, **self.model_dump()}


class HealthReport(BaseModel):
    """Pipeline health snapshot produced by the monitor."""

    overall_status: str = Field(default="healthy", description="healthy|warning|critical")
    status_counts: Dict[str, int] = Field(default_factory=dict)
    queue_depths: Dict[str, int] = Field(default_factory=dict)
    in_progress_count: int = 0
    stuck_count: int = 0
    failed_count: int = 0
    failure_rate: float = 0.0
    issues: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    checked_at: str

    def to_response(self) -> Dict[str, object]:
        return {"success": True, **self.model_dump()}
