"""Per-section decisions and the per-document defense report."""

from enum import Enum

from pydantic import BaseModel, Field

from boundary_guard.models.confidence import PhaseConfidence, PipelineConfidence
from boundary_guard.models.results import (
    ContentVerificationResult,
    DetectionResult,
    ValidationResult,
)
from boundary_guard.models.section import BoundaryInfo, SectionType
from boundary_guard.models.stats import DetectionStats, ValidationStats, VerificationStats


class DefenseState(str, Enum):
    """States walked by one section type in a single pass."""

    NO_PROPOSAL = "no_proposal"
    AWAITING_ORACLE = "awaiting_oracle"
    VALIDATED_BY_A = "validated_by_a"
    REJECTED_BY_A = "rejected_by_a"
    FALLBACK_ATTEMPTED = "fallback_attempted"
    VERIFIED_BY_B = "verified_by_b"
    REJECTED_BY_B = "rejected_by_b"
    REMOVED = "removed"
    PRESERVED = "preserved"


class SectionDecision(BaseModel):
    """Final removal decision for one section type of one document."""

    section_type: SectionType
    trail: list[DefenseState] = Field(default_factory=list)
    spans: list[BoundaryInfo] = Field(default_factory=list)  # Accepted removals
    used_ai: bool = False
    used_fallback: bool = False
    validations: list[ValidationResult] = Field(default_factory=list)
    verifications: list[ContentVerificationResult] = Field(default_factory=list)
    detections: list[DetectionResult] = Field(default_factory=list)
    confidence: PhaseConfidence | None = None
    warnings: list[str] = Field(default_factory=list)

    @property
    def outcome(self) -> DefenseState:
        if self.trail and self.trail[-1] in (DefenseState.REMOVED, DefenseState.PRESERVED):
            return self.trail[-1]
        return DefenseState.PRESERVED

    @property
    def removed(self) -> bool:
        return self.outcome == DefenseState.REMOVED and bool(self.spans)

    @property
    def lines_removed(self) -> int:
        return sum(span.line_count or 0 for span in self.spans)


class DefenseReport(BaseModel):
    """Everything decided for one document."""

    line_count: int
    decisions: list[SectionDecision] = Field(default_factory=list)
    confidence: PipelineConfidence = Field(default_factory=PipelineConfidence)
    validation_stats: ValidationStats = Field(default_factory=ValidationStats)
    verification_stats: VerificationStats = Field(default_factory=VerificationStats)
    detection_stats: DetectionStats = Field(default_factory=DetectionStats)

    def decision_for(self, section_type: SectionType) -> SectionDecision | None:
        for decision in self.decisions:
            if decision.section_type == section_type:
                return decision
        return None

    def removal_spans(self) -> list[BoundaryInfo]:
        """All accepted spans, in document order."""
        spans = [span for d in self.decisions if d.removed for span in d.spans]
        return sorted(spans, key=lambda s: s.start_line)
