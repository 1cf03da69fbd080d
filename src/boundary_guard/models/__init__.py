"""Data models."""

from boundary_guard.models.confidence import (
    ConfidenceRating,
    PhaseConfidence,
    PipelineConfidence,
)
from boundary_guard.models.decision import (
    DefenseReport,
    DefenseState,
    SectionDecision,
)
from boundary_guard.models.results import (
    ContentVerificationResult,
    DetectionResult,
    RejectionReason,
    ValidationResult,
    VerificationFailureReason,
)
from boundary_guard.models.section import (
    AuxiliaryListInfo,
    BoundaryInfo,
    SectionType,
)
from boundary_guard.models.stats import (
    DetectionStats,
    ValidationStats,
    VerificationStats,
)

__all__ = [
    # Section models
    "SectionType",
    "BoundaryInfo",
    "AuxiliaryListInfo",
    # Phase results
    "RejectionReason",
    "ValidationResult",
    "VerificationFailureReason",
    "ContentVerificationResult",
    "DetectionResult",
    # Confidence models
    "ConfidenceRating",
    "PhaseConfidence",
    "PipelineConfidence",
    # Decisions
    "DefenseState",
    "SectionDecision",
    "DefenseReport",
    # Statistics
    "ValidationStats",
    "VerificationStats",
    "DetectionStats",
]
