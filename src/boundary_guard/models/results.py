"""Result records produced by the three defense phases."""

from enum import Enum

from pydantic import BaseModel, Field

from boundary_guard.models.section import BoundaryInfo, SectionType


class RejectionReason(str, Enum):
    """Why a proposed boundary failed rule validation."""

    EMPTY_DOCUMENT = "empty_document"
    INVALID_RANGE = "invalid_range"
    SECTION_TOO_SMALL = "section_too_small"
    LOW_CONFIDENCE = "low_confidence"
    POSITION_TOO_EARLY = "position_too_early"
    POSITION_TOO_LATE = "position_too_late"
    OUT_OF_BOUNDS = "out_of_bounds"
    EXCESSIVE_REMOVAL = "excessive_removal"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").capitalize()


class ValidationResult(BaseModel):
    """Outcome of Phase A (position, size and confidence rules)."""

    is_valid: bool
    explanation: str
    section_type: SectionType
    boundary: BoundaryInfo
    rejection_reason: RejectionReason | None = None

    @classmethod
    def passed(
        cls, section_type: SectionType, boundary: BoundaryInfo, explanation: str
    ) -> "ValidationResult":
        return cls(
            is_valid=True,
            explanation=explanation,
            section_type=section_type,
            boundary=boundary,
        )

    @classmethod
    def rejected(
        cls,
        section_type: SectionType,
        boundary: BoundaryInfo,
        reason: RejectionReason,
        explanation: str,
    ) -> "ValidationResult":
        return cls(
            is_valid=False,
            explanation=explanation,
            section_type=section_type,
            boundary=boundary,
            rejection_reason=reason,
        )


class VerificationFailureReason(str, Enum):
    """Why a span's text did not look like the claimed section."""

    INSUFFICIENT_CONTENT = "insufficient_content"
    NO_EXPECTED_HEADERS = "no_expected_headers"
    NO_EXPECTED_STRUCTURE = "no_expected_structure"
    CHAPTER_CONTENT_FOUND = "chapter_content_found"
    NARRATIVE_PROSE_FOUND = "narrative_prose_found"


class ContentVerificationResult(BaseModel):
    """Outcome of Phase B (content signature check)."""

    is_valid: bool
    confidence: float = 0.0
    section_type: SectionType
    failure_reason: VerificationFailureReason | None = None
    matched_patterns: list[str] = Field(default_factory=list)
    explanation: str = ""

    @classmethod
    def verified(
        cls,
        section_type: SectionType,
        confidence: float,
        matched_patterns: list[str],
        explanation: str,
    ) -> "ContentVerificationResult":
        return cls(
            is_valid=True,
            confidence=round(min(1.0, max(0.0, confidence)), 4),
            section_type=section_type,
            matched_patterns=matched_patterns,
            explanation=explanation,
        )

    @classmethod
    def failed(
        cls,
        section_type: SectionType,
        reason: VerificationFailureReason,
        explanation: str,
        matched_patterns: list[str] | None = None,
    ) -> "ContentVerificationResult":
        return cls(
            is_valid=False,
            confidence=0.0,
            section_type=section_type,
            failure_reason=reason,
            matched_patterns=matched_patterns or [],
            explanation=explanation,
        )


class DetectionResult(BaseModel):
    """Outcome of a single Phase C detector."""

    detected: bool
    section_type: SectionType
    boundary_line: int | None = None
    confidence: float = 0.0
    matched_patterns: list[str] = Field(default_factory=list)
    explanation: str = ""

    @classmethod
    def found(
        cls,
        section_type: SectionType,
        boundary_line: int,
        confidence: float,
        matched_patterns: list[str],
        explanation: str,
    ) -> "DetectionResult":
        return cls(
            detected=True,
            section_type=section_type,
            boundary_line=boundary_line,
            confidence=min(1.0, confidence),
            matched_patterns=matched_patterns,
            explanation=explanation,
        )

    @classmethod
    def not_found(cls, section_type: SectionType, explanation: str) -> "DetectionResult":
        return cls(detected=False, section_type=section_type, explanation=explanation)
