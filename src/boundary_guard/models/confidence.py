"""Confidence records for pipeline phases."""

from enum import Enum

from pydantic import BaseModel, Field


class ConfidenceRating(str, Enum):
    """Five ordered bands of a scalar confidence."""

    VERY_HIGH = "Very High"
    HIGH = "High"
    MODERATE = "Moderate"
    LOW = "Low"
    VERY_LOW = "Very Low"

    @classmethod
    def from_confidence(cls, confidence: float) -> "ConfidenceRating":
        if confidence >= 0.90:
            return cls.VERY_HIGH
        if confidence >= 0.75:
            return cls.HIGH
        if confidence >= 0.60:
            return cls.MODERATE
        if confidence >= 0.40:
            return cls.LOW
        return cls.VERY_LOW


class PhaseConfidence(BaseModel):
    """Confidence data for a single pipeline phase."""

    phase: str
    confidence: float = 0.0
    used_ai: bool = False
    used_fallback: bool = False
    warnings: list[str] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        # Rejected outright or fell back to nothing -> 0
        return self.confidence > 0

    @property
    def rating(self) -> ConfidenceRating:
        return ConfidenceRating.from_confidence(self.confidence)


class PipelineConfidence(BaseModel):
    """Aggregated confidence for one document's cleaning run."""

    phases: list[PhaseConfidence] = Field(default_factory=list)
    overall_confidence: float = 0.0
    overall_rating: ConfidenceRating = ConfidenceRating.VERY_LOW
    fallbacks_used: int = 0
    warnings: list[str] = Field(default_factory=list)
