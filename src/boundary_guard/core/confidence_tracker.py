"""Per-document accumulation of phase confidences."""

import logging

from boundary_guard.models.confidence import (
    ConfidenceRating,
    PhaseConfidence,
    PipelineConfidence,
)

log = logging.getLogger(__name__)


class ConfidenceTracker:
    """Collects one PhaseConfidence per phase for a single cleaning run.

    Create one tracker per document and pass it to whatever runs the phases;
    ``reset()`` clears it for reuse.
    """

    def __init__(self, weights: dict[str, float] | None = None):
        # Phase name -> weight; unlisted phases weigh 1.0
        self.weights = weights or {}
        self._phases: list[PhaseConfidence] = []

    def record(self, phase: PhaseConfidence) -> None:
        if not phase.succeeded:
            log.debug(f"Phase {phase.phase} recorded with zero confidence")
        self._phases.append(phase)

    @property
    def phases(self) -> list[PhaseConfidence]:
        return list(self._phases)

    def phase(self, name: str) -> PhaseConfidence | None:
        """Most recent record for a phase name."""
        for record in reversed(self._phases):
            if record.phase == name:
                return record
        return None

    @property
    def overall_confidence(self) -> float:
        """Weighted mean of recorded confidences (0 when nothing is recorded)."""
        if not self._phases:
            return 0.0
        total = 0.0
        weight_sum = 0.0
        for record in self._phases:
            weight = self.weights.get(record.phase, 1.0)
            total += record.confidence * weight
            weight_sum += weight
        return total / weight_sum if weight_sum else 0.0

    @property
    def overall_rating(self) -> ConfidenceRating:
        return ConfidenceRating.from_confidence(self.overall_confidence)

    @property
    def fallbacks_used(self) -> int:
        return sum(1 for record in self._phases if record.used_fallback)

    @property
    def warnings(self) -> list[str]:
        return [warning for record in self._phases for warning in record.warnings]

    def meets_threshold(self, threshold: float = 0.6) -> bool:
        return self.overall_confidence >= threshold

    def summary(self) -> str:
        """Short label such as ``High (80%)``."""
        return f"{self.overall_rating.value} ({self.overall_confidence:.0%})"

    def snapshot(self) -> PipelineConfidence:
        return PipelineConfidence(
            phases=self.phases,
            overall_confidence=self.overall_confidence,
            overall_rating=self.overall_rating,
            fallbacks_used=self.fallbacks_used,
            warnings=self.warnings,
        )

    def reset(self) -> None:
        self._phases.clear()
