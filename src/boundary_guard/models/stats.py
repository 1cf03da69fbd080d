"""Running statistics for each defense phase."""

from pydantic import BaseModel, Field

from boundary_guard.models.results import (
    ContentVerificationResult,
    DetectionResult,
    ValidationResult,
)


def _rate(part: int, total: int) -> float:
    return part / total if total else 0.0


class ValidationStats(BaseModel):
    """Phase A pass/reject counts."""

    total: int = 0
    passed: int = 0
    rejected: int = 0
    by_reason: dict[str, int] = Field(default_factory=dict)
    rejections_by_section: dict[str, int] = Field(default_factory=dict)

    def record(self, result: ValidationResult) -> None:
        self.total += 1
        if result.is_valid:
            self.passed += 1
            return
        self.rejected += 1
        reason = result.rejection_reason.value if result.rejection_reason else "unknown"
        self.by_reason[reason] = self.by_reason.get(reason, 0) + 1
        section = result.section_type.value
        self.rejections_by_section[section] = self.rejections_by_section.get(section, 0) + 1

    @property
    def pass_rate(self) -> float:
        return _rate(self.passed, self.total)

    def summary(self) -> str:
        lines = [
            "Boundary Validation:",
            f"  Total: {self.total}",
            f"  Passed: {self.passed} ({self.pass_rate:.0%})",
            f"  Rejected: {self.rejected}",
        ]
        for reason, count in sorted(self.by_reason.items()):
            lines.append(f"    {reason}: {count}")
        return "\n".join(lines)


class VerificationStats(BaseModel):
    """Phase B verified/failed counts."""

    total: int = 0
    verified: int = 0
    failed: int = 0
    by_reason: dict[str, int] = Field(default_factory=dict)

    def record(self, result: ContentVerificationResult) -> None:
        self.total += 1
        if result.is_valid:
            self.verified += 1
            return
        self.failed += 1
        reason = result.failure_reason.value if result.failure_reason else "unknown"
        self.by_reason[reason] = self.by_reason.get(reason, 0) + 1

    @property
    def verification_rate(self) -> float:
        return _rate(self.verified, self.total)

    def summary(self) -> str:
        return (
            "Content Verification:\n"
            f"  Total: {self.total}\n"
            f"  Verified: {self.verified} ({self.verification_rate:.0%})\n"
            f"  Failed: {self.failed}"
        )


class DetectionStats(BaseModel):
    """Phase C attempt/success counts."""

    total_attempts: int = 0
    successful: int = 0
    failed: int = 0
    by_section: dict[str, int] = Field(default_factory=dict)
    confidence_sum: float = 0.0

    def record(self, result: DetectionResult) -> None:
        self.total_attempts += 1
        if not result.detected:
            self.failed += 1
            return
        self.successful += 1
        self.confidence_sum += result.confidence
        section = result.section_type.value
        self.by_section[section] = self.by_section.get(section, 0) + 1

    @property
    def success_rate(self) -> float:
        return _rate(self.successful, self.total_attempts)

    @property
    def average_confidence(self) -> float:
        return self.confidence_sum / self.successful if self.successful else 0.0

    def summary(self) -> str:
        return (
            "Heuristic Detection:\n"
            f"  Total Attempts: {self.total_attempts}\n"
            f"  Successful: {self.successful} ({self.success_rate:.0%})\n"
            f"  Failed: {self.failed}\n"
            f"  Average Confidence: {self.average_confidence:.0%}"
        )
