"""Phase A: rule validation of proposed section boundaries.

Checks a proposed span against per-section position windows, removal caps,
minimum confidence and minimum span length before anything is trusted.
"""

import logging
from dataclasses import dataclass

from boundary_guard.models.results import RejectionReason, ValidationResult
from boundary_guard.models.section import BoundaryInfo, SectionType

log = logging.getLogger(__name__)


# =============================================================================
# Constraint Table
# =============================================================================


@dataclass(frozen=True)
class SectionConstraints:
    """Constant validation limits for one section type.

    Fractions are of the total document line count. ``None`` disables a check.
    """

    min_lines: int
    min_confidence: float
    min_start_percent: float | None = None
    max_start_percent: float | None = None
    max_removal_percent: float | None = None
    # Tighter removal cap for spans that start in the first half
    early_removal_percent: float | None = None


SECTION_CONSTRAINTS: dict[SectionType, SectionConstraints] = {
    SectionType.FRONT_MATTER: SectionConstraints(
        min_lines=3,
        min_confidence=0.60,
        max_removal_percent=0.30,
    ),
    SectionType.TABLE_OF_CONTENTS: SectionConstraints(
        min_lines=5,
        min_confidence=0.60,
        max_start_percent=0.30,
    ),
    SectionType.AUXILIARY_LISTS: SectionConstraints(
        min_lines=3,
        min_confidence=0.65,
        max_start_percent=0.40,
        max_removal_percent=0.15,
    ),
    SectionType.BACK_MATTER: SectionConstraints(
        min_lines=5,
        min_confidence=0.70,
        min_start_percent=0.50,
    ),
    SectionType.INDEX: SectionConstraints(
        min_lines=10,
        min_confidence=0.65,
        min_start_percent=0.70,
    ),
    SectionType.FOOTNOTES_ENDNOTES: SectionConstraints(
        min_lines=4,
        min_confidence=0.70,
        max_removal_percent=0.12,
        early_removal_percent=0.05,
    ),
}


def constraints_for(section_type: SectionType) -> SectionConstraints:
    """Look up the constraint record for a section type."""
    return SECTION_CONSTRAINTS[section_type]


# =============================================================================
# Validator
# =============================================================================


class BoundaryValidator:
    """Accept or reject a proposed boundary using deterministic rules."""

    def __init__(self, constraints: dict[SectionType, SectionConstraints] | None = None):
        self.constraints = constraints or SECTION_CONSTRAINTS

    def validate(
        self,
        boundary: BoundaryInfo,
        section_type: SectionType,
        document_line_count: int,
    ) -> ValidationResult:
        """Validate a boundary; never raises.

        Checks run in order and stop at the first failure: missing end,
        malformed range, span length, confidence, start position, bounds,
        removal size.
        """
        rules = self.constraints[section_type]
        name = section_type.display_name
        start, end = boundary.start_line, boundary.end_line

        if end is None:
            return ValidationResult.passed(
                section_type, boundary, "No boundary (end line absent): nothing to remove"
            )

        if document_line_count <= 0:
            return self._reject(
                section_type,
                boundary,
                RejectionReason.EMPTY_DOCUMENT,
                "Document has no lines; a boundary cannot be positioned",
            )

        if start < 0 or end < 0:
            return self._reject(
                section_type,
                boundary,
                RejectionReason.INVALID_RANGE,
                f"Invalid range: negative line numbers (start {start}, end {end})",
            )

        if start > end:
            return self._reject(
                section_type,
                boundary,
                RejectionReason.INVALID_RANGE,
                f"Invalid range: start line {start} is after end line {end}",
            )

        line_count = end - start + 1
        if line_count < rules.min_lines:
            return self._reject(
                section_type,
                boundary,
                RejectionReason.SECTION_TOO_SMALL,
                f"{name} section too small: {line_count} line(s), "
                f"minimum is {rules.min_lines}",
            )

        if boundary.confidence < rules.min_confidence:
            return self._reject(
                section_type,
                boundary,
                RejectionReason.LOW_CONFIDENCE,
                f"Confidence {boundary.confidence:.2f} is below the "
                f"{rules.min_confidence:.2f} minimum for {name}",
            )

        start_percent = start / document_line_count
        if rules.min_start_percent is not None and start_percent < rules.min_start_percent:
            return self._reject(
                section_type,
                boundary,
                RejectionReason.POSITION_TOO_EARLY,
                f"{name} starts at line {start} ({start_percent:.0%} into document), "
                f"before the minimum position of {rules.min_start_percent:.0%}",
            )

        if rules.max_start_percent is not None and start_percent > rules.max_start_percent:
            return self._reject(
                section_type,
                boundary,
                RejectionReason.POSITION_TOO_LATE,
                f"{name} starts at line {start} ({start_percent:.0%} into document), "
                f"which would exceed the maximum start position of "
                f"{rules.max_start_percent:.0%}",
            )

        if end >= document_line_count:
            return self._reject(
                section_type,
                boundary,
                RejectionReason.OUT_OF_BOUNDS,
                f"Out of bounds: end line {end} exceeds the document length "
                f"({document_line_count} lines)",
            )

        removal_percent = line_count / document_line_count
        max_removal = rules.max_removal_percent
        if rules.early_removal_percent is not None and start_percent < 0.5:
            max_removal = rules.early_removal_percent

        if max_removal is not None and removal_percent > max_removal:
            return self._reject(
                section_type,
                boundary,
                RejectionReason.EXCESSIVE_REMOVAL,
                f"Removal of {line_count} lines ({removal_percent:.1%} of document) "
                f"would exceed the {max_removal:.0%} maximum removal size for {name}",
            )

        return ValidationResult.passed(
            section_type,
            boundary,
            f"{name} lines {start}-{end} ({line_count} lines, "
            f"{removal_percent:.0%} of document) passed validation",
        )

    def _reject(
        self,
        section_type: SectionType,
        boundary: BoundaryInfo,
        reason: RejectionReason,
        explanation: str,
    ) -> ValidationResult:
        if section_type == SectionType.BACK_MATTER and reason == RejectionReason.POSITION_TOO_EARLY:
            log.warning(f"Rejected catastrophic back matter boundary: {explanation}")
        else:
            log.info(f"Rejected {section_type.value} boundary ({reason.value}): {explanation}")
        return ValidationResult.rejected(section_type, boundary, reason, explanation)
