"""Tests for rule validation of proposed boundaries."""

import pytest

from boundary_guard.core.boundary_validator import (
    SECTION_CONSTRAINTS,
    BoundaryValidator,
    SectionConstraints,
    constraints_for,
)
from boundary_guard.models import BoundaryInfo, RejectionReason, SectionType


def span(start: int, end: int | None, confidence: float = 0.9) -> BoundaryInfo:
    return BoundaryInfo(start_line=start, end_line=end, confidence=confidence)


@pytest.fixture
def validator() -> BoundaryValidator:
    return BoundaryValidator()


class TestConstraintTable:
    def test_every_section_type_has_constraints(self) -> None:
        assert set(SECTION_CONSTRAINTS) == set(SectionType)

    def test_constraints_for_back_matter(self) -> None:
        rules = constraints_for(SectionType.BACK_MATTER)
        assert rules.min_start_percent == 0.50
        assert rules.max_removal_percent is None
        assert rules.min_confidence == 0.70


class TestMissingEnd:
    @pytest.mark.parametrize("section_type", list(SectionType))
    def test_absent_end_line_passes_as_no_boundary(
        self, validator: BoundaryValidator, section_type: SectionType
    ) -> None:
        result = validator.validate(span(4, None, confidence=0.1), section_type, 500)

        assert result.is_valid
        assert result.rejection_reason is None
        assert "nothing to remove" in result.explanation


class TestMalformedInput:
    def test_empty_document(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(0, 10), SectionType.FRONT_MATTER, 0)

        assert not result.is_valid
        assert result.rejection_reason == RejectionReason.EMPTY_DOCUMENT

    def test_start_after_end(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(50, 40), SectionType.FRONT_MATTER, 500)

        assert not result.is_valid
        assert result.rejection_reason == RejectionReason.INVALID_RANGE

    def test_negative_start(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(-5, 40), SectionType.FRONT_MATTER, 500)

        assert not result.is_valid
        assert result.rejection_reason == RejectionReason.INVALID_RANGE

    def test_malformed_range_checked_before_confidence(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(50, 40, confidence=0.1), SectionType.INDEX, 500)

        assert result.rejection_reason == RejectionReason.INVALID_RANGE

    def test_end_past_document(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(300, 500), SectionType.BACK_MATTER, 500)

        assert not result.is_valid
        assert result.rejection_reason == RejectionReason.OUT_OF_BOUNDS


class TestSizeAndConfidence:
    def test_span_below_minimum_lines(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(480, 482), SectionType.BACK_MATTER, 500)

        assert not result.is_valid
        assert result.rejection_reason == RejectionReason.SECTION_TOO_SMALL

    def test_index_needs_ten_lines(self, validator: BoundaryValidator) -> None:
        assert not validator.validate(span(480, 488), SectionType.INDEX, 500).is_valid
        assert validator.validate(span(480, 489), SectionType.INDEX, 500).is_valid

    def test_low_confidence(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(300, 499, confidence=0.5), SectionType.BACK_MATTER, 500)

        assert not result.is_valid
        assert result.rejection_reason == RejectionReason.LOW_CONFIDENCE

    def test_confidence_at_minimum_passes(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(300, 499, confidence=0.7), SectionType.BACK_MATTER, 500)

        assert result.is_valid


class TestBackMatter:
    def test_catastrophic_early_back_matter_rejected(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(4, 499), SectionType.BACK_MATTER, 500)

        assert not result.is_valid
        assert result.rejection_reason == RejectionReason.POSITION_TOO_EARLY
        assert "line 4" in result.explanation

    def test_back_matter_in_last_half_passes(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(300, 499, confidence=0.8), SectionType.BACK_MATTER, 500)

        assert result.is_valid
        assert result.rejection_reason is None

    def test_back_matter_has_no_removal_cap(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(250, 499), SectionType.BACK_MATTER, 500)

        assert result.is_valid


class TestIndex:
    def test_index_in_middle_rejected(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(300, 499), SectionType.INDEX, 500)

        assert result.rejection_reason == RejectionReason.POSITION_TOO_EARLY

    def test_index_near_end_passes(self, validator: BoundaryValidator) -> None:
        assert validator.validate(span(400, 499), SectionType.INDEX, 500).is_valid


class TestFrontOfDocument:
    def test_toc_too_late(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(200, 220), SectionType.TABLE_OF_CONTENTS, 500)

        assert result.rejection_reason == RejectionReason.POSITION_TOO_LATE

    def test_toc_near_front_passes(self, validator: BoundaryValidator) -> None:
        assert validator.validate(span(10, 30), SectionType.TABLE_OF_CONTENTS, 500).is_valid

    def test_front_matter_removal_cap(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(0, 200), SectionType.FRONT_MATTER, 500)

        assert result.rejection_reason == RejectionReason.EXCESSIVE_REMOVAL

    def test_front_matter_passes(self, validator: BoundaryValidator) -> None:
        assert validator.validate(span(0, 50), SectionType.FRONT_MATTER, 500).is_valid

    def test_auxiliary_list_too_late(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(250, 260), SectionType.AUXILIARY_LISTS, 500)

        assert result.rejection_reason == RejectionReason.POSITION_TOO_LATE

    def test_auxiliary_list_oversized_span(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(10, 135), SectionType.AUXILIARY_LISTS, 500)

        assert not result.is_valid
        assert result.rejection_reason == RejectionReason.EXCESSIVE_REMOVAL
        explanation = result.explanation.lower()
        assert "exceed" in explanation
        assert "removal" in explanation
        assert "size" in explanation

    def test_auxiliary_list_passes(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(10, 40), SectionType.AUXILIARY_LISTS, 500)

        assert result.is_valid


class TestFootnotes:
    def test_early_notes_use_tighter_cap(self, validator: BoundaryValidator) -> None:
        # 41 lines, 8.2% of the document: over the 5% cap for the first half
        result = validator.validate(span(100, 140), SectionType.FOOTNOTES_ENDNOTES, 500)

        assert result.rejection_reason == RejectionReason.EXCESSIVE_REMOVAL

    def test_late_notes_use_standard_cap(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(400, 440), SectionType.FOOTNOTES_ENDNOTES, 500)

        assert result.is_valid

    def test_late_notes_over_standard_cap(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(300, 380), SectionType.FOOTNOTES_ENDNOTES, 500)

        assert result.rejection_reason == RejectionReason.EXCESSIVE_REMOVAL


class TestCustomConstraints:
    def test_validator_accepts_replacement_table(self) -> None:
        rules = dict(SECTION_CONSTRAINTS)
        rules[SectionType.BACK_MATTER] = SectionConstraints(
            min_lines=5, min_confidence=0.7, min_start_percent=0.9
        )
        validator = BoundaryValidator(rules)

        result = validator.validate(span(300, 499), SectionType.BACK_MATTER, 500)

        assert result.rejection_reason == RejectionReason.POSITION_TOO_EARLY


class TestAuxiliaryListThresholds:
    LINES = 1000

    def test_near_front_passes(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(200, 210, 0.8), SectionType.AUXILIARY_LISTS, self.LINES)

        assert result.is_valid

    def test_past_window_mentions_exceed(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(600, 610, 0.8), SectionType.AUXILIARY_LISTS, self.LINES)

        assert not result.is_valid
        assert "exceed" in result.explanation.lower()

    def test_quarter_of_document_mentions_size(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(100, 349, 0.8), SectionType.AUXILIARY_LISTS, self.LINES)

        assert not result.is_valid
        assert "size" in result.explanation.lower()

    def test_low_confidence_mentions_confidence(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(200, 210, 0.5), SectionType.AUXILIARY_LISTS, self.LINES)

        assert not result.is_valid
        assert "confidence" in result.explanation.lower()

    def test_two_lines_too_small(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(100, 101, 0.8), SectionType.AUXILIARY_LISTS, self.LINES)

        assert result.rejection_reason == RejectionReason.SECTION_TOO_SMALL

    def test_thresholds_are_inclusive(self, validator: BoundaryValidator) -> None:
        result = validator.validate(span(100, 102, 0.65), SectionType.AUXILIARY_LISTS, self.LINES)

        assert result.is_valid


class TestPositionWindows:
    LINES = 1000

    @pytest.mark.parametrize(
        "section_type,start,end,expected",
        [
            (SectionType.BACK_MATTER, 800, 999, True),
            (SectionType.INDEX, 300, 399, False),
            (SectionType.INDEX, 850, 999, True),
            (SectionType.FRONT_MATTER, 0, 499, False),
            (SectionType.FRONT_MATTER, 0, 99, True),
            (SectionType.TABLE_OF_CONTENTS, 500, 520, False),
            (SectionType.TABLE_OF_CONTENTS, 150, 170, True),
        ],
    )
    def test_window(
        self,
        validator: BoundaryValidator,
        section_type: SectionType,
        start: int,
        end: int,
        expected: bool,
    ) -> None:
        result = validator.validate(span(start, end), section_type, self.LINES)

        assert result.is_valid is expected
