"""Tests for oracle-free boundary detection."""

from collections.abc import Callable

import pytest

from boundary_guard.core.heuristic_detector import DetectorConfig, HeuristicBoundaryDetector
from boundary_guard.models import SectionType


@pytest.fixture
def detector() -> HeuristicBoundaryDetector:
    return HeuristicBoundaryDetector()


class TestAuxiliaryLists:
    def test_list_near_front_detected(
        self,
        detector: HeuristicBoundaryDetector,
        auxiliary_list_document: Callable[..., str],
        table_entries: list[str],
    ) -> None:
        content = auxiliary_list_document("LIST OF TABLES", 0.10, table_entries)

        lists = detector.detect_auxiliary_lists(content)

        assert len(lists) == 1
        assert lists[0].list_type == "List of Tables"
        assert lists[0].start_line == 21
        assert lists[0].end_line == 25
        assert lists[0].entry_count == 3
        assert lists[0].confidence == pytest.approx(1.0)

    def test_list_past_forty_percent_ignored(
        self,
        detector: HeuristicBoundaryDetector,
        auxiliary_list_document: Callable[..., str],
        table_entries: list[str],
    ) -> None:
        content = auxiliary_list_document("LIST OF TABLES", 0.60, table_entries)

        assert detector.detect_auxiliary_lists(content) == []

    def test_markdown_header(
        self,
        detector: HeuristicBoundaryDetector,
        auxiliary_list_document: Callable[..., str],
        table_entries: list[str],
    ) -> None:
        content = auxiliary_list_document("## List of Tables", 0.05, table_entries)

        lists = detector.detect_auxiliary_lists(content)

        assert [info.list_type for info in lists] == ["List of Tables"]
        assert lists[0].header_text == "## List of Tables"

    def test_multiple_lists_in_order(
        self, detector: HeuristicBoundaryDetector, multiple_lists_document: str
    ) -> None:
        lists = detector.detect_auxiliary_lists(multiple_lists_document)

        assert [info.list_type for info in lists] == ["List of Figures", "List of Tables"]
        assert (lists[0].start_line, lists[0].end_line) == (4, 7)
        assert (lists[1].start_line, lists[1].end_line) == (9, 12)

    def test_lists_become_spans(
        self, detector: HeuristicBoundaryDetector, multiple_lists_document: str
    ) -> None:
        spans = detector.detect(SectionType.AUXILIARY_LISTS, multiple_lists_document)

        assert [(s.start_line, s.end_line) for s in spans] == [(4, 7), (9, 12)]
        assert spans[0].notes == "heuristic: List of Figures"


class TestBackMatter:
    def test_bibliography_detected(
        self, detector: HeuristicBoundaryDetector, back_matter_document: str
    ) -> None:
        result = detector.detect_back_matter(back_matter_document)

        assert result.detected
        assert result.boundary_line == 141
        assert result.confidence == pytest.approx(0.95)

    def test_span_runs_to_end(
        self, detector: HeuristicBoundaryDetector, back_matter_document: str
    ) -> None:
        spans = detector.detect(SectionType.BACK_MATTER, back_matter_document)

        assert [(s.start_line, s.end_line) for s in spans] == [(141, 199)]

    def test_early_notes_header_ignored(
        self, detector: HeuristicBoundaryDetector, early_notes_document: str
    ) -> None:
        result = detector.detect_back_matter(early_notes_document)

        assert not result.detected
        assert result.boundary_line is None

    def test_several_headers_boost_confidence(self, detector: HeuristicBoundaryDetector) -> None:
        lines = [f"Main content line {i}." for i in range(120)]
        lines += ["# APPENDIX", "Tables.", "# GLOSSARY", "Terms.", "# BIBLIOGRAPHY", "Books."]

        result = detector.detect_back_matter("\n".join(lines))

        assert result.boundary_line == 120
        assert result.confidence == pytest.approx(1.0)
        assert len(result.matched_patterns) == 3


class TestIndex:
    def test_index_with_header(
        self, detector: HeuristicBoundaryDetector, index_document: str
    ) -> None:
        result = detector.detect_index(index_document)

        assert result.detected
        assert result.boundary_line == 161
        assert result.confidence == pytest.approx(1.0)

    def test_headerless_index_by_entry_run(self, detector: HeuristicBoundaryDetector) -> None:
        lines = [f"Main content line {i}." for i in range(150)]
        lines += [f"topic {chr(97 + i % 26)}{'x' * (i // 26)}, {i + 10}" for i in range(40)]

        result = detector.detect_index("\n".join(lines))

        assert result.detected
        assert result.boundary_line == 150
        assert result.confidence == pytest.approx(0.8)

    def test_short_entry_run_not_enough(self, detector: HeuristicBoundaryDetector) -> None:
        lines = [f"Main content line {i}." for i in range(150)]
        lines += [f"topic {chr(97 + i)}, {i + 10}" for i in range(10)]

        assert not detector.detect_index("\n".join(lines)).detected


class TestFrontMatter:
    def test_ends_before_first_chapter(
        self, detector: HeuristicBoundaryDetector, front_matter_document: str
    ) -> None:
        result = detector.detect_front_matter_end(front_matter_document)

        assert result.detected
        assert result.boundary_line == 10
        assert result.confidence == pytest.approx(1.0)

    def test_span_starts_at_zero(
        self, detector: HeuristicBoundaryDetector, front_matter_document: str
    ) -> None:
        spans = detector.detect(SectionType.FRONT_MATTER, front_matter_document)

        assert [(s.start_line, s.end_line) for s in spans] == [(0, 10)]

    def test_indicator_cluster_without_chapter(self, detector: HeuristicBoundaryDetector) -> None:
        lines = ["A Title", "", "© 2024 Publisher", "ISBN 978-1-234567-89-0", "", "# Opening"]
        lines += [f"Body line {i}." for i in range(100)]

        result = detector.detect_front_matter_end("\n".join(lines))

        assert result.detected
        assert result.boundary_line == 4
        assert result.confidence == pytest.approx(0.7)


class TestTableOfContents:
    def test_toc_with_header(self, detector: HeuristicBoundaryDetector, toc_document: str) -> None:
        result = detector.detect_toc(toc_document)

        assert result.detected
        assert result.boundary_line == 2
        assert detector.find_toc_end_line(toc_document, 2) == 7

    def test_toc_span(self, detector: HeuristicBoundaryDetector, toc_document: str) -> None:
        spans = detector.detect(SectionType.TABLE_OF_CONTENTS, toc_document)

        assert [(s.start_line, s.end_line) for s in spans] == [(2, 7)]

    def test_headerless_toc(self, detector: HeuristicBoundaryDetector) -> None:
        lines = ["# Title", ""]
        lines += [f"Chapter {i}: Title {i} .......... {i * 10}" for i in range(1, 11)]
        lines += ["", "# Chapter 1: Start", ""]
        lines += [f"Body line {i}." for i in range(100)]

        result = detector.detect_toc("\n".join(lines))

        assert result.detected
        assert result.boundary_line == 2
        assert result.confidence == pytest.approx(0.7)


class TestEndnotes:
    def test_notes_section_detected(self, detector: HeuristicBoundaryDetector) -> None:
        lines = [f"Main content line {i}. This is the body of the document." for i in range(120)]
        lines += ["# NOTES", ""]
        lines += [f"{i}. Smith, J. Research Methods, p. {i * 3}." for i in range(1, 11)]
        lines += ["", "# BIBLIOGRAPHY", ""]
        lines += [f"Author {i}. A Book. Publisher, 2001." for i in range(5)]
        content = "\n".join(lines)

        spans = detector.detect(SectionType.FOOTNOTES_ENDNOTES, content)

        assert [(s.start_line, s.end_line) for s in spans] == [(120, 131)]
        assert spans[0].confidence == pytest.approx(1.0)

    def test_heading_without_notes_ignored(self, detector: HeuristicBoundaryDetector) -> None:
        lines = [f"Main content line {i}." for i in range(120)]
        lines += ["# NOTES", "", "Some loose remarks without numbering."]

        assert not detector.detect_endnotes("\n".join(lines)).detected


class TestNothingFound:
    @pytest.mark.parametrize("section_type", list(SectionType))
    def test_pure_narrative(
        self,
        detector: HeuristicBoundaryDetector,
        narrative_document: str,
        section_type: SectionType,
    ) -> None:
        assert detector.detect(section_type, narrative_document) == []

    @pytest.mark.parametrize("section_type", list(SectionType))
    def test_small_document(
        self,
        detector: HeuristicBoundaryDetector,
        small_document: str,
        section_type: SectionType,
    ) -> None:
        outcome = detector.detect_section(section_type, small_document)

        assert not outcome.detected
        assert outcome.results

    def test_threshold_is_configurable(self, back_matter_document: str) -> None:
        detector = HeuristicBoundaryDetector(DetectorConfig(min_confidence=0.99))

        assert not detector.detect_back_matter(back_matter_document).detected
