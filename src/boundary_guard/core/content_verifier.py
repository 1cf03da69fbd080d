"""Phase B: verify that a span's text looks like the claimed section.

Phase A only reasons about position and size. A hallucinated span can pass
those rules by luck, so this layer reads the lines themselves and scores them
against a per-section signature, rejecting narrative prose outright.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable

from boundary_guard.core.document import split_lines
from boundary_guard.models.results import (
    ContentVerificationResult,
    VerificationFailureReason,
)
from boundary_guard.models.section import SectionType

log = logging.getLogger(__name__)


@dataclass
class VerifierConfig:
    """Limits on how much of a span is examined."""

    min_lines: int = 3
    max_lines: int = 100
    header_scan_lines: int = 10
    back_matter_header_scan_lines: int = 30


# =============================================================================
# Pattern Tables
# =============================================================================

CHAPTER_HEADING_PATTERNS: list[tuple[str, int]] = [
    (r"^#{1,3}\s*(Chapter|CHAPTER)\s+(\d+|[IVXLC]+\b)", 0),
    (r"^#{1,2}\s*\d+\.\s+[A-Z]", 0),
    (r"^chapter\s+(one|two|three|four|five|six|seven|eight|nine|ten)\b", re.IGNORECASE),
    (r"^(PART|Part)\s+[IVXLC]+\b", 0),
]

BACK_MATTER_HEADERS = [
    "NOTES", "ENDNOTES", "FOOTNOTES", "APPENDIX", "APPENDICES", "GLOSSARY",
    "BIBLIOGRAPHY", "SELECTED BIBLIOGRAPHY", "REFERENCES", "WORKS CITED",
    "SOURCES", "FURTHER READING", "ABOUT THE AUTHOR", "ABOUT THE AUTHORS",
    "ACKNOWLEDGMENTS", "ACKNOWLEDGEMENTS", "COLOPHON", "AFTERWORD",
    # Spanish, French, German, Portuguese
    "NOTAS", "BIBLIOGRAFÍA", "APÉNDICE", "BIBLIOGRAPHIE", "ANNEXE",
    "ANMERKUNGEN", "LITERATURVERZEICHNIS", "ANHANG", "REFERÊNCIAS",
]

CITATION_PATTERNS: list[tuple[str, str]] = [
    (r"^\s*\d{1,3}[.:)]\s+\S", "numbered_note"),
    (r"^\s*[\[(]\d{1,3}[\])]\s+\S", "bracketed_note"),
    # "Smith, J." or "Smith, John." then a title carrying the year
    (
        r"^[A-Z][A-Za-z'’\-]+,\s+(?:[A-Z]\.(?:\s?[A-Z]\.)*|[A-Z][a-z]+\.)\s.*\b(1[5-9]\d{2}|20\d{2})\b",
        "author_year",
    ),
    (r"[,:]\s*\(?(1[5-9]\d{2}|20\d{2})\)?[.)]?\s*$", "trailing_year"),
    (r"^\s*(Ibid|Op\.\s*cit|Cf\.)", "scholarly_abbreviation"),
    (r"\bpp?\.\s*\d+", "page_reference"),
]

INDEX_HEADERS = [
    "INDEX", "SUBJECT INDEX", "NAME INDEX", "AUTHOR INDEX", "GENERAL INDEX",
    "INDEX OF NAMES", "INDEX OF SUBJECTS", "ÍNDICE", "REGISTER",
]
INDEX_ENTRY_PATTERN = r"^\s*[A-Za-z].+,\s*\d+([-–]\d+)?(,\s*\d+([-–]\d+)?)*\s*$"
INDEX_DIVIDER_PATTERN = r"^\s*[A-Z]\s*$"

FRONT_MATTER_INDICATORS: list[tuple[str, str]] = [
    (r"©|\(c\)\s*\d{4}|\bcopyright\b", "copyright"),
    (r"\bISBN\b", "isbn"),
    (r"all rights reserved", "all_rights_reserved"),
    (r"library of congress", "library_of_congress"),
    (r"first published", "first_published"),
    (r"first edition", "first_edition"),
    (r"published by", "published_by"),
    (r"printed in", "printed_in"),
]
FRONT_MATTER_HEADERS = [
    "DEDICATION", "EPIGRAPH", "PREFACE", "FOREWORD", "INTRODUCTION",
    "TABLE OF CONTENTS", "CONTENTS",
]

TOC_HEADERS = [
    "TABLE OF CONTENTS", "CONTENTS", "BRIEF CONTENTS", "CONTENTS AT A GLANCE",
    "TABLE DES MATIÈRES", "ÍNDICE GENERAL", "INHALTSVERZEICHNIS", "SUMÁRIO",
]
TOC_ENTRY_PATTERNS = [
    r"\.{2,}\s*\d+\s*$",
    r"\S\s{3,}\d+\s*$",
    r"^\s*(Chapter|CHAPTER|Part|PART|Section|\d+(\.\d+)*\.?)\s*\S.*\s\d+\s*$",
]

AUXILIARY_LIST_HEADERS = [
    "LIST OF FIGURES", "FIGURES", "LIST OF ILLUSTRATIONS", "ILLUSTRATIONS",
    "LIST OF TABLES", "TABLES", "LIST OF PLATES", "PLATES", "LIST OF MAPS",
    "MAPS", "LIST OF CHARTS", "CHARTS", "LIST OF GRAPHS", "GRAPHS",
    "LIST OF ABBREVIATIONS", "ABBREVIATIONS", "LIST OF SYMBOLS", "SYMBOLS",
    "LIST OF ACRONYMS", "ACRONYMS", "NOMENCLATURE",
    "ABBILDUNGSVERZEICHNIS", "TABELLENVERZEICHNIS", "ABKÜRZUNGSVERZEICHNIS",
    "LISTE DES FIGURES", "LISTE DES TABLEAUX", "LISTA DE FIGURAS", "LISTA DE TABLAS",
]
AUXILIARY_ENTRY_PATTERNS: list[tuple[str, int]] = [
    (r"^\s*(Figure|Fig\.|FIGURE|FIG\.)\s*\d+", 0),
    (r"^\s*(Table|Tab\.|TABLE|TAB\.)\s*\d+", 0),
    (r"^\s*(Illustration|Plate|Map|Chart|Graph)\s*\d+", re.IGNORECASE),
    (r"^\s*[A-Z]{2,}[A-Za-z0-9]*\s*[-–:]\s*[A-Z]", 0),
    (r"^.+\.{3,}\s*\d+\s*$", 0),
]

FOOTNOTE_HEADERS = [
    "NOTES", "ENDNOTES", "FOOTNOTES", "NOTES TO THE TEXT", "CHAPTER NOTES",
]
FOOTNOTE_ENTRY_PATTERNS: list[tuple[str, int]] = [
    (r"^\s*\d{1,3}[.:)]\s+\S", 0),
    (r"^\s*[\[(]\d{1,3}[\])]\s+", 0),
    (r"^\s*(Chapter|Ch\.)\s*\d+.*\bnote\s*\d+", re.IGNORECASE),
    (r"\bpp?\.\s*\d+", 0),
    (r"^\s*(See|Cf\.|Compare|Ibid|Op\.\s*cit)\b", 0),
]

NOTE_MARKER_PATTERN = r"^[\[(]?\d{1,3}[\])]?[.:)]?\s"
TRAILING_NUMBER_PATTERN = r"\d[\d\-–,.;:)\]]*\s*$"
DIALOGUE_PATTERN = r"[\"“][A-Z][^\"”]{0,200}?[?!,][\"”]\s+[a-z]"
LONG_SENTENCE_PATTERN = r"[A-Z][^.!?]{100,}[.!?]"


# =============================================================================
# Shared Signals
# =============================================================================


@dataclass
class NarrativeSignal:
    """Prose markers found in a span."""

    content_lines: int = 0
    prose_lines: int = 0
    long_sentences: int = 0
    dialogue: int = 0

    @property
    def prose_ratio(self) -> float:
        return self.prose_lines / self.content_lines if self.content_lines else 0.0

    @property
    def is_strong(self) -> bool:
        if self.prose_lines >= 2 and self.prose_ratio >= 0.5:
            return True
        return self.prose_lines >= 3 and bool(self.dialogue or self.long_sentences)

    def describe(self) -> str:
        return (
            f"{self.prose_lines}/{self.content_lines} prose lines, "
            f"{self.dialogue} dialogue, {self.long_sentences} long sentence(s)"
        )


def _is_prose_line(line: str) -> bool:
    """A sentence-like line that is not a heading or a numbered entry.

    Years and figures inside a sentence do not make it structural.
    """
    text = line.strip()
    if not text or text.startswith("#") or "\t" in text or "..." in text:
        return False
    if re.match(NOTE_MARKER_PATTERN, text) or re.search(TRAILING_NUMBER_PATTERN, text):
        return False
    return len(text.split()) >= 8


def analyze_narrative(lines: list[str]) -> NarrativeSignal:
    """Measure how much a span reads like running prose."""
    signal = NarrativeSignal()
    paragraphs: list[list[str]] = [[]]

    for line in lines:
        text = line.strip()
        if not text:
            if paragraphs[-1]:
                paragraphs.append([])
            continue
        signal.content_lines += 1
        if _is_prose_line(text):
            signal.prose_lines += 1
        paragraphs[-1].append(text)

    for paragraph in paragraphs:
        joined = " ".join(paragraph)
        if not joined or joined.startswith("#"):
            continue
        signal.long_sentences += len(re.findall(LONG_SENTENCE_PATTERN, joined))
        signal.dialogue += len(re.findall(DIALOGUE_PATTERN, joined))

    return signal


def _normalize_heading(line: str) -> str:
    text = line.strip().lstrip("#").strip()
    text = text.strip("*_ ").rstrip(":").strip()
    return text.upper()


def find_header(lines: list[str], headers: list[str], scan_lines: int) -> str | None:
    """Return the first heading among the first ``scan_lines`` lines."""
    for line in lines[:scan_lines]:
        stripped = line.strip()
        if not stripped or len(stripped) > 80 or "..." in stripped:
            continue
        # Plain lines ending in a number are entries, not headings
        if not stripped.startswith("#") and re.search(r"\d\s*$", stripped):
            continue
        text = _normalize_heading(stripped)
        for header in headers:
            if text == header or text.startswith(header + " ") or text.startswith(header + ":"):
                return header
    return None


def is_chapter_heading(line: str) -> bool:
    """Chapter/part heading that is not itself a contents entry."""
    text = line.strip()
    if re.search(r"\.{2,}\s*\d+\s*$", text) or re.search(r"\S\s{3,}\d+\s*$", text):
        return False
    # Plain lines ending in a page number are contents entries
    if not text.startswith("#") and re.search(r"\s\d+\s*$", text):
        return False
    return any(re.search(pattern, text, flags) for pattern, flags in CHAPTER_HEADING_PATTERNS)


def count_matching_lines(lines: list[str], patterns: list[tuple[str, int]]) -> int:
    """Count lines matching at least one pattern (each line counted once)."""
    count = 0
    for line in lines:
        if not line.strip():
            continue
        if any(re.search(pattern, line, flags) for pattern, flags in patterns):
            count += 1
    return count


# =============================================================================
# Content Verifier
# =============================================================================


class ContentVerifier:
    """Score the text inside a candidate span against a section signature."""

    def __init__(self, config: VerifierConfig | None = None):
        self.config = config or VerifierConfig()
        self._verifiers: dict[
            SectionType, Callable[[list[str], int], ContentVerificationResult]
        ] = {
            SectionType.FRONT_MATTER: self._verify_front_matter,
            SectionType.TABLE_OF_CONTENTS: self._verify_toc,
            SectionType.AUXILIARY_LISTS: self._verify_auxiliary_lists,
            SectionType.BACK_MATTER: self._verify_back_matter,
            SectionType.INDEX: self._verify_index,
            SectionType.FOOTNOTES_ENDNOTES: self._verify_footnotes,
        }

    def verify(
        self,
        section_type: SectionType,
        content: str,
        start_line: int,
        end_line: int,
    ) -> ContentVerificationResult:
        """Verify lines ``start_line..end_line`` (inclusive) of ``content``."""
        lines = split_lines(content)

        if start_line < 0 or start_line >= len(lines) or end_line < start_line:
            return ContentVerificationResult.failed(
                section_type,
                VerificationFailureReason.INSUFFICIENT_CONTENT,
                f"Range {start_line}-{end_line} is outside the document ({len(lines)} lines)",
            )

        end = min(end_line, len(lines) - 1)
        full_span = lines[start_line : end + 1]
        span = full_span[: self.config.max_lines]

        if len(span) < self.config.min_lines or not any(line.strip() for line in span):
            return ContentVerificationResult.failed(
                section_type,
                VerificationFailureReason.INSUFFICIENT_CONTENT,
                f"Only {len(span)} line(s) to examine; need at least {self.config.min_lines}",
            )

        # Headings past the sampled lines still disqualify the span
        chapter_lines = [line for line in full_span if is_chapter_heading(line)]
        if section_type == SectionType.TABLE_OF_CONTENTS:
            # Plain "PART I" dividers are normal inside a contents list
            chapter_lines = [line for line in chapter_lines if line.lstrip().startswith("#")]
        result = self._verifiers[section_type](span, len(chapter_lines))
        if result.is_valid:
            log.info(
                f"Verified {section_type.value} lines {start_line}-{end} "
                f"(confidence={result.confidence:.2f})"
            )
        else:
            log.info(
                f"Content check failed for {section_type.value} lines {start_line}-{end}: "
                f"{result.explanation}"
            )
        return result

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _narrative_failure(
        self,
        section_type: SectionType,
        narrative: NarrativeSignal,
        has_header: bool,
        structural_lines: int,
    ) -> ContentVerificationResult | None:
        """Reject when prose outweighs the structural signal."""
        if narrative.is_strong and (not has_header or narrative.prose_lines > structural_lines):
            return ContentVerificationResult.failed(
                section_type,
                VerificationFailureReason.NARRATIVE_PROSE_FOUND,
                f"Span reads as narrative prose ({narrative.describe()})",
            )
        return None

    # -------------------------------------------------------------------------
    # Per-section signatures
    # -------------------------------------------------------------------------

    def _verify_auxiliary_lists(
        self, lines: list[str], chapters: int
    ) -> ContentVerificationResult:
        section_type = SectionType.AUXILIARY_LISTS
        header = find_header(lines, AUXILIARY_LIST_HEADERS, self.config.header_scan_lines)
        entries = count_matching_lines(lines, AUXILIARY_ENTRY_PATTERNS)
        narrative = analyze_narrative(lines)
        matched = _matched(header, entries, chapters)

        if chapters and not header and entries < 3:
            return ContentVerificationResult.failed(
                section_type,
                VerificationFailureReason.CHAPTER_CONTENT_FOUND,
                f"Chapter headings found without a list header ({entries} entries)",
                matched,
            )

        failure = self._narrative_failure(section_type, narrative, bool(header), entries)
        if failure:
            return failure

        if not header and entries < 5:
            return ContentVerificationResult.failed(
                section_type,
                VerificationFailureReason.NO_EXPECTED_HEADERS,
                f"No list header and only {entries} list entries",
                matched,
            )
        if header and entries == 0:
            return ContentVerificationResult.failed(
                section_type,
                VerificationFailureReason.NO_EXPECTED_STRUCTURE,
                f"Header '{header}' found but no list entries follow it",
                matched,
            )

        if header:
            confidence = 0.9 if entries >= 5 else 0.8 if entries >= 2 else 0.7
        else:
            confidence = 0.75 if entries >= 10 else 0.65
        if chapters:
            confidence *= 0.7

        return ContentVerificationResult.verified(
            section_type,
            confidence,
            matched,
            f"Auxiliary list content: header={header or 'none'}, {entries} entries",
        )

    def _verify_back_matter(
        self, lines: list[str], chapters: int
    ) -> ContentVerificationResult:
        section_type = SectionType.BACK_MATTER
        header = find_header(
            lines, BACK_MATTER_HEADERS, self.config.back_matter_header_scan_lines
        )
        citations = count_matching_lines(
            lines, [(pattern, 0) for pattern, _ in CITATION_PATTERNS]
        )
        narrative = analyze_narrative(lines)
        matched = _matched(header, citations, chapters, entry_label="Citations")

        if chapters and not header:
            return ContentVerificationResult.failed(
                section_type,
                VerificationFailureReason.CHAPTER_CONTENT_FOUND,
                f"Found {chapters} chapter heading(s) and no back matter header",
                matched,
            )

        failure = self._narrative_failure(section_type, narrative, bool(header), citations)
        if failure:
            return failure

        # Citation-shaped lines alone do not identify back matter
        if not header:
            return ContentVerificationResult.failed(
                section_type,
                VerificationFailureReason.NO_EXPECTED_HEADERS,
                f"No back matter header ({citations} citation-like lines)",
                matched,
            )

        confidence = 0.9 if citations >= 3 else 0.8 if citations >= 1 else 0.65
        if chapters:
            confidence *= 0.7

        return ContentVerificationResult.verified(
            section_type,
            confidence,
            matched,
            f"Back matter content: header={header}, {citations} citation lines",
        )

    def _verify_index(
        self, lines: list[str], chapters: int
    ) -> ContentVerificationResult:
        section_type = SectionType.INDEX
        header = find_header(lines, INDEX_HEADERS, self.config.header_scan_lines)
        entries = count_matching_lines(lines, [(INDEX_ENTRY_PATTERN, 0)])
        dividers = count_matching_lines(lines, [(INDEX_DIVIDER_PATTERN, 0)])
        narrative = analyze_narrative(lines)
        matched = _matched(header, entries, chapters)
        if dividers:
            matched.append(f"Letter dividers: {dividers}")

        if chapters and not header and entries < 5:
            return ContentVerificationResult.failed(
                section_type,
                VerificationFailureReason.CHAPTER_CONTENT_FOUND,
                "Chapter headings found without an index header",
                matched,
            )

        failure = self._narrative_failure(section_type, narrative, bool(header), entries)
        if failure:
            return failure

        if not header and entries < 10:
            return ContentVerificationResult.failed(
                section_type,
                VerificationFailureReason.NO_EXPECTED_HEADERS,
                f"No index header and only {entries} index entries",
                matched,
            )
        if header and entries == 0:
            return ContentVerificationResult.failed(
                section_type,
                VerificationFailureReason.NO_EXPECTED_STRUCTURE,
                f"Header '{header}' found but no 'term, page' entries",
                matched,
            )

        if header:
            if entries >= 20:
                confidence = 0.95
            elif entries >= 10:
                confidence = 0.85
            elif entries >= 3 or dividers >= 2:
                confidence = 0.8
            else:
                confidence = 0.7
        else:
            confidence = 0.75 if entries >= 30 else 0.65

        return ContentVerificationResult.verified(
            section_type,
            confidence,
            matched,
            f"Index content: header={header or 'none'}, {entries} entries, {dividers} dividers",
        )

    def _verify_front_matter(
        self, lines: list[str], chapters: int
    ) -> ContentVerificationResult:
        section_type = SectionType.FRONT_MATTER
        found: list[str] = []
        text = "\n".join(lines)
        for pattern, label in FRONT_MATTER_INDICATORS:
            if re.search(pattern, text, re.IGNORECASE):
                found.append(label)
        header = find_header(lines, FRONT_MATTER_HEADERS, len(lines))
        if header:
            found.append(header.lower().replace(" ", "_"))

        narrative = analyze_narrative(lines)
        has_copyright = "copyright" in found
        has_isbn = "isbn" in found
        matched = [f"Indicator: {label}" for label in found]

        if chapters:
            return ContentVerificationResult.failed(
                section_type,
                VerificationFailureReason.CHAPTER_CONTENT_FOUND,
                f"Found {chapters} chapter heading(s) inside the front matter span",
                matched,
            )

        failure = self._narrative_failure(
            section_type, narrative, has_copyright or has_isbn, len(found)
        )
        if failure:
            return failure

        if not found:
            return ContentVerificationResult.failed(
                section_type,
                VerificationFailureReason.NO_EXPECTED_HEADERS,
                "No copyright, ISBN, publisher or preface indicators found",
            )

        if has_copyright and has_isbn:
            confidence = 0.9
        elif has_copyright or has_isbn or len(found) >= 3:
            confidence = 0.8
        elif len(found) == 2:
            confidence = 0.7
        else:
            confidence = 0.6

        return ContentVerificationResult.verified(
            section_type,
            confidence,
            matched,
            f"Front matter content: {', '.join(found)}",
        )

    def _verify_toc(
        self, lines: list[str], chapters: int
    ) -> ContentVerificationResult:
        section_type = SectionType.TABLE_OF_CONTENTS
        header = find_header(lines, TOC_HEADERS, self.config.header_scan_lines)
        entries = count_matching_lines(lines, [(pattern, 0) for pattern in TOC_ENTRY_PATTERNS])
        narrative = analyze_narrative(lines)
        matched = _matched(header, entries, chapters)

        if chapters:
            return ContentVerificationResult.failed(
                section_type,
                VerificationFailureReason.CHAPTER_CONTENT_FOUND,
                f"Found {chapters} chapter heading(s) inside the contents span",
                matched,
            )

        failure = self._narrative_failure(section_type, narrative, bool(header), entries)
        if failure:
            return failure

        if not header and entries < 5:
            return ContentVerificationResult.failed(
                section_type,
                VerificationFailureReason.NO_EXPECTED_HEADERS,
                f"No contents header and only {entries} contents entries",
                matched,
            )
        if header and entries == 0:
            return ContentVerificationResult.failed(
                section_type,
                VerificationFailureReason.NO_EXPECTED_STRUCTURE,
                f"Header '{header}' found but no entries with page numbers",
                matched,
            )

        if header:
            if entries >= 10:
                confidence = 0.95
            elif entries >= 5:
                confidence = 0.85
            elif entries >= 2:
                confidence = 0.75
            else:
                confidence = 0.65
        else:
            confidence = 0.7 if entries >= 10 else 0.6

        return ContentVerificationResult.verified(
            section_type,
            confidence,
            matched,
            f"Table of contents: header={header or 'none'}, {entries} entries",
        )

    def _verify_footnotes(
        self, lines: list[str], chapters: int
    ) -> ContentVerificationResult:
        section_type = SectionType.FOOTNOTES_ENDNOTES
        header = find_header(lines, FOOTNOTE_HEADERS, self.config.header_scan_lines)
        entries = count_matching_lines(lines, FOOTNOTE_ENTRY_PATTERNS)
        narrative = analyze_narrative(lines)
        matched = _matched(header, entries, chapters)

        if chapters and not header and entries < 3:
            return ContentVerificationResult.failed(
                section_type,
                VerificationFailureReason.CHAPTER_CONTENT_FOUND,
                "Chapter headings found without a notes header",
                matched,
            )

        failure = self._narrative_failure(section_type, narrative, bool(header), entries)
        if failure:
            return failure

        if not header and entries < 5:
            return ContentVerificationResult.failed(
                section_type,
                VerificationFailureReason.NO_EXPECTED_HEADERS,
                f"No notes header and only {entries} note entries",
                matched,
            )
        if header and entries == 0:
            return ContentVerificationResult.failed(
                section_type,
                VerificationFailureReason.NO_EXPECTED_STRUCTURE,
                f"Header '{header}' found but no numbered notes",
                matched,
            )

        if header:
            confidence = 0.9 if entries >= 5 else 0.8 if entries >= 2 else 0.7
        else:
            confidence = 0.75 if entries >= 10 else 0.65
        if chapters:
            confidence *= 0.7

        return ContentVerificationResult.verified(
            section_type,
            confidence,
            matched,
            f"Notes content: header={header or 'none'}, {entries} entries",
        )


def _matched(
    header: str | None, entries: int, chapters: int, entry_label: str = "Entries"
) -> list[str]:
    matched = []
    if header:
        matched.append(f"Header: {header}")
    if entries:
        matched.append(f"{entry_label}: {entries}")
    if chapters:
        matched.append(f"Chapter headings: {chapters}")
    return matched
