"""Phase C: oracle-free boundary discovery from text structure.

Each detector scans only the region Phase A would accept for its section type,
so a fallback hit is never more permissive than the validator it replaces.
Documents shorter than ``DetectorConfig.min_document_lines`` yield nothing.
"""

import logging
import re
from dataclasses import dataclass, field

from boundary_guard.core.document import split_lines
from boundary_guard.models.results import DetectionResult
from boundary_guard.models.section import AuxiliaryListInfo, BoundaryInfo, SectionType

log = logging.getLogger(__name__)


@dataclass
class DetectorConfig:
    """Thresholds for heuristic detection."""

    min_document_lines: int = 50
    min_confidence: float = 0.6
    supporting_scan_lines: int = 50
    back_matter_min_start: float = 0.50
    index_min_start: float = 0.70
    endnotes_min_start: float = 0.50
    front_matter_max_end: float = 0.30
    toc_max_end: float = 0.30
    auxiliary_lists_max_end: float = 0.40
    headerless_index_entries: int = 30
    headerless_toc_entries: int = 8


# =============================================================================
# Pattern Tables
# =============================================================================

# Heading text (regex) and weight. Markdown forms match case-insensitively,
# plain forms must be an exact uppercase line.
BACK_MATTER_HEADINGS: list[tuple[str, float]] = [
    ("NOTES", 1.0),
    ("ENDNOTES", 1.0),
    ("APPENDIX", 0.9),
    (r"APPENDIX\s+[A-Z]", 0.9),
    ("GLOSSARY", 0.95),
    ("BIBLIOGRAPHY", 0.95),
    ("REFERENCES", 0.9),
    ("WORKS CITED", 0.95),
    ("ACKNOWLEDGMENTS", 0.8),
    ("ACKNOWLEDGEMENTS", 0.8),
    ("ABOUT THE AUTHORS?", 0.85),
    ("COLOPHON", 0.9),
    ("AFTERWORD", 0.7),  # Often authored content
    # International
    ("NOTAS", 0.9),
    ("BIBLIOGRAFÍA", 0.9),
    ("GLOSARIO", 0.9),
    ("ANNEXE", 0.9),
    ("GLOSSAIRE", 0.9),
    ("ANHANG", 0.9),
    ("GLOSSAR", 0.9),
]

BACK_MATTER_PLAIN_HEADINGS: list[tuple[str, float]] = [
    ("NOTES", 0.9),
    ("ENDNOTES", 0.9),
    ("APPENDIX", 0.85),
    ("APPENDIX [A-Z]", 0.85),
    ("GLOSSARY", 0.9),
    ("BIBLIOGRAPHY", 0.9),
    ("REFERENCES", 0.85),
    ("WORKS CITED", 0.9),
    ("ACKNOWLEDGMENTS", 0.75),
    ("ACKNOWLEDGEMENTS", 0.75),
    ("ABOUT THE AUTHOR", 0.8),
]

INDEX_HEADINGS: list[tuple[str, float]] = [
    ("INDEX", 1.0),
    ("SUBJECT INDEX", 1.0),
    ("NAME INDEX", 1.0),
    ("GENERAL INDEX", 1.0),
    ("ÍNDICE", 0.9),
    ("REGISTER", 0.9),
]

INDEX_PLAIN_HEADINGS: list[tuple[str, float]] = [
    ("INDEX", 0.9),
    ("SUBJECT INDEX", 0.9),
]

INDEX_ENTRY_PATTERN = r"^\s*[A-Za-z][A-Za-z\s,'-]*,\s*\d+(-\d+)?(,\s*\d+(-\d+)?)*\s*$"
LETTER_DIVIDER_PATTERN = r"^\s*[A-Z]\s*$"

FRONT_MATTER_INDICATORS: list[tuple[str, float]] = [
    (r"©\s*\d{4}", 1.0),
    (r"Copyright\s*©?\s*\d{4}", 1.0),
    (r"All rights reserved", 0.9),
    (r"ISBN\s*[-:\s]?\s*\d", 1.0),
    (r"Library of Congress", 0.95),
    (r"First published", 0.85),
    (r"First edition", 0.85),
    (r"Published by", 0.8),
    (r"Printed in", 0.75),
]

MAIN_CONTENT_START_PATTERNS: list[tuple[str, float]] = [
    (r"^#{1,2}\s*Chapter\s+\d", 1.0),
    (r"^#{1,2}\s*CHAPTER\s+\d", 1.0),
    (r"^#{1,2}\s*Chapter\s+One", 1.0),
    (r"^#{1,2}\s*CHAPTER\s+ONE", 1.0),
    (r"^#{1,2}\s*Part\s+[IVXLC]+", 0.9),
    (r"^#{1,2}\s*PART\s+[IVXLC]+", 0.9),
    (r"^#{1,2}\s*1\.\s+[A-Z]", 0.8),
    (r"^#{1,2}\s*Prologue\s*$", 0.9),
    (r"^#{1,2}\s*PROLOGUE\s*$", 0.9),
]

TOC_HEADINGS: list[tuple[str, float]] = [
    ("TABLE OF CONTENTS", 1.0),
    ("CONTENTS", 1.0),
    ("TABLA DE CONTENIDOS", 0.9),
    ("TABLE DES MATIÈRES", 0.9),
    ("INHALTSVERZEICHNIS", 0.9),
]

TOC_PLAIN_HEADINGS: list[tuple[str, float]] = [
    ("TABLE OF CONTENTS", 0.9),
    ("CONTENTS", 0.9),
]

TOC_ENTRY_PATTERNS = [
    r"^.+\s{2,}\.{2,}\s*\d+\s*$",
    r"^.+\s{4,}\d+\s*$",
    r"^.+\.{2,}\s*\d+\s*$",
    r"^.{5,}\s+\d{1,4}\s*$",
]

# Heading text, weight, list type
AUXILIARY_LIST_HEADINGS: list[tuple[str, float, str]] = [
    ("LIST OF FIGURES", 1.0, "List of Figures"),
    ("FIGURES", 0.85, "List of Figures"),
    ("LIST OF TABLES", 1.0, "List of Tables"),
    ("TABLES", 0.85, "List of Tables"),
    ("LIST OF ILLUSTRATIONS", 1.0, "List of Illustrations"),
    ("LIST OF PLATES", 1.0, "List of Plates"),
    ("LIST OF MAPS", 1.0, "List of Maps"),
    ("LIST OF CHARTS", 1.0, "List of Charts"),
    ("LIST OF GRAPHS", 1.0, "List of Graphs"),
    ("LIST OF ABBREVIATIONS", 1.0, "List of Abbreviations"),
    ("ABBREVIATIONS", 0.9, "List of Abbreviations"),
    ("LIST OF SYMBOLS", 1.0, "List of Symbols"),
    ("LIST OF ACRONYMS", 1.0, "List of Acronyms"),
    # International
    ("LISTA DE FIGURAS", 0.9, "List of Figures"),
    ("LISTA DE TABLAS", 0.9, "List of Tables"),
    ("LISTE DES FIGURES", 0.9, "List of Figures"),
    ("LISTE DES TABLEAUX", 0.9, "List of Tables"),
    ("ABBILDUNGSVERZEICHNIS", 0.9, "List of Figures"),
    ("TABELLENVERZEICHNIS", 0.9, "List of Tables"),
]

AUXILIARY_LIST_PLAIN_HEADINGS: list[tuple[str, float, str]] = [
    ("LIST OF FIGURES", 0.9, "List of Figures"),
    ("FIGURES", 0.8, "List of Figures"),
    ("LIST OF TABLES", 0.9, "List of Tables"),
    ("TABLES", 0.8, "List of Tables"),
    ("LIST OF ILLUSTRATIONS", 0.9, "List of Illustrations"),
    ("LIST OF PLATES", 0.9, "List of Plates"),
    ("LIST OF MAPS", 0.9, "List of Maps"),
    ("LIST OF ABBREVIATIONS", 0.9, "List of Abbreviations"),
    ("ABBREVIATIONS", 0.85, "List of Abbreviations"),
    ("LIST OF SYMBOLS", 0.9, "List of Symbols"),
    ("SYMBOLS", 0.8, "List of Symbols"),
]

AUXILIARY_ENTRY_PATTERNS = [
    r"^\s*(Figure|Fig\.)\s*\d+",
    r"^\s*(Table|Tab\.)\s*\d+",
    r"^\s*(Illustration|Plate|Map|Chart|Graph)\s*\d+",
    r"^\s*[A-Z]{2,}\s*[-–:]\s*[A-Z]",
    r"^.+\.{3,}\s*\d+\s*$",
]

ENDNOTE_HEADINGS: list[tuple[str, float]] = [
    ("NOTES", 1.0),
    ("ENDNOTES", 1.0),
    ("FOOTNOTES", 0.95),
    ("NOTES TO THE TEXT", 0.95),
    ("CHAPTER NOTES", 0.9),
]

ENDNOTE_PLAIN_HEADINGS: list[tuple[str, float]] = [
    ("NOTES", 0.9),
    ("ENDNOTES", 0.9),
    ("FOOTNOTES", 0.85),
]

ENDNOTE_ENTRY_PATTERNS = [
    r"^\s*\d{1,3}[.:)]\s+\S",
    r"^\s*[\[(]\d{1,3}[\])]\s+\S",
]

CONTENT_START_PREFIXES = ("CHAPTER ", "PART ", "PROLOGUE", "INTRODUCTION")


def _match_heading(
    line: str, markdown: list[tuple[str, float]], plain: list[tuple[str, float]]
) -> tuple[str, float] | None:
    """Return the (heading, weight) a line matches, preferring the heaviest."""
    best: tuple[str, float] | None = None
    stripped = line.strip()
    if stripped.startswith("#"):
        for text, weight in markdown:
            if re.match(rf"^#{{1,3}}\s*{text}\s*$", stripped, re.IGNORECASE):
                if best is None or weight > best[1]:
                    best = (f"# {text}", weight)
    else:
        for text, weight in plain:
            if re.match(rf"^{text}$", stripped):
                if best is None or weight > best[1]:
                    best = (text, weight)
    return best


def _matches_any(line: str, patterns: list[str], flags: int = 0) -> bool:
    return any(re.search(pattern, line, flags) for pattern in patterns)


@dataclass
class DetectionOutcome:
    """Spans found for one section type, with the per-detector results."""

    section_type: SectionType
    boundaries: list[BoundaryInfo] = field(default_factory=list)
    results: list[DetectionResult] = field(default_factory=list)

    @property
    def detected(self) -> bool:
        return bool(self.boundaries)


# =============================================================================
# Detector
# =============================================================================


class HeuristicBoundaryDetector:
    """Find structural sections by header and entry patterns alone.

    Detections require convergent evidence and stay inside the same position
    windows as Phase A. When uncertain the detector reports nothing.
    """

    def __init__(self, config: DetectorConfig | None = None):
        self.config = config or DetectorConfig()

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def detect(self, section_type: SectionType, content: str) -> list[BoundaryInfo]:
        """Complete spans for ``section_type``, in document order."""
        return self.detect_section(section_type, content).boundaries

    def detect_section(self, section_type: SectionType, content: str) -> DetectionOutcome:
        """Run the detector for one section type and turn hits into spans."""
        lines = split_lines(content)
        last_line = len(lines) - 1
        outcome = DetectionOutcome(section_type=section_type)

        if section_type == SectionType.AUXILIARY_LISTS:
            lists = self.detect_auxiliary_lists(content)
            for info in lists:
                outcome.boundaries.append(info.to_boundary(notes=f"heuristic: {info.list_type}"))
                outcome.results.append(
                    DetectionResult.found(
                        section_type,
                        info.start_line,
                        info.confidence,
                        [f"Header: {info.header_text}"] if info.header_text else [],
                        info.explanation,
                    )
                )
            if not lists:
                outcome.results.append(
                    DetectionResult.not_found(section_type, "No auxiliary list headers found")
                )
            return outcome

        if section_type == SectionType.FRONT_MATTER:
            result = self.detect_front_matter_end(content)
            span = (0, result.boundary_line) if result.detected else None
        elif section_type == SectionType.TABLE_OF_CONTENTS:
            result = self.detect_toc(content)
            span = None
            if result.detected:
                span = (result.boundary_line, self.find_toc_end_line(content, result.boundary_line))
        elif section_type == SectionType.BACK_MATTER:
            result = self.detect_back_matter(content)
            span = (result.boundary_line, last_line) if result.detected else None
        elif section_type == SectionType.INDEX:
            result = self.detect_index(content)
            span = (result.boundary_line, last_line) if result.detected else None
        elif section_type == SectionType.FOOTNOTES_ENDNOTES:
            result = self.detect_endnotes(content)
            span = None
            if result.detected:
                span = (result.boundary_line, self._find_endnotes_end_line(lines, result.boundary_line))
        else:
            raise ValueError(f"Unsupported section type: {section_type}")

        outcome.results.append(result)
        if span is not None:
            outcome.boundaries.append(
                BoundaryInfo(
                    start_line=span[0],
                    end_line=span[1],
                    confidence=result.confidence,
                    notes=f"heuristic: {result.explanation}",
                )
            )
        return outcome

    def _too_small(self, section_type: SectionType, lines: list[str]) -> DetectionResult | None:
        if len(lines) < self.config.min_document_lines:
            return DetectionResult.not_found(
                section_type,
                f"Document too small for heuristic detection ({len(lines)} lines)",
            )
        return None

    # -------------------------------------------------------------------------
    # Back matter
    # -------------------------------------------------------------------------

    def detect_back_matter(self, content: str) -> DetectionResult:
        """Find where back matter starts; only the last half is scanned."""
        section_type = SectionType.BACK_MATTER
        lines = split_lines(content)
        too_small = self._too_small(section_type, lines)
        if too_small:
            return too_small

        min_start = int(len(lines) * self.config.back_matter_min_start)
        log.debug(f"Scanning for back matter from line {min_start} of {len(lines)}")

        candidates: list[tuple[int, str, float]] = []
        for i in range(min_start, len(lines)):
            match = _match_heading(lines[i], BACK_MATTER_HEADINGS, BACK_MATTER_PLAIN_HEADINGS)
            if match:
                candidates.append((i, match[0], match[1]))

        if not candidates:
            return DetectionResult.not_found(
                section_type, "No back matter header patterns found in last 50% of document"
            )

        line, heading, weight = candidates[0]
        confidence = weight
        if len(candidates) >= 3:
            confidence = min(1.0, confidence + 0.15)
        elif len(candidates) >= 2:
            confidence = min(1.0, confidence + 0.1)

        position = line / len(lines)
        # Right at the window edge
        if position < 0.55:
            confidence *= 0.9

        if confidence < self.config.min_confidence:
            return DetectionResult.not_found(
                section_type,
                f"Pattern found but confidence ({confidence:.0%}) below threshold",
            )

        explanation = (
            f"Back matter detected at line {line} ({position:.0%} into document) "
            f"with {len(candidates)} supporting pattern(s)"
        )
        log.info(f"Heuristic: {explanation}")
        return DetectionResult.found(
            section_type,
            line,
            confidence,
            [f"Line {i}: {h}" for i, h, _ in candidates],
            explanation,
        )

    # -------------------------------------------------------------------------
    # Index
    # -------------------------------------------------------------------------

    def detect_index(self, content: str) -> DetectionResult:
        """Find the index start; requires a header plus entries, or a long entry run."""
        section_type = SectionType.INDEX
        lines = split_lines(content)
        too_small = self._too_small(section_type, lines)
        if too_small:
            return too_small

        min_start = int(len(lines) * self.config.index_min_start)
        header: tuple[int, str, float] | None = None
        for i in range(min_start, len(lines)):
            match = _match_heading(lines[i], INDEX_HEADINGS, INDEX_PLAIN_HEADINGS)
            if match:
                header = (i, match[0], match[1])
                break

        if header is None:
            return self._detect_index_by_entries(lines, min_start)

        line, heading, weight = header
        window = lines[line : line + self.config.supporting_scan_lines]
        entries = sum(1 for text in window if re.match(INDEX_ENTRY_PATTERN, text))
        dividers = sum(1 for text in window if re.match(LETTER_DIVIDER_PATTERN, text))

        confidence = weight
        matched = [f"Header: {heading}"]
        if entries >= 20:
            confidence += 0.2
        elif entries >= 10:
            confidence += 0.15
        elif entries >= 5:
            confidence += 0.1
        if entries:
            matched.append(f"Index entries: {entries}")
        if dividers >= 5:
            confidence += 0.1
        elif dividers:
            confidence += 0.05
        if dividers:
            matched.append(f"Letter dividers: {dividers}")
        confidence = min(1.0, confidence)

        if weight < 1.0 and entries < 5:
            return DetectionResult.not_found(
                section_type,
                f"Index header found but insufficient supporting entries ({entries} < 5)",
            )
        if confidence < self.config.min_confidence:
            return DetectionResult.not_found(
                section_type,
                f"Index patterns found but confidence ({confidence:.0%}) below threshold",
            )

        explanation = (
            f"Index detected at line {line} ({line / len(lines):.0%} into document) "
            f"with {entries} entries, {dividers} dividers"
        )
        log.info(f"Heuristic: {explanation}")
        return DetectionResult.found(section_type, line, confidence, matched, explanation)

    def _detect_index_by_entries(self, lines: list[str], min_start: int) -> DetectionResult:
        """Headerless fallback: a long unbroken run of ``term, page`` lines."""
        section_type = SectionType.INDEX
        start, run_start, run, best = None, None, 0, 0

        for i in range(min_start, len(lines)):
            text = lines[i]
            if not text.strip():
                continue
            if re.match(INDEX_ENTRY_PATTERN, text):
                if run_start is None:
                    run_start = i
                run += 1
                continue
            if run > best:
                best, start = run, run_start
            run, run_start = 0, None
        if run > best:
            best, start = run, run_start

        required = self.config.headerless_index_entries
        if best < required or start is None:
            return DetectionResult.not_found(
                section_type,
                f"No index header and insufficient consecutive index entries ({best} < {required})",
            )

        confidence = min(0.8, 0.5 + best / 100)
        explanation = (
            f"Index detected by entry density at line {start} "
            f"({start / len(lines):.0%} into document) with {best} consecutive entries (no header)"
        )
        log.info(f"Heuristic: {explanation}")
        return DetectionResult.found(
            section_type,
            start,
            confidence,
            [f"Consecutive index entries: {best} (no header)"],
            explanation,
        )

    # -------------------------------------------------------------------------
    # Front matter
    # -------------------------------------------------------------------------

    def detect_front_matter_end(self, content: str) -> DetectionResult:
        """Find the last line of front matter (front matter always starts at 0)."""
        section_type = SectionType.FRONT_MATTER
        lines = split_lines(content)
        too_small = self._too_small(section_type, lines)
        if too_small:
            return too_small

        max_end = int(len(lines) * self.config.front_matter_max_end)

        main_start = self._find_main_content_start(lines, max_end)
        if main_start is not None:
            start_line, pattern, weight = main_start
            boundary = start_line - 1
            indicators = self._count_front_matter_indicators(lines, boundary)
            if boundary >= 3 and indicators >= 1:
                confidence = min(1.0, weight + (0.15 if indicators >= 3 else 0.1))
                explanation = (
                    f"Front matter end detected at line {boundary} "
                    f"({boundary / len(lines):.0%} into document) "
                    f"based on main content start at line {start_line}"
                )
                log.info(f"Heuristic: {explanation}")
                return DetectionResult.found(
                    section_type,
                    boundary,
                    confidence,
                    [f"Main content start: {pattern}", f"Front matter indicators: {indicators}"],
                    explanation,
                )
            log.debug(
                f"Main content at line {start_line} with {indicators} indicator(s); "
                "trying indicator clusters"
            )

        return self._detect_front_matter_by_indicators(lines, max_end)

    def _find_main_content_start(
        self, lines: list[str], max_line: int
    ) -> tuple[int, str, float] | None:
        for i in range(min(max_line, len(lines))):
            for pattern, weight in MAIN_CONTENT_START_PATTERNS:
                if re.match(pattern, lines[i]):
                    return i, pattern, weight
        return None

    def _count_front_matter_indicators(self, lines: list[str], max_line: int) -> int:
        """Number of distinct indicator kinds in lines ``0..max_line``."""
        region = lines[: max_line + 1]
        return sum(
            1
            for pattern, _ in FRONT_MATTER_INDICATORS
            if any(re.search(pattern, text, re.IGNORECASE) for text in region)
        )

    def _detect_front_matter_by_indicators(
        self, lines: list[str], max_line: int
    ) -> DetectionResult:
        section_type = SectionType.FRONT_MATTER
        hits: list[tuple[int, str, float]] = []
        for i in range(min(max_line, len(lines))):
            for pattern, weight in FRONT_MATTER_INDICATORS:
                if re.search(pattern, lines[i], re.IGNORECASE):
                    hits.append((i, pattern, weight))

        if len(hits) < 2:
            return DetectionResult.not_found(
                section_type,
                f"No main content start and insufficient front matter indicators "
                f"({len(hits)} < 2) in first 30% of document",
            )

        last_hit = max(i for i, _, _ in hits)
        boundary = last_hit
        for i in range(last_hit + 1, min(last_hit + 20, max_line, len(lines))):
            text = lines[i].strip()
            if text.startswith("#"):
                boundary = i - 1
                break
            if not text:
                boundary = i
                for j in range(i + 1, min(i + 5, len(lines))):
                    following = lines[j].strip()
                    if following:
                        if following.startswith("#") or following.upper().startswith("CHAPTER"):
                            boundary = j - 1
                        break
                break

        if len(hits) >= 4:
            confidence = 0.85
        elif len(hits) >= 3:
            confidence = 0.75
        else:
            confidence = 0.6
        if any(weight >= 1.0 for _, _, weight in hits):
            confidence = min(1.0, confidence + 0.1)

        explanation = (
            f"Front matter end detected at line {boundary} "
            f"({boundary / len(lines):.0%} into document) based on {len(hits)} indicator(s)"
        )
        log.info(f"Heuristic: {explanation}")
        return DetectionResult.found(
            section_type,
            boundary,
            confidence,
            [f"Line {i}: {pattern}" for i, pattern, _ in hits],
            explanation,
        )

    # -------------------------------------------------------------------------
    # Table of contents
    # -------------------------------------------------------------------------

    def detect_toc(self, content: str) -> DetectionResult:
        """Find the TOC start line (its header, or the first entry when headerless)."""
        section_type = SectionType.TABLE_OF_CONTENTS
        lines = split_lines(content)
        too_small = self._too_small(section_type, lines)
        if too_small:
            return too_small

        max_line = int(len(lines) * self.config.toc_max_end)
        header: tuple[int, str, float] | None = None
        for i in range(min(max_line, len(lines))):
            match = _match_heading(lines[i], TOC_HEADINGS, TOC_PLAIN_HEADINGS)
            if match:
                header = (i, match[0], match[1])
                break

        if header is not None:
            line, heading, weight = header
            entries = self._count_toc_entries(lines, line + 1)
            confidence = weight
            if entries >= 10:
                confidence += 0.2
            elif entries >= 5:
                confidence += 0.15
            elif entries >= 3:
                confidence += 0.1
            elif entries == 0:
                confidence *= 0.7
            confidence = min(1.0, confidence)

            if weight >= 1.0 or entries >= 3:
                if confidence < self.config.min_confidence:
                    return DetectionResult.not_found(
                        section_type,
                        f"TOC header found but confidence ({confidence:.0%}) below threshold",
                    )
                explanation = (
                    f"TOC detected at line {line} ({line / len(lines):.0%} into document) "
                    f"with {entries} entries"
                )
                log.info(f"Heuristic: {explanation}")
                return DetectionResult.found(
                    section_type,
                    line,
                    confidence,
                    [f"Header: {heading}", f"TOC entries: {entries}"],
                    explanation,
                )
            log.debug(f"Weak TOC header at line {line} with {entries} entries")

        return self._detect_toc_by_entries(lines, max_line)

    def _count_toc_entries(self, lines: list[str], start: int) -> int:
        count = 0
        for text in lines[start : start + self.config.supporting_scan_lines]:
            stripped = text.strip()
            if not stripped:
                continue
            if stripped.startswith(("# Chapter", "## Chapter")) or stripped.startswith("CHAPTER 1"):
                break
            if _matches_any(stripped, TOC_ENTRY_PATTERNS):
                count += 1
        return count

    def _detect_toc_by_entries(self, lines: list[str], max_line: int) -> DetectionResult:
        """Headerless fallback: a run of entries ending in page numbers."""
        section_type = SectionType.TABLE_OF_CONTENTS
        start, run_start, run, best, blanks = None, None, 0, 0, 0

        for i in range(min(max_line, len(lines))):
            stripped = lines[i].strip()
            if not stripped:
                blanks += 1
                if blanks > 2 and run:
                    if run > best:
                        best, start = run, run_start
                    run, run_start = 0, None
                continue
            blanks = 0
            if _matches_any(stripped, TOC_ENTRY_PATTERNS):
                if run_start is None:
                    run_start = i
                run += 1
                continue
            if run > best:
                best, start = run, run_start
            run, run_start = 0, None
        if run > best:
            best, start = run, run_start

        required = self.config.headerless_toc_entries
        if best < required or start is None:
            return DetectionResult.not_found(
                section_type,
                f"No TOC header and insufficient consecutive TOC entries ({best} < {required})",
            )

        confidence = min(0.75, 0.5 + best / 50)
        explanation = (
            f"TOC detected by entry pattern at line {start} "
            f"({start / len(lines):.0%} into document) with {best} consecutive entries (no header)"
        )
        log.info(f"Heuristic: {explanation}")
        return DetectionResult.found(
            section_type,
            start,
            confidence,
            [f"Consecutive TOC entries: {best} (no header)"],
            explanation,
        )

    def find_toc_end_line(self, content: str, toc_start_line: int) -> int:
        """Last line of a TOC that starts at ``toc_start_line``."""
        lines = split_lines(content)
        last = toc_start_line
        blanks = 0

        for i in range(toc_start_line + 1, min(toc_start_line + 100, len(lines))):
            stripped = lines[i].strip()
            if not stripped:
                blanks += 1
                if blanks >= 3:
                    break
                continue
            blanks = 0

            if stripped.startswith("#") and "contents" not in stripped.lower():
                break
            if stripped.upper().startswith(CONTENT_START_PREFIXES) and not re.search(
                r"\d+\s*$", stripped
            ):
                break
            last = i

        return last

    # -------------------------------------------------------------------------
    # Auxiliary lists
    # -------------------------------------------------------------------------

    def detect_auxiliary_lists(self, content: str) -> list[AuxiliaryListInfo]:
        """Every auxiliary list in the first 40% of the document, by position."""
        lines = split_lines(content)
        if len(lines) < self.config.min_document_lines:
            return []

        max_line = int(len(lines) * self.config.auxiliary_lists_max_end)
        results: list[AuxiliaryListInfo] = []
        covered_until = -1

        for i in range(min(max_line, len(lines))):
            if i <= covered_until:
                continue
            match = self._match_auxiliary_heading(lines[i])
            if match is None:
                continue

            heading, weight, list_type = match
            end = self._find_auxiliary_list_end_line(lines, i, max_line)
            entries = sum(
                1
                for text in lines[i + 1 : end + 1]
                if _matches_any(text, AUXILIARY_ENTRY_PATTERNS, re.IGNORECASE)
            )

            confidence = weight
            if entries >= 5:
                confidence = min(1.0, confidence + 0.15)
            elif entries >= 2:
                confidence = min(1.0, confidence + 0.1)
            elif entries == 0:
                confidence *= 0.7

            if confidence < self.config.min_confidence:
                log.debug(f"Skipping list at line {i}: confidence {confidence:.2f} below threshold")
                continue

            line_count = end - i + 1
            results.append(
                AuxiliaryListInfo(
                    list_type=list_type,
                    start_line=i,
                    end_line=end,
                    confidence=confidence,
                    header_text=lines[i].strip(),
                    entry_count=entries,
                    explanation=(
                        f"{list_type} detected at lines {i}-{end} ({line_count} lines, "
                        f"{i / len(lines):.0%} into document, {entries} entries)"
                    ),
                )
            )
            covered_until = end

        if results:
            log.info(f"Heuristic: {len(results)} auxiliary list(s) detected")
        return results

    def _match_auxiliary_heading(self, line: str) -> tuple[str, float, str] | None:
        stripped = line.strip()
        table = AUXILIARY_LIST_HEADINGS if stripped.startswith("#") else AUXILIARY_LIST_PLAIN_HEADINGS
        best: tuple[str, float, str] | None = None
        for text, weight, list_type in table:
            if stripped.startswith("#"):
                matched = re.match(rf"^#{{1,3}}\s*{text}\s*$", stripped, re.IGNORECASE)
            else:
                matched = re.match(rf"^{text}$", stripped)
            if matched and (best is None or weight > best[1]):
                best = (text, weight, list_type)
        return best

    def _find_auxiliary_list_end_line(self, lines: list[str], start: int, max_line: int) -> int:
        """Last line of the list whose header is at ``start``.

        A list ends at another heading, three blank lines, a chapter marker, or
        a non-entry line after a blank line once entries have been seen.
        """
        last = start
        blanks = 0
        seen_entry = False

        for i in range(start + 1, min(start + 100, max_line, len(lines))):
            stripped = lines[i].strip()
            if not stripped:
                blanks += 1
                if blanks >= 3:
                    break
                continue
            after_gap = blanks > 0
            blanks = 0

            if stripped.startswith("#") or self._match_auxiliary_heading(stripped):
                break
            if stripped.upper().startswith(CONTENT_START_PREFIXES):
                break

            is_entry = _matches_any(stripped, AUXILIARY_ENTRY_PATTERNS, re.IGNORECASE)
            if not is_entry and after_gap and seen_entry:
                break
            seen_entry = seen_entry or is_entry
            last = i

        return last

    # -------------------------------------------------------------------------
    # Endnotes
    # -------------------------------------------------------------------------

    def detect_endnotes(self, content: str) -> DetectionResult:
        """Find a collected notes section in the last half of the document."""
        section_type = SectionType.FOOTNOTES_ENDNOTES
        lines = split_lines(content)
        too_small = self._too_small(section_type, lines)
        if too_small:
            return too_small

        min_start = int(len(lines) * self.config.endnotes_min_start)
        for i in range(min_start, len(lines)):
            match = _match_heading(lines[i], ENDNOTE_HEADINGS, ENDNOTE_PLAIN_HEADINGS)
            if match is None:
                continue

            heading, weight = match
            window = lines[i + 1 : i + 1 + self.config.supporting_scan_lines]
            notes = sum(1 for text in window if _matches_any(text, ENDNOTE_ENTRY_PATTERNS))
            if notes < 3:
                log.debug(f"Notes heading at line {i} has only {notes} numbered note(s)")
                continue

            confidence = min(1.0, weight + (0.15 if notes >= 10 else 0.1))
            if confidence < self.config.min_confidence:
                continue

            explanation = (
                f"Endnotes detected at line {i} ({i / len(lines):.0%} into document) "
                f"with {notes} numbered notes"
            )
            log.info(f"Heuristic: {explanation}")
            return DetectionResult.found(
                section_type,
                i,
                confidence,
                [f"Header: {heading}", f"Numbered notes: {notes}"],
                explanation,
            )

        return DetectionResult.not_found(
            section_type, "No notes header with numbered notes found in last 50% of document"
        )

    def _find_endnotes_end_line(self, lines: list[str], start: int) -> int:
        """Notes run until the next unrelated heading or the end of the document."""
        last = start
        for i in range(start + 1, len(lines)):
            stripped = lines[i].strip()
            if not stripped:
                continue
            if _match_heading(stripped, ENDNOTE_HEADINGS, ENDNOTE_PLAIN_HEADINGS) is None and (
                stripped.startswith("#")
                or _match_heading(stripped, BACK_MATTER_HEADINGS, BACK_MATTER_PLAIN_HEADINGS)
                or _match_heading(stripped, INDEX_HEADINGS, INDEX_PLAIN_HEADINGS)
            ):
                break
            last = i
        return last
