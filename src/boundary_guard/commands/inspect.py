"""Single-phase inspection commands: validate, verify, detect."""

from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from boundary_guard.core.boundary_validator import BoundaryValidator
from boundary_guard.core.content_verifier import ContentVerifier
from boundary_guard.core.document import split_lines
from boundary_guard.core.heuristic_detector import HeuristicBoundaryDetector
from boundary_guard.models.results import ContentVerificationResult, ValidationResult
from boundary_guard.models.section import BoundaryInfo, SectionType


def _verdict(is_valid: bool) -> str:
    return "[green]VALID[/]" if is_valid else "[red]REJECTED[/]"


def execute_validate(
    section: str,
    start_line: int,
    end_line: int | None,
    confidence: float,
    line_count: int | None,
    document_path: Path | None,
    console: Console,
) -> ValidationResult:
    """Phase A for one proposed span.

    The document line count comes from ``line_count`` or, failing that, from
    ``document_path``.
    """
    section_type = SectionType.from_name(section)
    if line_count is None:
        if document_path is None:
            raise ValueError("Provide --lines or a document path to size the document")
        line_count = len(split_lines(document_path.read_text(encoding="utf-8")))

    boundary = BoundaryInfo(
        start_line=start_line, end_line=end_line, confidence=confidence, notes="cli"
    )
    result = BoundaryValidator().validate(boundary, section_type, line_count)

    reason = f"\n[dim]Reason:[/] {result.rejection_reason.display_name}" if result.rejection_reason else ""
    console.print(
        Panel(
            f"[dim]Section:[/] {section_type.display_name}\n"
            f"[dim]Span:[/] {start_line}-{end_line if end_line is not None else '?'} "
            f"of {line_count} lines\n"
            f"[dim]Confidence:[/] {confidence:.2f}\n"
            f"[dim]Verdict:[/] {_verdict(result.is_valid)}{reason}\n\n"
            f"{result.explanation}",
            title="Boundary Validation",
            border_style="cyan",
        )
    )
    return result


def execute_verify(
    document_path: Path,
    section: str,
    start_line: int,
    end_line: int,
    console: Console,
) -> ContentVerificationResult:
    """Phase B for one span of a document."""
    section_type = SectionType.from_name(section)
    content = document_path.read_text(encoding="utf-8")
    result = ContentVerifier().verify(section_type, content, start_line, end_line)

    lines = [
        f"[dim]Section:[/] {section_type.display_name}",
        f"[dim]Span:[/] {start_line}-{end_line}",
        f"[dim]Verdict:[/] {_verdict(result.is_valid)} ({result.confidence:.0%})",
    ]
    if result.failure_reason:
        lines.append(f"[dim]Reason:[/] {result.failure_reason.value}")
    if result.matched_patterns:
        lines.append(f"[dim]Signals:[/] {', '.join(result.matched_patterns)}")
    lines += ["", result.explanation]

    console.print(Panel("\n".join(lines), title="Content Verification", border_style="cyan"))
    return result


def execute_detect(
    document_path: Path,
    console: Console,
) -> dict[SectionType, list[BoundaryInfo]]:
    """Phase C with every detector; returns the spans found per section type."""
    content = document_path.read_text(encoding="utf-8")
    detector = HeuristicBoundaryDetector()

    table = Table(title="Heuristic Detection", show_header=True, header_style="bold cyan")
    table.add_column("Section", style="white")
    table.add_column("Found", justify="center", width=6)
    table.add_column("Lines", style="dim")
    table.add_column("Confidence", justify="right", width=10)
    table.add_column("Explanation", style="dim", max_width=70)

    found: dict[SectionType, list[BoundaryInfo]] = {}
    for section_type in SectionType:
        outcome = detector.detect_section(section_type, content)
        found[section_type] = outcome.boundaries
        if outcome.detected:
            for boundary, result in zip(outcome.boundaries, outcome.results):
                table.add_row(
                    section_type.display_name,
                    "[green]yes[/]",
                    f"{boundary.start_line}-{boundary.end_line}",
                    f"{boundary.confidence:.0%}",
                    result.explanation,
                )
        else:
            explanation = outcome.results[0].explanation if outcome.results else ""
            table.add_row(section_type.display_name, "[dim]no[/]", "-", "-", explanation)

    console.print(table)
    return found
