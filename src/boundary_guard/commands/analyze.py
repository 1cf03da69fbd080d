"""Analyze command implementation."""

import asyncio
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from boundary_guard.core.defense import DefenseConfig, DefenseOrchestrator
from boundary_guard.core.document import apply_removals
from boundary_guard.core.oracle import GeminiOracle
from boundary_guard.models.confidence import ConfidenceRating
from boundary_guard.models.decision import DefenseReport, DefenseState
from boundary_guard.models.section import SectionType

RATING_STYLES = {
    ConfidenceRating.VERY_HIGH: "green",
    ConfidenceRating.HIGH: "green",
    ConfidenceRating.MODERATE: "yellow",
    ConfidenceRating.LOW: "red",
    ConfidenceRating.VERY_LOW: "red",
}


def parse_section_types(selection: str | None) -> list[SectionType]:
    """Parse ``"index,back_matter"`` or ``"all"`` into section types."""
    if selection is None or selection.strip().lower() == "all":
        return list(SectionType)
    types = [SectionType.from_name(part) for part in selection.split(",") if part.strip()]
    if not types:
        raise ValueError("No section types selected")
    return types


def display_report(report: DefenseReport, console: Console) -> None:
    """Print the decision table and confidence panel."""
    table = Table(title="Section Decisions", show_header=True, header_style="bold cyan")
    table.add_column("Section", style="white")
    table.add_column("Outcome", justify="center", width=10)
    table.add_column("Source", justify="center", width=10)
    table.add_column("Lines", style="dim")
    table.add_column("Confidence", justify="right", width=10)
    table.add_column("Path", style="dim", max_width=60)

    for decision in report.decisions:
        outcome = (
            "[green]removed[/]" if decision.removed else "[yellow]preserved[/]"
        )
        if decision.used_fallback:
            source = "heuristic"
        elif decision.used_ai:
            source = "oracle"
        else:
            source = "-"
        spans = ", ".join(f"{s.start_line}-{s.end_line}" for s in decision.spans) or "-"
        confidence = decision.confidence.confidence if decision.confidence else 0.0
        path = " > ".join(
            state.value for state in decision.trail if state != DefenseState.NO_PROPOSAL
        )
        table.add_row(
            decision.section_type.display_name,
            outcome,
            source,
            spans,
            f"{confidence:.0%}",
            path,
        )

    console.print()
    console.print(table)

    pipeline = report.confidence
    style = RATING_STYLES[pipeline.overall_rating]
    removed_lines = sum(d.lines_removed for d in report.decisions if d.removed)
    console.print()
    console.print(
        Panel(
            f"[dim]Document lines:[/] {report.line_count}\n"
            f"[dim]Lines removable:[/] {removed_lines}\n"
            f"[dim]Overall confidence:[/] [{style}]{pipeline.overall_rating.value} "
            f"({pipeline.overall_confidence:.0%})[/]\n"
            f"[dim]Fallbacks used:[/] {pipeline.fallbacks_used}",
            title="Defense Summary",
            border_style="cyan",
        )
    )

    if pipeline.warnings:
        console.print()
        for warning in pipeline.warnings:
            console.print(f"[yellow]! {warning}[/]")


def execute_analyze(
    document_path: Path,
    sections: str | None,
    use_oracle: bool,
    model: str,
    timeout: float,
    output_path: Path | None,
    console: Console,
) -> DefenseReport:
    """Run the defense over a document and optionally write the cleaned text."""
    content = document_path.read_text(encoding="utf-8")
    section_types = parse_section_types(sections)

    oracle = GeminiOracle(model=model, timeout=timeout) if use_oracle else None
    orchestrator = DefenseOrchestrator(
        oracle=oracle,
        config=DefenseConfig(section_types=section_types, oracle_timeout=timeout + 30),
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task("Validating section boundaries...", total=None)
        report = asyncio.run(orchestrator.defend_document(content))

    display_report(report, console)

    if output_path is not None:
        cleaned = apply_removals(content, report.removal_spans())
        output_path.write_text(cleaned, encoding="utf-8")
        console.print()
        console.print(f"[green]Cleaned document written to {output_path}[/]")

    return report
