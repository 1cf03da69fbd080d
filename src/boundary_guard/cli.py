"""Main CLI application."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console

from boundary_guard.commands.analyze import execute_analyze
from boundary_guard.commands.inspect import execute_detect, execute_validate, execute_verify
from boundary_guard.core.oracle import GeminiOracle

app = typer.Typer(
    name="boundary-guard",
    help="Validate proposed structural section boundaries in OCR'd documents before removal.",
    add_completion=False,
)

console = Console()

DocumentArgument = Annotated[
    Path,
    typer.Argument(
        help="Path to the document (plain text or markdown)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
]

SectionOption = Annotated[
    str,
    typer.Option(
        "--section",
        "-s",
        help="Section type: front_matter, table_of_contents, auxiliary_lists, "
        "back_matter, index, footnotes_endnotes",
    ),
]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """Validate proposed structural section boundaries in OCR'd documents."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@app.command()
def analyze(
    document_path: DocumentArgument,
    sections: Annotated[
        Optional[str],
        typer.Option(
            "--sections",
            help="Comma-separated section types to defend, or 'all'",
        ),
    ] = None,
    no_oracle: Annotated[
        bool,
        typer.Option(
            "--no-oracle",
            help="Skip the Gemini oracle and use heuristic detection only",
        ),
    ] = False,
    model: Annotated[
        str,
        typer.Option("--model", "-m", help="Gemini model for boundary proposals"),
    ] = GeminiOracle.DEFAULT_MODEL,
    timeout: Annotated[
        float,
        typer.Option("--timeout", help="Seconds to wait for each oracle call", min=1),
    ] = GeminiOracle.TIMEOUT_SECONDS,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write the cleaned document here"),
    ] = None,
) -> None:
    """Run the full multi-layer defense over a document."""
    try:
        execute_analyze(
            document_path=document_path,
            sections=sections,
            use_oracle=not no_oracle,
            model=model,
            timeout=timeout,
            output_path=output,
            console=console,
        )
    except Exception as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)


@app.command()
def validate(
    section: SectionOption,
    start: Annotated[int, typer.Option("--start", help="First line of the span (0-based)")],
    end: Annotated[
        Optional[int],
        typer.Option("--end", help="Last line of the span (inclusive); omit for no boundary"),
    ] = None,
    confidence: Annotated[
        float,
        typer.Option("--confidence", "-c", help="Proposal confidence", min=0.0, max=1.0),
    ] = 0.8,
    lines: Annotated[
        Optional[int],
        typer.Option("--lines", help="Total document line count"),
    ] = None,
    document_path: Annotated[
        Optional[Path],
        typer.Argument(help="Document to take the line count from", exists=True, dir_okay=False),
    ] = None,
) -> None:
    """Check one proposed span against position, size and confidence rules."""
    try:
        result = execute_validate(
            section=section,
            start_line=start,
            end_line=end,
            confidence=confidence,
            line_count=lines,
            document_path=document_path,
            console=console,
        )
    except Exception as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)

    if not result.is_valid:
        raise typer.Exit(2)


@app.command()
def verify(
    document_path: DocumentArgument,
    section: SectionOption,
    start: Annotated[int, typer.Option("--start", help="First line of the span (0-based)")],
    end: Annotated[int, typer.Option("--end", help="Last line of the span (inclusive)")],
) -> None:
    """Check whether a span's text looks like the claimed section."""
    try:
        result = execute_verify(
            document_path=document_path,
            section=section,
            start_line=start,
            end_line=end,
            console=console,
        )
    except Exception as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)

    if not result.is_valid:
        raise typer.Exit(2)


@app.command()
def detect(document_path: DocumentArgument) -> None:
    """Run every heuristic detector over a document."""
    try:
        execute_detect(document_path=document_path, console=console)
    except Exception as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
