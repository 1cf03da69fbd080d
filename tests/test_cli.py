"""Tests for the command line interface."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from boundary_guard.cli import app
from boundary_guard.commands.analyze import parse_section_types
from boundary_guard.models import SectionType

runner = CliRunner()


@pytest.fixture
def book_path(tmp_path: Path, book_document: str) -> Path:
    path = tmp_path / "book.md"
    path.write_text(book_document, encoding="utf-8")
    return path


class TestParseSectionTypes:
    def test_all(self) -> None:
        assert parse_section_types(None) == list(SectionType)
        assert parse_section_types("all") == list(SectionType)

    def test_names_and_aliases(self) -> None:
        assert parse_section_types("index, toc,Back-Matter") == [
            SectionType.INDEX,
            SectionType.TABLE_OF_CONTENTS,
            SectionType.BACK_MATTER,
        ]

    def test_unknown_name(self) -> None:
        with pytest.raises(ValueError, match="Unknown section type"):
            parse_section_types("preface")


class TestValidateCommand:
    def test_valid_span(self) -> None:
        result = runner.invoke(
            app, ["validate", "--section", "back_matter", "--start", "300", "--end", "499", "--lines", "500"]
        )

        assert result.exit_code == 0
        assert "VALID" in result.output

    def test_rejected_span(self) -> None:
        result = runner.invoke(
            app, ["validate", "--section", "back_matter", "--start", "4", "--end", "499", "--lines", "500"]
        )

        assert result.exit_code == 2
        assert "REJECTED" in result.output

    def test_line_count_from_document(self, book_path: Path) -> None:
        result = runner.invoke(
            app, ["validate", "-s", "index", "--start", "178", "--end", "204", str(book_path)]
        )

        assert result.exit_code == 0

    def test_missing_line_count(self) -> None:
        result = runner.invoke(app, ["validate", "-s", "index", "--start", "1", "--end", "20"])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_unknown_section(self) -> None:
        result = runner.invoke(
            app, ["validate", "-s", "preface", "--start", "1", "--end", "20", "--lines", "100"]
        )

        assert result.exit_code == 1


class TestVerifyCommand:
    def test_verified(self, book_path: Path) -> None:
        result = runner.invoke(
            app, ["verify", str(book_path), "-s", "index", "--start", "178", "--end", "204"]
        )

        assert result.exit_code == 0
        assert "Content Verification" in result.output

    def test_narrative_rejected(self, book_path: Path) -> None:
        result = runner.invoke(
            app, ["verify", str(book_path), "-s", "back_matter", "--start", "20", "--end", "60"]
        )

        assert result.exit_code == 2


class TestDetectCommand:
    def test_detect(self, book_path: Path) -> None:
        result = runner.invoke(app, ["detect", str(book_path)])

        assert result.exit_code == 0
        assert "Heuristic Detection" in result.output


class TestAnalyzeCommand:
    def test_heuristic_only_with_output(self, book_path: Path, tmp_path: Path) -> None:
        output = tmp_path / "clean.md"

        result = runner.invoke(app, ["analyze", str(book_path), "--no-oracle", "-o", str(output)])

        assert result.exit_code == 0
        assert "Defense Summary" in result.output
        cleaned = output.read_text(encoding="utf-8")
        assert cleaned.startswith("# Chapter 1: Beginnings")
        assert "# INDEX" not in cleaned

    def test_selected_sections(self, book_path: Path, tmp_path: Path) -> None:
        output = tmp_path / "clean.md"

        result = runner.invoke(
            app,
            ["analyze", str(book_path), "--no-oracle", "--sections", "index", "-o", str(output)],
        )

        assert result.exit_code == 0
        cleaned = output.read_text(encoding="utf-8")
        assert "# INDEX" not in cleaned
        assert "ISBN" in cleaned

    def test_missing_document(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["analyze", str(tmp_path / "nope.md"), "--no-oracle"])

        assert result.exit_code != 0
