"""Shared synthetic documents."""

from collections.abc import Callable

import pytest

INDEX_TERMS = [
    "abbey", "bridge", "castle", "delta", "estuary", "forest", "glacier", "harbor",
    "island", "jungle", "kingdom", "lagoon", "meadow", "night", "orchard", "pass",
    "quarry", "river", "summit", "tundra", "upland", "valley", "waterfall", "yard",
    "zenith",
]


def build_auxiliary_list_document(
    header: str,
    start_percent: float,
    entries: list[str],
    total_lines: int = 200,
) -> str:
    """A document with one auxiliary list placed at ``start_percent``."""
    prefix = int(total_lines * start_percent)
    lines = [f"Content line {i} with some text to fill the document." for i in range(prefix)]
    lines += ["", header, ""] + entries + [""]
    i = 0
    while len(lines) < total_lines:
        lines.append(
            f"Main content paragraph {i}. This is narrative prose that continues the document."
        )
        i += 1
    return "\n".join(lines)


@pytest.fixture
def auxiliary_list_document() -> Callable[..., str]:
    return build_auxiliary_list_document


@pytest.fixture
def table_entries() -> list[str]:
    return [
        "Table 1: Survey Results ................... 45",
        "Table 2: Regional Breakdown ............... 67",
        "Table 3: Annual Comparison ................ 89",
    ]


@pytest.fixture
def multiple_lists_document() -> str:
    lines = [
        "# Document Title",
        "",
        "© 2024 Publisher",
        "",
        "# LIST OF FIGURES",
        "",
        "Figure 1: Overview ........................ 12",
        "Figure 2: Details ......................... 25",
        "",
        "# LIST OF TABLES",
        "",
        "Table 1: Data Summary ..................... 34",
        "Table 2: Results .......................... 56",
        "",
    ]
    lines += [f"Main content line {i}. This is the actual body of the document." for i in range(180)]
    return "\n".join(lines)


@pytest.fixture
def narrative_document() -> str:
    lines = ["# The Great Adventure", ""]
    lines += [
        f"Paragraph {i}: The story continues with more exciting adventures and narrative prose."
        for i in range(200)
    ]
    return "\n".join(lines)


@pytest.fixture
def small_document() -> str:
    lines = ["# INDEX", "", "algorithms, 45, 67", "arrays, 23"]
    lines += [f"Line {i}" for i in range(20)]
    return "\n".join(lines)


@pytest.fixture
def back_matter_document() -> str:
    lines = [f"Main content line {i}. This is the body of the document." for i in range(140)]
    lines += ["", "# BIBLIOGRAPHY", ""]
    lines += [f'Reference {i}: Author, "Title," Publisher, 2024.' for i in range(57)]
    return "\n".join(lines)


@pytest.fixture
def early_notes_document() -> str:
    lines = [f"Front matter line {i}" for i in range(20)]
    lines += ["# NOTES", "Some note content"]
    lines += [f"Main content line {i}" for i in range(80)]
    return "\n".join(lines)


@pytest.fixture
def index_document() -> str:
    lines = [f"Main content line {i}." for i in range(160)]
    lines += [
        "",
        "# INDEX",
        "",
        "A",
        "algorithms, 45, 67",
        "arrays, 23",
        "",
        "B",
        "binary search, 78",
    ]
    lines += [f"{term} studies, {i * 3 + 100}" for i, term in enumerate(INDEX_TERMS)]
    return "\n".join(lines)


@pytest.fixture
def front_matter_document() -> str:
    lines = [
        "# Book Title",
        "",
        "By Author Name",
        "",
        "© 2024 Publisher",
        "All rights reserved.",
        "",
        "ISBN: 978-1-234567-89-0",
        "",
        "---",
        "",
        "# Chapter 1: Introduction",
        "",
    ]
    lines += [f"Chapter content line {i}." for i in range(100)]
    return "\n".join(lines)


@pytest.fixture
def toc_document() -> str:
    lines = [
        "# Book Title",
        "",
        "## TABLE OF CONTENTS",
        "",
        "Chapter 1: Introduction .......... 1",
        "Chapter 2: Background ............ 15",
        "Chapter 3: Methods ............... 32",
        "Chapter 4: Results ............... 48",
        "",
        "# Chapter 1: Introduction",
        "",
    ]
    lines += [f"Chapter content line {i}." for i in range(100)]
    return "\n".join(lines)


@pytest.fixture
def book_document() -> str:
    """Front matter, TOC, one chapter, bibliography and index (205 lines).

    Layout: front matter 0-5, TOC 6-10, chapter 12-163,
    bibliography 165-176, index 178-204.
    """
    lines = [
        "# The Long Road",
        "",
        "© 2024 Example Press",
        "All rights reserved.",
        "ISBN: 978-1-234567-89-0",
        "",
        "## TABLE OF CONTENTS",
        "",
        "Chapter 1: Beginnings .......... 1",
        "Chapter 2: The Journey ......... 15",
        "Chapter 3: Arrival ............. 30",
        "",
        "# Chapter 1: Beginnings",
        "",
    ]
    lines += [
        f"Story line {i}: the travellers pressed on through the quiet valley."
        for i in range(150)
    ]
    lines += ["", "# BIBLIOGRAPHY", ""]
    lines += [f'Reference {i}: Author, "Title," Publisher, {2000 + i}.' for i in range(10)]
    lines += ["", "# INDEX", ""]
    lines += [f"{term}, {i + 3}" for i, term in enumerate(INDEX_TERMS)]
    return "\n".join(lines)


@pytest.fixture
def long_front_matter_document() -> str:
    """1000 lines: copyright page, a 92-entry contents list, chapter 1 at line 100."""
    lines = [
        "# The Long Road",
        "",
        "Copyright © 2024 Example Press",
        "ISBN: 978-1-234567-89-0",
        "",
        "## CONTENTS",
        "",
    ]
    lines += [f"Section {i}: Crossing the hills .......... {i * 3 + 1}" for i in range(92)]
    lines += ["", "# Chapter 1: The Beginning", ""]
    while len(lines) < 1000:
        lines.append("The travellers walked along the river road until the evening light faded.")
    return "\n".join(lines)
