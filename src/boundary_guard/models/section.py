"""Section vocabulary and boundary spans."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SectionType(str, Enum):
    """Structural, non-narrative section eligible for removal."""

    FRONT_MATTER = "front_matter"
    TABLE_OF_CONTENTS = "table_of_contents"
    AUXILIARY_LISTS = "auxiliary_lists"
    BACK_MATTER = "back_matter"
    INDEX = "index"
    FOOTNOTES_ENDNOTES = "footnotes_endnotes"

    @classmethod
    def from_name(cls, name: str) -> "SectionType":
        """Parse ``front_matter``, ``front-matter`` or ``Front Matter``.

        Raises:
            ValueError: If the name matches no section type.
        """
        key = name.strip().lower().replace("-", "_").replace(" ", "_")
        aliases = {"toc": cls.TABLE_OF_CONTENTS, "footnotes": cls.FOOTNOTES_ENDNOTES}
        if key in aliases:
            return aliases[key]
        for member in cls:
            if member.value == key:
                return member
        valid = ", ".join(member.value for member in cls)
        raise ValueError(f"Unknown section type: {name}. Valid types: {valid}")

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def description(self) -> str:
        """Phrase used when asking the oracle about this section."""
        return _DESCRIPTIONS[self]


_DISPLAY_NAMES = {
    SectionType.FRONT_MATTER: "Front Matter",
    SectionType.TABLE_OF_CONTENTS: "Table of Contents",
    SectionType.AUXILIARY_LISTS: "Auxiliary Lists",
    SectionType.BACK_MATTER: "Back Matter",
    SectionType.INDEX: "Index",
    SectionType.FOOTNOTES_ENDNOTES: "Footnotes/Endnotes",
}

_DESCRIPTIONS = {
    SectionType.FRONT_MATTER: "front matter",
    SectionType.TABLE_OF_CONTENTS: "table of contents",
    SectionType.AUXILIARY_LISTS: "auxiliary lists (list of figures, tables, abbreviations)",
    SectionType.BACK_MATTER: "back matter (appendix, notes, bibliography, about the author, etc.)",
    SectionType.INDEX: "index",
    SectionType.FOOTNOTES_ENDNOTES: "footnotes/endnotes collection",
}


class BoundaryInfo(BaseModel):
    """Proposed or discovered span of lines (0-based, inclusive).

    An absent ``end_line`` means no determinable end, which is never grounds
    for removal.
    """

    model_config = ConfigDict(frozen=True)

    start_line: int
    end_line: int | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    notes: str = ""  # Provenance only

    @property
    def is_complete(self) -> bool:
        return self.end_line is not None

    @property
    def line_count(self) -> int | None:
        if self.end_line is None:
            return None
        return self.end_line - self.start_line + 1


class AuxiliaryListInfo(BaseModel):
    """A single discovered auxiliary list (List of Figures, Tables, ...)."""

    model_config = ConfigDict(frozen=True)

    list_type: str
    start_line: int
    end_line: int
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    header_text: str | None = None
    entry_count: int = 0
    explanation: str = ""

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1

    def to_boundary(self, notes: str = "") -> BoundaryInfo:
        """Convert to a plain span for validation and verification."""
        return BoundaryInfo(
            start_line=self.start_line,
            end_line=self.end_line,
            confidence=self.confidence,
            notes=notes or self.list_type,
        )
