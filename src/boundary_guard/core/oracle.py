"""Untrusted boundary oracle backed by the Gemini CLI."""

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from boundary_guard.core.document import split_lines
from boundary_guard.models.section import AuxiliaryListInfo, BoundaryInfo, SectionType

log = logging.getLogger(__name__)


class OracleError(Exception):
    """The oracle produced no usable answer."""


class GeminiError(OracleError):
    """Error from Gemini CLI."""

    def __init__(self, error_type: str, message: str, code: int | None = None):
        self.error_type = error_type
        self.message = message
        self.code = code
        super().__init__(f"{error_type}: {message}")


class BoundaryOracle(ABC):
    """Source of proposed boundaries. Every answer may be wrong."""

    @abstractmethod
    async def identify_boundaries(
        self, content: str, section_type: SectionType
    ) -> BoundaryInfo | None:
        """Propose a span for ``section_type``; None means no proposal."""
        pass

    @abstractmethod
    async def detect_auxiliary_lists(self, content: str) -> list[AuxiliaryListInfo]:
        """Propose every auxiliary list in the document."""
        pass


# =============================================================================
# Prompts
# =============================================================================

BOUNDARY_PROMPT = """You are locating the {description} in an OCR'd book converted to markdown.

Each line of the excerpt below is prefixed with its 0-based line number. The full
document has {line_count} lines.

{guidance}

CRITICAL: When uncertain, assume content is core content. Removing real chapters
is far worse than leaving structural material in place.

Respond ONLY with JSON:
{{
  "startLine": 12,
  "endLine": 40,
  "confidence": 0.85,
  "notes": "short reason"
}}

If the section is not present, respond with startLine and endLine set to null.

DOCUMENT EXCERPT:
{excerpt}
"""

AUXILIARY_LIST_PROMPT = """Identify auxiliary lists in this document. These are front matter lists that
typically appear after the table of contents.

LIST TYPES TO DETECT:
- listOfFigures: "List of Figures", "Figures" (figure captions)
- listOfTables: "List of Tables", "Tables" (table captions)
- listOfIllustrations: "List of Illustrations", "Plates"
- listOfAbbreviations: "List of Abbreviations", "Abbreviations", "Acronyms"
- listOfMaps: "List of Maps", "Maps"
- listOfPlates: "List of Plates"

Each line is prefixed with its 0-based line number. Respond ONLY with a JSON array:
[
  {{
    "type": "listOfFigures",
    "startLine": 120,
    "endLine": 145,
    "confidence": 0.9,
    "title": "List of Figures"
  }}
]

Return an empty array [] if no auxiliary lists are found.

DOCUMENT EXCERPT:
{excerpt}
"""

_SECTION_GUIDANCE = {
    SectionType.FRONT_MATTER: (
        "Front matter starts at line 0: title page, copyright page, dedication, epigraph. "
        "It ends on the line before the first chapter, prologue or part heading."
    ),
    SectionType.TABLE_OF_CONTENTS: (
        "The table of contents is a CONTENTS header followed by chapter titles with page "
        "numbers. It ends before the first real chapter heading."
    ),
    SectionType.AUXILIARY_LISTS: (
        "Auxiliary lists are lists of figures, tables or abbreviations near the front."
    ),
    SectionType.BACK_MATTER: (
        "Back matter (notes, appendix, glossary, bibliography, about the author) starts at "
        "the first such header after the last chapter. Epilogues and concluding chapters are "
        "main content. endLine may be null to mean the end of the document."
    ),
    SectionType.INDEX: (
        "The index is an INDEX header followed by alphabetized 'term, page' entries, usually "
        "at the very end. endLine may be null to mean the end of the document."
    ),
    SectionType.FOOTNOTES_ENDNOTES: (
        "Collected notes are a NOTES or ENDNOTES header followed by numbered notes. "
        "Do not include footnote markers inside chapters."
    ),
}

# Sections located near the end of a document get a tail excerpt
_TAIL_SECTIONS = {
    SectionType.BACK_MATTER,
    SectionType.INDEX,
    SectionType.FOOTNOTES_ENDNOTES,
}

# Sections whose null endLine means "to the end of the document"
_OPEN_ENDED_SECTIONS = {SectionType.BACK_MATTER, SectionType.INDEX}

AUXILIARY_LIST_TYPES = {
    "listOfFigures": "List of Figures",
    "listOfTables": "List of Tables",
    "listOfIllustrations": "List of Illustrations",
    "listOfAbbreviations": "List of Abbreviations",
    "listOfMaps": "List of Maps",
    "listOfPlates": "List of Plates",
}


# =============================================================================
# Reply Parsing
# =============================================================================


class BoundaryReply(BaseModel):
    """Oracle answer for a single section."""

    model_config = ConfigDict(populate_by_name=True)

    start_line: int | None = Field(default=None, alias="startLine")
    end_line: int | None = Field(default=None, alias="endLine")
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    notes: str = ""


class AuxiliaryListReply(BaseModel):
    """One list in an auxiliary list answer."""

    model_config = ConfigDict(populate_by_name=True)

    type: str
    start_line: int = Field(alias="startLine")
    end_line: int = Field(alias="endLine")
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    title: str | None = None


def extract_json(text: str, opener: str = "{") -> str:
    """Pull a JSON object (or array, with ``opener="["``) out of a model reply.

    Tries a ```json fence, then any fence, then the outermost brackets.
    Trailing commas are removed.

    Raises:
        OracleError: If the reply contains no JSON.
    """
    closer = "}" if opener == "{" else "]"
    fenced = re.search(r"```json\s*(.*?)```", text, re.DOTALL) or re.search(
        r"```\s*(.*?)```", text, re.DOTALL
    )
    candidate = fenced.group(1) if fenced else text

    start = candidate.find(opener)
    end = candidate.rfind(closer)
    if start == -1 or end < start:
        raise OracleError(f"No JSON {'object' if opener == '{' else 'array'} in reply")

    return re.sub(r",\s*([}\]])", r"\1", candidate[start : end + 1])


def parse_boundary_reply(
    text: str, section_type: SectionType, line_count: int
) -> BoundaryInfo:
    """Convert a raw reply to a BoundaryInfo.

    A reply without a start line is a valid "no boundary" answer and yields a
    span with no end line.
    """
    try:
        reply = BoundaryReply.model_validate_json(extract_json(text))
    except ValidationError as e:
        raise OracleError(f"Malformed boundary reply: {e}") from e

    if reply.start_line is None:
        return BoundaryInfo(start_line=0, end_line=None, confidence=reply.confidence, notes=reply.notes)

    end_line = reply.end_line
    if end_line is None and section_type in _OPEN_ENDED_SECTIONS:
        end_line = line_count - 1

    return BoundaryInfo(
        start_line=reply.start_line,
        end_line=end_line,
        confidence=reply.confidence,
        notes=reply.notes or "oracle",
    )


def parse_auxiliary_list_reply(text: str) -> list[AuxiliaryListInfo]:
    """Convert a raw reply to AuxiliaryListInfo records; unknown types are dropped."""
    try:
        items = json.loads(extract_json(text, opener="["))
    except json.JSONDecodeError as e:
        raise OracleError(f"Malformed auxiliary list reply: {e}") from e
    if not isinstance(items, list):
        raise OracleError("Auxiliary list reply is not an array")

    lists: list[AuxiliaryListInfo] = []
    for item in items:
        try:
            reply = AuxiliaryListReply.model_validate(item)
        except ValidationError as e:
            log.debug(f"Skipping malformed auxiliary list entry: {e}")
            continue
        list_type = AUXILIARY_LIST_TYPES.get(reply.type)
        if list_type is None:
            log.debug(f"Skipping unknown auxiliary list type: {reply.type}")
            continue
        lists.append(
            AuxiliaryListInfo(
                list_type=list_type,
                start_line=reply.start_line,
                end_line=reply.end_line,
                confidence=reply.confidence,
                header_text=reply.title,
                explanation="oracle",
            )
        )
    return sorted(lists, key=lambda info: info.start_line)


def numbered_excerpt(lines: list[str], max_chars: int, from_end: bool = False) -> str:
    """Prefix lines with their 0-based numbers, keeping within ``max_chars``.

    Takes lines from the start of the document, or from the end when
    ``from_end`` is set. Line numbers always refer to the full document.
    """
    indices = range(len(lines) - 1, -1, -1) if from_end else range(len(lines))
    picked: list[str] = []
    used = 0
    for i in indices:
        numbered = f"{i}: {lines[i]}"
        if used + len(numbered) + 1 > max_chars:
            break
        picked.append(numbered)
        used += len(numbered) + 1
    if from_end:
        picked.reverse()
    return "\n".join(picked)


# =============================================================================
# Gemini Oracle
# =============================================================================


class GeminiOracle(BoundaryOracle):
    """Ask the Gemini CLI for boundaries."""

    DEFAULT_MODEL = "gemini-3-pro-preview"
    TIMEOUT_SECONDS = 120
    MAX_EXCERPT_CHARS = 60_000

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        timeout: float = TIMEOUT_SECONDS,
        max_excerpt_chars: int = MAX_EXCERPT_CHARS,
    ):
        self.model = model
        self.timeout = timeout
        self.max_excerpt_chars = max_excerpt_chars

    def _build_boundary_prompt(self, content: str, section_type: SectionType) -> str:
        lines = split_lines(content)
        excerpt = numbered_excerpt(
            lines, self.max_excerpt_chars, from_end=section_type in _TAIL_SECTIONS
        )
        return BOUNDARY_PROMPT.format(
            description=section_type.description,
            line_count=len(lines),
            guidance=_SECTION_GUIDANCE[section_type],
            excerpt=excerpt,
        )

    async def _call_gemini(self, prompt: str) -> str:
        """Run ``gemini -m <model>`` with the prompt on stdin and return stdout.

        Excerpts can run to hundreds of kilobytes, past the argv size limit.
        """
        cmd = ["gemini", "-m", self.model]

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            raise GeminiError("NOT_FOUND", "gemini CLI not found on PATH")
        except OSError as e:
            raise GeminiError("CLI_ERROR", f"Could not start gemini: {e}")

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(prompt.encode()), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise GeminiError("TIMEOUT", f"Request timed out after {self.timeout}s")
        except asyncio.CancelledError:
            process.kill()
            raise
        except OSError as e:
            process.kill()
            await process.wait()
            raise GeminiError("CLI_ERROR", f"Lost contact with gemini: {e}")

        if process.returncode != 0:
            error_msg = (stderr or stdout).decode(errors="replace").strip() or "Unknown error"
            raise GeminiError("CLI_ERROR", error_msg, code=process.returncode)

        return stdout.decode(errors="replace")

    async def identify_boundaries(
        self, content: str, section_type: SectionType
    ) -> BoundaryInfo | None:
        prompt = self._build_boundary_prompt(content, section_type)
        log.debug(f"Asking {self.model} for {section_type.value} boundaries")
        text = await self._call_gemini(prompt)
        boundary = parse_boundary_reply(text, section_type, len(split_lines(content)))
        log.info(
            f"Oracle proposed {section_type.value} "
            f"{boundary.start_line}-{boundary.end_line} (confidence={boundary.confidence:.2f})"
        )
        return boundary

    async def detect_auxiliary_lists(self, content: str) -> list[AuxiliaryListInfo]:
        excerpt = numbered_excerpt(split_lines(content), self.max_excerpt_chars)
        text = await self._call_gemini(AUXILIARY_LIST_PROMPT.format(excerpt=excerpt))
        lists = parse_auxiliary_list_reply(text)
        log.info(f"Oracle proposed {len(lists)} auxiliary list(s)")
        return lists
