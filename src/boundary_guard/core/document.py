"""Line-level helpers shared by every phase."""

import logging

from boundary_guard.models.section import BoundaryInfo

log = logging.getLogger(__name__)


def split_lines(content: str) -> list[str]:
    """Split document text into lines (newline-delimited, CRLF tolerated)."""
    return content.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def merge_spans(spans: list[BoundaryInfo]) -> list[tuple[int, int]]:
    """Collapse overlapping or adjacent complete spans into disjoint ranges."""
    ranges = sorted(
        (span.start_line, span.end_line) for span in spans if span.end_line is not None
    )
    merged: list[tuple[int, int]] = []
    for start, end in ranges:
        if merged and start <= merged[-1][1] + 1:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def apply_removals(content: str, spans: list[BoundaryInfo]) -> str:
    """Remove every accepted span in a single batch.

    Spans are merged first, then deleted from the highest start line to the
    lowest so earlier deletions never shift the indices of later ones.
    """
    lines = split_lines(content)
    ranges = merge_spans(spans)

    for start, end in reversed(ranges):
        if start < 0 or start >= len(lines):
            log.warning(f"Skipping span {start}-{end}: outside document ({len(lines)} lines)")
            continue
        end = min(end, len(lines) - 1)
        del lines[start : end + 1]
        log.debug(f"Removed lines {start}-{end}")

    return "\n".join(lines)
