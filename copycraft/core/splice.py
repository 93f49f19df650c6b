"""Replace task markers with generated text."""

from dataclasses import dataclass
from typing import Sequence

from .errors import SegmentIndexError
from .segments import Segment, extract_segments


@dataclass(frozen=True)
class PendingEdit:
    """A segment and the text that will replace it."""

    segment: Segment
    replacement: str


@dataclass(frozen=True)
class SpliceResult:
    """Content after a single replacement."""

    content: str
    new_end_offset: int


def apply_edits(document: str, edits: Sequence[PendingEdit]) -> str:
    """Apply edits computed against one unmutated snapshot of ``document``.

    Edits are applied from the highest start offset down, so offsets of the
    edits still waiting are never shifted by a replacement of different length.
    """
    result = document
    for edit in sorted(edits, key=lambda e: e.segment.start_offset, reverse=True):
        segment = edit.segment
        result = result[:segment.start_offset] + edit.replacement + result[segment.end_offset:]
    return result


def splice_all(document: str, segments: Sequence[Segment], replacements: Sequence[str]) -> str:
    """Replace every segment with its replacement string."""
    if len(segments) != len(replacements):
        raise ValueError(
            f"Got {len(replacements)} replacements for {len(segments)} segments"
        )
    edits = [PendingEdit(segment, text) for segment, text in zip(segments, replacements)]
    return apply_edits(document, edits)


def resolve_segment(content: str, index: int) -> Segment:
    """Extract segments from ``content`` afresh and return the one at ``index``."""
    segments = extract_segments(content)
    if index < 0 or index >= len(segments):
        raise SegmentIndexError(index, len(segments))
    return segments[index]


def splice_one(content: str, index: int, replacement: str) -> SpliceResult:
    """Replace the segment at ``index`` of the current ``content``.

    The caller's offsets are never trusted; the index is checked against a
    new extraction of ``content``.
    """
    segment = resolve_segment(content, index)
    new_content = content[:segment.start_offset] + replacement + content[segment.end_offset:]
    return SpliceResult(
        content=new_content,
        new_end_offset=segment.start_offset + len(replacement),
    )
