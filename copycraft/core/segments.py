"""Task marker extraction.

A task marker is an ``<agent>...</agent>`` block holding one of the inner
elements ``<research>``, ``<autoprompt>`` or ``<prompt>``. When a block holds
more than one, research wins over autoprompt, which wins over prompt.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional
import re


AGENT_BLOCK = re.compile(r"<agent>([\s\S]*?)</agent>")


class SegmentKind(Enum):
    """Kind of task a segment asks for."""

    PROMPT = "prompt"
    AUTOPROMPT = "autoprompt"
    RESEARCH = "research"


# Highest priority first
INNER_MARKERS = [
    (SegmentKind.RESEARCH, re.compile(r"<research>([\s\S]*?)</research>")),
    (SegmentKind.AUTOPROMPT, re.compile(r"<autoprompt>([\s\S]*?)</autoprompt>")),
    (SegmentKind.PROMPT, re.compile(r"<prompt>([\s\S]*?)</prompt>")),
]


@dataclass(frozen=True)
class Segment:
    """A task marker occurrence and its position in the source text."""

    index: int
    kind: SegmentKind
    prompt_text: str
    start_offset: int
    end_offset: int
    full_content: str = ""

    @property
    def length(self) -> int:
        return self.end_offset - self.start_offset

    def to_dict(self) -> Dict[str, Any]:
        """Convert segment to dictionary for serialization."""
        return {
            "index": self.index,
            "kind": self.kind.value,
            "prompt": self.prompt_text,
            "start_offset": self.start_offset,
            "end_offset": self.end_offset,
        }


def _match_inner(block: str) -> Optional[tuple]:
    for kind, pattern in INNER_MARKERS:
        match = pattern.search(block)
        if match:
            return kind, match.group(1).strip()
    return None


def extract_segments(document: str) -> List[Segment]:
    """Find all task markers in ``document`` in ascending offset order.

    Blocks without a recognised inner marker are skipped and do not take an
    index. Offsets are plain ``str`` indices into ``document``.
    """
    if not document:
        return []

    segments: List[Segment] = []
    for match in AGENT_BLOCK.finditer(document):
        inner = _match_inner(match.group(1))
        if inner is None:
            continue

        kind, prompt_text = inner
        segments.append(Segment(
            index=len(segments),
            kind=kind,
            prompt_text=prompt_text,
            start_offset=match.start(),
            end_offset=match.end(),
            full_content=match.group(1),
        ))

    return segments


def count_segments(document: str) -> int:
    """Number of task markers in ``document``."""
    return len(extract_segments(document))
