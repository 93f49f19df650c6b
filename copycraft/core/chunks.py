"""Split a markdown document into top-level sections."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import re

from .errors import ChunkNotFoundError


HEADING = re.compile(r"^#\s+(.+)$")

PREAMBLE_ID = "chunk-preamble"
PREAMBLE_TITLE = "Preamble"


@dataclass
class Chunk:
    """A level-1 heading section, or the preamble before the first heading.

    ``start_line`` and ``end_line`` are 0-based and inclusive.
    """

    id: str
    title: str
    level: int
    content: str
    start_line: int
    end_line: int

    def contains_line(self, line: int) -> bool:
        return self.start_line <= line <= self.end_line

    def to_dict(self) -> Dict[str, Any]:
        """Convert chunk to dictionary for serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "level": self.level,
            "content": self.content,
            "start_line": self.start_line,
            "end_line": self.end_line,
        }


def _split_lines(document: str) -> List[str]:
    # Only "\n" ends a line, matching line_of_offset
    lines = document.split("\n")
    result = [line + "\n" for line in lines[:-1]]
    if lines[-1]:
        result.append(lines[-1])
    return result


def partition(document: str) -> List[Chunk]:
    """Split ``document`` on ``# Heading`` lines.

    Line endings are kept, so joining every chunk's content gives back the
    original document.
    """
    chunks: List[Chunk] = []
    current: Optional[Chunk] = None
    heading_count = 0

    for index, line in enumerate(_split_lines(document)):
        match = HEADING.match(line.rstrip("\r\n"))

        if match:
            if current:
                current.end_line = index - 1
                chunks.append(current)

            current = Chunk(
                id=f"chunk-{heading_count}",
                title=match.group(1).strip(),
                level=1,
                content=line,
                start_line=index,
                end_line=index,
            )
            heading_count += 1
        elif current:
            current.content += line
            current.end_line = index
        else:
            current = Chunk(
                id=PREAMBLE_ID,
                title=PREAMBLE_TITLE,
                level=0,
                content=line,
                start_line=0,
                end_line=index,
            )

    if current:
        chunks.append(current)

    return chunks


def line_of_offset(document: str, offset: int) -> int:
    """0-based line number of the character at ``offset``."""
    return document.count("\n", 0, offset)


def find_chunk_for_line(chunks: List[Chunk], line: int) -> Chunk:
    """Return the chunk whose line range contains ``line``."""
    for chunk in chunks:
        if chunk.contains_line(line):
            return chunk
    raise ChunkNotFoundError(f"No chunk contains line {line}")


def chunk_start_offset(chunks: List[Chunk], chunk: Chunk) -> int:
    """Character offset where ``chunk`` begins in the recomposed document."""
    offset = 0
    for candidate in chunks:
        if candidate is chunk or candidate.id == chunk.id:
            return offset
        offset += len(candidate.content)
    raise ChunkNotFoundError(f"Chunk {chunk.id} is not part of this document")


def join_chunks(chunks: List[Chunk]) -> str:
    """Recompose a document from its chunks."""
    return "".join(chunk.content for chunk in chunks)
