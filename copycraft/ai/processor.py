"""Resolve task markers into generated text."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..core.chunks import (
    chunk_start_offset,
    find_chunk_for_line,
    join_chunks,
    line_of_offset,
    partition,
)
from ..core.errors import ChunkNotFoundError, SegmentIndexError
from ..core.segments import extract_segments
from ..core.splice import PendingEdit, apply_edits, resolve_segment, splice_one
from .base import Generator

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """Outcome of processing every marker of a document."""

    content: str
    processed_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"processed_content": self.content, "processed_count": self.processed_count}


@dataclass
class SegmentResult:
    """Outcome of processing a single marker of one chunk or page."""

    content: str
    generated_text: str
    new_end_offset: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processed_content": self.content,
            "generated_text": self.generated_text,
            "new_end_offset": self.new_end_offset,
        }


@dataclass
class DocumentSegmentResult:
    """Outcome of processing one marker of a whole document through its chunk."""

    content: str
    generated_text: str
    chunk_id: str
    highlight_start: int
    highlight_end: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processed_content": self.content,
            "generated_text": self.generated_text,
            "chunk_id": self.chunk_id,
            "highlight_start": self.highlight_start,
            "highlight_end": self.highlight_end,
        }


class SegmentProcessor:
    """Calls the generator for task markers and splices the results back in.

    Each call works on the text it is given; nothing is kept between calls.
    """

    def __init__(self, generator: Generator):
        self.generator = generator

    async def process_all(
        self,
        document: str,
        memory: Optional[Dict[str, str]] = None,
    ) -> ProcessResult:
        """Replace every marker of ``document``.

        All markers come from one snapshot. The generator is called for the
        last marker first, and the replacements are spliced in one pass.
        """
        segments = extract_segments(document)
        chunks = partition(document)
        edits: List[PendingEdit] = []

        for segment in reversed(segments):
            line = line_of_offset(document, segment.start_offset)
            try:
                context = find_chunk_for_line(chunks, line).content
            except ChunkNotFoundError:
                context = None

            logger.info(f"Generating segment {segment.index} ({segment.kind.value})")
            generated = await self.generator.generate(segment.prompt_text, context=context, memory=memory)
            edits.append(PendingEdit(segment, generated))

        return ProcessResult(content=apply_edits(document, edits), processed_count=len(segments))

    async def process_segment(
        self,
        chunk_content: str,
        index: int,
        context: Optional[str] = None,
        memory: Optional[Dict[str, str]] = None,
    ) -> SegmentResult:
        """Replace the marker at ``index`` of ``chunk_content``.

        The index is checked before the generator is called, against markers
        extracted from ``chunk_content`` now.
        """
        segment = resolve_segment(chunk_content, index)

        logger.info(f"Generating segment {index} ({segment.kind.value})")
        generated = await self.generator.generate(segment.prompt_text, context=context, memory=memory)

        result = splice_one(chunk_content, index, generated)
        return SegmentResult(
            content=result.content,
            generated_text=generated,
            new_end_offset=result.new_end_offset,
        )

    async def process_document_segment(
        self,
        document: str,
        index: int,
        extra_context: Optional[str] = None,
        memory: Optional[Dict[str, str]] = None,
    ) -> DocumentSegmentResult:
        """Replace one marker of ``document`` by rewriting only its chunk.

        The owning chunk is the generator's context, followed by
        ``extra_context`` when given.
        """
        segments = extract_segments(document)
        if index < 0 or index >= len(segments):
            raise SegmentIndexError(index, len(segments))
        segment = segments[index]

        chunks = partition(document)
        chunk = find_chunk_for_line(chunks, line_of_offset(document, segment.start_offset))
        chunk_offset = chunk_start_offset(chunks, chunk)

        local_starts = [s.start_offset for s in extract_segments(chunk.content)]
        local_start = segment.start_offset - chunk_offset
        if local_start not in local_starts:
            raise ChunkNotFoundError(f"Segment {index} is not contained in chunk {chunk.id}")
        local_index = local_starts.index(local_start)

        context = chunk.content
        if extra_context:
            context = f"{context}\n\n{extra_context}"

        result = await self.process_segment(chunk.content, local_index, context=context, memory=memory)
        chunk.content = result.content

        # Chunks before this one are untouched, so the marker's start still holds
        return DocumentSegmentResult(
            content=join_chunks(chunks),
            generated_text=result.generated_text,
            chunk_id=chunk.id,
            highlight_start=segment.start_offset,
            highlight_end=segment.start_offset + len(result.generated_text),
        )

    async def process_page(
        self,
        store,
        module: str,
        chapter: str,
        filename: str,
        index: int,
        context: Optional[str] = None,
        memory: Optional[Dict[str, str]] = None,
    ) -> SegmentResult:
        """Replace one marker of a stored page and write the page back.

        Read, generate, splice and write happen in sequence without locking;
        concurrent calls on the same page keep the last write.
        """
        page = store.get_page(module, chapter, filename)
        result = await self.process_segment(page.content, index, context=context, memory=memory)
        store.put_page(module, chapter, filename, result.content)
        return result
