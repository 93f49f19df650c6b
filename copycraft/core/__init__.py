"""Core text and content models for copycraft."""

from .errors import (
    CopycraftError,
    NotFoundError,
    ChunkNotFoundError,
    CollisionError,
    SegmentIndexError,
    GenerationError,
    ReorderError,
)
from .segments import Segment, SegmentKind, extract_segments
from .chunks import Chunk, partition, find_chunk_for_line
from .splice import PendingEdit, SpliceResult, splice_all, splice_one
from .content_tree import Module, Chapter, Page, TitleTriple, NodeType

__all__ = [
    "CopycraftError",
    "NotFoundError",
    "ChunkNotFoundError",
    "CollisionError",
    "SegmentIndexError",
    "GenerationError",
    "ReorderError",
    "Segment",
    "SegmentKind",
    "extract_segments",
    "Chunk",
    "partition",
    "find_chunk_for_line",
    "PendingEdit",
    "SpliceResult",
    "splice_all",
    "splice_one",
    "Module",
    "Chapter",
    "Page",
    "TitleTriple",
    "NodeType",
]
