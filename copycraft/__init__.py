"""
copycraft - resolve task markers in long-form markdown with generated text.
"""

__version__ = "1.0.0"

from .core import (
    Segment,
    SegmentKind,
    Chunk,
    Module,
    Chapter,
    Page,
    TitleTriple,
    NodeType,
    extract_segments,
    partition,
    splice_all,
    splice_one,
)
from .io import ContentStore, MemoryStore, TreeReorganizer
from .ai import ClaudeCliGenerator, ClaudeClient, SegmentProcessor, create_generator
from .config import Config

__all__ = [
    "Segment",
    "SegmentKind",
    "Chunk",
    "Module",
    "Chapter",
    "Page",
    "TitleTriple",
    "NodeType",
    "extract_segments",
    "partition",
    "splice_all",
    "splice_one",
    "ContentStore",
    "MemoryStore",
    "TreeReorganizer",
    "ClaudeCliGenerator",
    "ClaudeClient",
    "SegmentProcessor",
    "create_generator",
    "Config",
]
