"""File I/O and content tree persistence."""

from .file_handler import FileHandler
from .content_store import ContentStore, ImportSummary, PageContent
from .reorganizer import TreeReorganizer
from .memory_store import MemoryStore

__all__ = [
    "FileHandler",
    "ContentStore",
    "ImportSummary",
    "PageContent",
    "TreeReorganizer",
    "MemoryStore",
]
