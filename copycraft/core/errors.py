"""Exception types raised by copycraft."""

from typing import List, Optional


class CopycraftError(Exception):
    """Base class for all copycraft errors."""


class NotFoundError(CopycraftError):
    """A module, chapter, page or file path does not exist."""


class ChunkNotFoundError(NotFoundError):
    """No chunk contains the requested line."""


class CollisionError(CopycraftError):
    """The target name is already occupied by another entry."""


class SegmentIndexError(CopycraftError, IndexError):
    """Segment index is outside the freshly extracted segment list."""

    def __init__(self, index: int, count: int):
        super().__init__(f"Invalid segment index {index} (document has {count} segments)")
        self.index = index
        self.count = count


class GenerationError(CopycraftError):
    """The generation collaborator failed."""

    def __init__(self, message: str, returncode: Optional[int] = None, diagnostics: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.diagnostics = diagnostics

    def __str__(self) -> str:
        message = super().__str__()
        if self.diagnostics:
            return f"{message}\n{self.diagnostics}"
        return message


class ReorderError(CopycraftError):
    """A reorder failed and could not be fully rolled back."""

    def __init__(self, message: str, stranded: Optional[List[str]] = None):
        super().__init__(message)
        self.stranded = stranded or []
