"""Memory files: markdown notes passed to the generator as extra context."""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from ..core.errors import CollisionError, NotFoundError
from .file_handler import FileHandler

logger = logging.getLogger(__name__)

MEMORY_SUFFIX = ".md"


class MemoryStore:
    """A flat directory of ``.md`` memory files."""

    def __init__(self, memory_dir: Union[str, Path], file_handler: Optional[FileHandler] = None):
        self.memory_dir = Path(memory_dir)
        self.file_handler = file_handler or FileHandler()

    def _path(self, filename: str) -> Path:
        if not filename or Path(filename).name != filename:
            raise ValueError(f"Invalid memory file name: {filename!r}")
        return self.memory_dir / filename

    def list_files(self) -> List[str]:
        if not self.memory_dir.exists():
            return []
        return sorted(self.file_handler.list_files(self.memory_dir, MEMORY_SUFFIX))

    def load(self) -> Dict[str, str]:
        """All memory files, keyed by filename in name order."""
        return {
            filename: self.file_handler.read_text(self.memory_dir / filename)
            for filename in self.list_files()
        }

    def select(self, filenames: Iterable[str]) -> Dict[str, str]:
        """The named memory files, in the order given."""
        selected = {}
        for filename in filenames:
            path = self._path(filename)
            if not path.is_file():
                raise NotFoundError(f"Memory file not found: {filename}")
            selected[filename] = self.file_handler.read_text(path)
        return selected

    def save(self, filename: str, content: str) -> None:
        self.file_handler.write_file(self._path(filename), content)
        logger.info(f"Saved memory file {filename}")

    def rename(self, old_filename: str, new_filename: str) -> None:
        old_path = self._path(old_filename)
        new_path = self._path(new_filename)

        if not old_path.is_file():
            raise NotFoundError(f"Memory file not found: {old_filename}")
        if old_filename == new_filename:
            return
        if new_path.exists():
            raise CollisionError(f"Memory file already exists: {new_filename}")

        old_path.rename(new_path)
        logger.info(f"Renamed memory file {old_filename} -> {new_filename}")

    def delete(self, filename: str) -> None:
        path = self._path(filename)
        if not path.is_file():
            raise NotFoundError(f"Memory file not found: {filename}")
        path.unlink()
        logger.info(f"Deleted memory file {filename}")
