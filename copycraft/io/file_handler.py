"""File handling utilities."""

import shutil
import yaml
from pathlib import Path
from typing import Any, Dict, List, Union
from docx import Document as DocxDocument


class FileHandler:
    """Handles reading and writing text, YAML and DOCX files."""

    def read_file(self, file_path: Union[str, Path]) -> str:
        """Read text content from various file formats."""
        path = Path(file_path)

        if path.suffix.lower() == '.docx':
            return self._read_docx(path)
        else:
            return self.read_text(path)

    def read_text(self, file_path: Union[str, Path]) -> str:
        """Read a UTF-8 file without newline translation."""
        with Path(file_path).open('r', encoding='utf-8', newline='') as f:
            return f.read()

    def write_file(self, file_path: Union[str, Path], content: str) -> None:
        """Write content to file, creating parent directories."""
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open('w', encoding='utf-8', newline='') as f:
            f.write(content)

    def read_yaml(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        """Read YAML file."""
        path = Path(file_path)
        with path.open('r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}

    def list_dirs(self, dir_path: Union[str, Path]) -> List[str]:
        """Names of the sub-directories of ``dir_path``."""
        return [p.name for p in Path(dir_path).iterdir() if p.is_dir()]

    def list_files(self, dir_path: Union[str, Path], suffix: str) -> List[str]:
        """Names of the files in ``dir_path`` ending with ``suffix``."""
        return [
            p.name for p in Path(dir_path).iterdir()
            if p.is_file() and p.name.endswith(suffix)
        ]

    def remove(self, path: Union[str, Path]) -> None:
        """Remove a file or a whole directory tree."""
        path = Path(path)
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink()

    def _read_docx(self, path: Path) -> str:
        """Read DOCX file."""
        doc = DocxDocument(path)
        return '\n'.join(paragraph.text for paragraph in doc.paragraphs)
