"""Module > Chapter > Page tree persisted as numbered directories."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..core.content_tree import (
    PAGE_SUFFIX,
    Chapter,
    Module,
    NodeType,
    Page,
    TitleTriple,
    format_order,
    has_marker,
    order_of,
    parse_flat,
    prefix_of,
    read_marker,
    render_flat,
    resolve_titles,
    slugify,
    sort_by_order,
    strip_marker,
    title_from_name,
    with_marker,
)
from ..core.errors import CollisionError, NotFoundError
from ..core.segments import Segment, count_segments, extract_segments
from .file_handler import FileHandler
from .reorganizer import TreeReorganizer

logger = logging.getLogger(__name__)


@dataclass
class PageContent:
    """A page as returned to callers: marker stripped, segments fresh."""

    filename: str
    content: str
    titles: TitleTriple
    segments: List[Segment] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "content": self.content,
            "titles": self.titles.to_dict(),
            "segments": [segment.to_dict() for segment in self.segments],
        }


@dataclass
class ImportSummary:
    """Counts reported by a flat import."""

    modules: int = 0
    chapters: int = 0
    pages: int = 0
    dropped_lines: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "modules": self.modules,
            "chapters": self.chapters,
            "pages": self.pages,
            "dropped_lines": self.dropped_lines,
        }


class ContentStore:
    """Reads and writes the content tree under a root directory.

    Nothing is cached: every call lists and reads the directory tree again.
    """

    def __init__(self, root: Union[str, Path], file_handler: Optional[FileHandler] = None):
        self.root = Path(root)
        self.file_handler = file_handler or FileHandler()

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, *parts: str) -> Path:
        """Absolute path of a node, refusing paths outside the root.

        The root itself is not a node, so a path resolving to it is not found.
        """
        relative = Path(*[part for part in parts if part])
        path = (self.root / relative).resolve()
        root = self.root.resolve()
        if path == root:
            raise NotFoundError(f"Not a module, chapter or page: {'/'.join(parts)!r}")
        if root not in path.parents:
            raise ValueError(f"Path escapes content root: {relative}")
        return path

    def existing_path(self, *parts: str) -> Path:
        path = self.path_for(*parts)
        if not path.exists():
            raise NotFoundError(f"Not found: {'/'.join(p for p in parts if p)}")
        return path

    # Reading

    def load(self) -> List[Module]:
        """Build the full tree from disk in numeric order."""
        self.ensure_root()
        modules = []

        for module_name in sort_by_order(self.file_handler.list_dirs(self.root)):
            module_dir = self.root / module_name
            module = Module(
                order_prefix=prefix_of(module_name),
                name=module_name,
                title=title_from_name(module_name),
            )

            chapter_names = sort_by_order(self.file_handler.list_dirs(module_dir))
            for chapter_index, chapter_name in enumerate(chapter_names):
                chapter = Chapter(
                    order_prefix=prefix_of(chapter_name),
                    name=chapter_name,
                    title=title_from_name(chapter_name),
                    module_path=module_name,
                )

                page_names = sort_by_order(
                    self.file_handler.list_files(module_dir / chapter_name, PAGE_SUFFIX)
                )
                for page_index, filename in enumerate(page_names):
                    page = self._read_page(module_name, chapter_name, filename)

                    # The first page speaks for its chapter, and for its module when first overall
                    if page_index == 0:
                        chapter.title = page.titles.chapter
                        if chapter_index == 0:
                            module.title = page.titles.module

                    chapter.pages.append(page)

                module.chapters.append(chapter)

            modules.append(module)

        return modules

    def iter_pages(self) -> List[Page]:
        """Every page of the tree in traversal order."""
        return [
            page
            for module in self.load()
            for chapter in module.chapters
            for page in chapter.pages
        ]

    def _fallback_titles(self, module: str, chapter: str, filename: str) -> TitleTriple:
        return TitleTriple(
            module=title_from_name(module),
            chapter=title_from_name(chapter),
            page=title_from_name(filename),
        )

    def _read_page(self, module: str, chapter: str, filename: str) -> Page:
        raw = self.file_handler.read_text(self.root / module / chapter / filename)
        body = strip_marker(raw)
        return Page(
            order_prefix=prefix_of(filename),
            filename=filename,
            titles=resolve_titles(raw, self._fallback_titles(module, chapter, filename)),
            content=body,
            segment_count=count_segments(body),
            module_path=module,
            chapter_path=chapter,
        )

    def read_raw(self, module: str, chapter: str, filename: str) -> str:
        """Page file content including its marker line."""
        path = self.existing_path(module, chapter, filename)
        return self.file_handler.read_text(path)

    def get_page(self, module: str, chapter: str, filename: str) -> PageContent:
        """Page body and its segments; offsets refer to the returned body."""
        raw = self.read_raw(module, chapter, filename)
        body = strip_marker(raw)
        return PageContent(
            filename=filename,
            content=body,
            titles=resolve_titles(raw, self._fallback_titles(module, chapter, filename)),
            segments=extract_segments(body),
        )

    # Writing

    def put_page(self, module: str, chapter: str, filename: str, content: str) -> int:
        """Write a page body and return its segment count.

        An existing marker line is kept when ``content`` brings none of its own.
        """
        path = self.path_for(module, chapter, filename)

        raw = content
        if path.exists() and not has_marker(content):
            titles = read_marker(self.file_handler.read_text(path))
            if titles is not None:
                raw = with_marker(titles, content)

        self.file_handler.write_file(path, raw)
        logger.info(f"Saved page {module}/{chapter}/{filename}")
        return count_segments(strip_marker(raw))

    def _next_name(self, existing: List[str], title: str, suffix: str = "") -> str:
        highest = max((order_of(name) for name in existing), default=0)
        return f"{format_order(highest + 1)}-{slugify(title)}{suffix}"

    def create_module(self, title: str) -> str:
        """Create a module directory and return its id."""
        self.ensure_root()
        name = self._next_name(self.file_handler.list_dirs(self.root), title)
        path = self.path_for(name)
        if path.exists():
            raise CollisionError(f"Module already exists: {name}")

        path.mkdir()
        logger.info(f"Created module {name}")
        return name

    def create_chapter(self, module_id: str, title: str) -> str:
        """Create a chapter directory and return its ``module/chapter`` id."""
        module_dir = self.existing_path(module_id)
        name = self._next_name(self.file_handler.list_dirs(module_dir), title)
        path = self.path_for(module_id, name)
        if path.exists():
            raise CollisionError(f"Chapter already exists: {module_id}/{name}")

        path.mkdir()
        logger.info(f"Created chapter {module_id}/{name}")
        return f"{module_id}/{name}"

    def create_page(self, module_id: str, chapter_id: str, title: str, content: str = "") -> str:
        """Create a page file with a title marker and return its id."""
        chapter_dir = self.existing_path(module_id, chapter_id)
        filename = self._next_name(
            self.file_handler.list_files(chapter_dir, PAGE_SUFFIX), title, PAGE_SUFFIX
        )
        path = self.path_for(module_id, chapter_id, filename)
        if path.exists():
            raise CollisionError(f"Page already exists: {module_id}/{chapter_id}/{filename}")

        module_title, chapter_title = self._inherit_titles(module_id, chapter_id)
        titles = TitleTriple(module=module_title, chapter=chapter_title, page=title)
        self.file_handler.write_file(path, with_marker(titles, content or ""))

        logger.info(f"Created page {module_id}/{chapter_id}/{filename}")
        return f"{module_id}/{chapter_id}/{filename}"

    def _first_page_raw(self, chapter_dir: Path) -> Optional[str]:
        pages = sort_by_order(self.file_handler.list_files(chapter_dir, PAGE_SUFFIX))
        if not pages:
            return None
        return self.file_handler.read_text(chapter_dir / pages[0])

    def _inherit_titles(self, module_id: str, chapter_id: str) -> Tuple[str, str]:
        """Module and chapter titles for a new page.

        Sibling pages are asked first, then pages of the other chapters of
        the module (module title only), then the directory names.
        """
        module_title = title_from_name(module_id)
        chapter_title = title_from_name(chapter_id)
        module_dir = self.root / module_id

        sibling = self._first_page_raw(module_dir / chapter_id)
        if sibling is not None:
            found = resolve_titles(sibling, TitleTriple(module_title, chapter_title, ""))
            return found.module, found.chapter

        for other in sort_by_order(self.file_handler.list_dirs(module_dir)):
            if other == chapter_id:
                continue
            raw = self._first_page_raw(module_dir / other)
            if raw is not None:
                found = resolve_titles(raw, TitleTriple(module_title, "", ""))
                return found.module, chapter_title

        return module_title, chapter_title

    def delete(self, node_type: NodeType, path: str) -> None:
        """Remove a page file, or a chapter or module with everything below it."""
        target = self.existing_path(path)
        if node_type is NodeType.PAGE and not target.is_file():
            raise NotFoundError(f"Page not found: {path}")
        if node_type is not NodeType.PAGE and not target.is_dir():
            raise NotFoundError(f"{node_type.value.capitalize()} not found: {path}")

        self.file_handler.remove(target)
        logger.info(f"Deleted {node_type.value} {path}")

    # Flat import / export

    def import_flat(self, document: str, clear_existing: bool = False) -> ImportSummary:
        """Create modules, chapters and pages from a delimited flat document."""
        self.ensure_root()

        if clear_existing:
            for name in self.file_handler.list_dirs(self.root):
                self.file_handler.remove(self.root / name)
            logger.info(f"Cleared existing content in {self.root}")

        parsed = parse_flat(document)
        if parsed.dropped_lines:
            logger.warning(f"Import dropped {parsed.dropped_lines} lines outside any page")

        start = max((order_of(n) for n in self.file_handler.list_dirs(self.root)), default=0)
        pages_written = 0

        for module_number, module in enumerate(parsed.modules, start=start + 1):
            module_dir = self.root / f"{format_order(module_number)}-{slugify(module.title)}"
            module_dir.mkdir(parents=True, exist_ok=True)

            for chapter_number, chapter in enumerate(module.chapters, start=1):
                chapter_dir = module_dir / f"{format_order(chapter_number)}-{slugify(chapter.title)}"
                chapter_dir.mkdir(parents=True, exist_ok=True)

                for page_number, page in enumerate(chapter.pages, start=1):
                    filename = f"{format_order(page_number)}-{slugify(page.title)}{PAGE_SUFFIX}"
                    body = page.content.strip() + "\n"
                    self.file_handler.write_file(chapter_dir / filename, with_marker(page.titles, body))
                    pages_written += 1

        summary = ImportSummary(
            modules=len(parsed.modules),
            chapters=parsed.chapter_count,
            pages=pages_written,
            dropped_lines=parsed.dropped_lines,
        )
        logger.info(
            f"Imported {summary.modules} modules, {summary.chapters} chapters, {summary.pages} pages"
        )
        return summary

    def export_flat(self) -> str:
        """Render the whole tree as one delimited flat document."""
        return render_flat(self.iter_pages())

    # Structure changes

    def rename(self, node_type: NodeType, path: str, new_title: str) -> str:
        """Rename a node, see ``TreeReorganizer.rename``."""
        return TreeReorganizer(self).rename(node_type, path, new_title)

    def reorder(self, node_type: NodeType, parent_path: str, ordered_names: List[str]) -> None:
        """Renumber siblings, see ``TreeReorganizer.reorder``."""
        TreeReorganizer(self).reorder(node_type, parent_path, ordered_names)
