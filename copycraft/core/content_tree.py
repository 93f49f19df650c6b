"""Module > Chapter > Page content hierarchy with file-based naming."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional
import re


ORDER_WIDTH = 3
SLUG_MAX_LENGTH = 30
PAGE_SUFFIX = ".md"
TITLE_SEPARATOR = " > "

ORDER_PREFIX = re.compile(r"^(\d+)-")
TITLE_MARKER = re.compile(r"^<!--\s*title:\s*(.+?)\s*-->(?:\r?\n)?")


class NodeType(Enum):
    """Level of a node in the content tree."""

    MODULE = "module"
    CHAPTER = "chapter"
    PAGE = "page"


@dataclass(frozen=True)
class TitleTriple:
    """Module, chapter and page titles recorded in a page's marker line."""

    module: str = ""
    chapter: str = ""
    page: str = ""

    def to_marker(self) -> str:
        """Render the single-line title comment, without trailing newline."""
        parts = TITLE_SEPARATOR.join([self.module, self.chapter, self.page])
        return f"<!-- title: {parts} -->"

    def replace(self, module: Optional[str] = None, chapter: Optional[str] = None,
                page: Optional[str] = None) -> "TitleTriple":
        return TitleTriple(
            module=self.module if module is None else module,
            chapter=self.chapter if chapter is None else chapter,
            page=self.page if page is None else page,
        )

    def to_dict(self) -> Dict[str, str]:
        return {"module": self.module, "chapter": self.chapter, "page": self.page}


def slugify(title: str) -> str:
    """Filesystem-safe slug: lowercase, non-alphanumeric runs as ``-``."""
    return re.sub(r"[^a-z0-9]+", "-", title.lower())[:SLUG_MAX_LENGTH]


def format_order(number: int) -> str:
    return str(number).zfill(ORDER_WIDTH)


def order_of(name: str) -> int:
    """Numeric value of a name's order prefix, 0 when it has none."""
    match = ORDER_PREFIX.match(name)
    return int(match.group(1)) if match else 0


def sort_by_order(names: Iterable[str]) -> List[str]:
    return sorted(names, key=lambda name: (order_of(name), name))


def strip_order(name: str) -> str:
    """Name without its ``NNN-`` prefix."""
    return ORDER_PREFIX.sub("", name, count=1)


def title_from_name(name: str) -> str:
    """Human readable title derived from a directory or file name."""
    if name.endswith(PAGE_SUFFIX):
        name = name[:-len(PAGE_SUFFIX)]
    return strip_order(name).replace("-", " ")


def read_marker(raw: str) -> Optional[TitleTriple]:
    """Parse the title marker at the very start of ``raw``."""
    match = TITLE_MARKER.match(raw)
    if not match:
        return None

    parts = match.group(1).split(TITLE_SEPARATOR)
    parts += [""] * (3 - len(parts))
    return TitleTriple(module=parts[0], chapter=parts[1], page=parts[2])


def resolve_titles(raw: str, fallback: TitleTriple) -> TitleTriple:
    """Titles from the marker, falling back per empty or missing component."""
    marker = read_marker(raw)
    if marker is None:
        return fallback
    return TitleTriple(
        module=marker.module or fallback.module,
        chapter=marker.chapter or fallback.chapter,
        page=marker.page or fallback.page,
    )


def has_marker(raw: str) -> bool:
    return TITLE_MARKER.match(raw) is not None


def strip_marker(raw: str) -> str:
    """Content without its title marker line."""
    return TITLE_MARKER.sub("", raw, count=1)


def with_marker(titles: TitleTriple, body: str) -> str:
    return f"{titles.to_marker()}\n{body}"


def replace_marker(raw: str, titles: TitleTriple) -> str:
    """Rewrite an existing marker line, keeping the body untouched."""
    return with_marker(titles, strip_marker(raw))


@dataclass
class Page:
    """A single page file inside a chapter directory."""

    order_prefix: str
    filename: str
    titles: TitleTriple
    content: str = ""
    segment_count: int = 0
    module_path: str = ""
    chapter_path: str = ""

    @property
    def title(self) -> str:
        return self.titles.page

    @property
    def id(self) -> str:
        return f"{self.module_path}/{self.chapter_path}/{self.filename}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert page to dictionary for serialization."""
        return {
            "id": self.id,
            "order": self.order_prefix,
            "filename": self.filename,
            "title": self.title,
            "module_title": self.titles.module,
            "chapter_title": self.titles.chapter,
            "content": self.content,
            "segment_count": self.segment_count,
            "module_path": self.module_path,
            "chapter_path": self.chapter_path,
        }


@dataclass
class Chapter:
    """A chapter directory holding ordered pages."""

    order_prefix: str
    name: str
    title: str
    module_path: str = ""
    pages: List[Page] = field(default_factory=list)

    @property
    def id(self) -> str:
        return f"{self.module_path}/{self.name}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "order": self.order_prefix,
            "title": self.title,
            "pages": [page.to_dict() for page in self.pages],
        }


@dataclass
class Module:
    """A top-level module directory holding ordered chapters."""

    order_prefix: str
    name: str
    title: str
    chapters: List[Chapter] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.name

    @property
    def page_count(self) -> int:
        return sum(len(chapter.pages) for chapter in self.chapters)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "order": self.order_prefix,
            "title": self.title,
            "chapters": [chapter.to_dict() for chapter in self.chapters],
        }


def prefix_of(name: str) -> str:
    """The ``NNN`` part of a name, or an empty string."""
    match = ORDER_PREFIX.match(name)
    return match.group(1) if match else ""


# Flat import format:
#   === Module title ===
#   --- Chapter title ---
#   +++ Page title +++
MODULE_DELIMITER = re.compile(r"^===\s*(.+?)\s*===\s*$")
CHAPTER_DELIMITER = re.compile(r"^---\s*(.+?)\s*---\s*$")
PAGE_DELIMITER = re.compile(r"^\+\+\+\s*(.+?)\s*\+\+\+\s*$")


@dataclass
class FlatDocument:
    """Result of scanning a flat document: titles and bodies, not yet on disk."""

    modules: List[Module] = field(default_factory=list)
    dropped_lines: int = 0

    @property
    def chapter_count(self) -> int:
        return sum(len(module.chapters) for module in self.modules)

    @property
    def page_count(self) -> int:
        return sum(module.page_count for module in self.modules)


class _FlatScanner:
    """Single left-to-right pass over a flat document."""

    def __init__(self):
        self.result = FlatDocument()
        self.module: Optional[Module] = None
        self.chapter: Optional[Chapter] = None
        self.page: Optional[Page] = None
        self.page_lines: List[str] = []

    def feed(self, line: str) -> None:
        module_match = MODULE_DELIMITER.match(line)
        chapter_match = CHAPTER_DELIMITER.match(line)
        page_match = PAGE_DELIMITER.match(line)

        if module_match:
            self.close_page()
            self.close_chapter()
            self.close_module()
            self.module = Module(order_prefix="", name="", title=module_match.group(1).strip())
        elif chapter_match:
            self.close_page()
            self.close_chapter()
            self.chapter = Chapter(order_prefix="", name="", title=chapter_match.group(1).strip())
        elif page_match:
            self.close_page()
            self.page = Page(
                order_prefix="",
                filename="",
                titles=TitleTriple(
                    module=self.module.title if self.module else "",
                    chapter=self.chapter.title if self.chapter else "",
                    page=page_match.group(1).strip(),
                ),
            )
            self.page_lines = []
        elif self.page:
            self.page_lines.append(line)
        elif line.strip():
            self.result.dropped_lines += 1

    def close_page(self) -> None:
        if self.page is None:
            return
        self.page.content = "".join(f"{line}\n" for line in self.page_lines)
        if self.chapter:
            self.chapter.pages.append(self.page)
        else:
            self.result.dropped_lines += _count_text_lines(self.page_lines)
        self.page = None
        self.page_lines = []

    def close_chapter(self) -> None:
        if self.chapter is None:
            return
        if self.module:
            self.module.chapters.append(self.chapter)
        else:
            for page in self.chapter.pages:
                self.result.dropped_lines += _count_text_lines(page.content.split("\n"))
        self.chapter = None

    def close_module(self) -> None:
        if self.module is None:
            return
        self.result.modules.append(self.module)
        self.module = None

    def finish(self) -> FlatDocument:
        self.close_page()
        self.close_chapter()
        self.close_module()
        return self.result


def _count_text_lines(lines: Iterable[str]) -> int:
    return sum(1 for line in lines if line.strip())


def parse_flat(document: str) -> FlatDocument:
    """Scan a flat document into modules, chapters and pages.

    Text outside an open page is dropped and counted, never raised.
    """
    scanner = _FlatScanner()
    for line in document.replace("\r\n", "\n").split("\n"):
        scanner.feed(line)
    return scanner.finish()


def render_flat(pages: Iterable[Page]) -> str:
    """Render tree-ordered pages back into the flat format."""
    parts: List[str] = []
    previous: Optional[TitleTriple] = None

    for page in pages:
        titles = page.titles
        module_changed = previous is None or titles.module != previous.module
        if module_changed:
            parts.append(f"=== {titles.module} ===\n\n")
        # A new module always reopens a chapter, otherwise its pages would be dropped on import
        if module_changed or titles.chapter != previous.chapter:
            parts.append(f"--- {titles.chapter} ---\n\n")

        parts.append(f"+++ {titles.page} +++\n")
        body = page.content.strip("\n")
        parts.append(f"{body}\n\n" if body else "\n")
        previous = titles

    return "".join(parts)
