"""Renaming and renumbering of content tree siblings."""

import logging
from pathlib import Path, PurePosixPath
from typing import List, Optional, Tuple

from ..core.content_tree import (
    PAGE_SUFFIX,
    NodeType,
    format_order,
    prefix_of,
    read_marker,
    replace_marker,
    slugify,
    strip_order,
)
from ..core.errors import CollisionError, NotFoundError, ReorderError

logger = logging.getLogger(__name__)

TEMP_PREFIX = "_temp_"


class TreeReorganizer:
    """Renames and reorders modules, chapters and pages of a ``ContentStore``.

    Assumes nobody else mutates the same parent directory meanwhile.
    """

    def __init__(self, store):
        self.store = store
        self.file_handler = store.file_handler

    def _is_kind(self, node_type: NodeType, path: Path) -> bool:
        if node_type is NodeType.PAGE:
            return path.is_file() and path.name.endswith(PAGE_SUFFIX)
        return path.is_dir()

    def rename(self, node_type: NodeType, path: str, new_title: str) -> str:
        """Give a node a new title and slug, keeping its order prefix.

        Module and chapter renames rewrite the matching component of the
        title marker in every page below them. Returns the new relative path.
        """
        source = self.store.existing_path(path)
        if not self._is_kind(node_type, source):
            raise NotFoundError(f"{node_type.value.capitalize()} not found: {path}")

        old_name = source.name
        prefix = prefix_of(old_name) or format_order(1)
        suffix = PAGE_SUFFIX if node_type is NodeType.PAGE else ""
        new_name = f"{prefix}-{slugify(new_title)}{suffix}"
        target = source.with_name(new_name)

        if new_name != old_name:
            if target.exists():
                raise CollisionError(f"Cannot rename {path}: {new_name} already exists")
            source.rename(target)
            logger.info(f"Renamed {node_type.value} {old_name} -> {new_name}")

        if node_type is NodeType.MODULE:
            self._retitle(target, module=new_title)
        elif node_type is NodeType.CHAPTER:
            self._retitle(target, chapter=new_title)
        else:
            self._retitle(target, page=new_title)

        parent = PurePosixPath(path).parent
        return new_name if str(parent) == "." else f"{parent}/{new_name}"

    def _retitle(self, path: Path, module: Optional[str] = None,
                 chapter: Optional[str] = None, page: Optional[str] = None) -> None:
        if path.is_dir():
            for child in sorted(path.iterdir()):
                self._retitle(child, module=module, chapter=chapter, page=page)
            return

        if not path.name.endswith(PAGE_SUFFIX):
            return

        raw = self.file_handler.read_text(path)
        marker = read_marker(raw)
        if marker is None:
            return

        titles = marker.replace(module=module, chapter=chapter, page=page)
        self.file_handler.write_file(path, replace_marker(raw, titles))

    def _plan(self, parent: Path, node_type: NodeType, ordered_names: List[str]) -> List[Tuple[str, str]]:
        if len(set(ordered_names)) != len(ordered_names):
            raise ValueError("Reorder list contains duplicate names")

        missing = [name for name in ordered_names if not self._is_kind(node_type, parent / name)]
        if missing:
            raise NotFoundError(f"Cannot reorder, not found: {', '.join(missing)}")

        renames = []
        for position, name in enumerate(ordered_names, start=1):
            new_name = f"{format_order(position)}-{strip_order(name)}"
            if new_name != name:
                renames.append((name, new_name))

        listed = set(ordered_names)
        for _, new_name in renames:
            if (parent / new_name).exists() and new_name not in listed:
                raise CollisionError(f"Cannot reorder, {new_name} is taken by an unlisted entry")

        return renames

    def reorder(self, node_type: NodeType, parent_path: str, ordered_names: List[str]) -> None:
        """Renumber siblings so their prefixes follow ``ordered_names``.

        Every moving entry is first parked under a unique temporary name,
        then given its final name, so no two entries ever share a name. On
        failure the entries are moved back to their original names.
        """
        if parent_path:
            parent = self.store.existing_path(parent_path)
        else:
            self.store.ensure_root()
            parent = self.store.root

        renames = self._plan(parent, node_type, ordered_names)
        if not renames:
            return

        staged: List[Tuple[str, str]] = []
        finished: List[Tuple[str, str]] = []

        try:
            for i, (name, _) in enumerate(renames):
                temp = f"{TEMP_PREFIX}{i}_{name}"
                if (parent / temp).exists():
                    raise CollisionError(f"Temporary name {temp} already exists in {parent}")
                (parent / name).rename(parent / temp)
                staged.append((name, temp))

            for (_, temp), (_, final) in zip(staged, renames):
                (parent / temp).rename(parent / final)
                finished.append((temp, final))
        except (OSError, CollisionError) as error:
            logger.error(f"Reorder in {parent} failed: {error}")
            self._rollback(parent, staged, finished, error)
            raise

        logger.info(f"Reordered {len(renames)} {node_type.value}s in {parent}")

    def _rollback(self, parent: Path, staged: List[Tuple[str, str]],
                  finished: List[Tuple[str, str]], cause: Exception) -> None:
        try:
            for temp, final in reversed(finished):
                (parent / final).rename(parent / temp)
            for name, temp in reversed(staged):
                (parent / temp).rename(parent / name)
        except OSError as error:
            stranded = sorted(
                entry.name for entry in parent.iterdir() if entry.name.startswith(TEMP_PREFIX)
            )
            raise ReorderError(
                f"Reorder failed ({cause}) and rollback failed ({error})", stranded=stranded
            ) from error
        logger.info(f"Rolled back reorder in {parent}")
