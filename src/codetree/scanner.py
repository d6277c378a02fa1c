"""Directory traversal for report generation.

The walk is lazy and pre-order: a directory is yielded before its children,
and an ignored name prunes the whole subtree before it is ever opened.
"""
from __future__ import annotations

import logging
import os
from collections.abc import Collection, Iterator
from pathlib import Path

from .models import FileEntry

logger = logging.getLogger(__name__)


def display(text: str | os.PathLike[str]) -> str:
    """Render a filesystem name for output, replacing undecodable bytes with U+FFFD.

    `os.scandir` surrogate-escapes names that are not valid UTF-8; those
    cannot be written to a UTF-8 report as-is.
    """
    return os.fsencode(text).decode("utf-8", "replace")


def is_ignored(name: str, ignored: Collection[str]) -> bool:
    """True when the bare entry name exactly matches an ignored name.

    Applies to files as well as directories: a file called `bin` is dropped
    just like a directory called `bin`.
    """
    return name in ignored


def file_extension(name: str) -> str | None:
    """Return the text after the last dot of `name`, without the dot.

    Names without a dot, and dotfiles such as `.gitignore` whose only dot is
    the leading one, have no extension.
    """
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem:
        return None
    return ext


def is_matched(entry: FileEntry, allowed: Collection[str]) -> bool:
    if not entry.is_file:
        return False
    ext = file_extension(entry.name)
    return ext is not None and ext in allowed


def _resolved(path: str) -> str:
    return os.path.normcase(os.path.realpath(path))


def walk_entries(
    root: str | Path,
    ignored: Collection[str],
    exclude: Collection[str | Path] = (),
) -> Iterator[FileEntry]:
    """Yield every entry under `root` depth-first, parents before children.

    The root itself is always yielded first at depth 0. Children are visited
    in name order. Symlinks are listed but never followed. Entries whose
    resolved path is in `exclude` are skipped like ignored names.

    Raises OSError if the root or any surviving directory cannot be listed.
    """
    root_str = os.fspath(root)
    ignored = frozenset(ignored)
    excluded = frozenset(_resolved(os.fspath(p)) for p in exclude)

    root_is_dir = os.path.isdir(root_str)
    if not root_is_dir and not os.path.lexists(root_str):
        raise FileNotFoundError(f"Root path does not exist: {root_str}")

    root_name = os.path.basename(os.path.normpath(root_str))
    if root_name in (".", ".."):
        root_name = ""

    yield FileEntry(
        path=root_str,
        name=root_name,
        is_file=os.path.isfile(root_str),
        depth=0,
        is_dir=root_is_dir,
    )
    if not root_is_dir:
        return

    # Stack of iterators over already-sorted children, one per open directory.
    stack: list[tuple[Iterator[os.DirEntry[str]], int]] = [(_sorted_children(root_str), 1)]
    while stack:
        children, depth = stack[-1]
        child = next(children, None)
        if child is None:
            stack.pop()
            continue

        if is_ignored(child.name, ignored):
            logger.debug(f"Ignoring {display(child.path)}")
            continue
        if excluded and _resolved(child.path) in excluded:
            logger.debug(f"Excluding {display(child.path)}")
            continue

        is_dir = child.is_dir(follow_symlinks=False)
        yield FileEntry(
            path=child.path,
            name=child.name,
            is_file=child.is_file(follow_symlinks=False),
            depth=depth,
            is_dir=is_dir,
        )
        if is_dir:
            stack.append((_sorted_children(child.path), depth + 1))


def _sorted_children(directory: str) -> Iterator[os.DirEntry[str]]:
    with os.scandir(directory) as it:
        entries = sorted(it, key=lambda e: e.name)
    return iter(entries)


def count_files(
    root: str | Path,
    ignored: Collection[str],
    allowed: Collection[str],
    exclude: Collection[str | Path] = (),
) -> tuple[int, int]:
    """Count regular files and matched (allowed-extension) files under `root`."""
    allowed = frozenset(allowed)
    total_files = 0
    code_files = 0
    for entry in walk_entries(root, ignored, exclude):
        if not entry.is_file:
            continue
        total_files += 1
        if is_matched(entry, allowed):
            code_files += 1
    return total_files, code_files
