"""Filesystem probing: existence, symlink inspection, path resolution, whole-file I/O.

Probes that answer yes/no questions never raise; reads and writes raise
ReadError / LinkIOError carrying the OS message.
"""

from __future__ import annotations

import os

from agent_sync.core.errors import LinkIOError, ReadError, os_reason


def exists(path: str) -> bool:
    """True iff any entry (including a dangling symlink) is at path."""
    try:
        os.lstat(path)
    except (OSError, ValueError):
        return False
    return True


def is_link(path: str) -> bool:
    """True iff path itself is a symbolic link (not followed)."""
    try:
        return os.path.islink(path)
    except (OSError, ValueError):
        return False


def is_dangling_link(path: str) -> bool:
    """True iff path is a symlink whose target chain does not reach an existing entry."""
    try:
        return os.path.islink(path) and not os.path.exists(path)
    except (OSError, ValueError):
        return False


def read_link_target(path: str) -> str:
    """Return the raw, possibly relative, target stored in the symlink at path."""
    try:
        return os.readlink(path)
    except (OSError, ValueError) as e:
        raise ReadError(path, os_reason(e)) from e


def resolve_link_target(path: str) -> str:
    """Return the symlink's target as an absolute path.

    Relative targets are joined to the directory containing the link, not the
    process working directory. The result is left unnormalized: a `..` after a
    symlinked component only means something once realpath resolves it.
    """
    target = read_link_target(path)
    if not os.path.isabs(target):
        link_dir = os.path.dirname(os.path.abspath(path))
        return os.path.join(link_dir, target)
    return target


def canonicalize(path: str) -> str:
    """Best-effort canonical absolute path.

    Dangling components are kept as-is after the longest resolvable prefix,
    so a broken link still classifies instead of erroring out.
    """
    try:
        return os.path.realpath(path)
    except (OSError, ValueError):
        return path


def same_file(a: str, b: str) -> bool:
    """True iff a and b are the same inode on the same device (hard links)."""
    try:
        return os.path.samefile(a, b)
    except (OSError, ValueError):
        return False


def read_text(path: str) -> str:
    """Whole-file read. Bytes that are not UTF-8 survive as surrogate escapes."""
    try:
        with open(path, encoding="utf-8", errors="surrogateescape", newline="") as f:
            return f.read()
    except (OSError, UnicodeError, ValueError) as e:
        raise ReadError(path, os_reason(e)) from e


def write_text(path: str, content: str) -> None:
    try:
        with open(path, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
            f.write(content)
    except (OSError, UnicodeError, ValueError) as e:
        raise LinkIOError(path, os_reason(e)) from e
