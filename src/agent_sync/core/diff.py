from __future__ import annotations

import difflib

from rich.text import Text

from agent_sync.core.errors import ReadError
from agent_sync.core.links import probe

# Nord-inspired diff color palette (soft, readable on dark backgrounds)
_STYLE_ADDED = "#a3be8c"  # Muted sage green (nord14)
_STYLE_REMOVED = "#bf616a"  # Muted soft red (nord11)
_STYLE_HUNK = "#81a1c1"  # Frost blue (nord9)
_STYLE_FILE_HEADER = "bold #d8dee9"  # Snow storm (nord4)
_STYLE_CONTEXT = "dim"


def read_pair_for_diff(canonical_path: str, mirror_path: str) -> tuple[str | None, str | None]:
    """Read the main guide and a mirror for display.

    Returns (canonical, mirror) where either may be None if unreadable or absent.
    """

    def _read(path: str) -> str | None:
        try:
            content = probe.read_text(path)
        except ReadError:
            return None
        # Undecodable bytes are shown as U+FFFD rather than written to the terminal
        return content.encode("utf-8", "surrogateescape").decode("utf-8", "replace")

    return _read(canonical_path), _read(mirror_path)


def format_diff_text(
    canonical: str,
    mirror: str,
    canonical_label: str,
    mirror_label: str,
) -> Text:
    """Colored unified diff from the main guide to a mirror as a rich.text.Text object.

    Lines prefixed '+' exist only in the mirror: they are what a merge would
    append to the main guide.
    """
    diff_lines = list(
        difflib.unified_diff(
            canonical.splitlines(keepends=True),
            mirror.splitlines(keepends=True),
            fromfile=canonical_label,
            tofile=mirror_label,
        )
    )

    if not diff_lines:
        return Text("[No changes]", style="dim italic")

    text = Text()
    for line in diff_lines:
        if not line.endswith("\n"):
            line += "\n"
        if line.startswith("---") or line.startswith("+++"):
            text.append(line, style=_STYLE_FILE_HEADER)
        elif line.startswith("@@"):
            text.append(line, style=_STYLE_HUNK)
        elif line.startswith("-"):
            text.append(line, style=_STYLE_REMOVED)
        elif line.startswith("+"):
            text.append(line, style=_STYLE_ADDED)
        else:
            text.append(line, style=_STYLE_CONTEXT)

    return text


def format_link_diff(canonical_path: str, mirror_path: str) -> Text:
    """Diff view for a configured agent, with placeholders for unreadable sides."""
    canonical, mirror = read_pair_for_diff(canonical_path, mirror_path)
    if canonical is None:
        return Text(f"[Main guide unreadable: {canonical_path}]", style="dim italic")
    if mirror is None:
        if probe.is_link(mirror_path):
            return Text(f"[Dangling link: {mirror_path}]", style="dim italic")
        return Text(f"[No content at {mirror_path}]", style="dim italic")
    return format_diff_text(canonical, mirror, canonical_path, mirror_path)
