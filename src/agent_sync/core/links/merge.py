from __future__ import annotations

from datetime import datetime

from agent_sync.core.timestamps import format_utc, utc_now

MERGE_FOOTER = "# End merged content"


def merge_header(source: str, now: datetime) -> str:
    return f"# Merged content from {source} at {format_utc(now)}"


def merge_content(
    canonical_content: str,
    mirror_content: str,
    *,
    now: datetime | None = None,
    source: str | None = None,
) -> str:
    """Combine the main guide and a drifted mirror without dropping either side.

    If one side is blank (whitespace only) the other is returned unchanged.
    Otherwise the mirror content is appended to the canonical content inside a
    timestamped section, so repeated conflicts accumulate visibly:

        <canonical>

        # Merged content from <source> at 2026-10-18T09:30:00.000Z

        <mirror>

        # End merged content
    """
    if not canonical_content.strip():
        return mirror_content
    if not mirror_content.strip():
        return canonical_content

    header = merge_header(source or "agent file", now or utc_now())
    return (
        f"{canonical_content}\n\n"
        f"{header}\n\n"
        f"{mirror_content}\n\n"
        f"{MERGE_FOOTER}\n"
    )
