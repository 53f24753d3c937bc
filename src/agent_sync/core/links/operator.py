"""Filesystem mutations for a single mirror file: create, remove, repair."""

from __future__ import annotations

import os
from datetime import datetime
from typing import Callable

from agent_sync.core.errors import (
    DestinationExistsError,
    LinkIOError,
    NotFoundError,
    ReadError,
    SourceMissingError,
    UnreadablePairError,
    os_reason,
)
from agent_sync.core.links import probe
from agent_sync.core.links.classifier import classify
from agent_sync.core.links.merge import merge_content
from agent_sync.core.models import LinkKind, LinkState
from agent_sync.core.timestamps import utc_now
from agent_sync.logging_config import get_logger

logger = get_logger("operator")

Clock = Callable[[], datetime]


def _relative_target(canonical_path: str, mirror_path: str) -> str:
    """Symlink target for mirror_path, relative to the real directory holding it.

    The OS resolves a relative target from the physical directory, so both ends
    are taken through realpath first.
    """
    link_dir = os.path.realpath(os.path.dirname(os.path.abspath(mirror_path)))
    return os.path.relpath(os.path.realpath(canonical_path), start=link_dir)


def create_link(
    canonical_path: str,
    mirror_path: str,
    link_kind: LinkKind = LinkKind.SYMLINK,
) -> None:
    """Create mirror_path as a link to canonical_path. Never overwrites."""
    if not probe.exists(canonical_path):
        raise SourceMissingError(canonical_path)
    if probe.exists(mirror_path):
        raise DestinationExistsError(mirror_path)

    try:
        if link_kind is LinkKind.HARDLINK:
            os.link(canonical_path, mirror_path)
            logger.info("Created hard link %s => %s", mirror_path, canonical_path)
        else:
            target = _relative_target(canonical_path, mirror_path)
            os.symlink(target, mirror_path)
            logger.info("Created symlink %s -> %s", mirror_path, target)
    except OSError as e:
        raise LinkIOError(mirror_path, os_reason(e)) from e


def remove_link(mirror_path: str) -> None:
    """Unlink whatever is at mirror_path, link or not."""
    if not probe.exists(mirror_path):
        raise NotFoundError(mirror_path)
    try:
        os.unlink(mirror_path)
    except OSError as e:
        raise LinkIOError(mirror_path, os_reason(e)) from e
    logger.info("Removed %s", mirror_path)


def _read_pair(canonical_path: str, mirror_path: str) -> tuple[str, str]:
    """Read both sides of a repair.

    A mirror that is an unreadable symlink (dangling, looping) owns no bytes of
    its own and contributes empty content. A regular file that cannot be read
    is an error: its content must not be discarded.
    """
    canonical_error: ReadError | None = None
    mirror_error: ReadError | None = None
    canonical_content = mirror_content = ""

    try:
        canonical_content = probe.read_text(canonical_path)
    except ReadError as e:
        canonical_error = e

    try:
        mirror_content = probe.read_text(mirror_path)
    except ReadError as e:
        if not probe.is_link(mirror_path):
            mirror_error = e

    if canonical_error and mirror_error:
        raise UnreadablePairError(canonical_path, mirror_path)
    if canonical_error:
        raise canonical_error
    if mirror_error:
        raise mirror_error
    return canonical_content, mirror_content


def repair(
    canonical_path: str,
    mirror_path: str,
    link_kind: LinkKind = LinkKind.SYMLINK,
    *,
    clock: Clock | None = None,
) -> None:
    """Restore mirror_path as a link to canonical_path, merging drifted content.

    Steps for a drifted mirror: merge its content into the main guide,
    overwrite the main guide, unlink the mirror, recreate the link. The first
    failing step raises and later steps are not attempted; the main guide may
    already hold the merged content at that point.
    """
    if not probe.exists(canonical_path):
        raise SourceMissingError(canonical_path)

    status = classify(canonical_path, mirror_path, link_kind)

    if status.state is LinkState.PROPERLY_LINKED:
        return
    if status.state is LinkState.MISSING_FILE:
        create_link(canonical_path, mirror_path, link_kind)
        return

    canonical_content, mirror_content = _read_pair(canonical_path, mirror_path)
    if mirror_content != canonical_content:
        merged = merge_content(
            canonical_content,
            mirror_content,
            now=(clock or utc_now)(),
            source=mirror_path,
        )
        if merged != canonical_content:
            probe.write_text(canonical_path, merged)
            logger.info("Merged content of %s into %s", mirror_path, canonical_path)

    remove_link(mirror_path)
    create_link(canonical_path, mirror_path, link_kind)
