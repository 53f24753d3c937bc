from __future__ import annotations

from agent_sync.core.errors import ReadError
from agent_sync.core.links import probe
from agent_sync.core.models import LinkKind, LinkStatus
from agent_sync.logging_config import get_logger

logger = get_logger("classifier")


def classify(
    canonical_path: str,
    mirror_path: str,
    link_kind: LinkKind = LinkKind.SYMLINK,
) -> LinkStatus:
    """Decide how mirror_path relates to canonical_path. Never mutates anything.

    - MISSING_FILE: either file is absent (a dangling mirror link is BROKEN_LINK).
    - PROPERLY_LINKED: the mirror is a link resolving to the canonical file
      (same inode in hardlink mode), or a regular file with identical content.
    - NOT_LINKED: the mirror is a regular file whose content differs.
    - BROKEN_LINK: the mirror cannot be confirmed to reference the canonical
      file (wrong or unreadable link target, read failure).
    """
    status = _classify(canonical_path, mirror_path, link_kind)
    logger.debug("%s -> %s: %s", mirror_path, canonical_path, status.state.value)
    return status


def _classify(canonical_path: str, mirror_path: str, link_kind: LinkKind) -> LinkStatus:
    # A dangling mirror link is broken whether or not the main guide exists
    if probe.is_dangling_link(mirror_path):
        return LinkStatus.broken_link()
    if not probe.exists(canonical_path):
        return LinkStatus.missing_file()
    if not probe.exists(mirror_path):
        return LinkStatus.missing_file()

    canonical_target = probe.canonicalize(canonical_path)

    if probe.is_link(mirror_path):
        if link_kind is LinkKind.HARDLINK:
            # A symlink is the wrong link kind, even if it points at the guide
            return LinkStatus.broken_link()
        try:
            resolved = probe.resolve_link_target(mirror_path)
        except ReadError:
            return LinkStatus.broken_link()
        target = probe.canonicalize(resolved)
        if target == canonical_target:
            return LinkStatus.properly_linked(target)
        return LinkStatus.broken_link()

    if link_kind is LinkKind.HARDLINK and probe.same_file(canonical_path, mirror_path):
        return LinkStatus.properly_linked(canonical_target)

    try:
        canonical_content = probe.read_text(canonical_path)
        mirror_content = probe.read_text(mirror_path)
    except ReadError:
        return LinkStatus.broken_link()

    if canonical_content == mirror_content:
        return LinkStatus.properly_linked(canonical_target)
    return LinkStatus.not_linked()
