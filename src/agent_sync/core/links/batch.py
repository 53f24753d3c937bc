"""Drive per-agent link operations across a configured agent set.

Per-agent LinkErrors are downgraded to failure entries; one agent's failure
never prevents the next from being attempted. The iter_* generators yield
after each agent, so a caller can stop between agents by breaking out.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator, Mapping
from typing import Callable, Union

from agent_sync.core.errors import LinkError
from agent_sync.core.links import probe
from agent_sync.core.links.classifier import classify
from agent_sync.core.links.operator import Clock, create_link, repair
from agent_sync.core.models import LinkInfo, LinkKind, SyncResult
from agent_sync.logging_config import get_logger

logger = get_logger("batch")

# Failure key for the main guide itself in sync_all
CANONICAL_KEY = "main_guide"

AgentSet = Union[Mapping[str, str], Iterable[tuple[str, str]]]


def _pairs(agents: AgentSet) -> list[tuple[str, str]]:
    if isinstance(agents, Mapping):
        return list(agents.items())
    return list(agents)


def resolve_path(path: str, root: str | os.PathLike | None) -> str:
    """Resolve a configured path against the project root (absolute paths pass through)."""
    if root is None or os.path.isabs(path):
        return path
    return os.path.join(os.fspath(root), path)


def get_link_info(
    agent_name: str,
    mirror_path: str,
    canonical_path: str,
    link_kind: LinkKind = LinkKind.SYMLINK,
    root: str | os.PathLike | None = None,
) -> LinkInfo:
    status = classify(
        resolve_path(canonical_path, root),
        resolve_path(mirror_path, root),
        link_kind,
    )
    return LinkInfo(
        agent_name=agent_name,
        mirror_path=mirror_path,
        canonical_path=canonical_path,
        status=status,
    )


def link_infos(
    canonical_path: str,
    agents: AgentSet,
    link_kind: LinkKind = LinkKind.SYMLINK,
    root: str | os.PathLike | None = None,
) -> list[LinkInfo]:
    return [
        get_link_info(name, mirror, canonical_path, link_kind, root)
        for name, mirror in _pairs(agents)
    ]


def scan_conflicts(
    canonical_path: str,
    agents: AgentSet,
    link_kind: LinkKind = LinkKind.SYMLINK,
    root: str | os.PathLike | None = None,
) -> list[tuple[str, str]]:
    """Return (agent, mirror_path) pairs whose content a repair would merge.

    A pair is reported only if it is NOT_LINKED or BROKEN_LINK and the mirror
    holds non-whitespace content. Unreadable mirrors are not reported.
    """
    canonical = resolve_path(canonical_path, root)
    conflicts: list[tuple[str, str]] = []
    for name, mirror_path in _pairs(agents):
        mirror = resolve_path(mirror_path, root)
        if not classify(canonical, mirror, link_kind).is_drifted:
            continue
        try:
            content = probe.read_text(mirror)
        except LinkError:
            continue
        if content.strip():
            conflicts.append((name, mirror_path))
    return conflicts


def ensure_canonical(canonical_path: str) -> bool:
    """Create an empty main guide if none exists. Returns True if created.

    An existing main guide is never truncated.
    """
    if probe.exists(canonical_path):
        return False
    probe.write_text(canonical_path, "")
    logger.info("Created empty main guide %s", canonical_path)
    return True


def _run(
    agents: AgentSet,
    action: Callable[[str], None],
    root: str | os.PathLike | None,
) -> Iterator[tuple[str, LinkError | None]]:
    for name, mirror_path in _pairs(agents):
        try:
            action(resolve_path(mirror_path, root))
        except LinkError as e:
            logger.warning("%s: %s", name, e)
            yield name, e
        else:
            yield name, None


def iter_sync(
    canonical_path: str,
    agents: AgentSet,
    link_kind: LinkKind = LinkKind.SYMLINK,
    root: str | os.PathLike | None = None,
) -> Iterator[tuple[str, LinkError | None]]:
    """Create a link for every agent, yielding (agent, error or None) after each."""
    canonical = resolve_path(canonical_path, root)
    return _run(agents, lambda mirror: create_link(canonical, mirror, link_kind), root)


def iter_repair(
    canonical_path: str,
    agents: AgentSet,
    link_kind: LinkKind = LinkKind.SYMLINK,
    root: str | os.PathLike | None = None,
    clock: Clock | None = None,
) -> Iterator[tuple[str, LinkError | None]]:
    """Repair every agent's link, yielding (agent, error or None) after each."""
    canonical = resolve_path(canonical_path, root)
    return _run(
        agents,
        lambda mirror: repair(canonical, mirror, link_kind, clock=clock),
        root,
    )


def _collect(
    outcomes: Iterable[tuple[str, LinkError | None]],
    result: SyncResult | None = None,
) -> SyncResult:
    result = result or SyncResult()
    for name, error in outcomes:
        if error is None:
            result.successes.append(name)
        else:
            result.failures.append((name, str(error)))
    return result


def sync_all(
    canonical_path: str,
    agents: AgentSet,
    link_kind: LinkKind = LinkKind.SYMLINK,
    root: str | os.PathLike | None = None,
) -> SyncResult:
    """Ensure the main guide exists, then create a link for every agent.

    If the main guide cannot be created the failure is recorded under
    CANONICAL_KEY and every agent then fails individually with
    SourceMissingError.
    """
    result = SyncResult()
    try:
        ensure_canonical(resolve_path(canonical_path, root))
    except LinkError as e:
        logger.warning("%s: %s", CANONICAL_KEY, e)
        result.failures.append((CANONICAL_KEY, str(e)))
    return _collect(iter_sync(canonical_path, agents, link_kind, root), result)


def repair_all(
    canonical_path: str,
    agents: AgentSet,
    link_kind: LinkKind = LinkKind.SYMLINK,
    root: str | os.PathLike | None = None,
    clock: Clock | None = None,
) -> SyncResult:
    """Repair every agent's link. The main guide must already exist."""
    return _collect(iter_repair(canonical_path, agents, link_kind, root, clock))
