from agent_sync.core.links.probe import canonicalize, exists, is_link
from agent_sync.core.links.classifier import classify
from agent_sync.core.links.merge import merge_content
from agent_sync.core.links.operator import create_link, remove_link, repair
from agent_sync.core.links.batch import (
    CANONICAL_KEY,
    ensure_canonical,
    get_link_info,
    iter_repair,
    iter_sync,
    link_infos,
    repair_all,
    scan_conflicts,
    sync_all,
)

__all__ = [
    "canonicalize",
    "exists",
    "is_link",
    "classify",
    "merge_content",
    "create_link",
    "remove_link",
    "repair",
    "CANONICAL_KEY",
    "ensure_canonical",
    "get_link_info",
    "iter_repair",
    "iter_sync",
    "link_infos",
    "repair_all",
    "scan_conflicts",
    "sync_all",
]
