from __future__ import annotations

import enum
from dataclasses import dataclass, field


class LinkKind(str, enum.Enum):
    """Which kind of filesystem link ties a mirror file to the main guide."""

    SYMLINK = "symlink"
    HARDLINK = "hardlink"


class LinkState(enum.Enum):
    PROPERLY_LINKED = "properly_linked"
    NOT_LINKED = "not_linked"
    MISSING_FILE = "missing_file"
    BROKEN_LINK = "broken_link"


@dataclass(frozen=True)
class LinkStatus:
    """Classification of a mirror file relative to the main guide.

    Only PROPERLY_LINKED carries a resolved_target: the canonical path the
    mirror was confirmed to reference.
    """

    state: LinkState
    resolved_target: str | None = None

    @classmethod
    def properly_linked(cls, resolved_target: str) -> LinkStatus:
        return cls(LinkState.PROPERLY_LINKED, resolved_target)

    @classmethod
    def not_linked(cls) -> LinkStatus:
        return cls(LinkState.NOT_LINKED)

    @classmethod
    def missing_file(cls) -> LinkStatus:
        return cls(LinkState.MISSING_FILE)

    @classmethod
    def broken_link(cls) -> LinkStatus:
        return cls(LinkState.BROKEN_LINK)

    @property
    def is_linked(self) -> bool:
        return self.state is LinkState.PROPERLY_LINKED

    @property
    def is_drifted(self) -> bool:
        """Mirror exists but is not confirmed to reference the main guide."""
        return self.state in (LinkState.NOT_LINKED, LinkState.BROKEN_LINK)

    @property
    def label(self) -> str:
        """e.g., 'Linked (target: /repo/AGENT_GUIDE.md)'"""
        if self.state is LinkState.PROPERLY_LINKED:
            return f"Linked (target: {self.resolved_target})"
        return {
            LinkState.NOT_LINKED: "Not linked",
            LinkState.MISSING_FILE: "Missing file",
            LinkState.BROKEN_LINK: "Broken link",
        }[self.state]


@dataclass
class LinkInfo:
    """Status of one configured agent's mirror file. Never persisted."""

    agent_name: str
    mirror_path: str
    canonical_path: str
    status: LinkStatus


@dataclass
class SyncResult:
    """Per-agent outcome of a batch run, in input order."""

    successes: list[str] = field(default_factory=list)
    failures: list[tuple[str, str]] = field(default_factory=list)  # (agent, message)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def is_empty(self) -> bool:
        return not self.successes and not self.failures
