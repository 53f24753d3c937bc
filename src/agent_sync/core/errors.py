"""Error taxonomy for link operations.

Per-file operations raise these; batch operations catch them per agent and
record str(error) as the failure message.
"""

from __future__ import annotations


class LinkError(Exception):
    """Base class for every failure the link engine reports."""


class SourceMissingError(LinkError):
    def __init__(self, path: str):
        super().__init__(f"Main guide file does not exist: {path}")
        self.path = path


class DestinationExistsError(LinkError):
    def __init__(self, path: str):
        super().__init__(f"Agent file already exists: {path}")
        self.path = path


class NotFoundError(LinkError):
    def __init__(self, path: str):
        super().__init__(f"Agent file does not exist: {path}")
        self.path = path


class ReadError(LinkError):
    """A file or symlink could not be read."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = path
        self.reason = reason


class LinkIOError(LinkError):
    """An OS-level write, unlink or link call failed."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"I/O error on {path}: {reason}")
        self.path = path
        self.reason = reason


class UnreadablePairError(LinkError):
    def __init__(self, canonical: str, mirror: str):
        super().__init__(f"Both files unreadable: {canonical}, {mirror}")
        self.canonical = canonical
        self.mirror = mirror


def os_reason(exc: BaseException) -> str:
    """Human-readable reason for an OSError (strerror without the errno noise)."""
    if isinstance(exc, OSError) and exc.strerror:
        return exc.strerror
    return str(exc)
