from __future__ import annotations

from textual.app import App

from agent_sync.core.config import AgentSyncConfig
from agent_sync.core.models import SyncResult
from agent_sync.core.project import Project


class AgentSyncApp(App):
    """Agent Sync TUI."""

    CSS_PATH = "styles.css"
    TITLE = "Agent Sync"

    def __init__(self, project: Project, config: AgentSyncConfig):
        super().__init__()
        self.project = project
        self.config = config
        # Repairs performed during the session, reported by the CLI on exit
        self.result: SyncResult | None = None

    def on_mount(self) -> None:
        from agent_sync.tui.conflict_review_screen import ConflictReviewScreen
        self.push_screen(ConflictReviewScreen())
