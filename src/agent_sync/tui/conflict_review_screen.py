from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.screen import Screen
from textual.widgets import Footer, OptionList, Static
from textual.widgets.option_list import Option

from agent_sync.core.diff import format_link_diff
from agent_sync.core.errors import LinkError
from agent_sync.core.links import ensure_canonical, link_infos, repair
from agent_sync.core.links.batch import resolve_path
from agent_sync.core.models import LinkInfo, SyncResult


class ConflictReviewScreen(Screen):
    """Agent list (left) + main-guide-to-agent-file diff (right), with per-agent repair."""

    BINDINGS = [
        Binding("r", "repair_selected", "Repair", show=True),
        Binding("a", "repair_all", "Repair All", show=True),
        Binding("question_mark", "show_help", "Help", show=True),
        Binding("q", "quit_app", "Quit", show=True),
        # Vim navigation
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
        Binding("g", "go_top", "Top", show=False),
        Binding("G", "go_bottom", "Bottom", show=False),
    ]

    def __init__(self):
        super().__init__()
        self._infos: list[LinkInfo] = []

    def compose(self) -> ComposeResult:
        yield Static(" Agent File Review", id="review_header")
        yield Static(
            " Each row is a configured agent file and its link status.\n"
            " The right pane shows how the agent file differs from the main guide;\n"
            " '+' lines are what a repair appends to the main guide before relinking.\n"
            " r repairs the highlighted agent, a repairs all, q quits.",
            id="review_explanation",
        )
        with Horizontal(id="review_panes"):
            with VerticalScroll(id="agents_pane"):
                yield OptionList(id="agent_list")
            with VerticalScroll(id="preview_pane"):
                yield Static("Select an agent to preview", id="diff_view")
        yield Static("", id="review_status")
        yield Footer()

    def on_mount(self) -> None:
        self._rebuild_list()

    # -- helpers ---------------------------------------------------------

    def _paths(self, info: LinkInfo) -> tuple[str, str]:
        app = self.app  # type: AgentSyncApp
        root = app.project.root
        return resolve_path(info.canonical_path, root), resolve_path(info.mirror_path, root)

    def _rebuild_list(self) -> None:
        app = self.app  # type: AgentSyncApp
        option_list = self.query_one("#agent_list", OptionList)
        highlighted = option_list.highlighted
        option_list.clear_options()

        self._infos = link_infos(
            app.config.main_guide,
            app.config.agents,
            app.config.link_kind,
            root=app.project.root,
        )
        for info in self._infos:
            mark = "✓" if info.status.is_linked else "✗"
            option_list.add_option(Option(f"{mark} {info.agent_name}  {info.mirror_path}"))

        if self._infos:
            option_list.highlighted = min(highlighted or 0, len(self._infos) - 1)

        drifted = sum(1 for i in self._infos if i.status.is_drifted)
        linked = sum(1 for i in self._infos if i.status.is_linked)
        self.query_one("#review_status", Static).update(
            f" {len(self._infos)} agents, {linked} linked, {drifted} drifted"
        )

    def _show_preview(self, index: int | None) -> None:
        view = self.query_one("#diff_view", Static)
        if index is None or index >= len(self._infos):
            view.update("Select an agent to preview")
            return
        info = self._infos[index]
        canonical, mirror = self._paths(info)
        if info.status.is_linked:
            view.update(info.status.label)
        else:
            view.update(format_link_diff(canonical, mirror))

    def _record(self, agent: str, error: LinkError | None) -> None:
        app = self.app  # type: AgentSyncApp
        if app.result is None:
            app.result = SyncResult()
        if error is None:
            app.result.successes.append(agent)
        else:
            app.result.failures.append((agent, str(error)))

    def _repair_one(self, info: LinkInfo) -> bool:
        app = self.app  # type: AgentSyncApp
        canonical, mirror = self._paths(info)
        try:
            ensure_canonical(canonical)
            repair(canonical, mirror, app.config.link_kind)
        except LinkError as e:
            self._record(info.agent_name, e)
            self.notify(f"{info.agent_name}: {e}", severity="error")
            return False
        self._record(info.agent_name, None)
        return True

    # -- events / actions --------------------------------------------------

    def on_option_list_option_highlighted(self, event: OptionList.OptionHighlighted) -> None:
        self._show_preview(event.option_index)

    def action_repair_selected(self) -> None:
        option_list = self.query_one("#agent_list", OptionList)
        idx = option_list.highlighted
        if idx is None or idx >= len(self._infos):
            return
        info = self._infos[idx]
        if info.status.is_linked:
            self.notify(f"{info.agent_name} is already linked")
            return
        if self._repair_one(info):
            self.notify(f"Repaired {info.agent_name}")
        self._rebuild_list()
        self._show_preview(option_list.highlighted)

    def action_repair_all(self) -> None:
        pending = [i for i in self._infos if not i.status.is_linked]
        if not pending:
            self.notify("All agents are already linked")
            return
        repaired = sum(1 for info in pending if self._repair_one(info))
        self.notify(f"Repaired {repaired} of {len(pending)} agents")
        self._rebuild_list()
        self._show_preview(self.query_one("#agent_list", OptionList).highlighted)

    def action_show_help(self) -> None:
        self.notify(
            "r Repair highlighted  a Repair all  j/k Up/Down  g/G Top/Bottom  q Quit",
            title="Keyboard Help",
            timeout=5,
        )

    def action_cursor_down(self) -> None:
        self.query_one("#agent_list", OptionList).action_cursor_down()

    def action_cursor_up(self) -> None:
        self.query_one("#agent_list", OptionList).action_cursor_up()

    def action_go_top(self) -> None:
        ol = self.query_one("#agent_list", OptionList)
        if ol.option_count > 0:
            ol.highlighted = 0
            ol.scroll_home()

    def action_go_bottom(self) -> None:
        ol = self.query_one("#agent_list", OptionList)
        last = ol.option_count - 1
        if last >= 0:
            ol.highlighted = last
            ol.scroll_end()

    def action_quit_app(self) -> None:
        self.app.exit()
