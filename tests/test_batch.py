"""Tests for batch orchestration across an agent set."""

import os

from agent_sync.core.links.batch import (
    CANONICAL_KEY,
    ensure_canonical,
    iter_repair,
    link_infos,
    repair_all,
    scan_conflicts,
    sync_all,
)
from agent_sync.core.models import LinkState


def _three_agent_project(tmp_path):
    """claude: missing, crush: linked, gemini: conflicting content."""
    guide = tmp_path / "AGENT_GUIDE.md"
    guide.write_text("hello", encoding="utf-8")
    os.symlink("AGENT_GUIDE.md", tmp_path / "CRUSH.md")
    (tmp_path / "GEMINI.md").write_text("gemini notes", encoding="utf-8")
    agents = {"claude": "CLAUDE.md", "crush": "CRUSH.md", "gemini": "GEMINI.md"}
    return guide, agents


def test_repair_all_mixed_states(tmp_path, fixed_clock):
    guide, agents = _three_agent_project(tmp_path)

    result = repair_all("AGENT_GUIDE.md", agents, root=tmp_path, clock=fixed_clock)

    assert result.successes == ["claude", "crush", "gemini"]
    assert result.failures == []
    assert "gemini notes" in guide.read_text(encoding="utf-8")
    for info in link_infos("AGENT_GUIDE.md", agents, root=tmp_path):
        assert info.status.state is LinkState.PROPERLY_LINKED


def test_repair_all_failure_does_not_stop_batch(tmp_path):
    guide = tmp_path / "AGENT_GUIDE.md"
    guide.write_text("hello", encoding="utf-8")
    (tmp_path / "BAD.md").mkdir()
    agents = [("bad", "BAD.md"), ("claude", "CLAUDE.md")]

    result = repair_all("AGENT_GUIDE.md", agents, root=tmp_path)

    assert result.successes == ["claude"]
    assert [name for name, _ in result.failures] == ["bad"]
    assert "BAD.md" in result.failures[0][1]


def test_repair_all_without_canonical_fails_per_agent(tmp_path):
    agents = {"claude": "CLAUDE.md", "gemini": "GEMINI.md"}
    result = repair_all("AGENT_GUIDE.md", agents, root=tmp_path)
    assert result.successes == []
    assert [name for name, _ in result.failures] == ["claude", "gemini"]
    assert all("Main guide file does not exist" in msg for _, msg in result.failures)
    assert not (tmp_path / "AGENT_GUIDE.md").exists()


def test_iter_repair_can_stop_between_agents(tmp_path):
    (tmp_path / "AGENT_GUIDE.md").write_text("hello", encoding="utf-8")
    agents = {"claude": "CLAUDE.md", "gemini": "GEMINI.md"}

    for name, error in iter_repair("AGENT_GUIDE.md", agents, root=tmp_path):
        assert error is None
        break

    assert os.path.islink(tmp_path / "CLAUDE.md")
    assert not os.path.lexists(tmp_path / "GEMINI.md")


def test_scan_conflicts_reports_only_content_at_risk(tmp_path):
    guide, agents = _three_agent_project(tmp_path)
    (tmp_path / "EMPTY.md").write_text("  \n", encoding="utf-8")
    (tmp_path / "SAME.md").write_text("hello", encoding="utf-8")
    os.symlink("nowhere.md", tmp_path / "DANGLING.md")
    agents = {
        **agents,
        "empty": "EMPTY.md",
        "same": "SAME.md",
        "dangling": "DANGLING.md",
    }

    conflicts = scan_conflicts("AGENT_GUIDE.md", agents, root=tmp_path)

    assert conflicts == [("gemini", "GEMINI.md")]


def test_scan_conflicts_preserves_input_order(tmp_path):
    (tmp_path / "AGENT_GUIDE.md").write_text("hello", encoding="utf-8")
    for name in ("a", "b", "c"):
        (tmp_path / f"{name}.md").write_text(f"notes {name}", encoding="utf-8")
    agents = [("c", "c.md"), ("a", "a.md"), ("b", "b.md")]

    conflicts = scan_conflicts("AGENT_GUIDE.md", agents, root=tmp_path)

    assert [name for name, _ in conflicts] == ["c", "a", "b"]


def test_scan_conflicts_wrong_target_symlink(tmp_path):
    (tmp_path / "AGENT_GUIDE.md").write_text("hello", encoding="utf-8")
    (tmp_path / "OTHER.md").write_text("other", encoding="utf-8")
    os.symlink("OTHER.md", tmp_path / "CLAUDE.md")

    conflicts = scan_conflicts("AGENT_GUIDE.md", {"claude": "CLAUDE.md"}, root=tmp_path)

    assert conflicts == [("claude", "CLAUDE.md")]


def test_sync_all_creates_canonical_and_links(tmp_path):
    agents = {"claude": "CLAUDE.md", "gemini": "GEMINI.md"}

    result = sync_all("AGENT_GUIDE.md", agents, root=tmp_path)

    assert result.successes == ["claude", "gemini"]
    assert result.failures == []
    assert (tmp_path / "AGENT_GUIDE.md").read_text(encoding="utf-8") == ""
    assert os.path.islink(tmp_path / "CLAUDE.md")


def test_sync_all_never_truncates_canonical(tmp_path):
    guide = tmp_path / "AGENT_GUIDE.md"
    guide.write_text("hello", encoding="utf-8")

    sync_all("AGENT_GUIDE.md", {"claude": "CLAUDE.md"}, root=tmp_path)

    assert guide.read_text(encoding="utf-8") == "hello"


def test_sync_all_records_existing_destination(tmp_path):
    (tmp_path / "CLAUDE.md").write_text("custom notes", encoding="utf-8")
    agents = {"claude": "CLAUDE.md", "gemini": "GEMINI.md"}

    result = sync_all("AGENT_GUIDE.md", agents, root=tmp_path)

    assert result.successes == ["gemini"]
    assert result.failures[0][0] == "claude"
    assert "already exists" in result.failures[0][1]
    assert (tmp_path / "CLAUDE.md").read_text(encoding="utf-8") == "custom notes"


def test_sync_all_canonical_creation_failure(tmp_path):
    agents = {"claude": "CLAUDE.md"}

    result = sync_all("missing-dir/AGENT_GUIDE.md", agents, root=tmp_path)

    assert result.successes == []
    assert [name for name, _ in result.failures] == [CANONICAL_KEY, "claude"]
    assert "Main guide file does not exist" in result.failures[1][1]


def test_ensure_canonical(tmp_path):
    guide = tmp_path / "AGENT_GUIDE.md"
    assert ensure_canonical(str(guide)) is True
    guide.write_text("hello", encoding="utf-8")
    assert ensure_canonical(str(guide)) is False
    assert guide.read_text(encoding="utf-8") == "hello"


def test_link_infos_keeps_configured_paths(tmp_path):
    guide, agents = _three_agent_project(tmp_path)

    infos = link_infos("AGENT_GUIDE.md", agents, root=tmp_path)

    assert [i.agent_name for i in infos] == ["claude", "crush", "gemini"]
    assert [i.mirror_path for i in infos] == ["CLAUDE.md", "CRUSH.md", "GEMINI.md"]
    assert [i.status.state for i in infos] == [
        LinkState.MISSING_FILE,
        LinkState.PROPERLY_LINKED,
        LinkState.NOT_LINKED,
    ]
