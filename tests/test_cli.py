"""End-to-end CLI tests in a temporary project directory."""

import os

import orjson
import pytest
from typer.testing import CliRunner

from agent_sync.cli import app
from agent_sync.core.config import CONFIG_FILENAME, load_config

runner = CliRunner()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Empty project directory as cwd, with HOME redirected for the registry."""
    home = tmp_path / "home"
    home.mkdir()
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(project)
    return project


@pytest.fixture
def initialized(workdir):
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0, result.output
    (workdir / "AGENT_GUIDE.md").write_text("hello", encoding="utf-8")
    return workdir


def test_init_creates_config_and_links(workdir):
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0, result.output
    assert (workdir / CONFIG_FILENAME).exists()
    for name in ("CLAUDE.md", "CRUSH.md", "GEMINI.md"):
        assert os.path.islink(workdir / name)
    assert "✓ claude" in result.output
    assert "Project registered" in result.output

    registry = orjson.loads((workdir.parent / "home" / ".agent-sync.json").read_bytes())
    assert registry["projects"][0]["directory"] == str(workdir)


def test_init_refuses_to_overwrite_content(workdir):
    (workdir / "CLAUDE.md").write_text("custom notes", encoding="utf-8")
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 1
    assert "would be overwritten" in result.output
    assert "claude: CLAUDE.md" in result.output
    assert (workdir / "CLAUDE.md").read_text(encoding="utf-8") == "custom notes"


def test_init_twice_fails(initialized):
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 1
    assert "Failed to initialize project" in result.output


def test_command_outside_project(workdir):
    result = runner.invoke(app, ["status"])
    assert result.exit_code == 1
    assert "Not in an agent-sync project" in result.output


def test_status_lists_agents(initialized):
    os.unlink(initialized / "GEMINI.md")
    (initialized / "GEMINI.md").write_text("drifted", encoding="utf-8")
    result = runner.invoke(app, ["status"])
    assert result.exit_code == 0, result.output
    assert "Main guide: AGENT_GUIDE.md" in result.output
    assert "claude" in result.output
    assert "Linked" in result.output
    assert "Not linked" in result.output


def test_add_agent_creates_link(initialized):
    result = runner.invoke(app, ["add", "copilot", "COPILOT.md"])
    assert result.exit_code == 0, result.output
    assert "Added agent 'copilot'" in result.output
    assert os.path.islink(initialized / "COPILOT.md")
    config = load_config(initialized / CONFIG_FILENAME)
    assert config.agents["copilot"] == "COPILOT.md"


def test_add_agent_existing_file_warns(initialized):
    (initialized / "COPILOT.md").write_text("mine", encoding="utf-8")
    result = runner.invoke(app, ["add", "copilot", "COPILOT.md"])
    assert result.exit_code == 0
    assert "link creation failed" in result.output
    assert (initialized / "COPILOT.md").read_text(encoding="utf-8") == "mine"


def test_remove_agent_deletes_link(initialized):
    result = runner.invoke(app, ["remove", "crush"])
    assert result.exit_code == 0, result.output
    assert not os.path.lexists(initialized / "CRUSH.md")
    assert "crush" not in load_config(initialized / CONFIG_FILENAME).agents


def test_remove_agent_keeps_regular_file(initialized):
    os.unlink(initialized / "CRUSH.md")
    (initialized / "CRUSH.md").write_text("mine", encoding="utf-8")
    result = runner.invoke(app, ["remove", "crush"])
    assert result.exit_code == 0
    assert "in place" in result.output
    assert (initialized / "CRUSH.md").read_text(encoding="utf-8") == "mine"


def test_remove_unknown_agent(initialized):
    result = runner.invoke(app, ["remove", "nobody"])
    assert result.exit_code == 1
    assert "Unknown agent" in result.output


def test_check_reports_conflicts(initialized):
    assert runner.invoke(app, ["check"]).exit_code == 0
    os.unlink(initialized / "CLAUDE.md")
    (initialized / "CLAUDE.md").write_text("custom notes", encoding="utf-8")
    result = runner.invoke(app, ["check"])
    assert result.exit_code == 1
    assert "claude: CLAUDE.md" in result.output


def test_repair_refuses_conflicts_without_merge(initialized):
    os.unlink(initialized / "CLAUDE.md")
    (initialized / "CLAUDE.md").write_text("custom notes", encoding="utf-8")
    result = runner.invoke(app, ["repair"])
    assert result.exit_code == 1
    assert "--merge" in result.output
    assert not os.path.islink(initialized / "CLAUDE.md")


def test_repair_merge(initialized):
    os.unlink(initialized / "CLAUDE.md")
    (initialized / "CLAUDE.md").write_text("custom notes", encoding="utf-8")
    os.unlink(initialized / "GEMINI.md")

    result = runner.invoke(app, ["repair", "--merge"])

    assert result.exit_code == 0, result.output
    assert "Successfully repaired 3 agents" in result.output
    guide = (initialized / "AGENT_GUIDE.md").read_text(encoding="utf-8")
    assert guide.index("hello") < guide.index("custom notes")
    assert os.path.islink(initialized / "CLAUDE.md")
    assert os.path.islink(initialized / "GEMINI.md")


def test_repair_creates_missing_main_guide(initialized):
    os.unlink(initialized / "AGENT_GUIDE.md")
    result = runner.invoke(app, ["repair"])
    assert result.exit_code == 0, result.output
    assert "created empty file" in result.output
    assert (initialized / "AGENT_GUIDE.md").read_text(encoding="utf-8") == ""


def test_diff_shows_mirror_only_lines(initialized):
    os.unlink(initialized / "CLAUDE.md")
    (initialized / "CLAUDE.md").write_text("hello\nextra line\n", encoding="utf-8")
    result = runner.invoke(app, ["diff", "claude"])
    assert result.exit_code == 0, result.output
    assert "+extra line" in result.output


def test_diff_linked_has_no_changes(initialized):
    result = runner.invoke(app, ["diff", "claude"])
    assert result.exit_code == 0
    assert "[No changes]" in result.output


def test_status_all_lists_registered_projects(initialized):
    result = runner.invoke(app, ["status", "--all"])
    assert result.exit_code == 0, result.output
    assert "Found 1 agent-sync projects" in result.output
    assert "claude, crush, gemini" in result.output


def test_status_all_prunes_removed_projects(initialized):
    (initialized / CONFIG_FILENAME).unlink()
    result = runner.invoke(app, ["status", "--all"])
    assert result.exit_code == 0
    assert "No agent-sync projects found" in result.output


def test_diff_unknown_agent(initialized):
    result = runner.invoke(app, ["diff", "nobody"])
    assert result.exit_code == 1
    assert "Unknown agent: nobody" in result.output


def test_status_counts_agents(initialized):
    result = runner.invoke(app, ["status"])
    assert result.exit_code == 0, result.output
    assert "Configured Agents (3)" in result.output
