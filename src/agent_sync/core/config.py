"""Project configuration stored in .agent-sync.toml.

Format:
    [core]
    main_guide = "AGENT_GUIDE.md"
    link_kind = "symlink"   # optional; "symlink" or "hardlink"

    [agents]
    claude = "CLAUDE.md"
    gemini = "GEMINI.md"
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

import tomli_w

from agent_sync.core.models import LinkKind

CONFIG_FILENAME = ".agent-sync.toml"


class ConfigError(Exception):
    """Base class for configuration load/save failures."""


class ConfigNotFoundError(ConfigError):
    def __init__(self, path: Path):
        super().__init__(f"Configuration file not found: {path}")
        self.path = path


class ConfigParseError(ConfigError):
    pass


class InvalidConfigError(ConfigError):
    pass


class ConfigWriteError(ConfigError):
    def __init__(self, path: Path, reason: str):
        super().__init__(f"Failed to write config file: {path}: {reason}")
        self.path = path
        self.reason = reason


@dataclass
class AgentSyncConfig:
    main_guide: str
    agents: dict[str, str] = field(default_factory=dict)  # agent name -> mirror file
    link_kind: LinkKind = LinkKind.SYMLINK


def default_config() -> AgentSyncConfig:
    return AgentSyncConfig(
        main_guide="AGENT_GUIDE.md",
        agents={"claude": "CLAUDE.md", "crush": "CRUSH.md", "gemini": "GEMINI.md"},
    )


def _parse(data: dict) -> AgentSyncConfig:
    if "core" not in data:
        raise InvalidConfigError("Missing [core] table")
    core = data["core"]
    if not isinstance(core, dict):
        raise InvalidConfigError("'core' must be a table")

    if "main_guide" not in core:
        raise InvalidConfigError("Missing 'main_guide' in [core]")
    main_guide = core["main_guide"]
    if not isinstance(main_guide, str):
        raise InvalidConfigError("'main_guide' must be a string")

    raw_kind = core.get("link_kind", LinkKind.SYMLINK.value)
    try:
        link_kind = LinkKind(raw_kind)
    except ValueError:
        choices = ", ".join(k.value for k in LinkKind)
        raise InvalidConfigError(
            f"Unknown link_kind {raw_kind!r} (expected one of: {choices})"
        ) from None

    if "agents" not in data:
        raise InvalidConfigError("Missing [agents] table")
    agents_table = data["agents"]
    if not isinstance(agents_table, dict):
        raise InvalidConfigError("'agents' must be a table")

    agents: dict[str, str] = {}
    for name, filename in agents_table.items():
        if not isinstance(filename, str):
            raise InvalidConfigError(f"Agent {name} has non-string value")
        agents[name] = filename

    return AgentSyncConfig(main_guide=main_guide, agents=agents, link_kind=link_kind)


def load_config(path: Path) -> AgentSyncConfig:
    """Load and validate a config file.

    Raises:
        ConfigNotFoundError: path does not exist.
        ConfigParseError: the file is not valid TOML (or cannot be read).
        InvalidConfigError: the TOML does not have the expected shape.
    """
    if not path.exists():
        raise ConfigNotFoundError(path)
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Parse error in {path}: {e}") from e
    except (OSError, UnicodeError) as e:
        raise ConfigParseError(f"Cannot read {path}: {e}") from e
    return _parse(data)


def save_config(config: AgentSyncConfig, path: Path) -> None:
    core: dict[str, str] = {"main_guide": config.main_guide}
    if config.link_kind is not LinkKind.SYMLINK:
        core["link_kind"] = config.link_kind.value
    data = {"core": core, "agents": dict(config.agents)}
    try:
        path.write_text(tomli_w.dumps(data), encoding="utf-8")
    except OSError as e:
        raise ConfigWriteError(path, e.strerror or str(e)) from e


def create_default_config(path: Path) -> AgentSyncConfig:
    config = default_config()
    save_config(config, path)
    return config


def get_agent_file(config: AgentSyncConfig, agent_name: str) -> str | None:
    return config.agents.get(agent_name)


def list_agents(config: AgentSyncConfig) -> list[str]:
    return list(config.agents)


def add_agent(config: AgentSyncConfig, agent_name: str, filename: str) -> AgentSyncConfig:
    """Return a new config with agent_name mapped to filename (replacing any prior mapping)."""
    agents = dict(config.agents)
    agents[agent_name] = filename
    return replace(config, agents=agents)


def remove_agent(config: AgentSyncConfig, agent_name: str) -> AgentSyncConfig:
    agents = {k: v for k, v in config.agents.items() if k != agent_name}
    return replace(config, agents=agents)
