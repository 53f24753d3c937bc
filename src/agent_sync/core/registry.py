"""System-wide catalog of agent-sync projects, stored as JSON in the home directory.

Format:
    {
      "projects": [
        {
          "directory": "/home/user/src/project",
          "main_guide": "AGENT_GUIDE.md",
          "agents": [{"name": "claude", "file": "CLAUDE.md"}],
          "updated_at": "2026-10-18T09:30:00.000Z"
        }
      ]
    }
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import orjson

from agent_sync.core.config import AgentSyncConfig, get_agent_file, list_agents
from agent_sync.core.project import Project, is_project_dir
from agent_sync.core.timestamps import format_utc, utc_now

REGISTRY_FILENAME = ".agent-sync.json"


class RegistryError(Exception):
    pass


class RegistryParseError(RegistryError):
    pass


class InvalidRegistryError(RegistryError):
    pass


class RegistryWriteError(RegistryError):
    def __init__(self, path: Path, reason: str):
        super().__init__(f"Write error to {path}: {reason}")
        self.path = path
        self.reason = reason


@dataclass
class RegistryAgent:
    name: str
    file: str


@dataclass
class RegistryProject:
    directory: str
    main_guide: str
    agents: list[RegistryAgent] = field(default_factory=list)
    updated_at: str = ""  # UTC ISO 8601; empty for entries written by older versions

    @property
    def has_valid_config(self) -> bool:
        return is_project_dir(Path(self.directory))


@dataclass
class Registry:
    projects: list[RegistryProject] = field(default_factory=list)


def default_registry_path(home: Path | None = None) -> Path:
    return (home or Path.home()) / REGISTRY_FILENAME


def _agent_from_json(raw: object) -> RegistryAgent:
    if not isinstance(raw, dict):
        raise ValueError("Agent info must be a JSON object")
    missing = [k for k in ("name", "file") if k not in raw]
    if missing:
        raise ValueError(f"Missing required fields: {', '.join(missing)}")
    if not isinstance(raw["name"], str):
        raise ValueError("name field must be a string")
    if not isinstance(raw["file"], str):
        raise ValueError("file field must be a string")
    return RegistryAgent(name=raw["name"], file=raw["file"])


def _project_from_json(raw: object) -> RegistryProject:
    if not isinstance(raw, dict):
        raise ValueError("Project info must be a JSON object")
    for key in ("directory", "main_guide"):
        if key not in raw:
            raise ValueError(f"Missing required field: {key}")
        if not isinstance(raw[key], str):
            raise ValueError(f"{key} field must be a string")
    agents = raw.get("agents", [])
    if not isinstance(agents, list):
        raise ValueError("agents field must be a list")

    errors: list[str] = []
    parsed: list[RegistryAgent] = []
    for a in agents:
        try:
            parsed.append(_agent_from_json(a))
        except ValueError as e:
            errors.append(str(e))
    if errors:
        raise ValueError("; ".join(errors))

    updated_at = raw.get("updated_at", "")
    return RegistryProject(
        directory=raw["directory"],
        main_guide=raw["main_guide"],
        agents=parsed,
        updated_at=updated_at if isinstance(updated_at, str) else "",
    )


def registry_from_json(raw: object) -> Registry:
    """Build a Registry from decoded JSON; raises InvalidRegistryError listing every bad entry."""
    if not isinstance(raw, dict):
        raise InvalidRegistryError("Registry must be a JSON object")
    if "projects" not in raw:
        raise InvalidRegistryError("Missing required field: projects")
    if not isinstance(raw["projects"], list):
        raise InvalidRegistryError("Projects field must be a list")

    errors: list[str] = []
    projects: list[RegistryProject] = []
    for p in raw["projects"]:
        try:
            projects.append(_project_from_json(p))
        except ValueError as e:
            errors.append(str(e))
    if errors:
        raise InvalidRegistryError("; ".join(errors))
    return Registry(projects=projects)


def registry_to_json(registry: Registry) -> dict:
    return {
        "projects": [
            {
                "directory": p.directory,
                "main_guide": p.main_guide,
                "agents": [{"name": a.name, "file": a.file} for a in p.agents],
                "updated_at": p.updated_at,
            }
            for p in registry.projects
        ]
    }


def load_registry(path: Path) -> Registry:
    """Load the registry; a missing file is an empty registry."""
    try:
        content = path.read_bytes()
    except FileNotFoundError:
        return Registry()
    except OSError as e:
        raise RegistryError(f"System error: {e}") from e
    try:
        raw = orjson.loads(content)
    except orjson.JSONDecodeError as e:
        raise RegistryParseError(f"Parse error: {e}") from e
    return registry_from_json(raw)


def save_registry(registry: Registry, path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(orjson.dumps(registry_to_json(registry), option=orjson.OPT_INDENT_2))
    except OSError as e:
        raise RegistryWriteError(path, e.strerror or str(e)) from e


def add_or_update_project(registry: Registry, project: RegistryProject) -> Registry:
    """Return a registry with project first and any older entry for its directory dropped."""
    others = [p for p in registry.projects if p.directory != project.directory]
    return Registry(projects=[project, *others])


def validate_projects(registry: Registry) -> Registry:
    """Drop projects whose directory no longer holds a config file."""
    return Registry(projects=[p for p in registry.projects if p.has_valid_config])


def create_project_info(project: Project, config: AgentSyncConfig) -> RegistryProject:
    return RegistryProject(
        directory=str(project.root),
        main_guide=config.main_guide,
        agents=[
            RegistryAgent(name=n, file=get_agent_file(config, n)) for n in list_agents(config)
        ],
        updated_at=format_utc(utc_now()),
    )


def register_project(project: Project, config: AgentSyncConfig, path: Path) -> None:
    registry = load_registry(path)
    save_registry(add_or_update_project(registry, create_project_info(project, config)), path)
