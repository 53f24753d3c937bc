from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from agent_sync.core.config import CONFIG_FILENAME, ConfigError, create_default_config


class ProjectError(Exception):
    pass


class NotInProjectError(ProjectError):
    def __init__(self) -> None:
        super().__init__(
            "Not in an agent-sync project directory\n"
            "\tTry `agent-sync init` to initialize project"
        )


@dataclass
class Project:
    root: Path
    config_path: Path


def is_project_dir(directory: Path) -> bool:
    return (directory / CONFIG_FILENAME).is_file()


def find_project_root(start: Path) -> Path | None:
    """Walk from start up to the filesystem root; return the first directory holding a config file."""
    current = start.absolute()
    for candidate in (current, *current.parents):
        if is_project_dir(candidate):
            return candidate
    return None


def detect_project(cwd: Path | None = None) -> Project:
    """Locate the enclosing project of cwd (default: the process working directory)."""
    if cwd is None:
        try:
            cwd = Path.cwd()
        except OSError as e:
            raise ProjectError(f"System error: {e}") from e
    root = find_project_root(cwd)
    if root is None:
        raise NotInProjectError()
    return Project(root=root, config_path=root / CONFIG_FILENAME)


def create_project_config(directory: Path) -> Project:
    """Write the default config into directory. Refuses to overwrite an existing one."""
    config_path = directory / CONFIG_FILENAME
    if config_path.exists():
        raise ProjectError(f"Config file already exists: {config_path}")
    try:
        create_default_config(config_path)
    except ConfigError as e:
        raise ProjectError(str(e)) from e
    return Project(root=directory.absolute(), config_path=config_path)
