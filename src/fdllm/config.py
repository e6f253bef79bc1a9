"""
Config file handling: location, first-run default, parsing and selection.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .core import ConfigFileError, UnknownProfileError, info

DEFAULT_CONFIG = """\
# Default configuration (used when no profile is specified)
files = ["~/Desktop/my_test_file.txt"]
directories = ["~/example_dir"]

[project]
path = ""
tree_level = 3

# Example profile configurations
[profiles.project1]
files = ["~/project1/main.rs"]
directories = ["~/project1/src"]
# gitignore-style patterns, relative to each directory
exclude = ["*.lock", "fixtures/"]

[profiles.project1.project]
path = "~/project1"
tree_level = 2

[profiles.project2]
files = ["~/project2/app.js"]
directories = ["~/project2/lib"]

[profiles.project2.project]
path = "~/project2"
tree_level = 3
"""


@dataclass(frozen=True)
class Project:
    path: str
    tree_level: Optional[int] = None


@dataclass(frozen=True)
class Profile:
    name: str
    files: List[str] = field(default_factory=list)
    directories: List[str] = field(default_factory=list)
    project: Optional[Project] = None
    exclude: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class LegacySelection:
    pass


@dataclass(frozen=True)
class ProfileSelection:
    name: str


Selection = Union[LegacySelection, ProfileSelection]


@dataclass(frozen=True)
class Config:
    default: Profile
    profiles: Dict[str, Profile] = field(default_factory=dict)

    def select(self, selection: Selection) -> Profile:
        if isinstance(selection, LegacySelection):
            return self.default
        if not self.profiles:
            raise UnknownProfileError(
                f"Profile '{selection.name}' not found: no profiles defined in config"
            )
        try:
            return self.profiles[selection.name]
        except KeyError:
            available = ", ".join(sorted(self.profiles))
            raise UnknownProfileError(
                f"Profile '{selection.name}' not found in config (available: {available})"
            ) from None


def selection_for(profile_name: Optional[str]) -> Selection:
    if profile_name is None:
        return LegacySelection()
    return ProfileSelection(profile_name)


def default_config_path() -> Path:
    home = os.environ.get("HOME")
    if not home:
        raise ConfigFileError("Failed to get $HOME directory")
    return Path(home) / "fdllm" / "config.toml"


def ensure_config(config_path: Path) -> bool:
    """Write ``DEFAULT_CONFIG`` to *config_path* unless it already exists."""
    if config_path.exists():
        return False
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(DEFAULT_CONFIG, encoding="utf-8")
    except OSError as e:
        raise ConfigFileError(f"Could not write default config '{config_path}': {e}")
    info(f"Default config.toml created at {config_path}")
    return True


# Parsing
def _str_list(table: Dict[str, Any], key: str, where: str) -> List[str]:
    value = table.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigFileError(f"'{where}{key}' must be a list of strings")
    return list(value)


def _parse_project(table: Dict[str, Any], where: str) -> Optional[Project]:
    raw = table.get("project")
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ConfigFileError(f"'{where}project' must be a table")

    path = raw.get("path")
    if not isinstance(path, str):
        raise ConfigFileError(f"'{where}project.path' must be a string")

    level = raw.get("tree_level")
    if level is not None and (
        isinstance(level, bool) or not isinstance(level, int) or level < 0
    ):
        raise ConfigFileError(f"'{where}project.tree_level' must be a non-negative integer")
    return Project(path=path, tree_level=level)


def _parse_profile(name: str, table: Dict[str, Any], where: str) -> Profile:
    return Profile(
        name=name,
        files=_str_list(table, "files", where),
        directories=_str_list(table, "directories", where),
        project=_parse_project(table, where),
        exclude=_str_list(table, "exclude", where),
    )


def parse_config(data: Dict[str, Any]) -> Config:
    raw_profiles = data.get("profiles", {})
    if not isinstance(raw_profiles, dict):
        raise ConfigFileError("'profiles' must be a table")

    profiles: Dict[str, Profile] = {}
    for name, table in raw_profiles.items():
        if not isinstance(table, dict):
            raise ConfigFileError(f"'profiles.{name}' must be a table")
        profiles[name] = _parse_profile(name, table, f"profiles.{name}.")

    return Config(default=_parse_profile("default", data, ""), profiles=profiles)


def load_config(config_path: Path) -> Config:
    try:
        with config_path.open("rb") as fh:
            data = tomllib.load(fh)
    except OSError as e:
        raise ConfigFileError(f"Failed to read config file '{config_path}': {e}")
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise ConfigFileError(f"Failed to parse config file '{config_path}'\nError: {e}")

    try:
        return parse_config(data)
    except ConfigFileError as e:
        raise ConfigFileError(f"Invalid config file '{config_path}': {e}") from None
