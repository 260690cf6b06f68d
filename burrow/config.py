"""
Configuration management for the directory database.

The configuration is stored as a TOML file in the data directory, next
to the database. Environment variables override individual settings.
"""

import fnmatch
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

import tomli_w


CONFIG_FILENAME = "burrow.toml"
CONFIG_VERSION = 1

DEFAULT_MAX_AGE = 10_000.0

ENV_DATA_DIR = "BURROW_DATA_DIR"
ENV_MAX_AGE = "BURROW_MAXAGE"
ENV_EXCLUDE_DIRS = "BURROW_EXCLUDE_DIRS"
ENV_RESOLVE_SYMLINKS = "BURROW_RESOLVE_SYMLINKS"


@dataclass
class StoreConfig:
    """Complete database configuration."""
    data_dir: Path
    version: int = CONFIG_VERSION

    # Total rank above which the database is aged
    max_age: float = DEFAULT_MAX_AGE
    # Glob patterns for directories that are never recorded
    exclude: list[str] = field(default_factory=list)
    resolve_symlinks: bool = False

    @property
    def config_path(self) -> Path:
        """Path to the TOML config file."""
        return self.data_dir / CONFIG_FILENAME

    def exists(self) -> bool:
        """Check if config file exists."""
        return self.config_path.exists()

    def is_excluded(self, path: str) -> bool:
        """Whether `path` matches any exclude pattern."""
        return any(fnmatch.fnmatchcase(path, pattern) for pattern in self.exclude)


def get_data_dir() -> Path:
    """
    Resolve the data directory.

    Priority:
    1. BURROW_DATA_DIR environment variable
    2. $XDG_DATA_HOME/burrow
    3. ~/.local/share/burrow
    """
    override = os.environ.get(ENV_DATA_DIR)
    if override:
        return Path(override).expanduser()
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / "burrow"
    return Path.home() / ".local" / "share" / "burrow"


def _validate_max_age(value: float) -> float:
    if not value > 0:
        raise ValueError(f"max_age must be positive, got {value}")
    return value


def load_config(data_dir: Path) -> StoreConfig:
    """
    Load configuration from a data directory.

    Raises:
        FileNotFoundError: If config doesn't exist
        ValueError: If config is invalid
    """
    config_path = data_dir / CONFIG_FILENAME

    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    section = data.get("database", {})

    # Validate version
    version = section.get("version", 1)
    if not isinstance(version, int) or isinstance(version, bool):
        raise ValueError(f"Config version must be an integer, got {version!r}")
    if version > CONFIG_VERSION:
        raise ValueError(f"Config version {version} is newer than supported ({CONFIG_VERSION})")

    return StoreConfig(
        data_dir=data_dir,
        version=version,
        max_age=_validate_max_age(float(section.get("max_age", DEFAULT_MAX_AGE))),
        exclude=list(section.get("exclude", [])),
        resolve_symlinks=bool(section.get("resolve_symlinks", False)),
    )


def save_config(config: StoreConfig) -> None:
    """
    Save configuration to the data directory.

    Creates the directory if it doesn't exist.
    """
    config.data_dir.mkdir(parents=True, exist_ok=True)

    data = {
        "database": {
            "version": config.version,
            "max_age": config.max_age,
            "exclude": config.exclude,
            "resolve_symlinks": config.resolve_symlinks,
        },
    }

    with open(config.config_path, "wb") as f:
        tomli_w.dump(data, f)


def apply_env_overrides(config: StoreConfig) -> StoreConfig:
    """
    Apply environment variable overrides on top of a loaded config.

    BURROW_MAXAGE replaces max_age, BURROW_EXCLUDE_DIRS replaces the
    exclude list (os.pathsep-separated), BURROW_RESOLVE_SYMLINKS=1
    turns on symlink resolution.

    Raises:
        ValueError: If BURROW_MAXAGE isn't a positive number
    """
    max_age = os.environ.get(ENV_MAX_AGE)
    if max_age:
        try:
            config.max_age = _validate_max_age(float(max_age))
        except ValueError as e:
            raise ValueError(f"Invalid {ENV_MAX_AGE}: {max_age!r}") from e

    exclude = os.environ.get(ENV_EXCLUDE_DIRS)
    if exclude is not None:
        config.exclude = [p for p in exclude.split(os.pathsep) if p]

    resolve = os.environ.get(ENV_RESOLVE_SYMLINKS)
    if resolve is not None:
        config.resolve_symlinks = resolve == "1"

    return config


def load_or_create_config(data_dir: Path) -> StoreConfig:
    """
    Load existing config or create a new one with defaults.

    This is the main entry point for config management.
    """
    config_path = data_dir / CONFIG_FILENAME

    if config_path.exists():
        config = load_config(data_dir)
    else:
        config = StoreConfig(data_dir=data_dir)
        save_config(config)
    return apply_env_overrides(config)
