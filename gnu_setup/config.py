"""
Configuration file parsing and management.

Supports YAML configuration files (JSON for *.json paths).
Merges configurations from multiple sources (custom → project → user → defaults).
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields
from typing import Any

import yaml

from .common import vlog


# Configuration file locations (in priority order)
CONFIG_LOCATIONS = [
    ".gnu-setup.yml",                                      # Project root (highest priority)
    ".gnu-setup.yaml",                                     # Alternative extension
    os.path.expanduser("~/.config/gnu-setup/config.yml"),  # User global
    os.path.expanduser("~/.config/gnu-setup/config.yaml"),
]


@dataclass(frozen=True)
class Preferences:
    """
    Preferences for installation and verification.

    Attributes:
        install_timeout_seconds: Timeout for a single `brew install`
        verify_timeout_seconds: Timeout for each `<tool> --version` call
        fresh_shell_check: Re-run checks inside a new login shell
    """
    install_timeout_seconds: int = 1800
    verify_timeout_seconds: int = 10
    fresh_shell_check: bool = True

    def __post_init__(self):
        for name in ("install_timeout_seconds", "verify_timeout_seconds"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Invalid {name}: {value!r}. Must be an integer")

        if not isinstance(self.fresh_shell_check, bool):
            raise ValueError(
                f"Invalid fresh_shell_check: {self.fresh_shell_check!r}. Must be true or false"
            )

        if self.install_timeout_seconds < 1 or self.install_timeout_seconds > 7200:
            raise ValueError(
                f"Invalid install_timeout_seconds: {self.install_timeout_seconds}. "
                "Must be between 1 and 7200"
            )

        if self.verify_timeout_seconds < 1 or self.verify_timeout_seconds > 120:
            raise ValueError(
                f"Invalid verify_timeout_seconds: {self.verify_timeout_seconds}. "
                "Must be between 1 and 120"
            )

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Preferences:
        """Create Preferences from dictionary."""
        return Preferences(
            install_timeout_seconds=data.get("install_timeout_seconds", 1800),
            verify_timeout_seconds=data.get("verify_timeout_seconds", 10),
            fresh_shell_check=data.get("fresh_shell_check", True),
        )


@dataclass(frozen=True)
class ShellPreferences:
    """
    Login shell handling.

    Attributes:
        register_login_shell: Add Homebrew bash to /etc/shells (needs sudo)
        change_default_shell: Switch the user's shell to Homebrew bash (chsh)
    """
    register_login_shell: bool = False
    change_default_shell: bool = False

    def __post_init__(self):
        for name in ("register_login_shell", "change_default_shell"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ValueError(f"Invalid {name}: {value!r}. Must be true or false")

    @staticmethod
    def from_dict(data: dict[str, Any]) -> ShellPreferences:
        """Create ShellPreferences from dictionary."""
        return ShellPreferences(
            register_login_shell=data.get("register_login_shell", False),
            change_default_shell=data.get("change_default_shell", False),
        )


_PREFERENCE_KEYS = tuple(f.name for f in fields(Preferences))
_SHELL_KEYS = tuple(f.name for f in fields(ShellPreferences))


@dataclass(frozen=True)
class Config:
    """
    Complete configuration for the GNU tools setup.

    Attributes:
        version: Config schema version
        skip_packages: Homebrew formulae to leave out of the install list
        preferences: Installation/verification preferences
        shell: Login shell preferences
        source: Path to the configuration file that was loaded
        explicit: Dotted keys set by the file (e.g. "shell.register_login_shell")
    """
    version: int = 1
    skip_packages: tuple[str, ...] = ()
    preferences: Preferences = field(default_factory=Preferences)
    shell: ShellPreferences = field(default_factory=ShellPreferences)
    source: str = ""
    explicit: frozenset[str] = field(default=frozenset(), compare=False)

    def __post_init__(self):
        if self.version != 1:
            raise ValueError(f"Unsupported config version: {self.version}. Expected version 1")

        for name in self.skip_packages:
            if not isinstance(name, str):
                raise ValueError(f"Invalid package name in skip list: {name!r}. Must be a string")

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> Config:
        """Create Config from dictionary."""
        packages_data = data.get("packages") or {}
        preferences_data = data.get("preferences") or {}
        shell_data = data.get("shell") or {}
        skip = packages_data.get("skip") or []
        if isinstance(skip, str):
            skip = [skip]

        return Config(
            version=data.get("version", 1),
            skip_packages=tuple(skip),
            preferences=Preferences.from_dict(preferences_data),
            shell=ShellPreferences.from_dict(shell_data),
            source=source,
            explicit=frozenset(
                [f"preferences.{key}" for key in preferences_data if key in _PREFERENCE_KEYS]
                + [f"shell.{key}" for key in shell_data if key in _SHELL_KEYS]
            ),
        )

    def merge_with(self, other: Config) -> Config:
        """
        Merge this config with another, preferring values from this config.

        A preference or shell key comes from this config when it set the
        key explicitly, otherwise from the other config when that one did,
        otherwise from this config. Skip lists are combined.

        Args:
            other: Other config to merge (lower priority)

        Returns:
            New merged Config object
        """
        def pick(section: str, key: str) -> Any:
            dotted = f"{section}.{key}"
            source = other if dotted in other.explicit and dotted not in self.explicit else self
            return getattr(getattr(source, section), key)

        merged_preferences = Preferences(**{key: pick("preferences", key) for key in _PREFERENCE_KEYS})
        merged_shell = ShellPreferences(**{key: pick("shell", key) for key in _SHELL_KEYS})

        return Config(
            version=self.version,
            skip_packages=tuple(dict.fromkeys(self.skip_packages + other.skip_packages)),
            preferences=merged_preferences,
            shell=merged_shell,
            source=self.source or other.source,
            explicit=self.explicit | other.explicit,
        )


def _load_yaml(file_path: str) -> dict[str, Any] | None:
    """
    Load YAML configuration file.

    Returns:
        Parsed configuration dictionary, or None if the file is unreadable or invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return None


def _load_json(file_path: str) -> dict[str, Any] | None:
    """
    Load JSON configuration file.

    Returns:
        Parsed configuration dictionary, or None if file invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, json.JSONDecodeError):
        return None


def load_config_file(file_path: str, verbose: bool = False) -> Config | None:
    """
    Load configuration from a single file.

    Args:
        file_path: Path to configuration file (.yml, .yaml or .json)
        verbose: Enable verbose logging

    Returns:
        Config object, or None if file cannot be loaded
    """
    if not os.path.exists(file_path):
        return None

    vlog(f"Loading config from: {file_path}", verbose)

    if file_path.endswith(".json"):
        data = _load_json(file_path)
    else:
        data = _load_yaml(file_path)

    if data is None:
        vlog(f"Invalid config file: {file_path}", verbose)
        return None

    try:
        config = Config.from_dict(data, source=file_path)
        vlog(f"Loaded config successfully: {file_path}", verbose)
        return config
    except (ValueError, TypeError, AttributeError) as e:
        vlog(f"Config validation failed for {file_path}: {e}", verbose)
        return None


def load_config(
    custom_path: str | None = None,
    verbose: bool = False,
) -> Config:
    """
    Load and merge configuration from all sources.

    Configuration precedence (highest to lowest):
    1. Custom path (if provided)
    2. Project .gnu-setup.yml
    3. User ~/.config/gnu-setup/config.yml
    4. Default configuration

    Each preference and shell key comes from the highest-priority file
    that sets it, so a project file can switch off what the user file
    switched on. Skip lists from all files are combined.

    Args:
        custom_path: Optional path to custom configuration file
        verbose: Enable verbose logging

    Returns:
        Merged Config object (never None, returns defaults if no config found)

    Raises:
        ValueError: If custom_path is provided but file cannot be loaded
    """
    configs: list[Config] = []

    if custom_path:
        config = load_config_file(custom_path, verbose)
        if config is None:
            raise ValueError(f"Could not load config from specified path: {custom_path}")
        configs.append(config)
        vlog(f"Using custom config: {custom_path}", verbose)

    for location in CONFIG_LOCATIONS:
        config = load_config_file(location, verbose)
        if config is not None:
            configs.append(config)
            vlog(f"Found config at: {location}", verbose)

    if not configs:
        vlog("No config files found, using defaults", verbose)
        return Config()

    # First config has highest priority
    merged = configs[0]
    for config in configs[1:]:
        merged = merged.merge_with(config)

    vlog(f"Merged {len(configs)} config files", verbose)
    return merged


def validate_config(config: Config) -> list[str]:
    """
    Validate configuration and return list of warnings.

    Args:
        config: Config object to validate

    Returns:
        List of validation warning messages (empty if valid)
    """
    from .tools import PACKAGE_MAP

    warnings = []

    for name in config.skip_packages:
        if name not in PACKAGE_MAP:
            warnings.append(f"Unknown package in skip list: {name}")

    if config.shell.change_default_shell and not config.shell.register_login_shell:
        warnings.append(
            "change_default_shell without register_login_shell: chsh refuses shells not in /etc/shells"
        )

    return warnings
