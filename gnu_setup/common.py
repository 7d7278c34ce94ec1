"""
Common utilities shared across gnu_setup modules.
"""

from __future__ import annotations

import os
import sys


class SetupError(Exception):
    """
    Base exception for fatal setup errors.

    Attributes:
        message: Human-readable error message
        remediation: Suggested fix for the error
    """
    def __init__(self, message: str, remediation: str | None = None):
        self.message = message
        self.remediation = remediation
        super().__init__(message)


def is_truthy_env(name: str) -> bool:
    """
    Check whether an environment variable is set to a true-ish value.

    Args:
        name: Environment variable name

    Returns:
        True for "1", "true", "yes" or "on" (case-insensitive)
    """
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


def prepend_path(directories: list[str], path: str | None = None) -> str:
    """
    Build a PATH string with directories prepended.

    The first directory in the list ends up first in the result.
    Directories already present are moved to the front, not duplicated.

    Args:
        directories: Directories to place at the front
        path: Existing PATH (defaults to the process PATH)

    Returns:
        New PATH string
    """
    if path is None:
        path = os.environ.get("PATH", "")
    existing = [p for p in path.split(os.pathsep) if p]
    front = []
    for directory in directories:
        if directory not in front:
            front.append(directory)
    return os.pathsep.join(front + [p for p in existing if p not in front])


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log verbose message using structured logging.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    if verbose or is_truthy_env("GNU_SETUP_DEBUG"):
        try:
            from .logging_config import get_logger
            get_logger().debug(msg)
        except Exception:
            # Fallback to stderr if logging fails
            try:
                print(f"[gnu_setup] {msg}", file=sys.stderr)
            except Exception:
                pass
